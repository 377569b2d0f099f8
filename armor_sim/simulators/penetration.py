"""Monte-Carlo estimate of how often an attack defeats a suit of armor.

:func:`attack_score` sweeps a weighted grid of armor and weapon quality
tiers (18 x 12 cells), draws fresh body sizes and strength for every cell,
and evaluates the cut / dent / fracture decision tree at three contact
locations. The mean trial score is reported on a 0-10 scale with one
decimal.

The estimator is non-deterministic on purpose: unless a ``seed`` or an
``rng`` is passed, every call draws from a fresh OS-seeded generator and
repeated calls only agree statistically.
"""
from __future__ import annotations

import logging
import math
import random
import statistics
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..data.constants import (
    ARMOR_QUALITY_WEIGHTS,
    BASE_BODY_SIZE,
    BLUNTED_FRACTURE_SCORE,
    CONTACT_AREA_FRACTIONS,
    DENT_SCALE,
    IMPACT_SCALE,
    MOMENTUM_SCALE,
    PARTIAL_CREDIT_SCALE,
    QUALITY_ARMOR_MULTS,
    QUALITY_WEAPON_MULTS,
    SHARPNESS_SCALE,
    STRENGTH_BUCKETS,
    WEAPON_QUALITY_WEIGHTS,
)
from ..models import Attack, Material, Weapon
from ..validators import (
    require_keys,
    validate_attack,
    validate_material,
    validate_runs,
    validate_seed,
    validate_weapon,
)
from .sampling import body_size, bucket_random, iter_weighted, total_weight

logger = logging.getLogger(__name__)

TRIALS_PER_CALL = (
    total_weight(ARMOR_QUALITY_WEIGHTS)
    * total_weight(WEAPON_QUALITY_WEIGHTS)
    * len(CONTACT_AREA_FRACTIONS)
)

# Outcome kinds
CUT = "cut"
FRACTURE = "fracture"
BLUNTED_FRACTURE = "blunted_fracture"
NO_DENT = "no_dent"
BRUISE = "bruise"


class ComputationError(ArithmeticError):
    """A divisor was zero or a derived value was not finite."""

    def __init__(self, quantity: str, message: str):
        self.quantity = quantity
        super().__init__(message)

    def to_dict(self) -> Dict[str, str]:
        return {"quantity": self.quantity, "message": str(self)}


def _finite(value: float, quantity: str) -> float:
    if not math.isfinite(value):
        raise ComputationError(quantity, f"{quantity} is not finite ({value!r})")
    return value


def _divide(num: float, den: float, quantity: str) -> float:
    if den == 0:
        raise ComputationError(quantity, f"{quantity}: division by zero")
    return _finite(num / den, quantity)


def round_score(mean: float) -> float:
    """Scale a [0, 1] mean to 0-10 with one decimal, halves away from zero."""
    scaled = 100.0 * mean
    return math.copysign(math.floor(abs(scaled) + 0.5), scaled) / 10.0


# =============================
# Result
# =============================


@dataclass
class PenetrationResult:
    score: float
    mean: float
    trials: int
    outcomes: Counter = field(default_factory=Counter)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "mean": self.mean,
            "trials": self.trials,
            "outcomes": dict(self.outcomes),
        }


# =============================
# Core estimator
# =============================


class PenetrationResolver:
    """Runs the full trial grid for one (attack, materials, weapon) tuple.

    Records must already be validated; use :meth:`from_records` for raw
    mappings.
    """

    def __init__(
        self,
        attack: Attack,
        weapon_mat: Material,
        armor_mat: Material,
        weapon: Weapon,
        rng: Optional[random.Random] = None,
    ):
        self.attack = attack
        self.weapon_mat = weapon_mat
        self.armor_mat = armor_mat
        self.weapon = weapon
        self.rng = rng if rng is not None else random.Random()

        self.weapon_weight = _finite(weapon.size * weapon_mat.solid_density, "weapon_weight")
        if self.weapon_weight == 0:
            raise ComputationError("weapon_weight", "weapon_weight is zero; momentum divides by it")
        self.shear_yield_ratio = _divide(
            armor_mat.shear_yield, weapon_mat.shear_yield, "shear_yield_ratio"
        )
        self.shear_fracture_ratio = _divide(
            armor_mat.shear_fracture, weapon_mat.shear_fracture, "shear_fracture_ratio"
        )
        self.sharpness = weapon_mat.max_edge / SHARPNESS_SCALE
        self.dent_resistance = _finite(
            2.0 * weapon.size * weapon_mat.impact_yield / DENT_SCALE, "dent_resistance"
        )
        self.fracture_stress = _finite(
            2.0 * armor_mat.impact_fracture / IMPACT_SCALE
            - armor_mat.impact_yield / IMPACT_SCALE,
            "fracture_threshold",
        )
        strain = armor_mat.shear_strain_at_yield if attack.edged else armor_mat.impact_strain_at_yield
        self.bruise_score = strain / PARTIAL_CREDIT_SCALE

    @classmethod
    def from_records(
        cls,
        attack: Any,
        weapon_mat: Any,
        armor_mat: Any,
        weapon: Any,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
    ) -> "PenetrationResolver":
        atk = validate_attack(attack, record="attack")
        wmat = validate_material(weapon_mat, record="weapon_material")
        amat = validate_material(armor_mat, record="armor_material")
        wpn = validate_weapon(weapon, record="weapon")
        if rng is None:
            rng = random.Random(seed)
        return cls(atk, wmat, amat, wpn, rng)

    # ----- Random draws -----

    def momentum(self, size: float, strength: float) -> float:
        # BASE_BODY_SIZE rather than the drawn ``size`` in the numerator is
        # the observed behaviour of the formula; see DESIGN.md.
        denom = MOMENTUM_SCALE * (1.0 + _divide(size, self.weapon_weight, "momentum"))
        return _divide(BASE_BODY_SIZE * strength * self.attack.velocity, denom, "momentum")

    def _draw_cell(self) -> Tuple[float, float]:
        size = body_size(self.rng)
        enemy_size = body_size(self.rng)
        strength = bucket_random(STRENGTH_BUCKETS, self.rng)
        return self.momentum(size, strength), enemy_size

    # ----- Decision tree -----

    def trial(self, momentum: float, area: float, qa: float, qw: float) -> Tuple[str, float]:
        """Evaluate one contact: returns ``(outcome kind, score)``."""
        blunted = False
        if self.attack.edged:
            edge_factor = _divide(10.0 + 2.0 * qa, qw * self.sharpness, "sharpness")
            cut_threshold = _finite(
                self.shear_yield_ratio + (area + 1.0) * self.shear_fracture_ratio * edge_factor,
                "cut_threshold",
            )
            if momentum >= cut_threshold:
                return CUT, 1.0
            blunted = True

        if self.dent_resistance >= area * self.armor_mat.solid_density:
            return NO_DENT, 0.0

        fracture_threshold = _finite(
            self.fracture_stress * (2.0 + 0.4 * qa) * area, "fracture_threshold"
        )
        if momentum >= fracture_threshold:
            if blunted:
                return BLUNTED_FRACTURE, BLUNTED_FRACTURE_SCORE
            return FRACTURE, 1.0
        return BRUISE, self.bruise_score

    def resolve(self) -> PenetrationResult:
        outcomes: Counter = Counter()
        total = 0.0
        trials = 0
        for a in iter_weighted(ARMOR_QUALITY_WEIGHTS):
            qa = QUALITY_ARMOR_MULTS[a]
            for w in iter_weighted(WEAPON_QUALITY_WEIGHTS):
                qw = QUALITY_WEAPON_MULTS[w]
                momentum, enemy_size = self._draw_cell()
                for fraction in CONTACT_AREA_FRACTIONS:
                    area = min(self.attack.area, enemy_size * fraction)
                    kind, score = self.trial(momentum, area, qa, qw)
                    outcomes[kind] += 1
                    total += score
                    trials += 1
        mean = _finite(total / trials, "trial_score")
        result = PenetrationResult(
            score=round_score(mean), mean=mean, trials=trials, outcomes=outcomes
        )
        logger.debug(
            "attack=%s weapon=%s %s vs %s -> %.1f %s",
            self.attack.name,
            self.weapon.name,
            self.weapon_mat.name,
            self.armor_mat.name,
            result.score,
            dict(outcomes),
        )
        return result


# =============================
# Public entry points
# =============================


def attack_score(
    attack: Any,
    weapon_material: Any,
    armor_material: Any,
    weapon: Any,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None,
) -> float:
    """Effectiveness score in [0, 10] of ``attack`` against ``armor_material``.

    Records may be model instances or JSON-shaped mappings. Raises
    :class:`~armor_sim.validators.InputValidationError` before any trial
    runs when a record is malformed, and :class:`ComputationError` when a
    divisor is zero or a value stops being finite.
    """
    resolver = PenetrationResolver.from_records(
        attack, weapon_material, armor_material, weapon, rng=rng, seed=seed
    )
    return resolver.resolve().score


compute_attack_score = attack_score


def score_attacks(
    weapon: Any,
    weapon_material: Any,
    armor_material: Any,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None,
) -> Dict[str, float]:
    """Score every attack a weapon carries, keyed by attack name."""
    wpn = validate_weapon(weapon, record="weapon")
    wmat = validate_material(weapon_material, record="weapon_material")
    amat = validate_material(armor_material, record="armor_material")
    if rng is None:
        rng = random.Random(seed)
    scores: Dict[str, float] = {}
    for atk in wpn.attacks:
        scores[atk.name] = PenetrationResolver(atk, wmat, amat, wpn, rng).resolve().score
    return scores


def summarize(scores: List[float]) -> Dict[str, Any]:
    return {
        "runs": len(scores),
        "mean": statistics.fmean(scores),
        "stdev": statistics.stdev(scores) if len(scores) > 1 else 0.0,
        "min": min(scores),
        "max": max(scores),
        "scores": list(scores),
    }


def score_query(query: Mapping[str, Any]) -> Dict[str, Any]:
    """Dict-in / dict-out wrapper used by the CLI and the HTTP API.

    ``query`` holds ``attack``, ``weapon_material``, ``armor_material`` and
    ``weapon`` records plus optional ``runs`` (default 1) and ``seed``.
    """
    require_keys(query, ["attack", "weapon_material", "armor_material", "weapon"])
    runs = validate_runs(query.get("runs", 1))
    seed = validate_seed(query.get("seed"))
    resolver = PenetrationResolver.from_records(
        query["attack"],
        query["weapon_material"],
        query["armor_material"],
        query["weapon"],
        seed=seed,
    )
    scores = [resolver.resolve().score for _ in range(runs)]
    out = summarize(scores)
    out["score"] = scores[-1] if runs == 1 else round(out["mean"], 1)
    return out


__all__ = [
    "ComputationError",
    "PenetrationResolver",
    "PenetrationResult",
    "TRIALS_PER_CALL",
    "attack_score",
    "compute_attack_score",
    "round_score",
    "score_attacks",
    "score_query",
    "summarize",
]
