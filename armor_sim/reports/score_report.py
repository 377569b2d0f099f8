from __future__ import annotations
from dataclasses import dataclass, asdict, field
from typing import Any, Dict, List, Mapping, Optional
from datetime import datetime, timezone
import json
import statistics


def _name_of(record: Any) -> str:
    if isinstance(record, Mapping):
        return str(record.get("name", "") or "?")
    return str(getattr(record, "name", "") or "?")


@dataclass
class ScoreReport:
    timestamp: str
    attack: str
    weapon: str
    weapon_material: str
    armor_material: str
    runs: int
    seed: Optional[int]
    mean: float
    stdev: float
    min: float
    max: float
    scores: List[float] = field(default_factory=list)

    def to_json(self) -> str:
        return json.dumps(asdict(self), indent=2, sort_keys=False)

    def to_markdown(self) -> str:
        lines = []
        lines.append(f"# Attack Score Report ({self.attack})")
        lines.append(f"- **Timestamp:** {self.timestamp}")
        lines.append(f"- **Weapon:** {self.weapon} ({self.weapon_material})  |  **Armor:** {self.armor_material}")
        lines.append(f"- **Runs:** {self.runs}  |  **Seed:** {self.seed if self.seed is not None else 'entropy'}")
        lines.append("\n## Score")
        lines.append(f"- mean: {self.mean:.2f} | stdev: {self.stdev:.2f} | min: {self.min:.1f} | max: {self.max:.1f}")
        if len(self.scores) > 1:
            counts: Dict[float, int] = {}
            for s in self.scores:
                counts[s] = counts.get(s, 0) + 1
            lines.append("\n## Distribution")
            for s in sorted(counts):
                lines.append(f"- {s:.1f}: {counts[s]}")
        return "\n".join(lines)


def build_score_report(
    query: Mapping[str, Any],
    scores: List[float],
    seed: Optional[int] = None,
) -> ScoreReport:
    if not scores:
        raise ValueError("build_score_report needs at least one score")
    timestamp = datetime.now(timezone.utc).isoformat(timespec="seconds")
    return ScoreReport(
        timestamp=timestamp,
        attack=_name_of(query.get("attack")),
        weapon=_name_of(query.get("weapon")),
        weapon_material=_name_of(query.get("weapon_material")),
        armor_material=_name_of(query.get("armor_material")),
        runs=len(scores),
        seed=seed,
        mean=statistics.fmean(scores),
        stdev=statistics.stdev(scores) if len(scores) > 1 else 0.0,
        min=min(scores),
        max=max(scores),
        scores=list(scores),
    )

__all__ = ["ScoreReport", "build_score_report"]
