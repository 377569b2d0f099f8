"""Structural validation of caller-supplied records.

Records arrive as JSON-shaped mappings (or as :mod:`armor_sim.models`
instances). Every numeric field must be present and a finite number;
booleans and numeric strings are rejected rather than coerced.
"""
from __future__ import annotations

from dataclasses import is_dataclass
from typing import Annotated, Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError

from .models import Attack, Material, Weapon

class InputValidationError(ValueError):
    """A record is missing a field, has a non-numeric value or is malformed."""

    def __init__(self, record: str, errors: List[Dict[str, str]]):
        self.record = record
        self.errors = errors
        detail = "; ".join(f"{e['field'] or '<root>'}: {e['message']}" for e in errors[:5])
        super().__init__(f"Invalid {record}: {detail}")

    def to_dict(self) -> Dict[str, Any]:
        return {"record": self.record, "errors": list(self.errors)}


def _reject_bool(v: Any) -> Any:
    if isinstance(v, bool):
        raise ValueError("expected a number, got a boolean")
    return v


FiniteFloat = Annotated[
    float, BeforeValidator(_reject_bool), Field(strict=True, allow_inf_nan=False)
]


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class MaterialSchema(_Record):
    name: str = ""
    solid_density: FiniteFloat = Field(alias="solidDensity")
    impact_yield: FiniteFloat = Field(alias="impactYield")
    impact_fracture: FiniteFloat = Field(alias="impactFracture")
    impact_strain_at_yield: FiniteFloat = Field(alias="impactStrainAtYield")
    shear_yield: FiniteFloat = Field(alias="shearYield")
    shear_fracture: FiniteFloat = Field(alias="shearFracture")
    shear_strain_at_yield: FiniteFloat = Field(alias="shearStrainAtYield")
    max_edge: FiniteFloat = Field(alias="maxEdge")
    armor: bool = Field(default=False, strict=True)

    def to_model(self) -> Material:
        return Material(**self.model_dump())


class AttackSchema(_Record):
    name: str = ""
    edged: bool = Field(strict=True)
    velocity: FiniteFloat
    area: FiniteFloat

    def to_model(self) -> Attack:
        return Attack(**self.model_dump())


class WeaponSchema(_Record):
    name: str = ""
    size: FiniteFloat
    attacks: List[AttackSchema] = Field(default_factory=list)

    def to_model(self) -> Weapon:
        return Weapon(
            name=self.name,
            size=self.size,
            attacks=tuple(a.to_model() for a in self.attacks),
        )


def _as_mapping(data: Any) -> Any:
    # Model instances go through the same checks as raw mappings.
    if is_dataclass(data) and hasattr(data, "to_dict"):
        return data.to_dict()
    return data


def _format_errors(exc: ValidationError) -> List[Dict[str, str]]:
    out: List[Dict[str, str]] = []
    for err in exc.errors():
        out.append({
            "field": ".".join(str(p) for p in err.get("loc", ())),
            "message": str(err.get("msg", "")),
            "type": str(err.get("type", "")),
        })
    return out


def _validate(schema: type, data: Any, record: str):
    try:
        return schema.model_validate(_as_mapping(data))
    except ValidationError as exc:
        raise InputValidationError(record, _format_errors(exc)) from exc


def validate_material(data: Any, record: str = "material") -> Material:
    return _validate(MaterialSchema, data, record).to_model()


def validate_attack(data: Any, record: str = "attack") -> Attack:
    return _validate(AttackSchema, data, record).to_model()


def validate_weapon(data: Any, record: str = "weapon") -> Weapon:
    return _validate(WeaponSchema, data, record).to_model()


def validate_runs(runs: Any, record: str = "query") -> int:
    """Repeat counts must be positive integers (``True`` is not a count)."""
    if isinstance(runs, bool) or not isinstance(runs, int) or runs < 1:
        raise InputValidationError(
            record,
            [{"field": "runs", "message": "must be an integer >= 1", "type": "int_type"}],
        )
    return runs


def validate_seed(seed: Any, record: str = "query") -> Optional[int]:
    if seed is None:
        return None
    if isinstance(seed, bool) or not isinstance(seed, int):
        raise InputValidationError(
            record,
            [{"field": "seed", "message": "must be an integer or null", "type": "int_type"}],
        )
    return seed


def require_keys(query: Mapping[str, Any], keys: List[str], record: str = "query") -> None:
    if not isinstance(query, Mapping):
        raise InputValidationError(
            record, [{"field": "", "message": "expected a mapping", "type": "dict_type"}]
        )
    missing = [k for k in keys if k not in query]
    if missing:
        raise InputValidationError(
            record,
            [{"field": k, "message": "Field required", "type": "missing"} for k in missing],
        )


__all__ = [
    "AttackSchema",
    "InputValidationError",
    "MaterialSchema",
    "WeaponSchema",
    "require_keys",
    "validate_attack",
    "validate_material",
    "validate_runs",
    "validate_seed",
    "validate_weapon",
]
