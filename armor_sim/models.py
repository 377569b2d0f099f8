"""Immutable value records consumed by the penetration estimator.

The records mirror the JSON-shaped objects supplied by the hosting
application. ``to_dict`` emits the camelCase keys used on the wire;
``from_dict`` accepts camelCase or snake_case keys and runs structural
validation (see :mod:`armor_sim.validators`).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Tuple

# snake_case attribute -> wire key
MATERIAL_KEYS: Dict[str, str] = {
    "name": "name",
    "solid_density": "solidDensity",
    "impact_yield": "impactYield",
    "impact_fracture": "impactFracture",
    "impact_strain_at_yield": "impactStrainAtYield",
    "shear_yield": "shearYield",
    "shear_fracture": "shearFracture",
    "shear_strain_at_yield": "shearStrainAtYield",
    "max_edge": "maxEdge",
    "armor": "armor",
}


@dataclass(frozen=True)
class Material:
    """Physical properties of a substance.

    Used once as the weapon material and once as the armor material per
    estimator call. ``armor`` is informational only.
    """

    solid_density: float
    impact_yield: float
    impact_fracture: float
    impact_strain_at_yield: float
    shear_yield: float
    shear_fracture: float
    shear_strain_at_yield: float
    max_edge: float
    name: str = ""
    armor: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Material":
        from .validators import validate_material

        return validate_material(data)

    def to_dict(self) -> Dict[str, Any]:
        return {wire: getattr(self, attr) for attr, wire in MATERIAL_KEYS.items()}


@dataclass(frozen=True)
class Attack:
    """One strike descriptor: cutting (``edged``) or blunt."""

    edged: bool
    velocity: float
    area: float
    name: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Attack":
        from .validators import validate_attack

        return validate_attack(data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "edged": self.edged,
            "velocity": self.velocity,
            "area": self.area,
        }


@dataclass(frozen=True)
class Weapon:
    size: float
    name: str = ""
    attacks: Tuple[Attack, ...] = field(default_factory=tuple)

    def attack(self, name: str) -> Attack:
        for atk in self.attacks:
            if atk.name == name:
                return atk
        raise KeyError(f"Weapon {self.name!r} has no attack named {name!r}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Weapon":
        from .validators import validate_weapon

        return validate_weapon(data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "size": self.size,
            "attacks": [a.to_dict() for a in self.attacks],
        }


__all__ = ["Attack", "Material", "Weapon", "MATERIAL_KEYS"]
