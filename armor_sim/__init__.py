"""armor_sim: Monte-Carlo estimate of how well a weapon attack defeats armor."""

from importlib import import_module
from typing import Any

__version__ = "0.1.0"
__all__ = [
    "Attack",
    "Material",
    "Weapon",
    "InputValidationError",
    "ComputationError",
    "PenetrationResolver",
    "PenetrationResult",
    "attack_score",
    "compute_attack_score",
    "score_attacks",
    "score_query",
    "fdm",
    "diffusion_step",
    "fdm_steps",
    "__version__",
]

_EXPORTS = {
    "Attack": ("models", "Attack"),
    "Material": ("models", "Material"),
    "Weapon": ("models", "Weapon"),
    "InputValidationError": ("validators", "InputValidationError"),
    "ComputationError": ("simulators.penetration", "ComputationError"),
    "PenetrationResolver": ("simulators.penetration", "PenetrationResolver"),
    "PenetrationResult": ("simulators.penetration", "PenetrationResult"),
    "attack_score": ("simulators.penetration", "attack_score"),
    "compute_attack_score": ("simulators.penetration", "compute_attack_score"),
    "score_attacks": ("simulators.penetration", "score_attacks"),
    "score_query": ("simulators.penetration", "score_query"),
    "fdm": ("simulators.diffusion", "fdm"),
    "diffusion_step": ("simulators.diffusion", "diffusion_step"),
    "fdm_steps": ("simulators.diffusion", "fdm_steps"),
}


def __getattr__(name: str) -> Any:
    if name in _EXPORTS:
        module_name, attr_name = _EXPORTS[name]
        module = import_module(f".{module_name}", __name__)
        attr = getattr(module, attr_name)
        globals()[name] = attr
        return attr
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


def __dir__() -> list[str]:
    return sorted(set(list(globals().keys()) + list(__all__)))
