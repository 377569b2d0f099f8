from __future__ import annotations
from typing import Any, Dict, Iterable, Optional
import copy, os

import yaml

DEFAULT_ENV_PREFIX = "ARMOR_SIM__"

DEFAULTS: Dict[str, Any] = {
    "estimator": {"runs": 1, "seed": None},
    "log": {"level": "WARNING"},
    "api": {"host": "127.0.0.1", "port": 8000},
}

def _deep_merge(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(a)
    for k, v in (b or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out

def load_document(path: str) -> Dict[str, Any]:
    """Read one YAML or JSON mapping (JSON is valid YAML)."""
    with open(path, "r", encoding="utf-8") as f:
        d = yaml.safe_load(f)
    if d is None:
        return {}
    if not isinstance(d, dict):
        raise ValueError(f"{path}: expected a mapping at top level, got {type(d).__name__}")
    return d

def load_configs(paths: Iterable[str] | None) -> Dict[str, Any]:
    cfg: Dict[str, Any] = {}
    for p in (paths or []):
        cfg = _deep_merge(cfg, load_document(p))
    return cfg

def env_overrides(prefix: str = DEFAULT_ENV_PREFIX) -> Dict[str, Any]:
    # Nested via double underscores: ARMOR_SIM__ESTIMATOR__RUNS=20
    out: Dict[str, Any] = {}
    for k, v in os.environ.items():
        if not k.startswith(prefix):
            continue
        parts = k[len(prefix):].split("__")
        cur = out
        for i, part in enumerate(parts):
            key = part.lower()
            if i == len(parts) - 1:
                cur[key] = _coerce(v)
            else:
                cur = cur.setdefault(key, {})
    return out

def _coerce(s: str) -> Any:
    t = s.strip().lower()
    if t in ("true", "false"):
        return t == "true"
    if t in ("none", "null"):
        return None
    try:
        if "." in t:
            return float(t)
        return int(t)
    except ValueError:
        return s

def apply_cli_overrides(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    return _deep_merge(base, overrides or {})

def resolve_settings(
    paths: Iterable[str] | None = None,
    env_prefix: str = DEFAULT_ENV_PREFIX,
    overrides: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Defaults <- config files <- environment <- CLI overrides."""
    cfg = _deep_merge(copy.deepcopy(DEFAULTS), load_configs(paths))
    cfg = _deep_merge(cfg, env_overrides(env_prefix))
    return apply_cli_overrides(cfg, overrides or {})

__all__ = [
    "DEFAULTS",
    "DEFAULT_ENV_PREFIX",
    "load_document",
    "load_configs",
    "env_overrides",
    "apply_cli_overrides",
    "resolve_settings",
    "_deep_merge",
]
