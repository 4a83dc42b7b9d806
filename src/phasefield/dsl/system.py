# src/phasefield/dsl/system.py
"""
TOML system documents.

    [system]
    label = "Van der Pol"        # optional
    dx = "y"
    dy = "a*(1 - x^2)*y - x"

    [params]                     # optional; a and b default to 0
    a = 1.0
    b = 0.0

    [domain]                     # optional; default [-5, 5] x [-5, 5]
    x = [-5.0, 5.0]
    y = [-5.0, 5.0]

    [analysis]                   # optional LocatorConfig overrides
    [particles]                  # optional ParticleConfig overrides
    [trajectories]               # optional TrajectoryConfig overrides
"""
from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping
import textwrap
import tomllib

from phasefield.errors import (
    ConfigError,
    ExpressionParseError,
    SystemLoadError,
    SystemNotFoundError,
)
from phasefield.runtime.config import (
    LocatorConfig,
    ParticleConfig,
    TrajectoryConfig,
    with_overrides,
)
from phasefield.runtime.system import DEFAULT_DOMAIN, Domain, System
from .expr import parse

__all__ = [
    "SystemSpec",
    "parse_system_doc",
    "build_system",
    "load_system",
]

_TABLES = {"system", "params", "domain", "analysis", "particles", "trajectories"}
_PARAMS = ("a", "b")


@dataclass(frozen=True)
class SystemSpec:
    """A loaded system plus the tool settings that travel with it."""
    system: System
    analysis: LocatorConfig = field(default_factory=LocatorConfig)
    particles: ParticleConfig = field(default_factory=ParticleConfig)
    trajectories: TrajectoryConfig = field(default_factory=TrajectoryConfig)


def _is_number(val: Any) -> bool:
    return isinstance(val, (int, float)) and not isinstance(val, bool)


def _read_params(tbl: Dict[str, Any]) -> Dict[str, float]:
    out = {"a": 0.0, "b": 0.0}
    for key, val in tbl.items():
        if key not in _PARAMS:
            raise SystemLoadError(
                f"[params].{key} is not a parameter; only 'a' and 'b' are available"
            )
        if not _is_number(val):
            raise SystemLoadError(f"[params].{key} must be a number, got {type(val).__name__}")
        out[key] = float(val)
    return out


def _read_range(tbl: Dict[str, Any], axis: str, default: tuple[float, float]) -> tuple[float, float]:
    val = tbl.get(axis)
    if val is None:
        return default
    if not isinstance(val, list) or len(val) != 2 or not all(_is_number(v) for v in val):
        raise SystemLoadError(f"[domain].{axis} must be a list of two numbers [min, max]")
    return float(val[0]), float(val[1])


def parse_system_doc(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Validate a TOML dict and return a normalized system dict (formulas unparsed)."""
    unknown = set(doc) - _TABLES
    if unknown:
        raise SystemLoadError(
            f"Unknown table(s): {', '.join(sorted(unknown))}. "
            f"Allowed: {', '.join(sorted(_TABLES))}"
        )
    for name in _TABLES:
        if name in doc and not isinstance(doc[name], dict):
            raise SystemLoadError(f"[{name}] must be a table")

    sys_tbl = doc.get("system")
    if sys_tbl is None:
        raise SystemLoadError("Missing required table [system]")
    for key in ("dx", "dy"):
        if not isinstance(sys_tbl.get(key), str):
            raise SystemLoadError(f"[system].{key} must be a string expression")
    label = sys_tbl.get("label")
    if label is not None and not isinstance(label, str):
        raise SystemLoadError("[system].label must be a string if present")
    extra = set(sys_tbl) - {"dx", "dy", "label"}
    if extra:
        raise SystemLoadError(f"[system] has unknown key(s): {', '.join(sorted(extra))}")

    params = _read_params(doc.get("params") or {})

    dom_tbl = doc.get("domain") or {}
    extra = set(dom_tbl) - {"x", "y"}
    if extra:
        raise SystemLoadError(f"[domain] has unknown key(s): {', '.join(sorted(extra))}")
    x_rng = _read_range(dom_tbl, "x", (DEFAULT_DOMAIN.x_min, DEFAULT_DOMAIN.x_max))
    y_rng = _read_range(dom_tbl, "y", (DEFAULT_DOMAIN.y_min, DEFAULT_DOMAIN.y_max))

    return {
        "system": {"label": label, "dx": sys_tbl["dx"], "dy": sys_tbl["dy"]},
        "params": params,
        "domain": {"x": x_rng, "y": y_rng},
        "analysis": dict(doc.get("analysis") or {}),
        "particles": dict(doc.get("particles") or {}),
        "trajectories": dict(doc.get("trajectories") or {}),
    }


def build_system(normal: Mapping[str, Any]) -> SystemSpec:
    """Parse formulas and settings of a normalized dict into a SystemSpec."""
    exprs = {}
    for key in ("dx", "dy"):
        text = normal["system"][key]
        try:
            exprs[key] = parse(text)
        except ExpressionParseError as exc:
            raise SystemLoadError(f"[system].{key}: {exc}") from exc

    (x_min, x_max), (y_min, y_max) = normal["domain"]["x"], normal["domain"]["y"]
    system = System(
        dx=exprs["dx"],
        dy=exprs["dy"],
        a=normal["params"]["a"],
        b=normal["params"]["b"],
        domain=Domain(x_min, x_max, y_min, y_max),
        label=normal["system"]["label"],
    )
    try:
        analysis = with_overrides(LocatorConfig(), normal["analysis"], where="[analysis]")
        particles = with_overrides(ParticleConfig(), normal["particles"], where="[particles]")
        trajectories = with_overrides(TrajectoryConfig(), normal["trajectories"], where="[trajectories]")
    except ConfigError as exc:
        raise SystemLoadError(str(exc)) from exc
    return SystemSpec(system=system, analysis=analysis, particles=particles, trajectories=trajectories)


def _read_toml(uri: str) -> Dict[str, Any]:
    stripped = uri.strip()
    if stripped.startswith("inline:"):
        body = textwrap.dedent(stripped[len("inline:"):].lstrip(" \t").lstrip("\n"))
        try:
            return tomllib.loads(body)
        except tomllib.TOMLDecodeError as e:
            raise SystemLoadError(f"Failed to parse inline system: {e}") from e

    path = Path(uri).expanduser()
    if not path.is_file():
        raise SystemNotFoundError(str(uri), str(path.resolve()))
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise SystemLoadError(f"Failed to load system from {path}: {e}") from e


def load_system(uri: str | Path) -> SystemSpec:
    """
    Load a system document.

    Args:
        uri: path to a TOML file, or "inline:" followed by TOML text

    Raises:
        SystemNotFoundError: the path does not exist
        SystemLoadError: TOML syntax, schema or formula errors
    """
    doc = _read_toml(str(uri))
    return build_system(parse_system_doc(doc))
