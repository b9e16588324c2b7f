"""Evaluator configuration: defaults, YAML files and environment overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

RECURSION_DEPTH_ENV = "CSGEVAL_MAX_RECURSION_DEPTH"


@dataclass(frozen=True)
class EvaluatorConfig:
    """Tunables for one evaluation pass."""

    # Ceiling on nested instantiations (module-call depth times block nesting).
    max_recursion_depth: int = 100
    warn_unresolved_constructs: bool = True
    warn_undefined_variables: bool = True

    def __post_init__(self) -> None:
        if self.max_recursion_depth < 1:
            raise ValueError(f"max_recursion_depth must be positive, got {self.max_recursion_depth}")


def _parse_config(raw: Dict[str, Any]) -> EvaluatorConfig:
    known = {f.name for f in fields(EvaluatorConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ValueError(f"unknown evaluator config keys: {', '.join(unknown)}")
    kwargs: Dict[str, Any] = {}
    if "max_recursion_depth" in raw:
        kwargs["max_recursion_depth"] = int(raw["max_recursion_depth"])
    for key in ("warn_unresolved_constructs", "warn_undefined_variables"):
        if key in raw:
            kwargs[key] = bool(raw[key])
    return EvaluatorConfig(**kwargs)


def load_config(path: Path | str) -> EvaluatorConfig:
    """Load a YAML evaluator config file and return the normalised ``EvaluatorConfig``."""

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"evaluator config not found: {config_path}")
    import yaml

    with config_path.open("r", encoding="utf-8") as fp:
        data = yaml.safe_load(fp) or {}
    if not isinstance(data, dict):
        raise ValueError(f"evaluator config must be a mapping, got {type(data)!r}")
    return _parse_config(data)


def config_from_env(base: Optional[EvaluatorConfig] = None) -> EvaluatorConfig:
    """Apply ``CSGEVAL_*`` environment overrides on top of ``base``."""

    config = base or EvaluatorConfig()
    depth = os.environ.get(RECURSION_DEPTH_ENV)
    if depth:
        try:
            config = replace(config, max_recursion_depth=int(depth))
        except ValueError as exc:
            raise ValueError(f"{RECURSION_DEPTH_ENV} must be a positive integer, got {depth!r}") from exc
    return config
