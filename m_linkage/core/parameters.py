# -*- coding: utf-8 -*-
"""Mechanism configuration.

A mechanism file is a small JSON document::

    {
      "parameters": [{"name": "scale", "value": 300}],
      "span": "2*scale",
      "active_length": "scale",
      "passive_length": "scale",
      "arm_length_tolerance": 1e-06,
      "effector_match_tolerance": 0.001
    }

Implementation notes
--------------------
- Length fields accept a number or an expression over the named parameters.
- We avoid Python ``eval``. Expressions are parsed and evaluated with SymPy
  against a short list of functions/constants; unknown symbols are errors.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import sympy as sp

# Largest accepted |joint-to-effector length - passive_length| for a pose.
ARM_LENGTH_TOLERANCE = 1e-6
# Suggested bound for callers comparing a requested point with the solved one.
EFFECTOR_MATCH_TOLERANCE = 1e-3

DEFAULT_SCALE = 300.0

LengthValue = Union[float, str]

_ALLOWED_FUNCS: Dict[str, Any] = {
    "sin": sp.sin,
    "cos": sp.cos,
    "tan": sp.tan,
    "asin": sp.asin,
    "acos": sp.acos,
    "atan": sp.atan,
    "sqrt": sp.sqrt,
    "abs": sp.Abs,
    "min": sp.Min,
    "max": sp.Max,
    "pi": sp.pi,
}


class ConfigError(ValueError):
    pass


def _is_valid_param_name(name: str) -> bool:
    name = (name or "").strip()
    if not name or name in _ALLOWED_FUNCS:
        return False
    if not (name[0].isalpha() or name[0] == "_"):
        return False
    return all(ch.isalnum() or ch == "_" for ch in name)


def eval_param_expression(expr: str, params: Dict[str, float]) -> Tuple[Optional[float], Optional[str]]:
    """Evaluate ``expr`` with SymPy.

    Returns (value, error_message). If evaluation fails, value is None.
    """
    expr = (expr or "").strip()
    if not expr:
        return None, "Empty expression"

    locals_map: Dict[str, Any] = dict(_ALLOWED_FUNCS)
    for name in params:
        locals_map[name] = sp.Symbol(name)

    try:
        parsed = sp.sympify(expr, locals=locals_map)
    except Exception as ex:
        return None, f"Parse error: {ex}"

    unknown = sorted(str(s) for s in getattr(parsed, "free_symbols", set()) if str(s) not in params)
    if unknown:
        return None, f"Unknown symbol(s): {', '.join(unknown)}"

    try:
        val = float(parsed.evalf(subs={sp.Symbol(k): float(v) for k, v in params.items()}))
    except Exception as ex:
        return None, f"Eval error: {ex}"
    if not math.isfinite(val):
        return None, "Expression is not a finite number"
    return val, None


@dataclass
class ParameterRegistry:
    """Named numeric parameters usable inside length expressions."""

    params: Dict[str, float] = field(default_factory=dict)

    def set_param(self, name: str, value: float):
        if not _is_valid_param_name(name):
            raise ConfigError(f"Invalid parameter name: {name!r}")
        self.params[str(name).strip()] = float(value)

    def delete_param(self, name: str):
        self.params.pop(name, None)

    def to_list(self) -> list[dict[str, Any]]:
        return [{"name": k, "value": float(v)} for k, v in sorted(self.params.items(), key=lambda kv: kv[0])]

    def load_list(self, items: list[dict[str, Any]]):
        self.params.clear()
        for it in items or []:
            if not isinstance(it, dict):
                raise ConfigError(f"Parameter entry must be an object, got {it!r}")
            try:
                value = float(it.get("value", 0.0))
            except (TypeError, ValueError) as exc:
                raise ConfigError(f"Parameter {it.get('name')!r} has a non-numeric value") from exc
            self.set_param(str(it.get("name", "")), value)

    def eval_expr(self, expr: str) -> Tuple[Optional[float], Optional[str]]:
        return eval_param_expression(expr, self.params)


@dataclass(frozen=True)
class ResolvedMechanism:
    span: float
    active_length: float
    passive_length: float
    arm_length_tolerance: float = ARM_LENGTH_TOLERANCE
    effector_match_tolerance: float = EFFECTOR_MATCH_TOLERANCE


@dataclass
class MechanismConfig:
    span: LengthValue = "2*scale"
    active_length: LengthValue = "scale"
    passive_length: LengthValue = "scale"
    arm_length_tolerance: float = ARM_LENGTH_TOLERANCE
    effector_match_tolerance: float = EFFECTOR_MATCH_TOLERANCE
    parameters: ParameterRegistry = field(default_factory=lambda: ParameterRegistry({"scale": DEFAULT_SCALE}))

    def _resolve_length(self, key: str) -> float:
        raw = getattr(self, key)
        if isinstance(raw, str):
            val, err = self.parameters.eval_expr(raw)
            if err is not None:
                raise ConfigError(f"{key}: {err}")
        else:
            val = float(raw)
        if not math.isfinite(val) or val <= 0.0:
            raise ConfigError(f"{key} must be a positive length, got {val!r}")
        return float(val)

    def resolve(self) -> ResolvedMechanism:
        for key in ("arm_length_tolerance", "effector_match_tolerance"):
            tol = float(getattr(self, key))
            if not math.isfinite(tol) or tol < 0.0:
                raise ConfigError(f"{key} must be a non-negative number, got {tol!r}")
        return ResolvedMechanism(
            span=self._resolve_length("span"),
            active_length=self._resolve_length("active_length"),
            passive_length=self._resolve_length("passive_length"),
            arm_length_tolerance=float(self.arm_length_tolerance),
            effector_match_tolerance=float(self.effector_match_tolerance),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "parameters": self.parameters.to_list(),
            "span": self.span,
            "active_length": self.active_length,
            "passive_length": self.passive_length,
            "arm_length_tolerance": float(self.arm_length_tolerance),
            "effector_match_tolerance": float(self.effector_match_tolerance),
        }


def _length_field(data: Dict[str, Any], key: str, default: LengthValue) -> LengthValue:
    raw = data.get(key, default)
    if isinstance(raw, str):
        return raw
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ConfigError(f"{key} must be a number or an expression string")
    return float(raw)


def config_from_dict(data: Dict[str, Any]) -> MechanismConfig:
    if not isinstance(data, dict):
        raise ConfigError("Mechanism config must be a JSON object")
    defaults = MechanismConfig()
    registry = defaults.parameters
    if "parameters" in data:
        items = data.get("parameters") or []
        if not isinstance(items, list):
            raise ConfigError("parameters must be a list of {name, value} objects")
        registry.load_list(items)
    try:
        arm_tol = float(data.get("arm_length_tolerance", ARM_LENGTH_TOLERANCE))
        match_tol = float(data.get("effector_match_tolerance", EFFECTOR_MATCH_TOLERANCE))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid tolerance: {exc}") from exc
    return MechanismConfig(
        span=_length_field(data, "span", defaults.span),
        active_length=_length_field(data, "active_length", defaults.active_length),
        passive_length=_length_field(data, "passive_length", defaults.passive_length),
        arm_length_tolerance=arm_tol,
        effector_match_tolerance=match_tol,
        parameters=registry,
    )


def load_config(path: Union[str, Path]) -> MechanismConfig:
    try:
        with open(path, "r", encoding="utf-8") as fh:
            raw = json.load(fh)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"{path}: invalid JSON ({exc})") from exc
    except UnicodeDecodeError as exc:
        raise ConfigError(f"{path}: not UTF-8 text ({exc})") from exc
    return config_from_dict(raw)


def save_config(config: MechanismConfig, path: Union[str, Path]) -> None:
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(config.to_dict(), fh, ensure_ascii=False, indent=2)
