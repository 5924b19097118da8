"""Immutable optimizer configurations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from .core import Array, ArgsLike, Gradient, Objective, as_extra_args


def _require_callable(name: str, fn: object) -> None:
    if fn is None:
        raise TypeError(f"'{name}' is required")
    if not callable(fn):
        raise TypeError(f"'{name}' must be callable, got {type(fn).__name__}")


def _as_point(x_init: object) -> Array:
    x = np.asarray(x_init)
    if np.iscomplexobj(x):
        raise ValueError("x_init must be real-valued")
    x = np.array(x, dtype=float)
    if x.ndim != 1 or x.size == 0:
        raise ValueError(f"x_init must be a non-empty 1-D vector, got shape {x.shape}")
    x.flags.writeable = False
    return x


def _require_non_negative(name: str, value: float) -> None:
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")


@dataclass(frozen=True)
class NelderMeadConfig:
    """
    Configuration of a Nelder-Mead simplex search.

    Args:
        fnc: Objective ``fnc(x, *extra)`` returning a float.
        x_init: Starting point. A private read-only copy is stored.
        args: Extra arguments forwarded to ``fnc`` (see :func:`as_extra_args`).
        max_iter: Iteration cap. None means ``200 * len(x_init)``.
        xtol: Termination tolerance on the vertex spread.
        ftol: Termination tolerance on the objective value spread.
    """

    fnc: Objective
    x_init: Array
    args: ArgsLike = None
    max_iter: Optional[int] = None
    xtol: float = 1e-6
    ftol: float = 1e-6

    def __post_init__(self) -> None:
        _require_callable("fnc", self.fnc)
        object.__setattr__(self, "x_init", _as_point(self.x_init))
        object.__setattr__(self, "args", as_extra_args(self.args))
        if self.max_iter is None:
            object.__setattr__(self, "max_iter", 200 * self.x_init.size)
        _require_non_negative("max_iter", self.max_iter)
        _require_non_negative("xtol", self.xtol)
        _require_non_negative("ftol", self.ftol)


@dataclass(frozen=True)
class SCGConfig:
    """
    Configuration of a scaled conjugate gradient search.

    Args:
        fnc: Objective ``fnc(x, *extra)`` returning a float.
        jcb: Gradient ``jcb(x, *extra)`` returning a vector shaped like ``x``.
        x_init: Starting point. A private read-only copy is stored.
        args: Extra arguments forwarded to ``fnc`` and ``jcb``.
        max_iter: Iteration cap.
        xtol: Termination tolerance on the largest step component.
        ftol: Termination tolerance on the objective decrease.
        jtol: Termination tolerance on the squared gradient norm.
    """

    fnc: Objective
    jcb: Gradient
    x_init: Array
    args: ArgsLike = None
    max_iter: int = 200
    xtol: float = 1e-6
    ftol: float = 1e-8
    jtol: float = 1e-7

    def __post_init__(self) -> None:
        _require_callable("fnc", self.fnc)
        _require_callable("jcb", self.jcb)
        object.__setattr__(self, "x_init", _as_point(self.x_init))
        object.__setattr__(self, "args", as_extra_args(self.args))
        _require_non_negative("max_iter", self.max_iter)
        _require_non_negative("xtol", self.xtol)
        _require_non_negative("ftol", self.ftol)
        _require_non_negative("jtol", self.jtol)


__all__ = ["NelderMeadConfig", "SCGConfig"]
