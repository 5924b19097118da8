"""Core interfaces shared by the iterative optimizers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, Sequence, Union

import numpy as np

Array = np.ndarray
Objective = Callable[..., float]
Gradient = Callable[..., Array]


class NumericalError(ArithmeticError):
    """Raised when an iteration produces a non-real or undefined quantity."""


class Termination(Enum):
    """Reason an optimizer stopped producing records."""

    TOLERANCE = "tolerance"
    MAX_ITER = "max_iter"
    DEGENERATE_DIRECTION = "degenerate_direction"
    FUNCTION_TOLERANCE = "function_tolerance"
    STEP_TOLERANCE = "step_tolerance"
    GRADIENT_TOLERANCE = "gradient_tolerance"


class ExtraArgs(ABC):
    """Forwarding rule for extra arguments of objective and gradient callables.

    The variant is chosen once when an optimizer is configured; every
    evaluation then goes through :meth:`call`.
    """

    @abstractmethod
    def call(self, fn: Callable[..., Any], x: Array) -> Any:
        """Invoke ``fn`` at ``x`` with the forwarded arguments."""


@dataclass(frozen=True)
class NoArgs(ExtraArgs):
    """Call ``fn(x)``."""

    def call(self, fn: Callable[..., Any], x: Array) -> Any:
        return fn(x)


@dataclass(frozen=True)
class Positional(ExtraArgs):
    """Call ``fn(x, *values)``."""

    values: tuple = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(self.values))

    def call(self, fn: Callable[..., Any], x: Array) -> Any:
        return fn(x, *self.values)


@dataclass(frozen=True)
class Named(ExtraArgs):
    """Call ``fn(x, **values)``."""

    values: Mapping = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", dict(self.values))

    def call(self, fn: Callable[..., Any], x: Array) -> Any:
        return fn(x, **self.values)


@dataclass(frozen=True)
class Single(ExtraArgs):
    """Call ``fn(x, value)``."""

    value: Any = None

    def call(self, fn: Callable[..., Any], x: Array) -> Any:
        return fn(x, self.value)


ArgsLike = Union[None, ExtraArgs, Sequence[Any], Mapping[str, Any], Any]


def as_extra_args(args: ArgsLike) -> ExtraArgs:
    """Convert a configuration value into an :class:`ExtraArgs` variant.

    ``None`` forwards nothing, lists and tuples are spread as positional
    arguments, mappings as keyword arguments, and any other value (arrays
    included) is passed as one extra positional argument.
    """
    if args is None:
        return NoArgs()
    if isinstance(args, ExtraArgs):
        return args
    if isinstance(args, (list, tuple)):
        return Positional(tuple(args))
    if isinstance(args, Mapping):
        return Named(args)
    return Single(args)


@dataclass(frozen=True, eq=False)
class IterationRecord:
    """Snapshot of optimizer progress emitted once per iteration.

    ``n_jev`` and ``jcb`` (squared gradient norm) are only reported by
    gradient-based optimizers.
    """

    x: Array
    n_fev: int
    n_iter: int
    fnc: float
    n_jev: Optional[int] = None
    jcb: Optional[float] = None

    def __post_init__(self) -> None:
        x = np.array(self.x, dtype=float)
        x.flags.writeable = False
        object.__setattr__(self, "x", x)

    def as_dict(self) -> dict[str, Any]:
        """Return the populated fields as a plain dictionary."""
        out: dict[str, Any] = {
            "x": self.x,
            "n_fev": self.n_fev,
            "n_iter": self.n_iter,
            "fnc": self.fnc,
        }
        if self.n_jev is not None:
            out["n_jev"] = self.n_jev
        if self.jcb is not None:
            out["jcb"] = self.jcb
        return out


def evaluate_objective(fnc: Objective, x: Array, args: ExtraArgs) -> float:
    """Evaluate the objective at ``x`` and return a real float."""
    value = args.call(fnc, x)
    if np.iscomplexobj(value):
        raise NumericalError(f"objective returned a complex value: {value!r}")
    return float(value)


def evaluate_gradient(jcb: Gradient, x: Array, args: ExtraArgs) -> Array:
    """Evaluate the gradient at ``x`` and return a float vector shaped like ``x``."""
    grad = np.asarray(args.call(jcb, x))
    if np.iscomplexobj(grad):
        raise NumericalError("gradient returned complex values")
    grad = grad.astype(float).reshape(-1)
    if grad.shape != x.shape:
        raise ValueError(
            f"gradient has shape {grad.shape}, expected {x.shape}"
        )
    return grad


__all__ = [
    "Array",
    "ArgsLike",
    "ExtraArgs",
    "Gradient",
    "IterationRecord",
    "Named",
    "NoArgs",
    "NumericalError",
    "Objective",
    "Positional",
    "Single",
    "Termination",
    "as_extra_args",
    "evaluate_gradient",
    "evaluate_objective",
]
