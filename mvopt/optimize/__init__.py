"""Iterative unconstrained minimizers.

Example
-------
>>> import numpy as np
>>> from mvopt.optimize import ScaledConjugateGradient
>>> def quad(x):
...     u, v = x
...     return 2 * u**2 + 3 * u * v + 7 * v**2 + 8 * u + 9 * v + 10
>>> def quad_grad(x):
...     u, v = x
...     return np.array([4 * u + 3 * v + 8, 3 * u + 14 * v + 9])
>>> records = list(ScaledConjugateGradient(fnc=quad, jcb=quad_grad, x_init=np.zeros(2)))
>>> round(records[-1].fnc, 4)
1.617
"""

from .config import NelderMeadConfig, SCGConfig
from .core import (
    ExtraArgs,
    IterationRecord,
    Named,
    NoArgs,
    NumericalError,
    Positional,
    Single,
    Termination,
    as_extra_args,
)
from .minimize import OPTIMIZERS, minimize
from .nelder_mead import NelderMead
from .scg import ScaledConjugateGradient

__all__ = [
    "ExtraArgs",
    "IterationRecord",
    "Named",
    "NelderMead",
    "NelderMeadConfig",
    "NoArgs",
    "NumericalError",
    "OPTIMIZERS",
    "Positional",
    "SCGConfig",
    "ScaledConjugateGradient",
    "Single",
    "Termination",
    "as_extra_args",
    "minimize",
]
