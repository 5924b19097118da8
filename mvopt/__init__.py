"""mvopt - iterative multivariate minimization (Nelder-Mead and scaled conjugate gradient)."""

__version__ = "0.1.0"

from .logging import configure_logging, get_logger, set_log_level
from .optimize import (
    OPTIMIZERS,
    ExtraArgs,
    IterationRecord,
    Named,
    NelderMead,
    NelderMeadConfig,
    NoArgs,
    NumericalError,
    Positional,
    ScaledConjugateGradient,
    SCGConfig,
    Single,
    Termination,
    as_extra_args,
    minimize,
)

__all__ = [
    "__version__",
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
    "configure_logging",
    "get_logger",
    "minimize",
    "set_log_level",
]
