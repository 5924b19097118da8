"""Select an optimizer by name and run it to completion."""

from __future__ import annotations

from typing import Any, Callable, Iterator, Optional

from ..logging import get_logger
from .core import IterationRecord
from .nelder_mead import NelderMead
from .scg import ScaledConjugateGradient

logger = get_logger(__name__)

OPTIMIZERS: dict[str, Callable[..., Iterator[IterationRecord]]] = {
    "SCG": ScaledConjugateGradient,
    "Nelder-Mead": NelderMead,
}


def minimize(algorithm: str, **config: Any) -> Optional[IterationRecord]:
    """
    Minimize an objective with the named optimizer.

    Args:
        algorithm: ``"SCG"`` or ``"Nelder-Mead"``.
        **config: Keyword arguments of the optimizer's constructor
            (``fnc``, ``x_init``, ``jcb``, ``args``, tolerances, ...).

    Returns:
        The last record emitted by the optimizer, or None if it stopped
        before completing a single iteration.

    Raises:
        ValueError: If the algorithm name is not supported. No evaluation is
            performed in that case.
    """
    try:
        factory = OPTIMIZERS[algorithm]
    except KeyError:
        raise ValueError(
            f"Unsupported algorithm '{algorithm}'. "
            f"Supported names: {sorted(OPTIMIZERS)}"
        ) from None

    logger.debug("Running %s", algorithm)
    result: Optional[IterationRecord] = None
    for result in factory(**config):
        pass
    return result


__all__ = ["OPTIMIZERS", "minimize"]
