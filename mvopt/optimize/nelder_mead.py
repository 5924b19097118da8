"""Nelder-Mead simplex search with dimension-adaptive coefficients.

Reference:
    Gao, F. and Han, L., "Implementing the Nelder-Mead simplex algorithm with
    adaptive parameters", Computational Optimization and Applications 51 (1),
    pp. 259-277, 2012.
"""

from __future__ import annotations

from typing import Iterator, Optional

import numpy as np

from ..logging import get_logger
from .config import NelderMeadConfig
from .core import ArgsLike, Array, IterationRecord, Objective, Termination, evaluate_objective

logger = get_logger(__name__)

# Relative perturbation of non-zero coordinates in the initial simplex.
NON_ZERO_TAU = 0.05
# Absolute value used for coordinates that start at exactly zero.
ZERO_TAU = 0.00025


def adaptive_coefficients(n: int) -> tuple[float, float, float, float]:
    """Return (reflection, expansion, contraction, shrink) for dimension ``n``."""
    if n > 1:
        return 1.0, 1.0 + 2.0 / n, 0.75 - 1.0 / (2.0 * n), 1.0 - 1.0 / n
    return 1.0, 2.0, 0.5, 0.5


def initial_simplex(x: Array) -> Array:
    """Build the ``(n + 1, n)`` starting simplex around ``x``."""
    n = x.size
    sim = np.empty((n + 1, n), dtype=float)
    sim[0] = x
    for k in range(n):
        y = x.copy()
        y[k] = ZERO_TAU if y[k] == 0 else (1.0 + NON_ZERO_TAU) * y[k]
        sim[k + 1] = y
    return sim


class NelderMead:
    """
    Derivative-free minimization with the Nelder-Mead simplex method.

    The optimizer is a lazy iterator: each ``next()`` performs one simplex
    iteration and returns an :class:`IterationRecord` for the best vertex.
    Nothing is evaluated before the first pull, and the sequence cannot be
    restarted once exhausted.

    Example
    -------
    >>> import numpy as np
    >>> from mvopt.optimize import NelderMead
    >>> opt = NelderMead(
    ...     fnc=lambda x, a: float(8 * np.sum((x - a) ** 2)),
    ...     x_init=np.zeros(2),
    ...     args=np.array([2.0, 3.0]),
    ... )
    >>> last = None
    >>> for last in opt:
    ...     pass
    >>> bool(np.allclose(last.x, [2.0, 3.0], atol=1e-5))
    True
    """

    def __init__(
        self,
        fnc: Objective,
        x_init: Array,
        args: ArgsLike = None,
        max_iter: Optional[int] = None,
        xtol: float = 1e-6,
        ftol: float = 1e-6,
    ) -> None:
        self.config = NelderMeadConfig(
            fnc=fnc, x_init=x_init, args=args, max_iter=max_iter, xtol=xtol, ftol=ftol
        )
        self.termination: Optional[Termination] = None
        self.n_fev = 0
        self.n_iter = 0
        self._sim: Optional[Array] = None
        self._fsim: Optional[Array] = None
        self._steps = self._run()

    @classmethod
    def from_config(cls, config: NelderMeadConfig) -> "NelderMead":
        return cls(
            fnc=config.fnc,
            x_init=config.x_init,
            args=config.args,
            max_iter=config.max_iter,
            xtol=config.xtol,
            ftol=config.ftol,
        )

    def __iter__(self) -> Iterator[IterationRecord]:
        return self

    def __next__(self) -> IterationRecord:
        return next(self._steps)

    @property
    def simplex(self) -> Optional[Array]:
        """Copy of the vertices sorted by objective value, best first."""
        return None if self._sim is None else self._sim.copy()

    @property
    def fsim(self) -> Optional[Array]:
        """Copy of the objective values matching :attr:`simplex`."""
        return None if self._fsim is None else self._fsim.copy()

    def _func(self, x: Array) -> float:
        self.n_fev += 1
        return evaluate_objective(self.config.fnc, x, self.config.args)

    def _sort(self) -> None:
        order = np.argsort(self._fsim, kind="stable")
        self._sim = self._sim[order]
        self._fsim = self._fsim[order]

    def _converged(self) -> bool:
        sim, fsim = self._sim, self._fsim
        x_spread = np.max(np.abs(sim[1:] - sim[0]))
        f_spread = np.max(np.abs(fsim[0] - fsim[1:]))
        return bool(x_spread <= self.config.xtol and f_spread <= self.config.ftol)

    def _finish(self, reason: Termination) -> None:
        self.termination = reason
        logger.info(
            "Nelder-Mead stopped (%s) after %d iterations, %d evaluations",
            reason.value,
            self.n_iter,
            self.n_fev,
        )

    def _run(self) -> Iterator[IterationRecord]:
        cfg = self.config
        n = cfg.x_init.size
        alpha, beta, gamma, delta = adaptive_coefficients(n)

        self._sim = initial_simplex(cfg.x_init)
        self._fsim = np.array([self._func(vertex) for vertex in self._sim], dtype=float)
        self._sort()

        while self.n_iter < cfg.max_iter:
            if self._converged():
                self._finish(Termination.TOLERANCE)
                return
            sim, fsim = self._sim, self._fsim

            xbar = sim[:-1].sum(axis=0) / n
            xr = xbar + alpha * (xbar - sim[-1])
            fr = self._func(xr)

            shrink = True
            if fr < fsim[0]:
                xe = xbar + beta * (xr - xbar)
                fe = self._func(xe)
                shrink = False
                if fe < fr:
                    sim[-1], fsim[-1] = xe, fe
                else:
                    sim[-1], fsim[-1] = xr, fr
            elif fr < fsim[-2]:
                shrink = False
                sim[-1], fsim[-1] = xr, fr
            elif fr < fsim[-1]:
                xoc = xbar + gamma * (xr - xbar)
                foc = self._func(xoc)
                if foc <= fr:
                    shrink = False
                    sim[-1], fsim[-1] = xoc, foc
            else:
                xic = xbar - gamma * (xr - xbar)
                fic = self._func(xic)
                if fic < fsim[-1]:
                    shrink = False
                    sim[-1], fsim[-1] = xic, fic

            if shrink:
                for j in range(1, n + 1):
                    sim[j] = sim[0] + delta * (sim[j] - sim[0])
                    fsim[j] = self._func(sim[j])

            self._sort()
            self.n_iter += 1

            record = IterationRecord(
                x=self._sim[0],
                n_fev=self.n_fev,
                n_iter=self.n_iter,
                fnc=float(self._fsim[0]),
            )
            logger.debug(
                "iter %d: f=%.10g n_fev=%d", record.n_iter, record.fnc, record.n_fev
            )
            yield record

        self._finish(Termination.MAX_ITER)


__all__ = ["NelderMead", "adaptive_coefficients", "initial_simplex"]
