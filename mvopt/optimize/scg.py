"""Scaled conjugate gradient minimization.

Reference:
    M. F. Møller, "A Scaled Conjugate Gradient Algorithm for Fast Supervised
    Learning", Neural Networks 6, pp. 525-533, 1993.
"""

from __future__ import annotations

import math
from typing import Iterator, Optional

import numpy as np

from ..logging import get_logger
from .config import SCGConfig
from .core import (
    ArgsLike,
    Array,
    Gradient,
    IterationRecord,
    NumericalError,
    Objective,
    Termination,
    evaluate_gradient,
    evaluate_objective,
)

logger = get_logger(__name__)

SIGMA_INIT = 1e-4
BETA_MIN = 1e-15
BETA_MAX = 1e15
KAPPA_MIN = 1e-16


def _clip_beta(beta: float) -> float:
    return min(max(beta, BETA_MIN), BETA_MAX)


class ScaledConjugateGradient:
    """
    Gradient-based minimization with Møller's scaled conjugate gradient.

    The step length along each conjugate direction comes from a local
    quadratic model whose curvature is estimated by a finite difference of
    gradients and regularized by the trust-region scale ``beta``. No line
    search is performed.

    Each ``next()`` performs one iteration and returns an
    :class:`IterationRecord` carrying the current point, objective value and
    squared gradient norm. The sequence ends when a tolerance is met, the
    search direction degenerates, or ``max_iter`` iterations have run.

    Raises:
        NumericalError: If the objective or gradient is complex-valued, or the
            step length or model comparison ratio becomes undefined.
    """

    def __init__(
        self,
        fnc: Objective,
        jcb: Gradient,
        x_init: Array,
        args: ArgsLike = None,
        max_iter: int = 200,
        xtol: float = 1e-6,
        ftol: float = 1e-8,
        jtol: float = 1e-7,
    ) -> None:
        self.config = SCGConfig(
            fnc=fnc,
            jcb=jcb,
            x_init=x_init,
            args=args,
            max_iter=max_iter,
            xtol=xtol,
            ftol=ftol,
            jtol=jtol,
        )
        self.termination: Optional[Termination] = None
        self.n_fev = 0
        self.n_jev = 0
        self.n_iter = 0
        self.beta = 1.0
        self._steps = self._run()

    @classmethod
    def from_config(cls, config: SCGConfig) -> "ScaledConjugateGradient":
        return cls(
            fnc=config.fnc,
            jcb=config.jcb,
            x_init=config.x_init,
            args=config.args,
            max_iter=config.max_iter,
            xtol=config.xtol,
            ftol=config.ftol,
            jtol=config.jtol,
        )

    def __iter__(self) -> Iterator[IterationRecord]:
        return self

    def __next__(self) -> IterationRecord:
        return next(self._steps)

    def _func(self, x: Array) -> float:
        self.n_fev += 1
        return evaluate_objective(self.config.fnc, x, self.config.args)

    def _jacb(self, x: Array) -> Array:
        self.n_jev += 1
        return evaluate_gradient(self.config.jcb, x, self.config.args)

    def _finish(self, reason: Termination) -> None:
        self.termination = reason
        logger.info(
            "SCG stopped (%s) after %d iterations, %d evaluations, %d gradients",
            reason.value,
            self.n_iter,
            self.n_fev,
            self.n_jev,
        )

    def _run(self) -> Iterator[IterationRecord]:
        cfg = self.config
        n = cfg.x_init.size

        x = cfg.x_init.copy()
        f_prev = self._func(x)
        f_curr = f_prev
        j_next = self._jacb(x)
        j_curr = float(j_next @ j_next)
        j_prev = j_next.copy()
        d = -j_next
        success = True
        n_successes = 0
        mu = kappa = theta = 0.0

        while self.n_iter < cfg.max_iter:
            if success:
                mu = float(d @ j_next)
                if mu >= 0.0:
                    d = -j_next
                    mu = float(d @ j_next)
                kappa = float(d @ d)
                if kappa < KAPPA_MIN:
                    self._finish(Termination.DEGENERATE_DIRECTION)
                    return
                sigma = SIGMA_INIT / math.sqrt(kappa)
                j_plus = self._jacb(x + sigma * d)
                theta = float(d @ (j_plus - j_next)) / sigma

            # Make the scaled curvature positive definite.
            delta = theta + self.beta * kappa
            if delta <= 0.0:
                delta = self.beta * kappa
                self.beta = _clip_beta(self.beta - theta / kappa)
            alpha = -mu / delta
            if math.isnan(alpha) or alpha * mu == 0.0:
                raise NumericalError(
                    f"undefined step length (alpha={alpha!r}, mu={mu!r}, delta={delta!r})"
                )

            x_next = x + alpha * d
            f_next = self._func(x_next)

            ratio = 2.0 * (f_next - f_prev) / (alpha * mu)
            if math.isnan(ratio):
                raise NumericalError(
                    f"undefined comparison ratio (f_next={f_next!r}, f_prev={f_prev!r})"
                )
            if ratio >= 0.0:
                success = True
                n_successes += 1
                x = x_next
                f_curr = f_next
            else:
                success = False
                f_curr = f_prev

            self.n_iter += 1

            reason: Optional[Termination] = None
            if success:
                if abs(f_next - f_prev) < cfg.ftol:
                    reason = Termination.FUNCTION_TOLERANCE
                elif np.max(np.abs(alpha * d)) < cfg.xtol:
                    reason = Termination.STEP_TOLERANCE
                else:
                    f_prev = f_next
                    j_prev = j_next
                    j_next = self._jacb(x)
                    j_curr = float(j_next @ j_next)
                    if j_curr <= cfg.jtol:
                        reason = Termination.GRADIENT_TOLERANCE

            record = IterationRecord(
                x=x,
                n_fev=self.n_fev,
                n_iter=self.n_iter,
                fnc=f_curr,
                n_jev=self.n_jev,
                jcb=j_curr,
            )
            logger.debug(
                "iter %d: f=%.10g |g|^2=%.3e beta=%.3e accepted=%s",
                self.n_iter,
                f_curr,
                j_curr,
                self.beta,
                success,
            )
            yield record

            if reason is not None:
                self._finish(reason)
                return

            # Trust-region scale update.
            if ratio < 0.25:
                self.beta = min(self.beta * 4.0, BETA_MAX)
            if ratio > 0.75:
                self.beta = max(self.beta / 4.0, BETA_MIN)

            if n_successes == n:
                # Powell restart.
                d = -j_next
                self.beta = 1.0
                n_successes = 0
            elif success:
                gamma = float((j_prev - j_next) @ j_next) / mu
                d = -j_next + gamma * d

        self._finish(Termination.MAX_ITER)


__all__ = ["ScaledConjugateGradient", "SIGMA_INIT", "BETA_MIN", "BETA_MAX"]
