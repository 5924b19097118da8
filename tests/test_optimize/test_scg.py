import itertools

import numpy as np
import pytest

from mvopt.optimize import NumericalError, ScaledConjugateGradient, Termination
from mvopt.optimize.scg import BETA_MAX, BETA_MIN
from problems import (
    LOGZ_F,
    LOGZ_K,
    LOGZ_XSTAR,
    QUAD_FSTAR,
    QUAD_XSTAR,
    logz,
    logz_grad,
    quad,
    quad_grad,
    rosenbrock,
    rosenbrock_grad,
)


def test_quadratic_converges():
    opt = ScaledConjugateGradient(fnc=quad, jcb=quad_grad, x_init=np.zeros(2))
    records = list(opt)
    last = records[-1]
    assert opt.termination in (
        Termination.FUNCTION_TOLERANCE,
        Termination.STEP_TOLERANCE,
        Termination.GRADIENT_TOLERANCE,
    )
    assert last.n_iter <= 20
    assert np.allclose(last.x, [-1.80847, -0.25533], atol=1e-5)
    assert last.fnc == pytest.approx(1.61702, abs=1e-5)
    assert last.fnc == pytest.approx(QUAD_FSTAR, abs=1e-6)
    g = quad_grad(last.x)
    assert g @ g <= opt.config.jtol


def test_function_tolerance_record_carries_previous_gradient():
    opt = ScaledConjugateGradient(fnc=quad, jcb=quad_grad, x_init=np.zeros(2))
    records = list(opt)
    assert opt.termination is Termination.FUNCTION_TOLERANCE
    assert len(records) >= 2
    # The objective test fires before the gradient is re-evaluated, so the
    # last record reports the squared gradient norm of the previous iterate.
    g_prev = quad_grad(records[-2].x)
    assert records[-1].jcb == pytest.approx(g_prev @ g_prev, rel=1e-12)


def test_gradient_tolerance_record():
    opt = ScaledConjugateGradient(
        fnc=quad, jcb=quad_grad, x_init=np.zeros(2), ftol=0.0, xtol=0.0
    )
    records = list(opt)
    assert opt.termination is Termination.GRADIENT_TOLERANCE
    assert records[-1].jcb <= opt.config.jtol
    assert np.allclose(records[-1].x, QUAD_XSTAR, atol=1e-3)


def test_log_partition_problem():
    opt = ScaledConjugateGradient(
        fnc=logz, jcb=logz_grad, x_init=np.zeros(3), args=[LOGZ_F, LOGZ_K]
    )
    records = list(opt)
    assert set(records[-1].as_dict()) == {"x", "n_fev", "n_jev", "n_iter", "fnc", "jcb"}
    err = abs(logz(records[-1].x, LOGZ_F, LOGZ_K) - logz(LOGZ_XSTAR, LOGZ_F, LOGZ_K))
    assert err < 1e-6


def test_objective_values_non_increasing():
    opt = ScaledConjugateGradient(
        fnc=rosenbrock, jcb=rosenbrock_grad, x_init=np.array([-1.2, 1.0]), max_iter=100
    )
    values = [record.fnc for record in opt]
    assert values
    assert all(b <= a for a, b in zip(values, values[1:]))
    assert values[-1] < rosenbrock(np.array([-1.2, 1.0]))


def test_beta_stays_bounded_with_negative_curvature():
    def fun(x):
        return float(np.sum(np.cos(x)) + 0.01 * x @ x)

    def grad(x):
        return -np.sin(x) + 0.02 * x

    opt = ScaledConjugateGradient(fnc=fun, jcb=grad, x_init=np.array([0.1, -0.2]))
    for _ in opt:
        assert BETA_MIN <= opt.beta <= BETA_MAX
    assert opt.termination is not None


def test_beta_correction_is_clamped():
    scale = 1e16

    def fun(x):
        return float(scale * np.sum(np.cos(x)))

    def grad(x):
        return -scale * np.sin(x)

    opt = ScaledConjugateGradient(fnc=fun, jcb=grad, x_init=np.array([1e-3]), max_iter=10)
    for _ in opt:
        assert BETA_MIN <= opt.beta <= BETA_MAX


def test_good_steps_quarter_beta_down_to_floor():
    scales = np.logspace(0, 4, 40)

    def fun(x):
        return float(0.5 * np.sum(scales * x**2))

    def grad(x):
        return scales * x

    opt = ScaledConjugateGradient(
        fnc=fun, jcb=grad, x_init=np.ones(40), ftol=0.0, xtol=0.0, jtol=0.0
    )
    betas = []
    for _ in itertools.islice(opt, 30):
        betas.append(opt.beta)
    assert betas[0] == 1.0
    assert betas[1] == 0.25
    assert betas[2] == 0.0625
    assert min(betas) == BETA_MIN
    assert all(beta >= BETA_MIN for beta in betas)


def test_rejected_step_quadruples_beta():
    def fun(x):
        return np.inf if x[0] > 0.5 else float((x[0] - 1.0) ** 2)

    def grad(x):
        return np.array([2 * (x[0] - 1.0)])

    opt = ScaledConjugateGradient(fnc=fun, jcb=grad, x_init=np.array([-3.0]))
    first, second, third = itertools.islice(opt, 3)
    # The second trial point lands in the infinite region and is rejected.
    assert np.array_equal(second.x, first.x)
    assert second.fnc == first.fnc
    assert opt.beta == 4.0
    assert third.x[0] > first.x[0]
    assert third.fnc < first.fnc


def test_powell_restart_after_n_accepted_steps():
    points = []

    def tracked_grad(x):
        points.append(np.array(x, dtype=float))
        return quad_grad(x)

    opt = ScaledConjugateGradient(fnc=quad, jcb=tracked_grad, x_init=np.zeros(2))
    first, second = itertools.islice(opt, 2)
    assert not np.array_equal(first.x, np.zeros(2))
    assert not np.array_equal(second.x, first.x)
    assert opt.beta == 0.25

    next(opt)
    # Two accepted steps in two dimensions reset the scale and restart from
    # steepest descent.
    assert opt.beta == 1.0
    probe_step = points[5] - second.x
    g = quad_grad(second.x)
    assert np.allclose(
        probe_step / np.linalg.norm(probe_step), -g / np.linalg.norm(g), atol=1e-6
    )
    assert len(points) == 6


def test_start_at_stationary_point_emits_nothing():
    opt = ScaledConjugateGradient(
        fnc=lambda x: float(x @ x), jcb=lambda x: 2 * x, x_init=np.zeros(3)
    )
    assert list(opt) == []
    assert opt.termination is Termination.DEGENERATE_DIRECTION
    assert opt.n_fev == 1
    assert opt.n_jev == 1


def test_early_stop_evaluation_count(counted):
    fun = counted(rosenbrock)
    grad = counted(rosenbrock_grad)
    opt = ScaledConjugateGradient(fnc=fun, jcb=grad, x_init=np.array([-1.2, 1.0]))
    records = list(itertools.islice(opt, 5))
    assert len(records) == 5
    assert fun.calls == records[-1].n_fev
    assert grad.calls == records[-1].n_jev


def test_deterministic_runs():
    def run():
        return list(
            ScaledConjugateGradient(
                fnc=rosenbrock, jcb=rosenbrock_grad, x_init=np.array([-1.2, 1.0]), max_iter=40
            )
        )

    first, second = run(), run()
    assert len(first) == len(second)
    for a, b in zip(first, second):
        assert np.array_equal(a.x, b.x)
        assert (a.n_fev, a.n_jev, a.n_iter, a.fnc, a.jcb) == (b.n_fev, b.n_jev, b.n_iter, b.fnc, b.jcb)


def test_max_iter_caps_records():
    opt = ScaledConjugateGradient(
        fnc=rosenbrock, jcb=rosenbrock_grad, x_init=np.array([-1.2, 1.0]), max_iter=3
    )
    records = list(opt)
    assert [r.n_iter for r in records] == [1, 2, 3]
    assert opt.termination is Termination.MAX_ITER


def test_x_init_not_mutated():
    x0 = np.array([0.5, 0.5])
    list(ScaledConjugateGradient(fnc=quad, jcb=quad_grad, x_init=x0))
    assert np.array_equal(x0, [0.5, 0.5])


def test_keyword_args_forwarded_to_both_callables():
    def fun(x, *, shift):
        return float(np.sum((x - shift) ** 2))

    def grad(x, *, shift):
        return 2 * (x - shift)

    records = list(
        ScaledConjugateGradient(fnc=fun, jcb=grad, x_init=np.zeros(2), args={"shift": 1.5})
    )
    assert np.allclose(records[-1].x, [1.5, 1.5], atol=1e-3)


def test_nan_gradient_raises():
    opt = ScaledConjugateGradient(
        fnc=quad, jcb=lambda x: np.full(2, np.nan), x_init=np.zeros(2)
    )
    with pytest.raises(NumericalError):
        next(opt)


def test_complex_gradient_raises():
    opt = ScaledConjugateGradient(
        fnc=quad, jcb=lambda x: quad_grad(x) + 0j, x_init=np.zeros(2)
    )
    with pytest.raises(NumericalError, match="complex"):
        next(opt)


def test_infinite_trial_value_is_rejected_not_fatal():
    def fun(x):
        return np.inf if x[0] > 0.5 else float((x[0] - 0.4) ** 2)

    def grad(x):
        return np.array([2 * (x[0] - 0.4)])

    opt = ScaledConjugateGradient(fnc=fun, jcb=grad, x_init=np.array([-3.0]), max_iter=50)
    records = list(opt)
    assert records
    assert all(np.isfinite(r.fnc) for r in records)
