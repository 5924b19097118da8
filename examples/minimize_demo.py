"""
Example: Unconstrained minimization with mvopt

Runs both optimizers on small test problems, once by pulling iteration
records directly and once through the ``minimize`` dispatcher.
"""

import itertools

import numpy as np

from mvopt import NelderMead, ScaledConjugateGradient, minimize


def quad(x):
    u, v = x
    return 2 * u**2 + 3 * u * v + 7 * v**2 + 8 * u + 9 * v + 10


def quad_grad(x):
    u, v = x
    return np.array([4 * u + 3 * v + 8, 3 * u + 14 * v + 9])


def example_scg_trace():
    """Example: Watch SCG converge on a 2-D quadratic."""
    print("=" * 60)
    print("Example 1: Scaled conjugate gradient, iteration trace")
    print("=" * 60)

    optimizer = ScaledConjugateGradient(fnc=quad, jcb=quad_grad, x_init=np.zeros(2))
    for record in optimizer:
        print(
            f"iter {record.n_iter:2d}  f = {record.fnc:.8f}  "
            f"|g|^2 = {record.jcb:.2e}  x = {record.x}"
        )
    print(f"Stopped: {optimizer.termination.value}")
    print()


def example_nelder_mead_early_stop():
    """Example: Take only the first few simplex iterations."""
    print("=" * 60)
    print("Example 2: Nelder-Mead, first 10 iterations")
    print("=" * 60)

    def weighted(x, a):
        return float(8 * np.sum((x - a) ** 2))

    optimizer = NelderMead(fnc=weighted, x_init=np.zeros(2), args=np.array([2.0, 3.0]))
    for record in itertools.islice(optimizer, 10):
        print(f"iter {record.n_iter:2d}  f = {record.fnc:.6f}  n_fev = {record.n_fev}")
    print()


def example_dispatch():
    """Example: Select the algorithm by name."""
    print("=" * 60)
    print("Example 3: minimize() dispatcher")
    print("=" * 60)

    for name, config in (
        ("SCG", {"fnc": quad, "jcb": quad_grad}),
        ("Nelder-Mead", {"fnc": quad}),
    ):
        result = minimize(name, x_init=np.zeros(2), **config)
        print(f"{name:12s} x = {result.x}  f = {result.fnc:.6f}  iterations = {result.n_iter}")
    print()


if __name__ == "__main__":
    example_scg_trace()
    example_nelder_mead_early_stop()
    example_dispatch()
    print("All examples completed")
