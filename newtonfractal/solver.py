"""Newton iteration over every sample of a field."""

from __future__ import annotations

import multiprocessing as mp
import os
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
import tensorflow as tf

from .complex import EPSILON, Complex
from .field import Field
from .polynomial import Polynomial

DEFAULT_MAX_ITERATIONS = 100
DERIVATIVE_EPSILON = 1e-12


@dataclass(frozen=True)
class Solution:
    """Last iterate and iteration count for one starting point."""

    root: Complex
    iter: int


@dataclass(frozen=True)
class FieldSolution:
    """Array form of the solutions of a whole field, indexed ``[j, i]``."""

    roots: np.ndarray
    iterations: np.ndarray
    field: Field
    max_iterations: int

    def to_solutions(self) -> list[Solution]:
        flat_roots = self.roots.reshape(-1)
        flat_iters = self.iterations.reshape(-1)
        return [
            Solution(Complex(float(z.real), float(z.imag)), int(n))
            for z, n in zip(flat_roots, flat_iters)
        ]

    @classmethod
    def from_solutions(cls, solutions: Sequence[Solution], field: Field, max_iterations: int) -> FieldSolution:
        grid = field.grid
        if len(solutions) != grid * grid:
            raise ValueError(f"expected {grid * grid} solutions, got {len(solutions)}")
        roots = np.array([complex(s.root.re, s.root.im) for s in solutions], dtype=np.complex128)
        iterations = np.array([s.iter for s in solutions], dtype=np.int32)
        return cls(
            roots=roots.reshape(grid, grid),
            iterations=iterations.reshape(grid, grid),
            field=field,
            max_iterations=max_iterations,
        )


class NewtonSolver:
    """Run Newton's method from every sample point of a field.

    The solver reports the raw last iterate; it never snaps it to a known
    root. Vanishing derivatives and exhausted bounds are recorded in
    ``Solution.iter`` rather than raised.
    """

    def __init__(self, polynomial: Polynomial, max_iterations: int = DEFAULT_MAX_ITERATIONS, tolerance: float = EPSILON):
        polynomial.validate()
        if int(max_iterations) != max_iterations or max_iterations < 1:
            raise ValueError(f"max_iterations must be a positive integer, got {max_iterations!r}")
        self.polynomial = polynomial
        self.max_iterations = int(max_iterations)
        self.tolerance = float(tolerance)

    def solve_point(self, z0: Complex) -> Solution:
        p = self.polynomial
        z = z0
        n = 0
        while n < self.max_iterations:
            fz = p.evaluate(z)
            if fz.abs() < self.tolerance:
                return Solution(z, n)
            dz = p.derivative_at(z)
            if dz.abs() < DERIVATIVE_EPSILON:
                return Solution(z, n)
            z = z - fz / dz
            n += 1
        return Solution(z, self.max_iterations)

    def solve_row(self, field: Field, j: int) -> list[Solution]:
        return [self.solve_point(field.sample(i, j)) for i in range(field.grid)]

    def solve(self, field: Field, workers: int = 1) -> list[Solution]:
        """Solve every sample of ``field`` in row-major order.

        With ``workers > 1`` rows are computed in a process pool; each row is
        stored in its own slot so the output order never depends on
        completion order.
        """

        field.validate()
        rows: list[Optional[list[Solution]]] = [None] * field.grid
        if workers <= 1 or field.grid == 1:
            for j in range(field.grid):
                rows[j] = self.solve_row(field, j)
        else:
            ctx = mp.get_context("spawn" if os.name == "nt" else "fork")
            state = (self.polynomial.coefficients, self.max_iterations, self.tolerance, field)
            with ctx.Pool(processes=workers, initializer=_init_worker, initargs=state) as pool:
                for j, row in pool.imap_unordered(_solve_row, range(field.grid), chunksize=_chunksize(field.grid, workers)):
                    rows[j] = row
        return [solution for row in rows for solution in row]

    def solve_field(self, field: Field, workers: int = 1) -> FieldSolution:
        return FieldSolution.from_solutions(self.solve(field, workers=workers), field, self.max_iterations)

    def solve_tensor(self, field: Field, *, device: Optional[str] = None) -> FieldSolution:
        """Vectorized solve of the whole lattice with TensorFlow."""

        field.validate()
        re, im = field.coordinates()
        coefficients = tuple(float(c) for c in self.polynomial.coefficients)
        derivative = tuple(float(c) for c in self.polynomial.derivative().coefficients)

        with tf.device(device if device is not None else "/CPU:0"):
            zre = tf.convert_to_tensor(re, dtype=tf.float64)
            zim = tf.convert_to_tensor(im, dtype=tf.float64)
            ns = tf.zeros_like(zre, tf.int32)
            max_iterations = tf.constant(self.max_iterations, dtype=tf.int32)
            tolerance = tf.constant(self.tolerance, dtype=tf.float64)
            _, zre, zim, ns, _ = _newton_run(zre, zim, ns, max_iterations, tolerance, coefficients, derivative)

        roots = zre.numpy() + 1j * zim.numpy()
        return FieldSolution(
            roots=roots.astype(np.complex128),
            iterations=ns.numpy().astype(np.int32),
            field=field,
            max_iterations=self.max_iterations,
        )


def newton_method_field(polynomial: Polynomial, field: Field, max_iterations: int = DEFAULT_MAX_ITERATIONS) -> list[Solution]:
    return NewtonSolver(polynomial, max_iterations).solve(field)


_worker_state: dict = {}


def _init_worker(coefficients, max_iterations, tolerance, field):
    _worker_state["solver"] = NewtonSolver(Polynomial(coefficients), max_iterations, tolerance)
    _worker_state["field"] = field


def _solve_row(j: int) -> tuple[int, list[Solution]]:
    return j, _worker_state["solver"].solve_row(_worker_state["field"], j)


def _chunksize(rows: int, workers: int) -> int:
    return max(1, rows // (workers * 4))


def _horner(zre: tf.Tensor, zim: tf.Tensor, coefficients: tuple[float, ...]) -> tuple[tf.Tensor, tf.Tensor]:
    # Same operation order as Polynomial.evaluate so both backends agree.
    acc_re = tf.zeros_like(zre)
    acc_im = tf.zeros_like(zim)
    for c in reversed(coefficients):
        new_re = (acc_re * zre - acc_im * zim) + c
        new_im = (acc_re * zim + acc_im * zre) + 0.0
        acc_re, acc_im = new_re, new_im
    return acc_re, acc_im


@tf.function
def _newton_step(
    zre: tf.Tensor,
    zim: tf.Tensor,
    ns: tf.Tensor,
    active: tf.Tensor,
    tolerance: tf.Tensor,
    coefficients: tuple[float, ...],
    derivative: tuple[float, ...],
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Advance every active point by one Newton step."""

    fre, fim = _horner(zre, zim, coefficients)
    converged = tf.sqrt(fre * fre + fim * fim) < tolerance
    dre, dim = _horner(zre, zim, derivative)
    k = dre * dre + dim * dim
    stalled = tf.sqrt(k) < tf.cast(DERIVATIVE_EPSILON, k.dtype)

    stepping = tf.logical_and(active, tf.logical_not(tf.logical_or(converged, stalled)))
    k_safe = tf.where(stepping, k, tf.ones_like(k))
    qre = (fre * dre + fim * dim) / k_safe
    qim = (fim * dre - fre * dim) / k_safe

    zre = tf.where(stepping, zre - qre, zre)
    zim = tf.where(stepping, zim - qim, zim)
    ns = ns + tf.cast(stepping, tf.int32)
    return zre, zim, ns, stepping


@tf.function
def _newton_run(
    zre: tf.Tensor,
    zim: tf.Tensor,
    ns: tf.Tensor,
    max_iterations: tf.Tensor,
    tolerance: tf.Tensor,
    coefficients: tuple[float, ...],
    derivative: tuple[float, ...],
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Iterate Newton's method with a TensorFlow while loop."""

    i = tf.constant(0, dtype=tf.int32)
    active = tf.ones_like(ns, tf.bool)

    def cond(i, zre, zim, ns, active):
        return tf.logical_and(tf.less(i, max_iterations), tf.reduce_any(active))

    def body(i, zre, zim, ns, active):
        zre, zim, ns, active = _newton_step(zre, zim, ns, active, tolerance, coefficients, derivative)
        return i + 1, zre, zim, ns, active

    return tf.while_loop(cond, body, (i, zre, zim, ns, active))
