import unittest

import numpy as np

from newtonfractal.complex import Complex
from newtonfractal.field import Field, InvalidFieldError
from newtonfractal.polynomial import InvalidPolynomialError, Polynomial
from newtonfractal.solver import FieldSolution, NewtonSolver, Solution, newton_method_field

CUBIC = Polynomial([-1, 0, 0, 1])
FIELD = Field(source=Complex(-5.0, -5.0), size=10.0, grid=4)
H = 3 ** 0.5 / 2
CUBE_ROOTS = (Complex(1.0, 0.0), Complex(-0.5, H), Complex(-0.5, -H))


class TestSolvePoint(unittest.TestCase):

    def setUp(self):
        self.solver = NewtonSolver(CUBIC, max_iterations=50)

    def test_start_on_root_needs_no_iterations(self):
        for root in CUBE_ROOTS:
            solution = self.solver.solve_point(root)
            self.assertEqual(solution.iter, 0)
            self.assertTrue(solution.root.is_close(root))

    def test_converges_to_one_from_positive_real_axis(self):
        solution = self.solver.solve_point(Complex(2.5, 0.0))
        self.assertTrue(solution.root.is_close(Complex(1.0, 0.0)))
        self.assertGreater(solution.iter, 0)
        self.assertLess(solution.iter, 10)

    def test_vanishing_derivative_stops_early(self):
        # f'(0) = 0 for z^3 - 1
        solution = self.solver.solve_point(Complex.zero())
        self.assertEqual(solution, Solution(Complex.zero(), 0))

    def test_bound_is_respected(self):
        solver = NewtonSolver(CUBIC, max_iterations=2)
        solution = solver.solve_point(Complex(40.0, 30.0))
        self.assertEqual(solution.iter, 2)

    def test_linear_polynomial_converges_in_one_step(self):
        solver = NewtonSolver(Polynomial([-4, 2]), max_iterations=10)
        solution = solver.solve_point(Complex(7.0, 3.0))
        self.assertEqual(solution.iter, 1)
        self.assertTrue(solution.root.is_close(Complex(2.0, 0.0)))


class TestSolveField(unittest.TestCase):

    def setUp(self):
        self.solver = NewtonSolver(CUBIC, max_iterations=50)

    def test_end_to_end_scenario(self):
        solutions = self.solver.solve(FIELD)
        self.assertEqual(len(solutions), 16)
        # sample(3, 2) = 2.5 + 0i is the point on the positive real axis
        on_axis = solutions[2 * 4 + 3]
        self.assertTrue(on_axis.root.is_close(Complex(1.0, 0.0)))
        self.assertLess(on_axis.iter, 10)
        # sample(2, 2) is the origin where the derivative vanishes
        self.assertEqual(solutions[2 * 4 + 2], Solution(Complex.zero(), 0))

    def test_solutions_follow_row_major_order(self):
        solutions = self.solver.solve(FIELD)
        for k, solution in enumerate(solutions):
            expected = self.solver.solve_point(FIELD.sample(k % 4, k // 4))
            self.assertEqual(solution, expected)

    def test_iterations_within_bounds(self):
        solver = NewtonSolver(CUBIC, max_iterations=5)
        field = Field(source=Complex(-2.0, -2.0), size=4.0, grid=12)
        for solution in solver.solve(field):
            self.assertGreaterEqual(solution.iter, 0)
            self.assertLessEqual(solution.iter, 5)

    def test_every_converged_point_reaches_a_cube_root(self):
        field = Field(source=Complex(-2.0, -2.0), size=4.0, grid=9)
        for solution in self.solver.solve(field):
            if 0 < solution.iter < 50:
                self.assertTrue(any(solution.root.is_close(r, 1e-3) for r in CUBE_ROOTS))

    def test_idempotent(self):
        self.assertEqual(self.solver.solve(FIELD), self.solver.solve(FIELD))

    def test_worker_pool_preserves_order(self):
        field = Field(source=Complex(-2.0, -1.5), size=3.0, grid=6)
        self.assertEqual(self.solver.solve(field, workers=2), self.solver.solve(field))

    def test_newton_method_field(self):
        self.assertEqual(newton_method_field(CUBIC, FIELD, 50), self.solver.solve(FIELD))


class TestPreconditions(unittest.TestCase):

    def test_degenerate_polynomial_rejected(self):
        for coefficients in ([], [1]):
            with self.assertRaises(InvalidPolynomialError):
                NewtonSolver(Polynomial(coefficients))

    def test_invalid_bound_rejected(self):
        with self.assertRaises(ValueError):
            NewtonSolver(CUBIC, max_iterations=0)

    def test_invalid_field_rejected_before_work(self):
        solver = NewtonSolver(CUBIC)
        with self.assertRaises(InvalidFieldError):
            solver.solve(Field(Complex.zero(), 1.0, 4.0))
        with self.assertRaises(InvalidFieldError):
            solver.solve(Field(Complex.zero(), 0.0, 4))
        with self.assertRaises(InvalidFieldError):
            solver.solve(Field(Complex.zero(), 1.0, 0))
        with self.assertRaises(InvalidFieldError):
            solver.solve_tensor(Field(Complex.zero(), -1.0, 4))


class TestFieldSolution(unittest.TestCase):

    def test_array_layout(self):
        solver = NewtonSolver(CUBIC, max_iterations=50)
        result = solver.solve_field(FIELD)
        self.assertEqual(result.roots.shape, (4, 4))
        self.assertEqual(result.iterations.dtype, np.int32)
        self.assertEqual(result.iterations[2, 2], 0)
        self.assertEqual(result.to_solutions(), solver.solve(FIELD))

    def test_wrong_length_rejected(self):
        with self.assertRaises(ValueError):
            FieldSolution.from_solutions([Solution(Complex.zero(), 0)], FIELD, 10)


class TestTensorBackend(unittest.TestCase):

    def test_matches_scalar_backend(self):
        solver = NewtonSolver(CUBIC, max_iterations=50)
        for field in (FIELD, Field(source=Complex(-1.7, -1.1), size=2.3, grid=5)):
            expected = solver.solve_field(field)
            result = solver.solve_tensor(field)
            np.testing.assert_array_equal(result.iterations, expected.iterations)
            np.testing.assert_allclose(result.roots, expected.roots, rtol=0, atol=1e-9)

    def test_bound_and_shape(self):
        solver = NewtonSolver(CUBIC, max_iterations=3)
        field = Field(source=Complex(-2.0, -2.0), size=4.0, grid=8)
        result = solver.solve_tensor(field)
        self.assertEqual(result.roots.shape, (8, 8))
        self.assertTrue(np.all(result.iterations >= 0))
        self.assertTrue(np.all(result.iterations <= 3))
        self.assertEqual(result.max_iterations, 3)

    def test_vanishing_derivative(self):
        result = NewtonSolver(CUBIC, max_iterations=50).solve_tensor(FIELD)
        self.assertEqual(result.iterations[2, 2], 0)
        self.assertEqual(result.roots[2, 2], 0j)


if __name__ == '__main__':
    unittest.main()
