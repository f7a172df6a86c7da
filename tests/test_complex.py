import math
import unittest

from newtonfractal.complex import EPSILON, Complex


class TestComplex(unittest.TestCase):

    def test_arithmetic(self):
        a = Complex(1.0, 2.0)
        b = Complex(3.0, -1.0)
        self.assertEqual(a + b, Complex(4.0, 1.0))
        self.assertEqual(a - b, Complex(-2.0, 3.0))
        self.assertEqual(a * b, Complex(5.0, 5.0))
        self.assertEqual(a.scale(2.0), Complex(2.0, 4.0))

    def test_division_by_conjugate(self):
        q = Complex(5.0, 5.0) / Complex(3.0, -1.0)
        self.assertTrue(q.is_close(Complex(1.0, 2.0)))

    def test_division_by_zero_raises(self):
        with self.assertRaises(ZeroDivisionError):
            Complex(1.0, 0.0) / Complex.zero()

    def test_magnitude_and_angle(self):
        self.assertEqual(Complex(3.0, 4.0).abs(), 5.0)
        self.assertEqual(Complex(-1.0, 0.0).arg(), math.pi)
        self.assertAlmostEqual(Complex(0.0, -2.0).arg(), -math.pi / 2)

    def test_powf_uses_polar_form(self):
        self.assertTrue(Complex(0.0, 1.0).powf(2.0).is_close(Complex(-1.0, 0.0)))
        self.assertTrue(Complex(4.0, 0.0).powf(0.5).is_close(Complex(2.0, 0.0)))

    def test_distance(self):
        self.assertEqual(Complex(1.0, 1.0).distance(Complex(4.0, 5.0)), 5.0)

    def test_is_close_uses_epsilon(self):
        z = Complex(1.0, 0.0)
        self.assertTrue(z.is_close(Complex(1.0 + EPSILON / 2, 0.0)))
        self.assertFalse(z.is_close(Complex(1.0 + EPSILON * 2, 0.0)))
        # native equality stays exact
        self.assertNotEqual(z, Complex(1.0 + EPSILON / 2, 0.0))

    def test_builtin_conversion(self):
        z = Complex.from_builtin(2 - 3j)
        self.assertEqual(z, Complex(2.0, -3.0))
        self.assertEqual(z.to_builtin(), 2 - 3j)
        self.assertEqual(str(Complex(1.5, 2.0)), "1.5+2.0i")


if __name__ == '__main__':
    unittest.main()
