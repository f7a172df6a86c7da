"""Complex value type used by the Newton solver."""

from __future__ import annotations

import math
from dataclasses import dataclass

EPSILON = 1e-5


@dataclass(frozen=True)
class Complex:
    """Immutable complex number with explicit arithmetic.

    ``==`` compares fields exactly. Use :meth:`is_close` to compare values
    produced by iterative computation.
    """

    re: float
    im: float

    @staticmethod
    def zero() -> Complex:
        return Complex(0.0, 0.0)

    @staticmethod
    def from_builtin(value: complex) -> Complex:
        return Complex(float(value.real), float(value.imag))

    def to_builtin(self) -> complex:
        return complex(self.re, self.im)

    def __add__(self, other: Complex) -> Complex:
        return Complex(self.re + other.re, self.im + other.im)

    def __sub__(self, other: Complex) -> Complex:
        return Complex(self.re - other.re, self.im - other.im)

    def __mul__(self, other: Complex) -> Complex:
        return Complex(
            self.re * other.re - self.im * other.im,
            self.re * other.im + self.im * other.re,
        )

    def __truediv__(self, other: Complex) -> Complex:
        k = other.re * other.re + other.im * other.im
        if k == 0.0:
            raise ZeroDivisionError("complex division by zero")
        re = (self.re * other.re + self.im * other.im) / k
        im = (self.im * other.re - self.re * other.im) / k
        return Complex(re, im)

    def scale(self, factor: float) -> Complex:
        return Complex(self.re * factor, self.im * factor)

    def abs(self) -> float:
        return math.sqrt(self.re * self.re + self.im * self.im)

    def arg(self) -> float:
        return math.atan2(self.im, self.re)

    def powf(self, p: float) -> Complex:
        """Raise to a real power through the polar form."""

        r = self.abs() ** p
        theta = p * self.arg()
        return Complex(math.cos(theta) * r, math.sin(theta) * r)

    def distance(self, other: Complex) -> float:
        return (self - other).abs()

    def is_close(self, other: Complex, eps: float = EPSILON) -> bool:
        return self.distance(other) < eps

    def __str__(self) -> str:
        return f"{self.re}+{self.im}i"
