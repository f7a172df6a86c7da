"""Integer-coefficient polynomials evaluated over :class:`Complex` points."""

from __future__ import annotations

from typing import Iterable

from .complex import Complex


class InvalidPolynomialError(ValueError):
    """Raised when a polynomial cannot be used for Newton iteration."""


def _as_integer(c) -> int:
    try:
        value = int(c)
    except (TypeError, ValueError, OverflowError) as exc:
        raise InvalidPolynomialError(f"coefficient {c!r} is not an integer") from exc
    if isinstance(c, str) or value != c:
        raise InvalidPolynomialError(f"coefficient {c!r} is not an integer")
    return value


class Polynomial:
    """Polynomial with integer coefficients, constant term first."""

    def __init__(self, coefficients: Iterable[int]):
        self.coefficients: tuple[int, ...] = tuple(_as_integer(c) for c in coefficients)

    @classmethod
    def parse(cls, text: str) -> Polynomial:
        """Parse the comma separated form ``"-1,0,0,1"``."""

        coefficients = []
        for token in text.split(","):
            token = token.strip()
            try:
                coefficients.append(int(token))
            except ValueError as exc:
                raise InvalidPolynomialError(f"invalid coefficient {token!r} in {text!r}") from exc
        return cls(coefficients)

    @property
    def degree(self) -> int:
        return len(self.coefficients) - 1

    @property
    def is_degenerate(self) -> bool:
        return self.degree < 1

    def validate(self) -> None:
        if self.is_degenerate:
            raise InvalidPolynomialError(
                f"polynomial must have degree >= 1, got coefficients {list(self.coefficients)}"
            )

    def evaluate(self, z: Complex) -> Complex:
        """Evaluate at ``z`` with Horner's scheme."""

        acc = Complex.zero()
        for c in reversed(self.coefficients):
            acc = acc * z + Complex(float(c), 0.0)
        return acc

    def derivative(self) -> Polynomial:
        return Polynomial((k + 1) * c for k, c in enumerate(self.coefficients[1:]))

    def derivative_at(self, z: Complex) -> Complex:
        acc = Complex.zero()
        for k in range(self.degree, 0, -1):
            acc = acc * z + Complex(float(k * self.coefficients[k]), 0.0)
        return acc

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Polynomial):
            return NotImplemented
        return self.coefficients == other.coefficients

    def __hash__(self) -> int:
        return hash(self.coefficients)

    def __repr__(self) -> str:
        return f"Polynomial({list(self.coefficients)})"
