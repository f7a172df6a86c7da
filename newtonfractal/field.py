"""Sampling window of the complex plane."""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from typing import Iterator

import numpy as np

from .complex import Complex

DEFAULT_GRID = 512


class InvalidFieldError(ValueError):
    """Raised when a field cannot be sampled."""


@dataclass(frozen=True)
class Field:
    """Square region with corner ``source``, side ``size`` and ``grid`` samples per side.

    Row ``j`` runs along the imaginary axis and column ``i`` along the real
    axis; samples are enumerated row by row.
    """

    source: Complex
    size: float
    grid: int = DEFAULT_GRID

    def validate(self) -> None:
        if not (isinstance(self.size, (int, float)) and math.isfinite(self.size) and self.size > 0):
            raise InvalidFieldError(f"field size must be a positive finite number, got {self.size!r}")
        if isinstance(self.grid, bool) or not isinstance(self.grid, numbers.Integral) or self.grid <= 0:
            raise InvalidFieldError(f"field grid must be a positive integer, got {self.grid!r}")

    def sample(self, i: int, j: int) -> Complex:
        return self.source + Complex(i * self.size / self.grid, j * self.size / self.grid)

    def samples(self) -> Iterator[Complex]:
        for j in range(self.grid):
            for i in range(self.grid):
                yield self.sample(i, j)

    def coordinates(self) -> tuple[np.ndarray, np.ndarray]:
        """Return ``(re, im)`` float64 arrays of shape ``(grid, grid)`` indexed ``[j, i]``."""

        idx = np.arange(self.grid, dtype=np.float64)
        size = np.float64(self.size)
        grid = np.float64(self.grid)
        re = np.float64(self.source.re) + idx * size / grid
        im = np.float64(self.source.im) + idx * size / grid
        return np.meshgrid(re, im)

    def bounds(self) -> tuple[float, float, float, float]:
        last = self.sample(self.grid - 1, self.grid - 1)
        return self.source.re, last.re, self.source.im, last.im

    @property
    def center(self) -> Complex:
        return self.source + Complex(self.size / 2.0, self.size / 2.0)
