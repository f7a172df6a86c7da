"""Map Newton solutions to RGB colors through HSL.

Hue follows the angle of the reached point, saturation its magnitude and
luminance the number of iterations it took.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from .solver import FieldSolution, Solution

TWO_PI = 2.0 * math.pi


def clamp01(v: float) -> float:
    # NaN maps to 0
    return min(max(0.0, v), 1.0)


def hue_to_rgb(p: float, q: float, h: float) -> float:
    if h < 0.0:
        h += 1.0
    elif h > 1.0:
        h -= 1.0

    if h < 1.0 / 6.0:
        return p + (q - p) * 6.0 * h
    if h < 1.0 / 2.0:
        return q
    if h < 2.0 / 3.0:
        return p + (q - p) * 6.0 * (2.0 / 3.0 - h)
    return p


def hsl_to_rgb(h: float, s: float, l: float) -> tuple[float, float, float]:
    q = l * (1.0 + s) if l < 0.5 else (l + s) - s * l
    p = 2.0 * l - q
    r = max(0.0, hue_to_rgb(p, q, h + 1.0 / 3.0))
    g = max(0.0, hue_to_rgb(p, q, h))
    b = max(0.0, hue_to_rgb(p, q, h - 1.0 / 3.0))
    return r, g, b


def solution_hsl(solution: Solution, max_iter: int) -> tuple[float, float, float]:
    magnitude = solution.root.abs()
    hue = clamp01(abs(0.5 - solution.root.arg() / TWO_PI))
    sat = clamp01(abs(0.5 / magnitude)) if magnitude != 0.0 else 1.0
    lum = clamp01(abs(0.5 - solution.iter / max_iter))
    return hue, sat, lum


def color_from_solution(solution: Solution, max_iter: int) -> tuple[int, int, int]:
    """Return the 8-bit RGB color of one solution."""

    r, g, b = hsl_to_rgb(*solution_hsl(solution, max_iter))
    return int(r * 255.0), int(g * 255.0), int(b * 255.0)


def render_pixels(solutions: Sequence[Solution], grid: int, max_iter: int) -> np.ndarray:
    """Lay out row-major solutions into a ``(grid, grid, 3)`` uint8 buffer."""

    if len(solutions) != grid * grid:
        raise ValueError(f"expected {grid * grid} solutions, got {len(solutions)}")
    pixels = np.zeros((grid, grid, 3), dtype=np.uint8)
    for k, solution in enumerate(solutions):
        pixels[k // grid, k % grid] = color_from_solution(solution, max_iter)
    return pixels


def _clamp01(v: np.ndarray) -> np.ndarray:
    return np.clip(np.nan_to_num(v, nan=0.0, posinf=1.0, neginf=0.0), 0.0, 1.0)


def _hue_to_rgb(p: np.ndarray, q: np.ndarray, h: np.ndarray) -> np.ndarray:
    h = np.where(h < 0.0, h + 1.0, np.where(h > 1.0, h - 1.0, h))
    return np.select(
        [h < 1.0 / 6.0, h < 1.0 / 2.0, h < 2.0 / 3.0],
        [p + (q - p) * 6.0 * h, q, p + (q - p) * 6.0 * (2.0 / 3.0 - h)],
        default=p,
    )


def colorize(result: FieldSolution) -> np.ndarray:
    """Vectorized color mapping of a whole field into a uint8 pixel buffer."""

    roots = result.roots
    magnitude = np.abs(roots)
    angle = np.angle(roots)
    iterations = result.iterations.astype(np.float64)

    with np.errstate(divide="ignore", invalid="ignore"):
        h = _clamp01(np.abs(0.5 - angle / TWO_PI))
        s = _clamp01(np.abs(0.5 / magnitude))
        l = _clamp01(np.abs(0.5 - iterations / result.max_iterations))

    q = np.where(l < 0.5, l * (1.0 + s), (l + s) - s * l)
    p = 2.0 * l - q
    rgb = np.stack(
        [
            np.maximum(0.0, _hue_to_rgb(p, q, h + 1.0 / 3.0)),
            np.maximum(0.0, _hue_to_rgb(p, q, h)),
            np.maximum(0.0, _hue_to_rgb(p, q, h - 1.0 / 3.0)),
        ],
        axis=-1,
    )
    return np.clip(rgb * 255.0, 0.0, 255.0).astype(np.uint8)
