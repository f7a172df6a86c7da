"""Utilities for planning Newton fractal zoom sequences."""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Iterator

import numpy as np

from .complex import Complex
from .field import Field


def compute_zoom_factors(frames: int, zoom_factor: float, *, final_zoom: float | None = None, easing: str = "ease") -> np.ndarray:
    """Compute per-frame zoom multipliers for the animation."""

    if frames <= 0:
        return np.array([], dtype=np.float64)

    if final_zoom is not None and final_zoom > 0:
        log_target = np.log(final_zoom)

        def ease_in_out(t: float) -> float:
            return 3 * t ** 2 - 2 * t ** 3

        ease = (lambda u: u) if easing.lower() == "linear" else ease_in_out
        if frames == 1:
            alphas = np.array([1.0], dtype=np.float64)
        else:
            alphas = np.array([ease(i / (frames - 1)) for i in range(frames)], dtype=np.float64)
        alphas = np.clip(alphas, 0.0, 1.0)
        increments = np.diff(np.concatenate(([0.0], alphas)))
        return np.exp(increments * log_target)

    return np.full(frames, np.float64(zoom_factor), dtype=np.float64)


def apply_zoom(field: Field, zoom_factor: float) -> Field:
    """Scale the window side by ``zoom_factor`` keeping its center fixed."""

    center = field.center
    size = float(np.float64(field.size) * np.float64(zoom_factor))
    source = center - Complex(size / 2.0, size / 2.0)
    return replace(field, source=source, size=size)


def zoom_fields(field: Field, factors: Iterable[float]) -> Iterator[Field]:
    """Yield the field of every frame, one per factor.

    The first frame is ``field`` itself; frame ``n`` is zoomed by the
    factors of frames ``1..n``.
    """

    for index, factor in enumerate(factors):
        if index:
            field = apply_zoom(field, factor)
        yield field
