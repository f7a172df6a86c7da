"""Public API for Newton fractal computation and coloring."""

from .complex import EPSILON, Complex
from .polynomial import InvalidPolynomialError, Polynomial
from .field import DEFAULT_GRID, Field, InvalidFieldError
from .solver import (
    DEFAULT_MAX_ITERATIONS,
    FieldSolution,
    NewtonSolver,
    Solution,
    newton_method_field,
)
from .coloring import color_from_solution, colorize, hsl_to_rgb, render_pixels
from .generator import apply_zoom, compute_zoom_factors, zoom_fields
from .params import RenderRequest, parse_render_request

__all__ = [
    "Complex",
    "DEFAULT_GRID",
    "DEFAULT_MAX_ITERATIONS",
    "EPSILON",
    "Field",
    "FieldSolution",
    "InvalidFieldError",
    "InvalidPolynomialError",
    "NewtonSolver",
    "Polynomial",
    "RenderRequest",
    "Solution",
    "apply_zoom",
    "color_from_solution",
    "colorize",
    "compute_zoom_factors",
    "hsl_to_rgb",
    "newton_method_field",
    "parse_render_request",
    "render_pixels",
    "zoom_fields",
]
