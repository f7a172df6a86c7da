"""Translate query-string parameters into solver inputs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping
from urllib.parse import parse_qsl

from .complex import Complex
from .field import DEFAULT_GRID, Field
from .polynomial import InvalidPolynomialError, Polynomial
from .solver import DEFAULT_MAX_ITERATIONS

DEFAULT_SOURCE_RE = -5.0
DEFAULT_SOURCE_IM = -5.0
DEFAULT_SIZE = 10.0


@dataclass(frozen=True)
class RenderRequest:
    """Everything needed to render one image."""

    polynomial: Polynomial
    field: Field
    max_iterations: int = DEFAULT_MAX_ITERATIONS


def parse_query(query: str) -> dict[str, str]:
    params: dict[str, str] = {}
    for key, value in parse_qsl(query.lstrip("?"), keep_blank_values=True):
        params.setdefault(key, value)
    return params


def parse_param_float(params: Mapping[str, str], name: str, default: float) -> float:
    value = params.get(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def parse_field_params(params: Mapping[str, str], grid: int = DEFAULT_GRID) -> Field:
    tw = parse_param_float(params, "tw", DEFAULT_SIZE)
    tx = parse_param_float(params, "tx", DEFAULT_SOURCE_RE)
    ty = parse_param_float(params, "ty", DEFAULT_SOURCE_IM)
    return Field(source=Complex(tx, ty), size=tw, grid=grid)


def parse_polynomial_param(params: Mapping[str, str]) -> Polynomial:
    text = params.get("pol")
    if not text:
        raise InvalidPolynomialError("missing 'pol' parameter")
    return Polynomial.parse(text)


def parse_render_request(
    query: str,
    grid: int = DEFAULT_GRID,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> RenderRequest:
    """Build a validated request from a query string like ``pol=-1,0,0,1&tw=4``."""

    params = parse_query(query)
    polynomial = parse_polynomial_param(params)
    field = parse_field_params(params, grid=grid)
    polynomial.validate()
    field.validate()
    return RenderRequest(polynomial=polynomial, field=field, max_iterations=max_iterations)
