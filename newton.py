import os
import sys
from dataclasses import dataclass
from pathlib import Path

_VERBOSE_FLAGS = {"--verbose", "-v"}
_cli_verbose = any(arg in _VERBOSE_FLAGS for arg in sys.argv[1:])
_env_log_level = os.environ.get("TF_CPP_MIN_LOG_LEVEL")
_suppress_messages = (not _cli_verbose) and _env_log_level != "0"

if _suppress_messages and _env_log_level is None:
    os.environ["TF_CPP_MIN_LOG_LEVEL"] = "3"

VERBOSE = _cli_verbose


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


import tensorflow as tf
import numpy as np

if _suppress_messages:
    tf.get_logger().setLevel("ERROR")
    for handler in tf.get_logger().handlers:
        handler.setLevel("ERROR")

import imageio

from newtonfractal import (
    DEFAULT_GRID,
    DEFAULT_MAX_ITERATIONS,
    Complex,
    Field,
    NewtonSolver,
    Polynomial,
    RenderRequest,
    colorize,
    compute_zoom_factors,
    zoom_fields,
)
from newtonfractal.imaging import to_image, write_single_image
from newtonfractal.params import DEFAULT_SIZE, DEFAULT_SOURCE_IM, DEFAULT_SOURCE_RE, parse_render_request

from argparse import ArgumentParser


def select_device():
    """Place the vectorized solver on the first GPU when one is visible."""

    gpus = tf.config.list_physical_devices('GPU')
    if not gpus:
        log("No GPU found, using CPU")
        return '/CPU:0'
    try:
        for gpu in gpus:
            tf.config.experimental.set_memory_growth(gpu, True)
    except RuntimeError as e:
        log(e)
        return '/CPU:0'
    log("GPU found, using %s" % gpus[0].name)
    return '/GPU:0'


@dataclass
class OutputConfig:
    mode: str
    output_path: Path
    image_format: str


def build_parser():
    parser = ArgumentParser(description='Render the Newton fractal of an integer polynomial.')

    parser.add_argument('--pol', type=str, dest='pol',
                        help='comma separated integer coefficients, constant term first (e.g. --pol=-1,0,0,1 for z^3 - 1)',
                        metavar='COEFFICIENTS')

    parser.add_argument('--query', type=str, dest='query',
                        help='query string in the service form "pol=-1,0,0,1&tx=-5&ty=-5&tw=10"; overrides --pol/--tx/--ty/--tw',
                        metavar='QUERY')

    parser.add_argument('--tx', type=float, dest='tx', help='real part of the lower corner of the window',
                        metavar='TX', default=DEFAULT_SOURCE_RE)

    parser.add_argument('--ty', type=float, dest='ty', help='imaginary part of the lower corner of the window',
                        metavar='TY', default=DEFAULT_SOURCE_IM)

    parser.add_argument('--tw', type=float, dest='tw', help='side length of the window in the complex plane',
                        metavar='TW', default=DEFAULT_SIZE)

    parser.add_argument('--grid', type=int, dest='grid', help='samples per side of the window',
                        metavar='GRID', default=DEFAULT_GRID)

    parser.add_argument('--max-iterations', type=int, dest='max_iterations',
                        help='maximum number of Newton steps per sample',
                        metavar='MAX_ITERATIONS', default=DEFAULT_MAX_ITERATIONS)

    parser.add_argument('--backend', choices=['python', 'tensorflow'], default='tensorflow',
                        help='"python" iterates point by point, "tensorflow" iterates the whole grid at once.')

    parser.add_argument('--workers', type=int, default=1,
                        help='worker processes for the python backend.')

    parser.add_argument('--mode', choices=['image', 'gif'], default='image',
                        help='"image" writes one frame, "gif" writes a zoom animation.')

    parser.add_argument('--frames', type=int, dest='frames', help='number of frames in gif mode',
                        metavar='FRAMES', default=30)

    parser.add_argument('--zoom-factor', type=float, dest='zoom_factor',
                        help='the factor by which to multiply the window size each frame. Choose < 1 for zoom in, >1 for zoom out',
                        metavar='ZOOM_FACTOR', default=0.9)

    parser.add_argument('--final-zoom', type=float, default=None,
                        help='Overall scale applied by the last frame. If set, overrides --zoom-factor.')

    parser.add_argument('--easing', type=str, default='ease',
                        help='Temporal curve used for variable zoom: "linear" or "ease" for smooth ease-in-out.')

    parser.add_argument('--format', type=str, dest='format',
                        help='file format for image mode. Can be any extension supported by Pillow. Default: "png".',
                        metavar='FORMAT', default='png')

    parser.add_argument('--output', dest='output', type=str, help='Destination file.')

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including TensorFlow and hardware diagnostics.')

    return parser


def resolve_output_config(opt, parser):
    image_format = (opt.format or "png").lower().lstrip(".") or "png"
    if opt.mode == "gif":
        output_path = Path(opt.output or "newton.gif").expanduser()
        if output_path.suffix and output_path.suffix.lower() != ".gif":
            parser.error("GIF outputs must end with .gif.")
        output_path = output_path.with_suffix(".gif")
    else:
        output_path = Path(opt.output or f"newton.{image_format}").expanduser()
        expected_suffix = f".{image_format}"
        if output_path.suffix:
            if output_path.suffix.lower() != expected_suffix:
                parser.error(f"--output extension {output_path.suffix} does not match --format {image_format}.")
        else:
            output_path = output_path.with_suffix(expected_suffix)
    return OutputConfig(mode=opt.mode, output_path=output_path.resolve(), image_format=image_format)


def resolve_request(opt, parser):
    try:
        if opt.query:
            return parse_render_request(opt.query, grid=opt.grid, max_iterations=opt.max_iterations)
        if not opt.pol:
            parser.error("one of --pol or --query is required.")
        polynomial = Polynomial.parse(opt.pol)
        field = Field(source=Complex(opt.tx, opt.ty), size=opt.tw, grid=opt.grid)
        polynomial.validate()
        field.validate()
    except ValueError as exc:
        parser.error(str(exc))
    return RenderRequest(polynomial=polynomial, field=field, max_iterations=opt.max_iterations)


def render(solver, field, opt, device):
    if opt.backend == "tensorflow":
        result = solver.solve_tensor(field, device=device)
    else:
        result = solver.solve_field(field, workers=opt.workers)
    return colorize(result)


def main():
    parser = build_parser()
    opt = parser.parse_args()

    global VERBOSE
    VERBOSE = bool(opt.verbose)
    log("TensorFlow version: %s" % tf.__version__)

    if opt.workers < 1:
        parser.error("--workers must be at least 1.")
    if opt.mode == "gif" and opt.frames < 1:
        parser.error("--frames must be at least 1 in gif mode.")

    output_config = resolve_output_config(opt, parser)
    request = resolve_request(opt, parser)
    polynomial, field = request.polynomial, request.field

    try:
        solver = NewtonSolver(polynomial, request.max_iterations)
    except ValueError as exc:
        parser.error(str(exc))

    device = select_device() if opt.backend == "tensorflow" else None
    log("Polynomial %s on field %s, backend %s" % (polynomial, field, opt.backend))
    output_config.output_path.parent.mkdir(parents=True, exist_ok=True)

    if output_config.mode == "image":
        pixels = render(solver, field, opt, device)
        write_single_image(to_image(pixels), output_config.output_path, output_config.image_format)
        log("Wrote %s" % output_config.output_path)
        return

    factors = compute_zoom_factors(opt.frames, opt.zoom_factor, final_zoom=opt.final_zoom, easing=opt.easing)
    writer = imageio.get_writer(str(output_config.output_path), mode='I', duration=0.1, loop=0)
    try:
        for i, frame_field in enumerate(zoom_fields(field, factors)):
            print("frame {0} out of {1}".format(i, opt.frames), end='\r')
            writer.append_data(np.asarray(render(solver, frame_field, opt, device)))
    finally:
        writer.close()
    log("Wrote %s" % output_config.output_path)


if __name__ == '__main__':
    main()
