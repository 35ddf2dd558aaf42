import os
import re
import sys
import time
import warnings
from argparse import ArgumentParser
from dataclasses import dataclass
from pathlib import Path

from mandelgray import (
    new_buffer,
    parse_bounds,
    parse_complex,
    render,
    render_parallel,
    resolve_format,
    write_image,
)

VERBOSE = False


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


USAGE = """%(prog)s [-h] [-v] [--workers N] [--backend {python,tensorflow}] [--format FORMAT] FILE PIXELS UPPERLEFT LOWERRIGHT
example: %(prog)s mandel.png 1000x750 -1.20,0.35 -1,0.20"""

BACKENDS = ("python", "tensorflow")


@dataclass
class RenderConfig:
    output_path: Path
    bounds: tuple[int, int]
    upper_left: complex
    lower_right: complex
    backend: str
    workers: int
    image_format: str


class _ArgumentParser(ArgumentParser):
    """Argument parser that reads coordinates such as ``-1.20,0.35`` as positionals."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # argparse classifies a "-"-prefixed argument as a positional only when
        # _negative_number_matcher.match() succeeds (CPython 3.9 through 3.14).
        # The stock pattern stops at plain numbers, so "-1.20,0.35" would be
        # taken for an unknown option.
        self._negative_number_matcher = re.compile(r"^-\.?\d")


def build_parser():
    parser = _ArgumentParser(prog="mandel", usage=USAGE,
                             description='Render a rectangle of the Mandelbrot set as a grayscale image.')

    parser.add_argument('file', metavar='FILE',
                        help='image file to write; the format follows the extension unless --format is given')

    parser.add_argument('pixels', metavar='PIXELS',
                        help='image size in pixels, as WIDTHxHEIGHT (e.g. 1000x750)')

    parser.add_argument('upper_left', metavar='UPPERLEFT',
                        help='complex point at the upper-left corner of the image, as RE,IM')

    parser.add_argument('lower_right', metavar='LOWERRIGHT',
                        help='complex point at the lower-right corner of the image, as RE,IM')

    parser.add_argument('--workers', type=int,
                        dest='workers', help='number of processes rendering bands of rows in parallel',
                        metavar='N', default=1)

    parser.add_argument('--backend', choices=BACKENDS, default='python',
                        help='"python" evaluates pixel by pixel; "tensorflow" evaluates the whole grid at once.')

    parser.add_argument('--format', type=str,
                        dest='format', help='file format for the image. Can be any format Pillow writes. Default: from FILE, else "png".',
                        metavar='FORMAT', default=None)

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including TensorFlow and hardware diagnostics.')

    return parser


def resolve_render_config(opt, parser: ArgumentParser) -> RenderConfig:
    bounds = parse_bounds(opt.pixels)
    if bounds is None:
        parser.error(f"error parsing image dimensions '{opt.pixels}': expected WIDTHxHEIGHT with positive integers.")

    upper_left = parse_complex(opt.upper_left)
    if upper_left is None:
        parser.error(f"error parsing upper left corner point '{opt.upper_left}': expected RE,IM.")

    lower_right = parse_complex(opt.lower_right)
    if lower_right is None:
        parser.error(f"error parsing lower right corner point '{opt.lower_right}': expected RE,IM.")

    if opt.workers < 1:
        parser.error("--workers must be at least 1.")
    if opt.backend != "python" and opt.workers != 1:
        parser.error("--workers only applies to the python backend.")

    output_path = Path(opt.file).expanduser()
    if output_path.exists() and output_path.is_dir():
        parser.error("FILE must point to a file, not a directory.")

    try:
        image_format = resolve_format(output_path, opt.format)
    except ValueError as exc:
        parser.error(str(exc))

    return RenderConfig(
        output_path=output_path.resolve(),
        bounds=bounds,
        upper_left=upper_left,
        lower_right=lower_right,
        backend=opt.backend,
        workers=opt.workers,
        image_format=image_format,
    )


def _load_tensor_backend(parser: ArgumentParser):
    """Import the TensorFlow backend, keeping TensorFlow quiet unless verbose."""

    env_log_level = os.environ.get("TF_CPP_MIN_LOG_LEVEL")
    suppress_messages = (not VERBOSE) and env_log_level != "0"

    if suppress_messages and env_log_level is None:
        os.environ["TF_CPP_MIN_LOG_LEVEL"] = "3"

    if suppress_messages:
        warnings.filterwarnings(
            "ignore",
            message=r"Protobuf gencode version .* is exactly one major version older than the runtime version .*",
            category=UserWarning,
            module="google.protobuf",
        )

    try:
        import tensorflow as tf
        from mandelgray.tensor import render_tensor, select_device
    except ImportError as exc:
        parser.error(f"the tensorflow backend needs TensorFlow installed ({exc}).")

    if suppress_messages:
        tf.get_logger().setLevel("ERROR")

    log("TensorFlow version: %s" % tf.__version__)
    return render_tensor, select_device(log)


def main(argv=None):
    global VERBOSE

    parser = build_parser()
    opt = parser.parse_args(argv)
    VERBOSE = opt.verbose
    config = resolve_render_config(opt, parser)

    width, height = config.bounds
    log("Rendering %dx%d pixels from %s to %s" % (width, height, config.upper_left, config.lower_right))

    pixels = new_buffer(config.bounds)
    started = time.perf_counter()
    if config.backend == "tensorflow":
        render_tensor, device = _load_tensor_backend(parser)
        render_tensor(pixels, config.bounds, config.upper_left, config.lower_right, device=device)
    elif config.workers > 1:
        log("Using %d worker processes" % config.workers)
        render_parallel(pixels, config.bounds, config.upper_left, config.lower_right, workers=config.workers)
    else:
        render(pixels, config.bounds, config.upper_left, config.lower_right)
    log("Rendered in %.2fs" % (time.perf_counter() - started))

    try:
        output_path = write_image(config.output_path, pixels, config.bounds, config.image_format)
    except (OSError, ValueError) as exc:
        parser.exit(1, f"{parser.prog}: error writing image file '{config.output_path}': {exc}\n")

    log("Saved %s image to %s" % (config.image_format, output_path))


if __name__ == '__main__':
    sys.exit(main())
