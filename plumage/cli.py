"""
Command-line entry point.

Usage:
    plumage <name>                 # creates <name>.bmp and <name>.params
    plumage --params my.params out # read params from my.params

Parameters are read from ./params when present. Missing parameters are filled
in with defaults or random values, and the full set is saved next to the
image so the same picture can be generated again.
"""

from __future__ import annotations
import argparse
from pathlib import Path
import sys

from .generate import Generator
from .params import Params, ParamsError, format_params, parse_params

DEFAULT_PARAMS_PATH = Path('params')


def error_exit(message: str):
    """Print an error message and exit with status 1."""
    print(f"error: {message}", file=sys.stderr)
    sys.exit(1)


def read_params(path: Path, required: bool = False) -> Params:
    """
    Read a parameter file, or resolve all defaults if it doesn't exist.

    Raises:
        ParamsError: the file exists but is malformed
        OSError: the file can't be read, or is missing while `required`
    """
    try:
        text = path.read_text(encoding='utf-8')
    except FileNotFoundError:
        if required:
            raise
        text = ""
    except UnicodeDecodeError as e:
        raise ParamsError(f"{path} is not UTF-8 text") from e
    return parse_params(text)


def write_outputs(name: str, params: Params, verbose: bool = True) -> tuple[Path, Path]:
    """
    Save `<name>.params`, then generate `<name>.bmp`.

    Returns:
        (params path, image path)
    """
    params_path = Path(f"{name}.params")
    image_path = Path(f"{name}.bmp")

    params_path.write_text(format_params(params), encoding='utf-8')
    if verbose:
        print(f"Saved params: {params_path}")

    width, height = params.dimensions
    if verbose:
        print(f"Generating {width}x{height} image...")
    generator = Generator(params, verbose=verbose)
    with open(image_path, 'wb') as f:
        generator.generate(f)
    if verbose:
        print(f"Saved image: {image_path}")

    return params_path, image_path


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        prog='plumage',
        description='Generate a colorful picture. Creates <name>.bmp and <name>.params.'
    )
    parser.add_argument('name',
                        help='Output name; ".bmp" and ".params" are appended')
    parser.add_argument('--params', '-p', type=Path, default=None,
                        help=f'Input parameter file (default: ./{DEFAULT_PARAMS_PATH}, if it exists)')
    parser.add_argument('--quiet', '-q', action='store_true',
                        help='Quiet mode')

    args = parser.parse_args(argv)

    try:
        if args.params is None:
            params = read_params(DEFAULT_PARAMS_PATH)
        else:
            params = read_params(args.params, required=True)
    except ParamsError as e:
        error_exit(f"invalid params: {e}")
    except OSError as e:
        error_exit(f"could not read params file: {e}")

    try:
        write_outputs(args.name, params, verbose=not args.quiet)
    except OSError as e:
        error_exit(f"could not write output: {e}")


if __name__ == '__main__':
    main()
