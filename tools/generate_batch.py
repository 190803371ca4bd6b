#!/usr/bin/env python3
"""
Generate a batch of plumage images.

Each image gets its own random seed and start color unless the parameter
file fixes them. Outputs are named out001.bmp, out002.bmp, ... (zero-padded
to the width of COUNT), each with its .params file. With --png the bitmaps
are converted to PNG and removed. Images are generated in parallel, one
per worker process (--jobs, default: number of CPUs).

Usage:
    python tools/generate_batch.py out 100 --png
    python tools/generate_batch.py out 10 --params params.example --jobs 2
"""

import argparse
import os
from pathlib import Path

from plumage.batch import generate_batch
from plumage.cli import error_exit
from plumage.params import ParamsError


def main(argv=None):
    parser = argparse.ArgumentParser(description='Generate a batch of plumage images')
    parser.add_argument('output_dir', type=Path,
                        help='Output directory')
    parser.add_argument('count', type=int,
                        help='Number of images to generate')
    parser.add_argument('--params', '-p', type=Path, default=None,
                        help='Parameter file shared by all images (default: ./params, if it exists)')
    parser.add_argument('--png', action='store_true',
                        help='Convert images to PNG and remove the bitmaps')
    parser.add_argument('--jobs', '-j', type=int, default=os.cpu_count() or 1,
                        help='Number of images generated in parallel (default: number of CPUs)')
    parser.add_argument('--quiet', '-q', action='store_true',
                        help='Quiet mode')

    args = parser.parse_args(argv)
    if args.count < 0:
        parser.error("count must not be negative")
    if args.jobs < 1:
        parser.error("jobs must be at least 1")

    params_path = args.params if args.params is not None else Path('params')
    try:
        params_text = params_path.read_text(encoding='utf-8')
    except FileNotFoundError:
        if args.params is not None:
            error_exit(f"params file not found: {params_path}")
        params_text = ""

    if not args.quiet:
        print(f"Generating {args.count} images ({args.jobs} jobs)...")
        print(f"  Output: {args.output_dir}")
        print()

    try:
        generate_batch(args.output_dir, args.count, params_text,
                       png=args.png, verbose=not args.quiet, jobs=args.jobs)
    except ParamsError as e:
        error_exit(f"invalid params: {e}")
    except OSError as e:
        error_exit(f"could not write output: {e}")

    if not args.quiet:
        print()
        print("Done!")


if __name__ == '__main__':
    main()
