"""
Batch generation: many images sharing one parameter file.

Images are independent, so a batch can be spread over worker processes.
Each image is still generated sequentially inside its own worker.
"""

from __future__ import annotations
from concurrent.futures import ProcessPoolExecutor
from pathlib import Path

from PIL import Image

from .cli import write_outputs
from .params import parse_params


def convert_to_png(bmp_path: Path) -> Path:
    """Convert a BMP to PNG next to it and remove the BMP."""
    png_path = bmp_path.with_suffix('.png')
    with Image.open(bmp_path) as img:
        img.convert('RGB').save(png_path, format='PNG')
    bmp_path.unlink()
    return png_path


def _generate_one(name: str, params_text: str, png: bool) -> Path:
    # Parsed per image so that random defaults differ between images.
    params = parse_params(params_text)
    _, image_path = write_outputs(name, params, verbose=False)
    if png:
        image_path = convert_to_png(image_path)
    return image_path


def batch_names(output_dir: Path, count: int) -> list[str]:
    """out1..outN, zero-padded to the width of `count`."""
    digits = len(str(count))
    return [str(output_dir / f"out{i:0{digits}d}") for i in range(1, count + 1)]


def generate_batch(output_dir: Path, count: int, params_text: str = "",
                   png: bool = False, verbose: bool = True,
                   jobs: int = 1) -> list[Path]:
    """
    Generate `count` images in `output_dir`.

    Args:
        output_dir: Output directory (created if missing)
        count: Number of images
        params_text: Parameter file contents shared by every image
        png: Convert each image to PNG
        verbose: Print progress
        jobs: Number of worker processes; 1 generates in this process

    Returns:
        Paths of the generated images, in name order

    Raises:
        ParamsError: if `params_text` is invalid (checked before any image
                     is written)
        ValueError: if `jobs` is less than 1
    """
    if jobs < 1:
        raise ValueError(f"jobs must be at least 1, got {jobs}")
    parse_params(params_text)
    output_dir.mkdir(parents=True, exist_ok=True)
    names = batch_names(output_dir, count)

    images = []
    if jobs == 1:
        for name in names:
            image_path = _generate_one(name, params_text, png)
            images.append(image_path)
            if verbose:
                print(f"  {image_path}")
        return images

    with ProcessPoolExecutor(max_workers=jobs) as pool:
        futures = [pool.submit(_generate_one, name, params_text, png) for name in names]
        for future in futures:
            image_path = future.result()
            images.append(image_path)
            if verbose:
                print(f"  {image_path}")
    return images
