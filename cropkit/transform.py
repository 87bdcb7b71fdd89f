# -*- coding: utf-8 -*-
import logging
from typing import Any, Tuple

from PIL import Image

from cropkit.size_spec import SizeSpec

logger = logging.getLogger(__name__)

FILTER_NAMES = {
    "lanczos": "LANCZOS (High quality)",
    "bicubic": "BICUBIC (Medium quality)",
    "bilinear": "BILINEAR (Low quality)",
    "nearest": "NEAREST (Lowest quality)"
}

PIL_RESAMPLE_FILTERS = {
    "lanczos": Image.Resampling.LANCZOS,
    "bicubic": Image.Resampling.BICUBIC,
    "bilinear": Image.Resampling.BILINEAR,
    "nearest": Image.Resampling.NEAREST
}

DEFAULT_FILTER = "lanczos"


class TransformError(ValueError):
    """Raised when an image cannot be brought to the target size."""
    pass


def _round_div(numerator: int, denominator: int) -> int:
    # Round half up, exact for arbitrarily large integers.
    return (2 * numerator + denominator) // (2 * denominator)


def compute_cover_size(original_width: int, original_height: int, target_width: int, target_height: int) -> Tuple[int, int]:
    """
    Returns the smallest size with the original aspect ratio that covers the target.

    One dimension matches the target exactly, the other is greater than or equal to it.
    """
    if min(original_width, original_height, target_width, target_height) <= 0:
        raise TransformError(
            f"Dimensions must be positive: original {original_width}x{original_height}, "
            f"target {target_width}x{target_height}"
        )

    if original_width * target_height > original_height * target_width:
        # Source is relatively wider: match height, crop width.
        return _round_div(original_width * target_height, original_height), target_height
    # Source is relatively taller or equal: match width, crop height.
    return target_width, _round_div(original_height * target_width, original_width)


def compute_crop_box(resized_width: int, resized_height: int, target_width: int, target_height: int) -> Tuple[int, int, int, int]:
    left = (resized_width - target_width) // 2
    top = (resized_height - target_height) // 2
    if left < 0 or top < 0:
        raise TransformError(
            f"Resized image {resized_width}x{resized_height} is smaller than target {target_width}x{target_height}"
        )
    return left, top, left + target_width, top + target_height


def resize_to_cover(img: Image.Image, target_width: int, target_height: int, resample_filter: Any) -> Image.Image:
    original_width, original_height = img.size
    new_width, new_height = compute_cover_size(original_width, original_height, target_width, target_height)

    if (new_width, new_height) == (original_width, original_height):
        logger.debug("Cover size is the same as original. Skipping resize.")
        return img
    img = prepare_mode_for_resample(img, resample_filter)
    logger.debug(f"Resizing (cover): ({original_width},{original_height}) -> ({new_width},{new_height})")
    return img.resize((new_width, new_height), resample_filter)


def prepare_mode_for_resample(img: Image.Image, resample_filter: Any) -> Image.Image:
    """
    Converts palette and bilevel images to modes Pillow can filter.

    Image.resize silently uses NEAREST for "P" and "1", whatever filter is requested.
    """
    if resample_filter == Image.Resampling.NEAREST:
        return img
    if img.mode == "P":
        converted = img.convert("RGBA") if "transparency" in img.info else img.convert("RGB")
    elif img.mode == "1":
        converted = img.convert("L")
    else:
        return img
    logger.debug(f"Converted '{img.mode}' to '{converted.mode}' for resampling.")
    return converted


def center_crop(img: Image.Image, target_width: int, target_height: int) -> Image.Image:
    box = compute_crop_box(img.width, img.height, target_width, target_height)
    logger.debug(f"Cropping ({img.width},{img.height}) to box {box}")
    return img.crop(box)


def crop_to_fill(img: Image.Image, size: SizeSpec, resample_filter: Any = PIL_RESAMPLE_FILTERS[DEFAULT_FILTER]) -> Image.Image:
    """
    Resizes an image to cover `size` while keeping its aspect ratio, then center-crops it.

    The result is always exactly size.width x size.height. An image that already has the
    target size comes back pixel-identical. Works purely in memory.
    """
    resized = resize_to_cover(img, size.width, size.height, resample_filter)
    cropped = center_crop(resized, size.width, size.height)
    if cropped.size != (size.width, size.height):
        raise TransformError(f"Cropped image is {cropped.size}, expected {size.width}x{size.height}")
    return cropped
