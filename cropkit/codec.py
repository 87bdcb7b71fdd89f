# -*- coding: utf-8 -*-
import os
import logging
from typing import Any, Dict, Optional

from PIL import Image

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_FORMAT = "PNG"
DEFAULT_JPG_QUALITY = 95
DEFAULT_WEBP_QUALITY = 80


def decode_image(input_path: str) -> Image.Image:
    """Opens and fully loads an image so the returned object no longer holds the file open."""
    with Image.open(input_path) as img:
        img.load()
        logger.debug(f"Image loaded: '{input_path}' (Size: {img.size}, Mode: {img.mode})")
        return img


def output_format_for(output_path: str) -> str:
    """Returns the Pillow format name implied by the path's extension, PNG when unknown."""
    file_ext = os.path.splitext(output_path)[1].lower()
    if not file_ext:
        return DEFAULT_OUTPUT_FORMAT
    output_format = Image.registered_extensions().get(file_ext)
    if output_format is None or output_format not in Image.SAVE:
        logger.debug(f"No encoder registered for '{file_ext}', falling back to {DEFAULT_OUTPUT_FORMAT}")
        return DEFAULT_OUTPUT_FORMAT
    return output_format


def prepare_image_for_save(img: Image.Image, output_format: str) -> Image.Image:
    save_img = img
    original_mode = img.mode

    if output_format == "JPEG":
        if img.mode in ("RGBA", "LA", "P", "PA"):
            # Flatten transparency onto white; JPEG has no alpha channel.
            rgba = img.convert("RGBA")
            background = Image.new("RGB", img.size, (255, 255, 255))
            background.paste(rgba, mask=rgba.getchannel("A"))
            save_img = background
        elif img.mode not in ("RGB", "L", "CMYK"):
            save_img = img.convert("RGB")
    elif output_format == "WEBP":
        if img.mode == "P":
            save_img = img.convert("RGBA") if "transparency" in img.info else img.convert("RGB")

    if save_img.mode != original_mode:
        logger.debug(f"Image mode converted: '{original_mode}' -> '{save_img.mode}' (Target output format: {output_format})")
    return save_img


def build_save_kwargs(output_format: str, save_options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    options = save_options or {}
    save_kwargs = {}
    if output_format == "JPEG":
        save_kwargs["quality"] = options.get("jpg_quality", DEFAULT_JPG_QUALITY)
        save_kwargs["optimize"] = True
        save_kwargs["progressive"] = True
    elif output_format == "WEBP":
        save_kwargs["quality"] = options.get("webp_quality", DEFAULT_WEBP_QUALITY)
    elif output_format == "PNG":
        save_kwargs["optimize"] = True
    return save_kwargs


def encode_image(img: Image.Image, output_path: str, save_options: Optional[Dict[str, Any]] = None) -> str:
    """
    Writes `img` to `output_path` in the format implied by its extension.

    A partially written file is removed before the error propagates.
    Returns the Pillow format name that was used.
    """
    output_format = output_format_for(output_path)
    save_img = prepare_image_for_save(img, output_format)
    save_kwargs = build_save_kwargs(output_format, save_options)

    logger.debug(f"Attempting to save image: '{output_path}' (Format: {output_format}) with kwargs keys: {list(save_kwargs.keys())}")
    try:
        save_img.save(output_path, format=output_format, **save_kwargs)
    except (OSError, ValueError):
        if os.path.exists(output_path):
            try:
                os.remove(output_path)
                logger.warning(f"Removed partially written output file: '{output_path}'")
            except OSError as rm_e:
                logger.error(f"Could not remove partially written output file '{output_path}': {rm_e}")
        raise
    return output_format
