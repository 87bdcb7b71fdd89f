# -*- coding: utf-8 -*-
import os
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from cropkit.codec import DEFAULT_JPG_QUALITY, DEFAULT_WEBP_QUALITY
from cropkit.size_spec import SizeSpec, SizeSpecError, parse_size
from cropkit.transform import DEFAULT_FILTER, FILTER_NAMES, PIL_RESAMPLE_FILTERS

log_formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(threadName)s: %(message)s', datefmt='%Y-%m-%d %H:%M:%S')

log_handler = logging.StreamHandler()
log_handler.setFormatter(log_formatter)

logger = logging.getLogger("cropkit")
if not logger.hasHandlers():
    logger.addHandler(log_handler)
    logger.setLevel(logging.WARNING)

MIN_INSTANCES = 1
MAX_INSTANCES = 64
DEFAULT_INSTANCES = 4


class CropConfigError(Exception):
    """Invalid run configuration. Raised before any image is processed."""
    pass


def setup_logging(level: int):
    logger.setLevel(level)


@dataclass
class Config:
    """
    Settings for one cropping run.

    Validation happens in __post_init__, in this order: size string, numeric options,
    input directory, output directory. The output directory is only created once
    everything before it is valid, so a bad size or a missing input leaves the disk untouched.
    """
    input_dir: str
    output_dir: str
    size_str: str
    instances: int = DEFAULT_INSTANCES
    filter: str = DEFAULT_FILTER
    jpg_quality: int = DEFAULT_JPG_QUALITY
    webp_quality: int = DEFAULT_WEBP_QUALITY
    show_progress: bool = True
    verbose: bool = False

    # Derived in __post_init__
    size: Optional[SizeSpec] = field(init=False, default=None)
    absolute_input_dir: str = field(init=False, default='')
    absolute_output_dir: str = field(init=False, default='')
    created_output_dir: bool = field(init=False, default=False)
    resample_filter: Any = field(init=False, default=None)
    save_options: Dict[str, Any] = field(init=False, default_factory=dict)

    def __post_init__(self):
        if self.verbose:
            setup_logging(logging.DEBUG)
            logger.debug("Verbose logging enabled via Config.")
        self._parse_size()
        self._prepare_options()
        self._validate_paths()

    def _parse_size(self):
        try:
            self.size = parse_size(self.size_str)
        except SizeSpecError as e:
            raise CropConfigError(str(e)) from e

    def _prepare_options(self):
        if not (MIN_INSTANCES <= self.instances <= MAX_INSTANCES):
            raise CropConfigError(f"Number of instances must be between {MIN_INSTANCES} and {MAX_INSTANCES}, got {self.instances}.")
        if self.filter not in FILTER_NAMES:
            raise CropConfigError(f"Unknown resampling filter '{self.filter}'. Choose from: {', '.join(FILTER_NAMES)}.")
        if not (1 <= self.jpg_quality <= 100):
            raise CropConfigError(f"JPEG quality must be between 1 and 100, got {self.jpg_quality}.")
        if not (1 <= self.webp_quality <= 100):
            raise CropConfigError(f"WEBP quality must be between 1 and 100, got {self.webp_quality}.")

        self.resample_filter = PIL_RESAMPLE_FILTERS[self.filter]
        self.save_options = {
            'jpg_quality': self.jpg_quality,
            'webp_quality': self.webp_quality,
        }
        logger.debug(f"Options prepared: filter={self.filter}, save_options={self.save_options}")

    def _validate_paths(self):
        if not os.path.isdir(self.input_dir):
            raise CropConfigError(f"Input directory not found: {self.input_dir}")
        self.absolute_input_dir = os.path.abspath(self.input_dir)
        self.absolute_output_dir = os.path.abspath(self.output_dir)

        if os.path.isdir(self.absolute_output_dir):
            logger.debug(f"Output folder already exists: '{self.absolute_output_dir}'")
            return
        try:
            os.makedirs(self.absolute_output_dir)
        except OSError as e:
            raise CropConfigError(f"Cannot create output directory: {self.absolute_output_dir} ({e})") from e
        self.created_output_dir = True
        logger.info(f"Created output folder: '{self.absolute_output_dir}'")
