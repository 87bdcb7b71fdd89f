# -*- coding: utf-8 -*-
import sys
import time
from typing import Optional

from tqdm import tqdm

from cropkit.discovery import WorkItem


class RunReport:
    """Console output for a cropping run: settings, one line per image, and the final summary."""

    def __init__(self):
        self.start_time = time.time()

    def elapsed(self) -> float:
        return time.time() - self.start_time

    def print_settings(self, config):
        if config.created_output_dir:
            print(f"Created output directory: {config.absolute_output_dir}")
        print(f"Processing images from: {config.absolute_input_dir}")
        print(f"Cropping to size: {config.size}")
        print(f"Using {config.instances} parallel instances.")
        print(f"Saving to: {config.absolute_output_dir}")

    def item_succeeded(self, item: WorkItem):
        # tqdm.write keeps the progress bar intact
        tqdm.write(f"Cropped: {item.source_path} -> {item.destination_path}")

    def item_failed(self, item: WorkItem, error: str):
        tqdm.write(f"Error cropping {item.source_path}: {error}", file=sys.stderr)

    def print_summary(self, counters, elapsed: Optional[float] = None):
        if elapsed is None:
            elapsed = self.elapsed()
        print(f"Image cropping complete in {elapsed:.2f}s.")
        print(f"Processed {counters.processed} images, failed to process {counters.failed} images.")
