# -*- coding: utf-8 -*-
import os
import logging
import threading
import concurrent.futures
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from PIL import UnidentifiedImageError
from tqdm import tqdm

from cropkit.codec import decode_image, encode_image
from cropkit.discovery import WorkItem
from cropkit.size_spec import SizeSpec
from cropkit.transform import TransformError, crop_to_fill

logger = logging.getLogger(__name__)


@dataclass
class RunCounters:
    """Success/failure tallies shared by all workers. Increments are lock-guarded."""
    processed: int = 0
    failed: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def increment_processed(self):
        with self._lock:
            self.processed += 1

    def increment_failed(self):
        with self._lock:
            self.failed += 1

    @property
    def attempted(self) -> int:
        with self._lock:
            return self.processed + self.failed


@dataclass(frozen=True)
class ItemResult:
    item: WorkItem
    success: bool
    error: Optional[str] = None


def crop_work_item(item: WorkItem, size: SizeSpec, resample_filter: Any,
                   save_options: Optional[Dict[str, Any]] = None, verbose: bool = False) -> ItemResult:
    """
    Decodes, crops and writes a single image. Never raises: every failure becomes a failed ItemResult.
    """
    source_name = os.path.basename(item.source_path)
    logger.debug(f"Processing: '{item.source_path}'")
    try:
        img = decode_image(item.source_path)
        cropped_img = crop_to_fill(img, size, resample_filter)
        encode_image(cropped_img, item.destination_path, save_options)
        logger.debug(f"Image saved successfully: '{item.destination_path}'")
        return ItemResult(item, True)
    except UnidentifiedImageError:
        msg = "Invalid or corrupted image file. Pillow could not identify the image format."
    except PermissionError as e:
        msg = f"File read/write permission denied ({e})."
    except FileNotFoundError as e:
        msg = f"File not found ({e})."
    except OSError as e:
        msg = f"File system or OS-level error occurred ({e})."
    except TransformError as e:
        msg = f"Could not crop image ({e})."
    except ValueError as e:
        msg = f"Image processing value error, likely from Pillow ({e})."
    except Exception as e:
        msg = f"An unexpected error occurred ({type(e).__name__}: {e})."
        logger.critical(f"Processing failed for '{source_name}': {msg}", exc_info=verbose)
        return ItemResult(item, False, msg)
    logger.error(f"Processing failed for '{source_name}': {msg}")
    return ItemResult(item, False, msg)


def _run_work_item(item: WorkItem, config, counters: RunCounters, report) -> ItemResult:
    result = crop_work_item(item, config.size, config.resample_filter, config.save_options, config.verbose)
    if result.success:
        report.item_succeeded(item)
        counters.increment_processed()
    else:
        report.item_failed(item, result.error)
        counters.increment_failed()
    return result


def dispatch_work_items(work_items: List[WorkItem], config, report) -> RunCounters:
    """
    Crops every work item on a pool of `config.instances` threads.

    A failing item never stops the run; when this returns,
    counters.processed + counters.failed == len(work_items).
    """
    counters = RunCounters()
    if not work_items:
        logger.warning("(!) No image files found to process.")
        return counters

    logger.info(f"Starting batch processing of {len(work_items)} images using {config.instances} worker threads...")
    with concurrent.futures.ThreadPoolExecutor(max_workers=config.instances, thread_name_prefix="cropper") as executor:
        futures_map = {
            executor.submit(_run_work_item, item, config, counters, report): item
            for item in work_items
        }
        for future in tqdm(concurrent.futures.as_completed(futures_map), total=len(futures_map),
                           desc="Cropping images", unit="file", disable=not config.show_progress):
            item = futures_map[future]
            try:
                future.result()
            except Exception as exc:
                # Reporting raised before the item was counted.
                logger.critical(f"Task for '{item.source_path}' failed with an unexpected exception: {exc}", exc_info=True)
                counters.increment_failed()
                try:
                    report.item_failed(item, str(exc))
                except Exception as report_exc:
                    logger.error(f"Could not report failure for '{item.source_path}': {report_exc}")

    logger.info(f"Batch processing complete. Success: {counters.processed}, Errors: {counters.failed}")
    return counters
