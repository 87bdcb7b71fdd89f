# -*- coding: utf-8 -*-
import os
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Tuple

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.gif', '.webp')


@dataclass(frozen=True)
class WorkItem:
    """One image to convert. Outputs are flat: only the source's base name is kept."""
    source_path: str
    destination_path: str


def destination_for(source_path: str, output_dir: str) -> str:
    return os.path.join(output_dir, os.path.basename(source_path))


def find_destination_collisions(work_items: List[WorkItem]) -> Dict[str, List[str]]:
    """Maps each destination shared by more than one source to those sources."""
    sources_by_destination = defaultdict(list)
    for item in work_items:
        sources_by_destination[item.destination_path].append(item.source_path)
    return {dest: sources for dest, sources in sources_by_destination.items() if len(sources) > 1}


def scan_for_image_files(input_dir: str, output_dir: str) -> Tuple[List[WorkItem], List[str]]:
    """
    Recursively collects supported image files under input_dir.

    Symlinked directories are not descended into, so link cycles cannot loop the walk.
    Unsupported files are skipped silently; the reasons are returned for verbose output.

    Returns:
        (work_items, skipped_reasons)
    """
    work_items = []
    skipped_scan_items_reasons = []

    logger.info(f"Scanning input folder: '{input_dir}'")
    for root, dirnames, filenames in os.walk(input_dir, followlinks=False):
        dirnames.sort()
        for filename in sorted(filenames):
            full_path = os.path.join(root, filename)
            relative_path = os.path.relpath(full_path, input_dir)

            if not os.path.isfile(full_path):
                skipped_scan_items_reasons.append(f"Skipped '{relative_path}': Not a regular file.")
                continue

            file_ext = os.path.splitext(filename)[1].lower()
            if not file_ext:
                skipped_scan_items_reasons.append(f"Skipped '{relative_path}': No file extension.")
                continue
            if file_ext not in SUPPORTED_EXTENSIONS:
                skipped_scan_items_reasons.append(f"Skipped '{relative_path}': Extension '{file_ext}' is not supported.")
                continue

            work_items.append(WorkItem(full_path, destination_for(full_path, output_dir)))
            logger.debug(f"Queued '{relative_path}' for processing.")

    for destination, sources in find_destination_collisions(work_items).items():
        # Flat output layout: the last source written wins.
        logger.warning(
            f"{len(sources)} source files share the output name '{os.path.basename(destination)}' "
            f"and will overwrite each other: {', '.join(sources)}"
        )

    logger.info(f"Scan complete: Found {len(work_items)} files to process. Skipped {len(skipped_scan_items_reasons)} other items.")
    if logger.isEnabledFor(logging.DEBUG):
        for item_reason in skipped_scan_items_reasons:
            logger.debug(f"  - {item_reason}")
    return work_items, skipped_scan_items_reasons
