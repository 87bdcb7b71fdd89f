# -*- coding: utf-8 -*-
import sys
import argparse
import logging

from cropkit.codec import DEFAULT_JPG_QUALITY, DEFAULT_WEBP_QUALITY
from cropkit.config import (
    Config,
    CropConfigError,
    setup_logging,
    MIN_INSTANCES,
    MAX_INSTANCES,
    DEFAULT_INSTANCES,
)
from cropkit.discovery import scan_for_image_files
from cropkit.dispatch import dispatch_work_items
from cropkit.report import RunReport
from cropkit.transform import DEFAULT_FILTER, FILTER_NAMES

__version__ = "1.0.0"


def get_parser():
    parser = argparse.ArgumentParser(
        description="Batch crop images to a fixed size (resize to cover, then center crop).",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("-i", "--input-dir", required=True,
                        help="Input directory containing images (scanned recursively).")
    parser.add_argument("-o", "--output-dir", required=True,
                        help="Output directory for cropped images (created if missing).")
    parser.add_argument("-s", "--size", required=True,
                        help="Crop size in WxH format (e.g., 400x300).")
    parser.add_argument("-c", "--instances", type=int,
                        choices=range(MIN_INSTANCES, MAX_INSTANCES + 1),
                        metavar=f"[{MIN_INSTANCES}-{MAX_INSTANCES}]",
                        default=DEFAULT_INSTANCES,
                        help=f"Number of parallel instances (Default: {DEFAULT_INSTANCES}).")

    optional_group = parser.add_argument_group('Other Optional Options')
    optional_group.add_argument("--filter",
                                default=DEFAULT_FILTER,
                                choices=FILTER_NAMES.keys(),
                                help=f"Resampling filter for resizing (default: {DEFAULT_FILTER}):\n" +
                                     "\n".join([f"  {k}: {v}" for k, v in FILTER_NAMES.items()]))
    optional_group.add_argument("-q", "--jpeg-quality", type=int, dest='jpg_quality',
                                choices=range(1, 101), metavar="[1-100]",
                                default=DEFAULT_JPG_QUALITY,
                                help=f"Quality for JPG output (Default: {DEFAULT_JPG_QUALITY}).")
    optional_group.add_argument("--webp-quality", type=int,
                                choices=range(1, 101), metavar="[1-100]",
                                default=DEFAULT_WEBP_QUALITY,
                                help=f"Quality for WEBP output (Default: {DEFAULT_WEBP_QUALITY}).")
    optional_group.add_argument("--no-progress", dest='show_progress', action='store_false',
                                help="Do not display the progress bar.")
    optional_group.add_argument("-v", "--verbose", action="store_true",
                                help="Enable verbose (DEBUG level) logging for detailed output.")
    optional_group.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def run(config: Config) -> int:
    """Scans, crops and reports. Returns the number of images that failed."""
    report = RunReport()
    report.print_settings(config)

    work_items, _skipped = scan_for_image_files(config.absolute_input_dir, config.absolute_output_dir)
    counters = dispatch_work_items(work_items, config, report)

    report.print_summary(counters)
    return counters.failed


def main(argv=None):
    parser = get_parser()
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        config = Config(
            input_dir=args.input_dir,
            output_dir=args.output_dir,
            size_str=args.size,
            instances=args.instances,
            filter=args.filter,
            jpg_quality=args.jpg_quality,
            webp_quality=args.webp_quality,
            show_progress=args.show_progress,
            verbose=args.verbose,
        )
    except CropConfigError as e:
        print(f"(!) Error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        error_count = run(config)
    except Exception as e:
        print(f"(!) Critical Error: {e}. Check logs for details.", file=sys.stderr)
        sys.exit(2)

    # Per-image failures are reported, not fatal.
    if error_count:
        logging.getLogger("cropkit").warning(f"Image cropping finished with {error_count} errors.")
    sys.exit(0)


if __name__ == "__main__":
    main()
