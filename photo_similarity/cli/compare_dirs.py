import argparse
import json
import logging
import os
import sys

from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from ..pipeline.batch_compare import MAX_WORKERS, compare_directories, log_results
from ..services.comparison_service import ComparisonService
from ..services.fingerprint_service import FingerprintService
from ..services.image_service import ImageService

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="photo-similarity",
        description="Compare same-named images in two directories and print their similarity.",
    )
    ap.add_argument("source_dir", help="directory whose file names drive the comparison")
    ap.add_argument("target_dir", help="directory holding the files to compare against")
    ap.add_argument("--workers", type=int, default=MAX_WORKERS,
                    help="number of pairs compared concurrently (1 = sequential)")
    ap.add_argument("--size", type=int, default=None,
                    help="fingerprint edge length in pixels (default: FINGERPRINT_SIZE or 50)")
    ap.add_argument("--preview-dir", default=None,
                    help="write black/white fingerprint previews into this directory")
    ap.add_argument("--json", action="store_true", help="print results as a JSON list")
    default_level = os.getenv("LOG_LEVEL", "INFO").upper()
    ap.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS,
                    default=default_level if default_level in LOG_LEVELS else "INFO",
                    help="logging level (%(choices)s)")
    return ap


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    # --- Centralized Logging Configuration ---
    logging.basicConfig(
        level=args.log_level,
        format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
        datefmt='%H:%M:%S'
    )

    image_service = ImageService()
    if args.size is not None:
        if args.size < 1:
            logger.error(f"Fingerprint size must be positive, got {args.size}")
            return 2
        image_service.FINGERPRINT_SIZE = args.size
    comparison_service = ComparisonService(FingerprintService(image_service))

    try:
        results = compare_directories(
            args.source_dir,
            args.target_dir,
            comparison_service=comparison_service,
            image_service=image_service,
            max_workers=args.workers,
            preview_dir=args.preview_dir,
        )
    except NotADirectoryError as err:
        logger.error(f"Source directory not found: {err}")
        return 1

    if args.json:
        print(json.dumps([r.to_dict() for r in results], ensure_ascii=False, indent=2))
    else:
        for result in results:
            print(result.message)

    log_results(results)
    return 0


if __name__ == "__main__":
    sys.exit(main())
