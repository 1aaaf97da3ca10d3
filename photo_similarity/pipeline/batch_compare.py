# pipeline/batch_compare.py
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
import logging
import os
from typing import List

from dotenv import load_dotenv

from ..models.similarity_result import SimilarityResult
from ..services.comparison_service import ComparisonService
from ..services.image_service import ImageService

# env‑vars
load_dotenv()
MAX_WORKERS = int(os.getenv("BATCH_MAX_WORKERS", "4"))

logger = logging.getLogger(__name__)


def compare_directories(
    source_dir: str | Path,
    target_dir: str | Path,
    *,
    comparison_service: ComparisonService | None = None,
    image_service: ImageService | None = None,
    max_workers: int = MAX_WORKERS,
    preview_dir: str | Path | None = None,
) -> List[SimilarityResult]:
    """
    For every file in *source_dir*:
        • locate the same-named file in *target_dir*
        • fingerprint both and compute their agreement ratio
        • turn missing or undecodable files into a failed result
    Pairs run concurrently; the returned list follows the source listing order.
    """
    comparison_service = comparison_service or ComparisonService()
    image_service = image_service or comparison_service.fingerprint_service.image_service

    source_dir = Path(source_dir)
    target_dir = Path(target_dir)
    names = image_service.list_names(source_dir)
    logger.info(f"Comparing {len(names)} files: {source_dir} -> {target_dir}")

    def _compare(name: str) -> SimilarityResult:
        return comparison_service.compare_pair(source_dir / name, target_dir / name, preview_dir)

    if max_workers <= 1 or len(names) <= 1:
        return [_compare(name) for name in names]

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        # map() yields in submission order
        return list(executor.map(_compare, names))


def log_results(results: List[SimilarityResult]) -> None:
    """
    Log a one-line summary of a batch run.
    """
    if not results:
        logger.info("No files were compared.")
        return

    compared = [r for r in results if r.ok]
    failed = len(results) - len(compared)
    if compared:
        mean_pct = sum(r.percentage for r in compared) / len(compared)
        logger.info(f"Compared {len(compared)} pairs, {failed} skipped, mean similarity {mean_pct:.2f}%")
    else:
        logger.info(f"Compared 0 pairs, {failed} skipped")
