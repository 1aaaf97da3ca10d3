from pathlib import Path
from typing import Tuple
import logging
import numpy as np
from ..errors import DecodeError, LengthMismatchError, MissingFileError
from ..models.fingerprint import Fingerprint
from ..models.similarity_result import SimilarityResult
from .fingerprint_service import FingerprintService

logger = logging.getLogger(__name__)


class ComparisonService:
    """
    Business logic for comparing two images through their fingerprints.
    """

    def __init__(self, fingerprint_service: FingerprintService | None = None):
        self.fingerprint_service = fingerprint_service or FingerprintService()

    @staticmethod
    def similarity(mask_a: np.ndarray, mask_b: np.ndarray) -> float:
        """
        Fraction of positions where both masks hold the same bit.

        Returns:
            (float): Agreement ratio in [0, 1].
        """
        mask_a = np.asarray(mask_a).ravel()
        mask_b = np.asarray(mask_b).ravel()
        if mask_a.size != mask_b.size:
            raise LengthMismatchError(f"Fingerprint lengths differ: {mask_a.size} != {mask_b.size}")
        if mask_a.size == 0:
            raise ValueError("Cannot compare empty fingerprints")

        agreement = int(np.count_nonzero((mask_a ^ mask_b) == 0))
        return agreement / mask_a.size

    def compare_fingerprints(self, fp_a: Fingerprint, fp_b: Fingerprint) -> float:
        return self.similarity(fp_a.mask, fp_b.mask)

    def fingerprint_pair(self, source: str | Path, target: str | Path) -> Tuple[Fingerprint, Fingerprint]:
        """Fingerprint both files, source first."""
        fp_source = self.fingerprint_service.fingerprint_file(source)
        fp_target = self.fingerprint_service.fingerprint_file(target)
        return fp_source, fp_target

    def check_pair_exists(self, source: str | Path, target: str | Path) -> None:
        """
        Raises MissingFileError naming both files when either one is absent.
        """
        if not source or not target:
            raise MissingFileError("file path not exist")

        source, target = Path(source), Path(target)
        image_service = self.fingerprint_service.image_service
        source_exists = image_service.exists(source)
        target_exists = image_service.exists(target)

        prefix = f"{source.name} vs {target.name}"
        if source_exists and not target_exists:
            raise MissingFileError(f"{prefix}: {target} does not exist")
        if not source_exists and target_exists:
            raise MissingFileError(f"{prefix}: {source} does not exist")
        if not source_exists and not target_exists:
            raise MissingFileError(f"{prefix}: both files do not exist")

    def save_previews(self, fp_source: Fingerprint, fp_target: Fingerprint, preview_dir: str | Path) -> None:
        # Full file names keep a.png and a.bmp from sharing a preview
        preview_dir = Path(preview_dir)
        image_service = self.fingerprint_service.image_service
        image_service.save_fingerprint(fp_source, preview_dir / f"{fp_source.path.name}_source.png")
        image_service.save_fingerprint(fp_target, preview_dir / f"{fp_target.path.name}_target.png")

    def compare_files(
        self,
        source: str | Path,
        target: str | Path,
        preview_dir: str | Path | None = None,
    ) -> SimilarityResult:
        self.check_pair_exists(source, target)
        source, target = Path(source), Path(target)

        fp_source, fp_target = self.fingerprint_pair(source, target)
        ratio = self.compare_fingerprints(fp_source, fp_target)

        if preview_dir is not None:
            try:
                self.save_previews(fp_source, fp_target, preview_dir)
            except OSError as err:
                logger.warning(f"Preview not written for {source.name} vs {target.name}: {err}")

        return SimilarityResult(
            source_name=source.name,
            target_name=target.name,
            source_path=source,
            target_path=target,
            ratio=ratio,
        )

    def compare_pair(
        self,
        source: str | Path,
        target: str | Path,
        preview_dir: str | Path | None = None,
    ) -> SimilarityResult:
        """
        Like compare_files, but missing or undecodable files become a failed
        result instead of an exception.
        """
        source_name = Path(source).name if source else ""
        target_name = Path(target).name if target else ""
        try:
            return self.compare_files(source, target, preview_dir)
        except MissingFileError as err:
            error = str(err)
        except DecodeError as err:
            error = f"{source_name} vs {target_name}: {err}"

        logger.warning(f"Comparison skipped: {error}")
        return SimilarityResult(
            source_name=source_name,
            target_name=target_name,
            source_path=Path(source) if source else None,
            target_path=Path(target) if target else None,
            error=error,
        )
