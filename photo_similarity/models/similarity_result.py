from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path


@dataclass
class SimilarityResult:
    """
    Outcome of comparing one source file with its same-named target file.
    Either `ratio` is set (comparison ran) or `error` holds the reason it did not.
    """
    source_name: str
    target_name: str
    source_path: Path | None = None
    target_path: Path | None = None
    ratio: float | None = None   # Agreement ratio in [0, 1]
    error: str | None = None     # Missing-file / decode message

    @property
    def ok(self) -> bool:
        return self.error is None and self.ratio is not None

    @property
    def percentage(self) -> float | None:
        if self.ratio is None:
            return None
        return self.ratio * 100

    @property
    def message(self) -> str:
        if not self.ok:
            return self.error or f"{self.source_name} vs {self.target_name}: not compared"
        return f"{self.source_name} vs {self.target_name} similarity: {self.percentage:.2f}%"

    def to_dict(self) -> dict:
        return {
            "source": self.source_name,
            "target": self.target_name,
            "source_path": str(self.source_path) if self.source_path else None,
            "target_path": str(self.target_path) if self.target_path else None,
            "ratio": self.ratio,
            "percentage": self.percentage,
            "error": self.error,
            "message": self.message,
        }
