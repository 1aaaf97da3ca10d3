"""Perceptual photo similarity via Otsu-binarized fingerprints."""

__version__ = "1.0.0"
