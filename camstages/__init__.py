"""Piecewise linear curves, a post-processing stage base class, YUV420 conversion and segmentation helpers."""

__version__ = "0.1.0"
__all__ = ["pwl", "stage", "segmentation", "resample"]