"""Texture plausibility on the face crop.

Printed photos read as flat (low luma variance); screen replays and
noise read as too busy (high variance). A live face falls in between.
"""

from __future__ import annotations

import cv2
import numpy as np


def luma_variance(image: np.ndarray) -> float:
    """Population variance of per-pixel luma.

    Args:
        image: BGR (H, W, 3), BGRA (H, W, 4) or grayscale (H, W) crop.

    Returns:
        Variance of the 8-bit luma values; 0.0 for an empty image.
    """
    image = np.asarray(image)
    if image.size == 0:
        return 0.0

    if image.ndim == 3 and image.shape[2] == 4:
        gray = cv2.cvtColor(image.astype(np.uint8), cv2.COLOR_BGRA2GRAY)
    elif image.ndim == 3 and image.shape[2] == 3:
        gray = cv2.cvtColor(image.astype(np.uint8), cv2.COLOR_BGR2GRAY)
    elif image.ndim == 3 and image.shape[2] == 1:
        gray = image[:, :, 0]
    elif image.ndim == 2:
        gray = image
    else:
        raise ValueError(f"Unsupported image shape for texture analysis: {image.shape}")

    return float(np.var(gray.astype(np.float64)))


def texture_plausible(variance: float, lo: float = 300.0, hi: float = 5000.0) -> bool:
    """Exclusive range check: lo < variance < hi."""
    return lo < variance < hi


__all__ = ["luma_variance", "texture_plausible"]
