"""Face embedder — adapter around an injected embedding model.

The model is any callable mapping a preprocessed face image to a raw
float vector of fixed dimension D::

    model(image: np.ndarray[float32, (S, S, 3)]) -> np.ndarray[D]

Input contract (FaceNet-style): RGB, ``input_size`` × ``input_size``,
pixel values scaled to [-1, 1]. Tests inject a deterministic stub.
"""

from __future__ import annotations

import logging
from typing import Callable

import cv2
import numpy as np

from facegate.codec import normalize, serialize
from facegate.errors import DimensionMismatch
from facegate.types import BoundingBox

logger = logging.getLogger(__name__)

EmbeddingModel = Callable[[np.ndarray], np.ndarray]


def crop_face(image: np.ndarray, bbox: BoundingBox, padding: int = 20) -> np.ndarray:
    """Cut the face region out of a frame, padded and clamped to the image.

    Args:
        image: Full frame (H, W, 3) BGR.
        bbox: Face box in pixels.
        padding: Pixels added on each side before clamping.

    Returns:
        Crop view of ``image``.

    Raises:
        ValueError: If the padded box does not overlap the image.
    """
    h, w = image.shape[:2]
    x1 = max(0, int(bbox.left) - padding)
    y1 = max(0, int(bbox.top) - padding)
    x2 = min(w, int(bbox.right) + padding)
    y2 = min(h, int(bbox.bottom) + padding)

    if x2 <= x1 or y2 <= y1:
        raise ValueError(f"Face box {bbox} lies outside image of size {w}x{h}")
    return image[y1:y2, x1:x2]


def preprocess(crop: np.ndarray, input_size: int = 160) -> np.ndarray:
    """Resize a BGR crop and scale to the model's [-1, 1] RGB input."""
    resized = cv2.resize(crop, (input_size, input_size), interpolation=cv2.INTER_LINEAR)
    if resized.ndim == 2:
        resized = cv2.cvtColor(resized, cv2.COLOR_GRAY2RGB)
    else:
        resized = cv2.cvtColor(resized, cv2.COLOR_BGR2RGB)
    return resized.astype(np.float32) / 127.5 - 1.0


class FaceEmbedder:
    """Runs the injected model and returns normalized embeddings.

    Args:
        model: Callable image → raw vector.
        dim: Output dimension D of the deployed model. Taken from the
            model's metadata, never guessed.
        input_size: Square input side expected by the model.
    """

    def __init__(self, model: EmbeddingModel, dim: int, input_size: int = 160):
        self.model = model
        self.dim = dim
        self.input_size = input_size

    def embed(self, crop: np.ndarray) -> np.ndarray:
        """Compute the L2-normalized embedding of a face crop.

        A zero output is returned as the zero vector; callers decide
        whether a degenerate embedding is acceptable.

        Raises:
            DimensionMismatch: If the model output length differs from ``dim``.
        """
        raw = np.asarray(self.model(preprocess(crop, self.input_size)), dtype=np.float32).reshape(-1)
        if raw.shape[0] != self.dim:
            raise DimensionMismatch(self.dim, raw.shape[0], "model output")
        return normalize(raw)

    def embed_bytes(self, crop: np.ndarray) -> bytes:
        """Embedding of ``crop`` in its serialized storage form."""
        return serialize(self.embed(crop))


__all__ = ["EmbeddingModel", "crop_face", "preprocess", "FaceEmbedder"]
