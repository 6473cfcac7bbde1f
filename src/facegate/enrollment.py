"""Multi-angle enrollment of a person into an EmbeddingStore."""

from __future__ import annotations

import logging
from typing import Mapping, Optional

import numpy as np

from facegate.codec import is_degenerate
from facegate.embedder import FaceEmbedder
from facegate.errors import DegenerateEmbedding
from facegate.store import EmbeddingStore

logger = logging.getLogger(__name__)


def enroll(
    store: EmbeddingStore,
    name: str,
    crops: Mapping[str, np.ndarray],
    embedder: FaceEmbedder,
    image_paths: Optional[Mapping[str, str]] = None,
) -> int:
    """Register a person with one embedding per captured angle.

    All embeddings are computed before anything is written, so a failure
    leaves the store untouched.

    Args:
        store: Destination store.
        name: Display name (non-empty).
        crops: angle → face crop, e.g. keys from ``facegate.types.ANGLES``.
        embedder: Embedder for the deployed model.
        image_paths: Optional angle → saved crop path, recorded on the person.

    Returns:
        New person id.

    Raises:
        ValueError: If the name is empty or no crops are given.
        DegenerateEmbedding: If any crop yields a zero-norm embedding.
        DimensionMismatch: If the model output has the wrong length.
    """
    name = name.strip()
    if not name:
        raise ValueError("Person name must not be empty")
    if not crops:
        raise ValueError("At least one face crop is required")

    embeddings = {}
    for angle, crop in crops.items():
        e = embedder.embed(crop)
        if is_degenerate(e):
            raise DegenerateEmbedding(f"angle {angle!r} of {name!r}")
        embeddings[angle] = e

    person_id = store.add_person(name, face_images=dict(image_paths or {}))
    for angle, e in embeddings.items():
        store.add_embedding(person_id, angle, e)

    logger.info("Enrolled %r as person %d (%s)", name, person_id, ", ".join(embeddings))
    return person_id


__all__ = ["enroll"]
