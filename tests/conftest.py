"""Shared fixtures for facegate tests.

All embeddings are synthetic — NO ML models needed.
"""

import numpy as np
import pytest

from facegate.types import BoundingBox, FaceObservation


@pytest.fixture
def random_embedding():
    """Generate random L2-normalized 512D vector."""
    rng = np.random.default_rng(42)
    v = rng.standard_normal(512).astype(np.float32)
    return v / np.linalg.norm(v)


@pytest.fixture
def similar_embedding(random_embedding):
    """Generate embedding similar to random_embedding (cos > 0.9)."""
    rng = np.random.default_rng(99)
    noise = rng.standard_normal(512).astype(np.float32) * 0.02
    v = random_embedding + noise
    return v / np.linalg.norm(v)


@pytest.fixture
def make_embedding():
    """Factory fixture for generating deterministic L2-normalized embeddings."""
    def _make(seed: int = 0, dim: int = 512) -> np.ndarray:
        rng = np.random.default_rng(seed)
        v = rng.standard_normal(dim).astype(np.float32)
        return v / np.linalg.norm(v)
    return _make


@pytest.fixture
def make_observation():
    """Factory for FaceObservations with a still, centered 100x100 face."""
    def _make(t: int = 0, **kw) -> FaceObservation:
        kw.setdefault("bbox", BoundingBox(100, 100, 200, 200))
        return FaceObservation(timestamp_ms=t, **kw)
    return _make


@pytest.fixture
def stub_model():
    """Deterministic stand-in for the embedding network.

    Projects the preprocessed image onto a fixed random basis, so identical
    pixels give identical embeddings and different images differ.
    """
    class _StubModel:
        def __init__(self, dim: int = 128, input_size: int = 32):
            rng = np.random.default_rng(7)
            self.dim = dim
            self.basis = rng.standard_normal((input_size * input_size * 3, dim)).astype(np.float32)
            self.calls = 0

        def __call__(self, image: np.ndarray) -> np.ndarray:
            self.calls += 1
            return image.reshape(-1) @ self.basis

    return _StubModel()


@pytest.fixture
def face_crop():
    """Factory for synthetic BGR face crops with a given seed."""
    def _make(seed: int = 0, size: int = 120) -> np.ndarray:
        rng = np.random.default_rng(seed)
        return rng.integers(0, 256, size=(size, size, 3), dtype=np.uint8)
    return _make
