"""Tests for multi-angle enrollment."""

import numpy as np
import pytest

from facegate.embedder import FaceEmbedder
from facegate.enrollment import enroll
from facegate.errors import DegenerateEmbedding
from facegate.matcher import SimilarityMatcher
from facegate.store import EmbeddingStore
from facegate.types import ANGLES


@pytest.fixture
def embedder(stub_model):
    return FaceEmbedder(stub_model, dim=128, input_size=32)


class TestEnroll:
    def test_one_embedding_per_angle(self, embedder, face_crop):
        store = EmbeddingStore()
        crops = {angle: face_crop(seed=i) for i, angle in enumerate(ANGLES)}
        pid = enroll(store, "alice", crops, embedder)

        assert pid == 1
        assert [e.angle for e in store.embeddings(pid)] == list(ANGLES)
        assert store.person(pid).name == "alice"

    def test_enrolled_face_matches(self, embedder, face_crop):
        store = EmbeddingStore()
        enroll(store, "alice", {"front": face_crop(seed=1)}, embedder)
        bob = enroll(store, "bob", {"front": face_crop(seed=2), "left": face_crop(seed=3)}, embedder)

        result = SimilarityMatcher(threshold=0.99, dim=128).match(
            embedder.embed(face_crop(seed=3)), store.embeddings(),
        )
        assert result.matched
        assert result.person_id == bob
        assert result.angle == "left"

    def test_image_paths_recorded(self, embedder, face_crop):
        store = EmbeddingStore()
        pid = enroll(
            store, "alice", {"front": face_crop(seed=1)}, embedder,
            image_paths={"front": "faces/alice_front.jpg"},
        )
        assert store.person(pid).face_images == {"front": "faces/alice_front.jpg"}

    def test_name_is_stripped(self, embedder, face_crop):
        store = EmbeddingStore()
        pid = enroll(store, "  alice ", {"front": face_crop(seed=1)}, embedder)
        assert store.person(pid).name == "alice"

    @pytest.mark.parametrize("name", ["", "   "])
    def test_empty_name(self, embedder, face_crop, name):
        with pytest.raises(ValueError):
            enroll(EmbeddingStore(), name, {"front": face_crop(seed=1)}, embedder)

    def test_no_crops(self, embedder):
        with pytest.raises(ValueError):
            enroll(EmbeddingStore(), "alice", {}, embedder)

    def test_degenerate_leaves_store_untouched(self, face_crop):
        """A zero-norm embedding for any angle aborts the whole enrollment."""
        outputs = iter([np.ones(16), np.zeros(16)])
        embedder = FaceEmbedder(lambda x: next(outputs), dim=16, input_size=8)
        store = EmbeddingStore()

        with pytest.raises(DegenerateEmbedding):
            enroll(store, "alice", {"front": face_crop(seed=1), "left": face_crop(seed=2)}, embedder)
        assert len(store) == 0
        assert store.embeddings() == []
