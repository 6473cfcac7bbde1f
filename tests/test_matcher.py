"""Tests for similarity scoring and best-match selection."""

import logging

import numpy as np
import pytest

from facegate.codec import serialize
from facegate.errors import DimensionMismatch, MalformedEmbedding
from facegate.matcher import SimilarityMatcher, find_best_match, similarity, snapshot
from facegate.types import MatchResult, StoredEmbedding


class TestSimilarity:
    def test_self_similarity(self, random_embedding):
        assert similarity(random_embedding, random_embedding) == pytest.approx(1.0, abs=1e-4)
        assert similarity(
            random_embedding, random_embedding, assume_normalized=True,
        ) == pytest.approx(1.0, abs=1e-4)

    def test_bounds(self, make_embedding):
        """Similarity of unit vectors stays within [-1, 1]."""
        for seed in range(20):
            a = make_embedding(seed=seed)
            b = make_embedding(seed=seed + 1000)
            for s in (similarity(a, b), similarity(a, b, assume_normalized=True)):
                assert -1.0 <= s <= 1.0

    def test_opposite(self, random_embedding):
        assert similarity(random_embedding, -random_embedding) == pytest.approx(-1.0, abs=1e-4)

    def test_cosine_on_unnormalized(self):
        """True cosine is computed when inputs are not unit length."""
        a = np.array([3.0, 0.0])
        b = np.array([10.0, 10.0])
        assert similarity(a, b) == pytest.approx(np.sqrt(0.5))

    def test_clamped(self):
        """Floating-point overshoot is clamped."""
        a = np.array([1.0000001, 0.0])
        assert similarity(a, a, assume_normalized=True) == 1.0

    def test_zero_norm_is_zero(self, random_embedding):
        assert similarity(np.zeros(512), random_embedding) == 0.0

    def test_dimension_mismatch(self, make_embedding):
        with pytest.raises(DimensionMismatch):
            similarity(make_embedding(dim=512), make_embedding(dim=128))


class TestFindBestMatch:
    def test_empty_corpus(self, random_embedding):
        """Empty corpus returns unmatched without raising."""
        result = find_best_match(random_embedding, [], threshold=0.8)
        assert isinstance(result, MatchResult)
        assert result.matched is False
        assert result.person_id is None

    def test_exact_match(self, random_embedding, make_embedding):
        """A stored copy of the query matches with similarity 1."""
        corpus = [
            StoredEmbedding(person_id=1, angle="front", embedding=make_embedding(seed=1)),
            StoredEmbedding(person_id=2, angle="left", embedding=random_embedding.copy()),
            StoredEmbedding(person_id=3, angle="front", embedding=make_embedding(seed=3)),
        ]
        result = find_best_match(random_embedding, corpus, threshold=0.8)
        assert result.matched is True
        assert result.person_id == 2
        assert result.angle == "left"
        assert result.similarity == pytest.approx(1.0, abs=1e-4)

    def test_below_threshold_reports_best(self, random_embedding, make_embedding):
        """Unmatched results still carry the best score."""
        corpus = [StoredEmbedding(1, "front", make_embedding(seed=s)) for s in range(5)]
        result = find_best_match(random_embedding, corpus, threshold=0.8)
        expected = max(float(np.dot(random_embedding, e.embedding)) for e in corpus)
        assert result.matched is False
        assert result.person_id is None
        assert result.similarity == pytest.approx(expected, abs=1e-5)

    def test_threshold_inclusive(self, random_embedding, similar_embedding):
        sim = similarity(random_embedding, similar_embedding)
        corpus = [StoredEmbedding(7, "front", similar_embedding)]
        assert find_best_match(random_embedding, corpus, threshold=sim).matched
        assert not find_best_match(random_embedding, corpus, threshold=sim + 1e-3).matched

    def test_tie_keeps_first(self, random_embedding):
        """Equal scores keep the first entry in iteration order."""
        corpus = [
            StoredEmbedding(5, "front", random_embedding.copy()),
            StoredEmbedding(6, "front", random_embedding.copy()),
        ]
        assert find_best_match(random_embedding, corpus, threshold=0.5).person_id == 5

    def test_angles_compete_independently(self, random_embedding, similar_embedding, make_embedding):
        """No per-person pooling: one strong angle wins over a better average."""
        corpus = [
            # person 1: one excellent angle, four poor ones
            StoredEmbedding(1, "front", similar_embedding),
            *[StoredEmbedding(1, a, make_embedding(seed=s)) for s, a in
              zip(range(10, 14), ("left", "right", "up", "down"))],
            # person 2: two decent angles
            StoredEmbedding(2, "front", _blend(random_embedding, make_embedding(seed=50), 0.6)),
            StoredEmbedding(2, "left", _blend(random_embedding, make_embedding(seed=51), 0.6)),
        ]
        result = find_best_match(random_embedding, corpus, threshold=0.8)
        assert result.person_id == 1
        assert result.angle == "front"

    def test_dimension_mismatch_raises(self, make_embedding):
        """D=512 query against a D=128 entry raises instead of scoring 0."""
        corpus = [
            StoredEmbedding(1, "front", make_embedding(seed=1, dim=512)),
            StoredEmbedding(2, "front", make_embedding(seed=2, dim=128)),
        ]
        with pytest.raises(DimensionMismatch):
            find_best_match(make_embedding(seed=9, dim=512), corpus, threshold=0.8)

    def test_bytes_entries(self, random_embedding, make_embedding):
        corpus = [
            StoredEmbedding(1, "front", serialize(make_embedding(seed=1))),
            StoredEmbedding(2, "front", serialize(random_embedding)),
        ]
        result = find_best_match(random_embedding, corpus, threshold=0.9)
        assert result.matched and result.person_id == 2

    def test_malformed_entry_skipped(self, random_embedding, caplog):
        """A corrupt stored entry is skipped, not fatal."""
        corpus = [
            StoredEmbedding(1, "front", b"\x00\x01\x02"),
            StoredEmbedding(2, "front", serialize(random_embedding)),
        ]
        with caplog.at_level(logging.WARNING, logger="facegate.matcher"):
            result = find_best_match(random_embedding, corpus, threshold=0.9)
        assert result.person_id == 2
        assert "Skipping corpus entry person=1" in caplog.text

    def test_degenerate_entry_never_matches(self):
        corpus = [StoredEmbedding(1, "front", np.zeros(4, dtype=np.float32))]
        query = np.array([1.0, 0.0, 0.0, 0.0], dtype=np.float32)
        result = find_best_match(query, corpus, threshold=-1.0)
        assert result.matched is False
        assert result.similarity == 0.0

    def test_degenerate_query(self, random_embedding):
        corpus = [StoredEmbedding(1, "front", random_embedding)]
        result = find_best_match(np.zeros(512, dtype=np.float32), corpus, threshold=-1.0)
        assert result.matched is False
        assert result.degenerate is True
        assert result.similarity == 0.0


class TestSimilarityMatcher:
    def test_configured_threshold(self, random_embedding, similar_embedding):
        corpus = [StoredEmbedding(1, "front", similar_embedding)]
        assert SimilarityMatcher(threshold=0.5).match(random_embedding, corpus).matched
        assert not SimilarityMatcher(threshold=0.9999).match(random_embedding, corpus).matched

    def test_query_dim_checked(self, make_embedding):
        matcher = SimilarityMatcher(threshold=0.8, dim=512)
        with pytest.raises(DimensionMismatch):
            matcher.match(make_embedding(dim=128), [])

    def test_bytes_query(self, random_embedding):
        corpus = [StoredEmbedding(1, "front", random_embedding)]
        result = SimilarityMatcher(dim=512).match(serialize(random_embedding), corpus)
        assert result.matched and result.person_id == 1

    def test_malformed_query_is_fatal(self, random_embedding):
        corpus = [StoredEmbedding(1, "front", random_embedding)]
        with pytest.raises(MalformedEmbedding):
            SimilarityMatcher().match(b"\x00\x00\x00", corpus)


class TestSnapshot:
    def test_snapshot_isolated_from_later_changes(self, random_embedding, make_embedding):
        live = [StoredEmbedding(1, "front", make_embedding(seed=1))]
        frozen = snapshot(live)
        live.append(StoredEmbedding(2, "front", random_embedding))

        assert isinstance(frozen, tuple)
        assert len(frozen) == 1
        assert not find_best_match(random_embedding, frozen, threshold=0.9).matched


def _blend(a, b, w):
    v = w * a + (1 - w) * b
    return (v / np.linalg.norm(v)).astype(np.float32)
