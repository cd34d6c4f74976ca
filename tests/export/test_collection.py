"""
Tests for the collection fallback policy.

Test Coverage:
- FallbackPolicy tier ordering and error propagation
- ensure_collection(): existing, richer call, simple-call fallback, total failure
- attach_assets(): batch success, batch failure, rejected ids, individual failures
"""

import pytest

from pixert.core.errors import (
    AttachError,
    CollectionError,
    UnsupportedOperationError,
)
from pixert.core.models import ExportStage
from pixert.export.codec import EncodedImage
from pixert.export.collection import FallbackPolicy, attach_assets, ensure_collection
from pixert.export.memory import MemoryGallery
from pixert.export.persistence import CollectionRef

TILE = EncodedImage(data=b"x", format="JPEG", width=1, height=1)


class SimpleOnlyGallery(MemoryGallery):
    """Gallery without the richer creation call."""

    def create_collection_with_options(self, name, seed_asset_id, *, copy_asset):
        raise UnsupportedOperationError("no options")


class BrokenCreateGallery(MemoryGallery):
    def create_collection(self, name, seed_asset_id):
        raise CollectionError("create refused")


class BrokenLookupGallery(MemoryGallery):
    def get_collection(self, name):
        raise CollectionError("lookup timed out")


class FlakyAttachGallery(MemoryGallery):
    """Batch calls fail; single calls fail for ids in ``bad``."""

    def __init__(self, bad=(), reject=()):
        super().__init__()
        self.bad = set(bad)
        self.reject = set(reject)
        self.calls = []

    def add_assets_to_collection(self, asset_ids, collection):
        self.calls.append(list(asset_ids))
        if len(asset_ids) > 1:
            raise AttachError("batch not supported")
        if asset_ids[0] in self.bad:
            raise AttachError(f"{asset_ids[0]} refused")
        if asset_ids[0] in self.reject:
            return list(asset_ids)
        return super().add_assets_to_collection(asset_ids, collection)


def _with_collection(gallery, n):
    ids = [gallery.create_asset(TILE) for _ in range(n)]
    ref = CollectionRef(id="c1", name="Trip")
    gallery.collections["Trip"] = ref
    gallery.members["Trip"] = []
    return ids, ref


# ─────────────────────────────────────────────────────────────────────────────
# FallbackPolicy
# ─────────────────────────────────────────────────────────────────────────────


class TestFallbackPolicy:
    def test_first_success_wins(self):
        policy = FallbackPolicy([("a", lambda: 1), ("b", lambda: 2)])
        assert policy.run() == 1
        assert policy.errors == []

    def test_falls_through_on_persistence_error(self):
        def fail():
            raise CollectionError("nope")

        policy = FallbackPolicy([("a", fail), ("b", lambda: 2)])

        assert policy.run() == 2
        assert policy.errors == ["a: nope"]

    def test_all_tiers_fail_raises_last_error(self):
        def fail(msg):
            def call():
                raise CollectionError(msg)
            return call

        policy = FallbackPolicy([("a", fail("first")), ("b", fail("second"))])

        with pytest.raises(CollectionError, match="second"):
            policy.run()
        assert len(policy.errors) == 2

    def test_other_errors_propagate(self):
        def bug():
            raise TypeError("bug")

        with pytest.raises(TypeError):
            FallbackPolicy([("a", bug), ("b", lambda: 2)]).run()

    def test_requires_a_tier(self):
        with pytest.raises(ValueError):
            FallbackPolicy([])


# ─────────────────────────────────────────────────────────────────────────────
# ensure_collection
# ─────────────────────────────────────────────────────────────────────────────


class TestEnsureCollection:
    def test_existing_collection_is_reused(self, memory_gallery):
        ids, ref = _with_collection(memory_gallery, 1)

        outcome = ensure_collection(memory_gallery, "Trip", ids[0])

        assert outcome.collection == ref
        assert outcome.seeded == set()
        assert memory_gallery.members["Trip"] == []

    def test_missing_collection_created_with_seed(self, memory_gallery):
        seed = memory_gallery.create_asset(TILE)

        outcome = ensure_collection(memory_gallery, "Trip", seed)

        assert outcome.collection.name == "Trip"
        assert outcome.seeded == {seed}
        assert memory_gallery.members["Trip"] == [seed]
        assert outcome.issues == []

    def test_falls_back_to_simple_creation(self):
        gallery = SimpleOnlyGallery()
        seed = gallery.create_asset(TILE)

        outcome = ensure_collection(gallery, "Trip", seed, copy_asset=True)

        assert outcome.collection is not None
        assert outcome.seeded == {seed}
        assert outcome.issues == []

    def test_both_creation_calls_fail(self):
        gallery = BrokenCreateGallery()
        seed = gallery.create_asset(TILE)

        outcome = ensure_collection(gallery, "Trip", seed)

        assert outcome.collection is None
        assert outcome.seeded == set()
        assert len(outcome.issues) == 1
        assert outcome.issues[0].stage is ExportStage.COLLECTION
        assert "create refused" in outcome.issues[0].message

    def test_failed_lookup_is_recorded_then_created(self):
        gallery = BrokenLookupGallery()
        seed = gallery.create_asset(TILE)

        outcome = ensure_collection(gallery, "Trip", seed)

        assert outcome.collection is not None
        assert "lookup timed out" in outcome.issues[0].message


# ─────────────────────────────────────────────────────────────────────────────
# attach_assets
# ─────────────────────────────────────────────────────────────────────────────


class TestAttachAssets:
    def test_batch_success(self, memory_gallery):
        ids, ref = _with_collection(memory_gallery, 3)

        outcome = attach_assets(memory_gallery, ref, ids)

        assert outcome.attached == set(ids)
        assert outcome.failures == {}
        assert not outcome.used_fallback
        assert memory_gallery.members["Trip"] == ids

    def test_empty_list_is_a_no_op(self, memory_gallery):
        _, ref = _with_collection(memory_gallery, 0)
        outcome = attach_assets(memory_gallery, ref, [])
        assert outcome.attached == set()

    def test_batch_failure_falls_back_to_individual_calls(self):
        gallery = FlakyAttachGallery()
        ids, ref = _with_collection(gallery, 3)

        outcome = attach_assets(gallery, ref, ids)

        assert outcome.used_fallback
        assert outcome.attached == set(ids)
        assert gallery.calls == [ids, [ids[0]], [ids[1]], [ids[2]]]
        assert gallery.members["Trip"] == ids
        assert outcome.issues[0].stage is ExportStage.ATTACH

    def test_individual_failure_is_recorded_and_loop_continues(self):
        gallery = FlakyAttachGallery()
        ids, ref = _with_collection(gallery, 3)
        gallery.bad = {ids[1]}

        outcome = attach_assets(gallery, ref, ids)

        assert outcome.attached == {ids[0], ids[2]}
        assert list(outcome.failures) == [ids[1]]
        assert "refused" in outcome.failures[ids[1]]
        assert gallery.members["Trip"] == [ids[0], ids[2]]

    def test_rejected_ids_are_retried_individually(self, memory_gallery):
        ids, ref = _with_collection(memory_gallery, 2)
        ghost = "ghost"

        outcome = attach_assets(memory_gallery, ref, ids + [ghost])

        assert outcome.attached == set(ids)
        assert outcome.failures == {ghost: "rejected by collection"}
        assert outcome.used_fallback
