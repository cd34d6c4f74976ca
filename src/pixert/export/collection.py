"""
Module: export.collection

Purpose:
    Declared fallback policy for collection mutation. Device gallery APIs
    come in more than one call shape, and batch calls can fail where
    single-item calls succeed, so both operations here are expressed as
    ordered tiers tried until one works:

    - ensure_collection(): look up by name; if absent create it seeded
      with the first asset, richer creation call first, simple call second
    - attach_assets(): one batch call; on failure (or rejected ids) one
      call per asset, recording every per-asset outcome

Key Classes:
    - FallbackPolicy: Ordered tiers of equivalent calls
    - EnsureOutcome / AttachOutcome: What happened, nothing swallowed

Dependencies:
    - pixert.export.persistence: PersistenceAdapter, CollectionRef

Used By:
    - export.pipeline: Collection-attach stage
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Generic, List, Optional, Sequence, Set, Tuple, TypeVar

from pixert.core.errors import PersistenceError
from pixert.core.models import ExportIssue, ExportStage

from .persistence import CollectionRef, PersistenceAdapter

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FallbackPolicy(Generic[T]):
    """
    Try equivalent calls in order until one succeeds.

    Only PersistenceError triggers the next tier; anything else is a bug
    and propagates.

    Example:
        >>> policy = FallbackPolicy([("batch", add_all), ("single", add_one)])
        >>> result = policy.run()
        >>> policy.errors   # failures of the tiers that were skipped past
        ['batch: ...']
    """

    def __init__(self, tiers: Sequence[Tuple[str, Callable[[], T]]]):
        if not tiers:
            raise ValueError("FallbackPolicy needs at least one tier")
        self.tiers = list(tiers)
        self.errors: List[str] = []

    def run(self) -> T:
        """
        Run tiers in order.

        Raises:
            PersistenceError: The last tier's error if every tier failed
        """
        last_error: Optional[PersistenceError] = None
        for label, call in self.tiers:
            try:
                return call()
            except PersistenceError as e:
                logger.warning(f"{label} failed: {e}")
                self.errors.append(f"{label}: {e}")
                last_error = e
        assert last_error is not None
        raise last_error


@dataclass
class EnsureOutcome:
    """Result of ensure_collection()."""

    collection: Optional[CollectionRef]
    seeded: Set[str] = field(default_factory=set)
    issues: List[ExportIssue] = field(default_factory=list)


@dataclass
class AttachOutcome:
    """Result of attach_assets(); ``failures`` maps asset id to message."""

    attached: Set[str] = field(default_factory=set)
    failures: Dict[str, str] = field(default_factory=dict)
    issues: List[ExportIssue] = field(default_factory=list)
    used_fallback: bool = False


def ensure_collection(
    adapter: PersistenceAdapter,
    name: str,
    seed_asset_id: str,
    *,
    copy_asset: bool = False,
) -> EnsureOutcome:
    """
    Find ``name`` or create it seeded with ``seed_asset_id``.

    A failed lookup is recorded and treated as "absent". If both creation
    tiers fail the outcome carries no collection; the caller then marks
    every asset unattached.

    Returns:
        EnsureOutcome; ``seeded`` holds the seed id when creation put it
        in the collection
    """
    outcome = EnsureOutcome(collection=None)

    try:
        outcome.collection = adapter.get_collection(name)
    except PersistenceError as e:
        logger.error(f"Collection lookup for {name!r} failed: {e}")
        outcome.issues.append(
            ExportIssue(ExportStage.COLLECTION, f"Lookup of {name!r} failed: {e}")
        )

    if outcome.collection is not None:
        logger.debug(f"Using existing collection {name!r} ({outcome.collection.id})")
        return outcome

    policy: FallbackPolicy[CollectionRef] = FallbackPolicy([
        (
            "create_collection_with_options",
            lambda: adapter.create_collection_with_options(
                name, seed_asset_id, copy_asset=copy_asset
            ),
        ),
        ("create_collection", lambda: adapter.create_collection(name, seed_asset_id)),
    ])
    try:
        outcome.collection = policy.run()
        outcome.seeded.add(seed_asset_id)
    except PersistenceError as e:
        logger.error(f"Could not create collection {name!r}: {e}")
        outcome.issues.append(
            ExportIssue(
                ExportStage.COLLECTION,
                f"Could not create {name!r}: " + "; ".join(policy.errors),
            )
        )
    return outcome


def attach_assets(
    adapter: PersistenceAdapter,
    collection: CollectionRef,
    asset_ids: Sequence[str],
) -> AttachOutcome:
    """
    Add assets to a collection, batch first then one at a time.

    Individual failures never abort the loop; each is recorded in
    ``failures``. Asset ids are added in the given order.
    """
    outcome = AttachOutcome()
    if not asset_ids:
        return outcome

    retry: List[str]
    try:
        rejected = adapter.add_assets_to_collection(list(asset_ids), collection)
        rejected_ids = set(rejected)
        retry = [a for a in asset_ids if a in rejected_ids]
        if retry:
            outcome.issues.append(
                ExportIssue(
                    ExportStage.ATTACH,
                    f"Batch attach rejected {len(retry)} of {len(asset_ids)} asset(s)",
                )
            )
    except PersistenceError as e:
        logger.warning(f"Batch attach to {collection.name!r} failed, trying individual: {e}")
        outcome.issues.append(ExportIssue(ExportStage.ATTACH, f"Batch attach failed: {e}"))
        retry = list(asset_ids)

    outcome.attached.update(a for a in asset_ids if a not in retry)
    if not retry:
        logger.info(f"Attached {len(asset_ids)} asset(s) to {collection.name!r}")
        return outcome

    outcome.used_fallback = True
    for asset_id in retry:
        try:
            rejected = adapter.add_assets_to_collection([asset_id], collection)
        except PersistenceError as e:
            logger.error(f"Individual attach of {asset_id} failed: {e}")
            outcome.failures[asset_id] = str(e)
            continue
        if rejected:
            logger.error(f"Individual attach of {asset_id} was rejected")
            outcome.failures[asset_id] = "rejected by collection"
        else:
            outcome.attached.add(asset_id)

    if outcome.failures:
        logger.warning(
            f"{len(outcome.failures)} asset(s) not attached to {collection.name!r}"
        )
    return outcome


__all__ = [
    "AttachOutcome",
    "EnsureOutcome",
    "FallbackPolicy",
    "attach_assets",
    "ensure_collection",
]
