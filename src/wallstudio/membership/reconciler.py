"""Membership reconciliation for collections.

The persistence collaborator only offers single-item add/remove calls, so a
membership change is computed as a set difference and then applied one item
at a time. Application is best effort: a failed item is recorded and the
rest continue, with no rollback. All adds are attempted before any remove so
replacing one item with another never leaves the collection transiently
empty.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from wallstudio.errors import RemoteError
from wallstudio.membership.models import MembershipDiff, ReconcileOutcome

if TYPE_CHECKING:
    from wallstudio.backends.base import PersistenceBackend, Session

logger = logging.getLogger(__name__)


def reconcile(current: Iterable[str], desired: Iterable[str]) -> MembershipDiff:
    """Compute the adds and removes that turn ``current`` into ``desired``."""
    current_set = frozenset(current)
    desired_set = frozenset(desired)
    return MembershipDiff(
        to_add=desired_set - current_set,
        to_remove=current_set - desired_set,
    )


async def apply(
    collection_id: str,
    to_add: Iterable[str],
    to_remove: Iterable[str],
    backend: PersistenceBackend,
    session: Session,
    *,
    concurrent: bool = False,
) -> ReconcileOutcome:
    """Issue one add per id in ``to_add``, then one remove per id in ``to_remove``.

    Args:
        collection_id: Collection being edited.
        to_add: Item ids to add.
        to_remove: Item ids to remove.
        backend: Persistence collaborator.
        session: Caller's session, forwarded to every call.
        concurrent: Dispatch the calls of each phase together instead of
            one after another. Removes still wait for every add to settle.

    Returns:
        Which ids succeeded and why the others failed. Only ``RemoteError``
        counts as an item failure; anything else propagates.
    """
    outcome = ReconcileOutcome(collection_id=collection_id)
    phases = (
        ("add", backend.add_member, sorted(set(to_add))),
        ("remove", backend.remove_member, sorted(set(to_remove))),
    )
    for op, call, ids in phases:
        if not ids:
            continue
        logger.debug("Collection %s: %s %d item(s)", collection_id, op, len(ids))
        if concurrent:
            await asyncio.gather(
                *(_dispatch(op, call, session, collection_id, item_id, outcome) for item_id in ids)
            )
        else:
            for item_id in ids:
                await _dispatch(op, call, session, collection_id, item_id, outcome)

    if outcome.failed:
        logger.warning(
            "Collection %s partially reconciled: %d ok, %d failed",
            collection_id,
            len(outcome.succeeded),
            len(outcome.failed),
        )
    else:
        logger.info("Collection %s reconciled (%d edits)", collection_id, len(outcome.succeeded))
    return outcome


async def sync_collection(
    backend: PersistenceBackend,
    session: Session,
    collection_id: str,
    desired: Iterable[str],
    *,
    concurrent: bool = False,
) -> ReconcileOutcome:
    """Read a collection's membership, then reconcile it towards ``desired``."""
    collection = await backend.get_collection(session, collection_id)
    diff = reconcile(collection.members, desired)
    return await apply(
        collection_id,
        diff.to_add,
        diff.to_remove,
        backend,
        session,
        concurrent=concurrent,
    )


async def _dispatch(op, call, session, collection_id, item_id, outcome) -> None:
    try:
        await call(session, collection_id, item_id)
    except RemoteError as exc:
        logger.warning(
            "Could not %s %s in collection %s: %s", op, item_id, collection_id, exc.reason
        )
        outcome.failed[item_id] = exc.reason
    else:
        outcome.succeeded.add(item_id)
