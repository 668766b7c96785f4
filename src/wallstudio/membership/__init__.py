"""Collections and the reconciliation of their membership."""

from wallstudio.membership.models import CollectionRecord, MembershipDiff, ReconcileOutcome
from wallstudio.membership.reconciler import apply, reconcile, sync_collection

__all__ = [
    "CollectionRecord",
    "MembershipDiff",
    "ReconcileOutcome",
    "apply",
    "reconcile",
    "sync_collection",
]
