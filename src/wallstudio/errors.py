"""Exception taxonomy shared by every wallstudio layer."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from wallstudio.membership.models import ReconcileOutcome


class WallstudioError(Exception):
    """Base class for all wallstudio errors."""


class ValidationError(WallstudioError):
    """A draft or asset failed local validation; nothing was sent remotely."""

    def __init__(self, problems: list[str] | str) -> None:
        if isinstance(problems, str):
            problems = [problems]
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))


class LayerCountError(WallstudioError):
    """A parallax layer edit would break the 1..3 layer bound."""


class CapacityError(LayerCountError):
    """Adding a layer to a config that already holds the maximum."""


class MinimumLayerError(LayerCountError):
    """Removing the only remaining layer of a config."""


class RemoteError(WallstudioError):
    """The persistence or upload collaborator rejected or failed a call."""

    def __init__(self, reason: str, *, status_code: int | None = None) -> None:
        self.reason = reason
        self.status_code = status_code
        super().__init__(reason)


class ReconciliationPartialFailure(WallstudioError):
    """One or more membership edits failed during an apply."""

    def __init__(self, outcome: ReconcileOutcome) -> None:
        self.outcome = outcome
        failed = ", ".join(sorted(outcome.failed))
        super().__init__(f"{len(outcome.failed)} membership edit(s) failed: {failed}")
