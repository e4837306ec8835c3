"""Pending inline edits and the save cycle that reconciles them."""

import enum
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from core.errors import reduce_error
from core.log import get_logger


logger = get_logger(__name__)


class SavePolicy(enum.Enum):
    """What happens to client state after a successful save."""

    REFETCH = "refetch"  # reload the records from the read collaborator
    FORCE_RELOAD = "force_reload"  # discard all client state and rebuild

    @classmethod
    def coerce(cls, value: "SavePolicy | str | None") -> "SavePolicy":
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.REFETCH
        return cls(str(value).strip().lower())


@dataclass(frozen=True)
class DraftEdit:
    record_id: str
    field_name: str
    new_value: Any


@dataclass(frozen=True)
class Notification:
    title: str
    message: str
    severity: str  # "success" or "error"


Writer = Callable[[list[DraftEdit]], Awaitable[Any]]
Notify = Callable[[Notification], None]


class EditReconciler:
    """Holds draft edits until they are saved as one batch.

    Args:
        writer: Async write collaborator; raises on failure
        reload: Refetch used after a save under SavePolicy.REFETCH
        reset: Full rebuild used after a save under SavePolicy.FORCE_RELOAD
        notify: Receives success/error notifications for the host
        policy: Post-save policy
    """

    def __init__(
        self,
        writer: Writer,
        reload: Callable[[], Awaitable[None]],
        reset: Callable[[], Awaitable[None]],
        notify: Notify,
        policy: SavePolicy = SavePolicy.REFETCH,
    ):
        self.writer = writer
        self.reload = reload
        self.reset = reset
        self.notify = notify
        self.policy = policy
        self.loading = False
        self._pending: dict[tuple[str, str], DraftEdit] = {}

    @property
    def drafts(self) -> list[DraftEdit]:
        return list(self._pending.values())

    def record_draft(self, record_id: str, field_name: str, value: Any) -> None:
        """Add or replace the pending value for one field of one record."""
        key = (record_id, field_name)
        # Re-insert so the batch keeps the order of the latest edits
        self._pending.pop(key, None)
        self._pending[key] = DraftEdit(record_id, field_name, value)

    def clear(self) -> None:
        self._pending.clear()

    async def save(self) -> bool:
        """Submit all drafts; returns True when the batch was written."""
        self.loading = True
        try:
            drafts = self.drafts
            if not drafts:
                return True
            await self.writer(drafts)
            logger.info("Saved %d draft edits", len(drafts))
            self.clear()
            self.notify(Notification("Success", "Opportunities updated", "success"))
            if self.policy is SavePolicy.FORCE_RELOAD:
                await self.reset()
            else:
                await self.reload()
            return True
        except Exception as error:
            message = reduce_error(error)
            logger.warning("Save failed: %s", message)
            self.notify(Notification("Error updating opportunities", message, "error"))
            return False
        finally:
            self.loading = False
