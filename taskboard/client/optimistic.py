"""Optimistic reordering: show the new order at once, roll back if the server refuses."""

from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional, Sequence

from taskboard.client.api_client import ApiClient, ApiError, Session

logger = logging.getLogger("taskboard.client.optimistic")


class ReorderState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"


class OptimisticReorder:
    """
    Two-phase local order: apply() -> confirm() | revert().

    Only one change may be pending at a time.
    """

    def __init__(self, task_ids: Sequence[int]):
        self.order: List[int] = list(task_ids)
        self.state = ReorderState.IDLE
        self._previous: Optional[List[int]] = None

    def apply(self, new_order: Sequence[int]) -> List[int]:
        if self.state is ReorderState.PENDING:
            raise RuntimeError("A reorder is already pending")
        if sorted(new_order) != sorted(self.order):
            raise ValueError("New order must contain the same task ids")
        self._previous = self.order
        self.order = list(new_order)
        self.state = ReorderState.PENDING
        return self.order

    def move(self, from_index: int, to_index: int) -> List[int]:
        """apply() for a single drag from one index to another."""
        order = list(self.order)
        order.insert(to_index, order.pop(from_index))
        return self.apply(order)

    def confirm(self) -> List[int]:
        self._require_pending()
        self._previous = None
        self.state = ReorderState.IDLE
        return self.order

    def revert(self) -> List[int]:
        self._require_pending()
        self.order = self._previous
        self._previous = None
        self.state = ReorderState.IDLE
        return self.order

    def commit_with(self, client: ApiClient, session: Session) -> bool:
        """
        Send the pending order; confirm on success, revert on any failure.

        An ApiError (including transport failures) returns False; anything
        else is re-raised after the revert.
        """
        self._require_pending()
        try:
            client.reorder_tasks(session, self.order)
        except ApiError as exc:
            logger.error("reorder_rejected", extra={"status": exc.status, "error": exc.message})
            self.revert()
            return False
        except Exception:
            # e.g. NoSessionError: still drop the unconfirmed order, then surface it
            self.revert()
            raise
        self.confirm()
        return True

    def _require_pending(self) -> None:
        if self.state is not ReorderState.PENDING:
            raise RuntimeError("No reorder is pending")
