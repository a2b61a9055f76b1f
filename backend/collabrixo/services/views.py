"""
List views: one fetched collection per page and its loading/error state.

    loading -> ready(items) | error(message)

Live views subscribe to the collection's channel and re-fetch the whole list
on every notification; the held list is replaced, never patched.
"""

from __future__ import annotations

import inspect
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Generic, List, Optional, Sequence, Type, TypeVar, Union

from loguru import logger
from pydantic import ValidationError

from collabrixo.core.errors import CollabError
from collabrixo.models.base import Document
from collabrixo.models.work_item import Difficulty, Status, WorkItem
from collabrixo.services.changes import ChangeEvent
from collabrixo.services.store import RemoteStore

D = TypeVar("D", bound=Document)

RenderCallback = Callable[[Dict[str, Any]], Union[None, Awaitable[None]]]
Decorate = Callable[[Any], Dict[str, Any]]


class ViewState(str, Enum):
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class ListView(Generic[D]):
    def __init__(
        self,
        store: RemoteStore,
        collection: str,
        model: Type[D],
        *,
        order_by: Optional[str] = "$createdAt",
        filters: Sequence[str] = (),
        live: bool = False,
        on_render: Optional[RenderCallback] = None,
        error_message: Optional[str] = None,
        decorate: Optional[Decorate] = None,
    ) -> None:
        self.store = store
        self.collection = collection
        self.model = model
        self.order_by = order_by
        self.filters = tuple(filters)
        self.live = live
        self.on_render = on_render
        self.error_message = error_message
        self.decorate = decorate

        self.state = ViewState.LOADING
        self.items: List[D] = []
        self.error: Optional[str] = None
        self.fetches = 0

        # bumped on close(); results from an older generation are dropped
        self._generation = 0
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def opened(self) -> bool:
        return self._unsubscribe is not None

    async def open(self) -> "ListView[D]":
        await self.refresh()
        if self.live and self._unsubscribe is None:
            self._unsubscribe = self.store.subscribe(self.collection, self._on_change)
        return self

    async def close(self) -> None:
        self._generation += 1
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def refresh(self) -> ViewState:
        """Fetch the full list again; the previous items stay until replaced."""
        generation = self._generation
        self.fetches += 1
        try:
            documents = await self.store.list(self.collection, order_by=self.order_by, filters=self.filters)
            items = [self.model.model_validate(doc) for doc in documents]
        except (CollabError, ValidationError) as exc:
            if generation != self._generation:
                return self.state
            logger.error("Error fetching {}: {}", self.collection, exc)
            self.state = ViewState.ERROR
            self.error = self.error_message or _message(exc)
        else:
            if generation != self._generation:
                logger.debug("Dropping stale {} result", self.collection)
                return self.state
            self.items = items
            self.error = None
            self.state = ViewState.READY
        await self._render()
        return self.state

    async def _on_change(self, event: ChangeEvent) -> None:
        logger.debug("{} changed ({}); re-fetching", self.collection, ", ".join(event.events) or "?")
        await self.refresh()

    async def _render(self) -> None:
        if self.on_render is None:
            return
        outcome = self.on_render(self.snapshot())
        if inspect.isawaitable(outcome):
            await outcome

    def snapshot(self) -> Dict[str, Any]:
        if self.state is ViewState.ERROR:
            return {"state": self.state.value, "message": self.error}
        return {"state": self.state.value, "items": [self.render_item(item) for item in self.items]}

    def render_item(self, item: D) -> Dict[str, Any]:
        """API form of one item plus whatever `decorate` derives from it (URLs...)."""
        data = item.to_api()
        if self.decorate is not None:
            data.update(self.decorate(item))
        return data


class BoardView(ListView[WorkItem]):
    """Kanban board: work items grouped by status column."""

    COLUMNS = (Status.TODO, Status.IN_PROGRESS, Status.DONE)

    def __init__(self, store: RemoteStore, collection: str, **kwargs: Any) -> None:
        super().__init__(store, collection, WorkItem, **kwargs)

    def columns(self) -> Dict[str, List[WorkItem]]:
        grouped: Dict[str, List[WorkItem]] = {status.value: [] for status in self.COLUMNS}
        for item in self.items:
            grouped[item.status.value].append(item)
        return grouped

    def summary(self) -> List[Dict[str, Any]]:
        return assignee_summary(self.items)

    def snapshot(self) -> Dict[str, Any]:
        if self.state is not ViewState.READY:
            return super().snapshot()
        return {
            "state": self.state.value,
            "columns": {
                status: [self.render_item(item) for item in items] for status, items in self.columns().items()
            },
            "summary": self.summary(),
        }


def assignee_summary(items: Sequence[WorkItem]) -> List[Dict[str, Any]]:
    """Per-assignee progress card: totals, done count and difficulty mix."""
    assignees: List[str] = []
    for item in items:
        if item.assignee not in assignees:
            assignees.append(item.assignee)

    cards = []
    for assignee in assignees:
        mine = [item for item in items if item.assignee == assignee]
        completed = sum(1 for item in mine if item.status is Status.DONE)
        cards.append(
            {
                "assignee": assignee,
                "total": len(mine),
                "completed": completed,
                "progress": round(completed / len(mine) * 100, 1) if mine else 0.0,
                "difficulty": {
                    level.value: sum(1 for item in mine if item.difficulty is level) for level in Difficulty
                },
            }
        )
    return cards


def _message(exc: Exception) -> str:
    if isinstance(exc, CollabError):
        return exc.message
    return "Failed to load data. Please try refreshing the page."
