"""Current organization selection with typed change notifications."""

from __future__ import annotations

import typing as typ

import msgspec

if typ.TYPE_CHECKING:
    import collections.abc as cabc


class OrganizationChanged(msgspec.Struct, kw_only=True, frozen=True):
    """Payload published when the selected organization changes."""

    previous: str | None
    current: str


type SelectionListener = cabc.Callable[[OrganizationChanged], cabc.Awaitable[None]]


class WorkspaceSelection:
    """Hold the selected organization and notify subscribers on change.

    Subscribers are awaited one after another in subscription order, so a
    listener can rely on earlier listeners having finished.
    """

    def __init__(self, current: str | None = None) -> None:
        """Start with ``current`` selected, or nothing."""
        self._current = current
        self._listeners: list[SelectionListener] = []

    @property
    def current(self) -> str | None:
        """Return the selected organization login, if any."""
        return self._current

    def subscribe(self, listener: SelectionListener) -> cabc.Callable[[], None]:
        """Register ``listener`` and return a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def select(self, login: str, *, force: bool = False) -> bool:
        """Select ``login`` and notify subscribers; return whether they were notified.

        Re-selecting the current organization does nothing unless ``force``
        is set.
        """
        if login == self._current and not force:
            return False
        event = OrganizationChanged(previous=self._current, current=login)
        self._current = login
        for listener in list(self._listeners):
            await listener(event)
        return True
