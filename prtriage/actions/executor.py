"""Command runner with in-flight guarding and self-reverting display states.

Each command identity moves through ``idle -> in_flight -> success | warning
| error -> idle``. While a command is in flight a second invocation is
rejected rather than queued. The terminal display state reverts to idle
after a fixed delay, longer for success and warning than for error.
Operations carry no timeout; a hung call keeps its command in flight.
"""

from __future__ import annotations

import asyncio
import enum
import typing as typ

import msgspec

from prtriage.observability import TriageEventLogger

if typ.TYPE_CHECKING:
    import collections.abc as cabc

DEFAULT_SUCCESS_DELAY_S = 3.0
DEFAULT_ERROR_DELAY_S = 2.0
FAILED_LABEL = "Failed"


class CommandState(enum.StrEnum):
    """Display state of one command."""

    IDLE = "idle"
    IN_FLIGHT = "in_flight"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class CommandStatus(msgspec.Struct, kw_only=True, frozen=True):
    """State and label shown for a command."""

    command_id: str
    state: CommandState = CommandState.IDLE
    label: str = ""


class CommandOutcome(msgspec.Struct, kw_only=True, frozen=True):
    """Terminal state chosen by a success handler."""

    state: CommandState = CommandState.SUCCESS
    label: str


type StatusListener = cabc.Callable[[CommandStatus], None]


class ActionExecutor:
    """Run remediation commands one at a time per command identity."""

    def __init__(
        self,
        *,
        success_delay_s: float = DEFAULT_SUCCESS_DELAY_S,
        error_delay_s: float = DEFAULT_ERROR_DELAY_S,
        listener: StatusListener | None = None,
        events: TriageEventLogger | None = None,
    ) -> None:
        """Configure revert delays and the optional state listener."""
        self._success_delay_s = success_delay_s
        self._error_delay_s = error_delay_s
        self._listener = listener
        self._events = events or TriageEventLogger()
        self._statuses: dict[str, CommandStatus] = {}
        self._generations: dict[str, int] = {}
        self._reverts: dict[str, asyncio.TimerHandle] = {}

    def status(self, command_id: str) -> CommandStatus:
        """Return the current status of ``command_id``."""
        return self._statuses.get(command_id, CommandStatus(command_id=command_id))

    def is_in_flight(self, command_id: str) -> bool:
        """Return whether ``command_id`` is currently running."""
        return self.status(command_id).state is CommandState.IN_FLIGHT

    async def run[T](
        self,
        command_id: str,
        *,
        loading_label: str,
        operation: cabc.Callable[[], cabc.Awaitable[T]],
        on_success: cabc.Callable[[T], CommandOutcome],
        on_error: cabc.Callable[[Exception], str],
    ) -> CommandStatus | None:
        """Run ``operation`` once and return the terminal status.

        Returns ``None`` without calling ``operation`` when the command is
        already in flight. A raising ``on_success`` is treated like a failed
        operation. If ``on_error`` itself raises, the command is shown as
        ``FAILED_LABEL`` before the exception propagates.
        """
        if self.is_in_flight(command_id):
            return None

        self._set(
            CommandStatus(
                command_id=command_id,
                state=CommandState.IN_FLIGHT,
                label=loading_label,
            )
        )
        try:
            final, delay = await self._execute(
                command_id, operation, on_success=on_success, on_error=on_error
            )
        except BaseException:
            final = CommandStatus(
                command_id=command_id, state=CommandState.ERROR, label=FAILED_LABEL
            )
            self._schedule_revert(command_id, self._set(final), self._error_delay_s)
            raise

        generation = self._set(final)
        self._schedule_revert(command_id, generation, delay)
        return final

    async def _execute[T](
        self,
        command_id: str,
        operation: cabc.Callable[[], cabc.Awaitable[T]],
        *,
        on_success: cabc.Callable[[T], CommandOutcome],
        on_error: cabc.Callable[[Exception], str],
    ) -> tuple[CommandStatus, float]:
        try:
            outcome = on_success(await operation())
        except Exception as exc:  # noqa: BLE001 - every failure becomes an error state
            self._events.log_action_failed(command_id=command_id, error=exc)
            final = CommandStatus(
                command_id=command_id, state=CommandState.ERROR, label=on_error(exc)
            )
            return final, self._error_delay_s

        final = CommandStatus(
            command_id=command_id, state=outcome.state, label=outcome.label
        )
        self._events.log_action_completed(
            command_id=command_id, state=final.state, label=final.label
        )
        if outcome.state is CommandState.ERROR:
            return final, self._error_delay_s
        return final, self._success_delay_s

    def close(self) -> None:
        """Cancel pending reverts."""
        for handle in self._reverts.values():
            handle.cancel()
        self._reverts.clear()

    def _set(self, status: CommandStatus) -> int:
        generation = self._generations.get(status.command_id, 0) + 1
        self._generations[status.command_id] = generation
        self._statuses[status.command_id] = status
        pending = self._reverts.pop(status.command_id, None)
        if pending is not None:
            pending.cancel()
        if self._listener is not None:
            self._listener(status)
        return generation

    def _schedule_revert(self, command_id: str, generation: int, delay: float) -> None:
        loop = asyncio.get_running_loop()
        self._reverts[command_id] = loop.call_later(
            delay, self._revert, command_id, generation
        )

    def _revert(self, command_id: str, generation: int) -> None:
        if self._generations.get(command_id) != generation:
            return
        self._reverts.pop(command_id, None)
        self._set(CommandStatus(command_id=command_id))
