"""Unit tests for the action executor."""

from __future__ import annotations

import asyncio

import pytest

from prtriage.actions import (
    FAILED_LABEL,
    ActionExecutor,
    CommandOutcome,
    CommandState,
    CommandStatus,
)

_SHORT = 0.01


def _executor(states: list[CommandStatus]) -> ActionExecutor:
    return ActionExecutor(
        success_delay_s=_SHORT, error_delay_s=_SHORT, listener=states.append
    )


class TestActionExecutor:
    """Tests for ``ActionExecutor.run``."""

    @pytest.mark.asyncio
    async def test_success_moves_through_states_and_reverts(self) -> None:
        """A successful command shows loading, then success, then idle."""
        states: list[CommandStatus] = []
        executor = _executor(states)

        async def operation() -> int:
            return 7

        final = await executor.run(
            "cmd",
            loading_label="Working...",
            operation=operation,
            on_success=lambda value: CommandOutcome(label=f"Got {value}"),
            on_error=str,
        )

        assert final == CommandStatus(
            command_id="cmd", state=CommandState.SUCCESS, label="Got 7"
        )
        await asyncio.sleep(_SHORT * 5)
        assert [status.state for status in states] == [
            CommandState.IN_FLIGHT,
            CommandState.SUCCESS,
            CommandState.IDLE,
        ]
        assert states[0].label == "Working..."
        assert executor.status("cmd").state is CommandState.IDLE

    @pytest.mark.asyncio
    async def test_failure_becomes_error_state(self) -> None:
        """An exception from the operation is shown as an error."""
        states: list[CommandStatus] = []
        executor = _executor(states)

        async def operation() -> None:
            msg = "nope"
            raise RuntimeError(msg)

        final = await executor.run(
            "cmd",
            loading_label="Working...",
            operation=operation,
            on_success=lambda _: CommandOutcome(label="done"),
            on_error=lambda exc: f"Failed: {exc}",
        )

        assert final is not None
        assert final.state is CommandState.ERROR
        assert final.label == "Failed: nope"
        executor.close()

    @pytest.mark.asyncio
    async def test_reentry_is_rejected_while_in_flight(self) -> None:
        """A second run of the same command is refused until the first ends."""
        executor = ActionExecutor(success_delay_s=_SHORT, error_delay_s=_SHORT)
        release = asyncio.Event()
        invocations = 0

        async def operation() -> None:
            nonlocal invocations
            invocations += 1
            await release.wait()

        def start() -> asyncio.Task[CommandStatus | None]:
            return asyncio.create_task(
                executor.run(
                    "cmd",
                    loading_label="Working...",
                    operation=operation,
                    on_success=lambda _: CommandOutcome(label="done"),
                    on_error=str,
                )
            )

        first = start()
        await asyncio.sleep(0)
        assert executor.is_in_flight("cmd")

        second = await start()
        release.set()
        completed = await first

        assert second is None
        assert invocations == 1
        assert completed is not None
        assert completed.state is CommandState.SUCCESS
        executor.close()

    @pytest.mark.asyncio
    async def test_distinct_commands_run_independently(self) -> None:
        """Different command ids do not block each other."""
        executor = ActionExecutor()

        async def operation() -> None:
            return None

        for command_id in ("a", "b"):
            status = await executor.run(
                command_id,
                loading_label="...",
                operation=operation,
                on_success=lambda _: CommandOutcome(
                    state=CommandState.WARNING, label="partial"
                ),
                on_error=str,
            )
            assert status is not None
            assert status.state is CommandState.WARNING

        assert executor.status("a").state is CommandState.WARNING
        executor.close()

    @pytest.mark.asyncio
    async def test_rerun_after_revert_restarts(self) -> None:
        """Once a command has reverted it can run again."""
        executor = ActionExecutor(success_delay_s=_SHORT, error_delay_s=_SHORT)
        calls = 0

        async def operation() -> None:
            nonlocal calls
            calls += 1

        for _ in range(2):
            await executor.run(
                "cmd",
                loading_label="...",
                operation=operation,
                on_success=lambda _: CommandOutcome(label="ok"),
                on_error=str,
            )
            await asyncio.sleep(_SHORT * 5)

        assert calls == 2
        assert executor.status("cmd").state is CommandState.IDLE

    @pytest.mark.asyncio
    async def test_raising_success_handler_becomes_error_state(self) -> None:
        """A success handler that raises does not leave the command in flight."""
        executor = ActionExecutor(success_delay_s=_SHORT, error_delay_s=_SHORT)

        async def operation() -> int:
            return 1

        def on_success(value: int) -> CommandOutcome:
            msg = f"cannot describe {value}"
            raise ValueError(msg)

        final = await executor.run(
            "cmd",
            loading_label="...",
            operation=operation,
            on_success=on_success,
            on_error=lambda exc: f"Failed: {exc}",
        )

        assert final is not None
        assert final.state is CommandState.ERROR
        assert final.label == "Failed: cannot describe 1"
        assert not executor.is_in_flight("cmd")
        executor.close()

    @pytest.mark.asyncio
    async def test_raising_error_handler_still_releases_command(self) -> None:
        """An error handler that raises propagates after showing an error."""
        states: list[CommandStatus] = []
        executor = _executor(states)

        async def operation() -> None:
            msg = "nope"
            raise RuntimeError(msg)

        def on_error(exc: Exception) -> str:
            msg = f"cannot label {exc}"
            raise LookupError(msg)

        with pytest.raises(LookupError, match="cannot label nope"):
            await executor.run(
                "cmd",
                loading_label="...",
                operation=operation,
                on_success=lambda _: CommandOutcome(label="done"),
                on_error=on_error,
            )

        assert executor.status("cmd") == CommandStatus(
            command_id="cmd", state=CommandState.ERROR, label=FAILED_LABEL
        )
        assert not executor.is_in_flight("cmd")
        await asyncio.sleep(_SHORT * 5)
        assert states[-1].state is CommandState.IDLE
