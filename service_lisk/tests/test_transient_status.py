"""
Unit tests for TransientStatus.
"""

import asyncio

import pytest

from service_lisk.app.status import StatusSnapshot, TransientStatus
from shared.errors import ErrorKind


CLEAR_AFTER = 0.2


class TestTransientStatus:
    """Test cases for TransientStatus."""

    @pytest.fixture
    def status(self):
        status = TransientStatus("fetch_users", clear_after=CLEAR_AFTER)
        yield status
        status.dispose()

    @pytest.mark.asyncio
    async def test_initial_state(self, status):
        assert status.snapshot() == StatusSnapshot()

    @pytest.mark.asyncio
    async def test_begin_keeps_previous_messages(self, status):
        status.succeed("done")
        status.begin()
        assert status.loading is True
        assert status.message == "done"

    @pytest.mark.asyncio
    async def test_begin_and_clear(self, status):
        status.fail(ErrorKind.NOT_FOUND, "User not found.")
        status.begin_and_clear()
        assert status.snapshot() == StatusSnapshot(loading=True)

    @pytest.mark.asyncio
    async def test_succeed_auto_clears(self, status):
        status.begin()
        status.succeed("Fetched users successfully.")
        assert status.loading is False
        assert status.message == "Fetched users successfully."

        await asyncio.sleep(CLEAR_AFTER + 0.1)
        assert status.message is None
        assert status.pending_timers == 0

    @pytest.mark.asyncio
    async def test_fail_auto_clears(self, status):
        status.fail(ErrorKind.UNAUTHORIZED)
        assert status.error == "Unauthorized."
        assert status.error_kind == ErrorKind.UNAUTHORIZED

        await asyncio.sleep(CLEAR_AFTER + 0.1)
        assert status.error is None
        assert status.error_kind is None

    @pytest.mark.asyncio
    async def test_loading_is_never_auto_cleared(self, status):
        status.begin()
        await asyncio.sleep(CLEAR_AFTER + 0.1)
        assert status.loading is True

    @pytest.mark.asyncio
    async def test_late_timer_does_not_clear_newer_message(self):
        status = TransientStatus("op", clear_after=0.5)
        status.succeed("first")
        await asyncio.sleep(0.3)
        status.succeed("second")
        await asyncio.sleep(0.3)
        # first timer fired but second token is current
        assert status.message == "second"
        await asyncio.sleep(0.3)
        assert status.message is None
        status.dispose()

    @pytest.mark.asyncio
    async def test_error_and_message_clear_independently(self):
        status = TransientStatus("op", clear_after=0.5)
        status.fail(ErrorKind.REMOTE_FAILURE, "A")
        await asyncio.sleep(0.25)
        status.succeed("B")
        await asyncio.sleep(0.35)
        assert status.error is None
        assert status.message == "B"
        await asyncio.sleep(0.3)
        assert status.message is None
        status.dispose()

    @pytest.mark.asyncio
    async def test_reset_cancels_timers(self, status):
        status.succeed("done")
        status.fail(ErrorKind.VALIDATION)
        assert status.pending_timers == 2
        status.reset()
        assert status.pending_timers == 0
        assert status.snapshot() == StatusSnapshot()

    @pytest.mark.asyncio
    async def test_dispose_ignores_later_transitions(self, status):
        status.succeed("done")
        status.dispose()
        assert status.disposed
        assert status.pending_timers == 0

        status.begin()
        status.succeed("late")
        status.fail(ErrorKind.REMOTE_FAILURE)
        assert status.snapshot() == StatusSnapshot()

    def test_without_running_loop_no_timer_is_armed(self):
        status = TransientStatus("op", clear_after=CLEAR_AFTER)
        status.succeed("done")
        assert status.message == "done"
        assert status.pending_timers == 0
