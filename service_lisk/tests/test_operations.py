"""
Unit tests for the read-through and write-then-invalidate operations.
"""

import asyncio

import pytest
from unittest.mock import AsyncMock, MagicMock
from prometheus_client import CollectorRegistry

from service_lisk.app.accessor import ResourceAccessor, message_from_response
from service_lisk.app.caching import EphemeralCache, MemoryStorage, StoragePort
from shared.errors import (
    ErrorKind, NotFoundError, RemoteServiceError, UnauthorizedError, ValidationError,
    remote_error_for_status,
)
from shared.metrics import MetricsCollector
from shared.test_helpers import FakeClock


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return EphemeralCache(MemoryStorage(clock=clock), max_age=60, clock=clock)


@pytest.fixture
def accessor(cache):
    accessor = ResourceAccessor(cache, credential="key-123", clear_after=0.2)
    yield accessor
    accessor.close()


class TestReadThrough:
    """Test cases for ReadThrough.fetch."""

    @pytest.mark.asyncio
    async def test_miss_loads_and_caches(self, accessor, cache):
        op = accessor.reader("users", default=[], success_message="Fetched users successfully.")
        loader = AsyncMock(return_value=[{"id": "u1"}])

        result = await op.fetch("users_list", loader)

        assert result == [{"id": "u1"}]
        assert op.data == [{"id": "u1"}]
        assert op.loading is False
        assert op.message == "Fetched users successfully."
        assert op.error is None
        assert cache.get("users_list") == [{"id": "u1"}]
        loader.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_hit_skips_loader(self, accessor, cache):
        cache.set("users_list", [{"id": "cached"}])
        op = accessor.reader("users", default=[])
        loader = AsyncMock()

        result = await op.fetch("users_list", loader)

        assert result == [{"id": "cached"}]
        assert op.data == [{"id": "cached"}]
        assert op.loading is False
        assert op.message is None
        loader.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_hit_message(self, accessor, cache):
        cache.set("users_list", [])
        op = accessor.reader("users", hit_message="Fetched users from cache.")
        await op.fetch("users_list", AsyncMock())
        assert op.message == "Fetched users from cache."

    @pytest.mark.asyncio
    async def test_stale_entry_reloads(self, accessor, cache, clock):
        cache.set("k", "old")
        clock.advance(61)
        op = accessor.reader("thing")

        assert await op.fetch("k", AsyncMock(return_value="new")) == "new"
        assert cache.get("k") == "new"

    @pytest.mark.asyncio
    async def test_per_call_max_age(self, accessor, cache, clock):
        cache.set("k", "old")
        clock.advance(10)
        op = accessor.reader("thing")
        loader = AsyncMock(return_value="new")

        assert await op.fetch("k", loader, max_age=5) == "new"
        loader.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failure_becomes_status(self, accessor, cache):
        op = accessor.reader(
            "user",
            error_messages={ErrorKind.NOT_FOUND: "User not found."},
            failure_message="Failed to fetch user",
        )
        op.data = {"id": "previous"}
        loader = AsyncMock(side_effect=NotFoundError("missing", status_code=404))

        result = await op.fetch("user_1", loader)

        assert result is None
        assert op.data == {"id": "previous"}
        assert op.error == "User not found."
        assert op.status.error_kind == ErrorKind.NOT_FOUND
        assert op.last_error.code == "NOT_FOUND"
        assert op.loading is False
        assert cache.inspect("user_1") is None

    @pytest.mark.asyncio
    async def test_unauthorized_default_message(self, accessor):
        op = accessor.reader("users", failure_message="Failed to fetch users")
        await op.fetch("k", AsyncMock(side_effect=UnauthorizedError("nope", status_code=401)))
        assert op.error == "Unauthorized."

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_generic_failure(self, accessor):
        op = accessor.reader("users", failure_message="Failed to fetch users")
        await op.fetch("k", AsyncMock(side_effect=KeyError("boom")))
        assert op.error == "Failed to fetch users"
        assert op.status.error_kind == ErrorKind.REMOTE_FAILURE

    @pytest.mark.asyncio
    async def test_remote_message_preferred_when_unmapped(self, accessor):
        op = accessor.reader("users", failure_message="Failed", prefer_remote_message=True)
        await op.fetch("k", AsyncMock(side_effect=remote_error_for_status(500, "Database offline")))
        assert op.error == "Database offline"

    @pytest.mark.asyncio
    async def test_mapped_message_wins_over_remote(self, accessor):
        op = accessor.reader(
            "users",
            error_messages={ErrorKind.VALIDATION: "Invalid user ID."},
            prefer_remote_message=True,
        )
        await op.fetch("k", AsyncMock(side_effect=remote_error_for_status(400, "id must be a uuid")))
        assert op.error == "Invalid user ID."

    @pytest.mark.asyncio
    async def test_remote_message_ignored_unless_preferred(self, accessor):
        op = accessor.reader("users", failure_message="Failed to fetch users")
        await op.fetch("k", AsyncMock(side_effect=remote_error_for_status(500, "Database offline")))
        assert op.error == "Failed to fetch users"

    @pytest.mark.asyncio
    async def test_missing_credential_short_circuits(self, cache):
        accessor = ResourceAccessor(cache, credential=None)
        op = accessor.reader("users", default=[])
        loader = AsyncMock()

        result = await op.fetch("users_list", loader)

        assert result == []
        assert op.error == "API key is missing."
        assert op.status.error_kind == ErrorKind.MISSING_CREDENTIAL
        assert op.last_error.code == "MISSING_CREDENTIAL"
        loader.assert_not_awaited()
        accessor.close()

    @pytest.mark.asyncio
    async def test_cache_hit_served_without_credential(self, cache):
        cache.set("users_list", ["u"])
        accessor = ResourceAccessor(cache, credential="")
        op = accessor.reader("users")

        assert await op.fetch("users_list", AsyncMock()) == ["u"]
        assert op.error is None
        accessor.close()

    @pytest.mark.asyncio
    async def test_credential_optional(self, cache):
        accessor = ResourceAccessor(cache, require_credential=False)
        op = accessor.reader("users")
        assert await op.fetch("k", AsyncMock(return_value=1)) == 1
        accessor.close()

    @pytest.mark.asyncio
    async def test_cache_write_failure_reported_alongside_success(self, clock):
        storage = MagicMock(spec=StoragePort)
        storage.read.return_value = None
        storage.write.side_effect = OSError("full")
        accessor = ResourceAccessor(EphemeralCache(storage, clock=clock), credential="k")
        op = accessor.reader("users", success_message="ok")

        assert await op.fetch("k", AsyncMock(return_value=[1])) == [1]
        assert op.data == [1]
        assert op.message == "ok"
        assert op.error == "Failed to write cache."
        assert op.status.error_kind == ErrorKind.CACHE_WRITE
        accessor.close()

    @pytest.mark.asyncio
    async def test_success_message_callable(self, accessor):
        op = accessor.reader("users", success_message=lambda users: f"Fetched {len(users)} users.")
        await op.fetch("k", AsyncMock(return_value=[1, 2]))
        assert op.message == "Fetched 2 users."

    @pytest.mark.asyncio
    async def test_concurrent_reads_are_not_deduplicated(self, accessor, cache):
        op = accessor.reader("users")
        first_release = asyncio.Event()
        second_release = asyncio.Event()
        calls = []

        async def first_loader():
            calls.append("first")
            await first_release.wait()
            return "first"

        async def second_loader():
            calls.append("second")
            await second_release.wait()
            return "second"

        first = asyncio.create_task(op.fetch("k", first_loader))
        second = asyncio.create_task(op.fetch("k", second_loader))
        await asyncio.sleep(0)
        assert calls == ["first", "second"]

        second_release.set()
        await second
        first_release.set()
        await first

        # last completion wins
        assert cache.get("k") == "first"
        assert op.data == "first"

    @pytest.mark.asyncio
    async def test_completion_after_close_is_discarded(self, cache):
        accessor = ResourceAccessor(cache, credential="k")
        op = accessor.reader("users", default=[])
        release = asyncio.Event()

        async def loader():
            await release.wait()
            return ["late"]

        task = asyncio.create_task(op.fetch("users_list", loader))
        await asyncio.sleep(0)
        accessor.close()
        release.set()
        await task

        assert op.data == []
        assert op.message is None
        assert cache.get("users_list") is None
        assert op.status.pending_timers == 0

    @pytest.mark.asyncio
    async def test_failure_after_close_is_discarded(self, cache):
        accessor = ResourceAccessor(cache, credential="k")
        op = accessor.reader("users")
        release = asyncio.Event()

        async def loader():
            await release.wait()
            raise RemoteServiceError("down")

        task = asyncio.create_task(op.fetch("users_list", loader))
        await asyncio.sleep(0)
        accessor.close()
        release.set()
        await task

        assert op.error is None
        assert op.last_error is None

    @pytest.mark.asyncio
    async def test_fetch_after_close_is_noop(self, cache):
        accessor = ResourceAccessor(cache, credential="k")
        op = accessor.reader("users", default=[])
        accessor.close()
        loader = AsyncMock()

        assert await op.fetch("k", loader) == []
        loader.assert_not_awaited()


class TestWriteThenInvalidate:
    """Test cases for WriteThenInvalidate.mutate."""

    @pytest.mark.asyncio
    async def test_success_invalidates_and_refetches(self, accessor, cache):
        cache.set("users_list", ["old"])
        cache.set("user_1", {"id": "1"})
        cache.set("unrelated", 1)
        op = accessor.writer("update_user", success_message="User updated successfully.")
        refetch = AsyncMock()

        result = await op.mutate(
            AsyncMock(return_value={"id": "1", "name": "new"}),
            invalidates=["users_list", "user_1"],
            refetch=refetch,
        )

        assert result == {"id": "1", "name": "new"}
        assert op.result == result
        assert op.message == "User updated successfully."
        assert cache.get("users_list") is None
        assert cache.get("user_1") is None
        assert cache.get("unrelated") == 1
        refetch.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failure_leaves_cache_untouched(self, accessor, cache):
        cache.set("users_list", ["old"])
        op = accessor.writer(
            "create_user",
            error_messages={ErrorKind.VALIDATION: "Validation error."},
        )
        refetch = AsyncMock()

        result = await op.mutate(
            AsyncMock(side_effect=ValidationError("bad", status_code=400)),
            invalidates=["users_list"],
            refetch=refetch,
        )

        assert result is None
        assert op.error == "Validation error."
        assert cache.get("users_list") == ["old"]
        refetch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalidates_callable_of_result(self, accessor, cache):
        cache.set("user_charges_owner", [1])
        op = accessor.writer("complete")

        await op.mutate(
            AsyncMock(return_value={"userId": "owner"}),
            invalidates=lambda result: [f"user_charges_{result['userId']}"],
        )
        assert cache.get("user_charges_owner") is None

    @pytest.mark.asyncio
    async def test_server_message_used_when_present(self, accessor):
        op = accessor.writer("delete_user", success_message=message_from_response("User deleted."))
        await op.mutate(AsyncMock(return_value={"message": "User u1 deleted"}))
        assert op.message == "User u1 deleted"
        await op.mutate(AsyncMock(return_value=None))
        assert op.message == "User deleted."

    @pytest.mark.asyncio
    async def test_on_success_runs_before_refetch(self, accessor):
        order = []
        op = accessor.writer("create")

        async def refetch():
            order.append("refetch")

        await op.mutate(
            AsyncMock(return_value=1),
            on_success=lambda result: order.append(("on_success", result)),
            refetch=refetch,
        )
        assert order == [("on_success", 1), "refetch"]

    @pytest.mark.asyncio
    async def test_missing_credential_short_circuits(self, cache):
        accessor = ResourceAccessor(cache, credential=None)
        op = accessor.writer("create")
        call = AsyncMock()

        assert await op.mutate(call) is None
        assert op.error == "API key is missing."
        call.assert_not_awaited()
        accessor.close()

    @pytest.mark.asyncio
    async def test_completion_after_close_skips_invalidation(self, cache):
        cache.set("users_list", ["old"])
        accessor = ResourceAccessor(cache, credential="k")
        op = accessor.writer("create")
        release = asyncio.Event()
        refetch = AsyncMock()

        async def call():
            await release.wait()
            return {"id": "1"}

        task = asyncio.create_task(op.mutate(call, invalidates=["users_list"], refetch=refetch))
        await asyncio.sleep(0)
        accessor.close()
        release.set()
        await task

        assert op.result is None
        assert op.message is None
        assert cache.get("users_list") == ["old"]
        refetch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_reject_never_calls_remote(self, accessor):
        op = accessor.writer("withdraw")
        op.reject(ErrorKind.NOT_FOUND, "Bank account or user not found")
        assert op.error == "Bank account or user not found"
        assert op.status.error_kind == ErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_failing_on_success_is_reported(self, accessor):
        op = accessor.writer("upsert", failure_message="Failed to upsert.")
        refetch = AsyncMock()

        def remember(data):
            data.get("bankAccount")

        result = await op.mutate(
            AsyncMock(return_value=["not", "a", "dict"]),
            on_success=remember,
            refetch=refetch,
        )

        assert result is None
        assert op.loading is False
        assert op.error == "Failed to upsert."
        assert op.status.error_kind == ErrorKind.REMOTE_FAILURE
        assert op.message is None
        refetch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failing_invalidates_callable_is_reported(self, accessor, cache):
        cache.set("k", 1)
        op = accessor.writer("complete")

        result = await op.mutate(
            AsyncMock(return_value=None),
            invalidates=lambda result: [f"charges_{result['userId']}"],
        )

        assert result is None
        assert op.loading is False
        assert op.status.error_kind == ErrorKind.REMOTE_FAILURE
        assert cache.get("k") == 1

    @pytest.mark.asyncio
    async def test_failing_refetch_is_reported(self, accessor, cache):
        cache.set("users_list", ["old"])
        op = accessor.writer("create", success_message="Created.", failure_message="Failed.")

        result = await op.mutate(
            AsyncMock(return_value={"id": "1"}),
            invalidates=["users_list"],
            refetch=AsyncMock(side_effect=RuntimeError("refetch broke")),
        )

        assert result == {"id": "1"}
        assert op.result == {"id": "1"}
        assert op.loading is False
        assert op.message == "Created."
        assert op.error == "Failed."
        assert cache.get("users_list") is None


class TestResourceAccessor:
    """Test cases for ResourceAccessor bookkeeping."""

    def test_duplicate_operation_name(self, cache):
        accessor = ResourceAccessor(cache)
        accessor.reader("users")
        with pytest.raises(ValueError):
            accessor.writer("users")

    def test_statuses_snapshot(self, cache):
        accessor = ResourceAccessor(cache)
        accessor.reader("users")
        accessor.writer("create_user")
        assert set(accessor.statuses()) == {"users", "create_user"}
        assert accessor.operation("users").name == "users"

    def test_close_is_idempotent(self, cache):
        accessor = ResourceAccessor(cache)
        accessor.close()
        accessor.close()
        assert accessor.closed
        assert accessor.generation == 1

    @pytest.mark.asyncio
    async def test_operations_are_metered(self, cache):
        registry = CollectorRegistry()
        metrics = MetricsCollector("lisk-test", registry=registry)
        accessor = ResourceAccessor(cache, credential="k", metrics=metrics)
        op = accessor.reader("users")

        await op.fetch("k", AsyncMock(return_value=1))
        await op.fetch("k", AsyncMock())
        await op.fetch("other", AsyncMock(side_effect=RemoteServiceError("down")))

        def count(outcome):
            return registry.get_sample_value(
                "resource_operations_total", {"operation": "resource.users", "outcome": outcome}
            )

        assert count("ok") == 1
        assert count("hit") == 1
        assert count("error") == 1
        accessor.close()
