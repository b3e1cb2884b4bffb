"""Tests for the saga undo log."""

import pytest
from kungfu import Error, Ok

from helpers import expect_ok
from storefront.saga import Rollback, Saga

pytestmark = pytest.mark.anyio


async def _ok(value):
    return Ok(value)


async def _fail(code):
    return Error(code)


class TestStages:
    async def test_success_returns_stage_result(self):
        saga = Saga("order")

        assert expect_ok(await saga.stage("reserve", _ok(3))) == 3
        assert saga.completed == ("reserve",)

    async def test_failed_stage_leaves_nothing_to_undo(self):
        undone = []

        async def undo(value):
            undone.append(value)

        saga = Saga("order")
        match await saga.stage("reserve", _fail("stock_exceeded"), undo=undo):
            case Error(code):
                assert code == "stock_exceeded"
            case Ok(_):
                pytest.fail("stage should fail")

        assert saga.completed == ()
        assert await saga.rollback() == Rollback()
        assert undone == []


class TestRollback:
    async def test_undoes_newest_first_with_stage_values(self):
        undone = []

        async def undo(value):
            undone.append(value)

        saga = Saga("order")
        await saga.stage("place", _ok("order-1"), undo=undo)
        await saga.stage("notify", _ok("email"))
        await saga.stage("hold", _ok("hold-7"), undo=undo)

        rollback = await saga.rollback()

        assert undone == ["hold-7", "order-1"]
        assert rollback.undone == ("hold", "place")
        assert rollback.complete is True

    async def test_failing_undo_is_reported_and_others_still_run(self, caplog):
        undone = []

        async def broken(value):
            raise RuntimeError("cannot undo")

        async def undo(value):
            undone.append(value)

        saga = Saga("order")
        await saga.stage("place", _ok("order-1"), undo=undo)
        await saga.stage("hold", _ok("hold-7"), undo=broken)

        with caplog.at_level("ERROR", logger="storefront.saga._saga"):
            rollback = await saga.rollback()

        assert rollback.failed == ("hold",)
        assert rollback.undone == ("place",)
        assert rollback.complete is False
        assert undone == ["order-1"]
        assert any("undo of hold failed" in r.getMessage() for r in caplog.records)

    async def test_second_rollback_is_empty(self):
        calls = []

        async def undo(value):
            calls.append(value)

        saga = Saga("order")
        await saga.stage("place", _ok(1), undo=undo)

        await saga.rollback()
        assert await saga.rollback() == Rollback()
        assert calls == [1]
