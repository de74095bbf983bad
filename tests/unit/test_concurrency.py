"""Unit tests for request coalescing."""

from __future__ import annotations

import asyncio

import pytest

from src.utils.concurrency import SingleFlight


class TestSingleFlight:
    @pytest.mark.asyncio
    async def test_concurrent_calls_share_one_execution(self) -> None:
        flight: SingleFlight[int] = SingleFlight()
        calls = 0
        gate = asyncio.Event()

        async def work() -> int:
            nonlocal calls
            calls += 1
            await gate.wait()
            return 42

        tasks = [asyncio.create_task(flight.run("k", work)) for _ in range(5)]
        await asyncio.sleep(0)
        assert flight.inflight_keys == ["k"]
        gate.set()

        assert await asyncio.gather(*tasks) == [42] * 5
        assert calls == 1
        assert flight.inflight_keys == []

    @pytest.mark.asyncio
    async def test_different_keys_run_separately(self) -> None:
        flight: SingleFlight[str] = SingleFlight()

        async def echo(value: str) -> str:
            await asyncio.sleep(0)
            return value

        results = await asyncio.gather(flight.run("a", lambda: echo("a")), flight.run("b", lambda: echo("b")))
        assert results == ["a", "b"]

    @pytest.mark.asyncio
    async def test_failure_reaches_every_waiter_and_releases_key(self) -> None:
        flight: SingleFlight[int] = SingleFlight()
        gate = asyncio.Event()

        async def boom() -> int:
            await gate.wait()
            raise RuntimeError("provider down")

        tasks = [asyncio.create_task(flight.run("k", boom)) for _ in range(3)]
        await asyncio.sleep(0)
        gate.set()
        results = await asyncio.gather(*tasks, return_exceptions=True)

        assert all(isinstance(r, RuntimeError) for r in results)
        assert flight.inflight_keys == []

    @pytest.mark.asyncio
    async def test_sequential_calls_run_again(self) -> None:
        flight: SingleFlight[int] = SingleFlight()
        calls = 0

        async def work() -> int:
            nonlocal calls
            calls += 1
            return calls

        assert await flight.run("k", work) == 1
        assert await flight.run("k", work) == 2

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_cancel_leader(self) -> None:
        flight: SingleFlight[str] = SingleFlight()
        gate = asyncio.Event()

        async def work() -> str:
            await gate.wait()
            return "done"

        leader = asyncio.create_task(flight.run("k", work))
        follower = asyncio.create_task(flight.run("k", work))
        await asyncio.sleep(0)
        follower.cancel()
        gate.set()

        assert await leader == "done"
        with pytest.raises(asyncio.CancelledError):
            await follower
