"""
Unit tests for concurrent fetches.

Tests cover:
- Results keyed by query name
- Queries run concurrently
- First failure cancels the remaining queries and propagates unchanged
"""

import asyncio

import pytest
from pymongo.errors import PyMongoError

from catalog.src.services.fanout import fetch_all


class TestFetchAll:
    """Test fan-out then join."""

    @pytest.mark.asyncio
    async def test_results_keyed_by_name(self):
        async def value(result):
            await asyncio.sleep(0)
            return result

        results = await fetch_all(genre=value("Fantasy"), genre_books=value([1, 2]))
        assert results == {"genre": "Fantasy", "genre_books": [1, 2]}

    @pytest.mark.asyncio
    async def test_no_queries(self):
        assert await fetch_all() == {}

    @pytest.mark.asyncio
    async def test_queries_run_concurrently(self):
        """Test both queries are in flight before either finishes."""
        started = []
        gate = asyncio.Event()

        async def query(name):
            started.append(name)
            if len(started) == 2:
                gate.set()
            await asyncio.wait_for(gate.wait(), timeout=1)
            return name

        results = await fetch_all(a=query("a"), b=query("b"))
        assert results == {"a": "a", "b": "b"}

    @pytest.mark.asyncio
    async def test_failure_cancels_siblings(self):
        """Test a failing query cancels the slow one and re-raises."""
        cancelled = asyncio.Event()

        async def slow():
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.set()
                raise

        async def failing():
            await asyncio.sleep(0)
            raise PyMongoError("connection reset")

        with pytest.raises(PyMongoError, match="connection reset"):
            await fetch_all(slow=slow(), failing=failing())

        assert cancelled.is_set()
