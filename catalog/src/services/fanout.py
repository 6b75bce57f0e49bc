"""
Concurrent fetch of independent catalog queries.

Views that show an entity together with its dependents issue the
queries side by side and join on all of them before rendering.
"""

import asyncio
import time
from typing import Any, Awaitable, Dict

import structlog

from shared.metrics import catalog_metrics
from shared.tracing import trace_function

logger = structlog.get_logger(__name__)


@trace_function("catalog.fetch_all")
async def fetch_all(**queries: Awaitable[Any]) -> Dict[str, Any]:
    """
    Run named queries concurrently and return their results by name.

    Join semantics: the call returns only when every query has
    completed. The first failure cancels the queries still running and
    is re-raised unchanged, so partial results never reach a view.

    Args:
        **queries: Awaitables keyed by the name their result is stored under

    Returns:
        Dict mapping each name to its query result

    Example:
        >>> results = await fetch_all(
        ...     genre=genres.get_by_id(genre_id),
        ...     genre_books=books.list_by_genre(genre_id),
        ... )
    """
    tasks = {name: asyncio.ensure_future(query) for name, query in queries.items()}
    label = ",".join(sorted(tasks))
    start_time = time.perf_counter()

    try:
        results = await asyncio.gather(*tasks.values())
    except BaseException as exc:
        for task in tasks.values():
            task.cancel()
        await asyncio.gather(*tasks.values(), return_exceptions=True)
        logger.warning("fetch_all_failed", queries=label, error=str(exc))
        raise
    finally:
        catalog_metrics.fanout_duration.labels(queries=label).observe(
            time.perf_counter() - start_time
        )

    return dict(zip(tasks, results))
