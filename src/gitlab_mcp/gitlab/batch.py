"""Bounded-concurrency batch lookups.

Resolves many keys (numeric ids or names) through a single-entity lookup
coroutine using a fixed pool of workers. Each worker pulls the next key as
soon as it finishes the previous one, so a slow lookup never holds back the
rest of the queue. Per-key outcomes are explicit:

- Resolved: the entity was found
- NotFound: GitLab answered 404 (or an empty search); recorded against the key
- Fatal: any other classified failure; the whole batch is cancelled and the
  error is raised, no partial result is returned
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from ..metrics import gitlab_batch_lookups_total
from .errors import BatchSizeExceededError, GitLabClientError, GitLabNotFoundError, GitLabValidationError

logger = logging.getLogger("gitlab_mcp.gitlab.batch")

__all__ = [
    "DEFAULT_CONCURRENCY",
    "MAX_BATCH_SIZE",
    "BatchResult",
    "Fatal",
    "NotFound",
    "Resolved",
    "lookup_outcome",
    "resolve_batch",
]

K = TypeVar("K")
E = TypeVar("E")

MAX_BATCH_SIZE = 50
DEFAULT_CONCURRENCY = 5


@dataclass(frozen=True)
class Resolved(Generic[K, E]):
    key: K
    entity: E


@dataclass(frozen=True)
class NotFound(Generic[K]):
    key: K


@dataclass(frozen=True)
class Fatal(Generic[K]):
    key: K
    cause: GitLabClientError


LookupOutcome = Resolved | NotFound | Fatal


@dataclass(frozen=True)
class BatchResult(Generic[K, E]):
    """Batch outcome, index-aligned with the input keys.

    ``outcomes[i]`` is the Resolved or NotFound for ``keys[i]``; ``resolved``
    and ``not_found`` are the same outcomes split in input order.
    """

    outcomes: list[Resolved | NotFound] = field(default_factory=list)

    @property
    def resolved(self) -> list[E]:
        return [o.entity for o in self.outcomes if isinstance(o, Resolved)]

    @property
    def not_found(self) -> list[K]:
        return [o.key for o in self.outcomes if isinstance(o, NotFound)]


async def lookup_outcome(lookup: Callable[[K], Awaitable[E]], key: K) -> LookupOutcome:
    """Run one lookup and classify its result without raising.

    Only GitLabClientError is classified; programming errors propagate.
    """
    try:
        entity = await lookup(key)
    except GitLabNotFoundError:
        return NotFound(key)
    except GitLabClientError as e:
        return Fatal(key, e)
    return Resolved(key, entity)


async def resolve_batch(
    keys: Sequence[K],
    lookup: Callable[[K], Awaitable[E]],
    concurrency_limit: int = DEFAULT_CONCURRENCY,
    max_batch_size: int = MAX_BATCH_SIZE,
) -> BatchResult[K, E]:
    """Resolve every key with at most ``concurrency_limit`` lookups in flight.

    Args:
        keys: Lookup keys; order defines the order of the result
        lookup: Single-entity lookup coroutine
        concurrency_limit: Worker pool size (>= 1)
        max_batch_size: Reject batches larger than this before any lookup

    Returns:
        BatchResult aligned with ``keys``

    Raises:
        BatchSizeExceededError: More than max_batch_size keys
        GitLabValidationError: concurrency_limit < 1
        GitLabClientError: First non-404 failure; remaining lookups are cancelled
    """
    if len(keys) > max_batch_size:
        raise BatchSizeExceededError(len(keys), max_batch_size)
    if concurrency_limit < 1:
        raise GitLabValidationError(
            f"Invalid concurrency limit: {concurrency_limit} (must be >= 1)",
            field="concurrency_limit",
        )
    if not keys:
        return BatchResult(outcomes=[])

    queue: asyncio.Queue[tuple[int, K]] = asyncio.Queue()
    for index, key in enumerate(keys):
        queue.put_nowait((index, key))

    slots: list[Resolved | NotFound | None] = [None] * len(keys)

    async def worker() -> None:
        while True:
            try:
                index, key = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            outcome = await lookup_outcome(lookup, key)
            if isinstance(outcome, Fatal):
                raise outcome.cause
            slots[index] = outcome

    pool_size = min(concurrency_limit, len(keys))
    workers = [asyncio.create_task(worker()) for _ in range(pool_size)]
    try:
        await asyncio.gather(*workers)
    except BaseException:
        for task in workers:
            task.cancel()
        await asyncio.gather(*workers, return_exceptions=True)
        logger.warning(
            "gitlab_batch_aborted",
            extra={"batch_size": len(keys), "completed": sum(s is not None for s in slots)},
        )
        raise

    outcomes = [slot for slot in slots if slot is not None]
    result: BatchResult[K, E] = BatchResult(outcomes=outcomes)
    gitlab_batch_lookups_total.labels(outcome="resolved").inc(len(result.resolved))
    gitlab_batch_lookups_total.labels(outcome="not_found").inc(len(result.not_found))
    logger.info(
        "gitlab_batch_complete",
        extra={
            "batch_size": len(keys),
            "resolved": len(result.resolved),
            "not_found": len(result.not_found),
            "concurrency": pool_size,
        },
    )
    return result
