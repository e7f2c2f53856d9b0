"""Root entry points.

``Runtime`` starts one fresh ``Scheduler`` per invocation, so outcomes,
mailboxes and task trees of separate invocations never mix. ``run`` and
``arun`` are shorthands for a default runtime.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, TypeVar

from taskfx.config import RuntimeConfig
from taskfx.outcome import Outcome
from taskfx.scheduler import Scheduler

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Runtime:
    """Runs root tasks under independent schedulers.

    Example:
        runtime = Runtime(clock="virtual")
        outcome = await runtime.run(main)
        assert outcome.ok
    """

    def __init__(self, config: RuntimeConfig | None = None, **overrides: Any) -> None:
        base = config or RuntimeConfig()
        self.config = base.replace(**overrides) if overrides else base

    def scheduler(self) -> Scheduler:
        return Scheduler(self.config)

    async def run(self, source: Any, *args: Any, **kwargs: Any) -> Outcome[Any]:
        """Run ``source`` as a root task and return its outcome.

        Failures of the task land in the outcome; runtime-level faults
        (``DeadlockError``, ``StepLimitExceededError``) and cancellation of
        the calling coroutine propagate.
        """
        outcome = await self.scheduler().run(source, *args, **kwargs)
        if not outcome.ok:
            logger.debug("root task failed: %r", outcome.error)
        return outcome

    async def run_and_unwrap(self, source: Any, *args: Any, **kwargs: Any) -> Any:
        """Run ``source`` and return its value, raising its error on failure.

        Equivalent to ``(await runtime.run(source)).unwrap()``.
        """
        outcome = await self.run(source, *args, **kwargs)
        return outcome.unwrap()

    def __repr__(self) -> str:
        return f"Runtime({self.config!r})"


async def arun(
    source: Any,
    *args: Any,
    config: RuntimeConfig | None = None,
    **kwargs: Any,
) -> Outcome[Any]:
    """Run a root task on the running event loop."""
    return await Runtime(config).run(source, *args, **kwargs)


def run(
    source: Any,
    *args: Any,
    config: RuntimeConfig | None = None,
    **kwargs: Any,
) -> Outcome[Any]:
    """Run a root task to completion on a fresh event loop.

    Must not be called from inside a running event loop; use ``arun`` there.
    """
    return asyncio.run(arun(source, *args, config=config, **kwargs))


__all__ = ["Runtime", "arun", "run"]
