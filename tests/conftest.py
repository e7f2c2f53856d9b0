"""
Pytest configuration for taskfx tests.

Provides runtimes for both clocks. Most tests use the virtual clock so that
sleeps finish instantly and message order is deterministic.
"""

import pytest

from taskfx import Runtime


@pytest.fixture
def runtime() -> Runtime:
    """Runtime on the virtual clock."""
    return Runtime(clock="virtual")


@pytest.fixture
def real_runtime() -> Runtime:
    """Runtime sleeping on the monotonic clock."""
    return Runtime(clock="real")


@pytest.fixture(autouse=True)
def _clear_taskfx_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("TASKFX_CLOCK", "TASKFX_START_TIME", "TASKFX_MAX_STEPS", "TASKFX_WARN_UNJOINED"):
        monkeypatch.delenv(name, raising=False)
