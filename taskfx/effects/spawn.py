"""Concurrent child tasks: spawn, fork and join."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ._validators import ensure_task_like
from .base import EffectBase, create_effect_with_trace


@dataclass(frozen=True)
class SpawnEffect(EffectBase):
    """Start ``task`` concurrently; the caller tracks it for ``join``."""

    tag = "spawn"

    task: Any

    def __post_init__(self) -> None:
        ensure_task_like(self.task, name="task")


@dataclass(frozen=True)
class ForkEffect(EffectBase):
    """Start ``task`` concurrently with its failures isolated from the caller."""

    tag = "fork"

    task: Any

    def __post_init__(self) -> None:
        ensure_task_like(self.task, name="task")


@dataclass(frozen=True)
class JoinEffect(EffectBase):
    """Wait for every task the caller spawned before this join."""

    tag = "join"


def spawn(task: Any) -> SpawnEffect:
    return create_effect_with_trace(SpawnEffect(task=task))


def Spawn(task: Any) -> SpawnEffect:
    return create_effect_with_trace(SpawnEffect(task=task))


def fork(task: Any) -> ForkEffect:
    return create_effect_with_trace(ForkEffect(task=task))


def Fork(task: Any) -> ForkEffect:
    return create_effect_with_trace(ForkEffect(task=task))


def join() -> JoinEffect:
    return create_effect_with_trace(JoinEffect())


def Join() -> JoinEffect:
    return create_effect_with_trace(JoinEffect())


__all__ = [
    "Fork",
    "ForkEffect",
    "Join",
    "JoinEffect",
    "Spawn",
    "SpawnEffect",
    "fork",
    "join",
    "spawn",
]
