"""
Instruction modules for taskfx.

Each instruction has an ``*Effect`` dataclass, a lowercase factory and a
CamelCase alias, matching the rest of the effect ecosystem.
"""

from .base import EffectBase, create_effect_with_trace
from .control import Self, SelfEffect, Suspend, SuspendEffect, self_, suspend
from .send import Send, SendEffect, send
from .spawn import Fork, ForkEffect, Join, JoinEffect, Spawn, SpawnEffect, fork, join, spawn
from .time import Sleep, SleepEffect, sleep
from .wait import Wait, WaitEffect, is_pending, normalize_source, wait

__all__ = [  # noqa: RUF022
    # Base
    "EffectBase",
    "create_effect_with_trace",
    # Effect types
    "WaitEffect",
    "SendEffect",
    "SleepEffect",
    "SpawnEffect",
    "ForkEffect",
    "JoinEffect",
    "SelfEffect",
    "SuspendEffect",
    # CamelCase factories
    "Wait",
    "Send",
    "Sleep",
    "Spawn",
    "Fork",
    "Join",
    "Self",
    "Suspend",
    # Lowercase factories
    "wait",
    "send",
    "sleep",
    "spawn",
    "fork",
    "join",
    "self_",
    "suspend",
    # Helpers
    "is_pending",
    "normalize_source",
]
