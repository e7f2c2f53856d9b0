"""
Utility functions for the taskfx library.
"""

from __future__ import annotations

import linecache
import os
import sys
from dataclasses import dataclass, field
from typing import Any

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))


def _is_site_package(path: str) -> bool:
    normalized = path.replace("\\", "/").lower()
    return "/site-packages/" in normalized


def _is_taskfx_internal(path: str) -> bool:
    return os.path.abspath(path).startswith(_PACKAGE_DIR + os.sep)


def _is_user_frame(path: str) -> bool:
    if path.startswith("<"):
        return True
    return not (_is_site_package(path) or _is_taskfx_internal(path))


# Environment variable to control debug mode
DEBUG_EFFECTS = os.environ.get("TASKFX_DEBUG", "").lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class EffectCreationContext:
    """Where an instruction was created."""

    filename: str
    line: int
    function: str
    code: str | None = None
    stack_trace: tuple[dict[str, Any], ...] = field(default=(), repr=False)

    def format_location(self) -> str:
        """Format the creation location as a string."""
        return f"{self.filename}:{self.line} in {self.function}"

    def format_full(self) -> str:
        lines = [f"Instruction created at {self.format_location()}"]
        if self.code:
            lines.append(f"    {self.code}")
        if self.stack_trace:
            lines.append("\nCreation stack trace:")
            for frame in self.stack_trace:
                lines.append(
                    f'  File "{frame["filename"]}", line {frame["line"]}, in {frame["function"]}'
                )
                if frame.get("code"):
                    lines.append(f"    {frame['code']}")
        return "\n".join(lines)


def capture_creation_context(skip_frames: int = 2) -> EffectCreationContext | None:
    """
    Capture the caller's location for debugging instruction creation.

    Args:
        skip_frames: Number of frames to skip (default 2 to skip this function and caller)

    Returns:
        EffectCreationContext for the first frame outside taskfx, or None when
        frame introspection is unavailable. With ``TASKFX_DEBUG`` set the
        surrounding stack is recorded too.
    """
    try:
        frame = sys._getframe(skip_frames)
    except ValueError:
        return None

    while frame.f_back is not None and not _is_user_frame(frame.f_code.co_filename):
        frame = frame.f_back

    filename = frame.f_code.co_filename
    line = frame.f_lineno
    code = linecache.getline(filename, line).strip() or None

    stack_data: list[dict[str, Any]] = []
    if DEBUG_EFFECTS:
        current_frame = frame.f_back
        depth = 0
        while current_frame and depth < 12:
            frame_filename = current_frame.f_code.co_filename
            stack_data.append(
                {
                    "filename": frame_filename,
                    "line": current_frame.f_lineno,
                    "function": current_frame.f_code.co_name,
                    "code": linecache.getline(frame_filename, current_frame.f_lineno).strip(),
                }
            )
            depth += 1
            current_frame = current_frame.f_back

    return EffectCreationContext(
        filename=filename,
        line=line,
        function=frame.f_code.co_name,
        code=code,
        stack_trace=tuple(stack_data),
    )


__all__ = [
    "DEBUG_EFFECTS",
    "EffectCreationContext",
    "capture_creation_context",
]
