"""Prompt construction for commit message generation."""

from __future__ import annotations

import re

from .exceptions import ValidationError

INPUT_HEADING = "# 入力"

_BACKTICK_RUN = re.compile(r"`{3,}")


def _fence_for(diff: str) -> str:
    """Return a backtick fence longer than any backtick run in ``diff``."""
    longest = max((len(m.group(0)) for m in _BACKTICK_RUN.finditer(diff)), default=0)
    return "`" * max(3, longest + 1)


def build_prompt(template: str, diff: str) -> str:
    """Instructions first, then the diff in a fenced block."""
    if not diff or not diff.strip():
        raise ValidationError("Diff content cannot be empty.")
    fence = _fence_for(diff)
    body = diff.rstrip("\n")
    return "\n".join(
        [template.rstrip(), "", INPUT_HEADING, f"{fence}diff", body, fence]
    )
