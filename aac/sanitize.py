"""Sanitization of raw model output into a commit message.

Models are prompted to reply with the commit message only, but they still
wrap it in code fences, decorate it with markdown, or add a sentence about
the message. ``clean_commit_message`` removes those artifacts line by line
and rejects output that leaves nothing usable behind.

Lines that were blank in the model output are kept as paragraph separators
(collapsed to one); lines that only become empty through cleaning are
dropped entirely.
"""

from __future__ import annotations

import re
from typing import Optional

from .exceptions import SanitizeRejected

MIN_LENGTH = 3

FENCE_TOKENS = frozenset({"```", "'''", "`"})
_FENCE_PREFIXES = ("```", "'''")

_HEADING = re.compile(r"^#+\s*")
_WRAPPERS = (
    re.compile(r"^\*\*(.+)\*\*$"),
    re.compile(r"^\*(.+)\*$"),
    re.compile(r"^`(.+)`$"),
)

# Lines in which the model talks about the message instead of writing it.
_PREAMBLE_START = re.compile(
    r"^(以下|上記|この|コミットメッセージ|生成|作成|変更|について)"
)
_PREAMBLE_TOKENS = ("説明", "について")
_PREAMBLE_EN = re.compile(
    r"^(?:here\s+is|here's|here\s+are|below\s+is|above\s+is|the\s+following"
    r"|this\s+commit\s+message|(?:sure|certainly|okay)[,!.])"
    r"|\bexplanation\s*:",
    re.IGNORECASE,
)

_LABEL_PREFIX = re.compile(
    r"^(?:コミットメッセージ[：:]?|メッセージ[：:]|commit\s+message\s*:|message\s*:)\s*",
    re.IGNORECASE,
)


def is_fence_line(line: str) -> bool:
    return line in FENCE_TOKENS or line.startswith(_FENCE_PREFIXES)


def is_preamble_line(line: str) -> bool:
    if _PREAMBLE_START.match(line):
        return True
    if any(token in line for token in _PREAMBLE_TOKENS):
        return True
    return bool(_PREAMBLE_EN.search(line))


def _strip_markdown(line: str) -> str:
    line = _HEADING.sub("", line, count=1)
    for pattern in _WRAPPERS:
        line = pattern.sub(r"\1", line)
    return line.strip()


def clean_line(line: str) -> Optional[str]:
    """Clean one line until it stops changing.

    Returns ``None`` when the line is a fence marker or preamble and must be
    dropped. An empty string means cleaning consumed the whole line.
    """
    while True:
        before = line
        line = line.strip()
        if is_fence_line(line):
            return None
        line = _strip_markdown(line)
        if is_preamble_line(line):
            return None
        line = _LABEL_PREFIX.sub("", line, count=1).strip()
        if line == before:
            return line


def _collapse_blank_lines(lines: list[str]) -> list[str]:
    out: list[str] = []
    for line in lines:
        if not line and (not out or not out[-1]):
            continue
        out.append(line)
    while out and not out[-1]:
        out.pop()
    return out


def clean_commit_message(raw: Optional[str]) -> str:
    """Turn raw generated text into a commit message.

    Raises:
        SanitizeRejected: nothing usable survives, or the subject line is too
            short or a bare formatting token.
    """
    text = (raw or "").strip()

    kept: list[str] = []
    for raw_line in text.split("\n"):
        if not raw_line.strip():
            kept.append("")
            continue
        line = clean_line(raw_line)
        if line:
            kept.append(line)

    message = "\n".join(_collapse_blank_lines(kept)).strip()

    if len(message) < MIN_LENGTH:
        raise SanitizeRejected("The model produced no usable commit message.")

    subject = message.split("\n", 1)[0].strip()
    if len(subject) < MIN_LENGTH or subject in FENCE_TOKENS:
        raise SanitizeRejected(
            f"The model produced an unusable subject line: {subject!r}"
        )
    return message
