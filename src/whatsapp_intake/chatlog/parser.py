"""Parse pasted WhatsApp chat exports into discrete messages.

Recognized header lines::

    [2026/02/15, 10:30:15] Sender Name: message
    [15/02/2026, 10:30:15] Sender Name: message
    2026/02/15, 10:30 - Sender Name: message
    15/02/2026, 10:30 - Sender Name: message
    2/15/26, 10:30 AM - Sender Name: message

Lines without a header continue the previous message; lines before the first
header (export banners, disclaimers) are dropped.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Callable

from . import ParsedMessage
from .timestamps import resolve_timestamp

_LOGGER = logging.getLogger(__name__)

_DATE = r"\d{1,4}[/.\-]\d{1,2}[/.\-]\d{1,4}"
_TIME = r"\d{1,2}:\d{2}(?::\d{2})?(?:\s*[AaPp][Mm])?"

# Only the fixed-shape prefix is matched by regex; the sender/body split is a
# plain scan in _split_sender().
HEADER_PATTERNS = (
    re.compile(rf"\[(?P<date>{_DATE}),?\s+(?P<time>{_TIME})\]\s+"),
    re.compile(rf"(?P<date>{_DATE}),?\s+(?P<time>{_TIME})\s*[-–—]\s+"),
)

# WhatsApp sprinkles direction marks around system lines and attachments.
_INVISIBLE = "\u200e\u200f\ufeff"


def parse_chat(
    text: str | None,
    now: Callable[[], datetime] | None = None,
) -> list[ParsedMessage]:
    """Parse a pasted chat transcript into messages, in transcript order.

    Args:
        text: Raw transcript text. ``None``, empty, or whitespace-only input
            yields an empty list.
        now: Clock used when a header's date cannot be read. Defaults to
            ``datetime.now``.

    Returns:
        One ParsedMessage per recognized header line. Never raises on
        malformed content.
    """
    if not text or not text.strip():
        return []

    messages: list[ParsedMessage] = []
    current: ParsedMessage | None = None
    dropped = 0

    # Only "\n" ends a line; U+2028, form feeds and the like stay in the body
    for raw_line in text.split("\n"):
        line = raw_line.strip().strip(_INVISIBLE).strip()
        if not line:
            continue

        header = _match_header(line)
        if header is not None:
            if current is not None:
                messages.append(current)
            date_str, time_str, sender, body = header
            current = ParsedMessage(
                sender_name=sender,
                message_text=body,
                received_at=resolve_timestamp(date_str, time_str, now=now),
            )
        elif current is not None:
            current.message_text += "\n" + line
        else:
            dropped += 1

    if current is not None:
        messages.append(current)

    _LOGGER.debug("Parsed %d message(s), dropped %d preamble line(s)", len(messages), dropped)
    return messages


def parse_chat_file(path: Path, now: Callable[[], datetime] | None = None) -> list[ParsedMessage]:
    """Parse an exported ``_chat.txt`` file."""
    return parse_chat(path.read_text(encoding="utf-8-sig"), now=now)


def _match_header(line: str) -> tuple[str, str, str, str] | None:
    """Return (date, time, sender, body) if the line opens a new message."""
    for pattern in HEADER_PATTERNS:
        match = pattern.match(line)
        if match is None:
            continue
        split = _split_sender(line[match.end():])
        if split is None:
            # System lines such as "X joined" have no sender
            continue
        sender, body = split
        return match.group("date"), match.group("time"), sender, body
    return None


def _split_sender(rest: str) -> tuple[str, str] | None:
    """Split ``Sender Name: message`` at the first colon followed by whitespace.

    The sender must be at least one character and the body non-empty; the body
    may itself contain colons.
    """
    start = 1
    while True:
        colon = rest.find(":", start)
        if colon == -1 or colon + 1 >= len(rest):
            return None
        if rest[colon + 1].isspace():
            break
        start = colon + 1

    body = rest[colon + 1:].strip()
    sender = rest[:colon].strip()
    if not body or not sender:
        return None
    return sender, body
