"""Review parsed messages and build the bulk-import request."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from enum import Enum

from .chatlog import ParsedMessage

_LOGGER = logging.getLogger(__name__)

UNKNOWN_SENDER = "Unknown"


class IntakeError(ValueError):
    """Raised when an import or conversion request cannot be built."""


class MessageStatus(Enum):
    """Inbox status assigned by the store once a message is imported."""

    PENDING = "pending"
    CONVERTED = "converted"
    DISMISSED = "dismissed"


@dataclass
class ImportPayload:
    """Request body for the inbox bulk-create endpoint."""

    messages: list[dict] = field(default_factory=list)
    group_name: str = ""

    @property
    def imported(self) -> int:
        return len(self.messages)

    def to_dict(self) -> dict:
        return {"messages": self.messages, "group_name": self.group_name}

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


def selected_messages(messages: list[ParsedMessage]) -> list[ParsedMessage]:
    return [m for m in messages if m.selected]


def toggle(messages: list[ParsedMessage], index: int) -> list[ParsedMessage]:
    """Return a copy of messages with the selection at index flipped."""
    if not 0 <= index < len(messages):
        raise IndexError(f"No parsed message at index {index} ({len(messages)} parsed)")
    return [
        replace(m, selected=not m.selected) if i == index else replace(m)
        for i, m in enumerate(messages)
    ]


def toggle_all(messages: list[ParsedMessage]) -> list[ParsedMessage]:
    """Deselect everything if all are selected, otherwise select everything."""
    all_selected = all(m.selected for m in messages)
    return [replace(m, selected=not all_selected) for m in messages]


def build_import_payload(
    messages: list[ParsedMessage],
    group_name: str | None = None,
) -> ImportPayload:
    """Build the bulk-import body from the selected messages.

    Blank messages are skipped, text is trimmed, and a blank sender becomes
    "Unknown". A non-blank group_name is applied to every record.

    Raises:
        IntakeError: if no message is selected.
    """
    chosen = selected_messages(messages)
    if not chosen:
        raise IntakeError("No messages selected")

    group = (group_name or "").strip()
    records = []
    for msg in chosen:
        text = msg.message_text.strip()
        if not text:
            _LOGGER.info("Skipping blank message from %s at %s", msg.sender_name, msg.received_at)
            continue
        records.append({
            "sender_name": msg.sender_name.strip() or UNKNOWN_SENDER,
            "group_name": group,
            "message_text": text,
            "received_at": msg.received_at,
        })

    return ImportPayload(messages=records, group_name=group)


def summarize(messages: list[ParsedMessage]) -> str:
    """One-line review summary for a parse result."""
    if not messages:
        return "No messages could be parsed. Make sure you paste WhatsApp chat text."
    chosen = len(selected_messages(messages))
    return f"{len(messages)} messages parsed - {chosen} selected for import"
