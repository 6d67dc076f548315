"""WhatsApp chat export parsing."""

from __future__ import annotations

from dataclasses import asdict, dataclass


@dataclass
class ParsedMessage:
    """One message recovered from a pasted chat transcript."""

    sender_name: str
    message_text: str  # continuation lines joined with "\n"
    received_at: str  # local time, YYYY-MM-DDTHH:MM:SS
    selected: bool = True  # review state, consumed by the bulk import

    def to_dict(self) -> dict:
        return asdict(self)
