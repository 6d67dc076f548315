"""Turn an inbox message into a help-desk ticket draft."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, replace
from pathlib import Path

from .chatlog import ParsedMessage
from .config import Config
from .intake import UNKNOWN_SENDER, IntakeError
from .llm import complete_json

_LOGGER = logging.getLogger(__name__)

TICKET_PROMPT_PATH = Path(__file__).parent / "prompts" / "ticket.md"

PRIORITIES = ("low", "medium", "high", "critical")
CATEGORIES = ("hardware", "software", "network", "printer", "email", "account", "other")

MAX_TITLE_LENGTH = 120
OVERRIDABLE_FIELDS = {"title", "description", "priority", "category", "company_name"}


@dataclass
class TicketDraft:
    """Fields a technician confirms before the ticket is created."""

    title: str
    description: str
    contact_name: str
    priority: str = "medium"
    category: str = "other"
    source: str = "whatsapp"
    company_name: str | None = None
    note: str = ""  # first system update on the ticket

    def to_dict(self) -> dict:
        return asdict(self)


def draft_ticket(
    message: ParsedMessage,
    group_name: str | None = None,
    **overrides: str | None,
) -> TicketDraft:
    """Build the default ticket for a message, then apply non-empty overrides.

    Raises:
        IntakeError: for an unknown field or an invalid priority/category.
    """
    sender = message.sender_name.strip() or UNKNOWN_SENDER
    note = f"Ticket created from WhatsApp message from {sender}"
    if group_name:
        note += f" (Group: {group_name})"

    draft = TicketDraft(
        title=f"WhatsApp from {sender}",
        description=message.message_text,
        contact_name=sender,
        note=note,
    )

    return _apply_overrides(draft, overrides)


def suggest_ticket(
    message: ParsedMessage,
    config: Config | None = None,
    group_name: str | None = None,
    **overrides: str | None,
) -> TicketDraft:
    """Ask the LLM for title, priority and category, keeping defaults for anything unusable.

    Explicit overrides win over the suggestion. A missing API key raises
    RuntimeError from Config.detect_provider().
    """
    if config is None:
        config = Config()

    draft = draft_ticket(message, group_name)
    user_content = (
        f"Sender: {draft.contact_name}\n"
        f"Group: {group_name or '-'}\n"
        f"Received: {message.received_at}\n\n"
        f"{message.message_text}"
    )
    suggestion = complete_json(_load_ticket_prompt(), user_content, config)
    if suggestion is None:
        return _apply_overrides(draft, overrides)

    title = str(suggestion.get("title", "")).strip()
    if title:
        draft.title = title[:MAX_TITLE_LENGTH]

    priority = str(suggestion.get("priority", "")).strip().lower()
    if priority in PRIORITIES:
        draft.priority = priority
    else:
        _LOGGER.warning("Ignoring suggested priority %r", priority)

    category = str(suggestion.get("category", "")).strip().lower()
    if category in CATEGORIES:
        draft.category = category
    else:
        _LOGGER.warning("Ignoring suggested category %r", category)

    return _apply_overrides(draft, overrides)


def _apply_overrides(draft: TicketDraft, overrides: dict) -> TicketDraft:
    changes = {k: v for k, v in overrides.items() if v}
    unknown = set(changes) - OVERRIDABLE_FIELDS
    if unknown:
        raise IntakeError(f"Cannot override ticket field(s): {', '.join(sorted(unknown))}")
    draft = replace(draft, **changes)
    _validate(draft)
    return draft


def _validate(draft: TicketDraft) -> None:
    if draft.priority not in PRIORITIES:
        raise IntakeError(f"Invalid priority {draft.priority!r}. Use one of: {', '.join(PRIORITIES)}")
    if draft.category not in CATEGORIES:
        raise IntakeError(f"Invalid category {draft.category!r}. Use one of: {', '.join(CATEGORIES)}")


def _load_ticket_prompt() -> str:
    return TICKET_PROMPT_PATH.read_text()
