"""CLI entry points: wa-intake parse, wa-intake import, wa-intake ticket, wa-intake init."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TextIO

import click

from .config import Config
from .intake import IntakeError, summarize
from .tickets import CATEGORIES, PRIORITIES

_TRANSCRIPT = click.argument("transcript", type=click.File("r", encoding="utf-8-sig"), default="-")


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log parse details to stderr")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """WhatsApp Intake — turn pasted WhatsApp chats into help-desk inbox imports."""
    ctx.ensure_object(dict)
    Config().load_env_file()  # Seed os.environ before constructing final config
    config = Config()
    level = _log_level(config.log_level)
    logging.basicConfig(
        level=logging.DEBUG if verbose else level,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj["config"] = config


def _log_level(name: str) -> int:
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise click.BadParameter(
            f"unknown log level {name!r}; use DEBUG, INFO, WARNING, ERROR or CRITICAL",
            param_hint="WA_INTAKE_LOG_LEVEL",
        )
    return level


def _load(transcript: TextIO) -> list:
    from .chatlog.parser import parse_chat

    try:
        text = transcript.read()
    except UnicodeDecodeError as e:
        raise click.ClickException(
            f"{transcript.name} is not UTF-8 text (byte {e.start}: {e.reason}). "
            "Export the chat again or convert the file to UTF-8."
        ) from e

    messages = parse_chat(text)
    if not messages:
        raise click.ClickException(summarize(messages))
    return messages


@cli.command()
@_TRANSCRIPT
@click.option("--json", "as_json", is_flag=True, help="Output parsed messages as JSON")
def parse(transcript: TextIO, as_json: bool) -> None:
    """Parse a chat export (file or stdin) and show the messages found."""
    messages = _load(transcript)

    if as_json:
        click.echo(json.dumps([m.to_dict() for m in messages], indent=2, ensure_ascii=False))
        return

    click.echo(summarize(messages))
    for i, msg in enumerate(messages):
        click.echo(f"\n--- [{i}] {msg.sender_name} ({msg.received_at}) ---")
        for line in msg.message_text.splitlines():
            click.echo(f"  {line}")


@cli.command("import")
@_TRANSCRIPT
@click.option("--group", "group_name", help="Group name applied to every imported message")
@click.option("--exclude", "-x", type=int, multiple=True, help="Index of a parsed message to leave out (repeatable)")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), help="Write the request body here instead of stdout")
@click.pass_context
def import_(ctx: click.Context, transcript: TextIO, group_name: str | None, exclude: tuple[int, ...], output: Path | None) -> None:
    """Build the bulk-import request body for the selected messages."""
    from .intake import build_import_payload, toggle

    config = ctx.obj["config"]
    messages = _load(transcript)

    try:
        for index in sorted(set(exclude)):
            messages = toggle(messages, index)
        payload = build_import_payload(messages, group_name or config.default_group)
    except (IndexError, IntakeError) as e:
        raise click.ClickException(str(e)) from e

    body = payload.to_json()
    if output:
        output.write_text(body + "\n")
        click.echo(f"{payload.imported} message(s) ready to import -> {output}")
    else:
        click.echo(body)


@cli.command()
@_TRANSCRIPT
@click.option("--index", "-i", type=int, required=True, help="Parsed message to convert")
@click.option("--group", "group_name", help="Group the message came from")
@click.option("--title", help="Ticket title (default: 'WhatsApp from <sender>')")
@click.option("--priority", type=click.Choice(PRIORITIES), help="Ticket priority")
@click.option("--category", type=click.Choice(CATEGORIES), help="Ticket category")
@click.option("--company", "company_name", help="Client company name")
@click.option("--suggest", is_flag=True, help="Ask the LLM to propose title, priority and category")
@click.pass_context
def ticket(
    ctx: click.Context,
    transcript: TextIO,
    index: int,
    group_name: str | None,
    title: str | None,
    priority: str | None,
    category: str | None,
    company_name: str | None,
    suggest: bool,
) -> None:
    """Draft a help-desk ticket from one parsed message."""
    from .tickets import draft_ticket, suggest_ticket

    config = ctx.obj["config"]
    messages = _load(transcript)
    group = group_name or config.default_group

    if not 0 <= index < len(messages):
        raise click.ClickException(f"No parsed message at index {index} ({len(messages)} parsed)")
    message = messages[index]

    overrides = {
        "title": title,
        "priority": priority,
        "category": category,
        "company_name": company_name,
    }
    try:
        if suggest:
            draft = suggest_ticket(message, config, group, **overrides)
        else:
            draft = draft_ticket(message, group, **overrides)
    except (IntakeError, RuntimeError) as e:
        raise click.ClickException(str(e)) from e

    click.echo(json.dumps(draft.to_dict(), indent=2, ensure_ascii=False))


@cli.command()
@click.pass_context
def init(ctx: click.Context) -> None:
    """Create the env file for API keys and defaults."""
    config = ctx.obj["config"]
    if config.ensure_env_file():
        click.echo(f"Created {config.env_file}")
        click.echo(f"  Add your API key: {config.env_file}")
    else:
        click.echo(f"Env file: {config.env_file} (already exists)")
