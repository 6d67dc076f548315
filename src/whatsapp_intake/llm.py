"""JSON-answering chat completions over Anthropic or OpenAI.

Ticket suggestions need a single JSON object back. OpenAI is asked for its
JSON response format; Anthropic has no such switch, so its reply is searched
for the outermost object (models like to wrap it in a code fence).
"""

from __future__ import annotations

import json
import logging

from .config import Config

_LOGGER = logging.getLogger(__name__)


def complete_json(
    system_prompt: str,
    user_content: str,
    config: Config | None = None,
    max_tokens: int | None = None,
) -> dict | None:
    """Return the JSON object the model answered with, or None if it did not.

    Raises:
        RuntimeError: when no API key is configured.
    """
    if config is None:
        config = Config()
    if max_tokens is None:
        max_tokens = config.suggestion_max_tokens

    provider = config.detect_provider()
    if provider == "anthropic":
        reply = _ask_anthropic(system_prompt, user_content, config.anthropic_model, max_tokens)
    elif provider == "openai":
        reply = _ask_openai(system_prompt, user_content, config.openai_model, max_tokens)
    else:
        raise ValueError(f"Unknown provider: {provider}")

    payload = extract_json_object(reply)
    if payload is None:
        _LOGGER.warning("%s reply was not a JSON object: %r", provider, reply[:200])
    return payload


def extract_json_object(reply: str) -> dict | None:
    """Pull the outermost {...} out of a reply, tolerating fences and chatter."""
    start = reply.find("{")
    end = reply.rfind("}")
    if start == -1 or end <= start:
        return None
    try:
        payload = json.loads(reply[start:end + 1])
    except json.JSONDecodeError:
        return None
    return payload if isinstance(payload, dict) else None


def _ask_anthropic(system_prompt: str, user_content: str, model: str, max_tokens: int) -> str:
    import anthropic

    response = anthropic.Anthropic().messages.create(
        model=model,
        max_tokens=max_tokens,
        system=system_prompt,
        messages=[{"role": "user", "content": user_content}],
    )
    return "".join(block.text for block in response.content if block.type == "text")


def _ask_openai(system_prompt: str, user_content: str, model: str, max_tokens: int) -> str:
    import openai

    response = openai.OpenAI().chat.completions.create(
        model=model,
        max_tokens=max_tokens,
        response_format={"type": "json_object"},
        messages=[
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_content},
        ],
    )
    return response.choices[0].message.content or ""
