"""Prompt building, the Messages API request and the plain git-log fallback."""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

import pycountry
import requests

from core.template import render_placeholders

from .history import ChangelogError


DEFAULT_MODEL = "claude-opus-4-6"
DEFAULT_BASE_URL = "https://api.anthropic.com"
API_VERSION = "2023-06-01"
MAX_TOKENS = 1024
REQUEST_TIMEOUT = 120

API_KEY_VARIABLES = ("ANTHROPIC_API_KEY", "ANTHROPIC_AUTH_TOKEN")
BASE_URL_VARIABLE = "ANTHROPIC_BASE_URL"

DEFAULT_PROMPT = (
    "Write a concise changelog for release {{tag}} (since {{prev_tag}}).\n"
    "\n"
    "Git log:\n"
    "{{git_log}}\n"
    "\n"
    "Rules:\n"
    "- Group by: Features, Fixes, Improvements, Other\n"
    "- Skip empty groups\n"
    "- Use markdown with bullet points\n"
    "- Keep it short and user-facing\n"
    "- Write in {{lang}}\n"
    "- Do NOT wrap in code blocks"
)


def resolve_language(name: str) -> str:
    """Map an English language name, ISO 639-1 or ISO 639-3 code to its English name."""
    try:
        return pycountry.languages.lookup(name.strip()).name
    except LookupError:
        raise ChangelogError(
            f"Unknown language '{name}'. Use an English name (e.g. Chinese), "
            "ISO 639-1 code (e.g. zh), or ISO 639-3 code (e.g. zho)."
        ) from None


def resolve_api_key(explicit: Optional[str], environ: Mapping[str, str]) -> str:
    if explicit:
        return explicit
    for variable in API_KEY_VARIABLES:
        if environ.get(variable):
            return environ[variable]
    raise ChangelogError(
        "API key not provided. Use --api-key or set ANTHROPIC_API_KEY / ANTHROPIC_AUTH_TOKEN"
    )


def build_prompt(template: Optional[str], *, tag: str, prev_tag: str, git_log: List[str], lang: str) -> str:
    return render_placeholders(
        template or DEFAULT_PROMPT,
        {"tag": tag, "prev_tag": prev_tag, "git_log": "\n".join(git_log), "lang": lang},
    )


def fallback_changelog(prev_tag: str, git_log: List[str]) -> str:
    bullets = "\n".join(f"- {line}" for line in git_log)
    return f"## Changes since {prev_tag}\n\n{bullets}"


def _first_text(content: Any) -> str:
    if not isinstance(content, list):
        return ""
    for block in content:
        if isinstance(block, dict) and block.get("text"):
            return str(block["text"])
    return ""


def request_changelog(
    prompt: str,
    *,
    api_key: str,
    model: str = DEFAULT_MODEL,
    base_url: str = DEFAULT_BASE_URL,
    timeout: float = REQUEST_TIMEOUT,
) -> str:
    """Send ``prompt`` to ``POST /v1/messages`` and return the first text block."""

    payload: Dict[str, Any] = {
        "model": model,
        "max_tokens": MAX_TOKENS,
        "messages": [{"role": "user", "content": prompt}],
    }
    try:
        response = requests.post(
            f"{base_url.rstrip('/')}/v1/messages",
            headers={
                "Content-Type": "application/json",
                "x-api-key": api_key,
                "anthropic-version": API_VERSION,
            },
            json=payload,
            timeout=timeout,
        )
    except requests.RequestException as e:
        raise ChangelogError(f"Failed to call Claude API: {e}") from e

    try:
        data = response.json()
    except ValueError as e:
        raise ChangelogError(f"Failed to parse Claude API response (HTTP {response.status_code})") from e

    if isinstance(data, dict) and data.get("error"):
        error = data["error"]
        message = error.get("message", error) if isinstance(error, dict) else error
        raise ChangelogError(f"Claude API error: {message}")
    if response.status_code >= 400:
        raise ChangelogError(f"Claude API returned HTTP {response.status_code}")

    text = _first_text(data.get("content") if isinstance(data, dict) else None)
    if not text:
        raise ChangelogError("Claude API returned empty response")
    return text


__all__ = [
    "DEFAULT_BASE_URL",
    "DEFAULT_MODEL",
    "DEFAULT_PROMPT",
    "build_prompt",
    "fallback_changelog",
    "request_changelog",
    "resolve_api_key",
    "resolve_language",
]
