"""Lightweight Telegram notification for brick stack runs.

Sends plain-text messages to a Telegram chat via the Bot API for:
- Run start
- Final results summary
- Errors

No retry logic; notifications are non-critical and never raise.
"""

from __future__ import annotations

import logging
import os
from typing import Any

import httpx

logger = logging.getLogger(__name__)

TELEGRAM_API = "https://api.telegram.org/bot{token}/sendMessage"


async def send_telegram(
    message: str,
    chat_id: str | None = None,
    token: str | None = None,
) -> bool:
    """Send a plain-text message to a Telegram chat.

    Args:
        message: Text to send.
        chat_id: Telegram chat ID. Defaults to TELEGRAM_CHAT_ID env var.
        token: Bot token. Defaults to TELEGRAM_BOT_TOKEN env var.

    Returns:
        True if message was sent successfully, False otherwise.
    """
    token = token or os.environ.get("TELEGRAM_BOT_TOKEN", "")
    if not token:
        return False

    chat_id = chat_id or os.environ.get("TELEGRAM_CHAT_ID", "")
    if not chat_id:
        return False

    url = TELEGRAM_API.format(token=token)
    payload = {"chat_id": chat_id, "text": message}

    try:
        async with httpx.AsyncClient(timeout=10.0) as client:
            resp = await client.post(url, json=payload)
            data = resp.json()
            return bool(data.get("ok", False))
    except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
        logger.warning("Telegram notification failed: %s", exc)
        return False


def format_run_start(source: str, brick_count: int) -> str:
    """Format run start notification message.

    Example:
        >>> print(format_run_start("snapshot.txt", 1200))
        Brick Stack Run Started
        Source: snapshot.txt
        Bricks: 1200
    """
    return (
        f"Brick Stack Run Started\n"
        f"Source: {source}\n"
        f"Bricks: {brick_count}"
    )


def format_run_summary(
    brick_count: int,
    safe_count: int,
    total_fall_count: int,
    runtime_seconds: float,
) -> str:
    """Format final run results summary.

    Args:
        brick_count: Number of bricks analyzed.
        safe_count: Bricks safe to disintegrate.
        total_fall_count: Sum of chain-reaction falls.
        runtime_seconds: Total runtime in seconds.

    Returns:
        Formatted message string.

    Example:
        >>> print(format_run_summary(7, 5, 7, 0.25))
        Brick Stack Run Complete
        Bricks: 7
        Safe to disintegrate: 5
        Chain-reaction falls: 7
        Runtime: 0.2 seconds
    """
    return (
        f"Brick Stack Run Complete\n"
        f"Bricks: {brick_count}\n"
        f"Safe to disintegrate: {safe_count}\n"
        f"Chain-reaction falls: {total_fall_count}\n"
        f"Runtime: {runtime_seconds:.1f} seconds"
    )


def format_error(error_type: str, error_message: str, context: dict[str, Any] | None = None) -> str:
    """Format error notification message.

    Args:
        error_type: Type of error (e.g., "SnapshotParseError").
        error_message: Detailed error message.
        context: Optional context dictionary with additional info.

    Returns:
        Formatted message string.

    Example:
        >>> print(format_error("SettlingError", "limit hit", {"bricks": 7}))
        Error: SettlingError
        limit hit
        Context: bricks=7
    """
    lines = [
        f"Error: {error_type}",
        error_message,
    ]
    if context:
        ctx_str = ", ".join(f"{k}={v}" for k, v in context.items())
        lines.append(f"Context: {ctx_str}")
    return "\n".join(lines)
