"""Chat notifications for leave request lifecycle events.

Delivery is best-effort: :func:`dispatch_notification` runs after the ledger
transaction has committed, and any failure is logged and swallowed.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Literal, Protocol, runtime_checkable

import httpx

from leaveflow.config import get_settings
from leaveflow.models.enums import NotificationKind
from leaveflow.schemas.request import LeaveNotification

logger = logging.getLogger(__name__)

SLACK_POST_MESSAGE_URL = "https://slack.com/api/chat.postMessage"

_COLORS = {
    NotificationKind.NEW_REQUEST: "#ffaa00",
    NotificationKind.APPROVED: "#36a64f",
    NotificationKind.REJECTED: "#ff0000",
}


class NotificationError(Exception):
    """Raised by a sink when the chat service refuses a message."""


def format_message(event: LeaveNotification) -> str:
    """Render the chat message text for an event."""
    dates = f"*Dates:* {event.start_date.isoformat()} to {event.end_date.isoformat()} ({event.days} days)"
    if event.kind == NotificationKind.NEW_REQUEST:
        return (
            "🗓️ *New Leave Request*\n\n"
            f"*Employee:* {event.employee_name}\n"
            f"{dates}\n"
            f"*Type:* {event.leave_type.value}\n"
            f"*Reason:* {event.reason}\n"
            f"*Remaining Balance:* {event.remaining_balance} days"
        )
    if event.kind == NotificationKind.APPROVED:
        return (
            "✅ *Leave Request Approved*\n\n"
            f"*Employee:* {event.employee_name}\n"
            f"{dates}\n"
            f"*Type:* {event.leave_type.value}\n"
            f"*Remaining Balance:* {event.remaining_balance} days"
        )
    return (
        "❌ *Leave Request Rejected*\n\n"
        f"*Employee:* {event.employee_name}\n"
        f"{dates}\n"
        f"*Type:* {event.leave_type.value}\n"
        f"*Balance Restored:* {event.remaining_balance} days"
    )


def build_slack_payload(event: LeaveNotification) -> dict[str, Any]:
    """Build the Slack message body (text plus a colored attachment)."""
    text = format_message(event)
    return {
        "text": text,
        "attachments": [
            {
                "color": _COLORS[event.kind],
                "text": text,
                "ts": int(time.time()),
            }
        ],
    }


@runtime_checkable
class NotificationSink(Protocol):
    """Interface for delivering notification events."""

    async def send(self, event: LeaveNotification) -> None:
        """Deliver one event. May raise; callers treat delivery as best-effort."""
        ...


class InMemorySink:
    """Records events instead of delivering them."""

    def __init__(self) -> None:
        self.events: list[LeaveNotification] = []

    async def send(self, event: LeaveNotification) -> None:
        self.events.append(event)


class LoggingSink:
    """Used when Slack is not configured."""

    async def send(self, event: LeaveNotification) -> None:
        logger.info("Slack not configured, skipping %s notification for %s", event.kind.value, event.employee_name)


class SlackWebhookSink:
    """Posts to a Slack incoming-webhook URL."""

    def __init__(
        self,
        webhook_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._webhook_url = webhook_url
        self._timeout = timeout
        self._transport = transport

    async def send(self, event: LeaveNotification) -> None:
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.post(self._webhook_url, json=build_slack_payload(event))
            response.raise_for_status()
        logger.info("Slack webhook notification sent for %s", event.kind.value)


class SlackBotSink:
    """Posts through the Slack Web API with a bot token."""

    def __init__(
        self,
        token: str,
        channel: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._token = token
        self._channel = channel
        self._timeout = timeout
        self._transport = transport

    async def send(self, event: LeaveNotification) -> None:
        payload = {"channel": self._channel, **build_slack_payload(event)}
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.post(
                SLACK_POST_MESSAGE_URL,
                json=payload,
                headers={"Authorization": f"Bearer {self._token}"},
            )
            response.raise_for_status()
        body = response.json()
        if not body.get("ok"):
            error = body.get("error", "unknown_error")
            if error == "not_authed":
                msg = "Slack authentication failed - check SLACK_BOT_TOKEN"
                raise NotificationError(msg)
            msg = f"Slack rejected the message: {error}"
            raise NotificationError(msg)
        logger.info("Slack notification sent successfully: %s", body.get("ts"))


NotificationChannel = Literal["slack_webhook", "slack_bot", "disabled"]


def notification_channel() -> NotificationChannel:
    """Which delivery the Slack settings select. A webhook URL wins over a bot token."""
    settings = get_settings()
    if settings.slack_webhook_url:
        return "slack_webhook"
    if settings.slack_bot_token:
        return "slack_bot"
    return "disabled"


def build_sink_from_settings() -> NotificationSink:
    """Pick the sink implied by the Slack settings."""
    settings = get_settings()
    channel = notification_channel()
    if channel == "slack_webhook" and settings.slack_webhook_url:
        return SlackWebhookSink(settings.slack_webhook_url, timeout=settings.notification_timeout_seconds)
    if channel == "slack_bot" and settings.slack_bot_token:
        return SlackBotSink(
            settings.slack_bot_token,
            settings.slack_channel,
            timeout=settings.notification_timeout_seconds,
        )
    return LoggingSink()


_notification_sink: NotificationSink | None = None


def get_notification_sink() -> NotificationSink:
    """Return the active sink, building it from settings on first use."""
    global _notification_sink
    if _notification_sink is None:
        _notification_sink = build_sink_from_settings()
    return _notification_sink


def set_notification_sink(sink: NotificationSink | None) -> None:
    """Override the sink (for testing or production wiring). None rebuilds from settings."""
    global _notification_sink
    _notification_sink = sink


async def dispatch_notification(event: LeaveNotification) -> None:
    """Deliver an event through the active sink, logging instead of raising on failure."""
    try:
        await get_notification_sink().send(event)
    except Exception:
        logger.exception("Failed to send %s notification for %s", event.kind.value, event.employee_name)
