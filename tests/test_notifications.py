"""Tests for notification formatting, Slack sinks and best-effort dispatch."""

from __future__ import annotations

import json
from datetime import date
from typing import TYPE_CHECKING

import httpx
import pytest

from leaveflow.config import get_settings
from leaveflow.models.enums import LeaveType, NotificationKind
from leaveflow.schemas.request import LeaveNotification
from leaveflow.services.notification import (
    SLACK_POST_MESSAGE_URL,
    LoggingSink,
    NotificationError,
    SlackBotSink,
    SlackWebhookSink,
    build_sink_from_settings,
    build_slack_payload,
    dispatch_notification,
    format_message,
    get_notification_sink,
    notification_channel,
    set_notification_sink,
)

if TYPE_CHECKING:
    from leaveflow.services.notification import InMemorySink

WEBHOOK_URL = "https://hooks.slack.test/services/T000/B000/XXXX"


def _event(kind: NotificationKind = NotificationKind.NEW_REQUEST, **overrides: object) -> LeaveNotification:
    values: dict[str, object] = {
        "kind": kind,
        "employee_name": "Alice Johnson",
        "start_date": date(2024, 6, 10),
        "end_date": date(2024, 6, 12),
        "leave_type": LeaveType.ANNUAL,
        "reason": "Family trip" if kind == NotificationKind.NEW_REQUEST else None,
        "days": 3,
        "remaining_balance": 7,
    }
    values.update(overrides)
    return LeaveNotification.model_validate(values)


# ---------------------------------------------------------------------------
# Message formatting
# ---------------------------------------------------------------------------


def test_format_new_request() -> None:
    text = format_message(_event())
    assert text.startswith("🗓️ *New Leave Request*")
    assert "*Employee:* Alice Johnson" in text
    assert "*Dates:* 2024-06-10 to 2024-06-12 (3 days)" in text
    assert "*Type:* annual" in text
    assert "*Reason:* Family trip" in text
    assert "*Remaining Balance:* 7 days" in text


def test_format_approved() -> None:
    text = format_message(_event(NotificationKind.APPROVED))
    assert text.startswith("✅ *Leave Request Approved*")
    assert "*Reason:*" not in text
    assert "*Remaining Balance:* 7 days" in text


def test_format_rejected() -> None:
    text = format_message(_event(NotificationKind.REJECTED, remaining_balance=10))
    assert text.startswith("❌ *Leave Request Rejected*")
    assert "*Balance Restored:* 10 days" in text


@pytest.mark.parametrize(
    ("kind", "color"),
    [
        (NotificationKind.NEW_REQUEST, "#ffaa00"),
        (NotificationKind.APPROVED, "#36a64f"),
        (NotificationKind.REJECTED, "#ff0000"),
    ],
)
def test_slack_payload_color(kind: NotificationKind, color: str) -> None:
    payload = build_slack_payload(_event(kind))
    assert payload["text"] == format_message(_event(kind))
    assert payload["attachments"][0]["color"] == color
    assert isinstance(payload["attachments"][0]["ts"], int)


# ---------------------------------------------------------------------------
# Slack sinks
# ---------------------------------------------------------------------------


async def test_webhook_sink_posts_payload() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, text="ok")

    sink = SlackWebhookSink(WEBHOOK_URL, transport=httpx.MockTransport(handler))
    await sink.send(_event())

    assert len(seen) == 1
    assert str(seen[0].url) == WEBHOOK_URL
    body = json.loads(seen[0].content)
    assert body["text"].startswith("🗓️ *New Leave Request*")


async def test_webhook_sink_raises_on_http_error() -> None:
    sink = SlackWebhookSink(WEBHOOK_URL, transport=httpx.MockTransport(lambda _: httpx.Response(500)))
    with pytest.raises(httpx.HTTPStatusError):
        await sink.send(_event())


async def test_bot_sink_posts_to_channel() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True, "ts": "1718000000.000100"})

    sink = SlackBotSink("xoxb-test", "#leave", transport=httpx.MockTransport(handler))
    await sink.send(_event(NotificationKind.APPROVED))

    request = seen[0]
    assert str(request.url) == SLACK_POST_MESSAGE_URL
    assert request.headers["Authorization"] == "Bearer xoxb-test"
    body = json.loads(request.content)
    assert body["channel"] == "#leave"
    assert body["attachments"][0]["color"] == "#36a64f"


async def test_bot_sink_not_authed() -> None:
    transport = httpx.MockTransport(lambda _: httpx.Response(200, json={"ok": False, "error": "not_authed"}))
    sink = SlackBotSink("xoxb-bad", "#leave", transport=transport)
    with pytest.raises(NotificationError, match="check SLACK_BOT_TOKEN"):
        await sink.send(_event())


async def test_bot_sink_other_error() -> None:
    transport = httpx.MockTransport(lambda _: httpx.Response(200, json={"ok": False, "error": "channel_not_found"}))
    sink = SlackBotSink("xoxb-test", "#nowhere", transport=transport)
    with pytest.raises(NotificationError, match="channel_not_found"):
        await sink.send(_event())


# ---------------------------------------------------------------------------
# Sink selection and dispatch
# ---------------------------------------------------------------------------


def test_sink_from_settings_prefers_webhook(monkeypatch: pytest.MonkeyPatch) -> None:
    settings = get_settings()
    monkeypatch.setattr(settings, "slack_webhook_url", WEBHOOK_URL)
    monkeypatch.setattr(settings, "slack_bot_token", "xoxb-test")
    assert notification_channel() == "slack_webhook"
    assert isinstance(build_sink_from_settings(), SlackWebhookSink)


def test_sink_from_settings_bot_token(monkeypatch: pytest.MonkeyPatch) -> None:
    settings = get_settings()
    monkeypatch.setattr(settings, "slack_webhook_url", None)
    monkeypatch.setattr(settings, "slack_bot_token", "xoxb-test")
    assert isinstance(build_sink_from_settings(), SlackBotSink)


def test_sink_from_settings_unconfigured(monkeypatch: pytest.MonkeyPatch) -> None:
    settings = get_settings()
    monkeypatch.setattr(settings, "slack_webhook_url", None)
    monkeypatch.setattr(settings, "slack_bot_token", None)
    assert notification_channel() == "disabled"
    assert isinstance(build_sink_from_settings(), LoggingSink)


def test_reset_sink_rebuilds_from_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    settings = get_settings()
    monkeypatch.setattr(settings, "slack_webhook_url", None)
    monkeypatch.setattr(settings, "slack_bot_token", None)
    set_notification_sink(None)
    assert isinstance(get_notification_sink(), LoggingSink)


async def test_dispatch_uses_active_sink(notifications: InMemorySink) -> None:
    await dispatch_notification(_event())
    assert [e.kind for e in notifications.events] == [NotificationKind.NEW_REQUEST]


async def test_dispatch_swallows_and_logs_failures(caplog: pytest.LogCaptureFixture) -> None:
    transport = httpx.MockTransport(lambda _: httpx.Response(200, json={"ok": False, "error": "not_authed"}))
    set_notification_sink(SlackBotSink("xoxb-bad", "#leave", transport=transport))

    with caplog.at_level("ERROR", logger="leaveflow.services.notification"):
        await dispatch_notification(_event())

    assert "Failed to send new_request notification for Alice Johnson" in caplog.text
