"""Tests for composing the share email."""

from datetime import date
from urllib.parse import parse_qs, urlparse

import pytest

from conftest import make_capsule
from timecapsule.share import compose_email


def test_compose_email_contents() -> None:
    capsule = make_capsule(
        title="Class of 2024",
        message="We made it!",
        predictions="Hoverboards",
        unlock_date=date(2034, 6, 1),
        created_date=date(2024, 6, 1),
        recipient_email="friend@example.com",
    )

    email = compose_email(capsule)

    assert email.recipient == "friend@example.com"
    assert email.subject == "Time Capsule: Class of 2024"
    assert "📦 Title: Class of 2024" in email.body
    assert "📅 Unlock Date: June 1, 2034" in email.body
    assert "📝 Message:\nWe made it!" in email.body
    assert "🔮 Predictions:\nHoverboards" in email.body
    assert "Created on: June 1, 2024" in email.body


def test_predictions_section_omitted_when_empty() -> None:
    email = compose_email(make_capsule(recipient_email="a@b.c"))

    assert "Predictions" not in email.body


def test_mailto_url_round_trips_through_a_parser() -> None:
    email = compose_email(make_capsule(title="A & B", recipient_email="a@b.c"))

    url = urlparse(email.mailto_url)
    query = parse_qs(url.query)

    assert url.scheme == "mailto"
    assert url.path == "a@b.c"
    assert query["subject"] == ["Time Capsule: A & B"]
    assert query["body"] == [email.body]


def test_compose_requires_recipient() -> None:
    with pytest.raises(ValueError):
        compose_email(make_capsule())
