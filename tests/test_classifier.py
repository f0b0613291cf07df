from __future__ import annotations

from gridwatch.core.classifier import (
    INVITE_ACCEPTED_TITLE,
    INVITE_DECLINED_TITLE,
    SECURITY_BODY,
    SECURITY_TITLE,
    classify,
)
from gridwatch.core.models import Category


def test_login_successful_wins_regardless_of_body() -> None:
    result = classify("Login Successful", "ignored")
    assert result.category is Category.SECURITY
    assert result.title == SECURITY_TITLE
    assert result.body == SECURITY_BODY

    # Body keywords for later rules must not change the outcome.
    result = classify("  login SUCCESSFUL  ", "Invite accepted, budget exceeded")
    assert result.category is Category.SECURITY


def test_security_keywords_match_title_or_body() -> None:
    assert classify("Heads up", "Sign-in from a New Device").category is Category.SECURITY
    assert classify("Other device signed in", None).category is Category.SECURITY
    assert classify("Security notice", "").category is Category.SECURITY
    assert classify("Alert", "someone login to your hub").category is Category.SECURITY


def test_security_rule_precedes_invite_rules() -> None:
    result = classify("Invite accepted", "from a new device")
    assert result.category is Category.SECURITY
    assert result.title == SECURITY_TITLE


def test_invite_accepted_rewrites_title_only() -> None:
    result = classify("Maria accepted your invitation", "Maria joined Home Hub")
    assert result.category is Category.INVITE_ACCEPTED
    assert result.title == INVITE_ACCEPTED_TITLE
    assert result.body == "Maria joined Home Hub"


def test_invite_declined_rewrites_title_only() -> None:
    result = classify("Invitation DECLINED", "Francis declined")
    assert result.category is Category.INVITE_DECLINED
    assert result.title == INVITE_DECLINED_TITLE
    assert result.body == "Francis declined"


def test_accepted_only_checked_in_title() -> None:
    result = classify("Update", "Your request was accepted")
    assert result.category is Category.GENERIC


def test_fallback_passes_content_through() -> None:
    result = classify("Random Title", "Random body")
    assert (result.title, result.body, result.category) == ("Random Title", "Random body", Category.GENERIC)


def test_missing_body_is_not_replaced_for_display() -> None:
    result = classify("Budget Alert", None)
    assert result.category is Category.GENERIC
    assert result.body is None
