"""Content classification rules (core domain).

Rules are evaluated top-down and the first match wins; there is no rule
combination. Matching is case-insensitive substring matching on trimmed text.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional

from gridwatch.core.models import Category

SECURITY_TITLE = "Security Alert"
SECURITY_BODY = (
    "A new login to your account was detected. "
    "If this wasn't you, change your password immediately."
)
INVITE_ACCEPTED_TITLE = "Invite Accepted"
INVITE_DECLINED_TITLE = "Invite Declined"

SECURITY_KEYWORDS = ("other device", "new device", "someone login", "security")


@dataclass(frozen=True)
class Classification:
    title: str
    body: Optional[str]
    category: Category


@dataclass(frozen=True)
class ClassifierRule:
    """One ordered entry: a predicate over (title, body) and its rewrite."""

    name: str
    predicate: Callable[[str, str], bool]
    rewrite: Callable[[Optional[str], Optional[str]], Classification]


def _security(title: Optional[str], body: Optional[str]) -> Classification:
    return Classification(SECURITY_TITLE, SECURITY_BODY, Category.SECURITY)


def _invite_accepted(title: Optional[str], body: Optional[str]) -> Classification:
    return Classification(INVITE_ACCEPTED_TITLE, body, Category.INVITE_ACCEPTED)


def _invite_declined(title: Optional[str], body: Optional[str]) -> Classification:
    return Classification(INVITE_DECLINED_TITLE, body, Category.INVITE_DECLINED)


RULES: List[ClassifierRule] = [
    ClassifierRule(
        name="login-successful",
        predicate=lambda title, body: "login successful" in title,
        rewrite=_security,
    ),
    ClassifierRule(
        name="security-keywords",
        predicate=lambda title, body: any(k in title or k in body for k in SECURITY_KEYWORDS),
        rewrite=_security,
    ),
    ClassifierRule(
        name="invite-accepted",
        predicate=lambda title, body: "accepted" in title,
        rewrite=_invite_accepted,
    ),
    ClassifierRule(
        name="invite-declined",
        predicate=lambda title, body: "declined" in title,
        rewrite=_invite_declined,
    ),
]


def _normalize(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def classify(title: Optional[str], body: Optional[str]) -> Classification:
    """Return refined (title, body, category) for raw content.

    ``None`` is matched as an empty string but passed through untouched when no
    rule rewrites it.
    """

    lowered_title = _normalize(title)
    lowered_body = _normalize(body)
    for rule in RULES:
        if rule.predicate(lowered_title, lowered_body):
            return rule.rewrite(title, body)
    return Classification(title or "", body, Category.GENERIC)
