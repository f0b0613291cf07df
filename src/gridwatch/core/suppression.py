"""Suppression rules (core domain).

Each rule pairs a keyword set with the preference flag that allows it. Rules
are checked independently; any rule whose keywords hit while its flag is off
is enough to suppress. No keyword hit never suppresses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from gridwatch.core.models import ClassifiedCandidate
from gridwatch.core.preferences import SuppressionConfig


@dataclass(frozen=True)
class SuppressionRule:
    name: str
    keywords: Tuple[str, ...]
    flag: str


RULES: List[SuppressionRule] = [
    SuppressionRule("budget", ("budget", "cost", "limit", "bill", "exceeded"), "budget_alerts"),
    SuppressionRule("device", ("offline", "online", "connected", "hub", "device"), "device_status"),
    SuppressionRule("tips", ("tip", "news", "update", "smart"), "tips_news"),
]


def matching_rules(haystack: str, config: SuppressionConfig) -> List[str]:
    """Return the names of rules that suppress the given lowercase text."""

    return [
        rule.name
        for rule in RULES
        if not getattr(config, rule.flag) and any(k in haystack for k in rule.keywords)
    ]


def should_suppress(classified: ClassifiedCandidate, config: SuppressionConfig) -> bool:
    if not config.push_enabled:
        return True
    haystack = f"{classified.refined_title} {classified.refined_body or ''}".lower()
    return bool(matching_rules(haystack, config))
