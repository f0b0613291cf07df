from __future__ import annotations

from gridwatch.core.models import Category, ClassifiedCandidate, NotificationCandidate
from gridwatch.core.preferences import SuppressionConfig
from gridwatch.core.suppression import matching_rules, should_suppress


def _classified(title: str, body: str, category: Category = Category.GENERIC) -> ClassifiedCandidate:
    candidate = NotificationCandidate(
        id="notifications:1",
        title=title,
        body=body,
        target_screen="Notifications",
        recipient_key="user-1",
    )
    return ClassifiedCandidate(candidate=candidate, refined_title=title, refined_body=body, category=category)


def test_budget_flag_only_affects_budget_content() -> None:
    config = SuppressionConfig(push_enabled=True, budget_alerts=False, device_status=True, tips_news=True)
    assert should_suppress(_classified("Alert", "Budget limit exceeded"), config)
    assert not should_suppress(_classified("Status", "Hub is now online"), config)


def test_device_flag() -> None:
    config = SuppressionConfig(device_status=False)
    assert should_suppress(_classified("Device Offline", "Plug 2 lost power"), config)
    assert not should_suppress(_classified("Critical Fault", "Breaker tripped"), config)


def test_tips_flag_matches_title_and_body() -> None:
    config = SuppressionConfig(tips_news=False)
    assert should_suppress(_classified("Energy Tip", "Shift laundry to off-peak"), config)
    assert should_suppress(_classified("Weekly", "Smart schedules are here"), config)


def test_push_disabled_suppresses_everything() -> None:
    config = SuppressionConfig(push_enabled=False)
    assert should_suppress(_classified("Random Title", "Random body"), config)
    assert should_suppress(_classified("Security Alert", "new login", Category.SECURITY), config)


def test_defaults_never_suppress() -> None:
    config = SuppressionConfig()
    assert not should_suppress(_classified("Budget Alert", "Bill exceeded, device offline, news"), config)


def test_checks_are_independent() -> None:
    config = SuppressionConfig(budget_alerts=False, device_status=False, tips_news=True)
    assert matching_rules("hub cost exceeded", config) == ["budget", "device"]
    assert matching_rules("new feature update", config) == []


def test_missing_body_is_handled() -> None:
    candidate = _classified("Device Offline", "")
    classified = ClassifiedCandidate(
        candidate=candidate.candidate,
        refined_title="Device Offline",
        refined_body=None,
        category=Category.GENERIC,
    )
    assert should_suppress(classified, SuppressionConfig(device_status=False))
