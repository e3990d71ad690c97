"""Rule-based message classification.

A message is accepted when its sender, subject or content matches any
whitelist criterion, unless the sender is blocked. Classification is a pure
function of its inputs: it performs no I/O and does not log, callers decide
what to report from the returned diagnostics.
"""

import re
from collections.abc import Iterable

from inbox_sms.models import ClassificationResult, MatchCriterion, RuleSet

_BRACKETED_ADDRESS = re.compile(r"<([^<>]*)>")


def comparison_address(sender: str) -> str:
    """Get the address used for sender matching.

    "Jane Doe <jane@example.com>" -> "jane@example.com". Senders without a
    bracketed segment are returned unchanged.
    """
    match = _BRACKETED_ADDRESS.search(sender)
    if match:
        return match.group(1)
    return sender


def _contains_any(haystack: str, needles: Iterable[str]) -> bool:
    haystack = haystack.lower()
    return any(needle.lower() in haystack for needle in needles)


def _equals_any(value: str, candidates: Iterable[str]) -> bool:
    value = value.lower()
    return any(candidate.lower() == value for candidate in candidates)


def classify(
    sender: str,
    subject: str | None,
    content: str | None,
    rules: RuleSet,
) -> ClassificationResult:
    """Decide whether a message should be relayed.

    Args:
        sender: Raw sender, either "Name <addr>" or a bare address
        subject: Subject line (None is treated as empty)
        content: Extracted plain-text body (None is treated as empty)
        rules: Rule set to evaluate against

    Returns:
        ClassificationResult. ``matched_criteria`` holds every whitelist
        criterion that matched, not only the first one.
    """
    address = comparison_address(sender)

    if _contains_any(address, rules.blocked_senders):
        return ClassificationResult(accepted=False, rejected_by_blacklist=True)

    checks = {
        MatchCriterion.EXACT_SENDER: _equals_any(address, rules.exact_senders),
        MatchCriterion.DOMAIN: _contains_any(address, rules.sender_domains),
        MatchCriterion.SUBJECT: _contains_any(subject or "", rules.subject_keywords),
        MatchCriterion.CONTENT: _contains_any(content or "", rules.content_keywords),
    }
    matched = frozenset(criterion for criterion, hit in checks.items() if hit)

    return ClassificationResult(accepted=bool(matched), matched_criteria=matched)


def describe_result(result: ClassificationResult) -> str:
    """Generate a human-readable description of a classification."""
    if result.rejected_by_blacklist:
        return "rejected (blocked sender)"
    if not result.accepted:
        return "rejected (no rule matched)"
    criteria = sorted(c.value for c in result.matched_criteria)
    return f"accepted ({', '.join(criteria)})"


def create_rule_set(
    exact_senders: Iterable[str] = (),
    sender_domains: Iterable[str] = (),
    subject_keywords: Iterable[str] = (),
    content_keywords: Iterable[str] = (),
    blocked_senders: Iterable[str] = (),
) -> RuleSet:
    """Helper to create a rule set from plain iterables.

    Example:
        rules = create_rule_set(
            sender_domains=["company.com"],
            subject_keywords=["urgent", "action required"],
            blocked_senders=["spam@example.com"],
        )
    """
    return RuleSet(
        exact_senders=frozenset(exact_senders),
        sender_domains=frozenset(sender_domains),
        subject_keywords=frozenset(subject_keywords),
        content_keywords=frozenset(content_keywords),
        blocked_senders=frozenset(blocked_senders),
    )
