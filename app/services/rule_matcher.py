"""Rule selection for an inbound message.

Precedence:
1. Button/list replies resolve only against rules whose trigger equals the
   clicked id; they never fall through to wildcard rules.
2. Free text tries specific (non-global) rules first, then global wildcard
   rules. Within each pass rules are visited in precedence order.
"""

from typing import Iterable, Optional, Sequence

from app.logging_config import get_logger
from app.models import ChatbotRule
from app.schemas.rule import ALL_CONTACTS, GLOBAL_TRIGGERS
from app.services.text_extractor import parse_interactive_reply

logger = get_logger("rule_matcher")


def rule_precedence_key(rule: ChatbotRule) -> tuple[int, bool]:
    """Two ordered keys: priority descending, then specific rules before global ones."""
    return (-(rule.priority or 0), bool(rule.is_global_trigger))


def sort_rules(rules: Iterable[ChatbotRule]) -> list[ChatbotRule]:
    # sorted() is stable: rules equal on both keys keep their loaded order.
    return sorted(rules, key=rule_precedence_key)


def matches_contact_filter(rule: ChatbotRule, contact_status: str) -> bool:
    contact_filter = rule.contact_filter or ALL_CONTACTS
    return contact_filter == ALL_CONTACTS or contact_filter == contact_status


def _normalized_trigger(rule: ChatbotRule) -> str:
    return (rule.trigger_text or "").strip().lower()


def is_wildcard_trigger(trigger_text: Optional[str]) -> bool:
    return (trigger_text or "").strip() in GLOBAL_TRIGGERS


def match_interactive_reply(
    rules: Sequence[ChatbotRule], trigger_id: str, contact_status: str
) -> Optional[ChatbotRule]:
    wanted = trigger_id.strip().lower()
    if not wanted:
        return None
    for rule in sort_rules(rules):
        if not matches_contact_filter(rule, contact_status):
            continue
        if _normalized_trigger(rule) == wanted:
            return rule
    return None


def match_specific_rule(
    ordered_rules: Sequence[ChatbotRule], message_text: str, contact_status: str
) -> Optional[ChatbotRule]:
    lower_message = message_text.lower().strip()
    for rule in ordered_rules:
        if rule.is_global_trigger or not matches_contact_filter(rule, contact_status):
            continue
        trigger = _normalized_trigger(rule)
        if not trigger:
            continue
        if lower_message == trigger or trigger in lower_message:
            return rule
    return None


def match_global_rule(ordered_rules: Sequence[ChatbotRule], contact_status: str) -> Optional[ChatbotRule]:
    for rule in ordered_rules:
        if not rule.is_global_trigger or not matches_contact_filter(rule, contact_status):
            continue
        if is_wildcard_trigger(rule.trigger_text):
            return rule
    return None


def find_matching_rule(
    rules: Sequence[ChatbotRule], message_text: str, contact_status: str
) -> Optional[ChatbotRule]:
    """Select at most one rule for the message, or None."""
    if not rules or not message_text:
        return None

    reply = parse_interactive_reply(message_text)
    if reply is not None:
        rule = match_interactive_reply(rules, reply.trigger_id, contact_status)
        logger.debug(
            "Interactive reply match",
            extra={"context": {"kind": reply.kind, "trigger_id": reply.trigger_id, "matched": bool(rule)}},
        )
        return rule

    ordered = sort_rules(rules)
    return match_specific_rule(ordered, message_text, contact_status) or match_global_rule(ordered, contact_status)
