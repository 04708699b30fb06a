"""Inbound webhook pipeline.

normalize -> gates (event, instance, global config, tenant settings,
group/own filters) -> extract text -> dedupe -> contact -> match rule ->
cooldown -> delay -> dispatch -> record.

Every outcome is audited. Outcomes from rule matching onwards also get an
interaction row.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.logging_config import bind_logger
from app.models import ChatbotSettings
from app.schemas.rule import ResponseContent
from app.schemas.webhook import WebhookResponse
from app.services.alert_service import alert_critical
from app.services.audit_service import audit_webhook
from app.services.contact_service import get_or_create_contact, update_contact_after_response
from app.services.contact_status import coerce_status
from app.services.cooldown_service import evaluate_rule
from app.services.dedup_service import is_duplicate_message
from app.services.dispatch_service import SleepFunc, dispatch_response, sample_delay_seconds
from app.services.evolution_service import EvolutionService, ProviderAttempt
from app.services.interaction_service import record_interaction, record_send_attempt
from app.services.payload_normalizer import normalize_webhook_payload
from app.services.rule_matcher import find_matching_rule
from app.services.tenant_service import (
    get_active_global_config,
    get_active_rules,
    get_chatbot_settings,
    get_seller_instance,
)
from app.services.text_extractor import extract_message_text

REASON_NOT_MESSAGE = "Not a message event"
REASON_NO_DATA = "No message data"
REASON_NO_INSTANCE = "No instance name"
REASON_API_INACTIVE = "API not active"
REASON_INSTANCE_UNAVAILABLE = "Instance not found or blocked"
REASON_DISABLED = "Chatbot disabled"
REASON_GROUP = "Group message"
REASON_OWN = "Own message"
REASON_NO_TEXT = "No text content"
REASON_NO_PHONE = "No sender phone"
REASON_DUPLICATE = "Duplicate message"
REASON_NO_RULES = "No rules configured"
REASON_NO_MATCH = "No matching rule"
REASON_DISPATCH_FAILED = "Dispatch failed"

ProviderFactory = Callable[..., EvolutionService]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def presence_delay_ms(chatbot_settings: ChatbotSettings, rng=None) -> Optional[int]:
    """Typing indicator duration, or None when typing presence is off."""
    if not settings.typing_presence_enabled or chatbot_settings.typing_enabled is False:
        return None
    seconds = sample_delay_seconds(chatbot_settings.typing_duration_min, chatbot_settings.typing_duration_max, rng)
    return int(seconds * 1000)


async def process_webhook(
    db: Session,
    raw: Any,
    *,
    now: Optional[datetime] = None,
    sleep_func: SleepFunc = asyncio.sleep,
    provider_factory: ProviderFactory = EvolutionService,
    rng=None,
) -> WebhookResponse:
    """Run one webhook delivery through the pipeline.

    Commits the dedup row and contact before dispatch; the outcome rows are
    left for the caller to commit.

    Raises:
        InvalidPayloadError: If the body is not a JSON object.
    """
    event = normalize_webhook_payload(raw)
    log = bind_logger("chatbot_service", instance=event.instance)

    def finish(response: WebhookResponse) -> WebhookResponse:
        log.info(
            f"Webhook {response.status}: {response.reason or response.rule}",
            extra={"context": response.model_dump(exclude_none=True)},
        )
        audit_webhook(db, event.instance, raw, outcome=response.model_dump(exclude_none=True))
        return response

    if not event.is_message_event:
        return finish(WebhookResponse.ignored(REASON_NOT_MESSAGE))
    if event.data is None:
        return finish(WebhookResponse.ignored(REASON_NO_DATA))
    if not event.instance:
        return finish(WebhookResponse.ignored(REASON_NO_INSTANCE))

    global_config = get_active_global_config(db)
    if not global_config:
        return finish(WebhookResponse.ignored(REASON_API_INACTIVE))

    instance = get_seller_instance(db, event.instance)
    if not instance or instance.instance_blocked:
        return finish(WebhookResponse.ignored(REASON_INSTANCE_UNAVAILABLE))

    seller_id = instance.seller_id
    log = bind_logger("chatbot_service", instance=event.instance, seller_id=str(seller_id))

    chatbot_settings = get_chatbot_settings(db, seller_id)
    if not chatbot_settings.is_enabled:
        return finish(WebhookResponse.ignored(REASON_DISABLED))

    envelope = event.data
    if chatbot_settings.ignore_groups is not False and envelope.is_group:
        return finish(WebhookResponse.ignored(REASON_GROUP))
    if chatbot_settings.ignore_own_messages is not False and envelope.from_me:
        return finish(WebhookResponse.ignored(REASON_OWN))

    message_text = extract_message_text(envelope.message)
    if not message_text:
        return finish(WebhookResponse.ignored(REASON_NO_TEXT))

    phone = envelope.phone
    if not phone:
        return finish(WebhookResponse.ignored(REASON_NO_PHONE))

    if settings.webhook_dedup_enabled and is_duplicate_message(db, seller_id, envelope.message_id):
        return finish(WebhookResponse.ignored(REASON_DUPLICATE))

    received_at = now or _utcnow()
    contact = get_or_create_contact(db, seller_id, phone, envelope.push_name or None, now=received_at)

    rules = get_active_rules(db, seller_id)
    if not rules:
        return finish(WebhookResponse.ignored(REASON_NO_RULES))

    contact_status = coerce_status(contact.contact_status).value
    rule = find_matching_rule(rules, message_text, contact_status)
    if rule is None:
        record_interaction(
            db,
            seller_id=seller_id,
            phone=phone,
            incoming_message=message_text,
            contact=contact,
            was_blocked=True,
            block_reason=REASON_NO_MATCH,
        )
        return finish(WebhookResponse.ignored(REASON_NO_MATCH))

    evaluation = evaluate_rule(contact, rule, received_at)
    if not evaluation.ok:
        record_interaction(
            db,
            seller_id=seller_id,
            phone=phone,
            incoming_message=message_text,
            contact=contact,
            rule=rule,
            was_blocked=True,
            block_reason=evaluation.error,
        )
        return finish(WebhookResponse(status="blocked", reason=evaluation.error, rule=rule.name))

    decision = evaluation.value
    if decision.downgraded:
        log.info(
            f"Response downgraded to {decision.effective_type}: {decision.downgrade_reason}",
            extra={"context": {"rule": rule.name, "requested_type": decision.requested_type}},
        )

    instance_name = instance.instance_name
    rule_name = rule.name
    content = ResponseContent.from_raw(rule.response_content)
    delay_seconds = sample_delay_seconds(chatbot_settings.response_delay_min, chatbot_settings.response_delay_max, rng)
    typing_ms = presence_delay_ms(chatbot_settings, rng)
    attempts: list[ProviderAttempt] = []
    provider = provider_factory(
        global_config.api_url,
        global_config.api_token,
        instance_name,
        on_attempt=attempts.append,
    )

    # Dedup row and contact must be visible to concurrent deliveries, and no
    # connection may be held while the delay and provider calls are awaited.
    db.commit()

    result = await dispatch_response(
        provider,
        phone,
        decision,
        content,
        delay_seconds=delay_seconds,
        presence_delay_ms=typing_ms,
        sleep_func=sleep_func,
    )

    for attempt in attempts:
        record_send_attempt(db, seller_id, instance_name, attempt)

    if not result.sent:
        record_interaction(
            db,
            seller_id=seller_id,
            phone=phone,
            incoming_message=message_text,
            contact=contact,
            rule=rule,
            response_type=decision.effective_type,
            block_reason=REASON_DISPATCH_FAILED,
        )
        alert_critical(
            "Chatbot reply could not be delivered",
            {"instance": instance_name, "phone": phone, "rule": rule_name, "error": result.error},
        )
        return finish(WebhookResponse(status="failed", rule=rule_name, type=decision.effective_type))

    sent_at = now or _utcnow()
    update_contact_after_response(
        db, contact, now=sent_at, delivered_type=result.delivered_type, display_name=envelope.push_name or None
    )
    record_interaction(
        db,
        seller_id=seller_id,
        phone=phone,
        incoming_message=message_text,
        contact=contact,
        rule=rule,
        response_sent=result.payload,
        response_type=result.delivered_type,
    )
    return finish(WebhookResponse(status="sent", rule=rule_name, type=result.delivered_type))
