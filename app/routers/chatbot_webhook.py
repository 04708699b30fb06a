from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from starlette.requests import ClientDisconnect

from app.database import get_db
from app.logging_config import get_logger
from app.schemas.webhook import DiagnosticResponse, WebhookResponse
from app.services.alert_service import alert_critical
from app.services.chatbot_service import process_webhook
from app.services.diagnostic_service import build_diagnostic_snapshot
from app.services.payload_normalizer import InvalidPayloadError

logger = get_logger("chatbot_webhook")

router = APIRouter()

INVALID_JSON = WebhookResponse.ignored("Invalid JSON")


def _response(body: WebhookResponse, status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@router.post("/chatbot-webhook")
async def handle_chatbot_webhook(request: Request, db: Session = Depends(get_db)):
    """Evolution API webhook: match the message against the seller's rules and reply."""
    try:
        payload = await request.json()
    except ClientDisconnect:
        logger.info("Webhook client disconnected during read")
        return _response(WebhookResponse.ignored("Client disconnected"))
    except ValueError as exc:
        raw = await request.body()
        logger.warning(
            "Webhook payload is not valid JSON",
            extra={"context": {"error": str(exc), "body_preview": raw[:200].decode("utf-8", "ignore")}},
        )
        return _response(INVALID_JSON, status_code=400)

    try:
        result = await process_webhook(db, payload)
        db.commit()
        return _response(result)
    except InvalidPayloadError as exc:
        db.rollback()
        logger.warning(f"Webhook payload rejected: {exc}")
        return _response(INVALID_JSON, status_code=400)
    except Exception as exc:
        db.rollback()
        logger.exception(f"Chatbot webhook failed: {exc}")
        alert_critical("Chatbot webhook failed", {"error": str(exc)})
        return JSONResponse(status_code=500, content={"error": str(exc)})


@router.get("/chatbot-webhook", response_model=DiagnosticResponse)
def chatbot_webhook_diagnostic(db: Session = Depends(get_db)):
    """Troubleshooting snapshot of instance bindings, global config and rules."""
    return build_diagnostic_snapshot(db)
