from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session

from app.logging_config import get_logger
from app.models import SecurityAuditLog

logger = get_logger("audit_service")

AUDIT_ACTION = "chatbot_webhook"


def audit_webhook(db: Session, instance_name: Optional[str], payload: Any, outcome: Optional[dict] = None) -> bool:
    """Append the decision trail to the audit log. Failures are logged and swallowed."""
    new_data = {"payload": payload}
    if outcome:
        new_data["outcome"] = outcome

    try:
        with db.begin_nested():
            db.add(
                SecurityAuditLog(
                    action=AUDIT_ACTION,
                    table_name=AUDIT_ACTION,
                    record_id=instance_name or None,
                    new_data=jsonable_encoder(new_data),
                )
            )
            db.flush()
        return True
    except Exception as e:
        logger.warning(f"Audit write failed: {e}", extra={"context": {"instance": instance_name}})
        return False
