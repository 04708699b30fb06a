from app.schemas.rule import CooldownMode, ResponseContent, ResponseType
from app.schemas.webhook import DiagnosticResponse, WebhookResponse

__all__ = ["CooldownMode", "ResponseContent", "ResponseType", "DiagnosticResponse", "WebhookResponse"]
