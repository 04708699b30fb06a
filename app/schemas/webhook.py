from typing import Literal, Optional

from pydantic import BaseModel

WebhookStatus = Literal["ignored", "blocked", "sent", "failed"]


class WebhookResponse(BaseModel):
    status: WebhookStatus
    reason: Optional[str] = None
    rule: Optional[str] = None
    type: Optional[str] = None

    @classmethod
    def ignored(cls, reason: str) -> "WebhookResponse":
        return cls(status="ignored", reason=reason)


class DiagnosticInstance(BaseModel):
    instance_name: str
    seller_id: Optional[str] = None
    is_connected: Optional[bool] = None
    instance_blocked: Optional[bool] = None
    plan_status: Optional[str] = None


class DiagnosticGlobalConfig(BaseModel):
    api_url: Optional[str] = None
    is_active: Optional[bool] = None


class DiagnosticSettings(BaseModel):
    seller_id: Optional[str] = None
    is_enabled: Optional[bool] = None


class DiagnosticRule(BaseModel):
    seller_id: Optional[str] = None
    name: str
    is_active: Optional[bool] = None
    trigger_text: str


class DiagnosticResponse(BaseModel):
    status: Literal["diagnostic"] = "diagnostic"
    instances: list[DiagnosticInstance] = []
    globalConfig: Optional[DiagnosticGlobalConfig] = None
    chatbotSettings: list[DiagnosticSettings] = []
    chatbotRules: list[DiagnosticRule] = []
