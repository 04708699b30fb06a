import re
from dataclasses import dataclass
from typing import Callable, Optional
from urllib.parse import quote

import httpx

from app.config import settings
from app.logging_config import get_logger
from app.services.result import Result

logger = get_logger("evolution_service")

RESPONSE_PREVIEW_CHARS = 500


def normalize_api_url(url: str) -> str:
    """Base API URL without trailing slashes or a trailing `/manager` panel path."""
    clean = (url or "").strip().rstrip("/")
    clean = re.sub(r"/manager$", "", clean, flags=re.IGNORECASE)
    return clean.rstrip("/")


def format_phone(phone: str, country_code: Optional[str] = None) -> str:
    """Digits only, with the country code prepended to 10/11-digit local numbers."""
    country_code = country_code or settings.default_country_code
    digits = re.sub(r"\D", "", phone or "")
    if digits.startswith(country_code):
        return digits
    if len(digits) in (10, 11):
        return f"{country_code}{digits}"
    return digits


@dataclass(frozen=True)
class ProviderAttempt:
    """One outbound call to the provider, successful or not."""

    message_type: str
    phone: str
    success: bool
    status_code: Optional[int] = None
    response_text: Optional[str] = None
    error: Optional[str] = None


class EvolutionService:
    """Client for the Evolution API send endpoints of one instance."""

    def __init__(
        self,
        api_url: str,
        api_token: str,
        instance_name: str,
        *,
        timeout: Optional[float] = None,
        country_code: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        on_attempt: Optional[Callable[[ProviderAttempt], None]] = None,
    ):
        self.base_url = normalize_api_url(api_url)
        self.api_token = api_token
        self.instance_name = instance_name
        self.timeout = timeout if timeout is not None else settings.provider_timeout_seconds
        self.country_code = country_code or settings.default_country_code
        self.transport = transport
        self.on_attempt = on_attempt

    def endpoint(self, path: str) -> str:
        return f"{self.base_url}/{path}/{quote(self.instance_name, safe='')}"

    def format_phone(self, phone: str) -> str:
        return format_phone(phone, self.country_code)

    def _record(self, attempt: ProviderAttempt) -> None:
        if self.on_attempt is not None:
            self.on_attempt(attempt)

    async def _post(self, path: str, payload: dict, message_type: str) -> Result[dict]:
        """POST to the instance endpoint. Never raises; failures come back as Result."""
        url = self.endpoint(path)
        phone = payload.get("number", "")
        headers = {"Content-Type": "application/json", "apikey": self.api_token}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(url, json=payload, headers=headers)
        except Exception as e:
            logger.error(
                f"Evolution {message_type} request failed: {e}",
                extra={"context": {"url": url, "phone": phone}},
            )
            self._record(ProviderAttempt(message_type=message_type, phone=phone, success=False, error=str(e)))
            return Result.failure(str(e), "transport_error")

        preview = response.text[:RESPONSE_PREVIEW_CHARS]
        logger.info(
            f"Evolution {message_type} response: status={response.status_code}",
            extra={"context": {"url": url, "phone": phone, "body": preview}},
        )
        self._record(
            ProviderAttempt(
                message_type=message_type,
                phone=phone,
                success=response.is_success,
                status_code=response.status_code,
                response_text=preview,
            )
        )
        if response.is_success:
            return Result.success(payload)
        return Result.failure(f"HTTP {response.status_code}: {preview}", f"http_{response.status_code}")

    async def send_text(self, phone: str, text: str) -> Result[dict]:
        payload = {"number": self.format_phone(phone), "text": text}
        return await self._post("message/sendText", payload, "text")

    async def send_media(
        self, phone: str, media_url: str, caption: str = "", mediatype: str = "image"
    ) -> Result[dict]:
        payload = {
            "number": self.format_phone(phone),
            "mediatype": mediatype,
            "media": media_url,
            "caption": caption,
        }
        return await self._post("message/sendMedia", payload, "media")

    async def send_buttons(self, phone: str, text: str, buttons: list[dict]) -> Result[dict]:
        """Native buttons endpoint. `buttons` are already in `{type, reply: {id, title}}` form."""
        payload = {"number": self.format_phone(phone), "text": text, "buttons": buttons}
        return await self._post("message/sendButtons", payload, "buttons")

    async def send_interactive_buttons(self, phone: str, text: str, buttons: list[dict]) -> Result[dict]:
        payload = {
            "number": self.format_phone(phone),
            "interactive": {
                "type": "button",
                "body": {"text": text},
                "action": {"buttons": buttons},
            },
        }
        return await self._post("message/sendWhatsAppInteractive", payload, "buttons_interactive")

    async def send_list(
        self, phone: str, text: str, button_text: str, sections: list[dict], title: str = "Menu"
    ) -> Result[dict]:
        payload = {
            "number": self.format_phone(phone),
            "title": title,
            "description": text,
            "buttonText": button_text,
            "footerText": "",
            "sections": sections,
        }
        return await self._post("message/sendList", payload, "list")

    async def send_interactive_list(
        self, phone: str, text: str, button_text: str, sections: list[dict], title: str = "Menu"
    ) -> Result[dict]:
        payload = {
            "number": self.format_phone(phone),
            "interactive": {
                "type": "list",
                "header": {"type": "text", "text": title},
                "body": {"text": text},
                "action": {"button": button_text, "sections": sections},
            },
        }
        return await self._post("message/sendWhatsAppInteractive", payload, "list_interactive")

    async def send_presence(self, phone: str, delay_ms: int, presence: str = "composing") -> bool:
        """Show "typing..." to the contact. Best-effort; not recorded as a send attempt."""
        url = self.endpoint("chat/sendPresence")
        payload = {"number": self.format_phone(phone), "presence": presence, "delay": max(int(delay_ms), 0)}
        headers = {"Content-Type": "application/json", "apikey": self.api_token}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(url, json=payload, headers=headers)
            if not response.is_success:
                logger.warning(f"Evolution presence rejected: status={response.status_code}")
            return response.is_success
        except Exception as e:
            logger.warning(f"Evolution presence failed: {e}")
            return False
