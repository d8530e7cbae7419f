"""
Messaging Provider - Abstraction Layer for WhatsApp Template Messages
======================================================================

Provides a unified interface for sending WhatsApp template messages.
Business-initiated contact on WhatsApp must use a pre-approved template,
so this is the only kind of message the backend sends.

USAGE:
    provider = CloudAPIProvider.from_settings(get_settings().whatsapp)
    provider.send_template("923001234567", parameters=["Sara", "Maya Dental", link])

CONTRACT:
    send_template() never raises. Missing credentials, network errors and
    provider rejections are logged and swallowed; the caller gets no signal.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

import requests

from ..config import WhatsAppSettings

logger = logging.getLogger(__name__)


class WhatsAppClientError(Exception):
    """Raised internally when the Cloud API rejects a request."""
    pass


def build_body_components(parameters: Sequence[str]) -> list[dict]:
    """Single body component with ordered text parameters."""
    if not parameters:
        return []
    return [
        {
            "type": "body",
            "parameters": [{"type": "text", "text": str(p)} for p in parameters],
        }
    ]


class MessagingProvider(ABC):
    """
    Abstract base class for WhatsApp messaging providers.
    Implement this interface to add new messaging backends.
    """

    @abstractmethod
    def send_template(
        self,
        to: str,
        template_name: Optional[str] = None,
        parameters: Sequence[str] = (),
        language: Optional[str] = None,
    ) -> None:
        """Send a template message. Fire-and-forget: never raises."""
        ...


class CloudAPIProvider(MessagingProvider):
    """
    WhatsApp Cloud API provider (Meta Graph API).

    Configuration:
        - access_token: WhatsApp Business access token
        - phone_number_id: registered sender phone number ID
        - template_name / template_language: defaults for send_template()
    """

    def __init__(
        self,
        access_token: str = "",
        phone_number_id: str = "",
        template_name: str = "review_request",
        template_language: str = "en",
        api_url: str = "https://graph.facebook.com",
        api_version: str = "v19.0",
        timeout: int = 15,
    ):
        self._access_token = access_token
        self._phone_number_id = phone_number_id
        self.template_name = template_name
        self.template_language = template_language
        self._api_url = api_url.rstrip("/")
        self._api_version = api_version
        self._timeout = timeout

    @classmethod
    def from_settings(cls, settings: WhatsAppSettings) -> "CloudAPIProvider":
        return cls(
            access_token=settings.access_token,
            phone_number_id=settings.phone_number_id,
            template_name=settings.template_name,
            template_language=settings.template_language,
            api_url=settings.api_url,
            api_version=settings.api_version,
            timeout=settings.timeout_seconds,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self._access_token and self._phone_number_id)

    @property
    def messages_url(self) -> str:
        return f"{self._api_url}/{self._api_version}/{self._phone_number_id}/messages"

    def build_payload(
        self,
        to: str,
        template_name: Optional[str] = None,
        parameters: Sequence[str] = (),
        language: Optional[str] = None,
    ) -> dict[str, Any]:
        return {
            "messaging_product": "whatsapp",
            "to": to,
            "type": "template",
            "template": {
                "name": template_name or self.template_name,
                "language": {"code": language or self.template_language},
                "components": build_body_components(parameters),
            },
        }

    def send_template(
        self,
        to: str,
        template_name: Optional[str] = None,
        parameters: Sequence[str] = (),
        language: Optional[str] = None,
    ) -> None:
        if not self.is_configured:
            logger.warning(f"WhatsApp credentials not set. Skipping send for {to}")
            return

        payload = self.build_payload(to, template_name, parameters, language)
        try:
            message_id = self._post(payload)
            logger.info(f"WhatsApp message sent to {to} {message_id or ''}".rstrip())
        except (requests.RequestException, WhatsAppClientError) as e:
            logger.error(f"WhatsApp send failed for {to}: {e}")

    def _post(self, payload: dict[str, Any]) -> Optional[str]:
        """POST a payload; return the provider message id if it reported one."""
        response = requests.post(
            self.messages_url,
            headers={
                "Authorization": f"Bearer {self._access_token}",
                "Content-Type": "application/json",
            },
            json=payload,
            timeout=self._timeout,
        )

        if response.status_code >= 400:
            raise WhatsAppClientError(
                f"Cloud API returned {response.status_code}: {self._error_detail(response)}"
            )

        try:
            data = response.json()
        except ValueError:
            return None
        messages = data.get("messages") if isinstance(data, dict) else None
        if isinstance(messages, list) and messages and isinstance(messages[0], dict):
            return messages[0].get("id")
        return None

    @staticmethod
    def _error_detail(response: requests.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return response.text
        error = data.get("error") if isinstance(data, dict) else None
        return str(error or data)
