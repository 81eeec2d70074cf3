from typing import Optional

import httpx

from config import Settings
from logger import get_logger

logger = get_logger(__name__)


class ResendMailer:
    def __init__(
        self,
        api_key: str,
        sender: str,
        api_url: str = "https://api.resend.com/emails",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.sender = sender
        self.api_url = api_url
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "ResendMailer":
        return cls(
            api_key=settings.require("resend_api_key"),
            sender=settings.email_from,
            api_url=settings.resend_api_url,
            timeout=settings.email_timeout_seconds,
        )

    async def send_email(self, to_email: str, subject: str, content: str) -> bool:
        # delivery failures are logged and reported as False, never raised
        payload = {
            "from": self.sender,
            "to": [to_email],
            "subject": subject,
            "html": content,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(self.api_url, json=payload, headers=headers)
                resp.raise_for_status()
                message_id = resp.json().get("id")
        except httpx.HTTPStatusError as e:
            logger.error(
                "Error sending email to %s: HTTP %s %s",
                to_email, e.response.status_code, e.response.text[:500],
            )
            return False
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Error sending email to %s: %s", to_email, e)
            return False

        if not message_id:
            logger.error("Error sending email to %s: provider returned no message id", to_email)
            return False

        logger.info("Email sent successfully with ID: %s", message_id)
        return True
