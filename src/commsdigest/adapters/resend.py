"""Resend adapter for delivering reports by email."""

import httpx

from commsdigest.adapters.base import AdapterError, BaseAdapter, DeliveryError
from commsdigest.config.settings import ResendSettings

RESEND_API_ENDPOINT = "https://api.resend.com"


class ResendAdapter(BaseAdapter):
    """Adapter for the Resend transactional email API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = RESEND_API_ENDPOINT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__("resend", transport)
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")

    @classmethod
    def from_settings(cls, settings: ResendSettings) -> "ResendAdapter":
        return cls(api_key=settings.api_key.get_secret_value())

    async def connect(self) -> bool:
        """Open the HTTP client with the Resend API key."""
        if not self.api_key:
            self.logger.warning("Resend API key not configured")
            return False

        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={"Authorization": f"Bearer {self.api_key}"},
                transport=self._transport,
            )
        self._connected = True
        return True

    async def send(self, sender: str, to: str, subject: str, text: str) -> str | None:
        """Send a plain-text email.

        Args:
            sender: From header, e.g. "Daily Rundown <digest@example.com>"
            to: Recipient address
            subject: Subject line
            text: Plain-text body

        Returns:
            The Resend message id, when the API returns one.

        Raises:
            DeliveryError: The message was not accepted.
        """
        if not self._connected:
            raise DeliveryError(self.name, "Not connected")

        try:
            payload = await self._request(
                "POST",
                "/emails",
                json={"from": sender, "to": [to], "subject": subject, "text": text},
            )
        except AdapterError as e:
            self.logger.error("Failed to send email", to=to, error=e.message)
            raise DeliveryError(self.name, e.message) from e

        self.logger.info("Sent email", to=to, subject=subject)
        return payload.get("id") if isinstance(payload, dict) else None
