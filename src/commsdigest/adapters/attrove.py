"""Attrove adapter for unified email, chat and calendar data."""

from datetime import date
from typing import Any, Literal

import httpx

from commsdigest.adapters.base import BaseAdapter
from commsdigest.config.settings import AttroveSettings
from commsdigest.models import (
    ConnectToken,
    Event,
    Integration,
    MeetingRecord,
    ProvisionedUser,
    QueryResponse,
    SearchResult,
)


def _data(payload: Any) -> list[Any]:
    """Unwrap ``{"data": [...]}`` list envelopes."""
    if isinstance(payload, dict):
        payload = payload.get("data", [])
    return payload if isinstance(payload, list) else []


class AttroveAdapter(BaseAdapter):
    """Adapter for a single user's Attrove data.

    Fetches:
    - Calendar events for a date range
    - Keyword/semantic search over conversations
    - Natural-language answers built from the user's messages
    - Past meetings with summaries
    - Connected integrations
    """

    def __init__(
        self,
        api_key: str,
        user_id: str,
        base_url: str = "https://api.attrove.com/v1",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__("attrove", transport)
        self.api_key = api_key
        self.user_id = user_id
        self.base_url = base_url.rstrip("/")

    @classmethod
    def from_settings(
        cls,
        settings: AttroveSettings,
        prefer: Literal["secret_key", "user_token"] = "user_token",
    ) -> "AttroveAdapter":
        """Build an adapter from configured credentials."""
        return cls(
            api_key=settings.api_key(prefer),
            user_id=settings.user_id,
            base_url=settings.base_url,
        )

    async def connect(self) -> bool:
        """Open the HTTP client with the user's bearer key."""
        if not self.api_key or not self.user_id:
            self.logger.warning("Attrove credentials not configured")
            return False

        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={"Authorization": f"Bearer {self.api_key}"},
                transport=self._transport,
                timeout=None,
            )
        self._connected = True
        self.logger.debug("Connected to Attrove", user_id=self.user_id)
        return True

    def _user_path(self, suffix: str) -> str:
        return f"/users/{self.user_id}/{suffix}"

    async def list_events(
        self,
        start_date: date,
        end_date: date | None = None,
        expand: list[str] | None = None,
    ) -> list[Event]:
        """List calendar events between two local dates (inclusive).

        Args:
            start_date: First day
            end_date: Last day (defaults to start_date)
            expand: Related fields to inline, e.g. ["attendees", "description"]
        """
        end_date = end_date or start_date
        params: dict[str, Any] = {
            "start_date": start_date.isoformat(),
            "end_date": end_date.isoformat(),
        }
        if expand:
            params["expand"] = ",".join(expand)

        payload = await self._request("GET", self._user_path("events"), params=params)
        events = [Event.model_validate(item) for item in _data(payload)]
        self.logger.info("Fetched events", start=params["start_date"], count=len(events))
        return events

    async def search(
        self,
        query: str,
        after_date: date | None = None,
        include_body_text: bool = False,
    ) -> SearchResult:
        """Search conversations across every connected source."""
        body: dict[str, Any] = {"query": query, "include_body_text": include_body_text}
        if after_date:
            body["after_date"] = after_date.isoformat()

        payload = await self._request("POST", self._user_path("search"), json=body)
        result = SearchResult.model_validate(payload)
        self.logger.info("Searched conversations", count=len(result.conversations))
        return result

    async def query(self, prompt: str, include_sources: bool = False) -> QueryResponse:
        """Ask a natural-language question about the user's communications."""
        payload = await self._request(
            "POST",
            self._user_path("query"),
            json={"question": prompt, "include_sources": include_sources},
        )
        return QueryResponse.model_validate(payload)

    async def list_meetings(
        self,
        expand: list[str] | None = None,
        limit: int | None = None,
    ) -> list[MeetingRecord]:
        """List recorded meetings, most recent first."""
        params: dict[str, Any] = {}
        if expand:
            params["expand"] = ",".join(expand)
        if limit is not None:
            params["limit"] = limit

        payload = await self._request("GET", self._user_path("meetings"), params=params)
        return [MeetingRecord.model_validate(item) for item in _data(payload)]

    async def list_integrations(self) -> list[Integration]:
        """List the user's connected integrations."""
        payload = await self._request("GET", self._user_path("integrations"))
        return [Integration.model_validate(item) for item in _data(payload)]


class AttroveAdminAdapter(BaseAdapter):
    """Partner-level adapter for provisioning users.

    Authenticates with the partner client id and secret (HTTP basic auth).
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        base_url: str = "https://api.attrove.com/v1",
        connect_url: str = "https://connect.attrove.com",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__("attrove_admin", transport)
        self.client_id = client_id
        self.client_secret = client_secret
        self.base_url = base_url.rstrip("/")
        self.connect_base_url = connect_url.rstrip("/")

    @classmethod
    def from_settings(
        cls,
        settings: AttroveSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "AttroveAdminAdapter":
        """Build an admin adapter from configured partner credentials."""
        return cls(
            client_id=settings.client_id,
            client_secret=settings.client_secret.get_secret_value(),
            base_url=settings.base_url,
            connect_url=settings.connect_url,
            transport=transport,
        )

    async def connect(self) -> bool:
        """Open the HTTP client with partner credentials."""
        if not self.client_id or not self.client_secret:
            self.logger.warning("Attrove partner credentials not configured")
            return False

        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                auth=(self.client_id, self.client_secret),
                transport=self._transport,
                timeout=None,
            )
        self._connected = True
        return True

    async def create_user(self, email: str) -> ProvisionedUser:
        """Provision a user and return its id and per-user API key."""
        payload = await self._request("POST", "/admin/users", json={"email": email})
        user = ProvisionedUser.model_validate(payload)
        self.logger.info("Provisioned user", user_id=user.id)
        return user

    async def create_connect_token(self, user_id: str) -> ConnectToken:
        """Create a short-lived token for the integration connect page."""
        payload = await self._request("POST", f"/admin/users/{user_id}/connect-token")
        return ConnectToken.model_validate(payload)

    def connect_url(self, token: str, user_id: str) -> str:
        """URL the user opens to connect Gmail, Slack or another source."""
        params = httpx.QueryParams({"token": token, "user_id": user_id})
        return f"{self.connect_base_url}/integrations/connect?{params}"
