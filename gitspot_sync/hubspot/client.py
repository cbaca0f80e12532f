"""HubSpot CRM client used to publish release notes onto company records."""

import time
from datetime import datetime
from typing import Any, Protocol

import httpx
import structlog

from gitspot_sync.configuration.models import HubSpotCredentials
from gitspot_sync.exceptions import NotFoundError, RateLimitedError, UpstreamError
from gitspot_sync.utils.constants import NOTE_TO_COMPANY_ASSOCIATION_TYPE_ID
from gitspot_sync.utils.helpers import utc_now

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

SERVICE_NAME = "HubSpot"
NOTES_PATH = "/crm/v3/objects/notes"


class NotePublisher(Protocol):
    """Protocol for anything able to attach a note to a CRM company."""

    async def create_company_note(self, company_id: str, note_body: str, timestamp: datetime | None = None) -> str | None:
        """Create a note associated with ``company_id`` and return its ID when known."""
        ...


def parse_retry_after(headers: httpx.Headers) -> float | None:
    """Extract the number of seconds to wait from rate limit response headers.

    Checks ``Retry-After`` first, then an ``X-RateLimit-Reset``-style epoch
    timestamp. Returns None when neither header is usable.
    """
    retry_after = headers.get("retry-after")
    if retry_after:
        try:
            return max(float(retry_after), 0.0)
        except ValueError:
            logger.warning("Invalid retry-after header value", retry_after=retry_after)

    rate_limit_reset = headers.get("x-ratelimit-reset")
    if rate_limit_reset:
        try:
            reset_timestamp = int(rate_limit_reset)
        except ValueError:
            logger.warning("Invalid x-ratelimit-reset header value", rate_limit_reset=rate_limit_reset)
            return None
        current_timestamp = int(time.time())
        if reset_timestamp > current_timestamp:
            return float(reset_timestamp - current_timestamp + 1)
    return None


def _error_message(response: httpx.Response) -> str:
    try:
        payload: Any = response.json()
    except ValueError:
        return response.text
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return response.text


class HubSpotNotesClient:
    """Creates notes on HubSpot companies through the CRM v3 objects API."""

    def __init__(self, http_client: httpx.AsyncClient) -> None:
        """Initialize with an httpx client already pointed at the HubSpot API and carrying credentials."""
        self.http_client = http_client

    @classmethod
    def create(cls, credentials: HubSpotCredentials, timeout: float = 30.0) -> "HubSpotNotesClient":
        """Build a client with its own authenticated httpx session."""
        http_client = httpx.AsyncClient(
            base_url=credentials.api_url,
            headers={"Authorization": f"Bearer {credentials.access_token}", "Content-Type": "application/json"},
            timeout=timeout,
        )
        return cls(http_client)

    async def aclose(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def create_company_note(self, company_id: str, note_body: str, timestamp: datetime | None = None) -> str | None:
        """Create a note on the company with ID ``company_id``.

        Raises:
            RateLimitedError: HubSpot throttled the request.
            NotFoundError: The company does not exist.
            UpstreamError: Any other non-success response.
        """
        note_timestamp = timestamp or utc_now()
        payload = {
            "properties": {
                "hs_timestamp": str(int(note_timestamp.timestamp() * 1000)),
                "hs_note_body": note_body,
            },
            "associations": [
                {
                    "to": {"id": company_id},
                    "types": [
                        {
                            "associationCategory": "HUBSPOT_DEFINED",
                            "associationTypeId": NOTE_TO_COMPANY_ASSOCIATION_TYPE_ID,
                        }
                    ],
                }
            ],
        }
        logger.info("Creating note for company", company_id=company_id, note_length=len(note_body))
        response = await self.http_client.post(NOTES_PATH, json=payload)

        if response.status_code == 429:
            retry_after = parse_retry_after(response.headers)
            message = _error_message(response)
            logger.error("HubSpot rate limit error", company_id=company_id, retry_after=retry_after, error=message)
            raise RateLimitedError(SERVICE_NAME, message, retry_after=retry_after)
        if response.status_code == 404:
            message = _error_message(response)
            logger.error("HubSpot object not found", company_id=company_id, error=message)
            raise NotFoundError(SERVICE_NAME, 404, message)
        if response.is_error:
            message = _error_message(response)
            logger.error("Error creating note", company_id=company_id, status_code=response.status_code, error=message)
            raise UpstreamError(SERVICE_NAME, response.status_code, message)

        note_id = response.json().get("id") if response.content else None
        logger.info("Successfully created note", company_id=company_id, note_id=note_id)
        return note_id
