"""Lexoffice REST API client for API communication."""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union
from urllib.parse import urlencode
from uuid import UUID

import httpx
from pydantic import BaseModel, ConfigDict, Field

from mcp_server_lexoffice.logger import ServerLogger

USER_AGENT = "lexoffice-mcp/0.1.0"


class LexofficeConfig(BaseModel):
    """Configuration for lexoffice connection."""

    api_url: str = Field(default="https://api.lexoffice.io", description="lexoffice API base URL (without version)")
    access_token: str = Field(..., description="lexoffice public API key")
    timeout: Optional[float] = Field(None, description="Request timeout in seconds; None waits indefinitely")
    log_file: Optional[str] = Field(None, description="Path of the server log file")


class FailureKind(str, Enum):
    """Why a lexoffice request produced no payload."""

    NETWORK = "network"
    HTTP_STATUS = "http_status"
    DECODE = "decode"


class LexofficeSuccess(BaseModel):
    """Decoded JSON body of a successful request."""

    ok: Literal[True] = True
    data: Any = None


class LexofficeFailure(BaseModel):
    """A request that failed before yielding a JSON body."""

    ok: Literal[False] = False
    kind: FailureKind
    message: str
    status_code: Optional[int] = None


LexofficeResult = Union[LexofficeSuccess, LexofficeFailure]


class VoucherListPage(BaseModel):
    """Voucher list envelope; only ``content`` is inspected, the rest passes through."""

    model_config = ConfigDict(extra="allow")

    content: Optional[List[Any]] = None


class LexofficeClient:
    """Client for interacting with lexoffice via REST API."""

    def __init__(
        self,
        config: LexofficeConfig,
        logger: Optional[ServerLogger] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize lexoffice client with configuration."""
        self.config = config
        self.api_url = config.api_url.rstrip("/")
        self.logger = logger or ServerLogger(config.log_file)

        self.client = httpx.AsyncClient(
            timeout=config.timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {config.access_token}",
                "Accept": "application/json",
                "User-Agent": USER_AGENT,
            },
        )

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()

    async def fetch_json(self, path: str) -> LexofficeResult:
        """GET ``path`` once and return its decoded JSON body or a failure.

        ``path`` starts with the API version segment and carries its query
        string already encoded. Failures are logged and returned, never raised.
        """
        path = path if path.startswith("/") else f"/{path}"
        url = f"{self.api_url}{path}"

        self.logger.log("Making lexoffice request", {"url": url})

        try:
            response = await self.client.get(url)
        except httpx.HTTPError as e:
            failure = LexofficeFailure(kind=FailureKind.NETWORK, message=f"Request failed: {e!r}")
            self.logger.error("Error making lexoffice request", {"url": url, **failure.model_dump(mode="json")})
            return failure

        if not response.is_success:
            failure = LexofficeFailure(
                kind=FailureKind.HTTP_STATUS,
                message=f"HTTP error! status: {response.status_code}",
                status_code=response.status_code,
            )
            self.logger.error(
                "Error making lexoffice request",
                {"url": url, **failure.model_dump(mode="json"), "body": response.text},
            )
            return failure

        try:
            payload = response.json()
        except ValueError as e:
            failure = LexofficeFailure(
                kind=FailureKind.DECODE,
                message=f"Invalid JSON in response: {e}",
                status_code=response.status_code,
            )
            self.logger.error(
                "Error making lexoffice request",
                {"url": url, **failure.model_dump(mode="json"), "body": response.text},
            )
            return failure

        self.logger.log("lexoffice response", {"json": payload})
        return LexofficeSuccess(data=payload)

    # Voucher list
    async def list_invoice_vouchers(self, statuses: List[str]) -> LexofficeResult:
        """Fetch invoice vouchers in the given states."""
        # voucherStatus is a literal comma list; urlencode would escape the commas
        return await self.fetch_json(
            f"/v1/voucherlist?voucherType=invoice&voucherStatus={','.join(statuses)}"
        )

    # Invoices
    async def get_invoice(self, invoice_id: Union[UUID, str]) -> LexofficeResult:
        """Fetch a specific invoice."""
        return await self.fetch_json(f"/v1/invoices/{invoice_id}")

    # Contacts
    async def list_contacts(
        self,
        email: Optional[str] = None,
        name: Optional[str] = None,
        number: Optional[int] = None,
        customer: Optional[bool] = None,
        vendor: Optional[bool] = None,
    ) -> LexofficeResult:
        """Fetch contacts matching all given filters."""
        params: Dict[str, str] = {}
        if email:
            params["email"] = email
        if name:
            params["name"] = name
        if number is not None:
            params["number"] = str(number)
        if customer is not None:
            params["customer"] = "true" if customer else "false"
        if vendor is not None:
            params["vendor"] = "true" if vendor else "false"

        query = urlencode(params)
        return await self.fetch_json(f"/v1/contacts?{query}" if query else "/v1/contacts")

    # Posting categories
    async def list_posting_categories(self) -> LexofficeResult:
        """Fetch all posting categories."""
        return await self.fetch_json("/v1/posting-categories")

    # Countries
    async def list_countries(self) -> LexofficeResult:
        """Fetch all countries with their tax classification."""
        return await self.fetch_json("/v1/countries")
