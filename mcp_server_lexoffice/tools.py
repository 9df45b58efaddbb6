"""Tool definitions and handlers for the Lexware Office MCP server.

Every tool is a (name, description, parameter model, handler) entry. The
parameter model doubles as the MCP ``inputSchema`` and validates arguments
before any request is made. Handlers call the lexoffice client once and
always answer with a single text block: either a fixed failure message or a
summary line followed by the payload as indented JSON.
"""

import json
from typing import Any, Awaitable, Callable, Dict, List, Literal, Optional, Tuple, Type

from mcp.types import TextContent, Tool
from pydantic import BaseModel, Field, ValidationError

from mcp_server_lexoffice.lexoffice_client import (
    LexofficeClient,
    LexofficeFailure,
    VoucherListPage,
)

InvoiceStatus = Literal["open", "draft", "paid", "paidoff", "voided"]
ALL_INVOICE_STATUSES: List[str] = ["open", "draft", "paid", "paidoff", "voided"]

UUID_PATTERN = r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"

_WILDCARD_HINT = (
    "can be a substring; _ is allowed as wildcard for any character; "
    "% is allowed as wildcard for any number of characters; _ and % can be escaped with \\"
)


class GetInvoicesParams(BaseModel):
    status: List[InvoiceStatus] = Field(
        default=list(ALL_INVOICE_STATUSES),
        description="voucher states to include",
    )
    page: int = Field(0, ge=0, description="page number to retrieve; starts at 0")
    size: int = Field(250, ge=1, le=250, description="number of invoices to retrieve per page")


class GetInvoiceDetailsParams(BaseModel):
    id: str = Field(..., pattern=UUID_PATTERN, description="The id of the invoice")


class GetContactsParams(BaseModel):
    email: Optional[str] = Field(
        None,
        min_length=3,
        description=(
            "filters contacts where any of their email addresses inside the emailAddresses object "
            f"or in company contactPersons match the given email value; {_WILDCARD_HINT}"
        ),
    )
    name: Optional[str] = Field(
        None,
        min_length=3,
        description=f"filters contacts whose name matches the given name value; {_WILDCARD_HINT}",
    )
    number: Optional[int] = Field(
        None,
        description="returns the contacts with the specified contact number (customer or vendor number)",
    )
    customer: Optional[bool] = Field(
        None,
        description=(
            "if set to true filters contacts that have the role customer, "
            "if set to false filters contacts that do not have the customer role"
        ),
    )
    vendor: Optional[bool] = Field(
        None,
        description=(
            "if set to true filters contacts that have the role vendor, "
            "if set to false filters contacts that do not have the vendor role"
        ),
    )
    page: int = Field(0, ge=0, description="page number to retrieve; starts at 0")
    size: int = Field(250, ge=1, le=250, description="number of contacts to retrieve per page")


class ListPostingCategoriesParams(BaseModel):
    type: Optional[Literal["income", "outgo"]] = Field(None, description="Filter posting categories by type")


class ListCountriesParams(BaseModel):
    taxClassification: Optional[Literal["de", "intraCommunity", "thirdPartyCountry"]] = Field(
        None,
        description=(
            'Filter countries by tax classification: "de" for Germany, "intraCommunity" for EU countries '
            'eligible for Innergemeinschaftliche Lieferung, or "thirdPartyCountry" for non-EU countries'
        ),
    )


TOOL_DEFINITIONS: Dict[str, Tuple[str, Type[BaseModel]]] = {
    "get-invoices": (
        "Get a list of invoices from Lexware Office",
        GetInvoicesParams,
    ),
    "get-invoice-details": (
        "Get details of an invoice from Lexware Office",
        GetInvoiceDetailsParams,
    ),
    "get-contacts": (
        "Get contacts from Lexware Office with optional filters that are combined with a logical AND",
        GetContactsParams,
    ),
    "list-posting-categories": (
        "Retrieve list of posting categories for bookkeeping vouchers",
        ListPostingCategoriesParams,
    ),
    "list-countries": (
        "Retrieve list of countries known to lexoffice with their tax classifications. "
        'Tax classifications include "de" (Germany), "intraCommunity" (eligible for '
        'Innergemeinschaftliche Lieferung within EU), and "thirdPartyCountry" (countries outside the EU).',
        ListCountriesParams,
    ),
}


def text_result(text: str) -> List[TextContent]:
    """Wrap ``text`` as the single text block of a tool reply."""
    return [TextContent(type="text", text=text)]


def payload_result(summary: str, payload: Any) -> List[TextContent]:
    """Summary line, blank line, then the payload as indented JSON."""
    return text_result(f"{summary}\n\n{json.dumps(payload, indent=2, ensure_ascii=False)}")


def filter_by_field(items: List[Any], field: str, value: Optional[str]) -> List[Any]:
    """Keep items whose ``field`` equals ``value``; no value keeps everything."""
    if value is None:
        return list(items)
    return [item for item in items if isinstance(item, dict) and item.get(field) == value]


def build_tools() -> List[Tool]:
    """MCP tool listing generated from the parameter models."""
    return [
        Tool(name=name, description=description, inputSchema=model.model_json_schema())
        for name, (description, model) in TOOL_DEFINITIONS.items()
    ]


class LexofficeTools:
    """Dispatches validated tool calls to the lexoffice client."""

    def __init__(self, client: LexofficeClient) -> None:
        self.client = client
        self._handlers: Dict[str, Callable[[Any], Awaitable[List[TextContent]]]] = {
            "get-invoices": self.get_invoices,
            "get-invoice-details": self.get_invoice_details,
            "get-contacts": self.get_contacts,
            "list-posting-categories": self.list_posting_categories,
            "list-countries": self.list_countries,
        }

    def list_tools(self) -> List[Tool]:
        """List available tools."""
        return build_tools()

    async def call(self, name: str, arguments: Optional[Dict[str, Any]]) -> List[TextContent]:
        """Validate ``arguments`` for tool ``name`` and run its handler.

        Raises pydantic ``ValidationError`` for invalid arguments so the MCP
        layer reports it as a tool error instead of a text reply.
        """
        handler = self._handlers.get(name)
        if handler is None:
            return text_result(f"Unknown tool: {name}")

        _, model = TOOL_DEFINITIONS[name]
        params = model.model_validate(arguments or {})
        return await handler(params)

    async def get_invoices(self, params: GetInvoicesParams) -> List[TextContent]:
        """Fetch invoice vouchers and summarise the voucher list content."""
        # TODO: forward page/size once voucherlist paging is wired into the listing
        result = await self.client.list_invoice_vouchers(list(params.status))
        if isinstance(result, LexofficeFailure):
            return text_result("Failed to retrieve invoices")

        try:
            vouchers = VoucherListPage.model_validate(result.data).content
        except ValidationError:
            vouchers = None

        if not vouchers:
            return text_result("Failed to retrieve invoices")

        return payload_result(f"There are {len(vouchers)} invoices in Lexware Office:", vouchers)

    async def get_invoice_details(self, params: GetInvoiceDetailsParams) -> List[TextContent]:
        """Fetch a single invoice by id."""
        result = await self.client.get_invoice(params.id)
        if isinstance(result, LexofficeFailure) or result.data is None:
            return text_result("Failed to retrieve invoice data")

        return payload_result("Invoice details:", result.data)

    async def get_contacts(self, params: GetContactsParams) -> List[TextContent]:
        """Fetch contacts matching the given filters."""
        result = await self.client.list_contacts(
            email=params.email,
            name=params.name,
            number=params.number,
            customer=params.customer,
            vendor=params.vendor,
        )
        if isinstance(result, LexofficeFailure) or result.data is None:
            return text_result("Failed to retrieve contacts")

        return payload_result("Contacts:", result.data)

    async def list_posting_categories(self, params: ListPostingCategoriesParams) -> List[TextContent]:
        """Fetch posting categories, optionally keeping one type."""
        result = await self.client.list_posting_categories()
        if isinstance(result, LexofficeFailure) or not isinstance(result.data, list):
            return text_result("Failed to retrieve posting categories")

        categories = filter_by_field(result.data, "type", params.type)
        return payload_result("Posting Categories:", categories)

    async def list_countries(self, params: ListCountriesParams) -> List[TextContent]:
        """Fetch countries, optionally keeping one tax classification."""
        result = await self.client.list_countries()
        if isinstance(result, LexofficeFailure) or not isinstance(result.data, list):
            return text_result("Failed to retrieve countries")

        countries = filter_by_field(result.data, "taxClassification", params.taxClassification)
        return payload_result("Countries:", countries)
