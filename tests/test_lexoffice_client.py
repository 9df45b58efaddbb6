from uuid import UUID

import httpx
import pytest

from mcp_server_lexoffice.lexoffice_client import (
    FailureKind,
    LexofficeClient,
    LexofficeConfig,
    LexofficeFailure,
    LexofficeSuccess,
)


@pytest.mark.asyncio
async def test_fetch_json_sends_auth_and_fixed_headers(make_client, json_upstream) -> None:
    client = make_client(json_upstream({"ok": 1}))

    result = await client.fetch_json("/v1/countries")

    assert isinstance(result, LexofficeSuccess)
    assert result.data == {"ok": 1}
    request = client.requests[0]
    assert request.method == "GET"
    assert str(request.url) == "https://api.lexoffice.io/v1/countries"
    assert request.headers["Authorization"] == "Bearer test-token"
    assert request.headers["Accept"] == "application/json"
    assert request.headers["User-Agent"] == "lexoffice-mcp/0.1.0"
    await client.aclose()


@pytest.mark.asyncio
async def test_fetch_json_uses_configured_origin(server_logger) -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, json=[])

    config = LexofficeConfig(access_token="t", api_url="https://sandbox.example.com/")
    async with LexofficeClient(config, logger=server_logger, transport=httpx.MockTransport(handler)) as client:
        await client.fetch_json("v1/countries")

    assert seen == ["https://sandbox.example.com/v1/countries"]


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [400, 401, 404, 429, 500, 503])
async def test_non_2xx_status_returns_failure(make_client, json_upstream, status_code) -> None:
    client = make_client(json_upstream({"message": "nope"}, status_code=status_code))

    result = await client.fetch_json("/v1/countries")

    assert isinstance(result, LexofficeFailure)
    assert result.kind == FailureKind.HTTP_STATUS
    assert result.status_code == status_code
    await client.aclose()


@pytest.mark.asyncio
async def test_redirect_is_not_followed_and_counts_as_failure(make_client) -> None:
    client = make_client(lambda request: httpx.Response(302, headers={"Location": "https://elsewhere.example"}))

    result = await client.fetch_json("/v1/countries")

    assert isinstance(result, LexofficeFailure)
    assert result.status_code == 302
    assert len(client.requests) == 1
    await client.aclose()


@pytest.mark.asyncio
async def test_network_error_returns_failure(make_client) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(handler)

    result = await client.fetch_json("/v1/countries")

    assert isinstance(result, LexofficeFailure)
    assert result.kind == FailureKind.NETWORK
    assert result.status_code is None
    await client.aclose()


@pytest.mark.asyncio
async def test_invalid_json_returns_decode_failure(make_client) -> None:
    client = make_client(lambda request: httpx.Response(200, text="<html>maintenance</html>"))

    result = await client.fetch_json("/v1/countries")

    assert isinstance(result, LexofficeFailure)
    assert result.kind == FailureKind.DECODE
    assert result.status_code == 200
    await client.aclose()


@pytest.mark.asyncio
async def test_requests_and_responses_are_logged(make_client, json_upstream, log_file) -> None:
    client = make_client(json_upstream({"secret": "value"}))

    await client.fetch_json("/v1/countries")

    text = log_file.read_text()
    assert "[INFO] Making lexoffice request" in text
    assert "https://api.lexoffice.io/v1/countries" in text
    assert '"secret": "value"' in text
    await client.aclose()


@pytest.mark.asyncio
async def test_status_failure_is_logged_with_body(make_client, json_upstream, log_file) -> None:
    client = make_client(json_upstream({"message": "unauthorized"}, status_code=401))

    await client.fetch_json("/v1/contacts")

    text = log_file.read_text()
    assert "[ERROR] Error making lexoffice request" in text
    assert '"kind": "http_status"' in text
    assert "unauthorized" in text
    await client.aclose()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "statuses, expected",
    [
        (["open"], "open"),
        (["paid", "open"], "paid,open"),
        (["open", "draft", "paid", "paidoff", "voided"], "open,draft,paid,paidoff,voided"),
    ],
)
async def test_list_invoice_vouchers_query(make_client, json_upstream, statuses, expected) -> None:
    client = make_client(json_upstream({"content": []}))

    await client.list_invoice_vouchers(statuses)

    url = client.requests[0].url
    assert url.path == "/v1/voucherlist"
    assert url.params["voucherType"] == "invoice"
    assert url.params["voucherStatus"] == expected
    assert list(url.params.keys()) == ["voucherType", "voucherStatus"]
    await client.aclose()


@pytest.mark.asyncio
async def test_get_invoice_path(make_client, json_upstream) -> None:
    client = make_client(json_upstream({"id": "x"}))
    invoice_id = UUID("e9066f04-8cc7-4616-93f8-ac9ecc8479c8")

    await client.get_invoice(invoice_id)

    assert client.requests[0].url.path == f"/v1/invoices/{invoice_id}"
    await client.aclose()


@pytest.mark.asyncio
async def test_list_contacts_without_filters_has_no_query(make_client, json_upstream) -> None:
    client = make_client(json_upstream({"content": []}))

    await client.list_contacts()

    assert str(client.requests[0].url) == "https://api.lexoffice.io/v1/contacts"
    await client.aclose()


@pytest.mark.asyncio
async def test_list_contacts_forwards_false_role_flags(make_client, json_upstream) -> None:
    client = make_client(json_upstream({"content": []}))

    await client.list_contacts(customer=False, vendor=True)

    params = client.requests[0].url.params
    assert params["customer"] == "false"
    assert params["vendor"] == "true"
    await client.aclose()


@pytest.mark.asyncio
async def test_list_contacts_encodes_filters(make_client, json_upstream) -> None:
    client = make_client(json_upstream({"content": []}))

    await client.list_contacts(email="%@example.com", name="Acme GmbH", number=10042)

    params = client.requests[0].url.params
    assert params["email"] == "%@example.com"
    assert params["name"] == "Acme GmbH"
    assert params["number"] == "10042"
    assert "customer" not in params
    assert "vendor" not in params
    await client.aclose()
