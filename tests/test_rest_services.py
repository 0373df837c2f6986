"""Tests for the document API backed services."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from conftest import make_client, make_invoice

from finance_agent.models import ClientStatus, ExpenseTransaction, InvoiceStatus
from finance_agent.services import ServiceError
from finance_agent.services.rest import FinanceAPIClient, create_rest_services, to_wire_fields
from finance_agent.tools import ToolExecutor


def _response(status_code: int = 200, payload=None) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.content = b"{}" if payload is not None else b""
    response.json.return_value = payload
    response.text = ""
    return response


@pytest.fixture
def api():
    """Create a FinanceAPIClient instance."""
    return FinanceAPIClient(
        base_url="http://finance.local/",
        token="secret-token",
        timeout=5.0,
        max_retries=2,
    )


class TestFinanceAPIClient:
    """Tests for FinanceAPIClient request handling."""

    def test_init_strips_trailing_slash(self, api):
        assert api.base_url == "http://finance.local"

    def test_headers_carry_tenant_and_token(self, api):
        headers = api._get_headers("user-123")

        assert headers["X-User-Id"] == "user-123"
        assert headers["Authorization"] == "Bearer secret-token"

    def test_headers_without_token(self):
        api = FinanceAPIClient(base_url="http://finance.local", token="")

        assert "Authorization" not in api._get_headers("user-123")

    @pytest.mark.asyncio
    async def test_request_returns_json(self, api):
        with patch.object(api, "_get_client") as mock_get:
            mock_http = AsyncMock()
            mock_http.request = AsyncMock(return_value=_response(payload={"count": 2}))
            mock_get.return_value = mock_http

            result = await api.request("GET", "/api/v1/invoices/count", "user-123")

            assert result == {"count": 2}
            kwargs = mock_http.request.call_args.kwargs
            assert kwargs["method"] == "GET"
            assert kwargs["headers"]["X-User-Id"] == "user-123"

    @pytest.mark.asyncio
    async def test_error_status_raises_service_error(self, api):
        with patch.object(api, "_get_client") as mock_get:
            mock_http = AsyncMock()
            mock_http.request = AsyncMock(
                return_value=_response(404, payload={"detail": "not found"})
            )
            mock_get.return_value = mock_http

            with pytest.raises(ServiceError) as exc_info:
                await api.request("GET", "/api/v1/clients", "user-123")

            assert exc_info.value.status_code == 404
            assert exc_info.value.details == {"detail": "not found"}

    @pytest.mark.asyncio
    async def test_transport_errors_are_retried(self, api):
        """Transport failures are retried with backoff before giving up."""
        with (
            patch.object(api, "_get_client") as mock_get,
            patch("finance_agent.services.rest.asyncio.sleep", new=AsyncMock()) as mock_sleep,
        ):
            mock_http = AsyncMock()
            mock_http.request = AsyncMock(
                side_effect=[
                    httpx.ConnectError("refused"),
                    _response(payload=[{"id": "c-1"}]),
                ]
            )
            mock_get.return_value = mock_http

            result = await api.request("GET", "/api/v1/clients", "user-123")

            assert result == [{"id": "c-1"}]
            assert mock_http.request.call_count == 2
            mock_sleep.assert_awaited_once_with(1)

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self, api):
        with (
            patch.object(api, "_get_client") as mock_get,
            patch("finance_agent.services.rest.asyncio.sleep", new=AsyncMock()),
        ):
            mock_http = AsyncMock()
            mock_http.request = AsyncMock(side_effect=httpx.ConnectError("refused"))
            mock_get.return_value = mock_http

            with pytest.raises(ServiceError, match="Request failed"):
                await api.request("GET", "/api/v1/clients", "user-123")

            assert mock_http.request.call_count == 3

    def test_extract_items(self):
        assert FinanceAPIClient.extract_items([{"id": "1"}]) == [{"id": "1"}]
        assert FinanceAPIClient.extract_items({"items": [{"id": "2"}]}) == [{"id": "2"}]
        assert FinanceAPIClient.extract_items({"unexpected": True}) == []

    def test_with_id_requires_id(self):
        with pytest.raises(ServiceError, match="did not include an id"):
            FinanceAPIClient.with_id(make_client(), {})


class TestRestServices:
    """Tests for the REST registry and ledgers."""

    @pytest.fixture
    def api_mock(self):
        api = MagicMock(spec=FinanceAPIClient)
        api.request = AsyncMock()
        api.extract_items = FinanceAPIClient.extract_items
        api.with_id = FinanceAPIClient.with_id
        return api

    @pytest.mark.asyncio
    async def test_client_create_posts_lead_document(self, api_mock, user_id):
        services = create_rest_services(api_mock)
        api_mock.request.return_value = {"id": "c-9"}
        client = make_client()
        client.status = ClientStatus.CUSTOMER

        created = await services.clients.create(user_id, client)

        assert created.id == "c-9"
        method, path, tenant = api_mock.request.call_args.args
        assert (method, path, tenant) == ("POST", "/api/v1/clients", user_id)
        assert api_mock.request.call_args.kwargs["json"]["status"] == "lead"

    @pytest.mark.asyncio
    async def test_find_by_name_matches_client_side(self, api_mock, user_id):
        services = create_rest_services(api_mock)
        api_mock.request.return_value = [
            {"id": "c-1", "name": "Acme Corp", "contactPerson": "Jane", "email": "j@acme.com"},
            {"id": "c-2", "name": "Globex", "contactPerson": "Hank", "email": "h@globex.com"},
        ]

        found = await services.clients.find_by_name(user_id, "globex ")

        assert found.id == "c-2"

    @pytest.mark.asyncio
    async def test_transactions_list_decodes_variants(self, api_mock, user_id):
        services = create_rest_services(api_mock)
        api_mock.request.return_value = {
            "items": [
                {"id": "t-1", "type": "expense", "amount": "40", "date": "2024-03-01"},
            ]
        }

        [transaction] = await services.transactions.list(user_id)

        assert isinstance(transaction, ExpenseTransaction)

    @pytest.mark.asyncio
    async def test_invoice_count(self, api_mock, user_id):
        services = create_rest_services(api_mock)
        api_mock.request.return_value = {"count": 3}

        assert await services.invoices.count(user_id) == 3
        api_mock.request.assert_awaited_once_with("GET", "/api/v1/invoices/count", user_id)

    @pytest.mark.asyncio
    async def test_invalid_count_response(self, api_mock, user_id):
        services = create_rest_services(api_mock)
        api_mock.request.return_value = {"total": 3}

        with pytest.raises(ServiceError, match="Invalid count response"):
            await services.quotations.count(user_id)

    @pytest.mark.asyncio
    async def test_invoice_list_and_create(self, api_mock, user_id):
        services = create_rest_services(api_mock)
        api_mock.request.return_value = [make_invoice("INV-001", "10").to_document()]

        [invoice] = await services.invoices.list(user_id)
        assert invoice.invoice_number == "INV-001"

        api_mock.request.return_value = {"id": "inv-2"}
        created = await services.invoices.create(user_id, make_invoice("INV-002", "20"))
        assert created.id == "inv-2"

    @pytest.mark.asyncio
    async def test_update_patches_only_given_fields(self, api_mock, user_id):
        services = create_rest_services(api_mock)

        await services.invoices.update(user_id, "inv-1", {"status": InvoiceStatus.PAID})

        api_mock.request.assert_awaited_once_with(
            "PATCH", "/api/v1/invoices/inv-1", user_id, json={"status": "paid"}
        )


def test_to_wire_fields_uses_document_names():
    assert to_wire_fields({"status": InvoiceStatus.SENT, "quotation_ref": "q-1"}) == {
        "status": "sent",
        "quotationRef": "q-1",
    }


class TestRetrySafety:
    """Tests for which transport failures are retried."""

    @staticmethod
    def _api(handler) -> FinanceAPIClient:
        return FinanceAPIClient(
            base_url="http://finance.local",
            token="",
            max_retries=2,
            transport=httpx.MockTransport(handler),
        )

    @pytest.mark.asyncio
    async def test_post_is_not_resent_after_read_timeout(self, user_id):
        """The server may have stored the first POST, so it is never sent twice."""
        posts: list[bytes] = []

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "POST":
                posts.append(request.content)
                if len(posts) == 1:
                    raise httpx.ReadTimeout("timed out", request=request)
                return httpx.Response(201, json={"id": "inv-2"})
            if request.url.path.endswith("/count"):
                return httpx.Response(200, json={"count": 0})
            return httpx.Response(
                200,
                json=[{"id": "c-1", "name": "Acme", "contactPerson": "Jane", "email": "j@acme.com"}],
            )

        api = self._api(handler)
        executor = ToolExecutor(create_rest_services(api), tool_timeout=5.0)

        with patch("finance_agent.services.rest.asyncio.sleep", new=AsyncMock()):
            result = await executor.execute(
                "createInvoice",
                {
                    "clientName": "Acme",
                    "items": [{"description": "Audit", "quantity": 1, "unitPrice": 900}],
                    "dueDate": "2024-07-01",
                },
                user_id,
            )
        await api.close()

        assert result.startswith("Error: Request failed")
        assert len(posts) == 1

    @pytest.mark.asyncio
    async def test_post_is_retried_when_connection_failed(self, user_id):
        attempts: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(request.method)
            if len(attempts) == 1:
                raise httpx.ConnectError("refused", request=request)
            return httpx.Response(201, json={"id": "t-1"})

        api = self._api(handler)

        with patch("finance_agent.services.rest.asyncio.sleep", new=AsyncMock()):
            result = await api.request("POST", "/api/v1/transactions", user_id, json={})
        await api.close()

        assert result == {"id": "t-1"}
        assert attempts == ["POST", "POST"]

    @pytest.mark.asyncio
    async def test_get_is_retried_after_read_timeout(self, user_id):
        attempts: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(request.method)
            if len(attempts) == 1:
                raise httpx.ReadTimeout("timed out", request=request)
            return httpx.Response(200, json={"count": 4})

        api = self._api(handler)

        with patch("finance_agent.services.rest.asyncio.sleep", new=AsyncMock()):
            result = await api.request("GET", "/api/v1/invoices/count", user_id)
        await api.close()

        assert result == {"count": 4}
        assert len(attempts) == 2


class TestEventLoopBinding:
    """Tests for reusing one API client across event loops."""

    def test_client_is_rebuilt_for_a_new_event_loop(self, api):
        first = asyncio.run(api._get_client())
        second = asyncio.run(api._get_client())

        assert first is not second

    def test_client_is_reused_within_a_loop(self, api):
        async def get_twice():
            return await api._get_client(), await api._get_client()

        first, second = asyncio.run(get_twice())

        assert first is second
