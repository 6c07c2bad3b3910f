"""Tests for tier1_runtime modules."""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import httpx
import pytest
import structlog

from httpwrap_sdk.tier0_core.errors import (
    BodyReadError,
    ClientError,
    NotFoundError,
    RequestBuildError,
    RequestFailedError,
    StatusError,
    TooManyRequestsError,
    UnexpectedStatusError,
)
from httpwrap_sdk.tier0_core.transport import HttpxTransport, MockResponse, MockTransport
from httpwrap_sdk.tier1_runtime.dispatcher import (
    HttpClient,
    HttpWrapper,
    build_request,
    new_http_wrapper,
)

URL = "https://api.example.com/items"


# ── build_request ──────────────────────────────────────────────────────────

class TestBuildRequest:
    def test_headers_reproduced_exactly(self):
        headers = {"Accept": "application/json", "X-Trace": "t-1"}
        request = build_request("GET", URL, None, headers)
        assert request.headers == headers
        assert request.headers is not headers

    def test_case_variant_headers_fold_to_last(self):
        request = build_request("GET", URL, None, {"X-A": "1", "Accept": "*/*", "x-a": "2"})
        assert request.headers == {"x-a": "2", "Accept": "*/*"}

    def test_no_headers(self):
        assert build_request("DELETE", URL).headers == {}

    @pytest.mark.parametrize("method", ["GET", "DELETE"])
    def test_bodyless_methods_drop_body(self, method):
        assert build_request(method, URL, b"ignored").body is None

    def test_body_copied_to_bytes(self):
        body = bytearray(b"payload")
        request = build_request("PUT", URL, body)
        body[0:1] = b"X"
        assert request.body == b"payload"
        assert isinstance(request.body, bytes)

    def test_post_none_body_is_empty(self):
        assert build_request("POST", URL, None).body == b""

    @pytest.mark.parametrize("url", ["", "items/1", "/items", "ftp://host/x", "http://"])
    def test_rejects_non_absolute_urls(self, url):
        with pytest.raises(RequestBuildError, match="could not create GET request"):
            build_request("GET", url)

    def test_rejects_unknown_method(self):
        with pytest.raises(RequestBuildError, match="PATCH"):
            build_request("PATCH", URL)

    def test_rejects_non_str_header(self):
        with pytest.raises(RequestBuildError):
            build_request("GET", URL, None, {"X-Count": 3})  # type: ignore[dict-item]

    def test_rejects_str_body(self):
        with pytest.raises(RequestBuildError, match="body must be bytes"):
            build_request("POST", URL, "text")  # type: ignore[arg-type]


# ── dispatcher ─────────────────────────────────────────────────────────────

class TestDispatcher:
    def test_satisfies_capability_set(self, client):
        assert isinstance(client, HttpClient)

    def test_get_ok(self, client, mock_transport):
        mock_transport.enqueue(MockResponse(200, b"ok"))
        assert client.get(URL) == b"ok"
        assert mock_transport.last_request.method == "GET"
        assert mock_transport.last_request.body is None

    def test_get_not_found(self, client, mock_transport):
        mock_transport.enqueue(MockResponse(404, b"missing"))
        with pytest.raises(NotFoundError) as exc_info:
            client.get(URL)
        message = str(exc_info.value)
        assert "not found" in message
        assert "404" in message
        assert exc_info.value.method == "GET"

    def test_post_too_many_requests(self, client, mock_transport):
        mock_transport.enqueue(MockResponse(429))
        with pytest.raises(TooManyRequestsError, match="too many requests"):
            client.post(URL, b"{}")

    def test_put_transport_failure(self, client, mock_transport):
        cause = ConnectionRefusedError("connection refused")
        mock_transport.enqueue(cause)
        with pytest.raises(RequestFailedError) as exc_info:
            client.put(URL, b"data")
        assert exc_info.value.__cause__ is cause
        assert "PUT" in str(exc_info.value)
        assert not isinstance(exc_info.value, StatusError)
        assert mock_transport.responses == []

    def test_delete_read_failure(self, client, mock_transport):
        response = MockResponse(200, read_error=OSError("stream reset"))
        mock_transport.enqueue(response)
        with pytest.raises(BodyReadError) as exc_info:
            client.delete(URL)
        assert not isinstance(exc_info.value, StatusError)
        assert isinstance(exc_info.value.__cause__, OSError)
        assert response.close_count == 1

    @pytest.mark.parametrize("status,body", [(200, b"a"), (201, b"b"), (204, b"")])
    def test_success_codes_return_body(self, client, mock_transport, status, body):
        mock_transport.enqueue(MockResponse(status, body))
        assert client.put(URL, b"x") == body

    def test_unexpected_status_carries_code(self, client, mock_transport):
        mock_transport.enqueue(MockResponse(301))
        with pytest.raises(UnexpectedStatusError, match="301"):
            client.get(URL)

    def test_failure_body_never_read(self, client, mock_transport):
        response = MockResponse(503, b"secret diagnostics")
        mock_transport.enqueue(response)
        with pytest.raises(StatusError):
            client.get(URL)
        assert response.read_count == 0

    def test_build_error_never_reaches_transport(self, client, mock_transport):
        with pytest.raises(RequestBuildError):
            client.get("not-a-url")
        assert mock_transport.requests == []

    def test_headers_on_outgoing_request(self, client, mock_transport):
        mock_transport.enqueue(MockResponse(204))
        headers = {"Authorization": "Bearer t", "Content-Type": "application/octet-stream"}
        client.post(URL, b"\x00\x01", headers)
        sent = mock_transport.last_request
        assert sent.headers == headers
        assert sent.body == b"\x00\x01"

    def test_call_fields_bound_during_transport(self, mock_transport):
        seen = []

        class RecordingTransport:
            def execute(self, request):
                seen.append(structlog.contextvars.get_contextvars())
                return mock_transport.execute(request)

        structlog.contextvars.clear_contextvars()
        mock_transport.enqueue(MockResponse(200, b"ok"))
        HttpWrapper(RecordingTransport()).get(URL + "?token=s3cr3t")
        assert seen == [{"method": "GET", "url": URL + "?token=[REDACTED]"}]
        assert structlog.contextvars.get_contextvars() == {}

    def test_error_url_scrubbed(self, client, mock_transport):
        mock_transport.enqueue(MockResponse(403))
        with pytest.raises(StatusError) as exc_info:
            client.get(URL + "?api_key=k-123")
        assert "k-123" not in exc_info.value.url
        assert "k-123" not in str(exc_info.value.to_dict())
        assert mock_transport.last_request.url.endswith("api_key=k-123")

    def test_body_released_exactly_once_everywhere(self, client, mock_transport):
        responses = [
            MockResponse(200, b"ok"),
            MockResponse(404),
            MockResponse(429),
            MockResponse(200, read_error=OSError("eof")),
        ]
        for response in responses:
            mock_transport.enqueue(response)
        calls = [
            lambda: client.get(URL),
            lambda: client.get(URL),
            lambda: client.post(URL, b""),
            lambda: client.delete(URL),
        ]
        for call in calls:
            try:
                call()
            except ClientError:
                pass
        assert [r.close_count for r in responses] == [1, 1, 1, 1]

    def test_concurrent_calls_are_independent(self):
        transport = MockTransport([MockResponse(200, b"%d" % i) for i in range(20)])
        client = HttpWrapper(transport)
        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(lambda _: client.get(URL), range(20)))
        assert sorted(results) == sorted(b"%d" % i for i in range(20))
        assert all(r.close_count == 1 for r in transport.responses)


# ── end to end over httpx ──────────────────────────────────────────────────

class TestDispatcherOverHttpx:
    def _client(self, handler):
        transport = HttpxTransport(httpx.Client(transport=httpx.MockTransport(handler)))
        return new_http_wrapper(transport)

    def test_round_trip(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.headers["x-trace"] == "abc"
            return httpx.Response(201, content=request.read()[::-1])

        client = self._client(handler)
        assert client.post(URL, b"abc", {"X-Trace": "abc"}) == b"cba"

    def test_case_variant_headers_sent_once(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["x-a"] = request.headers.get_list("x-a")
            return httpx.Response(200)

        self._client(handler).get(URL, {"X-A": "1", "x-a": "2"})
        assert seen == {"x-a": ["2"]}

    def test_status_mapped(self):
        client = self._client(lambda request: httpx.Response(401))
        with pytest.raises(ClientError, match=r"unauthorized \(401\)"):
            client.get(URL)

    def test_connect_error_wrapped(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = self._client(handler)
        with pytest.raises(RequestFailedError) as exc_info:
            client.delete(URL)
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    def test_default_transport_built_from_config(self):
        client = new_http_wrapper()
        try:
            assert isinstance(client.transport, HttpxTransport)
        finally:
            client.transport.close()
