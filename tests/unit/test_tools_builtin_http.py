"""Tests for HTTP fetch tools."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from toolport.config.schema import FetchConfig
from toolport.tools.builtin.http import (
    TRUNCATION_MARKER,
    CheckUrlTool,
    FetchWebpageTool,
    HttpGetTool,
    HttpPostTool,
    _check_redirect_target,
    html_to_text,
    truncate,
)
from toolport.tools.errors import UrlNotAllowedError


def _response(status=200, reason="OK", content_type="text/plain", text="", json_body=None):
    response = MagicMock()
    response.status_code = status
    response.reason_phrase = reason
    response.headers = {"content-type": content_type}
    response.text = text
    if json_body is not None:
        response.json.return_value = json_body
    else:
        response.json.side_effect = ValueError("not json")
    return response


def _patched_client(mock_client_class, response=None, error=None):
    mock_client = AsyncMock()
    if error is not None:
        mock_client.request = AsyncMock(side_effect=error)
    else:
        mock_client.request = AsyncMock(return_value=response)
    mock_client_class.return_value.__aenter__.return_value = mock_client
    mock_client_class.return_value.__aexit__.return_value = False
    return mock_client


def test_http_get_schema():
    """Test parameter schema of http_get."""
    schema = HttpGetTool().to_definition().input_schema()
    assert schema["required"] == ["url"]
    assert schema["properties"]["url"]["format"] == "uri"
    assert schema["properties"]["timeout"]["default"] == 30000
    assert schema["properties"]["followRedirects"]["default"] is False


@pytest.mark.asyncio
async def test_http_get_success():
    """Test successful GET request with a JSON body."""
    response = _response(content_type="application/json", text='{"key":"value"}', json_body={"key": "value"})

    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = _patched_client(mock_client_class, response)

        result = await HttpGetTool().execute(
            url="https://api.example.com/data", headers={"Accept": "application/json"}, timeout=5000
        )

    assert result.is_error is False
    assert result.text == (
        "Status: 200 OK\nContent-Type: application/json\n\n" + '{\n  "key": "value"\n}'
    )
    mock_client.request.assert_awaited_once_with(
        "GET", "https://api.example.com/data", headers={"Accept": "application/json"}
    )
    kwargs = mock_client_class.call_args.kwargs
    assert kwargs["timeout"] == 5.0
    assert kwargs["follow_redirects"] is False


@pytest.mark.asyncio
async def test_http_get_blocked_url_makes_no_request():
    """Test that private addresses are refused before any connection."""
    with patch("httpx.AsyncClient") as mock_client_class:
        result = await HttpGetTool().execute(url="http://192.168.0.1/admin")

    assert result.is_error is True
    assert result.text == "Error: URL is not allowed for security reasons"
    mock_client_class.assert_not_called()


@pytest.mark.asyncio
async def test_http_get_timeout():
    with patch("httpx.AsyncClient") as mock_client_class:
        _patched_client(mock_client_class, error=httpx.ConnectTimeout("slow"))
        result = await HttpGetTool().execute(url="https://example.com", timeout=1500)

    assert result.is_error is True
    assert result.text == "Error: Request timed out after 1500 ms"


@pytest.mark.asyncio
async def test_http_get_connection_error():
    with patch("httpx.AsyncClient") as mock_client_class:
        _patched_client(mock_client_class, error=httpx.ConnectError("refused"))
        result = await HttpGetTool().execute(url="https://example.com")

    assert result.is_error is True
    assert result.text == "Error: Failed to fetch URL: refused"


@pytest.mark.asyncio
async def test_http_get_blocked_redirect():
    """Test that a redirect hop to a blocked address surfaces as a refusal."""
    with patch("httpx.AsyncClient") as mock_client_class:
        _patched_client(mock_client_class, error=UrlNotAllowedError("http://127.0.0.1/"))
        result = await HttpGetTool().execute(url="https://example.com", followRedirects=True)

    assert result.is_error is True
    assert "not allowed" in result.text
    assert mock_client_class.call_args.kwargs["follow_redirects"] is True


@pytest.mark.asyncio
async def test_http_get_truncates_body():
    response = _response(text="x" * 50)
    with patch("httpx.AsyncClient") as mock_client_class:
        _patched_client(mock_client_class, response)
        result = await HttpGetTool(FetchConfig(max_response_chars=10)).execute(url="https://example.com")

    assert result.text.endswith("x" * 10 + TRUNCATION_MARKER)


@pytest.mark.asyncio
async def test_timeout_capped_by_config():
    with patch("httpx.AsyncClient") as mock_client_class:
        _patched_client(mock_client_class, _response())
        await HttpGetTool(FetchConfig(max_timeout_ms=2000)).execute(url="https://example.com", timeout=999_999)

    assert mock_client_class.call_args.kwargs["timeout"] == 2.0


@pytest.mark.asyncio
async def test_http_post_sets_content_type():
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = _patched_client(mock_client_class, _response(status=201, reason="Created", text="done"))
        result = await HttpPostTool().execute(
            url="https://example.com/items", body="a=1", contentType="application/x-www-form-urlencoded"
        )

    assert result.text.startswith("Status: 201 Created")
    mock_client.request.assert_awaited_once_with(
        "POST",
        "https://example.com/items",
        headers={"Content-Type": "application/x-www-form-urlencoded"},
        content=b"a=1",
    )


@pytest.mark.asyncio
async def test_http_post_blocked():
    result = await HttpPostTool().execute(url="http://localhost:8080/", body="{}")
    assert result.is_error is True
    assert "not allowed" in result.text


@pytest.mark.asyncio
async def test_check_url():
    response = _response(status=204, reason="No Content")
    response.headers = {"server": "test"}
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = _patched_client(mock_client_class, response)
        result = await CheckUrlTool().execute(url="https://example.com", timeout=10_000)

    assert result.text.startswith("URL: https://example.com\nStatus: 204 No Content\nResponse Time: ")
    assert '"server": "test"' in result.text
    assert mock_client.request.await_args.args[0] == "HEAD"


@pytest.mark.asyncio
async def test_check_url_file_scheme_blocked():
    result = await CheckUrlTool().execute(url="file:///etc/passwd")
    assert result.text == "Error: URL is not allowed for security reasons"


@pytest.mark.asyncio
async def test_fetch_webpage_extracts_text():
    markup = (
        "<html><head><style>body{}</style><script>alert(1)</script></head>"
        "<body><h1>Title</h1><p>Hello&nbsp;&amp; welcome</p></body></html>"
    )
    with patch("httpx.AsyncClient") as mock_client_class:
        _patched_client(mock_client_class, _response(content_type="text/html", text=markup))
        result = await FetchWebpageTool().execute(url="https://example.com", maxLength=10_000)

    assert result.text == "Title\nHello & welcome"
    assert mock_client_class.call_args.kwargs["follow_redirects"] is True


@pytest.mark.asyncio
async def test_fetch_webpage_http_error():
    with patch("httpx.AsyncClient") as mock_client_class:
        _patched_client(mock_client_class, _response(status=404, reason="Not Found"))
        result = await FetchWebpageTool().execute(url="https://example.com/missing")

    assert result.is_error is True
    assert result.text == "Error: HTTP 404 Not Found"


@pytest.mark.asyncio
async def test_fetch_webpage_empty():
    with patch("httpx.AsyncClient") as mock_client_class:
        _patched_client(mock_client_class, _response(text="<div></div>"))
        result = await FetchWebpageTool().execute(url="https://example.com")

    assert result.text == "(No text content found)"


@pytest.mark.asyncio
async def test_redirect_hook():
    await _check_redirect_target(httpx.Request("GET", "https://example.com/"))
    with pytest.raises(UrlNotAllowedError):
        await _check_redirect_target(httpx.Request("GET", "http://169.254.169.254/"))


@pytest.mark.asyncio
async def test_dispatcher_rejects_malformed_url(dispatcher):
    result = await dispatcher.invoke("http_get", {"url": "not-a-url"})
    assert result.is_error is True
    assert "url" in result.text


def test_truncate():
    assert truncate("abc", 5) == "abc"
    assert truncate("abcdef", 3) == "abc" + TRUNCATION_MARKER


def test_html_to_text_whitespace():
    assert html_to_text("<p>a   b</p>\n\n\n\n<p>c</p>") == "a b\n\nc"
