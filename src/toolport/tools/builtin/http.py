"""
HTTP fetch tools.

Every URL is checked against the outbound blocklist before a connection is
opened. Redirects are off unless asked for; when followed, each hop is
checked again by a request event hook.
"""

import html
import json
import logging
import re
import time
from typing import Any, Optional

import httpx

from toolport.config.schema import FetchConfig
from toolport.security.urls import is_url_safe
from toolport.tools.base import Tool
from toolport.tools.errors import UrlNotAllowedError
from toolport.tools.models import (
    BooleanParam,
    EnumParam,
    NumberParam,
    StringMapParam,
    StringParam,
    ToolParameter,
    ToolResult,
)

logger = logging.getLogger(__name__)

TRUNCATION_MARKER = "\n... (truncated)"

_SCRIPT_RE = re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL)
_STYLE_RE = re.compile(r"<style[^>]*>.*?</style>", re.IGNORECASE | re.DOTALL)
_BLOCK_RE = re.compile(r"<(br|p|div|h[1-6]|li|tr)\b[^>]*>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")


def truncate(text: str, limit: int) -> str:
    """Cut text to ``limit`` characters, marking the cut."""
    if len(text) <= limit:
        return text
    return text[:limit] + TRUNCATION_MARKER


def html_to_text(markup: str) -> str:
    """
    Reduce an HTML document to readable text.

    Drops scripts and styles, turns block-level tags into line breaks,
    strips the remaining tags and decodes entities.
    """
    text = _SCRIPT_RE.sub("", markup)
    text = _STYLE_RE.sub("", text)
    text = _BLOCK_RE.sub("\n", text)
    text = _TAG_RE.sub("", text)
    text = html.unescape(text).replace("\xa0", " ")

    lines = [" ".join(line.split()) for line in text.splitlines()]
    text = "\n".join(lines)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


async def _check_redirect_target(request: httpx.Request) -> None:
    url = str(request.url)
    if not is_url_safe(url):
        logger.warning(f"Blocked redirect to {url}")
        raise UrlNotAllowedError(url)


class _FetchTool(Tool):
    """Shared client setup for the fetch tools."""

    def __init__(self, config: Optional[FetchConfig] = None):
        """
        Initialize tool.

        Args:
            config: Fetch limits (response size, timeout cap, user agent)
        """
        self.config = config or FetchConfig()

    def _timeout_seconds(self, timeout_ms: Optional[float], default_ms: int) -> float:
        ms = timeout_ms if timeout_ms is not None else default_ms
        return min(ms, self.config.max_timeout_ms) / 1000.0

    def _client(self, timeout: float, follow_redirects: bool = False) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=follow_redirects,
            max_redirects=self.config.max_redirects,
            headers={"User-Agent": self.config.user_agent},
            event_hooks={"request": [_check_redirect_target]},
        )

    def _render_body(self, response: httpx.Response) -> str:
        content_type = response.headers.get("content-type", "")
        body = response.text
        if "application/json" in content_type:
            try:
                body = json.dumps(response.json(), indent=2)
            except ValueError:
                pass
        return truncate(body, self.config.max_response_chars)

    def _render_response(self, response: httpx.Response) -> str:
        content_type = response.headers.get("content-type", "")
        return (
            f"Status: {response.status_code} {response.reason_phrase}\n"
            f"Content-Type: {content_type}\n\n"
            f"{self._render_body(response)}"
        )

    async def _request(
        self,
        method: str,
        url: str,
        timeout_ms: float,
        follow_redirects: bool = False,
        **request_kwargs: Any,
    ) -> httpx.Response:
        """Send a request after the URL gate has passed. Raises httpx errors."""
        timeout = self._timeout_seconds(timeout_ms, 30_000)
        logger.info(f"{method} {url}")
        async with self._client(timeout, follow_redirects) as client:
            return await client.request(method, url, **request_kwargs)


def _url_param(description: str) -> StringParam:
    return StringParam(name="url", description=description, format="url")


def _headers_param() -> StringMapParam:
    return StringMapParam(
        name="headers",
        description="Optional headers to include in the request",
        required=False,
    )


def _timeout_param(default: int) -> NumberParam:
    return NumberParam(
        name="timeout",
        description="Request timeout in milliseconds",
        minimum=1,
        required=False,
        default=default,
    )


class HttpGetTool(_FetchTool):
    """Fetch a URL with GET."""

    @property
    def name(self) -> str:
        """Tool name."""
        return "http_get"

    @property
    def description(self) -> str:
        """Tool description."""
        return "Fetch content from a URL using HTTP GET"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [
            _url_param("URL to fetch"),
            _headers_param(),
            _timeout_param(30_000),
            BooleanParam(
                name="followRedirects",
                description="Follow redirects (each hop is checked against the URL blocklist)",
                required=False,
                default=False,
            ),
        ]

    async def execute(self, **kwargs: Any) -> ToolResult:
        """Perform the GET request."""
        url: str = kwargs["url"]
        timeout_ms: float = kwargs.get("timeout") or 30_000

        if not is_url_safe(url):
            return ToolResult.failure(str(UrlNotAllowedError(url)))

        try:
            response = await self._request(
                "GET",
                url,
                timeout_ms,
                follow_redirects=bool(kwargs.get("followRedirects")),
                headers=kwargs.get("headers"),
            )
        except UrlNotAllowedError as e:
            return ToolResult.failure(str(e))
        except httpx.TimeoutException:
            return ToolResult.failure(f"Request timed out after {timeout_ms:g} ms")
        except httpx.HTTPError as e:
            return ToolResult.failure(f"Failed to fetch URL: {e}")

        return ToolResult.success(self._render_response(response))


class HttpPostTool(_FetchTool):
    """Send a body with POST."""

    @property
    def name(self) -> str:
        """Tool name."""
        return "http_post"

    @property
    def description(self) -> str:
        """Tool description."""
        return "Send data to a URL using HTTP POST"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [
            _url_param("URL to send data to"),
            StringParam(name="body", description="Request body (JSON string or plain text)"),
            EnumParam(
                name="contentType",
                description="Content type of the request body",
                allowed=["application/json", "text/plain", "application/x-www-form-urlencoded"],
                required=False,
                default="application/json",
            ),
            _headers_param(),
            _timeout_param(30_000),
        ]

    async def execute(self, **kwargs: Any) -> ToolResult:
        url: str = kwargs["url"]
        body: str = kwargs["body"]
        content_type: str = kwargs.get("contentType") or "application/json"
        timeout_ms: float = kwargs.get("timeout") or 30_000

        if not is_url_safe(url):
            return ToolResult.failure(str(UrlNotAllowedError(url)))

        headers = {"Content-Type": content_type}
        headers.update(kwargs.get("headers") or {})

        try:
            response = await self._request(
                "POST", url, timeout_ms, headers=headers, content=body.encode("utf-8")
            )
        except UrlNotAllowedError as e:
            return ToolResult.failure(str(e))
        except httpx.TimeoutException:
            return ToolResult.failure(f"Request timed out after {timeout_ms:g} ms")
        except httpx.HTTPError as e:
            return ToolResult.failure(f"Failed to post to URL: {e}")

        return ToolResult.success(self._render_response(response))


class CheckUrlTool(_FetchTool):
    """HEAD request reporting status, latency and headers."""

    @property
    def name(self) -> str:
        """Tool name."""
        return "check_url"

    @property
    def description(self) -> str:
        """Tool description."""
        return "Check if a URL is accessible and get response headers"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [_url_param("URL to check"), _timeout_param(10_000)]

    async def execute(self, **kwargs: Any) -> ToolResult:
        url: str = kwargs["url"]
        timeout_ms: float = kwargs.get("timeout") or 10_000

        if not is_url_safe(url):
            return ToolResult.failure(str(UrlNotAllowedError(url)))

        started = time.monotonic()
        try:
            response = await self._request("HEAD", url, timeout_ms)
        except UrlNotAllowedError as e:
            return ToolResult.failure(str(e))
        except httpx.TimeoutException:
            return ToolResult.failure(f"URL check timed out after {timeout_ms:g} ms")
        except httpx.HTTPError as e:
            return ToolResult.failure(f"URL check failed: {e}")
        elapsed_ms = round((time.monotonic() - started) * 1000)

        headers = json.dumps(dict(response.headers), indent=2)
        return ToolResult.success(
            f"URL: {url}\n"
            f"Status: {response.status_code} {response.reason_phrase}\n"
            f"Response Time: {elapsed_ms}ms\n"
            f"Headers:\n{headers}"
        )


class FetchWebpageTool(_FetchTool):
    """Fetch a page and return its text content.

    Redirects are followed here, since pages routinely redirect from http to
    https; every hop still passes through the URL gate.
    """

    @property
    def name(self) -> str:
        """Tool name."""
        return "fetch_webpage"

    @property
    def description(self) -> str:
        """Tool description."""
        return "Fetch a webpage and extract its text content (strips HTML tags)"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [
            _url_param("URL of the webpage to fetch"),
            NumberParam(
                name="maxLength",
                description="Maximum length of text to return",
                integer=True,
                minimum=1,
                required=False,
                default=10_000,
            ),
        ]

    async def execute(self, **kwargs: Any) -> ToolResult:
        url: str = kwargs["url"]
        max_length: int = kwargs.get("maxLength") or 10_000

        if not is_url_safe(url):
            return ToolResult.failure(str(UrlNotAllowedError(url)))

        try:
            response = await self._request("GET", url, 30_000, follow_redirects=True)
        except UrlNotAllowedError as e:
            return ToolResult.failure(str(e))
        except httpx.TimeoutException:
            return ToolResult.failure("Fetching webpage timed out after 30000 ms")
        except httpx.HTTPError as e:
            return ToolResult.failure(f"Failed to fetch webpage: {e}")

        if response.status_code >= 400:
            return ToolResult.failure(f"HTTP {response.status_code} {response.reason_phrase}")

        text = truncate(html_to_text(response.text), max_length)
        return ToolResult.success(text or "(No text content found)")
