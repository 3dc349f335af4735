"""Network interception for browser suites.

Registers fake responses, spies and response modifiers on a Playwright page.
Every interception is recorded under its alias so a test can wait for the
request the page made and inspect both sides.

Usage:
    mocker = NetworkMocker(page)
    await mocker.intercept("GET", "/api/users", {"statusCode": 500}, alias="getUsers")
    await page.click("#load-users")
    call = await mocker.wait("getUsers")
    assert call.status_code == 500
    await mocker.clear()
"""
from __future__ import annotations

import inspect
import json
import logging
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from typing import Any, Callable, Dict, List, Optional, Union
from urllib.parse import urlparse

import anyio
from playwright.async_api import Page, Request, Route

from e2e_training.fixtures import load_fixture

logger = logging.getLogger(__name__)


@dataclass
class MockResponse:
    """A stubbed response."""

    status_code: int = 200
    body: Any = None
    headers: Dict[str, str] = field(default_factory=dict)
    delay_ms: int = 0
    force_network_error: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> MockResponse:
        """Build from the intercept dict shape.

        Keys: statusCode, body, headers, delay, forceNetworkError, fixture.
        `fixture` names a JSON fixture used as the body.
        """
        body = data.get("body")
        if data.get("fixture"):
            body = dict(load_fixture(data["fixture"]))
        return cls(
            status_code=int(data.get("statusCode", data.get("status_code", 200))),
            body=body,
            headers=dict(data.get("headers") or {}),
            delay_ms=int(data.get("delay", data.get("delay_ms", 0))),
            force_network_error=bool(data.get("forceNetworkError", data.get("force_network_error", False))),
        )

    def encoded_body(self) -> str:
        if self.body is None:
            return ""
        if isinstance(self.body, str):
            return self.body
        return json.dumps(self.body)

    def content_type(self) -> str:
        if isinstance(self.body, (dict, list)):
            return "application/json"
        return "text/plain"


@dataclass
class Interception:
    """One request matched by an intercept."""

    alias: str
    method: str
    url: str
    request_body: Any
    status_code: Optional[int] = None
    response_body: Any = None
    error: Optional[str] = None


ResponseSpec = Union[MockResponse, Dict[str, Any], Callable[[Request], Any], None]
Modifier = Callable[[Any], Any]


def url_matches(pattern: str, url: str) -> bool:
    """Match a URL against an intercept pattern.

    Patterns starting with "/" match the URL path; other patterns are globs
    over the full URL ("**" and "*" both match any characters).
    """
    if pattern.startswith("/"):
        path = urlparse(url).path
        if any(ch in pattern for ch in "*?["):
            return fnmatchcase(path, pattern)
        return path == pattern or path.rstrip("/") == pattern.rstrip("/")
    if any(ch in pattern for ch in "*?["):
        return fnmatchcase(url, pattern.replace("**", "*"))
    return url == pattern or url.startswith(pattern)


def _parse_body(raw: Optional[str]) -> Any:
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return raw


class NetworkMocker:
    """Intercepts scoped to one page; call clear() in teardown."""

    def __init__(self, page: Page) -> None:
        self.page = page
        self._routes: List[tuple] = []
        self._calls: Dict[str, List[Interception]] = {}
        self._consumed: Dict[str, int] = {}
        self._counter = 0

    async def intercept(
        self,
        method: str,
        pattern: str,
        response: ResponseSpec = None,
        *,
        alias: Optional[str] = None,
        modify: Optional[Modifier] = None,
    ) -> str:
        """Register an intercept and return its alias.

        Args:
            method: HTTP method or "*"
            pattern: Path ("/api/users") or URL glob ("**/todos/*")
            response: MockResponse, intercept dict or callable(request);
                None with no modifier means spy only
            alias: Name for wait()/calls(); generated when omitted
            modify: Callable receiving the real JSON body; may mutate it in
                place or return a replacement
        """
        if alias is None:
            self._counter += 1
            alias = f"intercept-{self._counter}"
        self._calls.setdefault(alias, [])
        self._consumed.setdefault(alias, 0)
        wanted_method = method.upper()

        async def handler(route: Route, request: Request) -> None:
            if wanted_method != "*" and request.method.upper() != wanted_method:
                await route.fallback()
                return
            call = Interception(
                alias=alias,
                method=request.method,
                url=request.url,
                request_body=_parse_body(request.post_data),
            )
            self._calls[alias].append(call)
            try:
                await self._respond(route, request, call, response, modify)
            except Exception as exc:
                call.error = str(exc)
                logger.warning("Intercept @%s failed: %s", alias, exc)
                await route.abort("failed")
                raise

        def matcher(url: str) -> bool:
            return url_matches(pattern, url)

        await self.page.route(matcher, handler)
        self._routes.append((matcher, handler))
        logger.info("Intercept %s %s registered as @%s", wanted_method, pattern, alias)
        return alias

    async def _respond(
        self,
        route: Route,
        request: Request,
        call: Interception,
        response: ResponseSpec,
        modify: Optional[Modifier],
    ) -> None:
        if response is None and modify is None:
            upstream = await route.fetch()
            call.status_code = upstream.status
            call.response_body = _parse_body(await upstream.text())
            await route.fulfill(response=upstream)
            return

        if modify is not None:
            upstream = await route.fetch()
            body = await upstream.json()
            replaced = modify(body)
            if replaced is not None:
                body = replaced
            call.status_code = upstream.status
            call.response_body = body
            await route.fulfill(response=upstream, json=body)
            return

        if callable(response) and not isinstance(response, MockResponse):
            result = response(request)
            if inspect.isawaitable(result):
                result = await result
            response = result
        mock = response if isinstance(response, MockResponse) else MockResponse.from_dict(response or {})

        if mock.delay_ms:
            await anyio.sleep(mock.delay_ms / 1000)
        if mock.force_network_error:
            call.error = "network error"
            await route.abort("failed")
            return

        call.status_code = mock.status_code
        call.response_body = mock.body
        headers = {"content-type": mock.content_type(), **mock.headers}
        await route.fulfill(status=mock.status_code, headers=headers, body=mock.encoded_body())

    def calls(self, alias: str) -> List[Interception]:
        return list(self._calls.get(alias, []))

    async def wait(self, alias: str, timeout: float = 5.0, interval: float = 0.05) -> Interception:
        """Return the next interception for `alias` not yet returned by wait()."""
        alias = alias.lstrip("@")
        if alias not in self._calls:
            raise KeyError(f"No intercept registered with alias @{alias}")
        deadline = anyio.current_time() + timeout
        while anyio.current_time() <= deadline:
            index = self._consumed[alias]
            calls = self._calls[alias]
            if index < len(calls) and (calls[index].status_code is not None or calls[index].error):
                self._consumed[alias] = index + 1
                return calls[index]
            await anyio.sleep(interval)
        raise TimeoutError(f"Timed out after {timeout}s waiting for request @{alias}")

    async def clear(self) -> None:
        """Remove every intercept registered through this mocker."""
        for matcher, handler in self._routes:
            await self.page.unroute(matcher, handler)
        self._routes.clear()
