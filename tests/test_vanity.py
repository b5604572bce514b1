"""Tests for the vanity import endpoint."""

import asyncio
from typing import Any

import pytest
from aiohttp import web
from gir.api import vanity
from gir.config import Config, RedirectConfig, ServerConfig
from gir.server import create_app


async def _send_raw(client: Any, target: str, headers: dict[str, str]) -> str:
    """Send a request with a verbatim request target and return the response."""
    reader, writer = await asyncio.open_connection(
        client.server.host, client.server.port
    )
    lines = [f"GET {target} HTTP/1.1", "Host: internal:8080", "Connection: close"]
    lines.extend(f"{name}: {value}" for name, value in headers.items())
    writer.write(("\r\n".join(lines) + "\r\n\r\n").encode())
    await writer.drain()
    response = await reader.read()
    writer.close()
    await writer.wait_closed()
    return response.decode()


@pytest.fixture
def app() -> web.Application:
    """App with the default redirect configuration."""
    return create_app(Config(server=ServerConfig(), redirect=RedirectConfig()))


class TestNotFound:
    """Requests that are not vanity lookups."""

    @pytest.mark.parametrize(
        "url",
        [
            "/pkg",
            "/pkg?go-get=0",
            "/pkg?go-get=true",
            "/pkg?go-get=1&go-get=1",
            "/pkg?go-get",
            "/?go-get=1",
            "/example.org/pkg/sub",
        ],
    )
    async def test__no_single_go_get__returns_404(
        self,
        aiohttp_client: Any,
        app: web.Application,
        url: str,
    ) -> None:
        """Anything but one go-get=1 on a non-empty path is 404."""
        client = await aiohttp_client(app)
        response = await client.get(url)

        assert response.status == 404

    async def test__other_method_without_go_get__returns_404(
        self,
        aiohttp_client: Any,
        app: web.Application,
    ) -> None:
        """Every method goes through the same check."""
        client = await aiohttp_client(app)
        response = await client.post("/pkg")

        assert response.status == 404


class TestRedirectPage:
    """Requests that receive the redirect page."""

    async def test__nested_path__renders_meta_tags(
        self,
        aiohttp_client: Any,
        app: web.Application,
    ) -> None:
        """Render go-import and go-source for a host-qualified path."""
        client = await aiohttp_client(app)
        response = await client.get(
            "/example.org/pkg/sub?go-get=1", headers={"Host": "example.org"}
        )

        assert response.status == 200
        assert response.content_type == "text/html"
        body = await response.text()
        assert (
            'content="example.org/pkg/sub git https://github.com/example.org/pkg/sub"'
        ) in body
        assert (
            'content="example.org/pkg/sub https://github.com/example.org/pkg/sub '
            "https://pkg.go.dev/example.org/pkg/sub/tree/master{/dir} "
        ) in body
        assert 'url=https://pkg.go.dev/example.org/pkg/sub"' in body

    async def test__single_segment__uses_host_header(
        self,
        aiohttp_client: Any,
        app: web.Application,
    ) -> None:
        """Single-segment paths are qualified with the Host header."""
        client = await aiohttp_client(app)
        response = await client.get("/sub?go-get=1", headers={"Host": "example.org:8080"})

        assert response.status == 200
        body = await response.text()
        assert 'content="example.org/sub git https://github.com/example.org/sub"' in body

    async def test__forwarded_host__overrides_host_header(
        self,
        aiohttp_client: Any,
        app: web.Application,
    ) -> None:
        """The trusted forwarded-host header wins over the Host header."""
        client = await aiohttp_client(app)
        response = await client.get(
            "/sub/?go-get=1",
            headers={"Host": "internal:8080", "x-forwarded-host": "go.example.com"},
        )

        assert response.status == 200
        body = await response.text()
        assert 'content="go.example.com/sub git https://github.com/go.example.com/sub"' in body

    async def test__custom_forwarded_header__honored(
        self,
        aiohttp_client: Any,
    ) -> None:
        """Only the configured header name is trusted."""
        config = Config(
            server=ServerConfig(),
            redirect=RedirectConfig(forwarded_header="x-real-host"),
        )
        client = await aiohttp_client(create_app(config))
        response = await client.get(
            "/sub?go-get=1",
            headers={
                "Host": "internal",
                "X-Forwarded-Host": "wrong.example.com",
                "X-Real-Host": "go.example.com",
            },
        )

        body = await response.text()
        assert "go.example.com/sub git" in body
        assert "wrong.example.com" not in body

    async def test__non_http_docs__no_deep_links(
        self,
        aiohttp_client: Any,
    ) -> None:
        """Non-HTTP docs prefixes render go-source without suffixes."""
        config = Config(
            server=ServerConfig(),
            redirect=RedirectConfig(docs_prefix="godoc://docs"),
        )
        client = await aiohttp_client(create_app(config))
        response = await client.get("/sub?go-get=1", headers={"Host": "example.org"})

        body = await response.text()
        assert (
            '<meta name="go-source" content="example.org/sub '
            'https://github.com/example.org/sub">'
        ) in body

    async def test__head__returns_200(
        self,
        aiohttp_client: Any,
        app: web.Application,
    ) -> None:
        """HEAD requests are answered like GET."""
        client = await aiohttp_client(app)
        response = await client.head("/sub?go-get=1")

        assert response.status == 200

    async def test__space_in_forwarded_host__urls_escaped(
        self,
        aiohttp_client: Any,
        app: web.Application,
    ) -> None:
        """URLs in the meta tags never contain raw whitespace."""
        client = await aiohttp_client(app)
        response = await client.get("/sub?go-get=1", headers={"X-Forwarded-Host": "a b"})

        assert response.status == 200
        body = await response.text()
        assert 'content="a b/sub git https://github.com/a%20b/sub"' in body
        assert "https://github.com/a b" not in body


class TestAbsoluteFormTarget:
    """Requests whose target is an absolute URL, as sent to proxies."""

    async def test__url_host__wins_over_forwarded_header(
        self,
        aiohttp_client: Any,
        app: web.Application,
    ) -> None:
        """The host in the request URL is used instead of any header."""
        client = await aiohttp_client(app)

        response = await _send_raw(
            client,
            "http://proxy.example.net/sub?go-get=1",
            {"X-Forwarded-Host": "go.example.com"},
        )

        assert response.startswith("HTTP/1.1 200")
        assert (
            "proxy.example.net/sub git https://github.com/proxy.example.net/sub"
        ) in response
        assert "go.example.com" not in response

    async def test__url_userinfo__dropped_from_host(
        self,
        aiohttp_client: Any,
        app: web.Application,
    ) -> None:
        """User info in the request URL is not part of the import path."""
        client = await aiohttp_client(app)

        response = await _send_raw(client, "http://u@h/sub?go-get=1", {})

        assert response.startswith("HTTP/1.1 200")
        assert 'content="h/sub git https://github.com/h/sub"' in response


class TestErrors:
    """Requests whose redirect cannot be built."""

    async def test__malformed_host__returns_400(
        self,
        aiohttp_client: Any,
        app: web.Application,
    ) -> None:
        """Resolution failures are reported with the error text."""
        client = await aiohttp_client(app)
        response = await client.get(
            "/sub?go-get=1", headers={"X-Forwarded-Host": "bad%zz"}
        )

        assert response.status == 400
        body = await response.text()
        assert "invalid URL escape" in body
        assert "go-import" not in body

    async def test__render_failure__returns_500(
        self,
        aiohttp_client: Any,
        app: web.Application,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Render failures are not hidden behind a partial page."""

        def broken_render(target: object) -> str:
            raise KeyError("import_path")

        monkeypatch.setattr(vanity, "render_page", broken_render)
        client = await aiohttp_client(app)
        response = await client.get("/sub?go-get=1")

        assert response.status == 500
        assert "go-import" not in await response.text()
