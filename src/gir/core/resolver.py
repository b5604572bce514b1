"""Vanity import path resolution.

Turns a request path such as ``/pkg/sub`` on host ``example.org`` into the
import path ``example.org/pkg/sub`` and the source and documentation URLs the
``go-import`` and ``go-source`` meta tags point at.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Self

from yarl import URL

from gir.core.errors import ConfigurationError
from gir.core.headers import canonical_header_key
from gir.core.urls import join_path, parse_url, resolve_reference, strip_port

logger = logging.getLogger(__name__)

GO_GET_PARAM = "go-get"


@dataclass(frozen=True)
class RedirectSettings:
    """Parsed redirect configuration, shared read-only by all requests."""

    source_prefix: URL
    vcs: str
    docs_prefix: URL
    dir_suffix: str = ""
    file_suffix: str = ""
    forwarded_header: str = ""

    @classmethod
    def create(
        cls,
        source_prefix: str,
        vcs: str,
        docs_prefix: str,
        dir_suffix: str = "",
        file_suffix: str = "",
        forwarded_header: str = "",
    ) -> Self:
        """Validate raw configuration values and build settings.

        Deep-link suffix templates are kept only when the documentation
        prefix has an HTTP scheme. The forwarded-host header name is stored
        in canonical form; an empty name disables forwarded-host handling.

        Args:
            source_prefix: Base URL for source-control locations
            vcs: Version control system name, passed through verbatim
            docs_prefix: Base URL for documentation pages
            dir_suffix: Directory deep-link template, e.g. ``/tree/master{/dir}``
            file_suffix: File deep-link template
            forwarded_header: Header trusted to carry the external host

        Returns:
            RedirectSettings instance

        Raises:
            ConfigurationError: If either prefix is not a valid URL
        """
        source_url = _parse_prefix(source_prefix)
        docs_url = _parse_prefix(docs_prefix)

        if not docs_url.scheme.startswith("http"):
            if dir_suffix or file_suffix:
                logger.debug(
                    f"Ignoring deep-link suffixes for non-HTTP docs prefix {docs_prefix}"
                )
            dir_suffix = ""
            file_suffix = ""

        return cls(
            source_prefix=source_url,
            vcs=vcs,
            docs_prefix=docs_url,
            dir_suffix=dir_suffix,
            file_suffix=file_suffix,
            forwarded_header=canonical_header_key(forwarded_header),
        )


@dataclass(frozen=True)
class RedirectTarget:
    """Values rendered into the redirect page for one request."""

    import_path: str
    vcs: str
    source_url: str
    docs_url: str
    dir_suffix: str = ""
    file_suffix: str = ""

    @property
    def go_import(self) -> str:
        return f"{self.import_path} {self.vcs} {self.source_url}"

    @property
    def go_source(self) -> str:
        return f"{self.import_path} {self.source_url}{self.dir_suffix}{self.file_suffix}"


def is_vanity_request(go_get: Sequence[str], path: str) -> bool:
    """Check whether a request asks for vanity import metadata.

    Args:
        go_get: All values of the ``go-get`` query parameter
        path: Escaped request path

    Returns:
        True for exactly one ``go-get=1`` and a non-empty path
    """
    return len(go_get) == 1 and go_get[0] == "1" and bool(path.removesuffix("/"))


class RedirectResolver:
    """Resolves request paths to redirect targets.

    Holds no per-request state, so one instance serves concurrent requests.
    """

    def __init__(self, settings: RedirectSettings) -> None:
        self._settings = settings

    @property
    def settings(self) -> RedirectSettings:
        return self._settings

    def resolve(
        self,
        path: str,
        *,
        request_host: str,
        url_host: str | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> RedirectTarget:
        """Resolve a request path to its redirect target.

        A single-segment path such as ``/sub`` carries no host of its own, so
        the host is taken from the request: the explicit host of an
        absolute-form request URL if there is one, otherwise the trusted
        forwarded-host header or the ``Host`` header with its port removed.

        Args:
            path: Escaped request path
            request_host: Value of the request's ``Host`` header
            url_host: Host from an absolute-form request URL, if any
            headers: Request headers, looked up case-insensitively

        Returns:
            RedirectTarget for the request

        Raises:
            RequestResolutionError: If a redirect URL cannot be built
        """
        settings = self._settings
        trimmed = path.removesuffix("/")
        sep = trimmed.rfind("/")
        base, project = trimmed[: sep + 1], trimmed[sep + 1 :]

        if base in ("", "/"):
            if url_host:
                base = url_host
            else:
                host = request_host
                if settings.forwarded_header and headers is not None:
                    forwarded = headers.get(settings.forwarded_header, "")
                    if forwarded:
                        host = forwarded
                base = strip_port(host)

        project_path = join_path(base, project)

        source_url = resolve_reference(
            settings.source_prefix,
            join_path(settings.source_prefix.raw_path, project_path),
        )
        docs_url = resolve_reference(
            settings.docs_prefix,
            join_path(settings.docs_prefix.raw_path, project_path),
        )

        dir_suffix = ""
        if settings.dir_suffix:
            dir_suffix = " " + _deep_link(docs_url, settings.dir_suffix)
        file_suffix = ""
        if settings.file_suffix:
            file_suffix = " " + _deep_link(docs_url, settings.file_suffix)

        target = RedirectTarget(
            import_path=project_path.removeprefix("/"),
            vcs=settings.vcs,
            source_url=str(source_url),
            docs_url=str(docs_url),
            dir_suffix=dir_suffix,
            file_suffix=file_suffix,
        )
        logger.debug(f"Resolved {path} to {target.import_path} -> {target.source_url}")
        return target


def _parse_prefix(raw: str) -> URL:
    try:
        return parse_url(raw)
    except ValueError as e:
        raise ConfigurationError(raw, str(e)) from e


def _deep_link(url: URL, template: str) -> str:
    # Join onto the path only, so the "//" after the scheme survives.
    text = str(url)
    origin = text[: len(text) - len(url.raw_path)]
    return origin + join_path(url.raw_path, template)
