"""
Tenant resolution for inbound requests

Every request is bound to at most one tenant before any handler runs. The
resolver is a pure function of (host, path, session token): it reaches one of
three terminal outcomes and never touches the database, so the same triple
always resolves the same way.

    Allow(tenant_id, user_id, path)  forward, with the trusted tenant header
    Redirect(url)                    send the browser to a login page
    Reject(status_code, reason)      refuse outright
"""

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional, Union
from urllib.parse import urlencode
import re

import structlog

from salon_os.core.auth import decode_access_token
from salon_os.core.config import Settings

logger = structlog.get_logger(__name__)

_LABEL = re.compile(r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$")

# Query-string error codes shown on the login page
ERROR_MISMATCHED_SALON = "MismatchedSalon"
ERROR_SESSION_INVALID = "SessionInvalid"


@dataclass(frozen=True)
class Allow:
    """Forward the request.

    ``tenant_id`` is None for bypassed, public and platform (bare root
    domain) requests; ``path`` is the path to forward to.
    """
    path: str
    tenant_id: Optional[str] = None
    user_id: Optional[str] = None
    claims: Optional[Dict] = None


@dataclass(frozen=True)
class Redirect:
    url: str


@dataclass(frozen=True)
class Reject:
    status_code: int
    reason: str


Resolution = Union[Allow, Redirect, Reject]


def is_valid_subdomain(label: Optional[str]) -> bool:
    return bool(label) and _LABEL.match(label) is not None


class TenantResolver:
    """Derives the tenant for a request from its host and session token"""

    def __init__(
        self,
        root_domain: str,
        scheme: str = "http",
        login_path: str = "/login",
        api_prefix: str = "/api",
        page_prefixes: Iterable[str] = (),
        public_paths: Iterable[str] = (),
        bypass_prefixes: Iterable[str] = (),
        decode_token: Callable[[str], Optional[Dict]] = decode_access_token,
    ):
        self.root_domain = root_domain.lower().strip(".")
        self.scheme = scheme
        self.login_path = login_path
        self.api_prefix = api_prefix.rstrip("/")
        self.page_prefixes = tuple(p.rstrip("/") for p in page_prefixes)
        self.public_paths = frozenset(public_paths)
        self.bypass_prefixes = tuple(bypass_prefixes)
        self.decode_token = decode_token

    @classmethod
    def from_settings(cls, settings: Settings) -> "TenantResolver":
        return cls(
            root_domain=settings.ROOT_DOMAIN,
            scheme=settings.URL_SCHEME,
            login_path=settings.LOGIN_PATH,
            api_prefix=settings.API_PREFIX,
            page_prefixes=settings.PAGE_PREFIXES,
            public_paths=settings.PUBLIC_PATHS,
            bypass_prefixes=settings.BYPASS_PREFIXES,
        )

    # Host handling

    def subdomain_for_host(self, host: str) -> Optional[str]:
        """Subdomain label for ``host``.

        Returns "" for the bare root domain (and its www alias) and None for a
        host that does not belong to the root domain.
        """
        host = host.lower().strip()
        if ":" in host and ":" not in self.root_domain:
            host = host.rsplit(":", 1)[0]
        if host in (self.root_domain, f"www.{self.root_domain}"):
            return ""
        suffix = f".{self.root_domain}"
        if not host.endswith(suffix):
            return None
        label = host[: -len(suffix)]
        return label if is_valid_subdomain(label) else None

    def tenant_host(self, subdomain: str) -> str:
        return f"{subdomain}.{self.root_domain}"

    def login_url(self, host: str, **params: str) -> str:
        url = f"{self.scheme}://{host}{self.login_path}"
        return f"{url}?{urlencode(params)}" if params else url

    # Path handling

    def _is_bypassed(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self.bypass_prefixes)

    def _is_public(self, path: str) -> bool:
        return path in self.public_paths or path.rstrip("/") in self.public_paths

    def _is_page(self, path: str) -> bool:
        return any(path == p or path.startswith(p + "/") for p in self.page_prefixes)

    def forward_path(self, subdomain: str, path: str) -> str:
        """API and other non-page paths are forwarded as-is; pages are prefixed with the subdomain"""
        if path == self.api_prefix or path.startswith(self.api_prefix + "/"):
            return path
        if self._is_page(path):
            return f"/{subdomain}{path}"
        return path

    # Resolution

    def resolve(self, host: Optional[str], path: str, token: Optional[str]) -> Resolution:
        # 1. static assets and auth callbacks carry no tenant logic
        if self._is_bypassed(path):
            return Allow(path=path)

        # 2. subdomain from host
        if not host:
            return Reject(400, "Host header is missing")
        subdomain = self.subdomain_for_host(host)
        if subdomain is None:
            logger.warning("unknown_host", host=host)
            return Reject(400, "Unknown host")
        if subdomain == "":
            return Allow(path=path)

        # 3. public pages on a tenant host
        if self._is_public(path):
            return Allow(path=path)

        # 4. authentication
        claims = self.decode_token(token) if token else None
        token_subdomain = (claims or {}).get("subdomain")
        if claims is None or not isinstance(token_subdomain, str) \
                or not is_valid_subdomain(token_subdomain.lower()):
            return Redirect(self.login_url(host, redirect=path))
        token_subdomain = token_subdomain.lower()

        # 5. the token must belong to the tenant whose host it arrived on
        if token_subdomain != subdomain:
            logger.warning(
                "tenant_mismatch",
                requested_subdomain=subdomain,
                token_subdomain=token_subdomain,
                user_id=claims.get("sub"),
                path=path,
            )
            return Redirect(
                self.login_url(self.tenant_host(token_subdomain), error=ERROR_MISMATCHED_SALON)
            )

        # 6. tenant id claim
        tenant_id = claims.get("tenant_id")
        if not tenant_id:
            logger.error(
                "token_missing_tenant_claim",
                subdomain=subdomain,
                user_id=claims.get("sub"),
            )
            return Redirect(self.login_url(host, error=ERROR_SESSION_INVALID))

        # 7. forward with the verified tenant
        return Allow(
            path=self.forward_path(subdomain, path),
            tenant_id=str(tenant_id),
            user_id=claims.get("sub"),
            claims=claims,
        )
