"""
Tenant routing middleware for multi-tenant isolation
"""

from typing import Optional
import structlog
from starlette.requests import Request
from starlette.responses import JSONResponse, RedirectResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from salon_os.core.auth import extract_token
from salon_os.core.config import get_settings
from salon_os.core.tenant_resolver import Allow, Redirect, Reject, TenantResolver

logger = structlog.get_logger(__name__)


class TenantContextMiddleware:
    """Binds every HTTP request to a verified tenant before it reaches a handler.

    Client-supplied copies of the trusted headers are always dropped; only the
    resolver's verdict is forwarded.
    """

    def __init__(self, app: ASGIApp, resolver: Optional[TenantResolver] = None):
        self.app = app
        settings = get_settings()
        self.resolver = resolver or TenantResolver.from_settings(settings)
        self.tenant_header = settings.TENANT_HEADER.lower().encode("latin-1")
        self.user_header = settings.USER_HEADER.lower().encode("latin-1")

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        outcome = self.resolver.resolve(
            request.headers.get("host"),
            scope["path"],
            extract_token(request),
        )

        if isinstance(outcome, Redirect):
            response = RedirectResponse(outcome.url)
            await response(scope, receive, send)
            return

        if isinstance(outcome, Reject):
            response = JSONResponse(
                status_code=outcome.status_code,
                content={"error": {"code": "BAD_REQUEST", "message": outcome.reason}},
            )
            await response(scope, receive, send)
            return

        await self.app(self._forwarded_scope(scope, outcome), receive, send)

    def _forwarded_scope(self, scope: Scope, outcome: Allow) -> Scope:
        headers = [
            (name, value) for name, value in scope["headers"]
            if name.lower() not in (self.tenant_header, self.user_header)
        ]
        if outcome.tenant_id:
            headers.append((self.tenant_header, outcome.tenant_id.encode("latin-1")))
            if outcome.user_id:
                headers.append((self.user_header, str(outcome.user_id).encode("latin-1")))

        forwarded = dict(scope)
        forwarded["headers"] = headers
        forwarded["state"] = dict(scope.get("state") or {})
        forwarded["state"]["session_claims"] = outcome.claims

        if outcome.path != scope["path"]:
            logger.debug("tenant_path_rewrite", original=scope["path"], forwarded=outcome.path)
            forwarded["path"] = outcome.path
            forwarded["raw_path"] = outcome.path.encode("utf-8")
        return forwarded
