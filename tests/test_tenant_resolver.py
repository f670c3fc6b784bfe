"""
Unit tests for tenant resolution
"""

import uuid

import pytest

from salon_os.core.tenant_resolver import (
    ERROR_MISMATCHED_SALON,
    ERROR_SESSION_INVALID,
    Allow,
    Redirect,
    Reject,
    TenantResolver,
    is_valid_subdomain,
)

TENANT_ID = str(uuid.uuid4())
USER_ID = str(uuid.uuid4())

TOKENS = {
    "glamour-token": {"sub": USER_ID, "tenant_id": TENANT_ID, "subdomain": "glamour", "role": "admin"},
    "other-token": {"sub": USER_ID, "tenant_id": str(uuid.uuid4()), "subdomain": "other-salon"},
    "no-tenant-token": {"sub": USER_ID, "subdomain": "glamour"},
    "no-subdomain-token": {"sub": USER_ID, "tenant_id": TENANT_ID},
}


@pytest.fixture
def resolver():
    return TenantResolver(
        root_domain="app.example",
        page_prefixes=["/dashboard", "/crm"],
        public_paths=["/login", "/health"],
        bypass_prefixes=["/api/auth", "/static", "/_next"],
        decode_token=TOKENS.get,
    )


def test_subdomain_for_host(resolver):
    assert resolver.subdomain_for_host("glamour.app.example") == "glamour"
    assert resolver.subdomain_for_host("GLAMOUR.app.example:8000") == "glamour"
    assert resolver.subdomain_for_host("app.example") == ""
    assert resolver.subdomain_for_host("www.app.example") == ""
    assert resolver.subdomain_for_host("evil.example") is None
    assert resolver.subdomain_for_host("a.b.app.example") is None


def test_root_domain_with_port():
    resolver = TenantResolver(root_domain="localhost:3000")
    assert resolver.subdomain_for_host("glamour.localhost:3000") == "glamour"
    assert resolver.subdomain_for_host("localhost:3000") == ""


def test_is_valid_subdomain():
    assert is_valid_subdomain("other-salon")
    assert is_valid_subdomain("a1")
    assert not is_valid_subdomain("-bad")
    assert not is_valid_subdomain("Bad")
    assert not is_valid_subdomain("")
    assert not is_valid_subdomain(None)


def test_bypassed_path_allowed_without_token(resolver):
    outcome = resolver.resolve("glamour.app.example", "/api/auth/login", None)
    assert outcome == Allow(path="/api/auth/login")


def test_root_domain_passes_through_without_tenant(resolver):
    outcome = resolver.resolve("app.example", "/api/platform/tenants/", None)
    assert isinstance(outcome, Allow)
    assert outcome.tenant_id is None


def test_public_path_on_tenant_host(resolver):
    assert resolver.resolve("glamour.app.example", "/login", None) == Allow(path="/login")


def test_missing_token_redirects_to_login_on_same_host(resolver):
    outcome = resolver.resolve("glamour.app.example", "/dashboard", None)
    assert outcome == Redirect("http://glamour.app.example/login?redirect=%2Fdashboard")


def test_unreadable_token_redirects_to_login(resolver):
    outcome = resolver.resolve("glamour.app.example", "/crm", "forged")
    assert isinstance(outcome, Redirect)
    assert outcome.url.startswith("http://glamour.app.example/login")


def test_token_without_subdomain_redirects_to_login(resolver):
    outcome = resolver.resolve("glamour.app.example", "/crm", "no-subdomain-token")
    assert isinstance(outcome, Redirect)
    assert "redirect=%2Fcrm" in outcome.url


def test_matching_token_page_path_is_rewritten(resolver):
    outcome = resolver.resolve("glamour.app.example", "/dashboard", "glamour-token")
    assert outcome == Allow(
        path="/glamour/dashboard",
        tenant_id=TENANT_ID,
        user_id=USER_ID,
        claims=TOKENS["glamour-token"],
    )


def test_matching_token_api_path_is_unchanged(resolver):
    outcome = resolver.resolve("glamour.app.example", "/api/customers/", "glamour-token")
    assert isinstance(outcome, Allow)
    assert outcome.path == "/api/customers/"
    assert outcome.tenant_id == TENANT_ID


def test_matching_token_non_page_path_is_unchanged(resolver):
    outcome = resolver.resolve("glamour.app.example", "/appointments", "glamour-token")
    assert isinstance(outcome, Allow)
    assert outcome.path == "/appointments"
    assert outcome.tenant_id == TENANT_ID


def test_mismatched_token_redirects_to_token_salon(resolver):
    """A session for other-salon presented on glamour's host is sent home"""
    outcome = resolver.resolve("glamour.app.example", "/dashboard", "other-token")
    assert outcome == Redirect(f"http://other-salon.app.example/login?error={ERROR_MISMATCHED_SALON}")


def test_mismatched_token_on_api_path_is_not_forwarded(resolver):
    outcome = resolver.resolve("glamour.app.example", "/api/customers/", "other-token")
    assert isinstance(outcome, Redirect)


def test_token_without_tenant_claim_is_session_invalid(resolver):
    outcome = resolver.resolve("glamour.app.example", "/dashboard", "no-tenant-token")
    assert outcome == Redirect(f"http://glamour.app.example/login?error={ERROR_SESSION_INVALID}")


def test_missing_or_foreign_host_rejected(resolver):
    assert resolver.resolve(None, "/dashboard", "glamour-token") == Reject(400, "Host header is missing")
    outcome = resolver.resolve("glamour.evil.example", "/dashboard", "glamour-token")
    assert isinstance(outcome, Reject)
    assert outcome.status_code == 400


def test_resolution_is_deterministic(resolver):
    first = resolver.resolve("glamour.app.example", "/crm/clients", "glamour-token")
    second = resolver.resolve("glamour.app.example", "/crm/clients", "glamour-token")
    assert first == second
    assert first.path == "/glamour/crm/clients"


def test_https_scheme_in_redirects():
    resolver = TenantResolver(root_domain="app.example", scheme="https", decode_token=TOKENS.get)
    outcome = resolver.resolve("glamour.app.example", "/dashboard", "other-token")
    assert outcome.url.startswith("https://other-salon.app.example/login")
