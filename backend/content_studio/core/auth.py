"""Clerk session authentication.

The verified ``sub`` claim is the account id for every metered operation.
Identifiers supplied by the client (headers, body fields) are never trusted.

Verification steps, each failing with 401:
1. bearer token present
2. RS256 signature against the Clerk JWKS, with exp/nbf/iat and a non-empty sub
3. ``iss`` equals the Clerk frontend API derived from the publishable key
4. ``azp`` is one of ``clerk_allowed_origins``
5. ``aud`` intersects ``clerk_allowed_audiences`` (only when configured)
"""

import base64
import binascii
from collections import OrderedDict
from dataclasses import dataclass
from functools import lru_cache

import jwt as pyjwt
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWKClient

from content_studio.core.config import Settings, get_settings

_bearer_scheme = HTTPBearer(auto_error=False)

_REQUIRED_CLAIMS = ["sub", "exp", "nbf", "iat"]

# Accounts recently provisioned by this process (skips a DB round trip per
# request). LRU-bounded; ensure_account is idempotent for evicted ids.
_PROVISIONED_CACHE_SIZE = 10_000
_provisioned_cache: OrderedDict[str, None] = OrderedDict()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=401, detail=detail)


def _extract_frontend_api_domain(pk: str) -> str:
    """Return the Clerk frontend API host encoded in a publishable key.

    Keys look like ``pk_test_<b64>`` / ``pk_live_<b64>``; the payload is the
    host followed by ``$``.
    """
    prefix, _, rest = pk.partition("_")
    env, _, payload = rest.partition("_")
    if prefix != "pk" or env not in ("test", "live") or not payload:
        raise ValueError("Invalid Clerk publishable key format")

    padded = payload + "=" * (-len(payload) % 4)
    try:
        domain = base64.b64decode(padded).decode("utf-8").rstrip("$")
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise ValueError("Invalid Clerk publishable key: cannot decode") from exc

    if not domain:
        raise ValueError("Invalid Clerk publishable key: empty domain")
    return domain


@lru_cache
def get_jwks_client() -> PyJWKClient:
    """JWKS client for the configured Clerk instance (keys cached for 5 minutes)."""
    domain = _extract_frontend_api_domain(get_settings().clerk_publishable_key)
    return PyJWKClient(f"https://{domain}/.well-known/jwks.json", cache_keys=True, lifespan=300)


@dataclass(frozen=True)
class ClerkUser:
    """Authenticated caller: the account id plus the verified claims."""

    user_id: str
    claims: dict


def decode_clerk_jwt(token: str) -> ClerkUser:
    """Verify signature and time claims of a Clerk session token.

    Audience is not checked here; see ``_validate_audience_claim``.

    Raises:
        HTTPException: 401 on any verification failure
    """
    try:
        signing_key = get_jwks_client().get_signing_key_from_jwt(token)
        claims = pyjwt.decode(
            token,
            signing_key.key,
            algorithms=["RS256"],
            options={"verify_aud": False, "require": _REQUIRED_CLAIMS},
        )
    except pyjwt.ExpiredSignatureError:
        raise _unauthorized("Token expired")
    except pyjwt.ImmatureSignatureError:
        raise _unauthorized("Token not yet valid (immature)")
    except pyjwt.MissingRequiredClaimError as exc:
        raise _unauthorized(f"Missing required claim: {exc.claim}")
    except pyjwt.PyJWTError as exc:
        raise _unauthorized(f"Invalid token: {exc}")

    if not claims.get("sub"):
        raise _unauthorized("Token missing sub claim")
    return ClerkUser(user_id=claims["sub"], claims=claims)


def _validate_audience_claim(aud_claim: object, allowed_audiences: list[str]) -> None:
    if aud_claim is None:
        raise _unauthorized("Missing aud claim")

    if isinstance(aud_claim, str):
        audiences = {aud_claim}
    elif isinstance(aud_claim, list) and all(isinstance(v, str) for v in aud_claim):
        audiences = set(aud_claim)
    else:
        raise _unauthorized("Invalid aud claim format")

    if audiences.isdisjoint(allowed_audiences):
        raise _unauthorized("Unauthorized audience (aud mismatch)")


def _validate_session_claims(claims: dict, settings: Settings) -> None:
    """Issuer, authorized party and (optionally) audience checks."""
    try:
        issuer = f"https://{_extract_frontend_api_domain(settings.clerk_publishable_key)}"
    except ValueError as exc:
        raise HTTPException(status_code=500, detail="Authentication is misconfigured") from exc

    if claims.get("iss") != issuer:
        raise _unauthorized("Invalid issuer (iss mismatch)")

    azp = claims.get("azp")
    if not azp:
        raise _unauthorized("Missing azp claim")
    if azp not in settings.clerk_allowed_origins:
        raise _unauthorized("Unauthorized origin (azp mismatch)")

    if settings.clerk_allowed_audiences:
        _validate_audience_claim(claims.get("aud"), settings.clerk_allowed_audiences)


async def _provision_account(request: Request, user_id: str, settings: Settings) -> None:
    """Create the caller's account with signup credits on first sight (when enabled)."""
    if not settings.auto_provision_accounts:
        return
    if user_id in _provisioned_cache:
        _provisioned_cache.move_to_end(user_id)
        return

    balance_store = getattr(request.app.state, "balance_store", None)
    if balance_store is None:
        return

    await balance_store.ensure_account(user_id, settings.signup_credits)
    _provisioned_cache[user_id] = None
    if len(_provisioned_cache) > _PROVISIONED_CACHE_SIZE:
        _provisioned_cache.popitem(last=False)


async def require_auth(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> ClerkUser:
    """FastAPI dependency resolving the caller to a verified ``ClerkUser``.

    Also records ``request.state.user_id`` for the exception handlers' logs.
    """
    if credentials is None:
        raise _unauthorized("Missing authorization header")

    user = decode_clerk_jwt(credentials.credentials)
    settings = get_settings()
    _validate_session_claims(user.claims, settings)
    await _provision_account(request, user.user_id, settings)

    request.state.user_id = user.user_id
    return user
