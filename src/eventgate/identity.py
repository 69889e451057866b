"""Tenant and caller resolution from bearer credentials.

``ClaimsResolver`` trusts the token payload as-is and does not check the
signature. ``SignedClaimsResolver`` keeps the same contract but rejects
tokens whose HS256 signature does not match the configured secret.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
from dataclasses import dataclass
from typing import Any, Protocol

from eventgate.errors import AuthError


@dataclass(frozen=True, slots=True)
class Identity:
    project_id: str
    user_id: str | None = None


class IdentityResolver(Protocol):
    def resolve(self, authorization: str | None) -> Identity: ...


def _b64url_decode(segment: str) -> bytes:
    padded = segment + "=" * (-len(segment) % 4)
    return base64.b64decode(padded, altchars=b"-_", validate=True)


def _split_bearer(authorization: str | None) -> list[str]:
    if not authorization:
        raise AuthError("Missing Authorization header")
    if not authorization.startswith("Bearer "):
        raise AuthError("Invalid Authorization header format")
    token = authorization[len("Bearer ") :].strip()
    parts = token.split(".")
    if len(parts) != 3:
        raise AuthError("Invalid JWT format")
    return parts


def _decode_json_segment(segment: str, encoded: str, parsed: str) -> dict[str, Any]:
    try:
        raw = _b64url_decode(segment)
    except (binascii.Error, ValueError) as exc:
        raise AuthError(f"Failed to decode JWT {encoded}") from exc
    try:
        decoded = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise AuthError(f"Failed to parse JWT {parsed}") from exc
    if not isinstance(decoded, dict):
        raise AuthError(f"Failed to parse JWT {parsed}")
    return decoded


def _optional_claim(claims: dict[str, Any], key: str) -> str | None:
    value = claims.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise AuthError("Failed to parse JWT claims")
    return value or None


def _identity_from_claims(claims: dict[str, Any], default_project_id: str) -> Identity:
    project_id = _optional_claim(claims, "projectId") or default_project_id
    return Identity(project_id=project_id, user_id=_optional_claim(claims, "userId"))


class ClaimsResolver:
    def __init__(self, default_project_id: str = "default") -> None:
        self.default_project_id = default_project_id

    def resolve(self, authorization: str | None) -> Identity:
        _, payload, _ = _split_bearer(authorization)
        claims = _decode_json_segment(payload, "payload", "claims")
        return _identity_from_claims(claims, self.default_project_id)


class SignedClaimsResolver:
    def __init__(self, secret: str, default_project_id: str = "default") -> None:
        if not secret:
            raise ValueError("signing secret must not be empty")
        self._secret = secret.encode("utf-8")
        self.default_project_id = default_project_id

    def resolve(self, authorization: str | None) -> Identity:
        header_segment, payload, signature = _split_bearer(authorization)
        header = _decode_json_segment(header_segment, "header", "header")
        if header.get("alg") != "HS256":
            raise AuthError("Unsupported JWT algorithm")
        try:
            provided = _b64url_decode(signature)
        except (binascii.Error, ValueError) as exc:
            raise AuthError("Invalid JWT signature") from exc
        signing_input = f"{header_segment}.{payload}".encode("ascii", errors="replace")
        expected = hmac.new(self._secret, signing_input, hashlib.sha256).digest()
        if not hmac.compare_digest(expected, provided):
            raise AuthError("Invalid JWT signature")
        claims = _decode_json_segment(payload, "payload", "claims")
        return _identity_from_claims(claims, self.default_project_id)
