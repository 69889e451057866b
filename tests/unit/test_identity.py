import pytest

from eventgate.errors import AuthError
from eventgate.identity import ClaimsResolver, Identity, SignedClaimsResolver


def test_resolves_project_and_user(make_token) -> None:
    token = make_token({"projectId": "proj_1", "userId": "usr_9"})
    identity = ClaimsResolver().resolve(f"Bearer {token}")
    assert identity == Identity(project_id="proj_1", user_id="usr_9")


def test_missing_project_uses_default_tenant(make_token) -> None:
    token = make_token({"sub": "someone"})
    identity = ClaimsResolver(default_project_id="default").resolve(f"Bearer {token}")
    assert identity.project_id == "default"
    assert identity.user_id is None


@pytest.mark.parametrize(
    ("header", "message"),
    [
        (None, "Missing Authorization header"),
        ("", "Missing Authorization header"),
        ("Token abc.def.ghi", "Invalid Authorization header format"),
        ("Bearer malformed", "Invalid JWT format"),
        ("Bearer a.b.c.d", "Invalid JWT format"),
        ("Bearer aaa.@@@.ccc", "Failed to decode JWT payload"),
        ("Bearer aaa.bm90IGpzb24.ccc", "Failed to parse JWT claims"),
        ("Bearer aaa.WzEsMl0.ccc", "Failed to parse JWT claims"),
    ],
)
def test_rejects_malformed_credentials(header: str | None, message: str) -> None:
    with pytest.raises(AuthError) as excinfo:
        ClaimsResolver().resolve(header)
    assert excinfo.value.message == message
    assert str(excinfo.value).startswith("Unauthorized: ")


def test_non_string_claim_is_rejected(make_token) -> None:
    token = make_token({"projectId": 42})
    with pytest.raises(AuthError, match="Failed to parse JWT claims"):
        ClaimsResolver().resolve(f"Bearer {token}")


def test_unverified_resolver_ignores_signature(make_token) -> None:
    token = make_token({"projectId": "proj_1"}, secret="anything")
    header, payload, _ = token.split(".")
    identity = ClaimsResolver().resolve(f"Bearer {header}.{payload}.forged")
    assert identity.project_id == "proj_1"


def test_signed_resolver_accepts_valid_signature(make_token) -> None:
    token = make_token({"projectId": "proj_1", "userId": "usr_1"}, secret="s3cret")
    identity = SignedClaimsResolver("s3cret").resolve(f"Bearer {token}")
    assert identity == Identity(project_id="proj_1", user_id="usr_1")


def test_signed_resolver_rejects_wrong_secret(make_token) -> None:
    token = make_token({"projectId": "proj_1"}, secret="other")
    with pytest.raises(AuthError, match="Invalid JWT signature"):
        SignedClaimsResolver("s3cret").resolve(f"Bearer {token}")


def test_signed_resolver_rejects_other_algorithms(make_token) -> None:
    token = make_token({"projectId": "proj_1"}, secret="s3cret", alg="none")
    with pytest.raises(AuthError, match="Unsupported JWT algorithm"):
        SignedClaimsResolver("s3cret").resolve(f"Bearer {token}")
