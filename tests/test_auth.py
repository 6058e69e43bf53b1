import asyncio
import time

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwk, jwt

from app import auth

ISSUER = "https://clerk.hellomiami.test"


@pytest.fixture(scope="module")
def rsa_key():
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )
    public_pem = key.public_key().public_bytes(
        serialization.Encoding.PEM, serialization.PublicFormat.SubjectPublicKeyInfo
    )
    return private_pem, jwk.construct(public_pem, "RS256").to_dict()


@pytest.fixture(autouse=True)
def clerk(monkeypatch, rsa_key):
    monkeypatch.setattr(auth, "CLERK_ISSUER", ISSUER)
    monkeypatch.setattr(auth, "CLERK_JWKS_URL", f"{ISSUER}/.well-known/jwks.json")
    monkeypatch.setattr(auth, "_cached_keys", {"k1": rsa_key[1]})


def make_token(rsa_key, kid="k1", **overrides):
    now = int(time.time())
    claims = {"sub": "user_member", "iss": ISSUER, "iat": now, "nbf": now, "exp": now + 300}
    claims.update(overrides)
    return jwt.encode(claims, rsa_key[0], algorithm="RS256", headers={"kid": kid})


def verify(token):
    return asyncio.run(auth.verify_session_token(token))


def test_valid_token(rsa_key):
    assert verify(make_token(rsa_key))["sub"] == "user_member"


def test_expired_token(rsa_key):
    with pytest.raises(HTTPException) as exc:
        verify(make_token(rsa_key, exp=int(time.time()) - 60))

    assert exc.value.status_code == 401
    assert exc.value.headers == {"X-Token-Expired": "true"}


def test_wrong_issuer(rsa_key):
    with pytest.raises(HTTPException) as exc:
        verify(make_token(rsa_key, iss="https://evil.example.com"))

    assert exc.value.detail == "Token verification failed"


def test_unknown_kid_refreshes_keys_once(rsa_key, monkeypatch):
    fetches = []

    async def fake_fetch():
        fetches.append(1)
        return {"k1": rsa_key[1]}

    monkeypatch.setattr(auth, "get_clerk_signing_keys", fake_fetch)

    with pytest.raises(HTTPException) as exc:
        verify(make_token(rsa_key, kid="rotated"))

    assert exc.value.status_code == 401
    assert len(fetches) == 2


def test_not_configured(rsa_key, monkeypatch):
    monkeypatch.setattr(auth, "CLERK_ISSUER", None)

    with pytest.raises(HTTPException) as exc:
        verify(make_token(rsa_key))

    assert exc.value.status_code == 500


def test_current_profile_requires_existing_profile(rsa_key, db, member):
    credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials=make_token(rsa_key))
    assert asyncio.run(auth.get_current_profile(credentials, db)).id == member.id

    stranger = HTTPAuthorizationCredentials(scheme="Bearer", credentials=make_token(rsa_key, sub="user_nobody"))
    with pytest.raises(HTTPException) as exc:
        asyncio.run(auth.get_current_profile(stranger, db))
    assert exc.value.status_code == 404


def test_current_admin(member, admin):
    assert asyncio.run(auth.get_current_admin(admin)) is admin

    with pytest.raises(HTTPException) as exc:
        asyncio.run(auth.get_current_admin(member))
    assert exc.value.status_code == 403
