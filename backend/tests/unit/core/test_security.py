"""
Unit Tests for password hashing and the JWT pair issued at login
"""
import pytest
from types import SimpleNamespace
from datetime import datetime, timedelta
from jose import jwt
from fastapi import HTTPException

from app.core.security import (
    verify_password,
    get_password_hash,
    create_access_token,
    create_refresh_token,
    build_token_claims,
    create_token_pair,
    decode_token,
)
from app.core.config import settings
from app.models.user import UserRole


def make_user(**overrides):
    values = {
        "id": "7f1c2e9a-0000-4000-8000-000000000001",
        "email": "teacher@example.com",
        "role": UserRole.STAFF,
        "school_id": "5b2d8c1e-0000-4000-8000-000000000002",
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def signed(payload, secret=None):
    return jwt.encode(payload, secret or settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


class TestPasswordHashing:

    @pytest.mark.parametrize('password', ['testpassword123', 'pässwörd-ñ-测试', 'a' * 100])
    def test_hash_verifies(self, password):
        hashed = get_password_hash(password)

        assert hashed != password
        assert verify_password(password, hashed) is True

    def test_wrong_password_rejected(self):
        assert verify_password('wrongpassword', get_password_hash('testpassword123')) is False

    def test_salted(self):
        assert get_password_hash('testpassword123') != get_password_hash('testpassword123')

    def test_only_first_72_bytes_count(self):
        hashed = get_password_hash('b' * 72)

        assert verify_password('b' * 72 + 'ignored', hashed) is True


class TestAccessToken:

    def test_explicit_lifetime(self):
        token = create_access_token({'sub': 'user123'}, expires_delta=timedelta(hours=1))

        exp = decode_token(token)['exp']
        remaining = (datetime.utcfromtimestamp(exp) - datetime.utcnow()).total_seconds()
        assert 3500 < remaining < 3700

    def test_default_lifetime_follows_settings(self):
        exp = decode_token(create_access_token({'sub': 'user123'}))['exp']
        remaining = (datetime.utcfromtimestamp(exp) - datetime.utcnow()).total_seconds()

        assert abs(remaining - settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60) < 60

    def test_refresh_outlives_access(self):
        access = decode_token(create_access_token({'sub': 'user123'}))
        refresh = decode_token(create_refresh_token({'sub': 'user123'}))

        assert access['type'] == 'access'
        assert refresh['type'] == 'refresh'
        assert refresh['exp'] > access['exp']


class TestTokenClaims:
    """Claims carried by every issued token"""

    def test_claims_include_role_and_school(self):
        user = make_user()

        claims = build_token_claims(user)

        assert claims == {
            "sub": user.id,
            "email": user.email,
            "role": "staff",
            "school_id": user.school_id,
        }

    def test_super_admin_has_no_school(self):
        claims = build_token_claims(make_user(role=UserRole.SUPER_ADMIN, school_id=None))

        assert claims["school_id"] is None
        assert claims["role"] == "super_admin"

    def test_token_pair(self):
        pair = create_token_pair(make_user())

        assert pair["token_type"] == "bearer"
        assert decode_token(pair["access_token"])["type"] == "access"
        assert decode_token(pair["refresh_token"])["type"] == "refresh"


class TestDecodeToken:

    def test_garbage(self):
        with pytest.raises(HTTPException) as exc_info:
            decode_token('invalid_token_string')

        assert exc_info.value.status_code == 401
        assert exc_info.value.headers == {'WWW-Authenticate': 'Bearer'}

    @pytest.mark.parametrize('token', [
        signed({'sub': 'user123', 'exp': datetime.utcnow() - timedelta(hours=1), 'type': 'access'}),
        signed({'sub': 'user123', 'exp': datetime.utcnow() + timedelta(hours=1)}, secret='wrong_secret_key'),
    ], ids=['expired', 'foreign_secret'])
    def test_rejected(self, token):
        with pytest.raises(HTTPException) as exc_info:
            decode_token(token)

        assert exc_info.value.status_code == 401
