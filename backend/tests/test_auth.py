"""
Authentication tests.

Verifies:
- Sign-in returns a token carrying the employee's identity
- Unknown e-mail and wrong password return the identical 401
- Inactive employees cannot sign in
- Logout revokes the presented token
- Missing, malformed, tampered and expired tokens are rejected
"""

import time

import jwt
import pytest

from smart_enterprise.errors import UnauthorizedError
from smart_enterprise.roles import INACTIVE_STATUS, Role
from smart_enterprise.services import auth_service, token_service

from conftest import PASSWORD, auth_headers, token_for


class TestAuthenticateService:

    def test_success(self, admin):
        result = auth_service.authenticate(admin.employee_email, PASSWORD)
        assert result.employee_id == admin.employee_id
        assert result.role == Role.ADMIN.value
        assert result.expires_in == 3600

        claims = token_service.verify(result.token)
        assert claims.employee_id == admin.employee_id
        assert claims.role == admin.role
        assert claims.status == "active"

    def test_email_is_case_insensitive(self, admin):
        result = auth_service.authenticate(admin.employee_email.upper(), PASSWORD)
        assert result.employee_id == admin.employee_id

    def test_wrong_password_and_unknown_email_match(self, admin):
        with pytest.raises(UnauthorizedError) as wrong_password:
            auth_service.authenticate(admin.employee_email, "Wr0ng@Password")
        with pytest.raises(UnauthorizedError) as unknown_email:
            auth_service.authenticate("nobody@example.com", PASSWORD)

        assert wrong_password.value.message == unknown_email.value.message == "Invalid credentials"

    def test_inactive_employee_rejected(self, make_employee):
        employee = make_employee(Role.MANAGER, status=INACTIVE_STATUS)
        with pytest.raises(UnauthorizedError):
            auth_service.authenticate(employee.employee_email, PASSWORD)

    def test_password_hash_roundtrip(self):
        hashed = auth_service.hash_password(PASSWORD)
        assert hashed != PASSWORD
        assert auth_service.verify_password(PASSWORD, hashed)
        assert not auth_service.verify_password("other", hashed)

    def test_verify_password_rejects_malformed_hash(self):
        assert auth_service.verify_password(PASSWORD, "not-a-bcrypt-hash") is False


class TestSigninRoute:

    def test_signin_returns_token(self, client, admin):
        resp = client.post("/api/v1/auth/signin", json={"employee_email": admin.employee_email, "password": PASSWORD})
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["success"] is True
        assert body["data"]["employee_id"] == admin.employee_id
        assert body["data"]["token"]
        assert "password_hash" not in body["data"]["employee"]

    def test_signin_failures_identical(self, client, admin):
        wrong = client.post("/api/v1/auth/signin", json={"employee_email": admin.employee_email, "password": "Nope@12345"})
        unknown = client.post("/api/v1/auth/signin", json={"employee_email": "ghost@example.com", "password": "Nope@12345"})

        assert wrong.status_code == unknown.status_code == 401
        assert wrong.get_json()["message"] == unknown.get_json()["message"]

    def test_signin_requires_fields(self, client):
        resp = client.post("/api/v1/auth/signin", json={})
        assert resp.status_code == 400
        assert resp.get_json()["success"] is False


class TestBearerTokens:

    def test_missing_header(self, client):
        resp = client.get("/api/v1/products")
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Authentication required"

    def test_non_bearer_scheme(self, client, admin):
        resp = client.get("/api/v1/products", headers={"Authorization": f"Basic {token_for(admin)}"})
        assert resp.status_code == 401

    def test_foreign_signature(self, client, admin):
        forged = jwt.encode(
            {"employee_id": admin.employee_id, "role": "ROLE_SUPER_ADMIN", "status": "active",
             "iat": int(time.time()), "exp": int(time.time()) + 600},
            "some-other-secret-that-is-long-enough-000",
            algorithm="HS256",
        )
        resp = client.get("/api/v1/products", headers=auth_headers(forged))
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Invalid or expired token"

    def test_expired_token(self, client, admin):
        resp = client.get("/api/v1/products", headers=auth_headers(token_for(admin, expires_in=-5)))
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Invalid or expired token"

    def test_valid_token(self, client, admin):
        resp = client.get("/api/v1/products", headers=auth_headers(admin))
        assert resp.status_code == 200


class TestLogout:

    def test_logout_revokes_token(self, client, admin):
        headers = auth_headers(admin)
        assert client.get("/api/v1/products", headers=headers).status_code == 200

        resp = client.post("/api/v1/auth/logout", headers=headers)
        assert resp.status_code == 200

        after = client.get("/api/v1/products", headers=headers)
        assert after.status_code == 401
        assert after.get_json()["message"] == "Invalid or expired token"

    def test_logout_requires_token(self, client):
        assert client.post("/api/v1/auth/logout").status_code == 401

    def test_other_tokens_unaffected(self, client, admin):
        first = token_for(admin)
        second = token_for(admin, expires_in=7200)
        client.post("/api/v1/auth/logout", headers=auth_headers(first))
        assert client.get("/api/v1/products", headers=auth_headers(second)).status_code == 200
