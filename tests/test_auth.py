import datetime
import unittest

import jwt

from fittrack.models import db, User
from tests.base import ApiTestCase


class SignupTestCase(ApiTestCase):
    def test_signup_returns_token_and_public_user(self) -> None:
        response = self.signup("lifter", "secret123")
        self.assertEqual(response.status_code, 201)
        body = response.get_json()
        self.assertEqual(body["user"]["username"], "lifter")
        self.assertEqual(set(body["user"]), {"id", "username"})
        self.assertTrue(body["token"])

        with self.app.app_context():
            user = User.query.filter_by(username="lifter").one()
            self.assertNotEqual(user.password_hash, "secret123")
            self.assertIsNotNone(user.created_at)

    def test_short_password_is_rejected_and_not_persisted(self) -> None:
        response = self.signup("lifter", "12345")
        self.assertEqual(response.status_code, 400)
        self.assertIn("password", response.get_json()["errors"])

        with self.app.app_context():
            self.assertEqual(User.query.count(), 0)

    def test_short_username_is_rejected(self) -> None:
        response = self.signup("ab", "secret123")
        self.assertEqual(response.status_code, 400)
        self.assertIn("username", response.get_json()["errors"])

    def test_missing_fields_report_every_field(self) -> None:
        response = self.client.post("/api/auth/signup", json={})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(set(response.get_json()["errors"]), {"username", "password"})

    def test_non_json_body_is_rejected(self) -> None:
        response = self.client.post("/api/auth/signup", data="username=x", content_type="text/plain")
        self.assertEqual(response.status_code, 400)

    def test_duplicate_username_conflicts_and_keeps_original(self) -> None:
        first = self.signup("lifter", "secret123").get_json()
        with self.app.app_context():
            original_hash = User.query.filter_by(username="lifter").one().password_hash

        response = self.signup("lifter", "another-password")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()["errors"], {"username": "User already exists"})

        with self.app.app_context():
            users = User.query.all()
            self.assertEqual(len(users), 1)
            self.assertEqual(users[0].id, first["user"]["id"])
            self.assertEqual(users[0].password_hash, original_hash)

    def test_username_match_is_case_sensitive(self) -> None:
        self.assertEqual(self.signup("Lifter").status_code, 201)
        self.assertEqual(self.signup("lifter").status_code, 201)


class LoginTestCase(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user = self.signup("lifter", "secret123").get_json()["user"]

    def test_login_token_carries_stored_user_id(self) -> None:
        response = self.client.post("/api/auth/login", json={"username": "lifter", "password": "secret123"})
        self.assertEqual(response.status_code, 200)
        body = response.get_json()
        self.assertEqual(body["user"], self.user)

        payload = jwt.decode(body["token"], self.app.config["SECRET_KEY"], algorithms=["HS256"])
        self.assertEqual(payload["user"]["id"], self.user["id"])
        self.assertEqual(payload["user"]["username"], "lifter")
        lifetime = payload["exp"] - payload["iat"]
        self.assertEqual(lifetime, 5 * 3600)

    def test_wrong_password_and_unknown_user_look_the_same(self) -> None:
        wrong_password = self.client.post("/api/auth/login", json={"username": "lifter", "password": "nope-nope"})
        unknown_user = self.client.post("/api/auth/login", json={"username": "ghost", "password": "secret123"})

        self.assertEqual(wrong_password.status_code, 401)
        self.assertEqual(unknown_user.status_code, 401)
        self.assertEqual(wrong_password.get_json(), unknown_user.get_json())
        self.assertEqual(wrong_password.get_json(), {"error": "Invalid credentials"})

    def test_missing_password_is_a_validation_error(self) -> None:
        response = self.client.post("/api/auth/login", json={"username": "lifter"})
        self.assertEqual(response.status_code, 400)
        self.assertIn("password", response.get_json()["errors"])


class VerifyTokenTestCase(ApiTestCase):
    def _token(self, **overrides) -> str:
        now = datetime.datetime.utcnow()
        payload = {"user": {"id": 1, "username": "lifter"}, "iat": now, "exp": now + datetime.timedelta(hours=1)}
        payload.update(overrides)
        return jwt.encode(payload, self.app.config["SECRET_KEY"], algorithm="HS256")

    def test_valid_token_returns_user(self) -> None:
        headers = self.auth_headers("lifter")
        response = self.client.get("/api/auth/verify-token", headers=headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()["username"], "lifter")

    def test_missing_token_is_unauthorized(self) -> None:
        self.assertEqual(self.client.get("/api/auth/verify-token").status_code, 401)
        response = self.client.get("/api/auth/verify-token", headers={"Authorization": "Basic abc"})
        self.assertEqual(response.status_code, 401)
        response = self.client.get("/api/auth/verify-token", headers={"Authorization": "Token abc"})
        self.assertEqual(response.status_code, 401)

    def test_tampered_token_is_forbidden(self) -> None:
        headers = self.auth_headers("lifter")
        headers["Authorization"] += "x"
        self.assertEqual(self.client.get("/api/auth/verify-token", headers=headers).status_code, 403)

    def test_token_signed_with_other_secret_is_forbidden(self) -> None:
        token = jwt.encode({"user": {"id": 1, "username": "lifter"}}, "other-secret", algorithm="HS256")
        response = self.client.get("/api/auth/verify-token", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(response.status_code, 403)

    def test_expired_token_is_forbidden(self) -> None:
        self.signup("lifter")
        past = datetime.datetime.utcnow() - datetime.timedelta(hours=6)
        token = self._token(iat=past, exp=past + datetime.timedelta(hours=5))
        response = self.client.get("/api/auth/verify-token", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(response.status_code, 403)

    def test_token_without_user_claim_is_forbidden(self) -> None:
        token = jwt.encode({"sub": "1"}, self.app.config["SECRET_KEY"], algorithm="HS256")
        response = self.client.get("/api/auth/verify-token", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(response.status_code, 403)

    def test_token_of_deleted_user_is_not_found(self) -> None:
        headers = self.auth_headers("lifter")
        with self.app.app_context():
            db.session.delete(User.query.filter_by(username="lifter").one())
            db.session.commit()
        response = self.client.get("/api/auth/verify-token", headers=headers)
        self.assertEqual(response.status_code, 404)


class HealthTestCase(ApiTestCase):
    def test_health_check(self) -> None:
        response = self.client.get("/api/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()["status"], "ok")


if __name__ == "__main__":
    unittest.main()
