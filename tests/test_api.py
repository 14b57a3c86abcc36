"""End-to-end tests for the accounts HTTP API."""

from __future__ import annotations

import tempfile
import unittest
from datetime import date
from pathlib import Path

from fastapi.testclient import TestClient

from accounts.api import create_app
from accounts.database import Database
from accounts.models import User
from accounts.service import UserService
from accounts.store import InMemoryUserStore


class AccountsAPITests(unittest.TestCase):
    def setUp(self) -> None:
        self._tempdir = tempfile.TemporaryDirectory()
        db_path = Path(self._tempdir.name) / "accounts.sqlite3"
        self.database = Database(db_path)
        self.database.initialize()
        self.client = TestClient(create_app(database=self.database))

    def tearDown(self) -> None:
        self.client.close()
        self._tempdir.cleanup()

    def _register(self, username: str = "alice", name: str = "secret") -> dict:
        response = self.client.post("/users", json={"username": username, "name": name})
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()

    def test_healthcheck(self) -> None:
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok"})

    def test_create_user_returns_token_and_online_status(self) -> None:
        payload = self._register()

        self.assertEqual(payload["username"], "alice")
        self.assertEqual(payload["name"], "secret")
        self.assertEqual(payload["status"], "ONLINE")
        self.assertTrue(payload["token"])
        self.assertIsInstance(payload["id"], int)
        self.assertEqual(payload["creationDate"], date.today().isoformat())
        self.assertIsNone(payload["birthday"])

    def test_duplicate_username_conflicts(self) -> None:
        self._register()

        response = self.client.post("/users", json={"username": "alice", "name": "other"})

        self.assertEqual(response.status_code, 409, response.text)
        self.assertEqual(response.json(), {"detail": "Username already taken"})

    def test_create_user_requires_both_fields(self) -> None:
        response = self.client.post("/users", json={"username": "alice"})
        self.assertEqual(response.status_code, 422, response.text)

    def test_list_users(self) -> None:
        self.assertEqual(self.client.get("/users").json(), [])

        self._register("alice")
        self._register("bob", "hunter2")

        response = self.client.get("/users")
        self.assertEqual(response.status_code, 200)
        usernames = [item["username"] for item in response.json()]
        self.assertEqual(usernames, ["alice", "bob"])

    def test_login_flow(self) -> None:
        created = self._register()

        ok = self.client.post("/users/login", json={"username": "alice", "name": "secret"})
        self.assertEqual(ok.status_code, 200, ok.text)
        self.assertEqual(ok.json()["id"], created["id"])
        self.assertEqual(ok.json()["status"], "ONLINE")
        self.assertEqual(ok.json()["token"], created["token"])

        wrong = self.client.post("/users/login", json={"username": "alice", "name": "wrong"})
        self.assertEqual(wrong.status_code, 401)
        self.assertEqual(wrong.json()["detail"], "Incorrect password.")

        unknown = self.client.post("/users/login", json={"username": "ghost", "name": "x"})
        self.assertEqual(unknown.status_code, 401)
        self.assertEqual(unknown.json()["detail"], "User does not exist.")

    def test_get_user_by_id(self) -> None:
        created = self._register()

        found = self.client.get(f"/users/{created['id']}")
        self.assertEqual(found.status_code, 200, found.text)
        self.assertEqual(found.json()["username"], "alice")

        missing = self.client.get("/users/99")
        self.assertEqual(missing.status_code, 404)
        self.assertEqual(missing.json()["detail"], "User with ID 99 not found.")

    def test_update_user(self) -> None:
        created = self._register()

        response = self.client.put(
            f"/users/{created['id']}",
            json={"username": "updatedUsername", "birthday": "2000-01-01"},
        )
        self.assertEqual(response.status_code, 204, response.text)
        self.assertEqual(response.content, b"")

        fetched = self.client.get(f"/users/{created['id']}").json()
        self.assertEqual(fetched["username"], "updatedUsername")
        self.assertEqual(fetched["birthday"], "2000-01-01")
        self.assertEqual(fetched["creationDate"], created["creationDate"])

    def test_update_unknown_user_returns_404(self) -> None:
        response = self.client.put("/users/99", json={"username": "whatever"})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"], "User not found")

    def test_update_to_taken_username_returns_400(self) -> None:
        alice = self._register("alice")
        self._register("bob", "hunter2")

        response = self.client.put(f"/users/{alice['id']}", json={"username": "bob"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "Username already taken")

    def test_id_beyond_integer_column_range_is_not_found(self) -> None:
        self._register()
        huge_id = 2**64

        self.assertEqual(self.client.get(f"/users/{huge_id}").status_code, 404)
        self.assertEqual(self.client.put(f"/users/{huge_id}", json={"username": "x"}).status_code, 404)
        self.assertEqual(self.client.post(f"/users/{huge_id}/logout").status_code, 404)

    def test_login_with_empty_secret_is_unauthorized(self) -> None:
        self._register()

        response = self.client.post("/users/login", json={"username": "alice", "name": ""})
        self.assertEqual(response.status_code, 401, response.text)
        self.assertEqual(response.json()["detail"], "Incorrect password.")

    def test_login_with_long_unknown_username_is_unauthorized(self) -> None:
        response = self.client.post("/users/login", json={"username": "u" * 65, "name": "secret"})
        self.assertEqual(response.status_code, 401, response.text)
        self.assertEqual(response.json()["detail"], "User does not exist.")

    def test_update_rejects_malformed_birthday(self) -> None:
        created = self._register()

        response = self.client.put(f"/users/{created['id']}", json={"birthday": "not-a-date"})
        self.assertEqual(response.status_code, 422)

    def test_logout(self) -> None:
        created = self._register()

        response = self.client.post(f"/users/{created['id']}/logout")
        self.assertEqual(response.status_code, 204, response.text)
        self.assertEqual(self.client.get(f"/users/{created['id']}").json()["status"], "OFFLINE")

        missing = self.client.post("/users/99/logout")
        self.assertEqual(missing.status_code, 404)


class InjectedServiceTests(unittest.TestCase):
    def test_app_uses_injected_service(self) -> None:
        store = InMemoryUserStore()
        service = UserService(store)
        service.create_user(User(username="seeded", name="seed"))

        with TestClient(create_app(service=service)) as client:
            response = client.get("/users")

        self.assertEqual(response.status_code, 200)
        self.assertEqual([item["username"] for item in response.json()], ["seeded"])


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
