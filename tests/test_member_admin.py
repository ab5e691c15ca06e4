import os
import re
import sys
import unittest
from unittest import mock

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC = os.path.join(ROOT, "src")
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from fastapi.testclient import TestClient

SECRET = "0123456789abcdef0123456789abcdef"

os.environ["CRUD_SECRET_KEY"] = SECRET
os.environ["CRUD_DISABLE_AUTH"] = "0"

import app.main as main
from app.auth import create_session_token
from app.stores import MemoryMemberStore

_TOKEN_RE = re.compile(r'name="crud_token" value="([^"]+)"')


class TestMemberAdmin(unittest.TestCase):
    def setUp(self) -> None:
        self.store = MemoryMemberStore()
        self.store.create({"name": "Ada"})
        self.store.create({"name": "Grace"})
        self.client = TestClient(main.create_app(store=self.store, secret=SECRET, base_url=""))
        self.headers = {"Authorization": f"Bearer {create_session_token('u1', SECRET)}"}

    def _get(self, url: str, **kwargs):
        return self.client.get(url, headers=self.headers, **kwargs)

    def _post(self, url: str, data: dict, **kwargs):
        return self.client.post(url, data=data, headers=self.headers, **kwargs)

    def _token(self, html: str) -> str:
        match = _TOKEN_RE.search(html)
        self.assertIsNotNone(match, html)
        return match.group(1)

    def test_health(self) -> None:
        res = self.client.get("/health")
        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.json()["ok"])

    def test_unknown_path(self) -> None:
        self.assertEqual(self._get("/nowhere/").status_code, 404)

    def test_anonymous_denied(self) -> None:
        res = self.client.get("/member-admin/")
        self.assertEqual(res.status_code, 403)
        self.assertIn("do not have permission", res.text)

    def test_invalid_session_is_anonymous(self) -> None:
        with self.assertLogs("crudpage.auth", level="WARNING"):
            res = self.client.get("/member-admin/", headers={"Authorization": "Bearer nope"})
        self.assertEqual(res.status_code, 403)

    def test_session_cookie(self) -> None:
        self.client.cookies.set("crud-session", create_session_token("u1", SECRET))
        res = self.client.get("/member-admin")
        self.assertEqual(res.status_code, 200)

    def test_list(self) -> None:
        res = self._get("/member-admin/")
        self.assertEqual(res.status_code, 200)
        self.assertIn("Ada", res.text)
        self.assertIn("Grace", res.text)
        self.assertIn("crud-page-action-btn-create", res.text)
        self.assertIn("crud-action-edit", res.text)
        self.assertNotIn("crud-action-view", res.text)

    def test_list_view_action_uses_profile_url(self) -> None:
        with mock.patch.dict(os.environ, {"CRUD_MEMBER_PROFILE_URL": "/members/{id}/"}):
            res = self._get("/member-admin/")
        self.assertIn('href="/members/1/" class="crud-action-view"', res.text)

    def test_list_pagination(self) -> None:
        res = self._get("/member-admin/?crud_per_page=2")
        self.assertNotIn("crud-pagination", res.text)
        self.store.create({"name": "Hedy"})
        res = self._get("/member-admin/?crud_per_page=2&crud_page=2")
        self.assertIn("Hedy", res.text)
        self.assertNotIn("Ada", res.text)
        self.assertIn("crud-pagination", res.text)

    def test_create_then_flash_once(self) -> None:
        page = self._get("/member-admin/?action=create")
        self.assertIn("Add Member", page.text)
        token = self._token(page.text)

        res = self._post(
            "/member-admin/?action=create",
            {"action": "create", "field_name": "  Hedy ", "submit_action": "save", "crud_token": token},
            follow_redirects=False,
        )
        self.assertEqual(res.status_code, 303)
        self.assertEqual(res.headers["location"], "/member-admin/")
        self.assertIn("crud-message", res.headers.get("set-cookie", ""))
        self.assertEqual(self.store.count(), 3)
        self.assertEqual(self.store.get("3")["name"], "Hedy")

        listing = self._get("/member-admin/")
        self.assertIn("Item created.", listing.text)
        self.assertIn("crud-message-success", listing.text)
        again = self._get("/member-admin/")
        self.assertNotIn("Item created.", again.text)

    def test_create_requires_name(self) -> None:
        token = self._token(self._get("/member-admin/?action=create").text)
        res = self._post("/member-admin/?action=create", {"action": "create", "field_name": "   ", "crud_token": token})
        self.assertEqual(res.status_code, 200)
        self.assertIn("Name is required", res.text)
        self.assertIn("Please fix the errors below.", res.text)
        self.assertEqual(self.store.count(), 2)

    def test_edit(self) -> None:
        page = self._get("/member-admin/?action=edit&id=1")
        self.assertIn("Edit Member", page.text)
        self.assertIn('value="Ada"', page.text)
        token = self._token(page.text)

        res = self._post(
            "/member-admin/?action=edit&id=1",
            {"action": "edit", "id": "1", "field_name": "Ada Lovelace", "submit_action": "save", "crud_token": token},
        )
        self.assertEqual(res.status_code, 200)
        self.assertIn("Item updated.", res.text)
        self.assertEqual(self.store.get("1")["name"], "Ada Lovelace")

    def test_edit_with_bad_token(self) -> None:
        res = self._post(
            "/member-admin/?action=edit&id=1",
            {"action": "edit", "id": "1", "field_name": "Mallory", "crud_token": "forged"},
        )
        self.assertIn("Sorry, you do not have permission to perform the action.", res.text)
        self.assertIn("crud-message-error", res.text)
        self.assertEqual(self.store.get("1")["name"], "Ada")

    def test_edit_unknown_member(self) -> None:
        res = self._get("/member-admin/?action=edit&id=999", follow_redirects=False)
        self.assertEqual(res.status_code, 303)
        res = self._get("/member-admin/")
        self.assertIn("The requested item could not be found.", res.text)

    def test_delete(self) -> None:
        page = self._get("/member-admin/?action=delete&id=2")
        self.assertIn("Delete Member", page.text)
        self.assertIn("Are you sure you want to delete this item?", page.text)
        self.assertIn("Grace", page.text)
        token = self._token(page.text)

        res = self._post(
            "/member-admin/?action=delete&id=2",
            {"action": "delete", "id": "2", "crud_token": token},
        )
        self.assertEqual(res.status_code, 200)
        self.assertIsNotNone(self.store.get("2"))

        res = self._post(
            "/member-admin/?action=delete&id=2",
            {"action": "delete", "id": "2", "submit_action": "delete", "crud_token": token},
        )
        self.assertIn("Item deleted.", res.text)
        self.assertIsNone(self.store.get("2"))



class TestPageSizeConfig(unittest.TestCase):
    def _config(self, **env):
        values = {"CRUD_PER_PAGE": "", "CRUD_MAX_PER_PAGE": ""}
        values.update(env)
        with mock.patch.dict(os.environ, values):
            return main._page_size_config()

    def test_defaults(self) -> None:
        self.assertEqual(self._config(), (50, 500))

    def test_valid_values(self) -> None:
        self.assertEqual(self._config(CRUD_PER_PAGE="20", CRUD_MAX_PER_PAGE="100"), (20, 100))

    def test_non_positive_per_page_falls_back(self) -> None:
        for value in ("0", "-5", "1"):
            with self.assertLogs("crudpage", level="WARNING"):
                self.assertEqual(self._config(CRUD_PER_PAGE=value), (50, 500))

    def test_per_page_above_max_falls_back(self) -> None:
        with self.assertLogs("crudpage", level="WARNING"):
            self.assertEqual(self._config(CRUD_PER_PAGE="80", CRUD_MAX_PER_PAGE="30"), (30, 30))

    def test_invalid_max_falls_back(self) -> None:
        with self.assertLogs("crudpage", level="WARNING"):
            self.assertEqual(self._config(CRUD_PER_PAGE="20", CRUD_MAX_PER_PAGE="0"), (20, 500))


if __name__ == "__main__":
    unittest.main()
