import os
import sys
import unittest


ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC = os.path.join(ROOT, "src")
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from crudpage.fields import FieldStore


class TestFieldStore(unittest.TestCase):
    def test_preserves_insertion_order(self) -> None:
        store = FieldStore({"id": 1, "name": "Ada"})
        store.set("email", "ada@example.com")
        self.assertEqual(list(store), ["id", "name", "email"])
        self.assertEqual(len(store), 3)
        self.assertIn("name", store)

    def test_get_missing_returns_default(self) -> None:
        store = FieldStore()
        self.assertIsNone(store.get("name"))
        self.assertEqual(store.get("name", ""), "")

    def test_update_merges_or_clears(self) -> None:
        store = FieldStore({"id": 1, "name": "Ada"})
        store.update({"name": "Grace"})
        self.assertEqual(store.as_dict(), {"id": 1, "name": "Grace"})
        store.update({"email": "g@example.com"}, clear=True)
        self.assertEqual(store.as_dict(), {"email": "g@example.com"})

    def test_update_ignores_non_mapping(self) -> None:
        store = FieldStore({"id": 1})
        store.update(["not", "a", "mapping"])
        self.assertEqual(store.as_dict(), {"id": 1})

    def test_as_dict_is_a_copy(self) -> None:
        store = FieldStore({"tags": ["a"]})
        values = store.as_dict()
        values["tags"].append("b")
        self.assertEqual(store.get("tags"), ["a"])

    def test_sanitizer_applies_only_to_its_field(self) -> None:
        store = FieldStore()
        store.register_sanitizer("name", lambda value: value.strip())
        self.assertEqual(store.sanitize("name", "  Ada "), "Ada")
        self.assertEqual(store.sanitize("email", "  a@b "), "  a@b ")

    def test_errors_accumulate_per_field(self) -> None:
        store = FieldStore()
        self.assertFalse(store.has_errors())
        store.add_error("name", "Name is required")
        store.add_error("name", "Name is too short")
        self.assertTrue(store.has_errors())
        self.assertEqual(store.errors_for("name"), ["Name is required", "Name is too short"])
        self.assertEqual(store.errors_for("email"), [])
        store.clear_errors()
        self.assertFalse(store.has_errors())
        self.assertEqual(store.errors(), {})


if __name__ == "__main__":
    unittest.main()
