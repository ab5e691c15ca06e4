import os
import sys
import unittest


ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC = os.path.join(ROOT, "src")
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from app.flash_cookie import CookieFlashTransport, FlashError
from crudpage.flash import ERROR, SUCCESS, FlashMessage, MemoryFlashTransport
from crudpage.request import PageRequest

SECRET = "0123456789abcdef0123456789abcdef"


class TestFlashMessage(unittest.TestCase):
    def test_from_dict(self) -> None:
        self.assertEqual(FlashMessage.from_dict({"type": "error", "message": "x"}), FlashMessage(ERROR, "x"))
        self.assertEqual(FlashMessage.from_dict({"type": "odd", "message": "x"}).kind, SUCCESS)
        self.assertIsNone(FlashMessage.from_dict({"type": "error"}))
        self.assertIsNone(FlashMessage.from_dict("x"))


class TestMemoryFlashTransport(unittest.TestCase):
    def test_read_once(self) -> None:
        transport = MemoryFlashTransport()
        request = PageRequest(user={"id": "u1"})
        transport.write(request, FlashMessage(SUCCESS, "Item created."))
        self.assertEqual(transport.read_and_clear(request), FlashMessage(SUCCESS, "Item created."))
        self.assertIsNone(transport.read_and_clear(request))

    def test_messages_are_per_client(self) -> None:
        transport = MemoryFlashTransport()
        transport.write(PageRequest(user={"id": "u1"}), FlashMessage(SUCCESS, "mine"))
        self.assertIsNone(transport.read_and_clear(PageRequest(user={"id": "u2"})))
        self.assertEqual(list(transport.pending()), ["user:u1"])

    def test_anonymous_clients_keyed_by_client_cookie(self) -> None:
        transport = MemoryFlashTransport()
        transport.write(PageRequest(cookies={"crud-client": "A"}), FlashMessage(SUCCESS, "Item deleted."))
        self.assertIsNone(transport.read_and_clear(PageRequest(cookies={"crud-client": "B"})))
        self.assertIsNone(transport.read_and_clear(PageRequest()))
        self.assertEqual(
            transport.read_and_clear(PageRequest(cookies={"crud-client": "A"})),
            FlashMessage(SUCCESS, "Item deleted."),
        )

    def test_client_cookie_wins_over_user(self) -> None:
        transport = MemoryFlashTransport()
        transport.write(PageRequest(cookies={"crud-client": "A"}, user={"id": "u1"}), FlashMessage(SUCCESS, "mine"))
        self.assertIsNone(transport.read_and_clear(PageRequest(cookies={"crud-client": "B"}, user={"id": "u1"})))
        self.assertEqual(transport.read_and_clear(PageRequest(cookies={"crud-client": "A"})).text, "mine")

    def test_no_client_identity_drops_message(self) -> None:
        transport = MemoryFlashTransport()
        with self.assertLogs("crudpage.flash", level="INFO"):
            transport.write(PageRequest(cookies={"sid": "A"}), FlashMessage(SUCCESS, "Item deleted."))
        self.assertEqual(transport.pending(), {})
        self.assertIsNone(transport.read_and_clear(PageRequest(cookies={"sid": "B"})))


class TestCookieFlashTransport(unittest.TestCase):
    def _next_request(self, transport, previous):
        value, _ = previous.response_cookies.to_set()[transport.cookie_name]
        return PageRequest(cookies={transport.cookie_name: value})

    def test_write_sets_encrypted_cookie(self) -> None:
        transport = CookieFlashTransport(SECRET, cookie_name="crud-message")
        request = PageRequest()
        transport.write(request, FlashMessage(ERROR, "Sorry"))
        value, max_age = request.response_cookies.to_set()["crud-message"]
        self.assertNotIn("Sorry", value)
        self.assertEqual(max_age, 86400)

    def test_read_once_clears_cookie(self) -> None:
        transport = CookieFlashTransport(SECRET, cookie_name="crud-message")
        first = PageRequest()
        transport.write(first, FlashMessage(ERROR, "Sorry"))
        second = self._next_request(transport, first)
        self.assertEqual(transport.read_and_clear(second), FlashMessage(ERROR, "Sorry"))
        self.assertEqual(second.response_cookies.to_delete(), ["crud-message"])
        self.assertIsNone(transport.read_and_clear(PageRequest()))

    def test_tampered_cookie_is_ignored_and_cleared(self) -> None:
        transport = CookieFlashTransport(SECRET, cookie_name="crud-message")
        request = PageRequest(cookies={"crud-message": "garbage"})
        self.assertIsNone(transport.read_and_clear(request))
        self.assertEqual(request.response_cookies.to_delete(), ["crud-message"])

    def test_other_key_cannot_read(self) -> None:
        writer = CookieFlashTransport(SECRET, cookie_name="crud-message")
        reader = CookieFlashTransport("f" * 32, cookie_name="crud-message")
        first = PageRequest()
        writer.write(first, FlashMessage(SUCCESS, "hi"))
        self.assertIsNone(reader.read_and_clear(self._next_request(writer, first)))

    def test_invalid_key_raises(self) -> None:
        with self.assertRaises(FlashError):
            CookieFlashTransport("short")


if __name__ == "__main__":
    unittest.main()
