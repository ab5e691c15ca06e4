import os
import sys
import unittest


ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC = os.path.join(ROOT, "src")
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from crudpage.pagination import Pagination, parse_pagination


class TestParsePagination(unittest.TestCase):
    def test_defaults(self) -> None:
        self.assertEqual(parse_pagination({}), (1, 50))

    def test_reads_page_and_per_page(self) -> None:
        self.assertEqual(parse_pagination({"crud_page": "3", "crud_per_page": "20"}), (3, 20))

    def test_out_of_range_values_keep_defaults(self) -> None:
        self.assertEqual(parse_pagination({"crud_page": "0", "crud_per_page": "501"}), (1, 50))
        self.assertEqual(parse_pagination({"crud_page": "-2", "crud_per_page": "1"}), (1, 50))
        self.assertEqual(parse_pagination({"crud_page": "abc", "crud_per_page": ""}), (1, 50))

    def test_custom_bounds(self) -> None:
        self.assertEqual(parse_pagination({"crud_per_page": "30"}, per_page=10, max_per_page=25), (1, 10))
        self.assertEqual(parse_pagination({"crud_per_page": "25"}, per_page=10, max_per_page=25), (1, 25))


class TestPagination(unittest.TestCase):
    def test_total_pages_is_ceiling(self) -> None:
        for total, per_page, expected in [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (5, 2, 3)]:
            self.assertEqual(Pagination(1, per_page, total).total_pages, expected)

    def test_offset(self) -> None:
        self.assertEqual(Pagination(3, 20, 100).offset, 40)
        self.assertEqual(Pagination(0, 20, 100).offset, 0)

    def test_out_of_range_page_does_not_fail(self) -> None:
        pagination = Pagination(9, 2, 5)
        self.assertFalse(pagination.has_next)
        self.assertFalse(pagination.has_previous)
        self.assertTrue(pagination.links())

    def test_no_links_for_single_page(self) -> None:
        self.assertEqual(Pagination(1, 50, 10).links(), [])

    def test_links_include_prev_next_and_dots(self) -> None:
        pagination = Pagination(10, 1, 20, "/members/")
        links = pagination.links(end_size=1, mid_size=1)
        kinds = [link["kind"] for link in links]
        self.assertEqual(kinds[0], "prev")
        self.assertEqual(kinds[-1], "next")
        pages = [link["page"] for link in links if link["kind"] == "page"]
        self.assertEqual(pages, [1, 9, 10, 11, 20])
        self.assertEqual(kinds.count("dots"), 2)
        current = [link for link in links if link.get("current")]
        self.assertEqual(current[0]["page"], 10)
        self.assertEqual(links[0]["url"], "/members/?crud_page=9&crud_per_page=1")

    def test_links_for_huge_totals_cover_only_windows(self) -> None:
        pagination = Pagination(250_000_000, 2, 1_000_000_000)
        links = pagination.links()
        pages = [link["page"] for link in links if link["kind"] == "page"]
        self.assertEqual(len(links), 25)
        self.assertEqual(pages[:5], [1, 2, 3, 4, 5])
        self.assertEqual(pages[5:16], list(range(249_999_995, 250_000_006)))
        self.assertEqual(pages[-1], 500_000_000)


if __name__ == "__main__":
    unittest.main()
