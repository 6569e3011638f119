import tempfile
import unittest

from prepme.app.capture import (
    PageDetails,
    capture_from,
    capture_page,
    create_problem,
    review_problem,
    save_problem_fields,
    slug_from_url,
    unique_id,
)
from prepme.storage import ProblemStore
from prepme.util.timeutil import DAY_MS

from .helpers import MemoryStore, problem

T0 = 1_700_000_000_000
URL = "https://leetcode.com/problems/two-sum/"


class StaticPage:
    def __init__(self, details):
        self.details = details

    def get_page_details(self):
        return self.details


class SlugTests(unittest.TestCase):
    def test_slug_from_url(self) -> None:
        self.assertEqual(slug_from_url(URL), "two-sum")
        self.assertEqual(slug_from_url("https://leetcode.com/problems/two-sum?tab=desc"), "two-sum")
        self.assertEqual(slug_from_url("https://x.org/?q=1", T0), f"page-{T0}")

    def test_unique_id(self) -> None:
        self.assertEqual(unique_id("a", []), "a")
        self.assertEqual(unique_id("a", ["a"]), "a-1")
        self.assertEqual(unique_id("a", ["a", "a-1"]), "a-2")

    def test_unique_id_compares_storage_keys(self) -> None:
        self.assertEqual(unique_id("two_sum", ["two-sum"]), "two_sum-1")
        self.assertEqual(unique_id("two_sum", ["two-sum", "two-sum-1"]), "two_sum-2")


class CaptureTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = MemoryStore()

    def test_create_problem_defaults(self) -> None:
        rec = create_problem(self.store, "lru-cache", now=T0, title="LRU Cache")
        self.assertEqual(rec.box, 1)
        self.assertEqual(rec.timestamp, T0)
        self.assertEqual(rec.last_updated, T0)
        self.assertEqual(rec.platform_id, "manual")
        self.assertEqual((rec.notes, rec.solution), ("", ""))
        self.assertEqual(self.store.load_problem("lru-cache"), rec)

    def test_create_existing_returns_it(self) -> None:
        first = create_problem(self.store, "a", now=T0)
        self.assertEqual(create_problem(self.store, "a", now=T0 + 5), first)

    def test_save_fields_keeps_rest(self) -> None:
        rec = create_problem(self.store, "a", now=T0, title="A")
        out = save_problem_fields(self.store, rec, {"notes": "two pointers"}, now=T0 + 10)
        self.assertEqual(out.notes, "two pointers")
        self.assertEqual(out.title, "A")
        self.assertEqual(out.timestamp, T0)
        self.assertEqual(out.last_updated, T0 + 10)
        self.assertEqual(self.store.load_problem("a").notes, "two pointers")

    def test_save_fields_without_id(self) -> None:
        self.assertIsNone(save_problem_fields(self.store, None, {"notes": "x"}))

    def test_failed_write_returns_merged_record(self) -> None:
        store = MemoryStore([problem("a")], fail_writes=True)
        with self.assertLogs("prepme.app.capture", level="WARNING"):
            out = save_problem_fields(store, store.load_problem("a"), {"notes": "kept"}, now=T0)
        self.assertEqual(out.notes, "kept")
        self.assertEqual(store.load_problem("a").notes, "")

    def test_capture_new_page(self) -> None:
        rec = capture_page(self.store, PageDetails("Two Sum", URL, "Given an array..."), platform_id="leetcode", now=T0)
        self.assertEqual(rec.id, "two-sum")
        self.assertEqual(rec.box, 1)
        self.assertEqual(rec.timestamp, T0)
        self.assertEqual(rec.platform_id, "leetcode")
        self.assertEqual(rec.description, "Given an array...")

    def test_recapture_updates_existing(self) -> None:
        first = capture_page(self.store, PageDetails("Two Sum", URL), now=T0)
        save_problem_fields(self.store, first, {"notes": "hashmap"}, now=T0)
        again = capture_page(self.store, PageDetails("1. Two Sum", URL), now=T0 + DAY_MS)
        self.assertEqual(again.id, "two-sum")
        self.assertEqual(again.title, "1. Two Sum")
        self.assertEqual(again.notes, "hashmap")
        self.assertEqual(again.timestamp, T0)
        self.assertEqual(len(self.store.list_problems()), 1)

    def test_slug_collision_gets_suffix(self) -> None:
        capture_page(self.store, PageDetails("Two Sum", URL), now=T0)
        other = capture_page(self.store, PageDetails("Two Sum II", "https://other.site/two-sum"), now=T0)
        self.assertEqual(other.id, "two-sum-1")

    def test_capture_into_active_problem_without_url(self) -> None:
        active = create_problem(self.store, "my-notes", now=T0)
        rec = capture_page(self.store, PageDetails("Two Sum", URL), active=active, now=T0 + 1)
        self.assertEqual(rec.id, "my-notes")
        self.assertEqual(rec.url, URL)

    def test_capture_never_overwrites_id_with_same_storage_key(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            store = ProblemStore(d)
            mine = create_problem(store, "two-sum", now=T0)
            save_problem_fields(store, mine, {"notes": "my notes"}, now=T0)
            rec = capture_page(store, PageDetails("Two Sum", "https://example.com/problems/two_sum"), now=T0 + 1)
            self.assertEqual(rec.id, "two_sum-1")
            self.assertEqual(store.load_problem("two-sum").notes, "my notes")
            self.assertEqual(sorted(p.id for p in store.list_problems()), ["two-sum", "two_sum-1"])

    def test_capture_needs_url(self) -> None:
        self.assertIsNone(capture_page(self.store, PageDetails("t", "")))

    def test_capture_from_source(self) -> None:
        rec = capture_from(StaticPage(PageDetails("Two Sum", URL)), self.store, now=T0)
        self.assertEqual(rec.id, "two-sum")


class ReviewProblemTests(unittest.TestCase):
    def test_review_persists(self) -> None:
        store = MemoryStore([problem("a", box=2, notes="keep")])
        rec = review_problem(store, "a", "easy", now=T0)
        self.assertEqual(rec.box, 3)
        self.assertEqual(rec.next_review_date, T0 + 7 * DAY_MS)
        self.assertEqual(rec.last_updated, T0)
        self.assertEqual(store.load_problem("a").box, 3)
        self.assertEqual(store.load_problem("a").notes, "keep")

    def test_review_unknown(self) -> None:
        self.assertIsNone(review_problem(MemoryStore(), "ghost", "easy"))


if __name__ == "__main__":
    unittest.main()
