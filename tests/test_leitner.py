import unittest

from prepme.scheduling.leitner import (
    INTERVAL_DAYS,
    filter_problems,
    is_due,
    mastered_problems,
    next_box,
    review,
    reviewed_today,
)
from prepme.util.timeutil import DAY_MS, to_ms

from .helpers import NOON, day_ms, problem

T0 = to_ms(NOON)


class NextBoxTests(unittest.TestCase):
    def test_outcome_rules_for_every_box(self) -> None:
        for box in range(1, 6):
            easy = next_box(box, "easy")
            self.assertGreaterEqual(easy, box)
            self.assertLessEqual(easy, 5)
            self.assertEqual(next_box(box, "medium"), box)
            self.assertEqual(next_box(box, "hard"), 1)

    def test_easy_caps_at_five(self) -> None:
        self.assertEqual(next_box(5, "easy"), 5)
        self.assertEqual(next_box(4, "easy"), 5)

    def test_unknown_outcome(self) -> None:
        with self.assertRaises(ValueError):
            next_box(2, "trivial")


class ReviewTests(unittest.TestCase):
    def test_interval_keyed_by_resulting_box(self) -> None:
        for box in range(1, 6):
            for outcome in ("easy", "medium", "hard"):
                out = review(problem("p", box=box), outcome, T0)
                self.assertEqual(out.last_reviewed, T0)
                self.assertEqual(out.next_review_date - out.last_reviewed, INTERVAL_DAYS[out.box] * DAY_MS)
                self.assertEqual(out.difficulty, outcome)

    def test_easy_then_hard_scenario(self) -> None:
        first = review(problem("two-sum"), "easy", T0)
        self.assertEqual(first.box, 2)
        self.assertEqual(first.next_review_date, T0 + 3 * DAY_MS)

        t1 = T0 + 3 * DAY_MS
        second = review(first, "hard", t1)
        self.assertEqual(second.box, 1)
        self.assertEqual(second.next_review_date, t1 + 1 * DAY_MS)

    def test_missing_box_defaults_to_one(self) -> None:
        out = review(problem("p"), "medium", T0)
        self.assertEqual(out.box, 1)
        self.assertEqual(out.next_review_date, T0 + DAY_MS)

    def test_other_fields_untouched(self) -> None:
        rec = problem("p", notes="use a hashmap", solution="def f(): ...", title="Two Sum", timestamp=T0 - DAY_MS, box=3)
        out = review(rec, "easy", T0)
        self.assertEqual(out.notes, rec.notes)
        self.assertEqual(out.solution, rec.solution)
        self.assertEqual(out.title, rec.title)
        self.assertEqual(out.timestamp, rec.timestamp)
        # input is not modified
        self.assertEqual(rec.box, 3)
        self.assertIsNone(rec.last_reviewed)

    def test_accepts_datetime_now(self) -> None:
        out = review(problem("p", box=4), "easy", NOON)
        self.assertEqual(out.box, 5)
        self.assertEqual(out.next_review_date, T0 + 30 * DAY_MS)


class QueryTests(unittest.TestCase):
    def setUp(self) -> None:
        self.never = problem("never")
        self.overdue = problem("overdue", box=2, next_review_date=T0 - 1)
        self.exact = problem("exact", box=2, next_review_date=T0)
        self.later = problem("later", box=4, last_reviewed=T0 - 3600_000, next_review_date=T0 + DAY_MS)
        self.top = problem("top", box=5, last_reviewed=day_ms(2), next_review_date=T0 + 10 * DAY_MS)
        self.all = [self.never, self.overdue, self.exact, self.later, self.top]

    def test_is_due(self) -> None:
        self.assertTrue(is_due(self.never, T0))
        self.assertTrue(is_due(self.overdue, T0))
        self.assertTrue(is_due(self.exact, T0))
        self.assertFalse(is_due(self.later, T0))

    def test_filters(self) -> None:
        ids = lambda ps: sorted(p.id for p in ps)  # noqa: E731
        self.assertEqual(ids(filter_problems(self.all, "all", T0)), sorted(p.id for p in self.all))
        self.assertEqual(ids(filter_problems(self.all, "due", T0)), ["exact", "never", "overdue"])
        self.assertEqual(ids(filter_problems(self.all, "reviewed", T0)), ["later"])
        self.assertEqual(ids(filter_problems(self.all, "mastered", T0)), ["later", "top"])

    def test_mastered_threshold(self) -> None:
        self.assertEqual([p.id for p in mastered_problems(self.all, mastered_box=4)], ["top"])

    def test_reviewed_today_uses_calendar_day(self) -> None:
        self.assertEqual([p.id for p in reviewed_today(self.all, NOON)], ["later"])

    def test_unknown_filter(self) -> None:
        with self.assertRaises(ValueError):
            filter_problems(self.all, "starred", T0)


if __name__ == "__main__":
    unittest.main()
