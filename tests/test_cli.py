import json
import tempfile
import unittest
from pathlib import Path

from prepme.app.cli import EXIT_NOT_FOUND, EXIT_OK, EXIT_USAGE, main
from prepme.storage import ProblemStore


class ScriptedUI:
    def __init__(self, answers=()):
        self.answers = list(answers)
        self.lines = []

    def ask(self, prompt):
        self.lines.append(prompt)
        return self.answers.pop(0)

    def inform(self, msg):
        self.lines.append(msg)

    def as_dict(self):
        return {"ask": self.ask, "inform": self.inform}

    @property
    def text(self):
        return "\n".join(self.lines)


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def run_cli(self, *argv, answers=()):
        ui = ScriptedUI(answers)
        code = main(["--data-dir", str(self.dir), *argv], ui=ui.as_dict())
        return code, ui

    def test_add_show_and_review(self) -> None:
        code, ui = self.run_cli("add", "two-sum", "--title", "Two Sum", "--url", "https://leetcode.com/problems/two-sum/")
        self.assertEqual(code, EXIT_OK)
        self.assertIn("Saved two-sum", ui.text)

        code, ui = self.run_cli("review", "two-sum", "easy")
        self.assertEqual(code, EXIT_OK)
        self.assertIn("two-sum: box 2", ui.text)

        code, ui = self.run_cli("show", "two-sum")
        self.assertEqual(code, EXIT_OK)
        self.assertIn("Two Sum  [two-sum]", ui.text)
        self.assertIn("Level 2", ui.text)
        self.assertIn("Last rated: easy", ui.text)

    def test_unknown_problem(self) -> None:
        for argv in (("show", "ghost"), ("review", "ghost", "hard"), ("note", "ghost", "--notes", "x")):
            code, ui = self.run_cli(*argv)
            self.assertEqual(code, EXIT_NOT_FOUND)
            self.assertIn("Unknown problem: ghost", ui.text)

    def test_note_and_capture(self) -> None:
        code, _ = self.run_cli("capture", "--url", "https://leetcode.com/problems/lru-cache/", "--title", "LRU Cache")
        self.assertEqual(code, EXIT_OK)
        code, _ = self.run_cli("note", "lru-cache", "--notes", "dict + dll", "--solution", "class LRU: ...")
        self.assertEqual(code, EXIT_OK)
        rec = ProblemStore(self.dir).load_problem("lru-cache")
        self.assertEqual(rec.title, "LRU Cache")
        self.assertEqual(rec.notes, "dict + dll")
        self.assertEqual(rec.solution, "class LRU: ...")
        self.assertEqual(rec.box, 1)

    def test_list_filters(self) -> None:
        self.run_cli("add", "a")
        self.run_cli("add", "b")
        self.run_cli("review", "b", "easy")
        _, ui = self.run_cli("list", "--filter", "due")
        self.assertIn("* a", ui.text)
        self.assertNotIn(" b ", ui.text)
        _, ui = self.run_cli("list", "--filter", "mastered")
        self.assertIn("No problems (mastered).", ui.text)

    def test_mock_test_round_trip(self) -> None:
        self.run_cli("add", "a", "--title", "A")
        self.run_cli("add", "b", "--title", "B")
        code, ui = self.run_cli("test", "--count", "5", "--minutes", "10", "--seed", "1", answers=["r", "p", "r", "f"])
        self.assertEqual(code, EXIT_OK)
        self.assertIn("Test Complete!", ui.text)
        self.assertIn("50%", ui.text)
        self.assertIn("You answered 1 out of 2 correctly.", ui.text)

        history = json.loads((self.dir / "test_history.json").read_text(encoding="utf-8"))
        self.assertEqual(len(history), 1)
        self.assertEqual((history[0]["score"], history[0]["total"]), (1, 2))

        code, ui = self.run_cli("history")
        self.assertEqual(code, EXIT_OK)
        self.assertIn("Test 1", ui.text)
        self.assertIn("50%", ui.text)

        code, ui = self.run_cli("hub")
        self.assertEqual(code, EXIT_OK)
        self.assertIn("Tests taken: 1", ui.text)
        self.assertIn("Last 30 days: ", ui.text)
        self.assertIn("Current streak: 1 day", ui.text)

    def test_hub_heatmap_is_always_thirty_days(self) -> None:
        cfg = self.dir / "cfg.yml"
        cfg.write_text("activity:\n  heatmap_days: 7\n", encoding="utf-8")
        self.run_cli("add", "a")
        code, ui = self.run_cli("--config", str(cfg), "hub")
        self.assertEqual(code, EXIT_OK)
        strip = next(line for line in ui.text.splitlines() if line.startswith("Last "))
        self.assertTrue(strip.startswith("Last 30 days: "))
        self.assertEqual(len(strip), len("Last 30 days: ") + 29 + 3)

    def test_pass_requires_reveal(self) -> None:
        self.run_cli("add", "a")
        code, ui = self.run_cli("test", "--count", "1", answers=["p", "r", "p"])
        self.assertEqual(code, EXIT_OK)
        self.assertIn("Unrecognized choice.", ui.text)
        self.assertIn("You answered 1 out of 1 correctly.", ui.text)

    def test_quit_saves_nothing(self) -> None:
        self.run_cli("add", "a")
        code, ui = self.run_cli("test", answers=["r", "q"])
        self.assertEqual(code, EXIT_OK)
        self.assertIn("Test abandoned; nothing was saved.", ui.text)
        self.assertFalse((self.dir / "test_history.json").exists())

    def test_no_problems(self) -> None:
        code, ui = self.run_cli("test")
        self.assertEqual(code, EXIT_USAGE)
        self.assertIn("No problems available for test!", ui.text)

    def test_invalid_duration(self) -> None:
        self.run_cli("add", "a")
        code, ui = self.run_cli("test", "--minutes", "3")
        self.assertEqual(code, EXIT_USAGE)
        self.assertIn("Invalid test settings", ui.text)

    def test_empty_history(self) -> None:
        _, ui = self.run_cli("history")
        self.assertIn("No tests taken yet.", ui.text)

    def test_report(self) -> None:
        self.run_cli("add", "a")
        self.run_cli("test", "--count", "1", answers=["r", "p"])
        out = self.dir / "reports"
        code, ui = self.run_cli("report", "--out", str(out))
        self.assertEqual(code, EXIT_OK)
        for name in ("score_trend.png", "test_history.ndjson", "activity.png", "boxes.png"):
            self.assertTrue((out / name).exists(), name)


if __name__ == "__main__":
    unittest.main()
