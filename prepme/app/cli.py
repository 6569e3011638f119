from __future__ import annotations

"""CLI for PrepMe: problems, reviews, the revision hub and timed mock tests."""

import argparse
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from .. import __version__
from ..analytics import (
    AnalyticsConfig,
    chart_data,
    ewma_scores,
    export_ndjson,
    history_frame,
    plot_activity_heatmap,
    plot_box_distribution,
    plot_score_trend,
    summarize_history,
)
from ..config.config import load_config, validate_config
from ..errors import NoProblemsAvailable
from ..scheduling.leitner import FILTERS, filter_problems, is_due
from ..stats.activity import compute_activity
from ..stats.stats import format_summary, revision_summary
from ..storage.schema import DIFFICULTIES, ProblemRecord
from ..storage.store import ProblemStore
from ..util.randomness import make_rng, seed_if_needed
from ..util.timeutil import from_ms
from . import explain
from .capture import PageDetails, capture_page, create_problem, review_problem, save_problem_fields
from .session_manager import COUNT_CHOICES, MAX_MINUTES, MIN_MINUTES, SessionManager, SessionState, TestConfig, format_time

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_USAGE = 2


def _build_ui() -> Dict[str, Callable[..., Any]]:
    def ask(prompt: str) -> str:
        return input(prompt)

    def inform(msg: str) -> None:
        print(msg)

    return {"ask": ask, "inform": inform}


def _fmt_date(ms: Optional[int]) -> str:
    return from_ms(ms).strftime("%Y-%m-%d") if ms else "Never"


def _problem_line(p: ProblemRecord, now_due: bool) -> str:
    flag = "*" if now_due else " "
    title = p.title or p.id
    return f"{flag} {p.id:<32} box {p.current_box}  next {_fmt_date(p.next_review_date):<10}  {title}"


def _show_problem(p: ProblemRecord, inform: Callable[[str], None]) -> None:
    inform(f"{p.title or p.id}  [{p.id}]")
    if p.url:
        inform(f"URL: {p.url}")
    inform(f"Level {p.current_box} | Last reviewed: {_fmt_date(p.last_reviewed)} | Next review: {_fmt_date(p.next_review_date)}")
    if p.difficulty:
        inform(f"Last rated: {p.difficulty}")
    if p.description:
        inform("\nDescription:\n" + p.description)
    inform("\nNotes:\n" + (p.notes or "(none)"))
    inform("\nSolution:\n" + (p.solution or "// No solution saved."))


def run_test(sm: SessionManager, ui: Dict[str, Callable[..., Any]]) -> int:
    """Drive one started session from the terminal until it reaches results."""
    ask = ui["ask"]
    inform = ui["inform"]
    while sm.state is SessionState.RUNNING:
        s = sm.session
        q = s.current_question
        if q is None:
            break
        inform(f"\n{s.current_index + 1} / {s.total}  {q.title or q.id}  [{format_time(s.time_left)}]")
        if not s.show_solution:
            inform(q.description or "No description available. Check the URL if needed.")
            if q.url:
                inform(q.url)
            cmd = ask("[r]eveal solution, [q]uit > ").strip().lower()
        else:
            inform("Your saved solution:\n" + (q.solution or "// No solution saved."))
            cmd = ask("How did you do? [p]ass, [f]ail, [q]uit > ").strip().lower()
        if sm.state is not SessionState.RUNNING:
            break
        if cmd in ("q", "quit"):
            sm.cancel()
            inform("Test abandoned; nothing was saved.")
            return EXIT_OK
        if cmd in ("r", "reveal"):
            sm.reveal()
        elif cmd in ("p", "pass") and sm.session.show_solution:
            sm.record("pass")
        elif cmd in ("f", "fail") and sm.session.show_solution:
            sm.record("fail")
        else:
            inform("Unrecognized choice.")

    s = sm.session
    if s.state is not SessionState.RESULTS or s.result is None:
        return EXIT_OK
    if s.time_left == 0:
        inform("\nTime's up!")
    inform("\nTest Complete!")
    inform(f"{s.result.percent}%")
    inform(f"You answered {s.result.score} out of {s.result.total} correctly.")
    if sm.last_save_ok is False:
        inform("(Warning: the result could not be saved to history.)")
    return EXIT_OK


def _setup(args: argparse.Namespace) -> tuple[Dict[str, Any], ProblemStore]:
    cfg = validate_config(load_config(args.config))
    level = "DEBUG" if args.verbose else cfg["logging"]["level"]
    logging.basicConfig(level=getattr(logging, level), format="%(levelname)s: %(message)s")
    if args.explain:
        explain.enable(True)
    data_dir = args.data_dir or cfg["storage"]["data_dir"]
    store = ProblemStore(data_dir, history_file=cfg["storage"]["history_file"])
    return cfg, store


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="prepme", description="Interview-prep problem tracker with spaced repetition and mock tests.")
    p.add_argument("--config", default=None, help="Path to YAML config")
    p.add_argument("--data-dir", dest="data_dir", default=None, help="Problem store directory (default ~/PrepMe)")
    p.add_argument("--explain", action="store_true", help="Print session milestones")
    p.add_argument("--verbose", action="store_true", help="Debug logging")
    p.add_argument("--version", action="version", version=f"prepme {__version__}")
    sub = p.add_subparsers(dest="cmd", required=True)

    ap = sub.add_parser("add", help="Create a problem by id")
    ap.add_argument("id")
    ap.add_argument("--title", default=None)
    ap.add_argument("--url", default=None)
    ap.add_argument("--description", default=None)
    ap.add_argument("--platform", default=None)

    cp = sub.add_parser("capture", help="Save a page (title/url/description) as a problem")
    cp.add_argument("--url", required=True)
    cp.add_argument("--title", default="")
    cp.add_argument("--description", default="")
    cp.add_argument("--platform", default=None)
    cp.add_argument("--active", default=None, help="Id of the problem currently open")

    np_ = sub.add_parser("note", help="Save notes and/or solution")
    np_.add_argument("id")
    np_.add_argument("--notes", default=None)
    np_.add_argument("--solution", default=None)

    sp = sub.add_parser("show", help="Show one problem")
    sp.add_argument("id")

    lp = sub.add_parser("list", help="List problems")
    lp.add_argument("--filter", choices=FILTERS, default=None)

    rp = sub.add_parser("review", help="Mark a problem reviewed")
    rp.add_argument("id")
    rp.add_argument("outcome", choices=DIFFICULTIES)

    sub.add_parser("hub", help="Revision hub summary, streak and heatmap")

    tp = sub.add_parser("test", help="Run a timed mock test")
    tp.add_argument("--count", type=int, default=None, help=f"Number of questions (one of {list(COUNT_CHOICES)} or any custom count)")
    tp.add_argument("--minutes", type=int, default=None, help=f"Duration in minutes ({MIN_MINUTES}-{MAX_MINUTES})")
    tp.add_argument("--seed", type=int, default=None)

    hp = sub.add_parser("history", help="Recent mock test scores")
    hp.add_argument("--window", type=int, default=None)

    rep = sub.add_parser("report", help="Write charts and an NDJSON history export")
    rep.add_argument("--out", default=None)
    return p


def main(argv: list[str] | None = None, ui: Optional[Dict[str, Callable[..., Any]]] = None) -> int:
    args = _build_parser().parse_args(argv)
    cfg, store = _setup(args)
    ui = ui or _build_ui()
    inform = ui["inform"]

    if args.cmd == "add":
        fields = {k: v for k, v in {
            "title": args.title, "url": args.url, "description": args.description, "platform_id": args.platform,
        }.items() if v is not None}
        rec = create_problem(store, args.id, **fields)
        inform(f"Saved {rec.id}")
        return EXIT_OK

    if args.cmd == "capture":
        active = store.load_problem(args.active) if args.active else None
        details = PageDetails(title=args.title, url=args.url, description=args.description)
        rec = capture_page(store, details, active=active, platform_id=args.platform)
        if rec is None:
            inform("Nothing to capture.")
            return EXIT_USAGE
        inform(f"Saved {rec.id}")
        return EXIT_OK

    if args.cmd == "note":
        rec = store.load_problem(args.id)
        if rec is None:
            inform(f"Unknown problem: {args.id}")
            return EXIT_NOT_FOUND
        updates = {k: v for k, v in {"notes": args.notes, "solution": args.solution}.items() if v is not None}
        rec = save_problem_fields(store, rec, updates)
        inform(f"Saved {rec.id}")
        return EXIT_OK

    if args.cmd == "show":
        rec = store.load_problem(args.id)
        if rec is None:
            inform(f"Unknown problem: {args.id}")
            return EXIT_NOT_FOUND
        _show_problem(rec, inform)
        return EXIT_OK

    if args.cmd == "list":
        kind = args.filter or cfg["revision"]["default_filter"]
        problems = filter_problems(store.list_problems(), kind, mastered_box=cfg["revision"]["mastered_box"])
        if not problems:
            inform(f"No problems ({kind}).")
        for rec in sorted(problems, key=lambda r: (r.next_review_date or 0, r.id)):
            inform(_problem_line(rec, is_due(rec)))
        return EXIT_OK

    if args.cmd == "review":
        rec = review_problem(store, args.id, args.outcome)
        if rec is None:
            inform(f"Unknown problem: {args.id}")
            return EXIT_NOT_FOUND
        inform(f"{rec.id}: box {rec.box}, next review {_fmt_date(rec.next_review_date)}")
        return EXIT_OK

    if args.cmd == "hub":
        summary = revision_summary(
            store.list_problems(),
            store.get_test_results(),
            mastered_box=cfg["revision"]["mastered_box"],
        )
        inform(format_summary(summary))
        return EXIT_OK

    if args.cmd == "test":
        seed = args.seed if args.seed is not None else seed_if_needed()
        test_cfg = cfg["test"]
        try:
            tc = TestConfig(
                count=args.count if args.count is not None else test_cfg["count"],
                duration_minutes=args.minutes if args.minutes is not None else test_cfg["duration_minutes"],
            )
        except ValueError as e:
            inform(f"Invalid test settings: {e}")
            return EXIT_USAGE
        sm = SessionManager(store, config=tc, rng=make_rng(seed))
        try:
            sm.start()
        except NoProblemsAvailable as e:
            inform(str(e))
            return EXIT_USAGE
        try:
            return run_test(sm, ui)
        finally:
            sm.close()

    if args.cmd == "history":
        acfg = AnalyticsConfig.from_app_config(cfg)
        window = args.window or acfg.chart_window
        df = history_frame(store.get_test_results())
        if df.empty:
            inform("No tests taken yet.")
            return EXIT_OK
        for point in chart_data(df, window):
            inform(f"{point['name']:<8} {point['date']}  {point['score']:>3}%")
        s = summarize_history(df)
        inform(f"Tests: {s['tests']}  best {s['best_pct']}%  mean {s['mean_pct']}%  practice {format_time(s['total_seconds'])}")
        return EXIT_OK

    if args.cmd == "report":
        acfg = AnalyticsConfig.from_app_config(cfg)
        outdir = Path(args.out or cfg["analytics"]["reports_dir"])
        outdir.mkdir(parents=True, exist_ok=True)
        problems = store.list_problems()
        results = store.get_test_results()
        df = history_frame(results)
        if not df.empty:
            df = ewma_scores(df, span=acfg.smoothing_span)
            plot_score_trend(df, save_path=outdir / "score_trend.png")
            export_ndjson(df, outdir / "test_history.ndjson")
        activity = compute_activity(problems, results)
        plot_activity_heatmap(activity.heatmap, save_path=outdir / "activity.png")
        plot_box_distribution(problems, save_path=outdir / "boxes.png")
        inform(f"Reports saved to: {outdir.resolve()}")
        return EXIT_OK

    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
