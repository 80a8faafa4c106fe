from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from .accounts import AuthError
from .analysis.client import AnalysisError
from .analysis.images import ImageRejected, load_image
from .app import FoodCoachApp
from .config import load_config
from .health.forms import FormValidationError, HealthForm, ensure_finite
from .health.records import ACTIVITY_LEVELS, SEXES
from .i18n import t

_HEALTH_TESTS = {
    "bmi": "bmi",
    "bmr": "bmr",
    "tdee": "tdee",
    "ideal-weight": "ideal_weight",
}


def _add_health_args(p: argparse.ArgumentParser, test_type: str) -> None:
    p.add_argument("--height", required=True, help="Height in cm")
    if test_type in ("bmi", "bmr", "tdee"):
        p.add_argument("--weight", required=True, help="Weight in kg")
    if test_type in ("bmr", "tdee"):
        p.add_argument("--age", required=True, help="Age in years")
    if test_type in ("bmr", "tdee", "ideal_weight"):
        p.add_argument("--sex", choices=SEXES, default="male")
    if test_type == "tdee":
        p.add_argument("--activity", choices=ACTIVITY_LEVELS, default="moderate")
    p.add_argument("--save", action="store_true", help="Save the result for the signed-in user")
    p.add_argument("--no-range-check", action="store_true", help="Skip form range checks")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="foodcoach",
        description="Food photo analysis and body-metric calculators.",
    )
    p.add_argument("--config", default=None, help="YAML config file (optional)")
    p.add_argument("--data-dir", default=None, help="Override the data directory")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_health = sub.add_parser("health", help="Run a health calculator")
    subh = p_health.add_subparsers(dest="test", required=True)
    for name, test_type in _HEALTH_TESTS.items():
        _add_health_args(subh.add_parser(name, help=f"{test_type} calculator"), test_type)

    p_analyze = sub.add_parser("analyze", help="Analyse a food photo")
    p_analyze.add_argument("--image", required=True, help="Path to the image file")
    p_analyze.add_argument("--language", choices=["fi", "en"], default=None)

    p_acc = sub.add_parser("account", help="Account management")
    suba = p_acc.add_subparsers(dest="action", required=True)
    p_up = suba.add_parser("signup", help="Create an account")
    p_up.add_argument("--email", required=True)
    p_up.add_argument("--password", required=True)
    p_up.add_argument("--name", default="")
    p_in = suba.add_parser("signin", help="Sign in")
    p_in.add_argument("--email", required=True)
    p_in.add_argument("--password", required=True)
    suba.add_parser("signout", help="Sign out")
    suba.add_parser("whoami", help="Show the signed-in user")

    p_hist = sub.add_parser("history", help="Saved analyses and health tests")
    p_hist.add_argument("kind", choices=["analyses", "tests"])
    p_hist.add_argument("--test-type", default=None, choices=list(_HEALTH_TESTS.values()))
    p_hist.add_argument("--delete", default=None, metavar="ID", help="Delete a saved record")

    p_report = sub.add_parser("report", help="Plot health test history")
    p_report.add_argument("--test-type", required=True, choices=list(_HEALTH_TESTS.values()))
    p_report.add_argument("--out", required=True, help="Output PNG path")

    p_lang = sub.add_parser("language", help="Show, set or toggle the language")
    p_lang.add_argument("value", nargs="?", choices=["fi", "en", "toggle"])

    return p


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _run_health(app: FoodCoachApp, args: argparse.Namespace) -> int:
    test_type = _HEALTH_TESTS[args.test]
    form = HealthForm(enforce_ranges=not args.no_range_check)
    form.select(test_type)
    for name in form.required_fields():
        attr = "activity" if name == "activity_level" else name
        form.set_field(name, getattr(args, attr))
    # Range checks can be skipped; a non-finite result is never printed or saved.
    result = ensure_finite(form.submit())
    _print_json(result.to_record())
    if args.save:
        app.record_health_test(result)
        print(t(app.language, "test_saved"))
    return 0


def _run_analyze(app: FoodCoachApp, args: argparse.Namespace) -> int:
    if args.language:
        app.state.set_language(args.language)
    payload = load_image(Path(args.image))
    outcome = app.analyze_image(payload)
    _print_json(outcome.result.to_dict())
    if not outcome.result.is_food:
        print(t(app.language, "not_food"))
    if outcome.saved_record is not None:
        print(t(app.language, "analysis_saved"))
    return 0


def _run_account(app: FoodCoachApp, args: argparse.Namespace) -> int:
    if args.action == "signup":
        user = app.accounts.sign_up(args.email, args.password, args.name)
        print(f"Created account: {user.email}")
        return 0
    if args.action == "signin":
        user = app.accounts.sign_in(args.email, args.password)
        print(f"Signed in as {user.display_name()}")
        return 0
    if args.action == "signout":
        app.accounts.sign_out()
        print("Signed out")
        return 0
    user = app.accounts.current_user()
    if user is None:
        print("Not signed in")
        return 1
    _print_json(user.to_dict())
    return 0


def _run_history(app: FoodCoachApp, args: argparse.Namespace) -> int:
    user = app.accounts.require_user()
    if args.kind == "analyses":
        if args.delete:
            app.records.delete_analysis(user.id, args.delete)
            print(f"Deleted {args.delete}")
            return 0
        _print_json(app.records.list_analyses(user.id))
        return 0
    if args.delete:
        app.records.delete_health_test(user.id, args.delete)
        print(f"Deleted {args.delete}")
        return 0
    _print_json(app.records.list_health_tests(user.id, test_type=args.test_type))
    return 0


def _run_report(app: FoodCoachApp, args: argparse.Namespace) -> int:
    from .report import load_health_history, plot_health_trend

    user = app.accounts.require_user()
    df = load_health_history(app.records, user.id)
    out = plot_health_trend(df, args.test_type, Path(args.out))
    if out is None:
        print(f"No saved {args.test_type} results yet.")
        return 1
    print(f"Saved: {out}")
    return 0


def main(argv: list[str] | None = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(Path(args.config) if args.config else None)
    if args.data_dir:
        config = config.model_copy(update={"data_dir": Path(args.data_dir)})
    app = FoodCoachApp.from_config(config)

    try:
        if args.cmd == "health":
            return _run_health(app, args)
        if args.cmd == "analyze":
            return _run_analyze(app, args)
        if args.cmd == "account":
            return _run_account(app, args)
        if args.cmd == "history":
            return _run_history(app, args)
        if args.cmd == "report":
            return _run_report(app, args)
        if args.cmd == "language":
            if args.value == "toggle":
                app.state.toggle_language()
            elif args.value:
                app.state.set_language(args.value)
            print(app.language)
            return 0
    except (FormValidationError, ImageRejected, FileNotFoundError) as exc:
        print(f"Error: {exc}")
        return 1
    except (AnalysisError, AuthError) as exc:
        print(f"Error: {exc}")
        return 1
    except KeyError as exc:
        print(f"Error: {exc.args[0] if exc.args else exc}")
        return 1
    finally:
        app.close()

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
