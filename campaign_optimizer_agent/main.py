from __future__ import annotations

import argparse
from dataclasses import replace
from datetime import date, datetime, time, timezone

from dotenv import find_dotenv, load_dotenv

from campaign_optimizer_agent.config import AgentConfig
from campaign_optimizer_agent.workflow import run_optimizer_workflow


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Paid Social Campaign Optimizer")
    parser.add_argument(
        "--run-date",
        dest="run_date",
        help="Anchor date in YYYY-MM-DD format (default: now, UTC)",
    )
    parser.add_argument(
        "--output-dir",
        dest="output_dir",
        help="Directory for the text report and HTML dashboard (default: OUTPUT_DIR).",
    )
    parser.add_argument(
        "--no-delivery",
        dest="deliver",
        action="store_false",
        help="Skip GitHub Pages, Slack and email delivery for this run.",
    )
    return parser.parse_args(argv)


def _parse_run_at(raw: str | None) -> datetime:
    if not raw:
        return datetime.now(timezone.utc)
    return datetime.combine(date.fromisoformat(raw), time.min, tzinfo=timezone.utc)


def main(argv: list[str] | None = None) -> None:
    try:
        load_dotenv(find_dotenv(usecwd=True), override=False)
    except Exception:
        pass

    args = _parse_args(argv)
    try:
        run_at = _parse_run_at(args.run_date)
    except ValueError:
        raise SystemExit(f"Invalid --run-date: {args.run_date!r} (expected YYYY-MM-DD).")

    config = AgentConfig.from_env()
    if args.output_dir:
        config = replace(config, output_dir=args.output_dir)

    missing = config.missing_credentials()
    if missing:
        raise SystemExit(f"Missing required environment variables: {', '.join(missing)}")

    print(f"{config.primary_channel_label} Campaign Optimizer starting ({run_at.date().isoformat()})")
    try:
        run_optimizer_workflow(run_at, config, deliver=args.deliver)
    except Exception as exc:
        print(f"Fatal error: {exc}")
        raise SystemExit(1) from exc
    print("Done.")


if __name__ == "__main__":
    main()
