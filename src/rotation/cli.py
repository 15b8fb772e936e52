"""CLI interface for the workout rotation tracker."""

from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path

import click

from rotation.config import Config
from rotation.logging import setup_logging
from rotation.muscles import MAIN_MUSCLE_BUTTONS, MUSCLE_ORDER, NO_SUPERSET
from rotation.recommend import days_since, recommend
from rotation.session import SupersetPicker, log_workout
from rotation.snapshot import SnapshotImportError
from rotation.store import HistoryStore


def format_date(stamp: datetime | None) -> str:
    if stamp is None:
        return "Never"
    return stamp.astimezone().strftime("%Y-%m-%d")


def format_last_trained(stamp: datetime | None, now: datetime | None = None) -> str:
    if stamp is None:
        return format_date(stamp)
    days = days_since(stamp, now)
    unit = "day" if days == 1 else "days"
    return f"{format_date(stamp)} ({days} {unit} ago)"


def _store(ctx: click.Context) -> HistoryStore:
    return ctx.obj["store"]


@click.group()
@click.option(
    "--store", "store_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="History file (defaults to ROTATION_STORE_PATH or ~/.workout-rotation.json).",
)
@click.pass_context
def main(ctx: click.Context, store_path: Path | None):
    """Track which muscle groups are due for training."""
    try:
        config = Config.from_env()
    except RuntimeError as exc:
        raise click.UsageError(str(exc)) from exc
    setup_logging(config.log_format, config.log_level)

    ctx.ensure_object(dict)
    ctx.obj["store"] = HistoryStore.at_path(store_path or config.store_path)


@main.command("recommend")
@click.pass_context
def recommend_cmd(ctx: click.Context):
    """Show the recommended workout."""
    state = _store(ctx).load()
    rec = recommend(state.history)
    click.echo(f"Recommended workout: {rec.main}")
    click.echo(f"Suggested supersets: {', '.join(rec.supersets)}")


@main.command()
@click.pass_context
def history(ctx: click.Context):
    """Show when each muscle group was last trained."""
    state = _store(ctx).load()
    width = max(len(m) for m in MUSCLE_ORDER)
    for muscle in MUSCLE_ORDER:
        click.echo(f"{muscle.capitalize():<{width}}  {format_last_trained(state.history[muscle])}")


@main.command()
@click.argument("main_muscle", type=click.Choice(list(MAIN_MUSCLE_BUTTONS), case_sensitive=False))
def options(main_muscle: str):
    """List superset choices for MAIN_MUSCLE."""
    picker = SupersetPicker(main_muscle)
    for group, muscles in picker.options().items():
        click.echo(f"{group}: {', '.join(muscles)}")


@main.command("log")
@click.argument("main_muscle", type=click.Choice(list(MAIN_MUSCLE_BUTTONS), case_sensitive=False))
@click.option("--superset", "-s", "supersets", multiple=True, help="Superset muscle (repeatable).")
@click.option("--none", "no_superset", is_flag=True, help="Trained the main muscle only.")
@click.pass_context
def log_cmd(ctx: click.Context, main_muscle: str, supersets: tuple[str, ...], no_superset: bool):
    """Log today's workout for MAIN_MUSCLE."""
    if no_superset and supersets:
        raise click.UsageError("Use either --none or --superset, not both.")

    picker = SupersetPicker(main_muscle)
    try:
        if no_superset:
            picker.pick(NO_SUPERSET)
        for muscle in dict.fromkeys(s.strip().lower() for s in supersets):
            picker.pick(muscle)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--superset") from exc

    state = log_workout(_store(ctx), picker.main, picker.selection)
    click.echo(f"Logged {picker.main} on {format_date(state.history[picker.main])}.")
    if picker.muscles:
        click.echo(f"Supersets: {', '.join(picker.muscles)}")


@main.command()
@click.pass_context
def supersets(ctx: click.Context):
    """Show the superset session log."""
    state = _store(ctx).load()
    if not state.superset_log:
        click.echo("No superset sessions logged yet.")
        return
    for record in state.superset_log:
        click.echo(f"{format_date(record.timestamp)}  {record.main}: {', '.join(record.supersets)}")


@main.command("export")
@click.pass_context
def export_cmd(ctx: click.Context):
    """Print a backup code for the current data."""
    click.echo(_store(ctx).export_snapshot())


@main.command("import")
@click.argument("code", required=False)
@click.pass_context
def import_cmd(ctx: click.Context, code: str | None):
    """Restore data from a backup CODE (read from stdin when omitted)."""
    if code is None:
        code = click.get_text_stream("stdin").read()
    if not code.strip():
        click.echo("Error: Paste your backup code to import.", err=True)
        sys.exit(1)

    try:
        state = _store(ctx).import_snapshot(code)
    except SnapshotImportError as exc:
        click.echo(f"Error ({exc.code}): {exc}", err=True)
        sys.exit(1)

    click.echo(
        f"Data imported successfully! {len(state.superset_log)} superset sessions restored."
    )


if __name__ == "__main__":
    main()
