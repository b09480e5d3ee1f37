"""Go Task CLI - weekly task planner."""

import asyncio
import inspect
import json
import logging
import sys
from datetime import datetime

import click

from .config import Session, load_config
from .core.buckets import BlockType
from .core.tasks import FontStyle, FontWeight, Task, ValidationError
from .ports.key_value_store import LocalStoreError
from .ports.remote_task_store import RemoteStoreError
from .workflows import open_app, sign_out


def _run(action):
    """Open a session, run `action(app, now)`, persist, report errors."""

    async def runner():
        now = datetime.now()
        async with open_app(load_config(), Session.load(), now) as app:
            result = action(app, now)
            if inspect.isawaitable(result):
                result = await result
            return result

    try:
        return asyncio.run(runner())
    except (ValidationError, LocalStoreError, RemoteStoreError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _task_line(task: Task) -> str:
    done = "x" if task.completed else " "
    flags = ("!" if task.important else " ") + ("^" if task.pinned else " ")
    return f"  [{done}] {task.id[:8]} {flags} {task.text}"


def _task_json(task: Task) -> dict:
    return task.to_dict()


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.version_option(package_name="gotask")
def main(debug: bool):
    """Go Task - weekly task planner."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def week(as_json: bool):
    """Show this week's tasks, then future tasks."""

    def show(app, now):
        planner = app.planner
        blocks = planner.display(now)
        buckets = planner.grouped(now)

        if as_json:
            click.echo(
                json.dumps(
                    [
                        {
                            "type": b.type.value,
                            "key": b.display_key,
                            "date": b.date.isoformat() if b.date else None,
                            "title": b.title,
                            "tasks": [_task_json(t) for t in buckets.get(b.display_key, [])],
                        }
                        for b in blocks
                    ],
                    indent=2,
                    ensure_ascii=False,
                )
            )
            return

        for block in blocks:
            if block.type is BlockType.SEPARATOR:
                click.echo(f"\n=== {block.title} ===")
                continue
            if block.type is BlockType.WEEKDAY:
                click.echo(f"\n### {block.title} ({block.date.strftime('%Y-%m-%d')})")
            else:
                click.echo(f"\n### {block.title}")
            tasks = buckets.get(block.display_key, [])
            if not tasks:
                click.echo("  -")
            for task in tasks:
                click.echo(_task_line(task))

    _run(show)


@main.command()
@click.argument("text")
@click.option("--date", "-d", "when", type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
              help="Day for the task (YYYY-MM-DD), defaults to today")
@click.option("--important", is_flag=True, help="Flag as important")
@click.option("--color", default=None, help="Text color, e.g. #4a90e2")
@click.option("--bold", is_flag=True, help="Bold text")
@click.option("--italic", is_flag=True, help="Italic text")
@click.option("--highlight", "highlight_color", default=None, help="Highlight with this color")
def add(text, when, important, color, bold, italic, highlight_color):
    """Add a task."""
    style = {"important": important}
    if color:
        style["color"] = color
    if bold:
        style["font_weight"] = FontWeight.BOLD
    if italic:
        style["font_style"] = FontStyle.ITALIC
    if highlight_color:
        style["highlight"] = True
        style["highlight_color"] = highlight_color

    def do_add(app, now):
        task = app.planner.add_task(text, when or now, now, **style)
        click.echo(f"Added {task.id[:8]} on {task.date.strftime('%Y-%m-%d')}")

    _run(do_add)


@main.command()
@click.argument("task_id")
@click.option("--text", default=None, help="New text")
@click.option("--date", "-d", "when", type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
              help="New day (YYYY-MM-DD)")
def edit(task_id, text, when):
    """Edit a task's text or day."""
    changes = {}
    if text is not None:
        changes["text"] = text
    if when is not None:
        changes["date"] = when
    if not changes:
        click.echo("Nothing to change.")
        return

    def do_edit(app, now):
        task = app.planner.edit_task(task_id, now, **changes)
        click.echo(_task_line(task))

    _run(do_edit)


@main.command()
@click.argument("task_id")
def done(task_id):
    """Toggle a task's completed state."""
    _run(lambda app, now: click.echo(_task_line(app.planner.toggle_completed(task_id))))


@main.command()
@click.argument("task_id")
def star(task_id):
    """Toggle a task's important flag."""
    _run(lambda app, now: click.echo(_task_line(app.planner.toggle_important(task_id))))


@main.command()
@click.argument("task_id")
def pin(task_id):
    """Toggle pinning (pinned tasks survive the weekly cleanup)."""
    _run(lambda app, now: click.echo(_task_line(app.planner.toggle_pin(task_id))))


@main.command()
@click.argument("task_id")
def dup(task_id):
    """Duplicate a task."""
    _run(lambda app, now: click.echo(_task_line(app.planner.duplicate_task(task_id, now))))


@main.command()
@click.argument("task_ids", nargs=-1, required=True)
def rm(task_ids):
    """Delete one or more tasks."""

    def do_delete(app, now):
        removed = app.planner.delete_tasks(list(task_ids))
        click.echo(f"Deleted {len(removed)} task(s).")

    _run(do_delete)


@main.command()
@click.argument("task_id")
@click.argument("day_key")
def move(task_id, day_key):
    """Move a task to a week day name or a future day key (e.g. 25/06/2024)."""
    _run(lambda app, now: click.echo(_task_line(app.planner.move_task(task_id, day_key, now))))


@main.command()
def tutorial():
    """Dismiss the tutorial task."""

    async def dismiss(app, now):
        await app.tutorial.dismiss()
        click.echo("Tutorial dismissed.")

    _run(dismiss)


@main.command()
@click.option("--language", type=click.Choice(["pt", "en"]), default=None)
@click.option("--theme", type=click.Choice(["system", "light", "dark"]), default=None)
@click.option("--font-size", type=int, default=None)
def settings(language, theme, font_size):
    """Show or change settings."""
    changes = {
        k: v
        for k, v in {"language": language, "theme": theme, "font_size": font_size}.items()
        if v is not None
    }

    def do_settings(app, now):
        current = app.coordinator.update_settings(**changes) if changes else app.coordinator.settings
        click.echo(json.dumps(current.to_dict(), indent=2))

    _run(do_settings)


@main.command()
@click.argument("user_id")
@click.option("--token", required=True, help="Firebase ID token for the user")
def login(user_id, token):
    """Sign in and merge local tasks with the cloud copy."""
    Session(user_id=user_id, id_token=token).save()
    _run(lambda app, now: click.echo(f"Signed in as {user_id}; {len(app.store)} task(s) synced."))


@main.command()
def logout():
    """Sign out and clear local tasks (cloud data is kept)."""
    try:
        asyncio.run(sign_out(load_config()))
    except LocalStoreError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    click.echo("Signed out.")


@main.command()
def sync():
    """Merge local tasks with the cloud copy."""
    if not Session.load().current_user_id:
        click.echo("Error: Not signed in. Run 'gotask login' first.", err=True)
        sys.exit(1)
    _run(lambda app, now: click.echo(f"{len(app.store)} task(s) synced."))
