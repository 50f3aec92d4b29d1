import json
import re
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from inscribe.audit import AuditLogger, file_history, recent_activity, session_activity, warning_entries
from inscribe.config import build_registry_config, create_audit_storage, load_config
from inscribe.exceptions import InscribeError
from inscribe.logging_config import setup_logging
from inscribe.registry import DispatchContext, EffectRegistry

app = typer.Typer(help="File mutations with line-count, threshold and module tracking.")
console = Console()

_state: Dict[str, Any] = {
    "project_root": None,
    "json": False,
    "audit": False,
}


@app.callback()
def global_options(
    project_root: Optional[Path] = typer.Option(
        None,
        "--project-root",
        "-r",
        help="Project root (defaults to config value or CWD)",
        file_okay=False,
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    audit: bool = typer.Option(False, "--audit", help="Record effects in the configured audit log"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs on stderr"),
):
    """
    Inscribe: file mutations with metadata for automated agents.
    """
    _state["project_root"] = project_root.resolve() if project_root else None
    _state["json"] = json_output
    _state["audit"] = audit
    if verbose:
        setup_logging(level="DEBUG", suppress_console=False, force=True)
    else:
        setup_logging(suppress_console=True, force=True)


def _load():
    data = load_config(_state["project_root"]) or {}
    config = build_registry_config(data, _state["project_root"])
    return data, config


def _registry() -> EffectRegistry:
    data, config = _load()
    registry = EffectRegistry(config)
    if _state["audit"]:
        audit = data.get("audit") or {}
        storage = create_audit_storage(data, Path(config.project_root))
        registry.add_observer(AuditLogger(
            storage,
            content_limit=audit.get("content_limit", 1000),
            session_id=audit.get("session_id"),
        ))
    return registry


def _abs(path: Path) -> str:
    """Command-line paths are relative to the CWD, not the project root."""
    return str(path.expanduser().absolute())


def _read_content(content: Optional[str], content_file: Optional[Path]) -> str:
    if content is not None and content_file is not None:
        _fail({"error_type": "invalid_arguments", "message": "Use either --content or --content-file, not both"})
    if content_file is not None:
        return content_file.read_text(encoding="utf-8")
    if content is not None:
        return content
    if not sys.stdin.isatty():
        return sys.stdin.read()
    _fail({"error_type": "missing_argument", "message": "Provide --content, --content-file or pipe content on stdin"})


def _fail(error: Dict[str, Any]) -> None:
    if _state["json"]:
        print(json.dumps({"status": "error", **error}, separators=(",", ":")))
    else:
        console.print(f"[red]Error: {error['message']}[/red]")
    raise typer.Exit(code=1)


def _run(key: str, args: Any) -> Any:
    try:
        return _registry().invoke(key, args, DispatchContext())
    except InscribeError as e:
        _fail(e.to_dict())
    except ValidationError as e:
        _fail({"error_type": "invalid_arguments", "message": str(e)})


def _print_result(result) -> None:
    payload = result.to_dict()
    if _state["json"]:
        print(json.dumps(payload, separators=(",", ":")))
        return

    status = payload.get("status") or ("exists" if payload.get("exists") else "missing")
    console.print(f"[bold]{payload['path']}[/bold] [green]{status}[/green]")

    loc = payload.get("loc")
    if isinstance(loc, dict):
        before = "-" if loc["before"] is None else loc["before"]
        delta = "" if loc["delta"] is None else f" ({loc['delta']:+d})"
        console.print(f"  lines: {before} -> {loc['after']}{delta}")
    elif loc is not None:
        console.print(f"  lines: {loc}")

    threshold = payload.get("threshold")
    if threshold:
        color = "red" if threshold["exceeded"] else "dim"
        console.print(f"  [{color}]threshold: {threshold['limit']} (remaining {threshold['remaining']})[/{color}]")

    module = payload.get("module")
    if isinstance(module, dict):
        console.print(f"  module: {', '.join(module['identifiers'])} ({module['kind']})")
    elif module:
        console.print(f"  module: {module}")

    if payload.get("formatted") is False:
        console.print(f"  [yellow]formatter failed: {payload.get('format_error', {}).get('message', '')}[/yellow]")
    if payload.get("modified_at"):
        console.print(f"  modified: {payload['modified_at']}")


def _pattern(text: str, regex: bool):
    if not regex:
        return text
    try:
        return re.compile(text)
    except re.error as e:
        _fail({"error_type": "invalid_pattern", "message": f"Invalid regex {text!r}: {e}"})


@app.command("write")
def write_cmd(
    path: Path = typer.Argument(..., help="File to write"),
    content: Optional[str] = typer.Option(None, "--content", "-c", help="New content inline"),
    content_file: Optional[Path] = typer.Option(None, "--content-file", "-f", help="Read new content from file", exists=True, dir_okay=False),
    create_dirs: bool = typer.Option(False, "--create-dirs", help="Create missing parent directories"),
    threshold: Optional[int] = typer.Option(None, "--threshold", "-t", help="Line limit to report against"),
):
    """
    Replace the entire content of a file.
    """
    text = _read_content(content, content_file)
    _print_result(_run("write", {
        "path": _abs(path), "content": text, "create_parent_dirs": create_dirs, "threshold": threshold,
    }))


@app.command("append")
def append_cmd(
    path: Path = typer.Argument(..., help="File to append to"),
    content: Optional[str] = typer.Option(None, "--content", "-c", help="Content inline"),
    content_file: Optional[Path] = typer.Option(None, "--content-file", "-f", help="Read content from file", exists=True, dir_okay=False),
    create_dirs: bool = typer.Option(False, "--create-dirs", help="Create missing parent directories"),
    threshold: Optional[int] = typer.Option(None, "--threshold", "-t", help="Line limit to report against"),
):
    """
    Append content verbatim to the end of a file.
    """
    text = _read_content(content, content_file)
    _print_result(_run("append", {
        "path": _abs(path), "content": text, "create_parent_dirs": create_dirs, "threshold": threshold,
    }))


@app.command("insert")
def insert_cmd(
    path: Path = typer.Argument(..., help="Existing file to insert into"),
    content: Optional[str] = typer.Option(None, "--content", "-c", help="Content inline"),
    content_file: Optional[Path] = typer.Option(None, "--content-file", "-f", help="Read content from file", exists=True, dir_okay=False),
    line: Optional[int] = typer.Option(None, "--line", "-l", help="Insert before this 1-indexed line"),
    after: Optional[str] = typer.Option(None, "--after", help="Insert after the first line matching"),
    before: Optional[str] = typer.Option(None, "--before", help="Insert before the first line matching"),
    regex: bool = typer.Option(False, "--regex", help="Treat --after/--before as regular expressions"),
    threshold: Optional[int] = typer.Option(None, "--threshold", "-t", help="Line limit to report against"),
):
    """
    Insert content at a line or next to a matching line.
    """
    text = _read_content(content, content_file)
    at: Dict[str, Any] = {}
    if line is not None:
        at["line"] = line
    if after is not None:
        at["after"] = _pattern(after, regex)
    if before is not None:
        at["before"] = _pattern(before, regex)

    _print_result(_run("insert", {"path": _abs(path), "content": text, "at": at, "threshold": threshold}))


@app.command("replace")
def replace_cmd(
    path: Path = typer.Argument(..., help="Existing file to edit"),
    find: str = typer.Option(..., "--find", help="Text (or regex with --regex) to find"),
    replacement: str = typer.Option(..., "--replacement", help="Replacement text"),
    all_matches: bool = typer.Option(False, "--all", help="Replace every match, not just the first"),
    regex: bool = typer.Option(False, "--regex", help="Treat --find as a regular expression"),
    threshold: Optional[int] = typer.Option(None, "--threshold", "-t", help="Line limit to report against"),
):
    """
    Find and replace within a file.
    """
    _print_result(_run("replace", {
        "path": _abs(path),
        "find": _pattern(find, regex),
        "replacement": replacement,
        "all": all_matches,
        "threshold": threshold,
    }))


@app.command("meta")
def meta_cmd(path: Path = typer.Argument(..., help="File to inspect")):
    """
    Show line count, modification time and module of a file.
    """
    _print_result(_run("read-meta", _abs(path)))


@app.command("effects")
def effects_cmd():
    """
    List registered effects.
    """
    effects = _registry().describe()
    if _state["json"]:
        print(json.dumps(effects, separators=(",", ":")))
        return
    table = Table(title="Effects")
    table.add_column("Key", style="cyan")
    table.add_column("Description")
    for key, description in effects.items():
        table.add_row(key, description)
    console.print(table)


@app.command("history")
def history_cmd(
    file: Optional[str] = typer.Option(None, "--file", help="Only entries for this path (prefix match)"),
    session: Optional[str] = typer.Option(None, "--session", help="Only entries for this session"),
    hours: float = typer.Option(24, "--hours", help="Look back this many hours"),
    only_warnings: bool = typer.Option(False, "--warnings", help="Only entries carrying hints"),
    limit: int = typer.Option(20, "--limit", "-n", help="Max entries"),
):
    """
    Show audit log entries, newest first.
    """
    data, config = _load()
    storage = create_audit_storage(data, Path(config.project_root))

    if file:
        target = Path(file)
        if not target.is_absolute():
            target = Path(config.project_root) / target
        entries = file_history(storage, str(target), limit=limit)
    elif session:
        entries = session_activity(storage, session, limit=limit)
    elif only_warnings:
        entries = warning_entries(storage, hours=hours, limit=limit)
    else:
        entries = recent_activity(storage, hours=hours, limit=limit)

    if _state["json"]:
        print(json.dumps([e.model_dump(mode="json") for e in entries], separators=(",", ":")))
        return

    if not entries:
        console.print("[dim]No audit entries.[/dim]")
        return

    table = Table(title="Audit log")
    table.add_column("Time", style="dim")
    table.add_column("Effect", style="cyan")
    table.add_column("File")
    table.add_column("Status")
    table.add_column("Lines", justify="right")
    for entry in entries:
        loc = entry.result.get("loc")
        lines = str(loc["after"]) if isinstance(loc, dict) else ("" if loc is None else str(loc))
        table.add_row(
            entry.ts.strftime("%Y-%m-%d %H:%M:%S"),
            entry.effect_key,
            entry.file_path or "",
            entry.status,
            lines,
        )
    console.print(table)


if __name__ == "__main__":
    app()
