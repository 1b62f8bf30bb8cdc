"""Command-line interface for Nightwatch."""

from __future__ import annotations

import json
import sys
from dataclasses import replace
from pathlib import Path

import click

from nightwatch import __version__
from nightwatch.config import load_config, save_config, set_config_value
from nightwatch.exceptions import ConfigError, NightwatchError
from nightwatch.logging_config import setup_logging
from nightwatch.ui.console import Console

console = Console()


def _get_project_root(path: str | None = None) -> Path:
    """Resolve the repository root or error."""
    root = Path(path or ".").resolve()
    if not root.exists():
        console.error(f"Path does not exist: {path}")
        sys.exit(1)
    return root


def _load_config_or_exit(root: Path, apply_env: bool = True):
    try:
        return load_config(root, apply_env=apply_env)
    except ConfigError as e:
        console.error(str(e))
        sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="nightwatch")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.option("--quiet", "-q", is_flag=True, help="Only log errors.")
def main(verbose: bool, quiet: bool):
    """Nightwatch - heuristic risk reports for pull requests."""
    setup_logging(verbose=verbose, quiet=quiet)


@main.command()
@click.option("--path", "-p", default=None, help="Path to the repository root.")
@click.option("--event", "event_path", default=None, help="GitHub event payload (default: $GITHUB_EVENT_PATH).")
@click.option("--base", "-b", default=None, help="Base branch (default: the PR's base, or main).")
@click.option("--local", is_flag=True, help="Use only the local git diff; skip GitHub.")
@click.option("--pr", "pr_number", default=None, type=int, help="PR number shown in a local report.")
@click.option(
    "--format", "output_format",
    type=click.Choice(["markdown", "json", "github-comment"]),
    default="markdown",
    help="Output format.",
)
def report(
    path: str | None, event_path: str | None, base: str | None,
    local: bool, pr_number: int | None, output_format: str,
):
    """Build the PR risk report.

    Usage in CI (posts or updates the PR comment):

        nightwatch report --format github-comment

    Local usage:

        nightwatch report --local --base main
    """
    from nightwatch.context import RunContext
    from nightwatch.github.bot import build_report, developer_state, load_event, run_pr_report
    from nightwatch.github.client import GhClient
    from nightwatch.github.git_history import GitRepository
    from nightwatch.report import render_report

    root = _get_project_root(path)
    config = _load_config_or_exit(root)
    repo = GitRepository(root)

    try:
        if local:
            ctx = RunContext(config=config, history=repo)
            result_report = build_report(ctx, pr_number, base or "main")
            result = {"comment": render_report(result_report), "report": result_report, "action": None}
        else:
            event = load_event(event_path)
            if not event.is_pr:
                state = developer_state(RunContext(config=config, history=repo))
                console.raw(
                    f"Developer State: fatigue={str(state.fatigue).lower()} "
                    f"lateWeek={state.late_week_count}"
                )
                return
            if base:
                event = replace(event, base_ref=base)
            repo.fetch_base(event.base_ref)
            client = GhClient(event.repo)
            ctx = RunContext(config=config, history=repo, changes=client)
            sink = client if output_format == "github-comment" else None
            result = run_pr_report(ctx, event, sink=sink)
    except NightwatchError as e:
        console.error(str(e))
        sys.exit(1)

    if output_format == "json":
        payload = result["report"].to_dict()
        payload["comment"] = result["comment"]
        click.echo(json.dumps(payload, indent=2, default=str))
    else:
        click.echo(result["comment"])
        if result["action"]:
            console.success(f"PR Nightwatch comment {result['action']}")


@main.command()
@click.option("--path", "-p", default=None, help="Path to the repository root.")
def fatigue(path: str | None):
    """Show the late-night commit signal for the current branch."""
    from nightwatch.context import RunContext
    from nightwatch.github.bot import developer_state
    from nightwatch.github.git_history import GitRepository

    root = _get_project_root(path)
    config = _load_config_or_exit(root)

    try:
        state = developer_state(RunContext(config=config, history=GitRepository(root)))
    except NightwatchError as e:
        console.error(str(e))
        sys.exit(1)
    console.show_fatigue(state, config.fatigue.timezone)


@main.command()
@click.argument("files", nargs=-1)
@click.option("--path", "-p", default=None, help="Path to the repository root.")
@click.option("--base", "-b", default="main", help="Base branch when no files are given.")
@click.option("--patterns", "patterns_file", default=None, help="Pattern override file.")
def scan(files: tuple[str, ...], path: str | None, base: str, patterns_file: str | None):
    """Check files for sensitive artifacts.

    With no FILES, scans the local diff against --base.
    """
    from nightwatch.github.git_history import GitRepository
    from nightwatch.patterns import load_patterns
    from nightwatch.signals import scan as scan_files

    root = _get_project_root(path)
    config = _load_config_or_exit(root)
    pattern_set = load_patterns(patterns_file or config.patterns_file)

    statuses: dict[str, str] = {}
    paths = list(files)
    if not paths:
        try:
            changed = GitRepository(root).changed_files(base)
        except NightwatchError as e:
            console.error(str(e))
            sys.exit(1)
        paths = [f.path for f in changed]
        statuses = {f.path: f.status for f in changed}
        console.info(f"Scanning {len(paths)} changed files against origin/{base}")

    findings = scan_files(pattern_set, paths, statuses)
    console.show_findings(findings)
    if findings:
        sys.exit(2)


@main.command()
@click.option("--path", "-p", default=None, help="Path to the repository root.")
@click.option("--patterns", "patterns_file", default=None, help="Pattern override file.")
def patterns(path: str | None, patterns_file: str | None):
    """Show the active sensitive-file patterns."""
    from nightwatch.patterns import load_patterns, resolve_patterns_path

    root = _get_project_root(path)
    config = _load_config_or_exit(root)
    override = patterns_file or config.patterns_file
    source_path = resolve_patterns_path(override)
    source = str(source_path) if source_path.is_file() else "built-in"
    console.show_patterns(load_patterns(override), source)


@main.command("config")
@click.argument("action", type=click.Choice(["set", "get", "show"]))
@click.argument("key", required=False)
@click.argument("value", required=False)
@click.option("--path", "-p", default=None, help="Path to the repository root.")
def config_cmd(action: str, key: str | None, value: str | None, path: str | None):
    """Manage Nightwatch configuration."""
    root = _get_project_root(path)
    config = _load_config_or_exit(root, apply_env=(action != "set"))

    if action == "show":
        console.console.print_json(json.dumps(config.model_dump(mode="json"), indent=2))
    elif action == "get":
        if not key:
            console.error("Usage: nightwatch config get <key>")
            sys.exit(1)
        data = config.model_dump(mode="json")
        for part in key.split("."):
            if isinstance(data, dict) and part in data:
                data = data[part]
            else:
                console.error(f"Unknown key: {key}")
                sys.exit(1)
        console.console.print(f"{key} = {data}")
    elif action == "set":
        if not key or value is None:
            console.error("Usage: nightwatch config set <key> <value>")
            sys.exit(1)
        # Try to parse as JSON for non-string values
        try:
            parsed_value = json.loads(value)
        except json.JSONDecodeError:
            parsed_value = value
        try:
            config = set_config_value(config, key, parsed_value)
        except KeyError:
            console.error(f"Unknown config key: {key}")
            sys.exit(1)
        except ConfigError as e:
            console.error(str(e))
            sys.exit(1)
        save_config(root, config)
        console.success(f"Set {key} = {parsed_value}")


if __name__ == "__main__":
    main()
