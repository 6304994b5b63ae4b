"""CLI entry point for FormPilot."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from formpilot.form_filler import SmartFormFiller
from formpilot.models.config import FormPilotConfig, LoginConfig
from formpilot.models.recording import load_action_log
from formpilot.models.results import FillResult, FormAnalysis, NavigationResult
from formpilot.recorder.action_recorder import ActionRecorder
from formpilot.recorder.script_generator import SCRIPT_FORMATS, ScriptGenerator

console = Console()

DEFAULT_CONFIG_PATH = "formpilot.json"

DEFAULT_SCRIPT_PATHS = {
    "playwright": "generated-playwright-script.py",
    "formpilot": "generated-formpilot-script.py",
}


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _load_config(path: Optional[str]) -> FormPilotConfig:
    """Load ``path``; without one, use formpilot.json when present, else defaults."""
    if path is None:
        if not Path(DEFAULT_CONFIG_PATH).exists():
            return FormPilotConfig()
        path = DEFAULT_CONFIG_PATH
    try:
        return FormPilotConfig.load(path)
    except FileNotFoundError:
        console.print(f"[red]Config file not found: {path}[/red]")
        console.print("Run 'formpilot init' to create a default config.")
        sys.exit(1)


def _parse_custom_data(data: Optional[str], data_file: Optional[str]) -> dict:
    custom: dict = {}
    try:
        if data_file:
            custom.update(json.loads(Path(data_file).read_text(encoding="utf-8")))
        if data:
            custom.update(json.loads(data))
    except (OSError, json.JSONDecodeError) as e:
        raise click.BadParameter(f"Could not read field data: {e}")
    return custom


def _formats(fmt: str) -> list[str]:
    return list(SCRIPT_FORMATS) if fmt == "both" else [fmt]


def _print_fill(result: FillResult) -> None:
    table = Table(title="Fill Result")
    table.add_column("Metric", style="bold")
    table.add_column("Value")
    status = "[green]yes[/green]" if result.success else "[red]no[/red]"
    table.add_row("Success", status)
    table.add_row("Filled", f"{result.filled}/{result.total}")
    table.add_row("Failed", f"[red]{len(result.failed)}[/red]" if result.failed else "0")
    table.add_row("Skipped", f"[yellow]{len(result.skipped)}[/yellow]" if result.skipped else "0")
    console.print(table)
    if result.diagnostics and result.diagnostics.screenshot_path:
        console.print(f"  Screenshot: [blue]{result.diagnostics.screenshot_path}[/blue]")


def _print_analysis(analysis: FormAnalysis) -> None:
    table = Table(title=f"Form Analysis ({analysis.total_fields} fields, {analysis.required_fields} required)")
    table.add_column("Name", style="bold")
    table.add_column("Type")
    table.add_column("Label")
    table.add_column("Required")
    table.add_column("Confidence")
    for f in analysis.fields:
        table.add_row(f.name or "-", f.type, f.label or "-", "yes" if f.required else "", f.confidence)
    console.print(table)


def _print_navigation(result: NavigationResult) -> None:
    color = "green" if result.landed else "yellow"
    console.print(
        f"[{color}]Navigation {result.outcome.value}[/{color}] after {result.steps_taken} steps: "
        f"{result.final_url}"
    )


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--config", "-c", default=None, help=f"Config file path (default: {DEFAULT_CONFIG_PATH} if present)")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config: Optional[str]) -> None:
    """FormPilot: fill, navigate and record arbitrary web forms."""
    setup_logging(verbose)
    ctx.obj = {"config_path": config}


@cli.command()
@click.option("--output", "-o", default=DEFAULT_CONFIG_PATH, help="Where to write the config")
def init(output: str) -> None:
    """Create a default configuration file."""
    config_path = Path(output)
    if config_path.exists():
        if not click.confirm(f"{config_path} already exists. Overwrite?"):
            return
    FormPilotConfig().save(config_path)
    console.print(f"[green]Created {config_path}[/green]")
    console.print("\nYou can now customize this file and run:")
    console.print("  [blue]formpilot fill https://example.com/signup[/blue]")


@cli.command()
@click.argument("url")
@click.option("--data", "-d", default=None, help="JSON object of field overrides")
@click.option("--data-file", default=None, help="JSON file of field overrides")
@click.option("--submit", "do_submit", is_flag=True, help="Submit the form after filling")
@click.option("--submit-selector", default=None, help="Selector of the submit button")
@click.option("--analyze", is_flag=True, help="Print the form analysis before filling")
@click.option("--navigate", is_flag=True, help="Auto-navigate after submitting")
@click.option("--wait-for", default=None, help="Selector to wait for before filling")
@click.pass_context
def fill(
    ctx: click.Context,
    url: str,
    data: Optional[str],
    data_file: Optional[str],
    do_submit: bool,
    submit_selector: Optional[str],
    analyze: bool,
    navigate: bool,
    wait_for: Optional[str],
) -> None:
    """Detect and fill the form at URL."""
    cfg = _load_config(ctx.obj["config_path"])
    custom_data = _parse_custom_data(data, data_file)

    async def _run():
        async with SmartFormFiller(cfg) as filler:
            return await filler.automate(
                url,
                custom_data=custom_data,
                wait_for=wait_for,
                analyze=analyze,
                submit=do_submit or bool(submit_selector),
                submit_selector=submit_selector,
                navigate=navigate,
            )

    result = asyncio.run(_run())
    if result.error:
        console.print(f"[red]Automation failed:[/red] {result.error}")
        sys.exit(1)
    if result.analysis:
        _print_analysis(result.analysis)
    _print_fill(result.fill)
    if do_submit or submit_selector:
        console.print("[green]Submitted[/green]" if result.submitted else "[yellow]No submit button found[/yellow]")
    if result.navigation:
        _print_navigation(result.navigation)
    if not result.success:
        sys.exit(1)


@cli.command()
@click.argument("url")
@click.option("--json-output", is_flag=True, help="Print the analysis as JSON")
@click.pass_context
def analyze(ctx: click.Context, url: str, json_output: bool) -> None:
    """Detect and classify the fields at URL without filling them."""
    cfg = _load_config(ctx.obj["config_path"])

    async def _run() -> FormAnalysis:
        async with SmartFormFiller(cfg) as filler:
            await filler.goto(url)
            return await filler.analyze_form()

    analysis = asyncio.run(_run())
    if json_output:
        console.print_json(analysis.model_dump_json())
    else:
        _print_analysis(analysis)


@cli.command()
@click.argument("url")
@click.option("--max-steps", default=None, type=int, help="Step budget (default from config)")
@click.pass_context
def navigate(ctx: click.Context, url: str, max_steps: Optional[int]) -> None:
    """Open URL and walk agreement/continue steps until a landing page."""
    cfg = _load_config(ctx.obj["config_path"])

    async def _run() -> NavigationResult:
        async with SmartFormFiller(cfg) as filler:
            await filler.goto(url)
            return await filler.auto_navigate(max_steps)

    result = asyncio.run(_run())
    _print_navigation(result)
    for i, step in enumerate(result.history, 1):
        label = f" '{step.button_label}'" if step.button_label else ""
        console.print(f"  {i}. {step.action}{label} on {step.page_url}")


@cli.command()
@click.argument("url")
@click.option("--username", "-u", required=True, help="Username or email")
@click.option("--password", "-p", required=True, help="Password, or env:VAR to read it from the environment")
@click.option("--no-navigate", is_flag=True, help="Stop after submitting credentials")
@click.pass_context
def login(ctx: click.Context, url: str, username: str, password: str, no_navigate: bool) -> None:
    """Sign in at URL and continue through post-login steps."""
    cfg = _load_config(ctx.obj["config_path"])
    try:
        login_cfg = LoginConfig(login_url=url, username=username, password=password, auto_navigate=not no_navigate)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    async def _run():
        async with SmartFormFiller(cfg) as filler:
            return await filler.login(login_cfg)

    result = asyncio.run(_run())
    if result.navigation:
        _print_navigation(result.navigation)
    if result.success:
        console.print(f"[green]Logged in:[/green] {result.post_login_url}")
        return
    console.print(f"[red]Login failed:[/red] {result.error}")
    if result.diagnostics and result.diagnostics.screenshot_path:
        console.print(f"  Screenshot: [blue]{result.diagnostics.screenshot_path}[/blue]")
    sys.exit(1)


@cli.command()
@click.argument("url")
@click.option("--keep-passwords", is_flag=True, help="Store password values in plain text")
@click.option("--format", "fmt", type=click.Choice([*SCRIPT_FORMATS, "both"]), default="both",
              help="Script format to generate")
@click.option("--output", "-o", default=None, help="Script path (single format only)")
@click.option("--actions-file", default=None, help="Where to save the action log")
@click.pass_context
def record(
    ctx: click.Context,
    url: str,
    keep_passwords: bool,
    fmt: str,
    output: Optional[str],
    actions_file: Optional[str],
) -> None:
    """Record your actions at URL until the browser closes or Ctrl+C."""
    cfg = _load_config(ctx.obj["config_path"])
    cfg.browser.headless = False
    keep = keep_passwords or cfg.recorder.keep_passwords
    actions_path = Path(actions_file or cfg.recorder.actions_file)

    async def _run() -> ActionRecorder:
        async with SmartFormFiller(cfg) as filler:
            await filler.goto(url)
            recorder = ActionRecorder(filler.page, keep_passwords=keep,
                                      poll_interval_ms=cfg.recorder.poll_interval_ms)
            await recorder.start_recording()
            console.print("[bold]Recording.[/bold] Interact with the page; close the browser or press Ctrl+C to stop.")
            try:
                await filler.page.wait_for_event("close", timeout=0)
            finally:
                await recorder.stop_recording()
                recorder.save_to_file(actions_path)
                _save_scripts(recorder.generate_script, fmt, output)
            return recorder

    try:
        recorder = asyncio.run(_run())
    except KeyboardInterrupt:
        console.print(f"\n[yellow]Recording interrupted; actions saved to {actions_path}[/yellow]")
        return

    summary = recorder.summary()
    table = Table(title=f"Recording Summary ({summary['total']} actions)")
    table.add_column("Action", style="bold")
    table.add_column("Count")
    for action_type, count in summary["by_type"].items():
        table.add_row(action_type, str(count))
    console.print(table)
    for key, value in summary["fields"].items():
        console.print(f"  {key}: {value}")


def _save_scripts(generate, fmt: str, output: Optional[str]) -> None:
    for script_format in _formats(fmt):
        path = Path(output if output and fmt != "both" else DEFAULT_SCRIPT_PATHS[script_format])
        path.write_text(generate(script_format), encoding="utf-8")
        console.print(f"[green]Saved {script_format} script:[/green] [blue]{path}[/blue]")


@cli.command()
@click.option("--actions-file", default=None, help="Saved action log (default from config)")
@click.option("--format", "fmt", type=click.Choice([*SCRIPT_FORMATS, "both"]), default="both",
              help="Script format to generate")
@click.option("--output", "-o", default=None, help="Script path (single format only)")
@click.pass_context
def regenerate(ctx: click.Context, actions_file: Optional[str], fmt: str, output: Optional[str]) -> None:
    """Regenerate scripts from a saved action log."""
    cfg = _load_config(ctx.obj["config_path"])
    path = actions_file or cfg.recorder.actions_file
    try:
        actions = load_action_log(path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    console.print(f"Loaded {len(actions)} actions from {path}")
    _save_scripts(ScriptGenerator(actions).generate, fmt, output)


if __name__ == "__main__":
    cli()
