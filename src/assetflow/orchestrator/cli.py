from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List, Optional

import typer
from dotenv import find_dotenv, load_dotenv

from .config import DEFAULT_CONFIG, FEATURES, BuildConfig, ConfigError, load_config
from .core import Runnable, TaskResult
from .logging import attach_log_file, get_logger
from .pipeline import MissingTasksError, Pipelines, discover_tasks


app = typer.Typer(add_completion=False, help="Front-end asset build orchestrator CLI")
log = get_logger("assetflow.cli")

ConfigOpt = typer.Option(DEFAULT_CONFIG, "--config", help="Path to YAML config")
DisableOpt = typer.Option(
    None, "--disable", help=f"Turn a feature off for this run ({', '.join(FEATURES)})"
)
LogFileOpt = typer.Option(None, "--log-file", help="Also write logs to this file")


def _load(config: str, disable: Optional[List[str]], log_file: Optional[Path]) -> BuildConfig:
    load_dotenv(find_dotenv(usecwd=True))
    if log_file:
        attach_log_file(log_file)
    try:
        return load_config(config, disabled=disable or [])
    except ConfigError as e:
        typer.echo(f"Config error: {e}", err=True)
        raise typer.Exit(code=2)


def _pipelines(cfg: BuildConfig) -> Pipelines:
    try:
        return Pipelines(cfg)
    except MissingTasksError as e:
        typer.echo(
            f"{e}\nCheck that their modules under assetflow/tasks/ import cleanly.",
            err=True,
        )
        raise typer.Exit(code=1)


def _report(result: TaskResult) -> None:
    if result.ok:
        typer.echo(f"{result.name}: ok")
        return
    typer.echo(f"{result.name}: failed", err=True)
    for name in result.failed:
        typer.echo(f"  - {name}", err=True)
    raise typer.Exit(code=1)


def _run(target: Runnable) -> None:
    _report(asyncio.run(target.run()))


def _command(name: str):
    def run(
        config: str = ConfigOpt,
        disable: Optional[List[str]] = DisableOpt,
        log_file: Optional[Path] = LogFileOpt,
    ):
        cfg = _load(config, disable, log_file)
        _run(_pipelines(cfg).command(name))

    run.__doc__ = f"Run the `{name}` composite."
    return run


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    config: str = ConfigOpt,
    disable: Optional[List[str]] = DisableOpt,
    log_file: Optional[Path] = LogFileOpt,
):
    """Without a command, run the full build."""
    if ctx.invoked_subcommand is None:
        cfg = _load(config, disable, log_file)
        _run(_pipelines(cfg).default)


@app.command("build")
def build(
    config: str = ConfigOpt,
    disable: Optional[List[str]] = DisableOpt,
    log_file: Optional[Path] = LogFileOpt,
):
    """Clean, then build every asset class in parallel."""
    cfg = _load(config, disable, log_file)
    _run(_pipelines(cfg).default)


for _name in ("scripts", "styles", "assets", "copy", "copy-libs"):
    app.command(_name)(_command(_name))


async def _watch(pipes: Pipelines) -> TaskResult:
    result = await pipes.watch.run()
    if not result.ok:
        return result
    typer.echo("Watching for changes. Press Ctrl-C to stop.")
    try:
        await asyncio.Event().wait()
    finally:
        pipes.shutdown()
    return result


@app.command("watch")
def watch(
    config: str = ConfigOpt,
    disable: Optional[List[str]] = DisableOpt,
    log_file: Optional[Path] = LogFileOpt,
):
    """Build once, serve the output with live reload, rebuild on change."""
    cfg = _load(config, disable, log_file)
    pipes = _pipelines(cfg)
    try:
        result = asyncio.run(_watch(pipes))
    except KeyboardInterrupt:
        log.info("Stopped watching")
        return
    _report(result)


@app.command("list")
def list_tasks(config: str = ConfigOpt):
    """List discovered tasks and the feature that gates each."""
    cfg = _load(config, None, None)
    specs = discover_tasks()
    if not specs:
        typer.echo("No tasks discovered. Add modules under assetflow/tasks/ decorated with @task().")
        raise typer.Exit(code=0)
    typer.echo("Discovered tasks:")
    for name in sorted(specs.keys()):
        feature = specs[name].feature
        state = "on" if cfg.settings.enabled(feature) else "off"
        typer.echo(f"- {name} [{feature or 'always'}: {state}]")


def main():  # pragma: no cover
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
