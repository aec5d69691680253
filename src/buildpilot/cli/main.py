"""buildpilot command line: parse artifacts, export trees, run builds."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import IO

import click
from rich.prompt import Prompt

from buildpilot import __version__
from buildpilot.application import (
    BuilderService,
    BuildSession,
    PreviewEventEmitter,
    PreviewOrchestrator,
)
from buildpilot.domain.artifact_parser import parse as parse_steps
from buildpilot.domain.models import Phase
from buildpilot.infrastructure import (
    HttpBackend,
    InMemoryPreviewEventStore,
    SandboxRegistry,
    write_tree,
)

from .config import BuilderConfig, apply_overrides, load_config
from .console import (
    console,
    print_error,
    print_header,
    print_preview_events,
    print_preview_result,
    print_steps,
    print_success,
    print_tree,
)
from .exceptions import ConfigurationError
from .logging_setup import setup_logging
from .options import common_options

logger = logging.getLogger(__name__)


@click.group(
    context_settings={"help_option_names": ["-h", "--help"]},
    no_args_is_help=True,
)
@click.version_option(__version__, prog_name="buildpilot")
def cli() -> None:
    """Turn LLM artifact output into a file tree and a live preview."""


def _session_from(text: str) -> BuildSession:
    session = BuildSession()
    session.add_steps(parse_steps(text))
    return session


@cli.command()
@click.argument("source", type=click.File("r"), default="-")
@click.option("--tree", "show_tree", is_flag=True, help="Merge the steps and show the file tree")
@click.option("--json", "as_json", is_flag=True, help="Print steps (and tree) as JSON")
def parse(source: IO[str], show_tree: bool, as_json: bool) -> None:
    """Parse artifact text from SOURCE (default: stdin) into build steps."""
    session = _session_from(source.read())
    if not session.steps:
        print_error("No artifact found", hint="Expected a <boltArtifact> ... </boltArtifact> block")
        sys.exit(1)

    if show_tree:
        session.apply_pending()

    if as_json:
        payload: dict[str, object] = {"steps": [s.to_dict() for s in session.steps]}
        if show_tree:
            payload["tree"] = session.tree.to_nested()
        click.echo(json.dumps(payload, indent=2))
        return

    print_steps(session.steps)
    if show_tree:
        print_tree(session.tree)


@cli.command()
@click.argument("source", type=click.File("r"))
@click.argument("outdir", type=click.Path(file_okay=False))
def export(source: IO[str], outdir: str) -> None:
    """Parse artifact text from SOURCE and write its files under OUTDIR."""
    session = _session_from(source.read())
    tree = session.apply_pending()
    if not len(tree):
        print_error("No files to export", hint="The artifact has no file actions")
        sys.exit(1)

    try:
        written = write_tree(tree, Path(outdir))
    except (OSError, ValueError) as e:
        print_error(f"Export failed: {e}")
        sys.exit(1)
    print_success(f"Wrote {len(written)} file(s) to {outdir}")


@cli.command()
@click.argument("prompt")
@common_options
@click.option("--preview", is_flag=True, help="Run install/dev commands and wait for a URL")
@click.option("--ready-timeout", type=float, default=None, help="Seconds to wait for the preview URL")
@click.option("--serve", is_flag=True, help="Keep the preview running until interrupted")
@click.option("-i", "--interactive", is_flag=True, help="Ask for follow-up prompts")
def build(
    prompt: str,
    config_path: str | None,
    backend_url: str | None,
    sandbox: str | None,
    log_file: str | None,
    verbose: bool,
    preview: bool,
    ready_timeout: float | None,
    serve: bool,
    interactive: bool,
) -> None:
    """Generate a project from PROMPT via the backend."""
    setup_logging("buildpilot", log_file, verbose)

    try:
        config = apply_overrides(
            load_config(Path(config_path) if config_path else None),
            backend_url=backend_url,
            sandbox=sandbox,
            ready_timeout=ready_timeout,
        )
    except ConfigurationError as e:
        print_error(str(e))
        sys.exit(2)

    logger.debug("Loaded config: %s", config)
    print_header("buildpilot", f"Backend: {config.backend.base_url}")
    try:
        code = asyncio.run(_run_build(config, prompt, preview, serve, interactive, verbose))
    except KeyboardInterrupt:
        console.print("[dim]Stopped[/dim]")
        code = 0
    sys.exit(code)


async def _run_build(
    config: BuilderConfig,
    prompt: str,
    preview: bool,
    serve: bool,
    interactive: bool,
    verbose: bool = False,
) -> int:
    backend = HttpBackend(config.backend)
    sandbox = None
    orchestrator = None
    events = InMemoryPreviewEventStore()
    if preview:
        try:
            sandbox = SandboxRegistry.create(config.sandbox, **config.sandbox_options)
        except (KeyError, TypeError) as e:
            print_error(f"Cannot create sandbox '{config.sandbox}': {e}")
            await backend.close()
            return 2
        logger.info("Using sandbox %r with options %s", config.sandbox, config.sandbox_options)
        orchestrator = PreviewOrchestrator(
            sandbox,
            install=config.preview.install_command,
            dev=config.preview.dev_command,
            emitter=PreviewEventEmitter(events, "cli"),
            ready_timeout=config.preview.ready_timeout,
            fail_on_dev_exit=config.preview.fail_on_dev_exit,
        )

    builder = BuilderService(backend, orchestrator=orchestrator)
    try:
        with console.status("Generating project..."):
            ok = await builder.initialize(prompt)
        if not ok:
            print_error(
                "Backend request failed",
                hint=f"Is the backend running at {config.backend.base_url}?",
            )
            return 1
        print_steps(builder.steps)
        print_tree(builder.tree)

        while interactive:
            follow_up = await asyncio.to_thread(
                Prompt.ask, "[bold]Ask for more[/bold] (empty to finish)", default=""
            )
            if not follow_up.strip():
                break
            known = len(builder.steps)
            with console.status("Waiting for the assistant..."):
                ok = await builder.send(follow_up)
            if not ok:
                print_error("Backend request failed")
                continue
            print_steps(builder.steps[known:], title="New Steps")
            print_tree(builder.tree)

        if orchestrator is None:
            return 0

        with console.status("Starting preview..."):
            result = await builder.preview()
        print_preview_result(result)
        if verbose and orchestrator.run_id is not None:
            print_preview_events(events.get_events(orchestrator.run_id))
        if result.phase != Phase.READY:
            return 1
        if serve:
            console.print("[dim]Serving preview, press Ctrl+C to stop[/dim]")
            await asyncio.Event().wait()
        return 0
    finally:
        if orchestrator is not None:
            await orchestrator.close()
        if sandbox is not None:
            await sandbox.close()
        await backend.close()


def main() -> None:
    cli()
