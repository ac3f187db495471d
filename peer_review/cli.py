"""Click CLI: full peer review pipeline, single-call review commands, API server."""

import asyncio
import logging
import sys
from pathlib import Path
from typing import NoReturn

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from config.config_loader import AppConfig, load_config
from peer_review.commands import COMMAND_TITLES, Command, read_context_file, read_debate_file, run_command
from peer_review.errors import ReviewError
from peer_review.invoker import ProviderInvoker
from peer_review.models import Prompt, ReviewResult, StageOutput
from peer_review.output import console, print_command_output, print_review, render_json
from peer_review.pipeline import run_review
from peer_review.providers.factory import build_providers, build_review_roles


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        # stderr, so `ask --json` output stays parseable
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)],
    )


def _fail(message: str) -> NoReturn:
    console.print(f"[bold red]Error:[/bold red] {message}", markup=True, highlight=False)
    sys.exit(1)


async def _run_pipeline(config: AppConfig, prompt: Prompt, show_progress: bool) -> ReviewResult:
    providers = build_providers(config, config.pipeline_provider_names())
    reviewers, summarizer = build_review_roles(config, providers)
    invoker = ProviderInvoker(config.defaults.retry_delay_sec)

    if not show_progress:
        return await run_review(prompt, reviewers, summarizer, config.prompts, invoker=invoker)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Stage 1: initial responses...", total=None)
        next_description = {1: "Stage 2: critiques...", 2: "Stage 3: summary..."}

        def on_stage_complete(stage: int, outputs: dict[str, StageOutput]) -> None:
            progress.print(f"[green]OK[/green] Stage {stage} complete ({len(outputs)} response(s))")
            if stage in next_description:
                progress.update(task, description=next_description[stage])

        return await run_review(
            prompt, reviewers, summarizer, config.prompts,
            invoker=invoker, on_stage_complete=on_stage_complete,
        )


@click.group()
@click.option("--verbose", is_flag=True, help="Enable DEBUG-level logging")
@click.option(
    "--settings", "settings_path", default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to settings.yaml (default: bundled config/settings.yaml)",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool, settings_path: Path | None) -> None:
    """LLM Peer Review -- two models answer, critique each other, and a neutral summary follows.

    \b
    Examples:
      peer-review ask "What is the CAP theorem?"
      peer-review ask --file prompt.md --json
      peer-review review --context-file plan.md --review-type plan
      peer-review respond --context-file plan.md --debate-file debate.md
      peer-review summary --context-file plan.md --debate-file debate.md
      peer-review serve --port 8000
    """
    # Reconfigure stdout/stderr to UTF-8 on Windows so model responses containing
    # Unicode chars don't crash the ANSI render path.
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8", errors="replace")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8", errors="replace")

    load_dotenv(".env.local")
    load_dotenv()
    _setup_logging(verbose)

    try:
        ctx.obj = load_config(settings_path) if settings_path else load_config()
    except FileNotFoundError as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        sys.exit(1)


@main.command()
@click.argument("prompt", required=False)
@click.option("--file", "prompt_file", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="Read the prompt from a file")
@click.option("--json", "as_json", is_flag=True, help="Print the result record as JSON")
@click.pass_obj
def ask(config: AppConfig, prompt: str | None, prompt_file: Path | None, as_json: bool) -> None:
    """Run the full review pipeline for PROMPT."""
    raw = prompt_file.read_text(encoding="utf-8") if prompt_file else prompt
    if raw is None:
        _fail("Provide a PROMPT argument or --file.")

    try:
        parsed = Prompt.parse(raw, config.defaults.prompt_max_chars)
        result = asyncio.run(_run_pipeline(config, parsed, show_progress=not as_json))
    except ReviewError as exc:
        _fail(exc.user_message)

    if as_json:
        click.echo(render_json(result))
        return

    label_a, label_b = (config.models[name].label for name in config.defaults.reviewers)
    print_review(result, label_a, label_b)


def _run_single_command(
    config: AppConfig,
    command: Command,
    context_file: Path,
    debate_file: Path | None,
    review_type: str | None,
    provider_name: str | None,
) -> None:
    name = provider_name or config.defaults.cli_provider
    try:
        context = read_context_file(context_file)
        debate = read_debate_file(debate_file) if debate_file else None
        provider = build_providers(config, [name])[name]
        label = config.models[name].label
        effective_review_type = review_type or context.review_type or config.defaults.review_type
        text = asyncio.run(
            run_command(
                command, provider, config.prompts, context.text,
                review_type=effective_review_type,
                debate=debate,
                reviewer=label,
                invoker=ProviderInvoker(config.defaults.retry_delay_sec),
            )
        )
    except ReviewError as exc:
        _fail(exc.user_message)

    print_command_output(COMMAND_TITLES[command].format(reviewer=label), text)


_context_option = click.option(
    "--context-file", required=True, type=click.Path(dir_okay=False, path_type=Path),
    help="File with the content under review",
)
_debate_option = click.option(
    "--debate-file", default=None, type=click.Path(dir_okay=False, path_type=Path),
    help="File with the debate history",
)
_provider_option = click.option(
    "--provider", "provider_name", default=None,
    help="Provider from settings.yaml (default: defaults.cli_provider)",
)


@main.command()
@_context_option
@click.option("--review-type", default=None, help="What is reviewed: plan, code, branch, feature (default: code)")
@_provider_option
@click.pass_obj
def review(config: AppConfig, context_file: Path, review_type: str | None, provider_name: str | None) -> None:
    """Get an initial peer review of a document."""
    _run_single_command(config, Command.REVIEW, context_file, None, review_type, provider_name)


@main.command()
@_context_option
@_debate_option
@_provider_option
@click.pass_obj
def respond(config: AppConfig, context_file: Path, debate_file: Path | None, provider_name: str | None) -> None:
    """Get the reviewer's response to the author's latest points."""
    _run_single_command(config, Command.RESPOND, context_file, debate_file, None, provider_name)


@main.command()
@_context_option
@_debate_option
@_provider_option
@click.pass_obj
def summary(config: AppConfig, context_file: Path, debate_file: Path | None, provider_name: str | None) -> None:
    """Summarize a finished review debate."""
    _run_single_command(config, Command.SUMMARY, context_file, debate_file, None, provider_name)


@main.command()
@click.option("--host", default=None, help="Bind address (default: from config)")
@click.option("--port", default=None, type=int, help="Port (default: from config)")
@click.pass_obj
def serve(config: AppConfig, host: str | None, port: int | None) -> None:
    """Serve POST /api/review over HTTP."""
    import uvicorn

    from peer_review.api import create_app

    uvicorn.run(
        create_app(config),
        host=host or config.server.host,
        port=port or config.server.port,
    )


if __name__ == "__main__":
    main()
