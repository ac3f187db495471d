"""Rich console output and JSON rendering for review results."""

import json

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.rule import Rule
from rich.text import Text

from peer_review.models import ReviewResult

console = Console(legacy_windows=False)


def review_sections(result: ReviewResult, label_a: str, label_b: str) -> list[tuple[str, str]]:
    """(title, body) pairs in display order."""
    return [
        (f"{label_a}'s response", result.initial_response_a),
        (f"{label_b}'s response", result.initial_response_b),
        (f"{label_a}'s critique of {label_b}", result.critique_a_of_b),
        (f"{label_b}'s critique of {label_a}", result.critique_b_of_a),
        ("Summary", result.summary),
    ]


def print_review(result: ReviewResult, label_a: str, label_b: str) -> None:
    """Print the full review using Rich markdown panels."""
    console.print(Rule("[bold green]Peer Review[/bold green]"))
    console.print(Text(f"Prompt: {result.prompt}", style="dim"))
    for title, body in review_sections(result, label_a, label_b):
        console.print(
            Panel(
                Markdown(body) if body else Text("(empty response)", style="dim"),
                title=f"[bold]{title}[/bold]",
                border_style="green" if title == "Summary" else "dim",
            )
        )


def print_command_output(title: str, text: str) -> None:
    console.print(Rule(f"[bold cyan]{title}[/bold cyan]"))
    console.print(Markdown(text) if text else Text("(empty response)", style="dim"))
    console.print(Rule(f"[dim]End {title}[/dim]"))


def render_json(result: ReviewResult) -> str:
    return json.dumps(result.to_dict(), indent=2, ensure_ascii=False)
