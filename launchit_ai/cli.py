"""
LaunchIT AI CLI
===============
Run the search and moderation pipeline from a terminal.

Usage
-----
  python -m launchit_ai.cli search "note taking for teams" --catalog projects.json
  python -m launchit_ai.cli moderate "BUY NOW!!! LIMITED TIME!!!"
  python -m launchit_ai.cli embed-catalog projects.json --output projects.embedded.json
  python -m launchit_ai.cli launch-data https://example.com
  python -m launchit_ai.cli suggest --catalog projects.json --index 0
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import cfg
from .errors import EmbeddingUnavailable, LaunchDataError, SuggestionError
from .log import setup_logging
from .moderation import ModerationVerdict
from .search import keyword_search
from .services import Services, build_services

app = typer.Typer(add_completion=False, pretty_exceptions_enable=False)
console = Console()

_ACTION_STYLES = {"approve": "green", "review": "yellow", "reject": "red"}


# ── Helpers ───────────────────────────────────────────────────────────────────

def _services() -> Services:
    setup_logging(cfg.log_level, cfg.log_json)
    return build_services(cfg)


def _load_catalog(path: Path) -> List[Dict[str, Any]]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise typer.BadParameter(f"{path} must contain a JSON list of projects")
    return data


def _print_hits(hits, title="Search Results"):
    if not hits:
        console.print("[dim]No matching projects.[/dim]")
        return
    table = Table(title=title, show_lines=True, highlight=True)
    table.add_column("#", style="dim", width=3)
    table.add_column("Project", style="white")
    table.add_column("Category", style="cyan", width=18)
    table.add_column("Score", style="yellow", width=7)
    table.add_column("Tags", style="green")
    for i, hit in enumerate(hits, 1):
        table.add_row(
            str(i),
            hit.get("name") or hit.get("title") or "",
            hit.get("category_type") or hit.get("category") or "",
            f"{hit['similarity']:.3f}",
            ", ".join(hit.get("tags") or []),
        )
    console.print(table)


def _print_verdict(verdict: ModerationVerdict) -> None:
    style = _ACTION_STYLES.get(verdict.action, "white")
    lines = [f"[bold {style}]{verdict.action.upper()}[/bold {style}]  {verdict.message}"]
    for issue in verdict.issues:
        lines.append(f"[red]•[/red] {issue}")
    for rec in verdict.recommendations:
        lines.append(f"[blue]→[/blue] {rec}")
    console.print(Panel("\n".join(lines), title="[bold]Moderation[/bold]"))


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command()
def search(
    query: str = typer.Argument(..., help="Search text"),
    catalog: Path = typer.Option(..., "--catalog", "-c", exists=True, help="JSON list of projects"),
    limit: int = typer.Option(cfg.search_default_limit, "--limit", "-n", help="Max results"),
):
    """Rank catalog projects by semantic similarity to QUERY."""
    services = _services()
    items = _load_catalog(catalog)
    try:
        with console.status("[dim]Embedding query...[/dim]", spinner="dots"):
            hits = services.search.search(query, items, limit)
        _print_hits(hits, title=f"Top projects for: '{query}'")
    except EmbeddingUnavailable:
        console.print("[yellow]Embeddings unavailable, using keyword search.[/yellow]")
        _print_hits(keyword_search(query, items, limit), title=f"Keyword matches for: '{query}'")


@app.command()
def moderate(content: str = typer.Argument(..., help="Text to moderate")):
    """Print the moderation verdict for CONTENT."""
    services = _services()
    _print_verdict(services.moderator.moderate(content))


@app.command("embed-catalog")
def embed_catalog(
    catalog: Path = typer.Argument(..., exists=True, help="JSON list of projects"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write here instead of in place"),
):
    """Add embeddings to catalog projects that do not have one yet."""
    services = _services()
    items = _load_catalog(catalog)
    embedded = skipped = failed = 0
    for item in items:
        if item.get("embedding"):
            continue
        label = item.get("name") or item.get("id") or "?"
        try:
            item["embedding"] = services.embedder.embed_item(item)
            embedded += 1
            console.print(f"[green]✓[/green] {label}")
        except ValueError:
            skipped += 1
            console.print(f"[yellow]⚠ {label} has no text content, skipping[/yellow]")
        except EmbeddingUnavailable as exc:
            failed += 1
            console.print(f"[red]✗ {label}: {exc}[/red]")

    (output or catalog).write_text(json.dumps(items, indent=2), encoding="utf-8")
    console.print(
        Panel(
            f"embedded: {embedded}   skipped: {skipped}   failed: {failed}",
            title="[bold]Embedding Summary[/bold]",
        )
    )
    if failed:
        raise typer.Exit(code=1)


@app.command("launch-data")
def launch_data(url: str = typer.Argument(..., help="Product URL")):
    """Prefill listing fields from a product page."""
    services = _services()
    try:
        with console.status("[dim]Reading page...[/dim]", spinner="dots"):
            data = services.advisor.generate_launch_data(url)
    except (ValueError, LaunchDataError) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)
    console.print_json(json.dumps(data))


@app.command()
def suggest(
    catalog: Path = typer.Option(..., "--catalog", "-c", exists=True, help="JSON list of projects"),
    index: int = typer.Option(0, "--index", "-i", help="Position of the project in the catalog"),
):
    """Ask the advisor model for improvements to one catalog project."""
    services = _services()
    items = _load_catalog(catalog)
    if not 0 <= index < len(items):
        raise typer.BadParameter(f"index must be between 0 and {len(items) - 1}")
    try:
        result = services.advisor.generate_suggestions(items[index])
    except SuggestionError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)
    console.print_json(json.dumps(result))


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", "--host", help="Bind address"),
    port: int = typer.Option(3001, "--port", "-p", envvar="PORT", help="Bind port"),
):
    """Run the HTTP API."""
    import uvicorn

    setup_logging(cfg.log_level, cfg.log_json)
    uvicorn.run("launchit_ai.api:app", host=host, port=port, log_config=None)


if __name__ == "__main__":
    app()
