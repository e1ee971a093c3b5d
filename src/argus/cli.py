"""
Argus CLI

search, docs
"""

import json
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn
from rich.table import Table

from argus.exceptions import ArgusError
from argus.logging_config import logger, reset_logging, setup_logging
from argus.retrieval import DocumentationStore, VectorSearchService
from argus.scanner import list_files
from argus.schemas import DependencyGraph, IngestionProgress
from argus.user_config import UserConfig

app = typer.Typer(help="Argus: hybrid semantic + dependency-graph code retrieval.")
console = Console()
err_console = Console(stderr=True)


@app.callback()
def global_options(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging on stderr."),
    log_dir: Optional[Path] = typer.Option(
        None, "--log-dir", help="Also write argus.log to this directory.", file_okay=False
    ),
):
    """
    Argus: find the files that matter for a natural-language query.
    """
    if verbose or log_dir is not None:
        reset_logging()
        setup_logging(
            level="DEBUG" if verbose else "INFO",
            enable_file_logging=True if log_dir is not None else None,
            log_dir=log_dir,
        )


def _load_graph(graph_path: Optional[Path]) -> Optional[DependencyGraph]:
    if graph_path is None:
        return None
    try:
        return DependencyGraph.model_validate_json(graph_path.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as e:
        err_console.print(f"[red]Error: could not load dependency graph '{escape(str(graph_path))}': {escape(str(e))}[/red]")
        raise typer.Exit(code=1)


def _fail(error: Exception) -> None:
    logger.debug(f"Command failed: {type(error).__name__}: {error}")
    err_console.print(f"[red]Error: {escape(str(error))}[/red]")
    raise typer.Exit(code=1)


@app.command("search")
def search(
    query: str = typer.Argument(..., help="Natural-language query."),
    root: Path = typer.Argument(Path("."), help="Project root to index.", file_okay=False),
    top_k: Optional[int] = typer.Option(None, "--top-k", "-k", help="Number of primary results."),
    threshold: Optional[float] = typer.Option(None, "--threshold", "-t", help="Minimum cosine similarity."),
    max_file_size: Optional[int] = typer.Option(None, "--max-file-size", help="Characters kept per file."),
    extensions: Optional[List[str]] = typer.Option(None, "--ext", "-e", help="Extension allowlist (repeatable)."),
    excludes: Optional[List[str]] = typer.Option(None, "--exclude", "-x", help="Exclude substring (repeatable)."),
    provider: Optional[str] = typer.Option(None, "--provider", "-p", help="Embeddings provider: local, openai, google."),
    model: Optional[str] = typer.Option(None, "--model", help="Remote embeddings model name."),
    graph_path: Optional[Path] = typer.Option(
        None, "--graph", "-g", help="Dependency graph JSON used to expand results.", dir_okay=False
    ),
    json_output: bool = typer.Option(False, "--json", help="Output results as JSON for agents."),
):
    """
    Index ROOT and return the files most relevant to QUERY.

    Examples:
      argus search "authentication logic" ./my-project
      argus search "database access" . --ext .py --top-k 3 --json
    """
    user_config = UserConfig(root)
    try:
        search_config = user_config.search_config(
            top_k=top_k,
            similarity_threshold=threshold,
            max_file_size=max_file_size,
            include_extensions=extensions or None,
            exclude_patterns=excludes or None,
        )
        embeddings_config = user_config.embeddings_config(provider=provider, model=model)
    except ArgusError as e:
        _fail(e)

    graph = _load_graph(graph_path)

    try:
        file_paths = list_files(root, extensions=search_config.include_extensions)

        if json_output:
            service = VectorSearchService(root, dependency_graph=graph, embeddings=embeddings_config)
            service.initialize(file_paths, search_config)
        else:
            with Progress(
                TextColumn("[bold blue]{task.description}"),
                BarColumn(),
                TaskProgressColumn(),
                console=err_console,
                transient=True,
            ) as progress:
                task = progress.add_task("Loading", total=max(len(file_paths), 1))

                def on_progress(event: IngestionProgress) -> None:
                    progress.update(
                        task, description=event.stage.capitalize(), completed=event.processed, total=max(event.total, 1)
                    )

                service = VectorSearchService(
                    root, dependency_graph=graph, embeddings=embeddings_config, progress_callback=on_progress
                )
                service.initialize(file_paths, search_config)

        results = service.search_files(query, search_config)
    except ArgusError as e:
        _fail(e)

    if json_output:
        payload = [
            {
                "path": r.path,
                "relevance_score": round(r.relevance_score, 4),
                "size": r.size,
                "truncated": r.truncated,
            }
            for r in results
        ]
        typer.echo(json.dumps(payload, indent=2))
        return

    if not results:
        console.print(f"[yellow]No files matched '{escape(query)}'.[/yellow]")
        return

    table = Table(title=f"Results for '{escape(query)}'")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Path", style="cyan")
    table.add_column("Score", justify="right", style="magenta")
    table.add_column("Size", justify="right")
    table.add_column("Truncated", justify="center")
    for rank, r in enumerate(results, start=1):
        table.add_row(
            str(rank), escape(r.path), f"{r.relevance_score:.3f}", str(r.size), "yes" if r.truncated else ""
        )
    console.print(table)


@app.command("docs")
def docs(
    question: str = typer.Argument(..., help="Question about the documentation."),
    docs_dir: Path = typer.Argument(..., help="Directory containing markdown docs.", file_okay=False),
    top_k: int = typer.Option(5, "--top-k", "-k", help="Number of pages to return."),
    json_output: bool = typer.Option(False, "--json", help="Output results as JSON for agents."),
):
    """
    Ask a question against a directory of markdown documentation.
    """
    store = DocumentationStore()
    if not store.initialize(docs_dir):
        err_console.print(f"[red]Error: no documentation could be indexed in '{escape(str(docs_dir))}'.[/red]")
        raise typer.Exit(code=1)

    try:
        hits = store.query(question, top_k=top_k)
    except ArgusError as e:
        _fail(e)

    if json_output:
        typer.echo(json.dumps([hit.model_dump() for hit in hits], indent=2))
        return

    if not hits:
        console.print(f"[yellow]No documentation matched '{escape(question)}'.[/yellow]")
        return

    for hit in hits:
        console.print(f"[bold cyan]{escape(hit.file)}[/bold cyan] [magenta]({hit.score:.3f})[/magenta]")
        preview = hit.content.strip().splitlines()[:5]
        for line in preview:
            console.print(f"  [dim]{escape(line)}[/dim]")
        console.print()


def main():
    app()


if __name__ == "__main__":
    main()
