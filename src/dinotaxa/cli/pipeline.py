"""Pipeline execution commands for the dinotaxa CLI."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn
from rich.table import Table

from dinotaxa.enrichment import MeasurementIndex
from dinotaxa.entities.core import RunSummary
from dinotaxa.orchestration import rebuild_tree, run_ingestion
from dinotaxa.pipeline.hierarchy_assembly import EXPORT_FORMATS, export_tree
from dinotaxa.source import build_source_client

from .common import CLIError, console, get_state, resolve_path

app = typer.Typer(
    add_completion=False,
    help="Run the full ingestion pipeline or rebuild a tree from saved artefacts.",
    no_args_is_help=True,
)


def render_summary(summary: RunSummary) -> None:
    table = Table(title=f"Run Summary: {summary.run_id}", box=None)
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Groups requested", str(summary.groups_requested))
    table.add_row("Groups failed", ", ".join(summary.groups_failed) or "-")
    table.add_row("Candidates fetched", str(summary.candidates_fetched))
    table.add_row("Candidates filtered", str(summary.candidates_filtered))
    table.add_row("Duplicates dropped", str(summary.duplicates_dropped))
    table.add_row("Processed", str(summary.processed))
    table.add_row("Succeeded", str(summary.succeeded))
    table.add_row("Failed", str(summary.failed))
    for reason, count in sorted(summary.failure_reasons.items()):
        table.add_row(f"  {reason}", str(count))
    table.add_row("Tree built", "yes" if summary.tree_built else "no")
    if summary.tree_built:
        table.add_row("Tree nodes", str(summary.tree_stats.get("node_count", 0)))
    console.print(table)


def _run_command(
    ctx: typer.Context,
    group: List[str] = typer.Option(  # noqa: B008 - Typer signature
        [],
        "--group",
        "-g",
        help="Higher taxon to fetch (repeatable); defaults to the configured groups.",
    ),
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        help="Resolve at most this many accepted species (alphabetical order).",
        show_default=False,
    ),
    measurements: Optional[Path] = typer.Option(
        None,
        "--measurements",
        help="JSON measurement file joined onto species rows.",
        show_default=False,
    ),
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output-dir",
        help="Directory for taxa.json, species.json, tree.json and summary.json.",
        show_default=False,
    ),
    taxon_cache: Optional[Path] = typer.Option(
        None,
        "--taxon-cache",
        help="Taxon cache file loaded before and saved after the run.",
        show_default=False,
    ),
) -> None:
    state = get_state(ctx)
    settings = state.settings
    if limit is not None and limit < 0:
        raise CLIError("--limit must not be negative")

    index = None
    if measurements is not None:
        index = MeasurementIndex.load(
            resolve_path(measurements), policy=settings.policies.enrichment
        )
    destination = resolve_path(output_dir, must_exist=False) if output_dir else None
    cache_path = resolve_path(taxon_cache, must_exist=False) if taxon_cache else None
    client = build_source_client(settings.policies.source)

    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Resolving lineages", total=None)

        def advance(done: int, total: int) -> None:
            progress.update(task, completed=done, total=total)

        result = run_ingestion(
            settings=settings,
            client=client,
            groups=group or None,
            limit=limit,
            run_id=state.run_id,
            output_dir=destination,
            taxon_cache_path=cache_path,
            measurements=index,
            progress=advance,
        )

    render_summary(result.summary)
    for name, path in sorted(result.artifacts.items()):
        console.print(f"[cyan]{name}[/cyan] -> {path}")
    if not result.summary.tree_built:
        console.print("[bold red]No taxonomy tree was built.[/bold red]")
        raise typer.Exit(code=1)
    console.print("[green]Pipeline complete[/green]")


def _tree_command(
    ctx: typer.Context,
    input_dir: Optional[Path] = typer.Option(
        None,
        "--input-dir",
        "-i",
        help="Directory holding taxa.json and species.json; defaults to the output dir.",
        show_default=False,
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        help="Destination for the exported tree; defaults to <input-dir>/tree.<ext>.",
        show_default=False,
    ),
    format: str = typer.Option("json", "--format", "-f", help="Export format: json, adjacency or dot."),
) -> None:
    state = get_state(ctx)
    format = format.lower()
    if format not in EXPORT_FORMATS:
        raise CLIError(f"Unknown export format '{format}'. Expected one of: {', '.join(EXPORT_FORMATS)}")
    source_dir = resolve_path(input_dir or state.settings.paths.output_dir)
    try:
        build = rebuild_tree(source_dir, state.settings.policies.hierarchy)
    except FileNotFoundError as exc:
        raise CLIError(str(exc)) from exc

    suffix = "dot" if format == "dot" else "json"
    default_name = "tree.json" if format == "json" else f"tree.{format}.{suffix}"
    destination = resolve_path(output, must_exist=False) if output else source_dir / default_name
    path = export_tree(build.tree, destination, format=format)

    stats = build.tree.statistics()
    console.print(
        f"[green]Tree rebuilt[/green]: {stats['node_count']} nodes, "
        f"{stats['species_count']} species, {len(build.rejected)} rejected -> {path}"
    )


app.command("run")(_run_command)
app.command("tree")(_tree_command)
