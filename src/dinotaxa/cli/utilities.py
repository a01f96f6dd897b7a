"""Auxiliary commands for inspecting single groups and lineages."""

from __future__ import annotations

import typer
from rich.table import Table

from dinotaxa.pipeline.deduplication import Deduplicator
from dinotaxa.pipeline.filtering import SpeciesFilter
from dinotaxa.pipeline.lineage import LineageResolver
from dinotaxa.source import TaxonCache, build_source_client

from .common import CLIError, console, get_state

app = typer.Typer(
    add_completion=False,
    help="Inspect what the source returns for one group or one species.",
    no_args_is_help=True,
)


def _species_command(
    ctx: typer.Context,
    group: str = typer.Argument(..., help="Higher taxon name, e.g. Theropoda."),
    limit: int = typer.Option(50, "--limit", help="Maximum rows to display."),
    show_excluded: bool = typer.Option(False, "--show-excluded", help="Also list filtered records."),
) -> None:
    state = get_state(ctx)
    policies = state.settings.policies
    client = build_source_client(policies.source)

    with console.status(f"Fetching species for {group}..."):
        candidates = client.fetch_species_by_group(group)
    filtered = SpeciesFilter(policies.filtering).apply(candidates)
    deduplicated = Deduplicator().process(filtered.kept)

    table = Table(title=f"Accepted species: {group}", box=None)
    table.add_column("Name")
    table.add_column("Family")
    table.add_column("Range (Ma)", justify="right")
    for candidate in sorted(deduplicated.species, key=lambda item: item.name)[:limit]:
        first = candidate.first_appearance_ma
        last = candidate.last_appearance_ma
        table.add_row(
            candidate.name,
            candidate.family or "-",
            f"{first if first is not None else '?'} - {last if last is not None else '?'}",
        )
    console.print(table)
    console.print(
        f"fetched={len(candidates)} excluded={len(filtered.excluded)} "
        f"accepted={len(deduplicated.species)}"
    )
    if show_excluded and filtered.excluded:
        excluded = Table(title="Excluded", box=None)
        excluded.add_column("Name")
        excluded.add_column("Reasons")
        for candidate, reasons in filtered.excluded:
            excluded.add_row(candidate.name, ", ".join(reasons))
        console.print(excluded)


def _lineage_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Scientific name of the species."),
) -> None:
    state = get_state(ctx)
    policies = state.settings.policies
    cache = TaxonCache()
    resolver = LineageResolver(build_source_client(policies.source), cache, policies.lineage)

    with console.status(f"Resolving lineage for {name}..."):
        lineage = resolver.resolve_name(name)
    if lineage is None:
        raise CLIError(f"No species named '{name}' found at the source")

    table = Table(title=f"Lineage: {name}", box=None)
    table.add_column("#", justify="right")
    table.add_column("Id")
    table.add_column("Name")
    table.add_column("Rank", justify="right")
    for position, taxon_id in enumerate(lineage.taxon_ids):
        record = cache.get(taxon_id)
        table.add_row(
            str(position),
            taxon_id,
            record.name if record else "?",
            str(record.rank) if record else "?",
        )
    console.print(table)
    status = "complete" if lineage.complete else f"incomplete ({lineage.terminated_by.value})"
    console.print(f"Lineage {status}, depth {len(lineage)}")


app.command("species")(_species_command)
app.command("lineage")(_lineage_command)
