"""graphscan CLI — structural clustering from the command line."""

from __future__ import annotations

import logging

import click

from graphscan.client import GraphScan
from graphscan.engine.persistence import save_result
from graphscan.exceptions import ScanError
from graphscan.models import ScanSettings

GRAPH_FORMATS = click.Choice(["json", "hif"])


def _load(ctx: click.Context, graph_file: str, directed: bool = False) -> GraphScan:
    try:
        return GraphScan.from_file(
            graph_file,
            format=ctx.obj["format"],
            config=ScanSettings(use_direction=directed),
        )
    except (ScanError, KeyError, TypeError, ValueError) as exc:
        raise click.ClickException(f"Cannot load {graph_file}: {exc}") from exc


@click.group()
@click.option(
    "--format", "graph_format", default="json", type=GRAPH_FORMATS, help="Graph file format."
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging on stderr.")
@click.pass_context
def cli(ctx: click.Context, graph_format: str, verbose: bool) -> None:
    """graphscan CLI — SCAN clustering into clusters, hubs and outliers."""
    ctx.ensure_object(dict)
    ctx.obj["format"] = graph_format
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@cli.command()
@click.argument("graph_file", type=click.Path(exists=True))
@click.option("--epsilon", "-e", required=True, type=float, help="Similarity threshold in (0, 1].")
@click.option("--mu", "-m", required=True, type=int, help="Minimum neighborhood size for a core.")
@click.option("--directed", is_flag=True, help="Treat edges as source -> target only.")
@click.option("--output", "-o", default=None, type=click.Path(), help="Write the result as JSON.")
@click.pass_context
def cluster(
    ctx: click.Context,
    graph_file: str,
    epsilon: float,
    mu: int,
    directed: bool,
    output: str | None,
) -> None:
    """Cluster a graph and print clusters, hubs and outliers."""
    gs = _load(ctx, graph_file, directed)
    try:
        result = gs.cluster(epsilon, mu)
    except ScanError as exc:
        raise click.ClickException(str(exc)) from exc

    stats = result.stats()
    click.echo(
        f"Clusters: {stats.cluster_count}  Hubs: {stats.hub_count}  "
        f"Outliers: {stats.outlier_count}"
    )
    for cid, members in result.by_cluster.items():
        click.echo(f"  cluster {cid}: {members}")
    if result.hubs:
        click.echo(f"  hubs: {result.hubs}")
    if result.outliers:
        click.echo(f"  outliers: {result.outliers}")

    if output:
        written = save_result(result, output)
        click.echo(f"Wrote result to {written}")


@cli.command()
@click.argument("graph_file", type=click.Path(exists=True))
@click.argument("u")
@click.argument("v")
@click.option("--directed", is_flag=True, help="Treat edges as source -> target only.")
@click.pass_context
def similarity(ctx: click.Context, graph_file: str, u: str, v: str, directed: bool) -> None:
    """Print the structural similarity of nodes U and V."""
    gs = _load(ctx, graph_file, directed)
    try:
        value = gs.structural_similarity(gs.resolve_id(u), gs.resolve_id(v))
    except ScanError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"{value:.6f}")


@cli.command()
@click.argument("graph_file", type=click.Path(exists=True))
@click.argument("node")
@click.option("--epsilon", "-e", required=True, type=float, help="Similarity threshold in (0, 1].")
@click.option("--directed", is_flag=True, help="Treat edges as source -> target only.")
@click.pass_context
def neighborhood(
    ctx: click.Context, graph_file: str, node: str, epsilon: float, directed: bool
) -> None:
    """Print the epsilon-neighborhood of NODE."""
    gs = _load(ctx, graph_file, directed)
    try:
        node_id = gs.resolve_id(node)
        members = gs.index.ordered(gs.epsilon_neighborhood(node_id, epsilon))
    except ScanError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"{node_id}: {members}")


@cli.command()
@click.option("--graph", default=None, help="Graph file (overrides GRAPHSCAN_GRAPH_PATH).")
def mcp(graph: str | None) -> None:
    """Start the MCP server for AI agent integration."""
    import os

    if graph:
        os.environ["GRAPHSCAN_GRAPH_PATH"] = graph
    from graphscan.mcp.server import run_server

    run_server()


if __name__ == "__main__":
    cli()
