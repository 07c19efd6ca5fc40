import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from react_loop.config_provider import ConfigProvider
from react_loop.core.agent import Agent

app = typer.Typer(help="Run a ReAct agent against the registered tools.")
console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def run(
    query: str,
    max_iterations: Optional[int] = typer.Option(
        None, "--max-iterations", "-n", min=1, help="Iteration ceiling for this run."
    ),
    capability: Optional[List[str]] = typer.Option(
        None,
        "--capability",
        "-c",
        help="Capability held by the caller; defaults to the required one.",
    ),
    transcript: bool = typer.Option(
        False, "--transcript/--no-transcript", help="Print the full transcript."
    ),
    config_path: Optional[Path] = typer.Option(
        None, "--config", help="Path to a JSON config file."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logs."),
):
    """
    Answer QUERY by reasoning and calling tools.
    """
    _configure_logging(verbose)
    try:
        config = ConfigProvider(config_path).load()
        agent = Agent(config=config)
    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    capabilities = capability or [config.get_required_capability()]
    response = agent.ask(query, capabilities, max_iterations=max_iterations)

    if transcript and response.transcript:
        console.rule("Transcript")
        console.print(response.transcript, markup=False)
        console.rule()

    if not response.success:
        message = response.error.message if response.error else "Request failed."
        console.print(f"[red]Error:[/red] {escape(message)}")
        raise typer.Exit(code=1)
    console.print(f"[bold green]Answer:[/bold green] {escape(response.answer)}")


@app.command()
def tools(
    config_path: Optional[Path] = typer.Option(
        None, "--config", help="Path to a JSON config file."
    ),
):
    """
    List registered tools and whether they are currently available.
    """
    try:
        agent = Agent(config=ConfigProvider(config_path).load())
    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    table = Table(title="Registered tools")
    table.add_column("ID")
    table.add_column("Kind")
    table.add_column("Available")
    table.add_column("Description")
    for tool, available in agent.tool_status():
        table.add_row(
            tool.id,
            tool.kind.value,
            "[green]yes[/green]" if available else "[red]no[/red]",
            tool.description,
        )
    console.print(table)


if __name__ == "__main__":
    app()
