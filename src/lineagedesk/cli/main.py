"""Lineage Desk CLI — talks to the daemon over HTTP."""

import json
from typing import Optional
from urllib.parse import quote

import httpx
import typer
from rich.console import Console
from rich.table import Table

from lineagedesk import __version__
from lineagedesk.core.config import get_client_settings

app = typer.Typer(
    name="lineagedesk",
    help="Data-model and lineage catalog",
    no_args_is_help=True,
)
console = Console()


def _client() -> httpx.Client:
    settings = get_client_settings()
    return httpx.Client(
        base_url=settings.host,
        headers={"Authorization": f"Bearer {settings.api_key}"},
        timeout=60,
    )


def _model_path(layer: str, name: str) -> str:
    return f"/models/{quote(layer, safe='')}/{quote(name, safe='')}"


def _api(method: str, path: str, **kwargs) -> dict:
    """Make an API call to the daemon."""
    with _client() as client:
        try:
            resp = client.request(method, f"/api/v1{path}", **kwargs)
        except httpx.ConnectError:
            settings = get_client_settings()
            console.print(f"[red]Error:[/red] Cannot connect to Lineage Desk daemon at {settings.host}")
            console.print("Start the daemon with: [bold]lineagedeskd[/bold]")
            raise typer.Exit(1)

        if resp.status_code >= 400:
            detail = resp.json().get("detail", resp.text) if resp.headers.get("content-type", "").startswith("application/json") else resp.text
            console.print(f"[red]Error {resp.status_code}:[/red] {detail}")
            raise typer.Exit(1)

        return resp.json()


def _endpoints(source_layer: str, source_model: str, target_layer: str, target_model: str) -> dict:
    return {
        "source_layer": source_layer,
        "source_model": source_model,
        "target_layer": target_layer,
        "target_model": target_model,
    }


def _models_table(title: str, models: list[dict]) -> Table:
    table = Table(title=title, show_lines=False)
    table.add_column("Model ID", style="bold")
    table.add_column("Comment")
    table.add_column("Subject")
    table.add_column("Created")
    table.add_column("Creator")
    for m in models:
        table.add_row(m["model_id"], m["comment"], m["subject"], m["created_at"] or "—", m["creator"])
    return table


# ─── Model Commands ───


@app.command()
def options():
    """List the layers and subject domains enabled in the config sheet."""
    result = _api("GET", "/options")
    console.print(f"[bold]Layers:[/bold]   {', '.join(result['layers']) or '—'}")
    console.print(f"[bold]Subjects:[/bold] {', '.join(result['subjects']) or '—'}")


@app.command()
def find(
    name: str = typer.Argument("", help="Model name, or part of it"),
    layer: Optional[str] = typer.Option(None, "--layer", "-l", help="Layer to search in"),
):
    """Search models by layer and partial name."""
    result = _api("GET", "/models", params={"layer": layer or "", "name": name})
    if not result["models"]:
        console.print("[dim]No matching models[/dim]")
        return
    console.print(_models_table(f"Models ({result['total']})", result["models"]))


@app.command(name="add-model")
def add_model(
    layer: str = typer.Argument(..., help="Layer"),
    name: str = typer.Argument(..., help="Model name"),
    comment: str = typer.Option("", "--comment", "-c", help="Model comment"),
    subject: str = typer.Option("", "--subject", "-s", help="Subject domain"),
    creator: Optional[str] = typer.Option(None, "--creator", help="Recorded creator"),
):
    """Add a model to a layer."""
    result = _api("POST", "/models", json={
        "layer": layer,
        "model_name": name,
        "comment": comment,
        "subject": subject,
        "creator": creator,
    })
    console.print(f"[green]✓[/green] Added model: [bold]{result['model_id']}[/bold]")


@app.command(name="delete-model")
def delete_model(
    layer: str = typer.Argument(..., help="Layer"),
    name: str = typer.Argument(..., help="Model name"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Delete a model and every lineage relation that references it."""
    if not yes:
        typer.confirm(f"Delete {layer}-{name} and all of its lineage?", abort=True)
    result = _api("DELETE", _model_path(layer, name))
    console.print(
        f"[green]✓[/green] Deleted [bold]{result['model_id']}[/bold] "
        f"({result['deleted_lineages']} lineage row(s))"
    )


@app.command()
def lineage(
    layer: str = typer.Argument(..., help="Layer"),
    name: str = typer.Argument(..., help="Model name"),
):
    """Show upstream and downstream relations of a model."""
    result = _api("GET", f"{_model_path(layer, name)}/lineage")

    table = Table(title=f"Lineage: {result['model']['model_id']}")
    table.add_column("Direction")
    table.add_column("Model")
    table.add_column("Task")
    table.add_column("Schedule")

    for l in result["upstream"]:
        table.add_row("[cyan]upstream[/cyan]", l["source_model_id"], l["task_name"], l["schedule_name"])
    for l in result["downstream"]:
        table.add_row("[magenta]downstream[/magenta]", l["target_model_id"], l["task_name"], l["schedule_name"])

    console.print(table)


# ─── Lineage Commands ───


@app.command(name="add-lineage")
def add_lineage(
    source_layer: str = typer.Argument(..., help="Source layer"),
    source_model: str = typer.Argument(..., help="Source model name"),
    target_layer: str = typer.Argument(..., help="Target layer"),
    target_model: str = typer.Argument(..., help="Target model name"),
    task: str = typer.Option(..., "--task", help="Task name"),
    task_location: str = typer.Option(..., "--task-location", help="Where the task lives"),
    schedule: str = typer.Option(..., "--schedule", help="Schedule name"),
    schedule_location: str = typer.Option(..., "--schedule-location", help="Schedule file location"),
    remarks: str = typer.Option("", "--remarks", help="Free-form remarks"),
    creator: Optional[str] = typer.Option(None, "--creator", help="Recorded creator"),
):
    """Record that a task reads SOURCE and writes TARGET."""
    data = _endpoints(source_layer, source_model, target_layer, target_model)
    data.update({
        "task_name": task,
        "task_location": task_location,
        "schedule_name": schedule,
        "schedule_location": schedule_location,
        "remarks": remarks,
        "creator": creator,
    })
    result = _api("POST", "/lineage", json=data)
    console.print(f"[green]✓[/green] {result['source']} -> {result['target']} ({result['relation_id']})")


@app.command(name="check-lineage")
def check_lineage(
    source_layer: str = typer.Argument(..., help="Source layer"),
    source_model: str = typer.Argument(..., help="Source model name"),
    target_layer: str = typer.Argument(..., help="Target layer"),
    target_model: str = typer.Argument(..., help="Target model name"),
):
    """Show the relation between two models, if any (JSON)."""
    result = _api("POST", "/lineage/check", json=_endpoints(source_layer, source_model, target_layer, target_model))
    console.print_json(json.dumps(result["lineage"]))


@app.command(name="delete-lineage")
def delete_lineage(
    source_layer: str = typer.Argument(..., help="Source layer"),
    source_model: str = typer.Argument(..., help="Source model name"),
    target_layer: str = typer.Argument(..., help="Target layer"),
    target_model: str = typer.Argument(..., help="Target model name"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Delete the relation between two models."""
    data = _endpoints(source_layer, source_model, target_layer, target_model)
    _api("POST", "/lineage/check", json=data)
    if not yes:
        typer.confirm(f"Delete {source_layer}-{source_model} -> {target_layer}-{target_model}?", abort=True)
    result = _api("DELETE", "/lineage", json=data)
    console.print(f"[green]✓[/green] Deleted lineage [bold]{result['relation_id']}[/bold]")


@app.command()
def version():
    """Show Lineage Desk version."""
    console.print(f"lineagedesk v{__version__}")


@app.command()
def status():
    """Show daemon status."""
    with _client() as client:
        try:
            resp = client.get("/health")
            data = resp.json()
            console.print(f"[green]●[/green] Lineage Desk daemon v{data['version']} — running")
            sheet = data.get("spreadsheet") or {}
            if sheet:
                console.print(f"  Spreadsheet: {sheet.get('spreadsheet_token') or '—'}")
                console.print(f"  Token cached: {sheet.get('token_cached', False)}")
        except httpx.ConnectError:
            settings = get_client_settings()
            console.print(f"[red]●[/red] Daemon not running at {settings.host}")


if __name__ == "__main__":
    app()
