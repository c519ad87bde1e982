#!/usr/bin/env python3
"""Greenhouse CLI for inspecting and maintaining plant records."""

import argparse

import questionary
from rich.console import Console
from rich.table import Table

from greenhouse.plant import Plant, PlantRepository, PlantStore, StorageError

console = Console()


def build_table(plants: list[Plant]) -> Table:
    table = Table(title="Plants")
    table.add_column("Id", justify="right")
    table.add_column("Name", style="bold")
    table.add_column("Other names")
    table.add_column("Light")
    table.add_column("Humidity")
    table.add_column("Water")
    for plant in plants:
        table.add_row(
            str(plant.id),
            plant.name,
            ", ".join(plant.other_names),
            plant.light,
            plant.humidity,
            plant.water,
        )
    return table


def select_plant(store: PlantStore) -> Plant | None:
    """Prompt the user to select a plant from the collection."""
    plants = store.list_all()
    if not plants:
        console.print("[red]No plants found.[/]")
        return None
    return questionary.select(
        "Select a plant:",
        choices=[questionary.Choice(title=f"{p.name} (id={p.id})", value=p) for p in plants],
    ).ask()


def list_plants(store: PlantStore):
    """Print every plant as a table."""
    plants = store.list_all()
    if not plants:
        console.print("[dim]The collection is empty.[/]")
        return
    console.print(build_table(plants))


def show_plant(store: PlantStore):
    """Print the details of a selected plant."""
    plant = select_plant(store)
    if not plant:
        return
    console.print(build_table([plant]))


def delete_plant(store: PlantStore):
    """Delete a selected plant after confirmation."""
    plant = select_plant(store)
    if not plant:
        return

    console.print(f"[yellow]Will permanently delete [bold]{plant.name}[/] (id={plant.id}).[/]")
    if not questionary.confirm("Proceed with these changes?").ask():
        console.print("[dim]Cancelled.[/]")
        return

    store.delete_by_id(plant.id)
    console.print(f"[green]Deleted {plant.name}.[/]")


COMMANDS = {
    "list-plants": list_plants,
    "show-plant": show_plant,
    "delete-plant": delete_plant,
}


def main(argv=None, store: PlantStore = None):
    parser = argparse.ArgumentParser(description="Greenhouse CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list-plants", help="List all plants")
    subparsers.add_parser("show-plant", help="Show a single plant")
    subparsers.add_parser("delete-plant", help="Delete a plant")

    args = parser.parse_args(argv)

    store = store or PlantRepository()
    try:
        COMMANDS[args.command](store)
    except StorageError as exc:
        console.print(f"[red]Storage error: {exc}[/]")
        return 1
    finally:
        store.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
