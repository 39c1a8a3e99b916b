"""
FoodieBuddy - CLI Entry Point.

Developer tooling; never mutates data.

Usage:
    foodiebuddy show fridge          Show the dev user's fridge
    foodiebuddy match "Tomatoes"     Look an ingredient up in both collections
    foodiebuddy normalize NAME...    Print standard names
    foodiebuddy health               Check configuration
    foodiebuddy --help               Show help
"""

import asyncio
import logging
import sys

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="foodiebuddy",
    help="FoodieBuddy - fridge and grocery list tools.",
    add_completion=False,
)
console = Console()


def _setup_logging(verbose: bool = False) -> None:
    from foodiebuddy.config import settings

    level = logging.DEBUG if verbose else getattr(logging, settings.log_level)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    # Quiet down noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


@app.command()
def normalize(
    names: list[str] = typer.Argument(..., help="Ingredient names to standardize"),
) -> None:
    """Print the standard (matching) name of each ingredient."""
    from foodiebuddy.ingredients.normalize import standardize_name

    for name in names:
        key = standardize_name(name)
        console.print(f"{name} -> [bold]{key or '[dim](empty)[/dim]'}[/bold]")


@app.command()
def show(
    collection: str = typer.Argument(..., help="fridge or groceries"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Show one collection of the dev user, sorted."""
    from foodiebuddy.config import settings
    from foodiebuddy.db.client import SupabaseCollectionStore
    from foodiebuddy.models.ingredients import CollectionKind, sorted_collection

    try:
        kind = CollectionKind(collection.lower())
    except ValueError:
        console.print(f"[red]Unknown collection: {collection}. Use 'fridge' or 'groceries'.[/red]")
        raise typer.Exit(1)

    _setup_logging(verbose)
    store = SupabaseCollectionStore()
    try:
        items = asyncio.run(store.fetch_all(settings.dev_user_id, kind))
    except Exception as e:
        console.print(f"\n[red]Could not fetch {kind.value}: {e}[/red]")
        raise typer.Exit(1)

    items = sorted_collection(items)
    if not items:
        console.print(f"[dim]Your {kind.value} is empty.[/dim]")
        return

    table = Table(title=kind.value.capitalize())
    table.add_column("Category", style="bold")
    table.add_column("Ingredient")
    table.add_column("Standard name", style="dim")
    if kind is CollectionKind.GROCERIES:
        table.add_column("Checked")

    for category, ingredients in items.items():
        for ingredient in ingredients:
            row = [category, ingredient.displayed_name, ingredient.standard_name]
            if kind is CollectionKind.GROCERIES:
                row.append("x" if ingredient.is_checked else "")
            table.add_row(*row)
            category = ""

    console.print(table)


@app.command()
def match(
    name: str = typer.Argument(..., help="Ingredient name as written in a recipe"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Check whether the dev user already owns an ingredient."""
    from foodiebuddy.config import settings
    from foodiebuddy.db.client import SupabaseCollectionStore
    from foodiebuddy.ingredients.matcher import CrossCollectionMatcher

    _setup_logging(verbose)
    matcher = CrossCollectionMatcher(SupabaseCollectionStore(), settings.dev_user_id)
    try:
        result = asyncio.run(matcher.find_existing_by_name(name))
    except Exception as e:
        console.print(f"\n[red]Lookup failed: {e}[/red]")
        raise typer.Exit(1)

    if not result.exists:
        console.print(f"No '{name}' in your fridge or groceries.")
        return

    for m in result.matches:
        where = "fridge" if m.in_fridge else "groceries"
        console.print(f"  • {m.displayed_name} ({m.category}) in your {where}")


@app.command()
def health() -> None:
    """Check system health and configuration."""
    from foodiebuddy.config import get_settings

    console.print("\n[bold]FoodieBuddy Health Check[/bold]\n")

    try:
        settings = get_settings()
        console.print("✅ Configuration loaded")
        console.print(f"   Environment: {settings.foodiebuddy_env}")
        console.print(f"   Log level: {settings.log_level}")
        console.print(f"   Table: {settings.owned_ingredients_table}")

        if settings.supabase_url.startswith("https://"):
            console.print("✅ Supabase URL configured")
        else:
            console.print("❌ Supabase URL missing or invalid")
            raise typer.Exit(1)

        console.print("\n[green]All checks passed![/green]")

    except typer.Exit:
        raise
    except Exception as e:
        console.print(f"\n[red]❌ Configuration error: {e}[/red]")
        console.print("[dim]Make sure you have a .env file with required variables.[/dim]")
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    from foodiebuddy import __version__

    console.print(f"FoodieBuddy version {__version__}")


if __name__ == "__main__":
    app()
