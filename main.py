import logging
import sys
from datetime import date, datetime
from typing import Callable, Optional

import typer
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from config import settings
from database import PersistenceError, load_library, save_library
from library import Library, OperationResult
from utils.ui_helpers import (
    format_fine,
    print_books,
    print_members,
    print_stats_result,
    print_transactions,
    set_output_mode,
)
from utils.validators import IdValidator, TextValidator

console = Console()

# --- Typer CLI Application ---
app = typer.Typer(help="Library catalog CLI")


def _as_date(value: Optional[datetime]) -> Optional[date]:
    return value.date() if value else None


def _save_or_exit(lib: Library) -> None:
    try:
        save_library(lib, settings.data_file)
    except PersistenceError as e:
        console.print(f"[bold red]Error:[/] {escape(str(e))}")
        raise typer.Exit(code=1)


def _report(result: OperationResult) -> None:
    if result:
        if result.fine:
            print(f"Book is overdue by {result.overdue_days} days. Fine to be paid: {format_fine(result.fine)}")
            print("Book returned successfully.")
        else:
            print(result.message)
    else:
        print(f"Error: {result.message}")


def _run_mutation(operation: Callable[[Library], OperationResult]) -> None:
    """Load the catalog, apply one operation and save it if the operation succeeded."""
    lib = load_library(settings.data_file)
    result = operation(lib)
    _report(result)
    if result:
        _save_or_exit(lib)


@app.callback()
def _global_options(
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    )
):
    """Global options for the CLI (e.g. output mode)."""
    if output:
        set_output_mode(output)


@app.command("list-books")
def cli_list_books():
    """List all books in insertion order."""
    print_books(load_library(settings.data_file).get_all_books())


@app.command("add-book")
def cli_add_book(book_id: int, title: str, author: str):
    """Add a new book to the catalog."""
    _run_mutation(lambda lib: lib.add_book(book_id, title.strip(), author.strip()))


@app.command("update-book")
def cli_update_book(
    book_id: int,
    title: Optional[str] = typer.Option(None, "--title", "-t", help="New title"),
    author: Optional[str] = typer.Option(None, "--author", "-a", help="New author"),
):
    """Change the title and/or author of a book."""
    _run_mutation(lambda lib: lib.update_book(
        book_id,
        title=title.strip() if title else None,
        author=author.strip() if author else None,
    ))


@app.command("search")
def cli_search(query: str = typer.Argument(..., help="Text to look for in titles and authors")):
    """Search books by title or author."""
    books = load_library(settings.data_file).search_books(query)
    if not books:
        print(f"No books match '{query}'.")
        return
    print_books(books)


@app.command("list-members")
def cli_list_members():
    """List all registered members."""
    print_members(load_library(settings.data_file).get_all_members())


@app.command("add-member")
def cli_add_member(member_id: int, name: str):
    """Register a new member."""
    _run_mutation(lambda lib: lib.add_member(member_id, name.strip()))


@app.command("issue")
def cli_issue(book_id: int, member_id: int, today: Optional[datetime] = typer.Option(None, "--date", formats=["%Y-%m-%d"], help="Use this date instead of today (YYYY-MM-DD)")):
    """Issue a book to a member for 14 days."""
    _run_mutation(lambda lib: lib.issue_book(book_id, member_id, today=_as_date(today)))


@app.command("return")
def cli_return(book_id: int, today: Optional[datetime] = typer.Option(None, "--date", formats=["%Y-%m-%d"], help="Use this date instead of today (YYYY-MM-DD)")):
    """Return an issued book and report any overdue fine."""
    _run_mutation(lambda lib: lib.return_book(book_id, today=_as_date(today)))


@app.command("transactions")
def cli_transactions():
    """Show all currently issued books."""
    print_transactions(load_library(settings.data_file).get_all_transactions())


@app.command("overdue")
def cli_overdue(today: Optional[datetime] = typer.Option(None, "--date", formats=["%Y-%m-%d"], help="Use this date instead of today (YYYY-MM-DD)")):
    """Show issued books past their due date."""
    overdue = load_library(settings.data_file).get_overdue_transactions(_as_date(today))
    print_transactions(overdue, title="⏰ Overdue Books", empty_message="No books are currently overdue.")


@app.command("stats")
def cli_stats(today: Optional[datetime] = typer.Option(None, "--date", formats=["%Y-%m-%d"], help="Use this date instead of today (YYYY-MM-DD)")):
    """Show catalog statistics."""
    print_stats_result(load_library(settings.data_file).get_statistics(_as_date(today)))


# --- Interactive menu ---
def _read_int(label: str) -> int:
    while True:
        value = IdValidator.parse_id(Prompt.ask(label))
        if value is not None:
            return value
        console.print("[yellow]Invalid input. Please enter a number.[/]")


def _read_text(label: str, is_valid: Callable[[Optional[str]], bool]) -> str:
    while True:
        value = Prompt.ask(label)
        if is_valid(value):
            return value.strip()
        console.print("[yellow]Please enter a valid value.[/]")


def _show_result(result: OperationResult) -> None:
    if not result:
        console.print(f"[bold red]Error:[/] {escape(result.message)}")
        return
    if result.fine:
        console.print(Panel.fit(
            f"[bold]Overdue by:[/] {result.overdue_days} days\n"
            f"[bold]Fine to be paid:[/] {escape(format_fine(result.fine))}",
            title="⚠️ Overdue",
            border_style="yellow",
        ))
        console.print("[green]✅ Book returned successfully.[/]")
    else:
        console.print(f"[green]✅ {escape(result.message)}[/]")


def _choose(title: str, items: list) -> str:
    table = Table.grid(padding=(0, 2))
    table.add_column(justify="right", style="bold cyan", width=4)
    table.add_column(justify="left", style="white")
    for key, label, icon in items:
        table.add_row(f"[reverse]{key}[/]", f"{icon} {label}")
    console.print(Panel(table, title=title, border_style="cyan", box=box.HEAVY, padding=(1, 2)))
    return Prompt.ask("Enter your choice", choices=[key for key, _, _ in items]).strip()


def book_menu(library: Library) -> None:
    choice = _choose("Book Management", [("1", "Add a new book", "➕"), ("2", "View all books", "📚")])
    if choice == "1":
        book_id = _read_int("Enter Book ID")
        title = _read_text("Enter Title", TextValidator.validate_title)
        author = _read_text("Enter Author", TextValidator.validate_author)
        _show_result(library.add_book(book_id, title, author))
    else:
        print_books(library.get_all_books())


def member_menu(library: Library) -> None:
    choice = _choose("Member Management", [("1", "Add a new member", "➕"), ("2", "View all members", "👤")])
    if choice == "1":
        member_id = _read_int("Enter Member ID")
        name = _read_text("Enter Name", TextValidator.validate_name)
        _show_result(library.add_member(member_id, name))
    else:
        print_members(library.get_all_members())


def operations_menu(library: Library) -> None:
    choice = _choose("Library Operations", [("1", "Issue a book", "📤"), ("2", "Return a book", "📥")])
    if choice == "1":
        book_id = _read_int("Enter Book ID to issue")
        member_id = _read_int("Enter Member ID")
        _show_result(library.issue_book(book_id, member_id))
    else:
        book_id = _read_int("Enter Book ID to return")
        _show_result(library.return_book(book_id))


def reports_menu(library: Library) -> None:
    choice = _choose("Reports", [("1", "View all issued books", "📖"), ("2", "View all overdue books", "⏰")])
    if choice == "1":
        print_transactions(library.get_all_transactions())
    else:
        print_transactions(
            library.get_overdue_transactions(),
            title="⏰ Overdue Books",
            empty_message="No books are currently overdue.",
        )


def run_menu(library: Library) -> None:
    """Interactive menu; returns when the user chooses Exit."""
    handlers = {"1": book_menu, "2": member_menu, "3": operations_menu, "4": reports_menu}
    items = [
        ("1", "Book Management", "📚"),
        ("2", "Member Management", "👤"),
        ("3", "Library Operations", "🔄"),
        ("4", "Reports", "📊"),
        ("5", "Exit", "🚪"),
    ]
    while True:
        choice = _choose(settings.app_name, items)
        if choice == "5":
            console.print("[green]Saving data and exiting...[/]")
            return
        handlers[choice](library)
        print()  # spacing between operations


def main() -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if len(sys.argv) > 1:
        app()
        return

    library = load_library(settings.data_file)
    run_menu(library)
    try:
        save_library(library, settings.data_file)
    except PersistenceError as e:
        console.print(f"[bold red]Error saving data:[/] {escape(str(e))}")
        sys.exit(1)


if __name__ == "__main__":
    main()
