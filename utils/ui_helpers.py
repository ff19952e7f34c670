import os
import json
from typing import List, Any, Dict
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from config import settings

# Environment variable to control CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "LIB_CLI_OUTPUT"

_console = Console()

def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in {"plain", "json", "rich"}:
        os.environ[OUTPUT_MODE_ENV] = mode

def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, settings.output_mode).lower()

def _print_rows(rows: List[Dict[str, Any]], columns: List[str], title: str, empty_message: str, plain_line) -> None:
    """Print a list of records according to the current output mode.
    - plain: one line per record produced by plain_line, or empty_message
    - json: JSON array of the records
    - rich: Rich table with the given columns
    """
    mode = get_output_mode()

    if mode == "json":
        print(json.dumps(rows, ensure_ascii=False))
        return

    if not rows:
        print(empty_message)
        return

    if mode == "rich":
        table = Table(title=title, show_lines=True, header_style="bold cyan")
        for column in columns:
            table.add_column(column.replace("_", " ").title(), style="white", no_wrap=column.endswith("id"))
        for row in rows:
            table.add_row(*(str(row[c]) for c in columns))
        _console.print(table)
    else:
        for row in rows:
            print(plain_line(row))

def print_books(books: List[Any]) -> None:
    rows = [
        {"id": b.id, "title": b.title, "author": b.author, "status": "Issued" if b.issued else "Available"}
        for b in books
    ]
    _print_rows(
        rows,
        ["id", "title", "author", "status"],
        "📚 Books",
        "No books in library.",
        lambda r: f"{r['id']} - {r['title']} by {r['author']} ({r['status']})",
    )

def print_members(members: List[Any]) -> None:
    rows = [{"id": m.id, "name": m.name} for m in members]
    _print_rows(
        rows,
        ["id", "name"],
        "👤 Members",
        "No members registered.",
        lambda r: f"{r['id']} - {r['name']}",
    )

def print_transactions(transactions: List[Any], title: str = "📖 Issued Books", empty_message: str = "No books are currently issued.") -> None:
    rows = [t.to_dict() for t in transactions]
    _print_rows(
        rows,
        ["book_id", "member_id", "issue_date", "due_date"],
        title,
        empty_message,
        lambda r: f"Book {r['book_id']} -> Member {r['member_id']} | issued {r['issue_date']} | due {r['due_date']}",
    )

def print_stats_result(stats: Dict[str, Any]) -> None:
    """Print statistics according to the current output mode.
    - plain: one 'Label: value' line per metric
    - json: JSON object
    - rich: Panel with the metrics
    """
    mode = get_output_mode()

    if mode == "json":
        print(json.dumps(stats, ensure_ascii=False))
    elif mode == "rich":
        content = "\n".join(f"[bold]{k.replace('_', ' ').title()}:[/] {v}" for k, v in stats.items())
        _console.print(Panel.fit(content, title="📊 Stats", border_style="blue"))
    else:
        for k, v in stats.items():
            print(f"{k.replace('_', ' ').title()}: {v}")

def format_fine(amount: int) -> str:
    return f"{settings.currency_symbol}{amount}"
