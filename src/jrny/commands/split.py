"""
Split Command

Shows how a SQL file is split into statements, without touching a database.
"""

from pathlib import Path

from rich.console import Console
from rich.syntax import Syntax

from jrny.parser import LexError, Statement, split_statements

console = Console()


class SplitError(Exception):
    """Raised when a file cannot be split into statements"""


def split_file(path: Path, highlight: bool = True) -> list[Statement]:
    """Scan a SQL file and print its statements

    Args:
        path: SQL file to scan
        highlight: Print statements with SQL syntax highlighting

    Returns:
        Statements in source order

    Raises:
        SplitError: If the file cannot be read or scanned
    """
    try:
        statements = split_statements(path.read_text(encoding="utf-8"))
    except LexError as err:
        raise SplitError(f"{path.name}: {err}") from err
    except (OSError, UnicodeDecodeError) as err:
        raise SplitError(f"Could not read {path}: {err}") from err

    for index, statement in enumerate(statements, 1):
        header = f"-- Statement {index}/{len(statements)} (line {statement.line})"
        console.print(f"[cyan]{header}[/cyan]")
        if highlight:
            console.print(Syntax(statement.text, "sql", theme="monokai", line_numbers=False))
        else:
            console.print(statement.text, markup=False, highlight=False)
    return statements
