"""Header dependency report (Rich-based table renderer).

Lists every include directive found in a set of sources, where it resolved
in the search path, and whether it is newer than the current archive. Used by
``ccbuild deps``.
"""

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from rich.console import Console
from rich.table import Table
from rich.text import Text

from .include_scanner import extract_includes
from .staleness import find_include_file, get_mtime


@dataclass(frozen=True)
class DependencyRow:
    """One include directive in the report.

    Attributes:
        source: Source file containing the directive
        reference: Header reference as written
        resolved: Resolved header path, or None if unresolved
        mtime: Modification time of the resolved header
    """

    source: Path
    reference: str
    resolved: Optional[Path]
    mtime: Optional[float]


def collect_rows(sources: Iterable[Path], search: Sequence[Path]) -> List[DependencyRow]:
    """Scan ``sources`` and resolve each include against ``search``.

    Missing or unreadable sources are skipped.
    """
    rows: List[DependencyRow] = []
    for source in sources:
        source = Path(source)
        try:
            content = source.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            continue
        for reference in extract_includes(content):
            resolved = find_include_file(search, reference)
            path = resolved.path if resolved is not None else None
            mtime = get_mtime(path) if path is not None else None
            rows.append(DependencyRow(source=source, reference=reference, resolved=path, mtime=mtime))
    return rows


def _format_mtime(mtime: Optional[float]) -> str:
    if mtime is None:
        return ""
    return time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(mtime))


def render_table(rows: Sequence[DependencyRow], since: Optional[float] = None) -> Table:
    """Build the Rich Table for ``rows``.

    Args:
        rows: Report rows
        since: Archive mtime; resolved headers newer than this are highlighted

    Returns:
        A Rich Table with one row per include directive
    """
    table = Table(show_edge=False, box=None, padding=(0, 1), expand=False)
    table.add_column("Source", style="bold", no_wrap=True)
    table.add_column("Include", no_wrap=True)
    table.add_column("Resolved", no_wrap=True)
    table.add_column("Modified", no_wrap=True)

    for row in rows:
        if row.resolved is None:
            resolved_text = Text("unresolved", style="dim")
        elif since is not None and row.mtime is not None and row.mtime > since:
            resolved_text = Text(str(row.resolved), style="bold yellow")
        else:
            resolved_text = Text(str(row.resolved), style="green")
        table.add_row(str(row.source), row.reference, resolved_text, _format_mtime(row.mtime))

    return table


def print_report(rows: Sequence[DependencyRow], console: Optional[Console] = None, since: Optional[float] = None) -> None:
    """Print the dependency table and a summary line."""
    console = console if console is not None else Console()
    console.print(render_table(rows, since=since))
    unresolved = sum(1 for r in rows if r.resolved is None)
    console.print(f"{len(rows)} include(s), {len(rows) - unresolved} resolved, {unresolved} unresolved")
