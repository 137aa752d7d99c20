"""Ordering and tab-aligned rendering of the final report."""
import sys
from typing import List, Optional, Sequence, TextIO
from stalefinder.domain.models import ReportRow


HEADER = ("name", "stars", "last commit (days)", "importers")


def order_rows(rows: Sequence[ReportRow], stable_ties: bool = False) -> List[ReportRow]:
    """Order rows by importer count, highest first.

    By default the rows are sorted ascending and walked back to front, which
    reverses the fetch order of rows with equal counts. With ``stable_ties``
    a descending sort keeps tied rows in fetch order.
    """
    if stable_ties:
        return sorted(rows, key=lambda row: row.importers, reverse=True)
    ascending = sorted(rows, key=lambda row: row.importers)
    return [ascending[len(ascending) - i - 1] for i in range(len(ascending))]


def render_table(lines: Sequence[Sequence[str]], padding: int = 1) -> str:
    """Align cells into columns like a tab writer.

    Every cell but the last of its line is padded to the widest cell of its
    column plus ``padding`` spaces. Trailing cells are written as-is.
    """
    widths: List[int] = []
    for cells in lines:
        for index, cell in enumerate(cells[:-1]):
            if index == len(widths):
                widths.append(0)
            widths[index] = max(widths[index], len(cell))

    output = []
    for cells in lines:
        aligned = [
            cell.ljust(widths[index] + padding)
            for index, cell in enumerate(cells[:-1])
        ]
        if cells:
            aligned.append(cells[-1])
        output.append("".join(aligned) + "\n")
    return "".join(output)


def format_report(rows: Sequence[ReportRow], stable_ties: bool = False) -> str:
    """Render the header and the ordered rows."""
    lines = [HEADER]
    for row in order_rows(rows, stable_ties=stable_ties):
        lines.append((row.name, str(row.stars), str(row.age_days), str(row.importers)))
    return render_table(lines)


def write_report(
    rows: Sequence[ReportRow],
    stream: Optional[TextIO] = None,
    stable_ties: bool = False
) -> None:
    """Write the report to ``stream`` (standard output by default) and flush."""
    if stream is None:
        stream = sys.stdout
    stream.write(format_report(rows, stable_ties=stable_ties))
    stream.flush()
