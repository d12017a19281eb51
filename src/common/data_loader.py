"""
CSV loading helpers shared by the traversal drivers and tests.

Rows come back with their 1-based line numbers so record parsers can
point at the offending line when a value does not parse.
"""

import csv
from collections.abc import Iterator
from pathlib import Path

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent.parent


def resolve_project_path(path: str | Path) -> Path:
    """Return `path` unchanged if absolute, else relative to PROJECT_ROOT."""
    resolved = Path(path)
    if not resolved.is_absolute():
        resolved = PROJECT_ROOT / resolved
    return resolved


def iter_csv_rows(
    csv_path: str | Path,
    expected_columns: int,
    skip_header: bool = True,
) -> Iterator[tuple[int, list[str]]]:
    """
    Yield (line_number, row) for every non-empty row of a CSV file.

    Args:
        csv_path: Path to the CSV file (absolute or relative to project root)
        expected_columns: Number of fields every data row must have
        skip_header: Whether to skip the first row (default: True)

    Yields:
        Tuples of (1-based line number, list of stripped field values)

    Raises:
        ValueError: If a data row has the wrong number of fields
    """
    path = resolve_project_path(csv_path)

    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.reader(f)

        if skip_header:
            next(reader, None)

        for row in reader:
            if not row or all(not field.strip() for field in row):
                continue
            if len(row) != expected_columns:
                raise ValueError(
                    f"{path}:{reader.line_num}: expected {expected_columns} "
                    f"fields, got {len(row)}"
                )
            yield reader.line_num, [field.strip() for field in row]


def get_data_path(package: str, filename: str) -> Path:
    """
    Get the full path to a data file within a package's data directory.

    Args:
        package: Package directory under src/ (e.g., "duplicates")
        filename: Data file name (e.g., "sample_reads.csv")
    """
    return PROJECT_ROOT / "src" / package / "data" / filename
