"""
Count Duplicates: unique vs duplicate read depth per genomic site

Counts the number of unique reads, duplicate reads, and the average depth
of both across every site a traversal visits.

Algorithm:
    1. summarize: each site emits DuplicateCount(1, unique, duplicate)
    2. fold: field-wise sum into the running total
    3. report: print totals and the two per-site averages

Because fold is a field-wise sum with an all-zero identity, it is
commutative and associative, so sites may be folded in any order or
combined per partition first (see traversal.py).
"""

import math
import sys
from collections.abc import Sequence
from decimal import Decimal
from typing import Any, NamedTuple, Protocol, TextIO

from src.duplicates.pileup import GenomeLoc


class DuplicateCount(NamedTuple):
    """Read counts for one site, or summed over many sites."""

    count: int = 0  # sites represented
    unique_depth: int = 0
    duplicate_depth: int = 0


# A freshly summarized site and the accumulator share one shape
SiteSummary = DuplicateCount
RunningTotal = DuplicateCount

REPORT_HEADER = "[REDUCE RESULT] Traversal result is: "

# Averages outside [SCIENTIFIC_BELOW, SCIENTIFIC_FROM) print in E notation
SCIENTIFIC_BELOW = 1e-3
SCIENTIFIC_FROM = 1e7


def summarize(
    location: GenomeLoc,
    ref_bases: bytes | str | None,
    context: Any,
    unique_reads: Sequence[Any],
    duplicate_reads: Sequence[Any],
) -> SiteSummary:
    """
    Summarize the reads covering a single site.

    Args:
        location: The genomic location of the site
        ref_bases: Reference bases covering the site (not used)
        context: Alignment context with all overlapping reads (not used)
        unique_reads: Reads classified as unique at this site
        duplicate_reads: Reads classified as duplicates at this site

    Returns:
        DuplicateCount(1, len(unique_reads), len(duplicate_reads))
    """
    return DuplicateCount(
        count=1,
        unique_depth=len(unique_reads),
        duplicate_depth=len(duplicate_reads),
    )


def initial_total() -> RunningTotal:
    """Return the all-zero running total, the identity of fold()."""
    return DuplicateCount(0, 0, 0)


def fold(incoming: SiteSummary, total: RunningTotal) -> RunningTotal:
    """
    Add a site summary (or another partial total) to a running total.

    Neither argument is modified; the result is a new DuplicateCount.
    """
    return DuplicateCount(
        count=total.count + incoming.count,
        unique_depth=total.unique_depth + incoming.unique_depth,
        duplicate_depth=total.duplicate_depth + incoming.duplicate_depth,
    )


def per_site_average(depth: int, count: int) -> float:
    """
    Floating-point depth / count with IEEE semantics for count == 0.

    0 / 0 is NaN and depth / 0 is +/-Infinity, matching what the report
    has always printed for an empty traversal.
    """
    if count == 0:
        if depth == 0:
            return math.nan
        return math.copysign(math.inf, depth)
    return depth / count


def format_double(value: float) -> str:
    """
    Render a float the way the report has always printed doubles.

    Plain decimal for 1e-3 <= |value| < 1e7, otherwise scientific with a
    bare "E" exponent: 0.0005 -> "5.0E-4", 12345678.0 -> "1.2345678E7".
    NaN and infinities are spelled out.
    """
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0 or SCIENTIFIC_BELOW <= abs(value) < SCIENTIFIC_FROM:
        return repr(value)

    # shortest round-trip digits, trailing zeros dropped
    sign, digits, exponent = Decimal(repr(value)).normalize().as_tuple()
    mantissa = "".join(str(d) for d in digits)
    fraction = mantissa[1:] or "0"
    return f"{'-' if sign else ''}{mantissa[0]}.{fraction}E{exponent + len(digits) - 1}"


def report_lines(result: RunningTotal) -> list[str]:
    """Build the report lines for a final total, in print order."""
    return [
        REPORT_HEADER,
        f"traversal iterations = {result.count}",
        f"average depth = {format_double(per_site_average(result.duplicate_depth, result.count))}",
        f"duplicates seen = {result.duplicate_depth}",
        f"unique read count = {result.unique_depth}",
        "average unique read depth = "
        f"{format_double(per_site_average(result.unique_depth, result.count))}",
    ]


def report(result: RunningTotal, out: TextIO | None = None) -> None:
    """
    Print the collected stats once the traversal is done.

    Args:
        result: The final running total
        out: Output sink; standard output when not given
    """
    if out is None:
        out = sys.stdout
    for line in report_lines(result):
        print(line, file=out)


class SiteReducer(Protocol):
    """
    Callbacks a traversal driver invokes on a walker.

    summarize is called once per site, fold merges each summary into the
    running total started by initial_total, and report is called once
    after the last fold.
    """

    def summarize(
        self,
        location: GenomeLoc,
        ref_bases: bytes | str | None,
        context: Any,
        unique_reads: Sequence[Any],
        duplicate_reads: Sequence[Any],
    ) -> Any: ...

    def initial_total(self) -> Any: ...

    def fold(self, incoming: Any, total: Any) -> Any: ...

    def report(self, result: Any, out: TextIO | None = None) -> None: ...


class CountDuplicatesWalker:
    """SiteReducer counting unique and duplicate reads per site."""

    def summarize(
        self,
        location: GenomeLoc,
        ref_bases: bytes | str | None,
        context: Any,
        unique_reads: Sequence[Any],
        duplicate_reads: Sequence[Any],
    ) -> SiteSummary:
        return summarize(location, ref_bases, context, unique_reads, duplicate_reads)

    def initial_total(self) -> RunningTotal:
        return initial_total()

    def fold(self, incoming: SiteSummary, total: RunningTotal) -> RunningTotal:
        return fold(incoming, total)

    def report(self, result: RunningTotal, out: TextIO | None = None) -> None:
        report(result, out)
