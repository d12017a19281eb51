"""
Per-site pileups built from pre-classified read rows.

Input CSV (header required):

    contig,position,ref_base,read_name,duplicate
    chr1,100,A,read_001,0
    chr1,100,A,read_002,1

Each row is one read covering one site; `duplicate` is 0 or 1 as decided
by whatever marked the duplicates upstream. Rows are grouped by locus
into SitePileup records, the shape the walker callbacks consume.
"""

from collections.abc import Iterable
from pathlib import Path
from typing import NamedTuple

from pyspark.rdd import RDD

from src.common.data_loader import iter_csv_rows

READ_COLUMNS = ["contig", "position", "ref_base", "read_name", "duplicate"]
DUPLICATE_FLAGS = {"0": False, "1": True}


class GenomeLoc(NamedTuple):
    contig: str
    position: int


class AlignedRead(NamedTuple):
    """One read covering one site, with its duplicate classification."""

    contig: str
    position: int
    ref_base: str
    read_name: str
    duplicate: bool

    @property
    def location(self) -> GenomeLoc:
        return GenomeLoc(self.contig, self.position)


class SitePileup(NamedTuple):
    """All reads at one site, in the argument order of the summarize callback."""

    location: GenomeLoc
    ref_bases: str
    context: list[str]
    unique_reads: list[str]
    duplicate_reads: list[str]


def parse_read_row(row: list[str], where: str = "<row>") -> AlignedRead:
    """
    Parse one CSV row into an AlignedRead.

    Args:
        row: Field values in READ_COLUMNS order
        where: "file:line" prefix for error messages

    Raises:
        ValueError: If the position or duplicate flag does not parse
    """
    contig, position_str, ref_base, read_name, flag = row

    try:
        position = int(position_str)
    except ValueError:
        raise ValueError(f"{where}: position is not an integer: {position_str!r}") from None
    if position < 0:
        raise ValueError(f"{where}: position must be non-negative, got {position}")

    if flag not in DUPLICATE_FLAGS:
        raise ValueError(f"{where}: duplicate flag must be 0 or 1, got {flag!r}")

    return AlignedRead(contig, position, ref_base.upper(), read_name, DUPLICATE_FLAGS[flag])


def load_read_records(csv_path: str | Path) -> list[AlignedRead]:
    """Load every read row of a reads CSV (relative paths from project root)."""
    return [
        parse_read_row(row, f"{csv_path}:{line_num}")
        for line_num, row in iter_csv_rows(csv_path, len(READ_COLUMNS))
    ]


def build_pileups(reads: Iterable[AlignedRead]) -> list[SitePileup]:
    """
    Group reads into one SitePileup per locus, ordered by (contig, position).

    Read order within a site follows input order. The reference base of a
    site is the one given on its first read.
    """
    sites: dict[GenomeLoc, SitePileup] = {}

    for read in reads:
        site = sites.get(read.location)
        if site is None:
            site = SitePileup(read.location, read.ref_base, [], [], [])
            sites[read.location] = site
        site.context.append(read.read_name)
        if read.duplicate:
            site.duplicate_reads.append(read.read_name)
        else:
            site.unique_reads.append(read.read_name)

    return [sites[loc] for loc in sorted(sites)]


# ---------------------------------------------------------------------------
# Spark grouping: combineByKey over (GenomeLoc, AlignedRead)
# ---------------------------------------------------------------------------


def _start_site(read: AlignedRead) -> tuple[str, list[str], list[str], list[str]]:
    return _add_read((read.ref_base, [], [], []), read)


def _add_read(
    site: tuple[str, list[str], list[str], list[str]], read: AlignedRead
) -> tuple[str, list[str], list[str], list[str]]:
    ref_bases, context, unique_reads, duplicate_reads = site
    context.append(read.read_name)
    if read.duplicate:
        duplicate_reads.append(read.read_name)
    else:
        unique_reads.append(read.read_name)
    return (ref_bases or read.ref_base, context, unique_reads, duplicate_reads)


def _merge_sites(
    left: tuple[str, list[str], list[str], list[str]],
    right: tuple[str, list[str], list[str], list[str]],
) -> tuple[str, list[str], list[str], list[str]]:
    return (
        left[0] or right[0],
        left[1] + right[1],
        left[2] + right[2],
        left[3] + right[3],
    )


def _to_pileup(item: tuple[GenomeLoc, tuple[str, list[str], list[str], list[str]]]) -> SitePileup:
    location, (ref_bases, context, unique_reads, duplicate_reads) = item
    return SitePileup(GenomeLoc(*location), ref_bases, context, unique_reads, duplicate_reads)


def pileups_from_rdd(reads_rdd: RDD) -> RDD:
    """
    Spark version of build_pileups().

    Source: RDD[AlignedRead] → Target: RDD[SitePileup], sorted by locus.
    """
    return (
        reads_rdd.map(lambda read: (read.location, read))
        .combineByKey(_start_site, _add_read, _merge_sites)
        .sortByKey()
        .map(_to_pileup)
    )
