"""
Tests for src/duplicates/pileup.py.
"""

from pathlib import Path

import pytest

from src.duplicates.pileup import (
    AlignedRead,
    GenomeLoc,
    SitePileup,
    build_pileups,
    load_read_records,
    parse_read_row,
    pileups_from_rdd,
)

HEADER = "contig,position,ref_base,read_name,duplicate\n"


def write_csv(path: Path, *rows: str) -> Path:
    path.write_text(HEADER + "".join(f"{row}\n" for row in rows), encoding="utf-8")
    return path


class TestParseReadRow:
    """Tests for parse_read_row()."""

    def test_parses_fields(self) -> None:
        read = parse_read_row(["chr1", "100", "a", "read_1", "1"])

        assert read == AlignedRead("chr1", 100, "A", "read_1", True)
        assert read.location == GenomeLoc("chr1", 100)

    @pytest.mark.parametrize(
        "row, message",
        [
            (["chr1", "1x", "A", "r", "0"], "position is not an integer"),
            (["chr1", "-1", "A", "r", "0"], "non-negative"),
            (["chr1", "1", "A", "r", "yes"], "duplicate flag"),
        ],
    )
    def test_rejects_bad_values(self, row, message) -> None:
        with pytest.raises(ValueError, match=message):
            parse_read_row(row, "reads.csv:2")


class TestLoadReadRecords:
    """Tests for load_read_records()."""

    def test_loads_rows_and_skips_blanks(self, tmp_path: Path) -> None:
        csv_path = write_csv(
            tmp_path / "reads.csv",
            "chr1,10,C,r1,0",
            "",
            "chr1,10,C,r2,1",
        )

        reads = load_read_records(csv_path)

        assert reads == [
            AlignedRead("chr1", 10, "C", "r1", False),
            AlignedRead("chr1", 10, "C", "r2", True),
        ]

    def test_error_names_file_and_line(self, tmp_path: Path) -> None:
        csv_path = write_csv(tmp_path / "reads.csv", "chr1,10,C,r1,0", "chr1,11,C,r2,2")

        with pytest.raises(ValueError, match=r"reads\.csv:3: duplicate flag"):
            load_read_records(csv_path)

    def test_wrong_column_count(self, tmp_path: Path) -> None:
        csv_path = write_csv(tmp_path / "reads.csv", "chr1,10,C,r1")

        with pytest.raises(ValueError, match="expected 5 fields, got 4"):
            load_read_records(csv_path)

    def test_bundled_sample(self) -> None:
        reads = load_read_records("src/duplicates/data/sample_reads.csv")

        assert len(reads) == 12
        assert sum(read.duplicate for read in reads) == 4


class TestBuildPileups:
    """Tests for build_pileups()."""

    def test_groups_by_locus_in_order(self, sample_reads) -> None:
        pileups = build_pileups(sample_reads)

        assert [site.location for site in pileups] == [
            GenomeLoc("chr1", 5),
            GenomeLoc("chr1", 20),
            GenomeLoc("chr2", 7),
        ]

    def test_splits_unique_and_duplicate(self, sample_reads) -> None:
        pileups = {site.location: site for site in build_pileups(sample_reads)}

        site = pileups[GenomeLoc("chr1", 20)]
        assert site == SitePileup(
            GenomeLoc("chr1", 20), "G", ["r01", "r02", "r03"], ["r01", "r03"], ["r02"]
        )
        assert pileups[GenomeLoc("chr2", 7)].duplicate_reads == ["r11", "r12"]
        assert pileups[GenomeLoc("chr1", 5)].duplicate_reads == []

    def test_no_reads(self) -> None:
        assert build_pileups([]) == []


class TestPileupsFromRdd:
    """The Spark grouping matches build_pileups()."""

    def test_matches_local_grouping(self, sc, sample_reads) -> None:
        rdd = sc.parallelize(sample_reads, numSlices=3)

        pileups = pileups_from_rdd(rdd).collect()
        expected = build_pileups(sample_reads)

        assert [site.location for site in pileups] == [site.location for site in expected]
        for got, want in zip(pileups, expected):
            assert got.ref_bases == want.ref_bases
            assert sorted(got.context) == sorted(want.context)
            assert sorted(got.unique_reads) == sorted(want.unique_reads)
            assert sorted(got.duplicate_reads) == sorted(want.duplicate_reads)
