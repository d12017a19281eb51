"""
Traversal drivers for site walkers.

Two ways to run a SiteReducer over site pileups:

  1. traverse        — sequential fold, one site at a time
  2. traverse_spark  — map summarize over an RDD, then fold per partition
                       and across partitions (or treeAggregate)

Both give the same total because the walker's fold is commutative and
associative with initial_total() as identity.

Usage:
    python -m src.duplicates.traversal [reads.csv]
"""

import sys
from collections.abc import Iterable
from typing import Any

from pyspark.rdd import RDD

from src.common.data_loader import get_data_path
from src.common.spark_session import create_spark_session
from src.duplicates.count_duplicates import CountDuplicatesWalker, SiteReducer
from src.duplicates.pileup import SitePileup, load_read_records, pileups_from_rdd

DEFAULT_INPUT = get_data_path("duplicates", "sample_reads.csv")


def traverse(walker: SiteReducer, pileups: Iterable[SitePileup]) -> Any:
    """Fold every site into the walker's running total, in input order."""
    total = walker.initial_total()
    for site in pileups:
        total = walker.fold(walker.summarize(*site), total)
    return total


def traverse_spark(
    walker: SiteReducer,
    pileups_rdd: RDD,
    tree_depth: int | None = None,
) -> Any:
    """
    Run the walker over an RDD of SitePileup.

    Args:
        walker: The SiteReducer to run
        pileups_rdd: RDD[SitePileup]
        tree_depth: If set, combine partition totals with treeAggregate
                    at this depth instead of a flat fold on the driver

    Returns:
        The final running total (initial_total() for an empty RDD)
    """
    summaries = pileups_rdd.map(lambda site: walker.summarize(*site))

    if tree_depth is None:
        return summaries.fold(walker.initial_total(), walker.fold)

    return summaries.treeAggregate(
        walker.initial_total(),
        lambda total, summary: walker.fold(summary, total),
        walker.fold,
        depth=tree_depth,
    )


def main() -> None:
    """Count unique and duplicate reads per site and print the report."""
    input_path = sys.argv[1] if len(sys.argv) >= 2 else str(DEFAULT_INPUT)

    spark = create_spark_session("CountDuplicates")
    sc = spark.sparkContext

    try:
        reads = load_read_records(input_path)
        print(f"Input file: {input_path}")
        print(f"Reads loaded: {len(reads)}\n")

        pileups_rdd = pileups_from_rdd(sc.parallelize(reads))

        walker = CountDuplicatesWalker()
        total = traverse_spark(walker, pileups_rdd)
        walker.report(total)
    finally:
        spark.stop()


if __name__ == "__main__":
    main()
