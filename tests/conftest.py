"""
Pytest configuration and shared fixtures for the duplicate statistics tests.
"""

import os
from pathlib import Path

import pytest
from pyspark.sql import SparkSession

from src.duplicates.pileup import AlignedRead

PROJECT_ROOT = Path(__file__).parent.parent


@pytest.fixture(scope="session")
def spark() -> SparkSession:
    """
    Create a SparkSession for testing.

    Session scope: one SparkContext per JVM, shared by every test.
    """
    # Python workers unpickle src.* types, so they need the project on their path;
    # the previous PYTHONPATH comes back when the session ends
    with pytest.MonkeyPatch.context() as mp:
        mp.setenv("PYTHONPATH", str(PROJECT_ROOT), prepend=os.pathsep)

        spark = (
            SparkSession.builder
            .appName("pytest-duplicate-stats")
            .master("local[2]")
            .config("spark.sql.shuffle.partitions", "2")
            .config("spark.ui.enabled", "false")
            .config("spark.driver.memory", "1g")
            .getOrCreate()
        )

        spark.sparkContext.setLogLevel("WARN")

        yield spark

        spark.stop()


@pytest.fixture(scope="session")
def sc(spark: SparkSession):
    """SparkContext from the session fixture, for RDD-based tests."""
    return spark.sparkContext


@pytest.fixture
def sample_reads() -> list[AlignedRead]:
    """Reads over three sites on two contigs, deliberately out of order."""
    return [
        AlignedRead("chr2", 7, "T", "r10", False),
        AlignedRead("chr1", 20, "G", "r01", False),
        AlignedRead("chr1", 20, "G", "r02", True),
        AlignedRead("chr1", 5, "A", "r01", False),
        AlignedRead("chr1", 20, "G", "r03", False),
        AlignedRead("chr2", 7, "T", "r11", True),
        AlignedRead("chr2", 7, "T", "r12", True),
        AlignedRead("chr1", 5, "A", "r04", False),
        AlignedRead("chr1", 5, "A", "r05", False),
    ]
