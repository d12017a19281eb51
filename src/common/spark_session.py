"""
SparkSession construction for the duplicate statistics drivers.

The traversal CLI builds its session here. Spark's own chatter is
routed by conf/log4j2.properties:
- INFO and above to .logs/spark.log
- only ERROR to the console, which otherwise carries the duplicate report
"""

import os
from pathlib import Path

from pyspark.sql import SparkSession

# Repository root: holds conf/, .logs/ and the src/ namespace package
PROJECT_ROOT = Path(__file__).parent.parent.parent

LOG4J2_CONFIG = PROJECT_ROOT / "conf" / "log4j2.properties"

# Spark UI and event logs show runs as DuplicateStats-<ScriptName>
APP_NAME_PREFIX = "DuplicateStats"


def _ensure_logs_dir() -> None:
    logs_dir = PROJECT_ROOT / ".logs"
    logs_dir.mkdir(exist_ok=True)


def _snake_to_title(snake_str: str) -> str:
    """
    Convert snake_case string to TitleCase.

    Examples:
        count_duplicates -> CountDuplicates
        traversal -> Traversal
    """
    return "".join(word.capitalize() for word in snake_str.split("_"))


def app_name_for(script_id: str | None = None) -> str:
    """
    Build the Spark application name for a script.

    Args:
        script_id: Either a file path (__file__), a direct name, or None

    Returns:
        "DuplicateStats" or "DuplicateStats-<Name>"
    """
    if not script_id:
        return APP_NAME_PREFIX

    if "/" in script_id or script_id.endswith(".py"):
        script_id = _snake_to_title(Path(script_id).stem)

    return f"{APP_NAME_PREFIX}-{script_id}"


def create_spark_session(
    script_name: str | None = None,
    master: str = "local[*]",
) -> SparkSession:
    """
    Create a SparkSession with the project's common configuration.

    Args:
        script_name: __file__ of the calling script, or a direct name
                     like "CountDuplicates"
        master: Spark master URL (default: local[*] for local runs)

    Returns:
        Configured SparkSession instance
    """
    _ensure_logs_dir()

    # the JVM starts here, so .logs/spark.log and pyspark workers both see the repo root
    original_cwd = os.getcwd()
    os.chdir(PROJECT_ROOT)

    try:
        builder = SparkSession.builder.appName(app_name_for(script_name)).master(master)

        if LOG4J2_CONFIG.exists():
            builder = builder.config(
                "spark.driver.extraJavaOptions",
                f"-Dlog4j.configurationFile=file:{LOG4J2_CONFIG}",
            )

        spark = (
            builder.config("spark.sql.shuffle.partitions", "4")
            .config("spark.driver.memory", "2g")
            .config("spark.ui.showConsoleProgress", "false")
            .getOrCreate()
        )

        spark.sparkContext.setLogLevel("ERROR")

        return spark
    finally:
        os.chdir(original_cwd)
