"""Report file naming and JUnit merging for sharded runs."""
from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, Union

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%m%d%Y_%H%M%S"
REPORT_PREFIX = "e2e-report"
SUITE_COUNTERS = ("tests", "failures", "errors", "skipped")


def report_timestamp(now: Optional[datetime] = None) -> str:
    return (now or datetime.now()).strftime(TIMESTAMP_FORMAT)


def report_paths(
    reports_dir: Union[str, Path],
    timestamp: Optional[str] = None,
    shard_index: Optional[int] = None,
) -> dict[str, Path]:
    """HTML and JUnit paths for one run, e.g. e2e-report_01312026_101500.html."""
    stamp = timestamp or report_timestamp()
    name = f"{REPORT_PREFIX}_{stamp}"
    if shard_index is not None:
        name = f"{name}_shard{shard_index}"
    directory = Path(reports_dir)
    return {
        "html": directory / f"{name}.html",
        "junit": directory / f"{name}.xml",
    }


def _suites(path: Path) -> Iterable[ET.Element]:
    root = ET.parse(path).getroot()
    if root.tag == "testsuites":
        return list(root)
    return [root]


def merge_junit_reports(inputs: Iterable[Union[str, Path]], output: Union[str, Path]) -> Path:
    """Merge JUnit XML files into a single <testsuites> document."""
    merged = ET.Element("testsuites", {"name": "e2e-training"})
    totals = {counter: 0 for counter in SUITE_COUNTERS}
    total_time = 0.0

    for path in inputs:
        for suite in _suites(Path(path)):
            merged.append(suite)
            for counter in SUITE_COUNTERS:
                totals[counter] += int(suite.get(counter, 0))
            total_time += float(suite.get("time", 0) or 0)

    for counter, value in totals.items():
        merged.set(counter, str(value))
    merged.set("time", f"{total_time:.3f}")

    output_path = Path(output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    ET.ElementTree(merged).write(output_path, encoding="utf-8", xml_declaration=True)
    logger.info("Merged %s tests into %s", totals["tests"], output_path)
    return output_path
