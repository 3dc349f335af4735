"""Report naming and JUnit merging."""
import xml.etree.ElementTree as ET
from datetime import datetime

from e2e_training.reports import merge_junit_reports, report_paths, report_timestamp

SUITE = '<testsuite name="{name}" tests="{tests}" failures="{failures}" errors="0" skipped="1" time="{time}">' \
        '<testcase classname="c" name="t"/></testsuite>'


def test_report_timestamp_format():
    assert report_timestamp(datetime(2026, 1, 31, 10, 15, 0)) == "01312026_101500"


def test_report_paths(tmp_path):
    paths = report_paths(tmp_path, "01312026_101500")
    assert paths["html"] == tmp_path / "e2e-report_01312026_101500.html"
    assert paths["junit"] == tmp_path / "e2e-report_01312026_101500.xml"


def test_report_paths_for_shard(tmp_path):
    paths = report_paths(tmp_path, "stamp", shard_index=2)
    assert paths["junit"].name == "e2e-report_stamp_shard2.xml"


def test_merge_junit_reports(tmp_path):
    first = tmp_path / "a.xml"
    first.write_text(SUITE.format(name="a", tests=3, failures=1, time="1.5"), encoding="utf-8")
    second = tmp_path / "b.xml"
    second.write_text(
        "<testsuites>" + SUITE.format(name="b", tests=2, failures=0, time="0.5") + "</testsuites>",
        encoding="utf-8",
    )

    output = merge_junit_reports([first, second], tmp_path / "out" / "merged.xml")

    root = ET.parse(output).getroot()
    assert root.tag == "testsuites"
    assert root.get("name") == "e2e-training"
    assert [suite.get("name") for suite in root] == ["a", "b"]
    assert root.get("tests") == "5"
    assert root.get("failures") == "1"
    assert root.get("errors") == "0"
    assert root.get("skipped") == "2"
    assert root.get("time") == "2.000"
