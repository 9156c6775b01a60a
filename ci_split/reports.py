"""Parsers turning JUnit XML and RSpec JSON reports into timing maps."""
import json
import math
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from glob import iglob
from typing import Any, Iterator, Optional, Union
from xml.etree import ElementTree

from junitparser import JUnitXml, JUnitXmlError, TestCase, TestSuite
from lxml import etree

from ci_split import settings
from ci_split.errors import ParseError
from ci_split.log import logger
from ci_split.timings import TSecond, TTimings, accumulate, normalize_path

log = logger(__name__)

TContent = Union[str, bytes]

# Alternate attribute names carrying the test file of a JUnit testcase
JUNIT_FILE_ATTRIBUTES = ("file", "filepath")
EXAMPLE_LOCATOR = "["


class ReportFormat(Enum):
    JUNIT = ".xml"
    JSON = ".json"

    @classmethod
    def from_path(cls, path: str) -> "ReportFormat":
        ext = os.path.splitext(path)[1].lower()
        try:
            return cls(ext)
        except ValueError:
            raise ParseError(path, f"unsupported report extension '{ext}'")


@dataclass
class ParsedReport:
    path: str = "<string>"
    files: TTimings = field(default_factory=dict)
    examples: TTimings = field(default_factory=dict)


def _duration(value: Any) -> TSecond:
    """Coerce a duration field; missing, garbage, negative or non-finite values become 0.0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        duration = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(duration) or duration < 0:
        return 0.0
    return duration


def _is_blank(content: TContent) -> bool:
    return not content.strip()


def _iter_cases(suite: TestSuite) -> Iterator[TestCase]:
    yield from suite.iterchildren(TestCase)
    for nested in suite.iterchildren(TestSuite):
        yield from _iter_cases(nested)


def parse_junit(content: TContent, path: str = "<string>") -> ParsedReport:
    """Parse a JUnit XML document, keyed by each testcase's file attribute.

    JUnit carries no per-example identifiers, so `examples` stays empty.
    """
    report = ParsedReport(path=path)
    if _is_blank(content):
        return report
    if isinstance(content, str):
        content = content.encode("utf-8")
    try:
        xml = JUnitXml.fromstring(content)
    except (etree.XMLSyntaxError, ElementTree.ParseError, JUnitXmlError) as e:
        raise ParseError(path, str(e)) from e

    suites = [xml] if isinstance(xml, TestSuite) else list(xml)
    for suite in suites:
        for case in _iter_cases(suite):
            # Read raw attributes: junitparser's FloatAttr raises on bad values
            file_path = next(
                (
                    case._elem.get(attr)
                    for attr in JUNIT_FILE_ATTRIBUTES
                    if case._elem.get(attr)
                ),
                None,
            )
            if file_path is None:
                continue
            accumulate(
                report.files,
                normalize_path(file_path),
                _duration(case._elem.get("time")),
            )
    return report


def _example_file(example: dict) -> Optional[str]:
    # The id points at the test file that ran the example even for shared examples,
    # whose file_path is the shared example definition.
    if example.get("id"):
        return str(example["id"]).split(EXAMPLE_LOCATOR)[0]
    if example.get("file_path"):
        return str(example["file_path"])
    return None


def parse_json(content: TContent, path: str = "<string>") -> ParsedReport:
    """Parse an RSpec JSON report (`rspec --format json`)."""
    report = ParsedReport(path=path)
    if _is_blank(content):
        return report
    try:
        data = json.loads(content)
    except ValueError as e:
        raise ParseError(path, str(e)) from e
    if not isinstance(data, dict):
        raise ParseError(path, f"expected a JSON object, got {type(data).__name__}")

    examples = data.get("examples") or []
    if not isinstance(examples, list):
        raise ParseError(path, "expected 'examples' to be a list")

    for example in examples:
        if not isinstance(example, dict):
            continue
        file_path = _example_file(example)
        if not file_path:
            continue
        run_time = _duration(example.get("run_time"))
        accumulate(report.files, normalize_path(file_path), run_time)
        if example.get("id"):
            accumulate(report.examples, normalize_path(str(example["id"])), run_time)
    return report


_PARSERS = {
    ReportFormat.JUNIT: parse_junit,
    ReportFormat.JSON: parse_json,
}


def parse_report(
    content: TContent, path: str, report_format: Optional[ReportFormat] = None
) -> ParsedReport:
    if report_format is None:
        report_format = ReportFormat.from_path(path)
    return _PARSERS[report_format](content, path)


def find_reports(path: str) -> list[str]:
    """List report files under a directory, or the path itself if it is a file."""
    if os.path.isfile(path):
        return [path]
    if not os.path.isdir(path):
        return []
    found = set()
    for pattern in settings.REPORT_GLOBS:
        found.update(
            p for p in iglob(os.path.join(path, pattern), recursive=True) if os.path.isfile(p)
        )
    return sorted(found)


def _load_report(path: str) -> Optional[ParsedReport]:
    if not os.path.isfile(path) or os.path.getsize(path) == 0:
        log.debug("report_skipped", path=path, reason="missing or empty")
        return None
    try:
        with open(path, "rb") as f:
            content = f.read()
        return parse_report(content, path)
    except ParseError as e:
        log.warning("report_parse_failed", path=path, error=e.reason)
        return None
    except OSError as e:
        log.warning("report_unreadable", path=path, error=str(e))
        return None


def load_reports(
    paths: list[str], max_workers: Optional[int] = None
) -> list[ParsedReport]:
    """Parse report files in parallel, skipping any that are missing or corrupt.

    Results keep the order of `paths`.
    """
    if not paths:
        return []
    with ThreadPoolExecutor(max_workers=max_workers or settings.parse_workers) as executor:
        loaded = list(executor.map(_load_report, paths))
    reports = [r for r in loaded if r is not None]
    log.info("reports_loaded", requested=len(paths), parsed=len(reports))
    return reports
