from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import List, Optional

from ci_split.errors import MissingInput
from ci_split.reports import load_reports
from ci_split.settings import DEFAULT_DURATION
from ci_split.splitter import split_heavy
from ci_split.timings import TSecond, TTimings, merge, reconcile


@dataclass
class Plan:
    timings: TTimings = field(default_factory=dict)
    defaulted: set = field(default_factory=set)
    split_files: set = field(default_factory=set)
    unsplit_files: set = field(default_factory=set)
    report_paths: List[str] = field(default_factory=list)

    @property
    def total_time(self) -> TSecond:
        return sum(self.timings.values())

    @classmethod
    def without_history(cls, test_files: Iterable[str]) -> "Plan":
        """Weigh every test file equally when no reports are available."""
        timings = {f: DEFAULT_DURATION for f in test_files}
        if not timings:
            raise MissingInput()
        return cls(timings=timings, defaulted=set(timings))


def build_plan(
    report_paths: List[str],
    test_files: Iterable[str],
    threshold: Optional[TSecond] = None,
) -> Plan:
    authoritative = set(test_files)
    if not authoritative:
        raise MissingInput()

    reports = load_reports(report_paths)
    reconciliation = reconcile(merge(r.files for r in reports), authoritative)
    split = split_heavy(
        reconciliation.timings,
        lambda: merge(r.examples for r in reports),
        threshold,
    )
    return Plan(
        timings=split.timings,
        defaulted=reconciliation.defaulted,
        split_files=split.split_files,
        unsplit_files=split.unsplit_files,
        report_paths=list(report_paths),
    )
