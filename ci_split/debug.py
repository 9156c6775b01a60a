"""Human-readable breakdown of a balancing run, written to stderr with --debug."""
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import AbstractSet, List, Mapping

from ci_split.balancer import Node
from ci_split.log import err
from ci_split.settings import DEFAULT_DURATION
from ci_split.timings import TSecond


@dataclass
class LoadBalanceStats:
    average: TSecond
    deviations: List[float] = field(default_factory=list)
    max_deviation: float = 0.0

    @classmethod
    def from_nodes(cls, nodes: Sequence[Node], total_time: TSecond) -> "LoadBalanceStats":
        average = total_time / len(nodes)
        deviations = [
            round((n.total_time - average) / average * 100, 1) if average else 0.0
            for n in nodes
        ]
        return cls(
            average=average,
            deviations=deviations,
            max_deviation=max((abs(d) for d in deviations), default=0.0),
        )


def print_debug_info(
    nodes: Sequence[Node],
    timings: Mapping[str, TSecond],
    defaulted: AbstractSet[str],
    report_paths: Sequence[str] = (),
    split_files: AbstractSet[str] = frozenset(),
) -> None:
    total_time = round(sum(timings.values()), 2)
    stats = LoadBalanceStats.from_nodes(nodes, total_time)

    err("=== Test Balancing Debug Info ===")
    err("")
    _print_loaded_reports(report_paths, timings)
    _print_timing_data_source(len(timings), len(defaulted), total_time)
    if split_files:
        _print_split_files(split_files)
    _print_load_balance(stats)
    _print_node_distribution(nodes, stats, timings, defaulted)
    err("====================================")


def _print_loaded_reports(report_paths: Sequence[str], timings: Mapping[str, TSecond]) -> None:
    err("## Loaded Test Result Files")
    if not report_paths:
        err("  (no report files loaded)")
    else:
        for path in report_paths:
            err(f"  - {path}")
        err(f"  Total: {len(report_paths)} report files, {len(timings)} test units extracted")
    err("")


def _print_timing_data_source(total_files: int, default_files: int, total_time: TSecond) -> None:
    err("## Timing Data Source (from past test execution results)")
    err(f"  - Files with historical timing: {total_files - default_files} files")
    err(f"  - Files with default timing ({DEFAULT_DURATION}s): {default_files} files")
    err(f"  - Total files: {total_files} files")
    err(f"  - Total estimated time: {total_time}s")
    err("")


def _print_split_files(split_files: AbstractSet[str]) -> None:
    err("## Split By Example")
    for path in sorted(split_files):
        err(f"  - {path}")
    err("")


def _print_load_balance(stats: LoadBalanceStats) -> None:
    err("## Load Balance")
    err(f"  - Average time per node: {round(stats.average, 2)}s")
    err(f"  - Max deviation from average: {stats.max_deviation}%")
    err("")


def _print_node_distribution(
    nodes: Sequence[Node],
    stats: LoadBalanceStats,
    timings: Mapping[str, TSecond],
    defaulted: AbstractSet[str],
) -> None:
    err("## Per-Node Distribution")
    for index, (node, deviation) in enumerate(zip(nodes, stats.deviations)):
        sign = "+" if deviation >= 0 else ""
        err(
            f"Node {index}: {len(node.files)} files, {round(node.total_time, 2)}s ({sign}{deviation}% from avg)"
        )
        for unit in node.files:
            err(f"  - {unit} {_format_timing(unit, timings, defaulted)}")
        err("")


def _format_timing(unit: str, timings: Mapping[str, TSecond], defaulted: AbstractSet[str]) -> str:
    timing = f"({round(timings[unit], 2)}s"
    if unit in defaulted:
        timing += ", default - no historical data"
    return timing + ")"
