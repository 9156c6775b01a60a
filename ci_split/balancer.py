"""Greedy longest-processing-time-first balancing of test units across CI nodes."""
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import List

from ci_split.errors import InvalidArgument
from ci_split.timings import TSecond


@dataclass
class Node:
    files: List[str] = field(default_factory=list)
    total_time: TSecond = 0.0

    def assign(self, unit: str, duration: TSecond) -> None:
        self.files.append(unit)
        self.total_time += duration


def balance(timings: Mapping[str, TSecond], node_count: int) -> List[Node]:
    """Partition `timings` across `node_count` nodes, minimizing the slowest node.

    Units are taken longest first (ties by name) and each one goes to the
    node with the least time assigned so far (ties by lowest index). This is
    the LPT heuristic: within 4/3 - 1/(3 * node_count) of the optimal
    makespan, and deterministic for equal inputs.
    """
    if isinstance(node_count, bool) or not isinstance(node_count, int) or node_count <= 0:
        raise InvalidArgument(f"node count must be a positive integer, got {node_count!r}")
    negative = sorted(unit for unit, duration in timings.items() if duration < 0)
    if negative:
        raise InvalidArgument(f"durations must not be negative: {', '.join(negative)}")

    nodes = [Node() for _ in range(node_count)]
    for unit, duration in sorted(timings.items(), key=lambda item: (-item[1], item[0])):
        # min() returns the first minimal node, i.e. the lowest index on ties
        min_node = min(nodes, key=lambda n: n.total_time)
        min_node.assign(unit, duration)
    return nodes
