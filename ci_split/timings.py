"""Timing maps: merging parsed reports and reconciling them with the test files on disk."""
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from functools import reduce
from typing import AbstractSet, Dict

from ci_split.log import logger
from ci_split.settings import DEFAULT_DURATION

TSecond = float
TTimings = Dict[str, TSecond]

log = logger(__name__)

_DOT_SLASH = "./"


def normalize_path(path: str) -> str:
    """Strip a single leading './' so report paths match discovered paths.

    >>> normalize_path("./spec/models/user_spec.rb")
    'spec/models/user_spec.rb'
    >>> normalize_path("spec/./models/user_spec.rb")
    'spec/./models/user_spec.rb'
    """
    if path.startswith(_DOT_SLASH):
        return path[len(_DOT_SLASH) :]
    return path


def accumulate(timings: TTimings, unit: str, duration: TSecond) -> TTimings:
    """Add `duration` to `unit` in place; repeated units are summed."""
    timings[unit] = timings.get(unit, 0.0) + duration
    return timings


def _fold(merged: TTimings, timings: Mapping[str, TSecond]) -> TTimings:
    for unit, duration in timings.items():
        accumulate(merged, unit, duration)
    return merged


def merge(mappings: Iterable[Mapping[str, TSecond]]) -> TTimings:
    """Sum durations per unit across any number of timing maps.

    The inputs are never mutated and their order does not change the result.
    """
    return reduce(_fold, mappings, {})


@dataclass
class Reconciliation:
    timings: TTimings = field(default_factory=dict)
    defaulted: set = field(default_factory=set)
    discarded: set = field(default_factory=set)


def reconcile(
    ingested: Mapping[str, TSecond],
    authoritative: AbstractSet[str],
    default_duration: TSecond = DEFAULT_DURATION,
) -> Reconciliation:
    """Restrict `ingested` to exactly the `authoritative` units.

    Units no longer present on disk are discarded; units without history get
    `default_duration` and are recorded in `defaulted`.
    """
    result = Reconciliation()
    for unit, duration in ingested.items():
        if unit in authoritative:
            result.timings[unit] = duration
        else:
            result.discarded.add(unit)
    for unit in authoritative:
        if unit not in result.timings:
            result.timings[unit] = default_duration
            result.defaulted.add(unit)
    log.info(
        "timings_reconciled",
        units=len(result.timings),
        defaulted=len(result.defaulted),
        discarded=len(result.discarded),
    )
    return result
