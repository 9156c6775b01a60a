from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Callable, Optional

from ci_split.errors import InvalidArgument
from ci_split.log import logger
from ci_split.timings import TSecond, TTimings

log = logger(__name__)

TExamplesProvider = Callable[[], Mapping[str, TSecond]]


@dataclass
class SplitResult:
    timings: TTimings = field(default_factory=dict)
    # Heavy files replaced by their individual examples
    split_files: set = field(default_factory=set)
    # Heavy files kept whole because no example timings were found for them
    unsplit_files: set = field(default_factory=set)


def split_heavy(
    file_timings: Mapping[str, TSecond],
    examples_provider: TExamplesProvider,
    threshold: Optional[TSecond] = None,
) -> SplitResult:
    """Replace files taking at least `threshold` seconds with their examples.

    `examples_provider` is only called when some file is heavy. A heavy file
    without any matching example keeps its aggregate entry so it is never lost
    from the balanced set.
    """
    if threshold is None:
        return SplitResult(timings=dict(file_timings))
    if threshold <= 0:
        raise InvalidArgument(f"split threshold must be positive, got {threshold}")

    heavy = {f for f, duration in file_timings.items() if duration >= threshold}
    if not heavy:
        return SplitResult(timings=dict(file_timings))

    example_timings = examples_provider()
    result = SplitResult(
        timings={f: d for f, d in file_timings.items() if f not in heavy}
    )
    for heavy_file in sorted(heavy):
        examples = {
            example_id: duration
            for example_id, duration in example_timings.items()
            if example_id.startswith(heavy_file)
        }
        if examples:
            result.timings.update(examples)
            result.split_files.add(heavy_file)
        else:
            log.warning(
                "heavy_file_without_examples",
                file=heavy_file,
                duration=file_timings[heavy_file],
            )
            result.timings[heavy_file] = file_timings[heavy_file]
            result.unsplit_files.add(heavy_file)
    log.info(
        "heavy_files_split",
        threshold=threshold,
        split=len(result.split_files),
        unsplit=len(result.unsplit_files),
    )
    return result
