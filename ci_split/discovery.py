import os
from glob import iglob

from ci_split.timings import normalize_path


def discover_test_files(test_dir: str, pattern: str) -> list[str]:
    """Find every test file matching `pattern` below `test_dir`, as normalized paths."""
    files = {
        normalize_path(path)
        for path in iglob(os.path.join(test_dir, pattern), recursive=True)
        if os.path.isfile(path)
    }
    return sorted(files)
