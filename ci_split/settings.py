import os
from typing import Optional


def _get_int(name: str, default: Optional[int] = None) -> int:
    val = os.getenv(name, default)
    if val is None:
        raise ValueError(f"Expected env var {name} to be set.")
    try:
        return int(val)
    except ValueError:
        raise ValueError(f"Expected env var {name} to be an integer, got '{val}'.")


def _get_bool(name: str) -> bool:
    return os.getenv(name, "").lower() in ("1", "true", "yes")


DEFAULT_DURATION = 1.0  # Weight given to test files without historical timing
REPORT_GLOBS = ("**/*.json", "**/*.xml")
DEFAULT_TEST_DIR = "spec"
DEFAULT_TEST_PATTERN = "**/*_spec.rb"

# CI_NODE_INDEX is 1-based on GitLab parallel jobs; nodes are 0-based here
node_index = _get_int("CI_NODE_INDEX", 1) - 1
node_total = _get_int("CI_NODE_TOTAL", 1)
test_dir = os.getenv("CI_SPLIT_TEST_DIR", DEFAULT_TEST_DIR)
test_pattern = os.getenv("CI_SPLIT_TEST_PATTERN", DEFAULT_TEST_PATTERN)
parse_workers = _get_int("CI_SPLIT_PARSE_WORKERS", 4)
log_level = os.getenv("LOG_LEVEL", "WARNING")
json_logging = _get_bool("CI_SPLIT_JSON_LOGS")
