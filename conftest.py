import os

# Settings are read at import time; keep the CI environment of whoever runs
# the suite from leaking into defaults under test.
for name in (
    "CI_NODE_INDEX",
    "CI_NODE_TOTAL",
    "CI_SPLIT_TEST_DIR",
    "CI_SPLIT_TEST_PATTERN",
    "CI_SPLIT_PARSE_WORKERS",
    "CI_SPLIT_JSON_LOGS",
):
    os.environ.pop(name, None)
