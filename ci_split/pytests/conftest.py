import json
import pathlib

import pytest

FIXTURES_DIR = pathlib.Path(__file__).parent / "fixtures"

SAMPLE_TIMINGS = {
    "spec/models/user_spec.rb": 4.3,
    "spec/models/post_spec.rb": 5.3,
    "spec/controllers/users_controller_spec.rb": 2.3,
    "spec/controllers/posts_controller_spec.rb": 1.9,
    "spec/services/auth_service_spec.rb": 0.7,
    "spec/helpers/application_helper_spec.rb": 1.0,
}


@pytest.fixture()
def sample_junit_path():
    return str(FIXTURES_DIR / "sample_junit.xml")


@pytest.fixture()
def sample_rspec_path():
    return str(FIXTURES_DIR / "sample_rspec.json")


@pytest.fixture()
def sample_timings():
    return dict(SAMPLE_TIMINGS)


@pytest.fixture()
def write_json_report(tmp_path):
    def _write(name, examples):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps({"examples": examples}))
        return str(path)

    return _write


@pytest.fixture()
def write_junit_report(tmp_path):
    def _write(name, cases, suite_name="rspec"):
        testcases = "\n".join(
            f'    <testcase name="{case_name}" file="{file}" time="{time}"/>'
            for case_name, file, time in cases
        )
        total = sum(float(time) for _, _, time in cases)
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            "<testsuites>\n"
            f'  <testsuite name="{suite_name}" tests="{len(cases)}" failures="0" errors="0" skipped="0" time="{total}">\n'
            f"{testcases}\n"
            "  </testsuite>\n"
            "</testsuites>\n"
        )
        return str(path)

    return _write


@pytest.fixture()
def in_tmp_path(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture()
def make_test_files(in_tmp_path):
    def _make(*paths):
        for path in paths:
            test_file = in_tmp_path / path
            test_file.parent.mkdir(parents=True, exist_ok=True)
            test_file.write_text("# test\n")
        return sorted(paths)

    return _make
