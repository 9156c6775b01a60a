import json
import shutil

import pytest
from click.testing import CliRunner
from junitparser import JUnitXml

from ci_split.cli import cli, merge_junit_xml

SAMPLE_FILES = [
    "spec/models/user_spec.rb",
    "spec/models/post_spec.rb",
    "spec/controllers/users_controller_spec.rb",
    "spec/controllers/posts_controller_spec.rb",
    "spec/services/auth_service_spec.rb",
    "spec/helpers/application_helper_spec.rb",
]


@pytest.fixture()
def runner():
    return CliRunner()


@pytest.fixture()
def sample_project(make_test_files, in_tmp_path, sample_rspec_path):
    make_test_files(*SAMPLE_FILES)
    reports = in_tmp_path / "reports"
    reports.mkdir()
    shutil.copy(sample_rspec_path, reports / "rspec.json")
    return in_tmp_path


def _split(runner, *args):
    return runner.invoke(cli, ["split", *args])


def _files(result):
    return [line for line in result.stdout.splitlines() if line]


def test_outputs_files_for_node(runner, sample_project):
    result = _split(runner, "--report-path", "reports", "--node-index", "0", "--node-total", "2")

    assert result.exit_code == 0, result.output
    assert _files(result)
    assert all(f.startswith("spec/") for f in _files(result))


def test_nodes_partition_all_files(runner, sample_project):
    outputs = [
        _files(_split(runner, "--json-path", "reports", "--node-index", str(i), "--node-total", "2"))
        for i in range(2)
    ]

    assert not set(outputs[0]) & set(outputs[1])
    assert sorted(outputs[0] + outputs[1]) == sorted(SAMPLE_FILES)


def test_single_report_file(runner, sample_project):
    result = _split(runner, "--report-path", "reports/rspec.json")

    assert result.exit_code == 0, result.output
    assert sorted(_files(result)) == sorted(SAMPLE_FILES)


def test_report_path_is_required(runner):
    result = _split(runner)

    assert result.exit_code == 2
    assert "--report-path" in result.output


def test_falls_back_to_all_files_without_reports(runner, make_test_files):
    make_test_files("spec/a_spec.rb", "spec/b_spec.rb")

    result = _split(runner, "--report-path", "nonexistent_dir")

    assert result.exit_code == 0, result.output
    assert _files(result) == ["spec/a_spec.rb", "spec/b_spec.rb"]
    assert "Warning: Report path not found: nonexistent_dir" in result.stderr


def test_no_test_files_exits_cleanly(runner, in_tmp_path):
    (in_tmp_path / "reports").mkdir()
    (in_tmp_path / "reports" / "empty.json").write_text('{"examples": []}')

    result = _split(runner, "--report-path", "reports")

    assert result.exit_code == 0
    assert result.stdout == ""
    assert "Warning: No test files found" in result.stderr


def test_warns_about_files_without_history(runner, make_test_files, in_tmp_path):
    make_test_files("spec/a_spec.rb", "spec/new_spec.rb")
    (in_tmp_path / "reports").mkdir()
    (in_tmp_path / "reports" / "rspec.json").write_text(
        json.dumps({"examples": [{"file_path": "./spec/a_spec.rb", "run_time": 1.0}]})
    )

    result = _split(runner, "--report-path", "reports")

    assert sorted(_files(result)) == ["spec/a_spec.rb", "spec/new_spec.rb"]
    assert (
        "Warning: Found 1 test files not in reports, adding with default execution time"
        in result.stderr
    )


def test_no_warning_when_all_files_have_history(runner, make_test_files, in_tmp_path):
    make_test_files("spec/test1_spec.rb", "spec/test2_spec.rb")
    (in_tmp_path / "reports").mkdir()
    (in_tmp_path / "reports" / "rspec.json").write_text(
        json.dumps(
            {
                "examples": [
                    {"file_path": "./spec/test1_spec.rb", "run_time": 1.0},
                    {"file_path": "./spec/test2_spec.rb", "run_time": 2.0},
                ]
            }
        )
    )

    result = _split(runner, "--report-path", "reports")

    assert result.exit_code == 0
    assert "not in reports" not in result.stderr


def test_custom_test_dir_and_pattern(runner, make_test_files, in_tmp_path):
    make_test_files("test/unit/user.test.rb", "test/unit/post.test.rb", "spec/a_spec.rb")
    (in_tmp_path / "reports").mkdir()
    (in_tmp_path / "reports" / "rspec.json").write_text(
        json.dumps({"examples": [{"file_path": "./test/unit/user.test.rb", "run_time": 1.0}]})
    )

    result = _split(
        runner, "--report-path", "reports", "--test-dir", "test", "--test-pattern", "unit/*.test.rb"
    )

    assert sorted(_files(result)) == ["test/unit/post.test.rb", "test/unit/user.test.rb"]


def test_split_by_example_threshold(runner, make_test_files, in_tmp_path):
    make_test_files("spec/heavy_spec.rb", "spec/light_spec.rb")
    (in_tmp_path / "reports").mkdir()
    (in_tmp_path / "reports" / "rspec.json").write_text(
        json.dumps(
            {
                "examples": [
                    {"id": "./spec/heavy_spec.rb[1:1]", "run_time": 1.0},
                    {"id": "./spec/heavy_spec.rb[1:2]", "run_time": 1.0},
                    {"id": "./spec/heavy_spec.rb[1:3]", "run_time": 1.0},
                    {"id": "./spec/light_spec.rb[1:1]", "run_time": 0.5},
                ]
            }
        )
    )

    outputs = [
        _files(
            _split(
                runner,
                "--report-path",
                "reports",
                "--node-index",
                str(i),
                "--node-total",
                "2",
                "--split-by-example-threshold",
                "2.0",
            )
        )
        for i in range(2)
    ]

    assert outputs == [
        ["spec/heavy_spec.rb[1:1]", "spec/heavy_spec.rb[1:3]"],
        ["spec/heavy_spec.rb[1:2]", "spec/light_spec.rb"],
    ]


@pytest.mark.parametrize("threshold", ["0", "-1"])
def test_rejects_non_positive_threshold(runner, sample_project, threshold):
    result = _split(runner, "--report-path", "reports", "--split-by-example-threshold", threshold)

    assert result.exit_code == 2


@pytest.mark.parametrize(
    "args",
    [
        ["--node-index", "2", "--node-total", "2"],
        ["--node-index", "-1"],
        ["--node-total", "0"],
    ],
)
def test_rejects_invalid_nodes(runner, sample_project, args):
    result = _split(runner, "--report-path", "reports", *args)

    assert result.exit_code == 2


def test_debug_output(runner, sample_project):
    result = _split(runner, "--report-path", "reports", "--node-total", "2", "--debug")

    assert result.exit_code == 0, result.output
    assert "Test Balancing" in result.stderr
    assert "Node 0:" in result.stderr
    assert "Node 1:" in result.stderr
    assert "Test Balancing" not in result.stdout


def test_no_debug_output_by_default(runner, sample_project):
    result = _split(runner, "--report-path", "reports", "--node-total", "2")

    assert "Test Balancing" not in result.stderr


def test_node_index_help_mentions_environment_default(runner):
    result = runner.invoke(cli, ["split", "--help"])

    assert result.exit_code == 0
    assert "CI_NODE_INDEX" in result.stdout


def test_version(runner):
    result = runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert result.stdout.startswith("ci-split, version ")


def test_merge_junit_xml(runner, tmp_path, write_junit_report):
    first = write_junit_report("input1.xml", [("a", "spec/a_spec.rb", "1.0")])
    second = write_junit_report("input2.xml", [("b", "spec/b_spec.rb", "2.0")])
    output = str(tmp_path / "merged.xml")

    result = runner.invoke(merge_junit_xml, [output, first, second])

    assert result.exit_code == 0, result.output
    assert JUnitXml.fromfile(output).tests == 2


def test_merge_junit_xml_via_group(runner, tmp_path, write_junit_report):
    first = write_junit_report("input1.xml", [("a", "spec/a_spec.rb", "1.0")])
    output = str(tmp_path / "merged.xml")

    result = runner.invoke(cli, ["merge-junit-xml", output, first])

    assert result.exit_code == 0, result.output


def test_merge_junit_xml_without_inputs(runner, tmp_path):
    result = runner.invoke(merge_junit_xml, [str(tmp_path / "merged.xml")])

    assert result.exit_code == 1
    assert "Error: No input files given" in result.stderr
