import os
from importlib import metadata
from typing import Optional, Tuple

import click

from ci_split import settings
from ci_split.balancer import balance
from ci_split.debug import print_debug_info
from ci_split.discovery import discover_test_files
from ci_split.errors import InvalidArgument, MissingInput, ParseError
from ci_split.log import err
from ci_split.merge import merge_junit_reports
from ci_split.plan import Plan, build_plan
from ci_split.reports import find_reports

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def get_version() -> str:
    try:
        return metadata.version("ci-split")
    except metadata.PackageNotFoundError:
        return "unknown"


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(get_version(), "-v", "--version", prog_name="ci-split")
def cli() -> None:
    """Split a test suite across parallel CI nodes using past test timings."""


@cli.command("split", context_settings=CONTEXT_SETTINGS)
@click.option(
    "--node-index",
    type=click.IntRange(min=0),
    default=settings.node_index,
    show_default=True,
    help="Current node index (0-based). Defaults to CI_NODE_INDEX minus one, as GitLab parallel jobs number nodes from 1",
)
@click.option(
    "--node-total",
    type=click.IntRange(min=1),
    default=settings.node_total,
    show_default=True,
    help="Total number of nodes",
)
@click.option(
    "--report-path",
    "--json-path",
    "report_path",
    required=True,
    help="Directory of JUnit XML / RSpec JSON reports, or a single report file",
)
@click.option(
    "--test-dir",
    default=settings.test_dir,
    show_default=True,
    help="Test directory",
)
@click.option(
    "--test-pattern",
    default=settings.test_pattern,
    show_default=True,
    help="Test file pattern",
)
@click.option(
    "--split-by-example-threshold",
    "threshold",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Split files with execution time >= threshold into individual examples",
)
@click.option("--debug", is_flag=True, help="Show debug information")
def split(
    node_index: int,
    node_total: int,
    report_path: str,
    test_dir: str,
    test_pattern: str,
    threshold: Optional[float],
    debug: bool,
) -> None:
    """Print the test files assigned to one node."""
    if node_index >= node_total:
        raise click.BadParameter(
            f"{node_index} is not a valid index for {node_total} node(s).",
            param_hint="'--node-index'",
        )
    try:
        plan = _load_plan(report_path, test_dir, test_pattern, threshold)
        nodes = balance(plan.timings, node_total)
    except MissingInput:
        err("Warning: No test files found")
        raise click.exceptions.Exit(0)
    except InvalidArgument as e:
        raise click.UsageError(str(e))

    if debug:
        print_debug_info(
            nodes, plan.timings, plan.defaulted, plan.report_paths, plan.split_files
        )
    click.echo("\n".join(nodes[node_index].files))


def _load_plan(
    report_path: str, test_dir: str, test_pattern: str, threshold: Optional[float]
) -> Plan:
    test_files = discover_test_files(test_dir, test_pattern)
    if not os.path.exists(report_path):
        err(
            f"Warning: Report path not found: {report_path}, using all test files with equal execution time"
        )
        return Plan.without_history(test_files)

    plan = build_plan(find_reports(report_path), test_files, threshold)
    if plan.defaulted:
        err(
            f"Warning: Found {len(plan.defaulted)} test files not in reports, adding with default execution time"
        )
    return plan


@cli.command("merge-junit-xml", context_settings=CONTEXT_SETTINGS)
@click.argument("output", type=click.Path(dir_okay=False, writable=True))
@click.argument("inputs", nargs=-1, type=click.Path(dir_okay=False))
def merge_junit_xml(output: str, inputs: Tuple[str, ...]) -> None:
    """Merge JUnit XML INPUTS into a single OUTPUT report."""
    try:
        merge_junit_reports(output, inputs)
    except (MissingInput, ParseError) as e:
        err(f"Error: {e}")
        raise click.exceptions.Exit(1)
