import os
from collections.abc import Sequence
from xml.etree import ElementTree

from junitparser import JUnitXml, JUnitXmlError, TestSuite
from lxml import etree

from ci_split.errors import MissingInput, ParseError
from ci_split.log import err


def merge_junit_reports(output_path: str, input_paths: Sequence[str]) -> JUnitXml:
    """Concatenate the test suites of several JUnit XML reports into one file.

    Root statistics (tests, failures, errors, skipped, time) are recomputed.
    Inputs that do not exist are skipped; an unparsable input is an error.
    """
    if not input_paths:
        raise MissingInput("No input files given")

    result = JUnitXml()
    merged = 0
    for path in input_paths:
        if not os.path.isfile(path):
            err(f"Warning: File not found: {path}, skipping")
            continue
        try:
            xml = JUnitXml.fromfile(path)
        except (etree.XMLSyntaxError, ElementTree.ParseError, JUnitXmlError) as e:
            raise ParseError(path, str(e)) from e
        # Append suite elements as-is; suites sharing a name stay separate
        for suite in [xml] if isinstance(xml, TestSuite) else list(xml):
            result._elem.append(suite._elem)
        merged += 1
    if not merged:
        raise MissingInput("None of the input files exist")

    err(f"Merged {merged} junit reports into {output_path}")
    result.update_statistics()
    result.write(output_path)
    return result
