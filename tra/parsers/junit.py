from pathlib import Path
from typing import List, Dict, Any
from lxml import etree
from tra.errors import ReportLoadError


def parse_junit_xml(xml_path: Path) -> List[Dict[str, Any]]:
    """Convert JUnit XML test cases into raw execution records."""
    results = []

    try:
        tree = etree.parse(str(xml_path))
    except etree.XMLSyntaxError as e:
        raise ReportLoadError(f"Invalid XML in {xml_path}: {e}")

    root = tree.getroot()

    if root.tag == "testsuite":
        suites = [root]
    else:
        suites = root.xpath(".//testsuite")

    for testsuite in suites:
        results.extend(_parse_testsuite(testsuite))

    return results


def _parse_testsuite(testsuite_elem) -> List[Dict[str, Any]]:
    results = []
    suite_name = testsuite_elem.get("name", "")

    # Nested suites are visited on their own.
    for testcase in testsuite_elem.xpath("./testcase"):
        classname = testcase.get("classname", "")
        name = testcase.get("name", "")

        duration = testcase.get("time")
        record: Dict[str, Any] = {
            "name": name,
            "fullName": f"{classname}.{name}" if classname else name,
            "status": "passed",
            "time": {"duration": _seconds_to_ms(duration)} if duration else {},
            "suiteName": suite_name,
        }

        failure = testcase.find("failure")
        error = testcase.find("error")
        skipped = testcase.find("skipped")

        if skipped is not None:
            record["status"] = "skipped"
        elif failure is not None:
            record["status"] = "failed"
            record["statusDetails"] = _status_details(failure)
        elif error is not None:
            record["status"] = "broken"
            record["statusDetails"] = _status_details(error)

        results.append(record)

    return results


def _seconds_to_ms(value: str) -> int:
    try:
        return int(round(float(value) * 1000))
    except ValueError:
        return 0


def _status_details(elem) -> Dict[str, Any]:
    message = elem.get("message") or elem.get("type") or ""
    trace = elem.text or ""
    return {"message": message or trace.strip(), "trace": trace}
