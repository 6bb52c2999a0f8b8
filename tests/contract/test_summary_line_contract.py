from __future__ import annotations

import re

from arhiva_dosare.services.importer import import_file
from arhiva_dosare.services.summary import render_summary_line

"""SUMMARY line contract for one import run."""

SUMMARY_PATTERN = re.compile(
    r"^SUMMARY file=(?P<file>.+?) status=(?P<status>success|failed) inserted=(?P<inserted>\d+) "
    r"updated=(?P<updated>\d+) skipped=(?P<skipped>\d+) elapsed_sec=(?P<elapsed>\d+(\.\d+)?)"
    r"(?: error=(?P<error>[A-Z][A-Z0-9_]+))?(?: rolled_back=true)?$"
)


def test_pattern_example_lines():
    assert SUMMARY_PATTERN.match(
        "SUMMARY file=inventar.xlsx status=success inserted=4 updated=0 skipped=1 elapsed_sec=0.84"
    )
    m = SUMMARY_PATTERN.match(
        "SUMMARY file=inventar.xlsx status=failed inserted=0 updated=0 skipped=0 elapsed_sec=0.1 "
        "error=WRITE_FAILURE rolled_back=true"
    )
    assert m and m["error"] == "WRITE_FAILURE"


def test_rendered_lines_match_contract(tmp_path, store, write_sheet, case_row):
    header = ["Nr. crt", "Indicativ nomenclator", "Conținut", "Date extreme"]
    ok = write_sheet(tmp_path / "ok.xlsx", [header, case_row(1)[:4]])
    bad = write_sheet(tmp_path / "bad.xlsx", [header, case_row(2)[:4]])

    success = SUMMARY_PATTERN.match(render_summary_line(import_file(ok, "inv-2020", store)))
    failure = SUMMARY_PATTERN.match(render_summary_line(import_file(bad, "inv-2020", store)))
    assert success and success["status"] == "success" and success["inserted"] == "1"
    assert failure and failure["status"] == "failed" and failure["error"] == "SEQUENCE_DOES_NOT_START_AT_ONE"
