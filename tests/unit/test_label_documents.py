from __future__ import annotations

from pathlib import Path

import pytest
from openpyxl import Workbook, load_workbook

from arhiva_dosare.documents.labels import cover_cards, generate_labels, render_labels, spine_labels
from arhiva_dosare.documents.template import TemplateLoadFailure
from arhiva_dosare.models.case_record import CaseRecord
from arhiva_dosare.models.config_models import LabelSettings


@pytest.fixture()
def records(case_fields, inventory):
    def make(count: int, **overrides) -> list[CaseRecord]:
        # reversed on purpose: output order follows Nr. crt, not input order
        return [
            CaseRecord.from_fields(f"r{n}", inventory.id, case_fields(n, **overrides))
            for n in range(count, 0, -1)
        ]
    return make


def test_spine_labels_lines_and_order(records, inventory):
    labels = spine_labels(records(3), inventory, per_page=10, content_chars=60)
    assert [lb.sequence_number for lb in labels] == [1, 2, 3]
    assert labels[0].lines == ("1", "2020", "Dosar 1", "10 ani")
    assert (labels[2].page, labels[2].row, labels[2].col) == (1, 2, 6)


def test_spine_content_is_truncated(records, inventory):
    [label] = spine_labels(records(1, content="x" * 80), inventory, per_page=10, content_chars=20)
    assert label.lines[2] == "x" * 19 + "…"


def test_cover_cards_lines(records, inventory):
    cards = cover_cards(records(2, content="Acte"), inventory, content_chars=120)
    assert dict(cards[1].lines) == {
        "Compartiment": "Contabilitate",
        "Fond": "Primăria Comunei Vadu",
        "Indicativ": "I-2",
        "Nr. crt": "2",
        "Conținut": "Acte",
        "Date extreme": "2020",
        "Termen de păstrare": "10 ani",
    }
    assert (cards[1].page, cards[1].row, cards[1].col) == (1, 1, 4)


def test_render_labels_with_blank_template(tmp_path, records, inventory):
    out = tmp_path / "etichete.xlsx"
    report = render_labels(records(12), inventory, LabelSettings(), out)
    assert report.path == out
    assert (report.records, report.spine_pages, report.cover_pages) == (12, 2, 2)

    wb = load_workbook(out)
    assert wb.sheetnames == ["Cotor 1", "Cotor 2", "Coperta 1", "Coperta 2"]
    spine = wb["Cotor 1"]
    assert [spine.cell(row=r, column=2).value for r in range(2, 6)] == ["1", "2020", "Dosar 1", "10 ani"]
    assert spine.cell(row=4, column=2).alignment.text_rotation == 90
    assert spine.cell(row=2, column=20).value == "10"
    assert wb["Cotor 2"].cell(row=2, column=4).value == "12"

    cover = wb["Coperta 1"]
    assert cover.cell(row=1, column=1).value == "Compartiment"
    assert cover.cell(row=1, column=2).value == "Contabilitate"
    assert cover.cell(row=4, column=5).value == "2"
    assert cover.cell(row=36, column=5).value == "10"
    assert wb["Coperta 2"].cell(row=4, column=2).value == "11"


def test_every_sequence_number_appears_once(tmp_path, records, inventory):
    out = tmp_path / "etichete.xlsx"
    render_labels(records(23), inventory, LabelSettings(spine_per_page=9), out)
    wb = load_workbook(out)
    spine_sheets = [ws for ws in wb.worksheets if ws.title.startswith("Cotor ")]
    cover_sheets = [ws for ws in wb.worksheets if ws.title.startswith("Coperta ")]
    assert len(spine_sheets) == 3
    assert len(cover_sheets) == 3
    spine_numbers = [ws.cell(row=2, column=2 + 2 * s).value for ws in spine_sheets for s in range(9)]
    assert [n for n in spine_numbers if n is not None] == [str(n) for n in range(1, 24)]
    cover_numbers = [
        ws.cell(row=1 + r * 8 + 3, column=c + 1).value for ws in cover_sheets for r in range(5) for c in (1, 4)
    ]
    assert [n for n in cover_numbers if n is not None] == [str(n) for n in range(1, 24)]


def test_render_labels_from_template_file(tmp_path, records, inventory):
    template = tmp_path / "sablon.xlsx"
    wb = Workbook()
    wb.active.title = "Cotor"
    wb["Cotor"].column_dimensions["B"].width = 11
    wb["Cotor"]["A1"] = "Arhiva"
    wb.create_sheet("Coperta")
    wb.save(template)

    out = tmp_path / "etichete.xlsx"
    render_labels(records(2), inventory, LabelSettings(template=str(template)), out)
    result = load_workbook(out)
    page = result["Cotor 1"]
    assert page["A1"].value == "Arhiva"
    assert page.column_dimensions["B"].width == 11
    assert "Cotor" not in result.sheetnames


def test_missing_template_produces_no_output(tmp_path, records, inventory):
    out = tmp_path / "etichete.xlsx"
    with pytest.raises(TemplateLoadFailure):
        render_labels(records(2), inventory, LabelSettings(template=str(tmp_path / "lipsa.xlsx")), out)
    assert not out.exists()


def test_no_records_writes_nothing(tmp_path, inventory):
    out = tmp_path / "etichete.xlsx"
    report = render_labels([], inventory, LabelSettings(), out)
    assert report.path is None
    assert (report.records, report.spine_pages, report.cover_pages) == (0, 0, 0)
    assert not out.exists()


def test_generate_labels_reads_persisted_records(tmp_path, store, case_fields, inventory):
    for n in (1, 2, 3):
        store.seed(inventory.id, case_fields(n))
    store.seed("alt-inventar", case_fields(4))
    report = generate_labels(store, inventory.id, LabelSettings(), tmp_path / "e.xlsx")
    assert report.records == 3
    assert isinstance(report.path, Path)
