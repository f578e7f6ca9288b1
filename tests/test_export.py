import csv
import io
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest
from openpyxl import load_workbook

import export
from errors import ExportError
from export import (
    COLUMNS, MAX_COLUMN_WIDTH, build_rows, column_widths, export_filename,
    flatten_selections, to_csv, to_xlsx,
)


def test_flatten_groups_by_pillar_in_first_observed_order(make_response):
    r = make_response(selections=[
        ("motivos_operacionais", "localidade_treinamento"),
        ("motivos_pessoais", "questoes_saude"),
        ("motivos_operacionais", "forma_entrega"),
    ])

    assert flatten_selections(r.selections) == (
        "Motivos operacionais: Localidade do treinamento, Forma de entrega (presencial/online)"
        " | Motivos pessoais: Questões de saúde"
    )
    assert flatten_selections([]) == ""


def test_build_rows_columns_and_date_format(make_response):
    r = make_response(
        timestamp=datetime(2024, 2, 1, 2, 30, tzinfo=timezone.utc),
        selections=[("motivos_pessoais", "questoes_saude")],
        outros="Outro motivo",
    )

    (row,) = build_rows([r])
    assert list(row) == COLUMNS
    assert row["Data/Hora"] == "01/02/2024 02:30"
    assert row["Nome"] == "Maria"
    assert row["Motivos"] == "Motivos pessoais: Questões de saúde"
    assert row["Outros"] == "Outro motivo"

    (local_row,) = build_rows([r], tz=ZoneInfo("America/Sao_Paulo"))
    assert local_row["Data/Hora"] == "31/01/2024 23:30"


def test_column_widths_are_capped():
    rows = [{col: "" for col in COLUMNS}]
    rows[0]["Outros"] = "x" * 200
    rows[0]["Nome"] = "abc"

    widths = dict(zip(COLUMNS, column_widths(rows)))
    assert widths["Outros"] == MAX_COLUMN_WIDTH
    assert widths["Nome"] == len("Nome") + 2
    assert widths["Código da Turma"] == len("Código da Turma") + 2


def test_to_xlsx_contents(make_response):
    responses = [
        make_response(selections=[("motivos_pessoais", "questoes_saude")], nome="Ana"),
        make_response(outros="Texto " * 30, nome="Bruno"),
    ]

    wb = load_workbook(io.BytesIO(to_xlsx(responses)))
    ws = wb["Respostas"]

    assert [c.value for c in ws[1]] == COLUMNS
    assert ws[1][0].font.bold
    assert ws.max_row == 3
    assert ws.cell(row=2, column=2).value == "Ana"
    assert ws.cell(row=2, column=6).value == "Motivos pessoais: Questões de saúde"
    assert ws.cell(row=3, column=2).value == "Bruno"
    assert ws.column_dimensions["G"].width == MAX_COLUMN_WIDTH


def test_to_csv_contents(make_response):
    content = to_csv([make_response(nome="Ana", outros="x, y")]).decode("utf-8")

    rows = list(csv.reader(io.StringIO(content)))
    assert rows[0] == COLUMNS
    assert rows[1][1] == "Ana"
    assert rows[1][6] == "x, y"


def test_export_failure_raises_export_error(make_response, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(export, "build_rows", boom)

    with pytest.raises(ExportError):
        to_xlsx([make_response()])
    with pytest.raises(ExportError):
        to_csv([make_response()])


@pytest.mark.parametrize("month, year, ext, expected", [
    (None, 2024, "xlsx", "respostas_2024.xlsx"),
    (0, 2024, "xlsx", "respostas_2024-01.xlsx"),
    (11, 2023, "csv", "respostas_2023-12.csv"),
])
def test_export_filename(month, year, ext, expected):
    assert export_filename(month, year, ext) == expected
