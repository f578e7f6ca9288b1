import csv
import io
import logging
from typing import Dict, List, Optional, Sequence

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from errors import ExportError
from models import Response, Selection

logger = logging.getLogger(__name__)

COLUMNS = ['Data/Hora', 'Nome', 'CPF', 'Telefone', 'Código da Turma', 'Motivos', 'Outros']
MAX_COLUMN_WIDTH = 50


def flatten_selections(selections: Sequence[Selection]) -> str:
    """'Pilar: sub1, sub2 | Pilar2: sub3', agrupando pelo rótulo do pilar."""
    grouped: Dict[str, List[str]] = {}
    for sel in selections:
        grouped.setdefault(sel.pillar_label, []).append(sel.sub_pillar_label)
    return ' | '.join(f"{label}: {', '.join(subs)}" for label, subs in grouped.items())


def build_rows(responses: Sequence[Response], tz=None) -> List[Dict[str, str]]:
    rows = []
    for r in responses:
        ts = r.timestamp.astimezone(tz) if tz is not None else r.timestamp
        rows.append({
            'Data/Hora': ts.strftime('%d/%m/%Y %H:%M'),
            'Nome': r.nome,
            'CPF': r.cpf,
            'Telefone': r.telefone,
            'Código da Turma': r.codigo_turma,
            'Motivos': flatten_selections(r.selections),
            'Outros': r.outros,
        })
    return rows


def column_widths(rows: Sequence[Dict[str, str]]) -> List[int]:
    widths = []
    for col in COLUMNS:
        longest = max([len(col)] + [len(str(row.get(col, ''))) for row in rows])
        widths.append(min(longest + 2, MAX_COLUMN_WIDTH))
    return widths


def to_xlsx(responses: Sequence[Response], tz=None) -> bytes:
    try:
        rows = build_rows(responses, tz)
        wb = Workbook()
        ws = wb.active
        ws.title = 'Respostas'
        ws.append(COLUMNS)
        for cell in ws[1]:
            cell.font = Font(bold=True)
        for row in rows:
            ws.append([row[col] for col in COLUMNS])
        for idx, width in enumerate(column_widths(rows), start=1):
            ws.column_dimensions[get_column_letter(idx)].width = width

        logger.info(f"Planilha gerada com {len(rows)} linha(s).")
        output = io.BytesIO()
        wb.save(output)
        return output.getvalue()
    except Exception as e:
        raise ExportError(f"Falha ao gerar planilha: {e}") from e


def to_csv(responses: Sequence[Response], tz=None) -> bytes:
    try:
        si = io.StringIO()
        writer = csv.writer(si)
        writer.writerow(COLUMNS)
        for row in build_rows(responses, tz):
            writer.writerow([row[col] for col in COLUMNS])
        return si.getvalue().encode('utf-8')
    except Exception as e:
        raise ExportError(f"Falha ao gerar CSV: {e}") from e


def export_filename(month: Optional[int], year: int, ext: str) -> str:
    if month is None:
        return f'respostas_{year}.{ext}'
    return f'respostas_{year}-{month + 1:02d}.{ext}'
