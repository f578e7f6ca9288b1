import logging
import re
from typing import List, Optional

from errors import ValidationError
from models import Pillar, ResponseDraft, Selection
from taxonomy import PILLARS, build_selection

logger = logging.getLogger(__name__)


def format_cpf(raw: str) -> str:
    """Aplica a máscara 000.000.000-00 aos dígitos (no máximo 11)."""
    value = re.sub(r'\D', '', raw or '')[:11]
    value = re.sub(r'(\d{3})(\d)', r'\1.\2', value, count=1)
    value = re.sub(r'(\d{3})(\d)', r'\1.\2', value, count=1)
    value = re.sub(r'(\d{3})(\d{1,2})$', r'\1-\2', value)
    return value


def _field(data, *names) -> str:
    for name in names:
        value = data.get(name)
        if value is not None:
            return str(value)
    return ''


def _raw_pairs(data) -> List[tuple]:
    # formulário HTML: selecoes=<pilar>:<subpilar>; JSON: selections=[{pillarId, subPillarId}]
    getlist = getattr(data, 'getlist', None)
    if getlist is not None:
        pairs = []
        for item in getlist('selecoes'):
            pillar_id, _, sub_id = str(item).partition(':')
            pairs.append((pillar_id.strip(), sub_id.strip()))
        return pairs
    raw = data.get('selections')
    if raw is None:
        return []
    if not isinstance(raw, list):
        # conta como uma seleção incompleta
        return [('', '')]
    pairs = []
    for item in raw:
        if isinstance(item, dict):
            pairs.append((str(item.get('pillarId') or '').strip(), str(item.get('subPillarId') or '').strip()))
        else:
            pairs.append(('', ''))
    return pairs


def parse_submission(data, pillars: Optional[List[Pillar]] = None) -> ResponseDraft:
    """
    Valida os dados enviados e monta o rascunho da resposta.

    Aceita o MultiDict do formulário HTML ou um dict vindo de JSON. Os rótulos
    das seleções sempre vêm da tabela de pilares, nunca do cliente.
    Levanta ValidationError com todas as mensagens encontradas.
    """
    pillars = PILLARS if pillars is None else pillars
    errors = []

    nome = _field(data, 'nome').strip()
    telefone = _field(data, 'telefone').strip()
    cpf = format_cpf(_field(data, 'cpf'))
    codigo_turma = _field(data, 'codigoTurma', 'codigo_turma').strip()
    outros = _field(data, 'outros')

    if not nome or not telefone:
        errors.append('Por favor, preencha nome e telefone.')

    selections: List[Selection] = []
    incomplete = False
    for pillar_id, sub_id in _raw_pairs(data):
        if not pillar_id or not sub_id:
            incomplete = True
            continue
        selection = build_selection(pillar_id, sub_id, pillars)
        if selection is None:
            incomplete = True
            continue
        selections.append(selection)
    if incomplete:
        errors.append('Seleção incompleta: selecione um pilar e um subpilar válidos.')

    if not selections and not outros.strip() and not incomplete:
        errors.append('Informe ao menos um motivo (pilar e subpilar) ou descreva em "Outros".')

    if errors:
        logger.warning(f"Envio rejeitado: {errors}")
        raise ValidationError(errors)

    return ResponseDraft(
        nome=nome,
        telefone=telefone,
        cpf=cpf,
        codigo_turma=codigo_turma,
        selections=selections,
        outros=outros,
    )
