"""
Agregação das respostas para o painel administrativo.

Todas as funções são puras: recebem a lista de respostas e devolvem um
resultado novo, sem guardar estado entre chamadas.

Percentuais são calculados sobre o total de *respostas*, não de seleções.
Com respostas de múltiplas seleções (ou nenhuma), a soma dos percentuais de
um pilar ou entre pilares não fecha necessariamente em 100%.
"""
from datetime import date, tzinfo
from typing import Dict, List, Optional, Sequence

from models import OutrosStats, PillarStats, Response, Statistics, SubPillarStats


def _local(ts, tz: Optional[tzinfo]):
    return ts.astimezone(tz) if tz is not None else ts


def filter_by_period(responses: Sequence[Response], month: Optional[int], year: int,
                     tz: Optional[tzinfo] = None) -> List[Response]:
    """
    Mantém as respostas do ano (month=None) ou do mês/ano informado.

    month é zero-based (0 = janeiro). tz converte o timestamp antes da
    comparação; sem tz, compara no UTC gravado.
    """
    filtered = []
    for r in responses:
        ts = _local(r.timestamp, tz)
        if ts.year != year:
            continue
        if month is not None and ts.month - 1 != month:
            continue
        filtered.append(r)
    return filtered


def _percentage(count: int, total: int) -> float:
    return (count / total) * 100


def aggregate(responses: Sequence[Response]) -> Statistics:
    total = len(responses)
    if total == 0:
        return Statistics(total=0, pillars=[], outros=OutrosStats(count=0, percentage=0.0, entries=[]))

    # dicts preservam a ordem de inserção: pilares e subpilares saem na ordem em que aparecem
    pillars: Dict[str, PillarStats] = {}
    subs: Dict[str, Dict[str, SubPillarStats]] = {}
    for r in responses:
        for sel in r.selections:
            pillar = pillars.get(sel.pillar_id)
            if pillar is None:
                pillar = pillars[sel.pillar_id] = PillarStats(sel.pillar_id, sel.pillar_label)
                subs[sel.pillar_id] = {}
            sub = subs[sel.pillar_id].get(sel.sub_pillar_id)
            if sub is None:
                sub = subs[sel.pillar_id][sel.sub_pillar_id] = SubPillarStats(sel.sub_pillar_id, sel.sub_pillar_label)
            sub.count += 1

    result = []
    for pillar_id, pillar in pillars.items():
        pillar.sub_pillars = list(subs[pillar_id].values())
        for sub in pillar.sub_pillars:
            sub.percentage = _percentage(sub.count, total)
        pillar.count = sum(sub.count for sub in pillar.sub_pillars)
        pillar.percentage = _percentage(pillar.count, total)
        result.append(pillar)

    entries = [r.outros for r in responses if r.outros.strip() != '']
    outros = OutrosStats(count=len(entries), percentage=_percentage(len(entries), total), entries=entries)

    return Statistics(total=total, pillars=result, outros=outros)


def available_years(responses: Sequence[Response], today: Optional[date] = None,
                    tz: Optional[tzinfo] = None) -> List[int]:
    years = sorted({_local(r.timestamp, tz).year for r in responses}, reverse=True)
    if not years:
        return [(today or date.today()).year]
    return years


def sort_by_count(pillars: Sequence[PillarStats]) -> List[PillarStats]:
    """Ordem de exibição: maior contagem primeiro (empates mantêm a ordem original)."""
    ordered = []
    for p in sorted(pillars, key=lambda p: p.count, reverse=True):
        ordered.append(PillarStats(
            pillar_id=p.pillar_id,
            pillar_label=p.pillar_label,
            count=p.count,
            percentage=p.percentage,
            sub_pillars=sorted(p.sub_pillars, key=lambda sp: sp.count, reverse=True),
        ))
    return ordered
