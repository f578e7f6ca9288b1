"""Tabela fixa de pilares e subpilares usada pelo formulário."""
from typing import List, Optional

from models import Pillar, SubPillar, Selection


PILLARS: List[Pillar] = [
    Pillar(
        id='motivos_operacionais',
        label='Motivos operacionais',
        sub_pillars=[
            SubPillar('disponibilidade_horario', 'Disponibilidade de horário'),
            SubPillar('localidade_treinamento', 'Localidade do treinamento'),
            SubPillar('forma_entrega', 'Forma de entrega (presencial/online)'),
            SubPillar('dificuldade_acesso_plataforma', 'Dificuldade de acesso à plataforma'),
            SubPillar('problemas_conectividade', 'Problemas de conectividade / internet'),
            SubPillar('duracao_treinamento', 'Duração do treinamento'),
        ],
    ),
    Pillar(
        id='motivos_pessoais',
        label='Motivos pessoais',
        sub_pillars=[
            SubPillar('questoes_saude', 'Questões de saúde'),
            SubPillar('motivos_familiares', 'Motivos familiares'),
            SubPillar('mudanca_rotina', 'Mudança repentina de rotina'),
            SubPillar('compromissos_pessoais', 'Compromissos pessoais inadiáveis'),
        ],
    ),
    Pillar(
        id='motivos_profissionais',
        label='Motivos profissionais',
        sub_pillars=[
            SubPillar('outra_oportunidade', 'Outra oportunidade de emprego'),
            SubPillar('conflito_jornada', 'Conflito com jornada do emprego atual'),
            SubPillar('jornada_incompativel', 'Jornada de trabalho incompatível'),
        ],
    ),
    Pillar(
        id='motivos_comportamentais',
        label='Motivos comportamentais / engajamento',
        sub_pillars=[
            SubPillar('falta_interesse', 'Falta de interesse pelo produto'),
            SubPillar('incompatibilidade_perfil', 'Incompatibilidade com o perfil da vaga'),
            SubPillar('falta_engajamento', 'Falta de engajamento durante a trilha'),
            SubPillar('quantidade_faltas', 'Quantidade de faltas'),
            SubPillar('nao_adesao_regras', 'Não adesão às regras do treinamento'),
        ],
    ),
    Pillar(
        id='motivos_estruturais',
        label='Motivos estruturais',
        sub_pillars=[
            SubPillar('ausencia_home_office', 'Ausência de home office'),
            SubPillar('equipamento_inadequado', 'Equipamento inadequado'),
            SubPillar('falta_documentacao', 'Falta de documentação necessária'),
            SubPillar('nao_entrega_documentacao', 'Não entrega das documentações necessárias'),
        ],
    ),
]


def get_pillar_by_id(pillar_id: str, pillars: List[Pillar] = PILLARS) -> Optional[Pillar]:
    for p in pillars:
        if p.id == pillar_id:
            return p
    return None


def get_sub_pillar_by_id(pillar_id: str, sub_pillar_id: str,
                         pillars: List[Pillar] = PILLARS) -> Optional[SubPillar]:
    pillar = get_pillar_by_id(pillar_id, pillars)
    if pillar is None:
        return None
    for sp in pillar.sub_pillars:
        if sp.id == sub_pillar_id:
            return sp
    return None


def get_sub_pillars(pillar_id: str, pillars: List[Pillar] = PILLARS) -> List[SubPillar]:
    pillar = get_pillar_by_id(pillar_id, pillars)
    return list(pillar.sub_pillars) if pillar else []


def build_selection(pillar_id: str, sub_pillar_id: str,
                    pillars: List[Pillar] = PILLARS) -> Optional[Selection]:
    """Monta uma Selection com os rótulos da tabela; None se o par não existir."""
    pillar = get_pillar_by_id(pillar_id, pillars)
    sub = get_sub_pillar_by_id(pillar_id, sub_pillar_id, pillars)
    if pillar is None or sub is None:
        return None
    return Selection(
        pillar_id=pillar.id,
        pillar_label=pillar.label,
        sub_pillar_id=sub.id,
        sub_pillar_label=sub.label,
    )
