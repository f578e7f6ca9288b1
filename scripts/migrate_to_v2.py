#!/usr/bin/env python3
"""Converte respostas do formato antigo (um booleano por motivo) para o formato v2 (selections):

- disponibilidadeHorario, localidadeTreinamento, ... -> selections [{pillarId, subPillarId, ...}]
- registros que já têm `selections` ficam como estão

Uso: python scripts/migrate_to_v2.py [--backend file|sql] [--dry-run]
"""
import os
import sys
import json
import argparse
import logging

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from config import load_settings, setup_logging
from storage import STORAGE_KEY, create_storage
from taxonomy import build_selection

logger = logging.getLogger(__name__)

# campo booleano antigo -> (pilar, subpilar)
LEGACY_FLAGS = {
    'disponibilidadeHorario': ('motivos_operacionais', 'disponibilidade_horario'),
    'localidadeTreinamento': ('motivos_operacionais', 'localidade_treinamento'),
    'periodoTreinamentoLongo': ('motivos_operacionais', 'duracao_treinamento'),
    'residenciaOutraCidade': ('motivos_operacionais', 'localidade_treinamento'),
    'outraOportunidadeEmprego': ('motivos_profissionais', 'outra_oportunidade'),
    'afinidadeProduto': ('motivos_comportamentais', 'falta_interesse'),
    'pendenciasDocumento': ('motivos_estruturais', 'nao_entrega_documentacao'),
    'ausenciaHomeOffice': ('motivos_estruturais', 'ausencia_home_office'),
}


def upgrade_entry(entry):
    """Devolve (entrada_v2, convertida?)."""
    if 'selections' in entry:
        return entry, False
    new_entry = {k: v for k, v in entry.items() if k not in LEGACY_FLAGS}
    selections = []
    seen = set()
    for flag, (pillar_id, sub_id) in LEGACY_FLAGS.items():
        if not entry.get(flag):
            continue
        # dois campos antigos podem cair no mesmo subpilar
        if (pillar_id, sub_id) in seen:
            continue
        seen.add((pillar_id, sub_id))
        selections.append(build_selection(pillar_id, sub_id).to_dict())
    new_entry['selections'] = selections
    new_entry.setdefault('cpf', '')
    new_entry.setdefault('codigoTurma', '')
    new_entry.setdefault('outros', '')
    return new_entry, True


def migrate(storage, key=STORAGE_KEY, dry_run=False):
    raw = storage.get_item(key)
    if not raw:
        return 0, 0
    try:
        entries = json.loads(raw)
    except ValueError as e:
        logger.warning(f'Não foi possível ler {key}: {e}')
        return 0, 0
    if not isinstance(entries, list):
        logger.warning(f'Formato inesperado em {key} — esperado uma lista.')
        return 0, 0

    upgraded = []
    converted = 0
    for entry in entries:
        if not isinstance(entry, dict):
            upgraded.append(entry)
            continue
        new_entry, changed = upgrade_entry(entry)
        upgraded.append(new_entry)
        converted += int(changed)

    if converted and not dry_run:
        storage.set_item(key, json.dumps(upgraded, ensure_ascii=False))
    return converted, len(entries) - converted


def main(argv=None):
    settings = load_settings()
    p = argparse.ArgumentParser()
    p.add_argument('--backend', default=settings.storage_backend, choices=['file', 'sql'])
    p.add_argument('--dry-run', action='store_true', help='Apenas contar, sem gravar')
    args = p.parse_args(argv)

    setup_logging(settings.log_level)
    storage = create_storage(args.backend, settings.data_dir, settings.database_url)
    converted, untouched = migrate(storage, dry_run=args.dry_run)
    logger.info(f'Migração concluída: {converted} resposta(s) convertida(s), {untouched} já no formato v2.')


if __name__ == '__main__':
    main()
