#!/usr/bin/env python3
"""Migra as respostas de `data/aec-training-responses.json` para o banco SQLite `data/forms.db`.

Uso:
  python scripts/migrate_to_db.py [--overwrite] [--data-dir data] [--database-url sqlite:///data/forms.db]

Por padrão junta as respostas do arquivo às já existentes no DB (sem duplicar ids);
use --overwrite para substituir o conteúdo do DB pelo do arquivo.
"""
import os
import json
import argparse
import logging
import sys

# Garante que o diretório raiz do projeto está no path para permitir imports relativos
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from config import setup_logging
from storage import STORAGE_KEY, FileStorage, SqlStorage

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    p = argparse.ArgumentParser()
    p.add_argument('--overwrite', action='store_true', help='Substituir as respostas existentes no DB')
    p.add_argument('--data-dir', default='data', help='Pasta do armazenamento em arquivo')
    p.add_argument('--database-url', default='sqlite:///data/forms.db', help='URL SQLAlchemy de destino')
    return p.parse_args(argv)


def load_entries(storage, key=STORAGE_KEY):
    raw = storage.get_item(key)
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except ValueError as e:
        logger.warning(f'Erro ao ler {key}: {e}')
        return []
    if not isinstance(data, list):
        logger.warning(f'Formato inesperado em {key} — esperado uma lista.')
        return []
    return data


def migrate(source, target, overwrite=False, key=STORAGE_KEY):
    """Copia as entradas de source para target; devolve (copiadas, ignoradas)."""
    entries = load_entries(source, key)
    if not entries:
        # origem vazia, ausente ou corrompida: o destino fica intacto, mesmo com overwrite
        logger.warning(f'Nenhuma resposta encontrada na origem ({key}); nada para migrar.')
        return 0, 0
    existing = [] if overwrite else load_entries(target, key)
    known_ids = {e.get('id') for e in existing if isinstance(e, dict)}

    copied = 0
    skipped = 0
    merged = list(existing)
    for entry in entries:
        if not isinstance(entry, dict) or entry.get('id') in known_ids:
            skipped += 1
            continue
        merged.append(entry)
        known_ids.add(entry.get('id'))
        copied += 1

    target.set_item(key, json.dumps(merged, ensure_ascii=False))
    return copied, skipped


def main(argv=None):
    args = parse_args(argv)
    setup_logging()
    source = FileStorage(args.data_dir)
    target = SqlStorage(args.database_url)
    copied, skipped = migrate(source, target, overwrite=args.overwrite)
    logger.info(f'Respostas migradas: {copied}, ignoradas (duplicadas ou inválidas): {skipped}')


if __name__ == '__main__':
    main()
