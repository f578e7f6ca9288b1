import json
import logging
import os
import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from errors import StorageError
from models import Base, Response, ResponseDraft, StorageItem

logger = logging.getLogger(__name__)

STORAGE_KEY = 'aec-training-responses'


class MemoryStorage:
    """Armazenamento chave/valor em memória (testes e execuções descartáveis)."""

    def __init__(self):
        self._items: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileStorage:
    """Um arquivo <chave>.json por chave dentro de data_dir."""

    def __init__(self, data_dir: str = 'data'):
        self.data_dir = data_dir

    def _path(self, key: str) -> str:
        return os.path.join(self.data_dir, f'{key}.json')

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not os.path.exists(path):
            return None
        with open(path, 'r', encoding='utf-8') as f:
            return f.read()

    def set_item(self, key: str, value: str) -> None:
        os.makedirs(self.data_dir, exist_ok=True)
        with open(self._path(key), 'w', encoding='utf-8') as f:
            f.write(value)

    def remove_item(self, key: str) -> None:
        path = self._path(key)
        if os.path.exists(path):
            os.remove(path)


class SqlStorage:
    """Tabela storage_items via SQLAlchemy (padrão: sqlite em data/forms.db)."""

    def __init__(self, database_url: str = 'sqlite:///data/forms.db'):
        if database_url.startswith('sqlite:///') and not database_url.startswith('sqlite:////'):
            folder = os.path.dirname(database_url[len('sqlite:///'):])
            if folder:
                os.makedirs(folder, exist_ok=True)
        self.engine = create_engine(database_url)
        self.Session = sessionmaker(bind=self.engine)
        Base.metadata.create_all(self.engine)

    def get_item(self, key: str) -> Optional[str]:
        with self.Session() as s:
            item = s.get(StorageItem, key)
            return item.value if item else None

    def set_item(self, key: str, value: str) -> None:
        with self.Session() as s:
            item = s.get(StorageItem, key)
            if item is None:
                s.add(StorageItem(key=key, value=value))
            else:
                item.value = value
            s.commit()

    def remove_item(self, key: str) -> None:
        with self.Session() as s:
            item = s.get(StorageItem, key)
            if item is not None:
                s.delete(item)
                s.commit()


def create_storage(backend: str, data_dir: str = 'data', database_url: str = 'sqlite:///data/forms.db'):
    if backend == 'file':
        return FileStorage(data_dir)
    if backend == 'sql':
        return SqlStorage(database_url)
    if backend == 'memory':
        return MemoryStorage()
    raise StorageError(f"STORAGE_BACKEND desconhecido: {backend!r}")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ResponseStore:
    """
    Lista de respostas persistida como um único array JSON sob uma chave fixa.

    Não há trava: duas gravações simultâneas fazem read-modify-write sobre a
    lista inteira e a última vence.
    """

    def __init__(self, storage, key: str = STORAGE_KEY, clock: Callable[[], datetime] = _utcnow):
        self.storage = storage
        self.key = key
        self.clock = clock

    def _load_raw(self) -> List[dict]:
        stored = self.storage.get_item(self.key)
        if not stored:
            return []
        try:
            parsed = json.loads(stored)
        except ValueError as e:
            logger.warning(f"Dados de respostas corrompidos em '{self.key}', tratando como vazio: {e}")
            return []
        if not isinstance(parsed, list):
            logger.warning(f"Formato inesperado em '{self.key}' (esperado uma lista), tratando como vazio.")
            return []
        return parsed

    def save(self, draft: ResponseDraft) -> Response:
        entries = self._load_raw()
        response = Response.from_draft(draft, id=str(uuid.uuid4()), timestamp=self.clock())
        entries.append(response.to_dict())
        self.storage.set_item(self.key, json.dumps(entries, ensure_ascii=False))
        logger.info(f"Resposta {response.id} salva ({len(response.selections)} seleção(ões)).")
        return response

    def list(self) -> List[Response]:
        responses = []
        for entry in self._load_raw():
            try:
                responses.append(Response.from_dict(entry))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.warning(f"Registro ignorado em '{self.key}': {e!r}")
        return responses

    def clear(self) -> None:
        self.storage.remove_item(self.key)
        logger.info(f"Todas as respostas em '{self.key}' foram removidas.")
