from dataclasses import dataclass, field
from typing import List
from datetime import datetime, timezone


def format_timestamp(value: datetime) -> str:
    """ISO-8601 em UTC com milissegundos e sufixo 'Z' (ex.: 2024-03-05T14:07:11.123Z)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(raw: str) -> datetime:
    """Inverso de format_timestamp; datas sem fuso são tratadas como UTC."""
    if not isinstance(raw, str):
        raise ValueError(f"timestamp inválido: {raw!r}")
    text = raw.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    value = datetime.fromisoformat(text)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _text(data: dict, key: str) -> str:
    # campos de texto gravados precisam ser str (ou ausentes)
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TypeError(f"campo '{key}' deveria ser texto: {value!r}")
    return value


@dataclass(frozen=True)
class SubPillar:
    id: str
    label: str


@dataclass(frozen=True)
class Pillar:
    id: str
    label: str
    sub_pillars: List[SubPillar] = field(default_factory=list)


@dataclass(frozen=True)
class Selection:
    pillar_id: str
    pillar_label: str
    sub_pillar_id: str
    sub_pillar_label: str

    def to_dict(self):
        return {
            "pillarId": self.pillar_id,
            "pillarLabel": self.pillar_label,
            "subPillarId": self.sub_pillar_id,
            "subPillarLabel": self.sub_pillar_label,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Selection":
        return cls(
            pillar_id=str(data["pillarId"]),
            pillar_label=str(data.get("pillarLabel", data["pillarId"])),
            sub_pillar_id=str(data["subPillarId"]),
            sub_pillar_label=str(data.get("subPillarLabel", data["subPillarId"])),
        )


@dataclass
class ResponseDraft:
    nome: str
    telefone: str
    cpf: str = ""
    codigo_turma: str = ""
    selections: List[Selection] = field(default_factory=list)
    outros: str = ""


@dataclass(frozen=True)
class Response:
    id: str
    timestamp: datetime
    nome: str
    telefone: str
    cpf: str = ""
    codigo_turma: str = ""
    selections: List[Selection] = field(default_factory=list)
    outros: str = ""

    @classmethod
    def from_draft(cls, draft: ResponseDraft, id: str, timestamp: datetime) -> "Response":
        return cls(
            id=id,
            timestamp=timestamp,
            nome=draft.nome,
            telefone=draft.telefone,
            cpf=draft.cpf,
            codigo_turma=draft.codigo_turma,
            selections=list(draft.selections),
            outros=draft.outros,
        )

    def to_dict(self):
        return {
            "id": self.id,
            "timestamp": format_timestamp(self.timestamp),
            "nome": self.nome,
            "telefone": self.telefone,
            "cpf": self.cpf,
            "codigoTurma": self.codigo_turma,
            "selections": [s.to_dict() for s in self.selections],
            "outros": self.outros,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Response":
        # registros antigos não têm selections/cpf/codigoTurma
        selections = data.get("selections") or []
        if not isinstance(selections, list):
            raise TypeError(f"selections deveria ser uma lista: {selections!r}")
        return cls(
            id=str(data["id"]),
            timestamp=parse_timestamp(data["timestamp"]),
            nome=_text(data, "nome"),
            telefone=_text(data, "telefone"),
            cpf=_text(data, "cpf"),
            codigo_turma=_text(data, "codigoTurma"),
            selections=[Selection.from_dict(s) for s in selections],
            outros=_text(data, "outros"),
        )


@dataclass
class SubPillarStats:
    sub_pillar_id: str
    sub_pillar_label: str
    count: int = 0
    percentage: float = 0.0

    def to_dict(self):
        return {
            "subPillarId": self.sub_pillar_id,
            "subPillarLabel": self.sub_pillar_label,
            "count": self.count,
            "percentage": self.percentage,
        }


@dataclass
class PillarStats:
    pillar_id: str
    pillar_label: str
    count: int = 0
    percentage: float = 0.0
    sub_pillars: List[SubPillarStats] = field(default_factory=list)

    def to_dict(self):
        return {
            "pillarId": self.pillar_id,
            "pillarLabel": self.pillar_label,
            "count": self.count,
            "percentage": self.percentage,
            "subPillars": [sp.to_dict() for sp in self.sub_pillars],
        }


@dataclass
class OutrosStats:
    count: int = 0
    percentage: float = 0.0
    entries: List[str] = field(default_factory=list)

    def to_dict(self):
        return {"count": self.count, "percentage": self.percentage, "entries": list(self.entries)}


@dataclass
class Statistics:
    total: int = 0
    pillars: List[PillarStats] = field(default_factory=list)
    outros: OutrosStats = field(default_factory=OutrosStats)

    def to_dict(self):
        return {
            "total": self.total,
            "pillars": [p.to_dict() for p in self.pillars],
            "outros": self.outros.to_dict(),
        }
