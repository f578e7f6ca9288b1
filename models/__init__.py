from .models import (
	Pillar, SubPillar, Selection, ResponseDraft, Response,
	SubPillarStats, PillarStats, OutrosStats, Statistics,
	format_timestamp, parse_timestamp
)
from .models_v2 import Base, StorageItem

__all__ = [
	'Pillar', 'SubPillar', 'Selection', 'ResponseDraft', 'Response',
	'SubPillarStats', 'PillarStats', 'OutrosStats', 'Statistics',
	'format_timestamp', 'parse_timestamp',
	'Base', 'StorageItem'
]
