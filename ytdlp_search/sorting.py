"""
Sort strategies for scored results.
Maps a sort mode name to an ordering over ScoredRecord objects.
"""

import random  # unseeded shuffles for the random mode
from enum import Enum  # named sort modes
from typing import Callable, Dict, Iterable, List, Optional, Tuple  # type hints

from loguru import logger  # console logging

from .models import ScoredRecord  # items being ordered


class SortMode(str, Enum):
	FUZZY = 'fuzzy'  # descending fuzzy score
	LANGUAGE = 'language'  # descending language similarity
	RANDOM = 'random'  # new random order on every call
	NORMAL = 'normal'  # descending final similarity


def resolve_sort_mode(name: Optional[str]) -> SortMode:
	"""Turn a user supplied name into a SortMode; unknown names fall back to NORMAL."""
	if isinstance(name, SortMode):
		return name
	try:
		return SortMode((name or '').strip().lower())
	except ValueError:
		logger.debug(f"[Sorting] Unknown sort mode '{name}', using '{SortMode.NORMAL.value}'")
		return SortMode.NORMAL


# Higher score first, then id ascending so equal scores always come out in the same order
_SORT_KEYS: Dict[SortMode, Callable[[ScoredRecord], Tuple[float, str]]] = {
	SortMode.FUZZY: lambda r: (-r.fuzzy_score, r.id),
	SortMode.LANGUAGE: lambda r: (-r.language_similarity, r.id),
	SortMode.NORMAL: lambda r: (-r.similarity, r.id),
}


def get_sort_key(mode: SortMode) -> Callable[[ScoredRecord], Tuple[float, str]]:
	"""Key function for a deterministic mode. RANDOM has no key; use sort_results."""
	if mode is SortMode.RANDOM:
		raise ValueError("Random ordering has no sort key")
	return _SORT_KEYS[mode]


def sort_results(results: Iterable[ScoredRecord], mode=SortMode.NORMAL) -> List[ScoredRecord]:
	"""Return a new list ordered by the given mode (name or SortMode)."""
	mode = resolve_sort_mode(mode)
	ordered = list(results)
	if mode is SortMode.RANDOM:
		random.shuffle(ordered)
		return ordered
	ordered.sort(key=get_sort_key(mode))
	return ordered
