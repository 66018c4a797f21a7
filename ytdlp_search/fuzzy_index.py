"""
Fuzzy matching module.
A small multi-field approximate matcher on top of rapidfuzz: every field value
gets a match cost (0 = perfect, 1 = no match) from how well the query aligns
with it and how far from the expected location the best alignment starts.
Field costs are blended with per-field weights and a field-length norm.
"""

import math  # logarithmic threshold curve
import re  # token counting for the field-length norm
import sys  # float epsilon
from typing import Dict, List, Optional, Sequence, Tuple  # type hints

from rapidfuzz import fuzz  # partial alignment scoring

from loguru import logger  # console logging

from .config import FieldWeights  # per-field magnitudes
from .models import CandidateRecord  # indexed records

# Bounds of the query-length driven threshold
MIN_THRESHOLD = 0.1
MAX_THRESHOLD = 0.8
# Query length (characters) at which the threshold reaches MAX_THRESHOLD
MAX_QUERY_LENGTH = 150

# How many characters away from `location` a match may start before it costs 1.0
DEFAULT_DISTANCE = 250
# How strongly long fields are penalized (0 disables the field-length norm)
DEFAULT_FIELD_NORM_WEIGHT = 0.8

# Stand-in for a perfect (0.0) cost inside the weighted product
EPSILON = sys.float_info.epsilon

RE_TOKEN = re.compile(r"[^ ]+")


def calculate_threshold(length: int) -> float:
	"""
	Maximum accepted match cost for a query of `length` characters.

	Grows on a log curve from 0.1 (1 character) to 0.8 (150+ characters).

	    0.8 |                    ..........
	        |            ........
	        |      ......
	        |   ...
	    0.1 |...________________________________
	        1                                150
	"""
	length = max(1, length)  # ln(0) is undefined
	threshold = MIN_THRESHOLD + (math.log(length) / math.log(MAX_QUERY_LENGTH)) * (MAX_THRESHOLD - MIN_THRESHOLD)
	return max(MIN_THRESHOLD, min(MAX_THRESHOLD, threshold))


def calculate_location(query_length: int) -> int:
	"""
	Where in a field the query is expected to start.
	Always 0 for now; the query length is accepted so callers need not change.
	"""
	return 0


def field_norm(text: str, weight: float = DEFAULT_FIELD_NORM_WEIGHT) -> float:
	"""Length norm of a field value: 1 for one token, smaller for longer values."""
	tokens = len(RE_TOKEN.findall(text)) or 1
	return round(1 / math.pow(tokens, 0.5 * weight), 3)


# Record attribute -> weight name in FieldWeights
FIELDS = (
	('title', 'title'),
	('description', 'description'),
	('tags', 'tags'),
	('uploader', 'author'),
)


class FuzzyIndex:
	"""
	Approximate matcher over a batch of records.

	The index is built once per batch; `search` returns a match cost in [0, 1]
	for each record that has at least one field value within `threshold`.
	"""

	def __init__(
		self,
		records: Sequence[CandidateRecord],
		field_weights: FieldWeights,
		threshold: float,
		location: int = 0,
		distance: int = DEFAULT_DISTANCE,
		field_norm_weight: float = DEFAULT_FIELD_NORM_WEIGHT,
	):
		self.threshold = threshold
		self.location = location
		self.distance = distance
		self.field_norm_weight = field_norm_weight

		# Key weights are relative magnitudes; normalize so they sum to 1
		raw = field_weights.as_dict()
		total = sum(raw.values())
		self.key_weights = {name: value / total for name, value in raw.items()}

		# Pre-compute lowercase values and their norms: (record_id, [(key_weight, text, norm), ...])
		self._entries: List[Tuple[str, List[Tuple[float, str, float]]]] = []
		for record in records:
			values = []
			for attribute, weight_name in FIELDS:
				key_weight = self.key_weights[weight_name]
				for text in self._field_values(record, attribute):
					values.append((key_weight, text, field_norm(text, field_norm_weight)))
			self._entries.append((record.id, values))
		logger.debug(f"[FuzzyIndex] Indexed {len(self._entries)} records | threshold={threshold:.3f} location={location}")

	@staticmethod
	def _field_values(record: CandidateRecord, attribute: str) -> List[str]:
		value = getattr(record, attribute)
		if not value:
			return []
		if isinstance(value, (list, tuple)):
			return [item.lower() for item in value if item]
		return [value.lower()]

	def match_cost(self, pattern: str, text: str) -> Optional[float]:
		"""Cost of matching `pattern` inside `text`, or None when above the threshold."""
		if not pattern or not text:
			return None

		index = text.find(pattern)
		if index >= 0:
			accuracy = 0.0
			start = index
		else:
			alignment = fuzz.partial_ratio_alignment(pattern, text, score_cutoff=(1 - self.threshold) * 100)
			if alignment is None:
				return None
			accuracy = 1 - alignment.score / 100
			start = alignment.dest_start

		offset = abs(start - self.location)
		if self.distance:
			proximity = offset / self.distance
		else:
			proximity = 0.0 if offset == 0 else 1.0

		cost = min(1.0, accuracy + proximity)
		return cost if cost <= self.threshold else None

	def search(self, query: str) -> Dict[str, float]:
		"""Return {record_id: cost} for every record with at least one matching field value."""
		pattern = query.lower()
		results: Dict[str, float] = {}
		for record_id, values in self._entries:
			total = 1.0
			matched = False
			for key_weight, text, norm in values:
				cost = self.match_cost(pattern, text)
				if cost is None:
					continue
				matched = True
				total *= math.pow(cost if cost > 0 else EPSILON, key_weight * norm)
			if matched:
				results[record_id] = total
		logger.debug(f"[FuzzyIndex] Query '{query}' matched {len(results)} of {len(self._entries)} records")
		return results
