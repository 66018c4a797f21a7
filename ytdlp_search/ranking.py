"""
Ranking module.
Combines language similarity, fuzzy matching and direct substring matching
into a single similarity score per record.
"""

from typing import List, Optional, Sequence

from loguru import logger

from .config import DEFAULT_WEIGHTS, FieldWeights, WeightConfiguration
from .errors import InputError
from .fuzzy_index import FuzzyIndex, calculate_location, calculate_threshold
from .models import CandidateRecord, ScoredRecord
from .sorting import SortMode, sort_results
from .text_utils import join_tags, levenshtein_similarity, normalize_text, phonetic_similarity


def validate_query(query: Optional[str]) -> str:
	"""Return the query unchanged, or raise InputError if it is missing or blank."""
	if not isinstance(query, str) or not query.strip():
		raise InputError("Missing query parameter")
	return query


class Ranker:
	"""
	Computes final ranking scores based on three signals:
	- language_similarity: edit distance on title/description/tags, Soundex on the uploader (0..1)
	- fuzzy_score: 1 - cost from the FuzzyIndex built over the batch (0..1, 0 if no match)
	- direct_match_score: length ratio of exact substring hits, weighted per field
	"""

	def __init__(self, weights: Optional[WeightConfiguration] = None):
		self.weights = (weights or DEFAULT_WEIGHTS).validate()

	def compute_language_similarity(self, query: str, record: CandidateRecord) -> float:
		"""Weighted edit-distance/phonetic similarity between the query and the record fields."""
		weights = self.weights.language
		query_normalized = normalize_text(query)
		title = normalize_text(record.title or '')
		description = normalize_text(record.description or '')
		tags = join_tags(record.tags)
		author = normalize_text(record.uploader or '')

		return (
			weights.title * levenshtein_similarity(query_normalized, title) +
			weights.description * levenshtein_similarity(query_normalized, description) +
			weights.tags * levenshtein_similarity(query_normalized, tags) +
			weights.author * phonetic_similarity(query_normalized, author)
		)

	def compute_direct_match(self, query: str, record: CandidateRecord) -> float:
		"""
		Share of each field covered by an exact occurrence of the query, weighted per field.

		query 'title' in title 'this is a title' -> 5 / 15, times the title weight.
		"""
		weights: FieldWeights = self.weights.direct_match
		query_normalized = query.lower().strip()
		fields = (
			(record.title, weights.title),
			(record.description, weights.description),
			(' '.join(record.tags or []), weights.tags),
			(record.uploader, weights.author),
		)

		score = 0.0
		for value, weight in fields:
			value_normalized = (value or '').lower().strip()
			# Empty field: nothing to match, and no division by zero
			if not value_normalized or query_normalized not in value_normalized:
				continue
			score += weight * len(query_normalized) / len(value_normalized)
		return score

	def build_fuzzy_index(self, query: str, records: Sequence[CandidateRecord]) -> FuzzyIndex:
		return FuzzyIndex(
			records,
			field_weights=self.weights.fuzzy,
			threshold=calculate_threshold(len(query)),
			location=calculate_location(len(query)),
		)

	def score(self, query: str, records: Sequence[CandidateRecord]) -> List[ScoredRecord]:
		"""
		Score every record against the query.
		Returns one ScoredRecord per input record, sorted by similarity (highest first).
		"""
		validate_query(query)
		if not records:
			return []

		fuzzy_costs = self.build_fuzzy_index(query, records).search(query)
		score_weights = self.weights.score

		results: List[ScoredRecord] = []
		for record in records:
			language_similarity = self.compute_language_similarity(query, record)
			cost = fuzzy_costs.get(record.id)
			fuzzy_score = 1.0 - cost if cost is not None else 0.0
			direct_match_score = self.compute_direct_match(query, record)

			similarity = (
				score_weights.language * language_similarity +
				score_weights.fuzzy * fuzzy_score +
				score_weights.direct_match * direct_match_score
			)
			results.append(ScoredRecord(
				record=record,
				similarity=similarity,
				language_similarity=language_similarity,
				fuzzy_score=fuzzy_score,
				direct_match_score=direct_match_score,
			))

		logger.debug(f"[Ranker] Scored {len(results)} records for '{query}' ({len(fuzzy_costs)} fuzzy matches)")
		return sort_results(results, SortMode.NORMAL)


def score(query: str, candidates: Sequence[CandidateRecord], weights: Optional[WeightConfiguration] = None) -> List[ScoredRecord]:
	"""Score a whole batch with a fresh Ranker; see Ranker.score."""
	return Ranker(weights).score(query, candidates)
