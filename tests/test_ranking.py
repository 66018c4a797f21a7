"""
Unit tests for the Ranker: direct match, language similarity and the
reference ranking scenarios.
Run: python tests/test_ranking.py
"""

import math
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
	sys.path.insert(0, str(ROOT))

from ytdlp_search.config import FieldWeights, ScoreWeights, WeightConfiguration
from ytdlp_search.errors import InputError
from ytdlp_search.models import CandidateRecord
from ytdlp_search.ranking import Ranker, score
from ytdlp_search.sorting import sort_results
from tests.sample_data import mock_records


def assert_equal(actual, expected, msg):
	if actual != expected:
		raise AssertionError(f"{msg} | expected={expected}, actual={actual}")


def assert_true(cond, msg):
	if not cond:
		raise AssertionError(msg)


def assert_raises(exc_type, fn, msg):
	try:
		fn()
	except exc_type:
		return
	raise AssertionError(msg)


def ranked_ids(query):
	return [r.id for r in sort_results(score(query, mock_records()), 'normal')]


def test_scenario_roblox():
	assert_equal(ranked_ids("roblox"), ['1', '2', '3'], "'roblox' ranking")


def test_scenario_crazy():
	assert_equal(ranked_ids("crazy"), ['1', '3', '2'], "'crazy' ranking")


def test_scenario_games():
	assert_equal(ranked_ids("games"), ['2', '1', '3'], "'games' ranking")


def test_direct_match_ratio():
	ranker = Ranker()
	record = CandidateRecord(id='t', title='this is a title')
	# 5 of 15 characters, times the title weight
	expected = 0.6 * 5 / 15
	assert_true(math.isclose(ranker.compute_direct_match('title', record), expected), "title ratio times weight")
	assert_true(math.isclose(ranker.compute_direct_match('  TITLE ', record), expected), "query is lowercased and trimmed")


def test_direct_match_full_field_and_miss():
	ranker = Ranker()
	only_title = WeightConfiguration(direct_match=FieldWeights(1.0, 0.0, 0.0, 0.0))
	full = Ranker(only_title).compute_direct_match('roblox', CandidateRecord(id='f', title='Roblox'))
	assert_equal(full, 1.0, "query equal to the whole field scores 1")
	assert_equal(ranker.compute_direct_match('minecraft', mock_records()[0]), 0.0, "no substring, no score")


def test_direct_match_empty_fields():
	ranker = Ranker()
	record = CandidateRecord(id='e', title='', description=None, tags=[], uploader='')
	assert_equal(ranker.compute_direct_match('anything', record), 0.0, "empty fields score 0, no division error")


def test_direct_match_tags_are_joined():
	ranker = Ranker()
	record = CandidateRecord(id='t', tags=['city', 'jumps'])
	# "city jumps" contains "y j": 3 of 10 characters, times the tags weight
	assert_true(math.isclose(ranker.compute_direct_match('y j', record), 0.05 * 3 / 10), "tags joined with spaces")


def test_language_similarity_bounds():
	ranker = Ranker()
	for record in mock_records():
		value = ranker.compute_language_similarity('roblox', record)
		assert_true(0.0 <= value <= 1.0, f"language similarity in range for {record.id}: {value}")


def test_language_similarity_phonetic_author():
	ranker = Ranker()
	record = CandidateRecord(id='a', uploader='Rupert')
	# Only the author sounds like the query; empty title/description/tags score 0
	assert_true(math.isclose(ranker.compute_language_similarity('robert', record), 0.1), "author weight from soundex hit")


def test_missing_optional_fields():
	records = [CandidateRecord(id='bare')]
	results = score('roblox', records)
	assert_equal(len(results), 1, "bare record still scored")
	result = results[0]
	for value in (result.similarity, result.language_similarity, result.fuzzy_score, result.direct_match_score):
		assert_true(math.isfinite(value), "scores are finite")
	assert_equal(result.fuzzy_score, 0.0, "no fuzzy match scores 0")


def test_final_similarity_is_weighted_sum():
	weights = WeightConfiguration()
	for result in score('crazy', mock_records(), weights):
		expected = (
			weights.score.language * result.language_similarity +
			weights.score.fuzzy * result.fuzzy_score +
			weights.score.direct_match * result.direct_match_score
		)
		assert_true(math.isclose(result.similarity, expected), f"weighted sum for {result.id}")


def test_custom_score_weights():
	direct_only = WeightConfiguration(score=ScoreWeights(language=0.0, fuzzy=0.0, direct_match=1.0))
	for result in score('roblox', mock_records(), direct_only):
		assert_true(math.isclose(result.similarity, result.direct_match_score), "only direct match counts")


def test_score_is_idempotent():
	first = score('games', mock_records())
	second = score('games', mock_records())
	assert_equal(first, second, "same inputs give identical results")


def test_score_returns_sorted_and_complete():
	results = score('crazy', mock_records())
	assert_equal(sorted(r.id for r in results), ['1', '2', '3'], "one result per record")
	sims = [r.similarity for r in results]
	assert_equal(sims, sorted(sims, reverse=True), "sorted by similarity descending")


def test_score_rejects_blank_query():
	assert_raises(InputError, lambda: score('   ', mock_records()), "blank query should raise InputError")
	assert_raises(InputError, lambda: score(None, mock_records()), "missing query should raise InputError")


def test_score_empty_batch():
	assert_equal(score('roblox', []), [], "nothing to score")


def main():
	print("Running Ranker tests...")
	test_scenario_roblox()
	test_scenario_crazy()
	test_scenario_games()
	print(" - scenarios ok")
	test_direct_match_ratio()
	test_direct_match_full_field_and_miss()
	test_direct_match_empty_fields()
	test_direct_match_tags_are_joined()
	print(" - direct match ok")
	test_language_similarity_bounds()
	test_language_similarity_phonetic_author()
	print(" - language similarity ok")
	test_missing_optional_fields()
	test_final_similarity_is_weighted_sum()
	test_custom_score_weights()
	test_score_is_idempotent()
	test_score_returns_sorted_and_complete()
	test_score_rejects_blank_query()
	test_score_empty_batch()
	print("All Ranker tests passed!")


if __name__ == '__main__':
	main()
