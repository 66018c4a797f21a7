"""
Unit tests for text normalization and string-distance primitives.
Run: python tests/test_text_utils.py
"""

import math
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
	sys.path.insert(0, str(ROOT))

from ytdlp_search.text_utils import join_tags, levenshtein_similarity, normalize_text, phonetic_similarity


def assert_equal(actual, expected, msg):
	if actual != expected:
		raise AssertionError(f"{msg} | expected={expected}, actual={actual}")


def test_normalize_text():
	assert_equal(normalize_text("Wow, this ROBLOX video is crazy!"), "wow this roblox video is crazy", "punctuation + case")
	assert_equal(normalize_text("  lots \t of \n  space  "), "lots of space", "whitespace collapse")
	assert_equal(normalize_text(""), "", "empty input")
	assert_equal(normalize_text("!!!"), "", "only punctuation")
	assert_equal(normalize_text("Café Ünïcode_ok"), "café ünïcode_ok", "unicode word characters kept")


def test_join_tags():
	assert_equal(join_tags(["City!", "Jumps"]), "city jumps", "tags normalized and joined")
	assert_equal(join_tags([]), "", "no tags")
	assert_equal(join_tags(None), "", "missing tags")


def test_levenshtein_similarity():
	assert_equal(levenshtein_similarity("roblox", "roblox"), 1.0, "identical strings")
	assert_equal(levenshtein_similarity("abc", "abd"), 2 / 3, "one substitution")
	assert_equal(levenshtein_similarity("", ""), 1.0, "two empty strings are identical")
	assert_equal(levenshtein_similarity("query", ""), 0.0, "empty field")
	assert_equal(levenshtein_similarity("", "field"), 0.0, "empty query")
	assert_equal(levenshtein_similarity("games", "music"), 0.0, "nothing in common")
	value = levenshtein_similarity("roblox", "roblox goes crazy")
	assert_equal(round(value, 6), round(6 / 17, 6), "prefix match ratio")
	assert not math.isnan(value)


def test_phonetic_similarity():
	assert_equal(phonetic_similarity("robert", "rupert"), 1.0, "same soundex code")
	assert_equal(phonetic_similarity("roblox", "crazy videos"), 0.0, "different codes")
	assert_equal(phonetic_similarity("", "anything"), 0.0, "empty string has no code")
	assert_equal(phonetic_similarity("123", "456"), 0.0, "no letters, no code")


def main():
	print("Running text utility tests...")
	test_normalize_text()
	test_join_tags()
	test_levenshtein_similarity()
	test_phonetic_similarity()
	print("All text utility tests passed!")


if __name__ == '__main__':
	main()
