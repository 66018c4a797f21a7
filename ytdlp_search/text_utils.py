"""
Text normalization and string-distance primitives.
Every scorer goes through these helpers so all fields are compared the same way.
"""

import re  # punctuation and whitespace cleanup
from typing import Iterable, Optional  # type hints

import jellyfish  # Soundex phonetic codes
from rapidfuzz.distance import Levenshtein  # edit distance

# Anything that is neither a word character nor whitespace
RE_SPECIAL = re.compile(r"[^\w\s]")
# Runs of whitespace (tabs, newlines, repeated spaces)
RE_SPACES = re.compile(r"\s+")
# Soundex only looks at latin letters
RE_NON_LETTERS = re.compile(r"[^a-z]")


def normalize_text(text: str) -> str:
	"""
	Lowercase, drop special characters, collapse whitespace and trim.
	Empty input gives empty output.
	"""
	text = text.lower()
	text = RE_SPECIAL.sub('', text)
	text = RE_SPACES.sub(' ', text)
	return text.strip()


def join_tags(tags: Optional[Iterable[str]]) -> str:
	"""Normalize each tag and join them with single spaces."""
	return ' '.join(normalize_text(tag) for tag in (tags or []))


def levenshtein_similarity(a: str, b: str) -> float:
	"""
	Edit-distance similarity in [0, 1], where 1 means identical.
	Two empty strings are identical (1.0); one empty string against a
	non-empty one scores 0.0.
	"""
	max_length = max(len(a), len(b))
	if max_length == 0:
		return 1.0
	distance = Levenshtein.distance(a, b)
	return (max_length - distance) / max_length


def phonetic_similarity(a: str, b: str) -> float:
	"""1.0 when both strings share the same Soundex code, else 0.0."""
	code_a = _soundex(a)
	code_b = _soundex(b)
	# Strings without any letters have no code and never "sound alike"
	if not code_a or not code_b:
		return 0.0
	return 1.0 if code_a == code_b else 0.0


def _soundex(text: str) -> str:
	letters = RE_NON_LETTERS.sub('', text.lower())
	return jellyfish.soundex(letters) if letters else ''
