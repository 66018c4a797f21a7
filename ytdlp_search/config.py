"""
Configuration module.
Holds the scoring weight sets (validated once, read-only afterwards),
environment-driven settings and the logging setup shared by the API and scripts.
"""

import math  # tolerant float comparison for weight sums
import sys  # stderr sink for loguru
from dataclasses import dataclass, field  # frozen value objects
from functools import lru_cache  # single Settings instance per process
from pathlib import Path  # metadata directory path

from loguru import logger  # console logging
from pydantic_settings import BaseSettings, SettingsConfigDict  # env/.env backed settings

from .errors import ConfigurationError  # fatal configuration problems

# Allowed drift when checking that a weight set sums to 1
WEIGHT_SUM_TOLERANCE = 1e-6


@dataclass(frozen=True)
class ScoreWeights:
	"""
	How much each signal contributes to the final similarity.
	- language: captures near-miss spellings and name sounds
	- fuzzy: approximate matching engine over all fields
	- direct_match: exact substring hits, should dominate so literal matches come first
	The three values must sum to 1.
	"""
	language: float = 0.3
	fuzzy: float = 0.2
	direct_match: float = 0.5

	def total(self) -> float:
		return self.language + self.fuzzy + self.direct_match


@dataclass(frozen=True)
class FieldWeights:
	"""Per-field weights used by one scoring signal (title/description/tags/author)."""
	title: float
	description: float
	tags: float
	author: float

	def total(self) -> float:
		return self.title + self.description + self.tags + self.author

	def as_dict(self) -> dict:
		return {'title': self.title, 'description': self.description, 'tags': self.tags, 'author': self.author}


@dataclass(frozen=True)
class WeightConfiguration:
	"""
	All weight sets used by the Ranker, handled as one configuration unit.
	language and direct_match field weights must sum to 1; fuzzy field weights are
	relative magnitudes (normalized by the fuzzy index) and only need a positive total.
	"""
	score: ScoreWeights = field(default_factory=ScoreWeights)
	language: FieldWeights = field(default_factory=lambda: FieldWeights(0.6, 0.25, 0.05, 0.1))
	fuzzy: FieldWeights = field(default_factory=lambda: FieldWeights(5, 0.025, 0.025, 0.5))
	direct_match: FieldWeights = field(default_factory=lambda: FieldWeights(0.6, 0.25, 0.05, 0.1))

	def validate(self) -> 'WeightConfiguration':
		"""Raise ConfigurationError if any invariant is broken; return self for chaining."""
		_check_sums_to_one('score', self.score.total())
		_check_sums_to_one('language', self.language.total())
		_check_sums_to_one('direct_match', self.direct_match.total())

		weight_sets = {
			'score': [self.score.language, self.score.fuzzy, self.score.direct_match],
			'language': list(self.language.as_dict().values()),
			'fuzzy': list(self.fuzzy.as_dict().values()),
			'direct_match': list(self.direct_match.as_dict().values()),
		}
		for name, values in weight_sets.items():
			if any(not math.isfinite(v) or v < 0 for v in values):
				raise ConfigurationError(f"Weight set '{name}' has a negative or non-finite value: {values}")
		if self.fuzzy.total() <= 0:
			raise ConfigurationError("Fuzzy field weights must have a positive total")
		return self


def _check_sums_to_one(name: str, total: float):
	if not math.isclose(total, 1.0, abs_tol=WEIGHT_SUM_TOLERANCE):
		raise ConfigurationError(f"Weight set '{name}' must sum to 1, got {total}")


# Process-wide defaults, validated at import so a bad edit fails on startup
DEFAULT_WEIGHTS = WeightConfiguration().validate()


class Settings(BaseSettings):
	"""Runtime settings, overridable with YTDLP_* environment variables or a .env file."""

	model_config = SettingsConfigDict(
		env_prefix="YTDLP_",
		env_file=".env",
		extra="ignore",
	)

	directory: Path = Path('.')  # folder holding the yt-dlp .info.json files and media
	worker_cores: int = 8  # number of chunks / pool size
	results_limit: int = 5
	sort: str = 'normal'
	worker_mode: str = 'process'  # "process" or "thread"
	cache_ttl_seconds: float = 300.0  # API response cache lifetime
	log_level: str = 'INFO'


@lru_cache(maxsize=1)
def get_settings() -> Settings:
	return Settings()


def configure_logging(level: str = 'INFO'):
	"""Replace loguru's default sink with a stderr sink at the given level."""
	logger.remove()
	logger.add(sys.stderr, level=level.upper())
	logger.debug(f"[Config] Logging configured at level {level.upper()}")
