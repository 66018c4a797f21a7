"""
Search engine module.
Loads metadata records, runs the distributed scoring pass and attaches the
media file location to every ranked result.
"""

from dataclasses import dataclass  # lightweight containers for results
from typing import List, Optional  # type annotations for clarity
from pathlib import Path  # metadata directory handling
import time  # request timing

# Import project modules for data structures and components
from .config import DEFAULT_WEIGHTS, Settings, WeightConfiguration, get_settings  # settings + weights
from .data_loader import DataLoader, find_file_url  # record source + file resolution
from .models import ScoredRecord  # scored results
from .ranking import validate_query  # bad input is rejected before any work starts
from .scheduler import WorkerPool, run_distributed  # fan-out / merge
from .sorting import resolve_sort_mode  # sort names -> SortMode

# Import loguru for console logging
from loguru import logger  # simple structured logger


@dataclass
class SearchResult:
	scored: ScoredRecord  # ranked record with its scores
	file_url: Optional[str]  # file:// URL of the downloaded media, if found


class SearchEngine:
	"""
	High-level search API combining record loading, parallel scoring and ranking.
	Keeps one worker pool alive for all searches.
	"""
	def __init__(
		self,
		settings: Optional[Settings] = None,  # defaults from environment
		weights: Optional[WeightConfiguration] = None,  # scoring weights
		loader: Optional[DataLoader] = None,  # record source
	):
		self.settings = settings or get_settings()
		# Weight sets are checked once here; a bad configuration stops startup
		self.weights = (weights or DEFAULT_WEIGHTS).validate()
		self.loader = loader or DataLoader()
		self.pool = WorkerPool(max_workers=self.settings.worker_cores, mode=self.settings.worker_mode)
		logger.info(
			f"[Engine] Ready | directory={self.settings.directory} | cores={self.settings.worker_cores} | mode={self.settings.worker_mode}"
		)

	def search(
		self,
		query: str,
		directory: Optional[str] = None,
		results_limit: Optional[int] = None,
		worker_count: Optional[int] = None,
		sort: Optional[str] = None,
	) -> List[SearchResult]:
		"""Rank every record of `directory` against the query and return the top results."""
		validate_query(query)
		directory = Path(directory) if directory else self.settings.directory
		results_limit = self.settings.results_limit if results_limit is None else results_limit
		worker_count = worker_count or self.settings.worker_cores
		sort_mode = resolve_sort_mode(sort or self.settings.sort)

		start = time.time()
		records = self.loader.load_records_from_directory(directory)
		ranked = run_distributed(
			query,
			records,
			worker_count=worker_count,
			result_limit=results_limit,
			sort_mode=sort_mode,
			weights=self.weights,
			pool=self.pool,
		)
		results = [SearchResult(scored=scored, file_url=find_file_url(directory, scored.id)) for scored in ranked]
		logger.info(
			f"[Engine] '{query}' | sort={sort_mode.value} | {len(results)} of {len(records)} records in {(time.time() - start) * 1000:.1f} ms"
		)
		return results

	def close(self):
		"""Stop the worker pool."""
		self.pool.shutdown()
