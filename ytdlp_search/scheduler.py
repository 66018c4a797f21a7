"""
Work partitioning and merge scheduling.
Splits the candidate list into contiguous chunks, scores each chunk on its own
worker, then merges, orders and truncates the partial results.
"""

import math  # ceil for chunk sizes
import threading  # guards pool restarts shared by request threads
import time  # timing of distributed runs
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor, as_completed
from concurrent.futures.process import BrokenProcessPool
from typing import List, Optional, Sequence

from loguru import logger

from .config import DEFAULT_WEIGHTS, WeightConfiguration
from .errors import ConfigurationError, InputError, WorkerFailure
from .models import CandidateRecord, ScoredRecord, WorkChunk
from .ranking import Ranker, validate_query
from .sorting import sort_results

WORKER_MODES = ('process', 'thread')


def validate_worker_count(worker_count) -> int:
	if not isinstance(worker_count, int) or worker_count < 1:
		raise InputError(f"Worker count must be a positive integer, got {worker_count!r}")
	return worker_count


def partition(records: Sequence[CandidateRecord], worker_count: int) -> List[WorkChunk]:
	"""
	Split records into exactly `worker_count` contiguous chunks of ceil(n / worker_count).
	Trailing chunks are empty when there are more workers than records.
	"""
	validate_worker_count(worker_count)

	records = tuple(records)
	chunk_size = math.ceil(len(records) / worker_count)
	chunks = []
	for i in range(worker_count):
		start = min(i * chunk_size, len(records))
		chunks.append(WorkChunk(index=i, start=start, records=records[start:start + chunk_size]))
	return chunks


def score_chunk(query: str, records: Sequence[CandidateRecord], weights: WeightConfiguration) -> List[ScoredRecord]:
	"""Worker entry point: score one chunk with a Ranker local to the worker."""
	return Ranker(weights).score(query, records)


class WorkerPool:
	"""
	Reusable, bounded pool of scoring workers.

	mode="process" gives every worker its own interpreter and memory;
	mode="thread" runs the same tasks in threads (handy for tests and small batches).
	The pool is meant to live as long as the server and be shared by requests.
	"""

	def __init__(self, max_workers: int, mode: str = 'process'):
		if not isinstance(max_workers, int) or max_workers < 1:
			raise InputError(f"Pool size must be a positive integer, got {max_workers!r}")
		if mode not in WORKER_MODES:
			raise ConfigurationError(f"Unknown worker mode '{mode}', expected one of {WORKER_MODES}")
		self.max_workers = max_workers
		self.mode = mode
		self._lock = threading.Lock()  # guards swapping self._executor
		self._executor: Optional[Executor] = self._new_executor()

	def _new_executor(self) -> Executor:
		if self.mode == 'process':
			executor = ProcessPoolExecutor(max_workers=self.max_workers)
		else:
			executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix='scorer')
		logger.info(f"[Scheduler] Started {self.mode} pool with {self.max_workers} workers")
		return executor

	def map_chunks(
		self,
		query: str,
		chunks: Sequence[WorkChunk],
		weights: WeightConfiguration = DEFAULT_WEIGHTS,
	) -> List[List[ScoredRecord]]:
		"""
		Score every chunk and wait for all of them.
		Returns the partial results in chunk order. Any failing chunk fails the batch.
		"""
		executor = self._executor  # the whole batch runs on one executor
		if executor is None:
			raise WorkerFailure("Worker pool has been shut down")
		results: List[List[ScoredRecord]] = [[] for _ in chunks]
		futures = {}
		try:
			for position, chunk in enumerate(chunks):
				if not chunk.records:
					continue  # nothing to score, already done
				future = executor.submit(score_chunk, query, chunk.records, weights)
				futures[future] = position
		except RuntimeError as e:  # broken or shut down pool
			self._cancel(futures)
			self._restart_if_broken(e, executor)
			raise WorkerFailure(f"Could not dispatch scoring work: {e}") from e

		for future in as_completed(futures):
			position = futures[future]
			try:
				results[position] = future.result()
			except Exception as e:
				self._cancel(futures)
				self._restart_if_broken(e, executor)
				logger.error(f"[Scheduler] Worker for chunk {chunks[position].index} failed: {e!r}")
				raise WorkerFailure(
					f"Worker for chunk {chunks[position].index} failed: {e}",
					chunk_index=chunks[position].index,
				) from e
			logger.debug(f"[Scheduler] Chunk {chunks[position].index} done | {len(results[position])} records")
		return results

	@staticmethod
	def _cancel(futures):
		for future in futures:
			future.cancel()

	def _restart_if_broken(self, error: Exception, broken: Executor):
		"""
		Replace a crashed process pool so later requests keep working.
		Only the executor that actually broke is replaced: when several requests
		fail on the same pool, the first one restarts it and the others do nothing.
		"""
		if not isinstance(error, BrokenProcessPool):
			return
		with self._lock:
			if self._executor is not broken:
				return  # already restarted (or shut down) by someone else
			logger.warning("[Scheduler] Process pool broken, starting a fresh one")
			broken.shutdown(wait=False, cancel_futures=True)
			self._executor = self._new_executor()

	def shutdown(self, wait: bool = True):
		with self._lock:
			executor, self._executor = self._executor, None
		if executor is not None:
			executor.shutdown(wait=wait, cancel_futures=True)
			logger.info(f"[Scheduler] {self.mode.capitalize()} pool shut down")

	def __enter__(self) -> 'WorkerPool':
		return self

	def __exit__(self, exc_type, exc, tb):
		self.shutdown()


def run_distributed(
	query: str,
	candidates: Sequence[CandidateRecord],
	worker_count: int,
	result_limit: int,
	sort_mode: str = 'normal',
	weights: Optional[WeightConfiguration] = None,
	pool: Optional[WorkerPool] = None,
) -> List[ScoredRecord]:
	"""
	Score candidates on `worker_count` chunks in parallel and return the top `result_limit`.

	Uses `pool` when given, otherwise a short-lived process pool sized to the work.
	The ranking only depends on the sort mode, never on how the work was split.
	Chunks beyond the number of candidates would be empty, so at most
	len(candidates) chunks are built.
	"""
	validate_query(query)
	validate_worker_count(worker_count)
	if result_limit <= 0 or not candidates:
		return []
	chunks = partition(candidates, min(worker_count, len(candidates)))

	weights = (weights or DEFAULT_WEIGHTS).validate()
	start = time.time()

	if pool is None:
		busy = sum(1 for chunk in chunks if chunk.records)
		with WorkerPool(max_workers=busy) as transient:
			partials = transient.map_chunks(query, chunks, weights)
	else:
		partials = pool.map_chunks(query, chunks, weights)

	merged = [scored for partial in partials for scored in partial]
	if len(merged) != len(candidates):
		raise WorkerFailure(f"Workers returned {len(merged)} results for {len(candidates)} candidates")

	ordered = sort_results(merged, sort_mode)[:result_limit]
	logger.info(
		f"[Scheduler] '{query}' | {len(candidates)} candidates on {len(chunks)} chunks | "
		f"returned {len(ordered)} in {(time.time() - start) * 1000:.1f} ms"
	)
	return ordered
