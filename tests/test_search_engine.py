"""
End-to-end tests for SearchEngine over a metadata directory.
Run: python tests/test_search_engine.py
"""

import json
import sys
import tempfile
from dataclasses import asdict
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
	sys.path.insert(0, str(ROOT))

from ytdlp_search.config import Settings
from ytdlp_search.errors import InputError, RecordSourceError
from ytdlp_search.search_engine import SearchEngine
from tests.sample_data import mock_records


def assert_equal(actual, expected, msg):
	if actual != expected:
		raise AssertionError(f"{msg} | expected={expected}, actual={actual}")


def assert_true(cond, msg):
	if not cond:
		raise AssertionError(msg)


def write_library(directory: Path):
	"""One .info.json per mock record plus a media file for record 1."""
	for record in mock_records():
		data = asdict(record)
		data.pop('extra')
		(directory / f"{record.id}.info.json").write_text(json.dumps(data), encoding='utf-8')
	(directory / '1.mp4').write_bytes(b'\x00')


def make_engine(directory: Path, **overrides) -> SearchEngine:
	settings = Settings(directory=directory, worker_cores=2, worker_mode='thread', **overrides)
	return SearchEngine(settings)


def test_search_ranks_directory():
	with tempfile.TemporaryDirectory() as tmp:
		base = Path(tmp)
		write_library(base)
		engine = make_engine(base)
		try:
			results = engine.search('crazy')
			assert_equal([r.scored.id for r in results], ['1', '3', '2'], "ranked like the in-memory scorer")
			assert_equal(results[0].file_url, (base / '1.mp4').resolve().as_uri(), "media file located")
			assert_equal(results[1].file_url, None, "no media file")

			assert_equal(len(engine.search('crazy', results_limit=1)), 1, "result limit")
			assert_equal(
				[r.scored.id for r in engine.search('games', worker_count=5)],
				['2', '1', '3'],
				"worker count does not change the ranking",
			)
			fuzzy = engine.search('games', sort='fuzzy')
			scores = [r.scored.fuzzy_score for r in fuzzy]
			assert_equal(scores, sorted(scores, reverse=True), "fuzzy sort")
		finally:
			engine.close()


def test_search_other_directory():
	with tempfile.TemporaryDirectory() as tmp, tempfile.TemporaryDirectory() as other:
		write_library(Path(other))
		engine = make_engine(Path(tmp))
		try:
			assert_equal(engine.search('roblox'), [], "default directory is empty")
			ids = [r.scored.id for r in engine.search('roblox', directory=other)]
			assert_equal(ids, ['1', '2', '3'], "directory override")
		finally:
			engine.close()


def test_search_input_errors():
	with tempfile.TemporaryDirectory() as tmp:
		engine = make_engine(Path(tmp))
		try:
			for bad_query in (None, '', '   '):
				try:
					engine.search(bad_query)
				except InputError:
					continue
				raise AssertionError(f"query {bad_query!r} should be rejected")

			try:
				engine.search('roblox', directory=str(Path(tmp) / 'missing'))
			except RecordSourceError:
				pass
			else:
				raise AssertionError("missing directory should be rejected")
		finally:
			engine.close()


def main():
	print("Running search engine tests...")
	test_search_ranks_directory()
	test_search_other_directory()
	test_search_input_errors()
	print("All search engine tests passed!")


if __name__ == '__main__':
	main()
