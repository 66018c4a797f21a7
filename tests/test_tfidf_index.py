"""
Tests for the FAISS backed TF-IDF index.
Run: python tests/test_tfidf_index.py
"""

import sys
import tempfile
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
	sys.path.insert(0, str(ROOT))

from ytdlp_search.models import CandidateRecord
from ytdlp_search.tfidf_index import TfIdfIndex, document_text, tokenize
from tests.sample_data import mock_records


def assert_equal(actual, expected, msg):
	if actual != expected:
		raise AssertionError(f"{msg} | expected={expected}, actual={actual}")


def assert_true(cond, msg):
	if not cond:
		raise AssertionError(msg)


def test_tokenize():
	assert_equal(tokenize("Wow, this ROBLOX video is crazy!"), ['wow', 'this', 'roblox', 'video', 'is', 'crazy'], "split on non alphanumerics")
	assert_equal(tokenize("  --  "), [], "no tokens")
	assert_equal(document_text(CandidateRecord(id='x', title='A', tags=['b', 'c'])), 'A  b c', "title, empty description, tags")


def test_build_and_search():
	index = TfIdfIndex().build(mock_records())
	assert_equal(index.size(), 3, "all records indexed")

	results = index.search('parkour')
	assert_equal([doc_id for doc_id, _ in results], ['3'], "only the parkour video")
	assert_true(0 < results[0][1] <= 1.0 + 1e-6, "cosine similarity in (0, 1]")

	results = index.search('roblox')
	assert_equal([doc_id for doc_id, _ in results], ['1', '2'], "denser match first")

	assert_equal(index.search('minecraft'), [], "unknown term")
	assert_equal(index.search('roblox', top_k=0), [], "top_k 0")
	assert_equal(len(index.search('roblox', top_k=1)), 1, "top_k respected")


def test_empty_vocabulary():
	index = TfIdfIndex().build([CandidateRecord(id='a'), CandidateRecord(id='b', title='!!!')])
	assert_equal(index.index, None, "no FAISS index without terms")
	assert_equal(index.search('anything'), [], "nothing to find")


def test_save_and_load():
	index = TfIdfIndex().build(mock_records())
	with tempfile.TemporaryDirectory() as tmp:
		base = Path(tmp) / 'tfidf_index'
		index.save_index(base)
		assert_true(base.with_suffix('.index').exists(), "index file written")
		assert_true(base.with_suffix('.pkl').exists(), "metadata file written")

		loaded = TfIdfIndex.load_index(base)

	assert_equal(loaded.size(), 3, "same size")
	assert_equal(loaded.vocabulary, index.vocabulary, "same vocabulary")
	assert_equal(
		[doc_id for doc_id, _ in loaded.search('crazy')],
		[doc_id for doc_id, _ in index.search('crazy')],
		"same results after reload",
	)


def test_load_missing_index():
	with tempfile.TemporaryDirectory() as tmp:
		try:
			TfIdfIndex.load_index(Path(tmp) / 'nothing')
		except FileNotFoundError:
			return
	raise AssertionError("loading a missing index should raise")


def main():
	print("Running TF-IDF index tests...")
	test_tokenize()
	test_build_and_search()
	test_empty_vocabulary()
	test_save_and_load()
	test_load_missing_index()
	print("All TF-IDF index tests passed!")


if __name__ == '__main__':
	main()
