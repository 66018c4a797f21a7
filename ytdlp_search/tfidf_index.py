"""
TF-IDF vector index using FAISS.
An experimental, self-contained alternative to the multi-signal ranker:
records are turned into TF-IDF vectors over title, description and tags and
searched by cosine similarity.
"""

# Import regex for the tokenizer
import re  # split on anything that is not a letter or digit
# Import math for inverse document frequencies
import math  # natural log
# Import NumPy for typed arrays passed to FAISS
import numpy as np  # numeric arrays
# Import FAISS for exact inner-product search
import faiss  # vector index
# Pathlib for robust path handling when saving/loading
from pathlib import Path  # filesystem paths
# Typing hints for clarity of public API
from typing import Dict, List, Optional, Sequence, Tuple  # type hints
# Pickle for persisting small Python metadata (ids, vocabulary, idf)
import pickle  # simple serialization

# Import our record model for type hints
from .models import CandidateRecord  # indexed records

# Console logging
from loguru import logger  # console logger

RE_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def tokenize(text: str) -> List[str]:
	"""Lowercase and split on anything that is not a-z or 0-9."""
	return [token for token in RE_NON_ALNUM.split(text.lower()) if token]


def document_text(record: CandidateRecord) -> str:
	"""The text a record contributes to the index: title, description and tags."""
	return ' '.join([record.title or '', record.description or '', *(record.tags or [])])


class TfIdfIndex:
	"""
	Builds, persists and searches a TF-IDF index.
	tf = term count / document token count, idf = ln(N / df).
	"""

	def __init__(self):
		self.vocabulary: Dict[str, int] = {}  # term -> column
		self.idf = np.zeros(0, dtype='float32')  # column -> idf
		self.doc_ids: List[str] = []  # row -> record id
		self.index: Optional[faiss.Index] = None  # inner product over L2-normalized rows

	def build(self, records: Sequence[CandidateRecord]) -> 'TfIdfIndex':
		"""Build the vocabulary, idf weights and document vectors from scratch."""
		n_docs = len(records)
		token_lists = [tokenize(document_text(record)) for record in records]

		# 1) Document frequencies, in first-seen order so columns are stable
		doc_freq: Dict[str, int] = {}
		for tokens in token_lists:
			for term in dict.fromkeys(tokens):
				doc_freq[term] = doc_freq.get(term, 0) + 1

		# 2) Vocabulary + idf
		self.vocabulary = {term: column for column, term in enumerate(doc_freq)}
		self.idf = np.array([math.log(n_docs / df) for df in doc_freq.values()], dtype='float32')
		self.doc_ids = [record.id for record in records]

		if not self.vocabulary:
			self.index = None
			logger.warning(f"[TfIdf] No tokens in {n_docs} records, index left empty")
			return self

		# 3) Document vectors
		vectors = np.vstack([self._vectorize(tokens) for tokens in token_lists])
		faiss.normalize_L2(vectors)  # zero rows stay zero
		self.index = faiss.IndexFlatIP(len(self.vocabulary))
		self.index.add(vectors)
		logger.info(f"[TfIdf] Built index | docs={n_docs} | vocabulary={len(self.vocabulary)}")
		return self

	def _vectorize(self, tokens: List[str]) -> np.ndarray:
		vector = np.zeros(len(self.vocabulary), dtype='float32')
		if not tokens:
			return vector
		for token in tokens:
			column = self.vocabulary.get(token)
			if column is not None:
				vector[column] += 1
		return (vector / len(tokens)) * self.idf

	def search(self, query: str, top_k: int = 10) -> List[Tuple[str, float]]:
		"""
		Return up to `top_k` (record_id, cosine similarity) pairs, best first.
		Only strictly positive similarities are returned.
		"""
		if self.index is None or self.index.ntotal == 0 or top_k <= 0:
			return []

		query_vector = self._vectorize(tokenize(query)).reshape(1, -1)
		if not np.any(query_vector):
			return []  # no known terms (or only terms present in every document)
		faiss.normalize_L2(query_vector)

		scores, rows = self.index.search(query_vector, min(top_k, self.index.ntotal))
		results = []
		for score, row in zip(scores[0], rows[0]):
			if row < 0 or score <= 0:  # -1 marks an empty slot
				continue
			results.append((self.doc_ids[row], float(score)))
		return results

	def size(self) -> int:
		return len(self.doc_ids)

	def save_index(self, filepath: str):
		"""
		Persist the FAISS index and the metadata needed to query it.
		- filepath: base path without extension; we write .index and .pkl files
		"""
		filepath = Path(filepath)
		index_path = filepath.with_suffix('.index')
		metadata_path = filepath.with_suffix('.pkl')
		if self.index is not None:
			faiss.write_index(self.index, str(index_path))
		metadata = {
			'vocabulary': self.vocabulary,
			'idf': self.idf.tolist(),
			'doc_ids': self.doc_ids,
		}
		with open(metadata_path, 'wb') as f:
			pickle.dump(metadata, f)
		logger.info(f"[TfIdf] Saved index to {index_path} and metadata to {metadata_path}")

	@classmethod
	def load_index(cls, filepath: str) -> 'TfIdfIndex':
		"""Load an index written by save_index (base path without extension)."""
		filepath = Path(filepath)
		index_path = filepath.with_suffix('.index')
		metadata_path = filepath.with_suffix('.pkl')
		if not metadata_path.exists():
			raise FileNotFoundError(f"Metadata file not found: {metadata_path}")

		with open(metadata_path, 'rb') as f:
			metadata = pickle.load(f)

		tfidf = cls()
		tfidf.vocabulary = metadata['vocabulary']
		tfidf.idf = np.array(metadata['idf'], dtype='float32')
		tfidf.doc_ids = metadata['doc_ids']
		if tfidf.vocabulary:
			if not index_path.exists():
				raise FileNotFoundError(f"Index file not found: {index_path}")
			tfidf.index = faiss.read_index(str(index_path))
		logger.info(f"[TfIdf] Loaded index from {index_path} | total={tfidf.size()}")
		return tfidf
