"""
Build and persist the TF-IDF index.

This script:
1) Loads every yt-dlp metadata file from a directory, or the records of one
   JSON file (a single object or a list of objects)
2) Builds TF-IDF vectors over title, description and tags
3) Saves the FAISS index and metadata to models/

Usage:
    python -m scripts.build_index /path/to/metadata-dir-or-file.json [models/tfidf_index]

Query the saved index with TfIdfIndex.load_index(...).search("some words").
"""

import sys  # command-line arguments
import time  # measure step timings
from pathlib import Path  # filesystem-safe paths

from loguru import logger  # console logging

from ytdlp_search.config import configure_logging, get_settings  # settings + logging
from ytdlp_search.data_loader import DataLoader  # record source
from ytdlp_search.tfidf_index import TfIdfIndex  # TF-IDF index helper


def main(argv=None):
	argv = sys.argv[1:] if argv is None else argv
	settings = get_settings()
	configure_logging(settings.log_level)

	# Headline banner for visibility in console
	logger.info("=" * 60)
	logger.info("Build TF-IDF Index")
	logger.info("=" * 60)

	# Resolve input directory and output base path
	root = Path(__file__).resolve().parents[1]  # project root
	source = Path(argv[0]) if argv else settings.directory  # metadata folder or file
	index_base = Path(argv[1]) if len(argv) > 1 else root / 'models' / 'tfidf_index'  # base filename (no extension)
	index_base.parent.mkdir(parents=True, exist_ok=True)  # ensure exists

	# 1) Load data
	logger.info("[1/3] Loading records...")
	loader = DataLoader()
	if source.is_file():
		records = loader.load_records_from_file(source)
	else:
		records = loader.load_records_from_directory(source)
	logger.info(f"[OK] Loaded {len(records)} records")

	# 2) Build index
	logger.info("[2/3] Building TF-IDF index...")
	t0 = time.time()
	index = TfIdfIndex().build(records)
	logger.info(f"[OK] Index built with {index.size()} documents in {time.time() - t0:.2f}s")

	# 3) Save index
	logger.info("[3/3] Saving index and metadata...")
	index.save_index(str(index_base))
	logger.info("[OK] Saved.")
	logger.info("=" * 60)
	return index_base


if __name__ == '__main__':
	main()
