"""
Search a folder of yt-dlp metadata from the command line.

Usage:
    python -m scripts.search roblox funny videos -r 10 -c 4 -s normal -d /path/to/metadata
"""

import argparse  # command-line parsing
import sys  # exit codes

from loguru import logger  # console logging

from ytdlp_search.config import configure_logging, get_settings  # settings + logging
from ytdlp_search.errors import InputError, SearchError  # reportable failures
from ytdlp_search.formatting import format_duration, format_percentage  # display helpers
from ytdlp_search.search_engine import SearchEngine, SearchResult  # core search engine
from ytdlp_search.sorting import SortMode  # valid sort names


def build_parser(settings) -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(description="Rank downloaded videos against a free-text query.")
	parser.add_argument('query', nargs='+', help="words to search for")
	parser.add_argument('-r', '--results', type=int, default=settings.results_limit, help="number of results")
	parser.add_argument('-c', '--cores', type=int, default=settings.worker_cores, help="number of workers")
	parser.add_argument('-d', '--directory', default=str(settings.directory), help="metadata directory")
	parser.add_argument(
		'-s', '--sort', default=settings.sort,
		help=f"sort mode: {', '.join(mode.value for mode in SortMode)}",
	)
	return parser


def render(position: int, result: SearchResult) -> str:
	scored = result.scored
	record = scored.record
	lines = [
		f"{position}.",
		f"   Title                : {record.title}",
		f"   ID                   : {record.id}",
		f"   Author               : {record.uploader}",
		f"   Duration             : {format_duration(record.duration)}",
		f"   Similarity           : {format_percentage(scored.similarity)}",
		f"   Fuzzy Score          : {format_percentage(scored.fuzzy_score)}",
		f"   Language Score       : {format_percentage(scored.language_similarity)}",
		f"   Direct Match Score   : {format_percentage(scored.direct_match_score)}",
		f"   Video                : {result.file_url or 'Not found'}",
		"",
	]
	return "\n".join(lines)


def main(argv=None) -> int:
	settings = get_settings()
	configure_logging(settings.log_level)
	args = build_parser(settings).parse_args(argv)

	engine = SearchEngine(settings.model_copy(update={'worker_cores': max(1, args.cores)}))
	try:
		results = engine.search(
			' '.join(args.query),
			directory=args.directory,
			results_limit=args.results,
			worker_count=args.cores,
			sort=args.sort,
		)
	except InputError as e:
		logger.error(f"[CLI] {e}")
		return 2
	except SearchError as e:
		logger.error(f"[CLI] Search failed: {e}")
		return 1
	finally:
		engine.close()

	for position, result in enumerate(results, 1):
		print(render(position, result))
	return 0


if __name__ == '__main__':
	sys.exit(main())
