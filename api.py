"""
FastAPI server exposing the yt-dlp search API.
Endpoints:
- GET /health: basic health check
- GET /search?q=...&r=5&c=8&d=/path&s=normal: ranked results with scores and metadata
- GET /file?url=file:///path/video.mp4: streams a downloaded media file

Search responses are cached in memory for a few minutes; add `escape` to a
request to drop its cached copy and compute a fresh one.
"""

# Import standard libraries for filesystem paths and timing
import os  # read permission checks
import threading  # request counter lock
import time  # measure startup and request latencies
from pathlib import Path  # path-safe filesystem handling
from typing import Dict, List, Optional, Tuple  # precise typing for clarity
from urllib.parse import unquote, urlparse  # file:// URL handling

# Import FastAPI for building the web API and Pydantic for response models
from fastapi import FastAPI, Query, Request  # FastAPI primitives
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse  # non-JSON responses
from pydantic import BaseModel  # response schema definitions

# Import our internal modules for configuration and search
from ytdlp_search.config import configure_logging, get_settings  # settings + logging
from ytdlp_search.errors import InputError  # 400-class failures
from ytdlp_search.formatting import format_duration, format_percentage, parse_upload_date  # display helpers
from ytdlp_search.search_engine import SearchEngine, SearchResult  # core search engine

# Import loguru for simple, structured console logging
from loguru import logger  # convenient console logger

# Instantiate the FastAPI application with metadata
app = FastAPI(title="yt-dlp Search API", version="1.0.0")  # web app

# Globals that hold the search engine instance and measured startup time
ENGINE: Optional[SearchEngine] = None  # will point to the initialized engine
STARTUP_TIME_S: float = 0.0  # measures how long startup took
REQUEST_COUNT: int = 0  # number of search requests handled in this process
_REQUEST_LOCK = threading.Lock()  # sync endpoints run on a threadpool

# Response cache: request URL -> (expiry timestamp, payload)
_CACHE: Dict[str, Tuple[float, list]] = {}
_CACHE_LOCK = threading.Lock()


# Pydantic model for a single ranked search item
class SearchResponseItem(BaseModel):
	index: int  # 1-based rank
	title: Optional[str] = None  # video title
	id: str  # video id
	uploader: str  # channel name
	duration: str  # "Xm Ys"
	similarity: str  # percentages, e.g. "42.10%"
	fuzzyScore: str
	languageSimilarity: str
	directMatchScore: str
	createdAt: Optional[int] = None  # unix timestamp of the upload
	fileUrl: str  # file:// URL or "Not found"


def cache_get(key: str) -> Optional[list]:
	with _CACHE_LOCK:
		entry = _CACHE.get(key)
		if entry is None:
			return None
		expires_at, payload = entry
		if expires_at < time.monotonic():
			_CACHE.pop(key, None)
			return None
		return payload


def cache_set(key: str, payload: list, ttl: float):
	"""Store a response and drop every entry that has already expired."""
	now = time.monotonic()
	with _CACHE_LOCK:
		for expired in [k for k, (expires_at, _) in _CACHE.items() if expires_at < now]:
			del _CACHE[expired]
		_CACHE[key] = (now + ttl, payload)


def cache_drop(key: str):
	with _CACHE_LOCK:
		_CACHE.pop(key, None)


def next_request_number() -> int:
	global REQUEST_COUNT
	with _REQUEST_LOCK:
		REQUEST_COUNT += 1
		return REQUEST_COUNT


def to_response_item(position: int, result: SearchResult) -> SearchResponseItem:
	scored = result.scored
	record = scored.record
	created = record.extra.get('upload_date') or record.extra.get('created_at') or record.extra.get('timestamp')
	return SearchResponseItem(
		index=position,
		title=record.title,
		id=record.id,
		uploader=record.uploader,
		duration=format_duration(record.duration),
		similarity=format_percentage(scored.similarity),
		fuzzyScore=format_percentage(scored.fuzzy_score),
		languageSimilarity=format_percentage(scored.language_similarity),
		directMatchScore=format_percentage(scored.direct_match_score),
		createdAt=parse_upload_date(created),
		fileUrl=result.file_url or 'Not found',
	)


# FastAPI startup hook to initialize the search engine once
@app.on_event("startup")
async def startup_event():
	"""Initialize the search engine and its worker pool."""
	global ENGINE, STARTUP_TIME_S  # refer to module-level globals
	start = time.time()  # start timer for startup latency

	settings = get_settings()
	configure_logging(settings.log_level)
	logger.info("[API] Startup: initializing engine...")

	ENGINE = SearchEngine(settings)

	STARTUP_TIME_S = time.time() - start  # elapsed seconds
	logger.info(f"[API] Startup complete in {STARTUP_TIME_S:.2f}s.")


@app.on_event("shutdown")
async def shutdown_event():
	"""Stop worker processes."""
	global ENGINE
	if ENGINE is not None:
		ENGINE.close()
		ENGINE = None
	_CACHE.clear()


# Simple health endpoint for readiness checks
@app.get("/health")
async def health():
	"""Return minimal health info for liveness/readiness probes."""
	return {
		"status": "ok",  # constant indicator
		"engine_ready": ENGINE is not None,  # True if engine initialized
		"startup_seconds": round(STARTUP_TIME_S, 2),  # startup latency
		"requests": REQUEST_COUNT,
	}


# Main search endpoint that accepts a free-text query
@app.get("/search", response_model=List[SearchResponseItem])
def search(
	request: Request,
	q: Optional[str] = Query(None, description="Free-text query"),
	r: Optional[int] = Query(None, description="Number of results"),
	c: Optional[int] = Query(None, description="Number of worker chunks"),
	d: Optional[str] = Query(None, description="Metadata directory"),
	s: Optional[str] = Query(None, description="Sort mode: normal, fuzzy, language or random"),
	escape: Optional[str] = Query(None, description="Bypass and refresh the cached response"),
):
	"""Rank the metadata directory against the query."""
	request_number = next_request_number()
	logger.info(f"[API] Request #{request_number} received ...")
	start = time.time()

	if ENGINE is None:  # engine must be ready to serve
		logger.warning("[API] Search requested but engine not initialized")
		return PlainTextResponse("Search engine is not ready", status_code=503)

	settings = ENGINE.settings
	key = str(request.url.remove_query_params("escape"))
	if escape is not None:
		cache_drop(key)
	else:
		cached = cache_get(key)
		if cached is not None:
			logger.info(f"[API] Request #{request_number} served from cache")
			return cached

	try:
		results = ENGINE.search(
			q,
			directory=d,
			results_limit=r or settings.results_limit,  # 0 or missing -> default
			worker_count=c or settings.worker_cores,
			sort=s,
		)
	except InputError as e:
		logger.info(f"[API] Request #{request_number} rejected: {e}")
		return PlainTextResponse(str(e), status_code=400)
	except Exception as e:
		logger.exception(f"[API] Request #{request_number} failed: {e}")
		return PlainTextResponse("Internal Server Error", status_code=500)

	payload = [to_response_item(i, result).model_dump() for i, result in enumerate(results, 1)]
	cache_set(key, payload, settings.cache_ttl_seconds)

	elapsed_ms = (time.time() - start) * 1000
	logger.info(f"[API] Request #{request_number} completed in {elapsed_ms:.0f}ms.")
	return payload


def resolve_file_path(url: str) -> Path:
	"""Accept a plain path or a file:// URL and return an absolute path."""
	if url.startswith('file://'):
		url = unquote(urlparse(url).path)
	return Path(url).resolve()


@app.get("/file")
def send_file(url: Optional[str] = Query(None, description="Path or file:// URL of a media file")):
	"""Stream a local media file (range requests supported)."""
	if not url:
		return JSONResponse({"error": "No file URL provided."}, status_code=400)

	path = resolve_file_path(url)
	logger.debug(f"[API] Resolved file path: {path}")
	if not path.is_file() or not os.access(path, os.R_OK):
		return JSONResponse({"error": f"The file at '{path}' is not accessible."}, status_code=403)
	return FileResponse(path)
