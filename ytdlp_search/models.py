"""
Data models for the yt-dlp search engine.
Defines the core data structures used throughout the system.
"""

# Import dataclass to define simple "record-like" classes without boilerplate
from dataclasses import dataclass, field  # auto-generates __init__, __repr__, etc.
# Import typing helpers for precise and self-documenting types
from typing import Any, Dict, List, Optional, Tuple  # lists, optional values, side-maps


@dataclass(frozen=True)
class CandidateRecord:
	"""
	One downloaded media item, built from its yt-dlp metadata file.
	Only the fields below take part in scoring; everything else from the
	metadata file is kept untouched in `extra`.
	"""
	id: str  # unique identifier (yt-dlp video id)
	title: Optional[str] = None  # video title as published
	description: Optional[str] = None  # free-text description
	tags: List[str] = field(default_factory=list)  # uploader supplied tags
	uploader: str = ''  # channel / author name
	duration: float = 0.0  # length in seconds, never negative
	extra: Dict[str, Any] = field(default_factory=dict)  # passthrough metadata (upload_date, webpage_url...)


@dataclass(frozen=True)
class ScoredRecord:
	"""
	A candidate together with the scores computed for one query.
	Built once per scoring pass and never modified afterwards.
	"""
	record: CandidateRecord  # the scored candidate
	similarity: float  # weighted final score
	language_similarity: float  # edit-distance + phonetic signal
	fuzzy_score: float  # approximate matching signal (1 - match cost)
	direct_match_score: float  # substring containment signal

	@property
	def id(self) -> str:
		return self.record.id


@dataclass(frozen=True)
class WorkChunk:
	"""A contiguous slice of the candidate list handed to exactly one worker."""
	index: int  # worker position, 0-based
	start: int  # offset of the first record in the full candidate list
	records: Tuple[CandidateRecord, ...]  # the slice itself (may be empty)

	def __len__(self) -> int:
		return len(self.records)
