"""
Data loading module.
Reads yt-dlp metadata files (one JSON object per downloaded video) from a
directory and turns them into CandidateRecord objects. Also resolves a record
id back to the downloaded media file.
"""

# Standard libs for JSON parsing, typing, and paths
import json  # parse .info.json files
from pathlib import Path  # filesystem-safe paths
from typing import Any, Dict, List, Optional  # type hints

# Console logging
from loguru import logger  # console logger

# Import our record data class used across the project
from .errors import RecordSourceError  # missing/unreadable metadata location
from .models import CandidateRecord  # structured record

# Media extensions yt-dlp typically writes, checked in this order
MEDIA_EXTENSIONS = ('webm', 'mp4', 'mkv', 'mp3', 'wav', 'flac', 'flv', 'opus')

# Keys mapped onto CandidateRecord attributes; everything else goes to `extra`
CORE_KEYS = {'id', 'title', 'description', 'tags', 'uploader', 'duration'}


class DataLoader:
	"""
	Handles loading and preprocessing of yt-dlp metadata.
	"""

	def list_metadata_files(self, directory) -> List[Path]:
		"""Return the *.json files of a directory, sorted by name so chunking is stable."""
		directory = Path(directory)  # normalize path
		# Validate the directory early to give clear error messages
		if not directory.is_dir():
			raise RecordSourceError(f"Metadata directory not found: {directory}")
		return sorted(p for p in directory.iterdir() if p.suffix == '.json' and p.is_file())

	def load_records_from_directory(self, directory) -> List[CandidateRecord]:
		"""
		Load every metadata file in `directory`.
		Files that cannot be parsed are skipped with a warning.
		"""
		files = self.list_metadata_files(directory)
		logger.info(f"[DataLoader] Loading {len(files)} metadata files from {directory}...")

		records = []  # accumulator for parsed records
		for path in files:
			try:
				data = json.loads(path.read_text(encoding='utf-8'))  # one object per file
			except (json.JSONDecodeError, UnicodeDecodeError) as e:
				logger.warning(f"[DataLoader] Skipping invalid JSON in {path.name}: {e}")  # malformed file
				continue
			except OSError as e:
				logger.warning(f"[DataLoader] Skipping unreadable file {path.name}: {e}")  # permissions etc.
				continue

			record = self._parse_entry(data, source=path.name)
			if record is not None:
				records.append(record)

		logger.info(f"[DataLoader] Successfully loaded {len(records)} records.")  # summary
		return records

	def load_records_from_file(self, filepath) -> List[CandidateRecord]:
		"""
		Load records from a single JSON file holding either one object or a list of objects.
		"""
		filepath = Path(filepath)
		if not filepath.exists():
			raise RecordSourceError(f"Metadata file not found: {filepath}")

		try:
			parsed = json.loads(filepath.read_text(encoding='utf-8'))
		except json.JSONDecodeError as e:
			raise RecordSourceError(f"Invalid JSON in {filepath}: {e}") from e

		entries = parsed if isinstance(parsed, list) else [parsed]
		records = []
		for position, entry in enumerate(entries):
			record = self._parse_entry(entry, source=f"{filepath.name}[{position}]")
			if record is not None:
				records.append(record)
		logger.info(f"[DataLoader] Loaded {len(records)} records from {filepath}")
		return records

	def _parse_entry(self, data: Any, source: str) -> Optional[CandidateRecord]:
		if not isinstance(data, dict):
			logger.warning(f"[DataLoader] Skipping {source}: expected a JSON object")
			return None
		if not data.get('id'):
			logger.warning(f"[DataLoader] Skipping {source}: no 'id'")
			return None
		return self.parse_record(data)

	def parse_record(self, data: Dict[str, Any]) -> CandidateRecord:
		"""
		Convert a raw metadata dictionary into a CandidateRecord.
		Missing optional fields become None/empty, unknown keys are kept in `extra`.
		"""
		return CandidateRecord(
			id=str(data['id']),  # ensure ID is string
			title=self._optional_text(data.get('title')),
			description=self._optional_text(data.get('description')),
			tags=self._parse_tags(data.get('tags')),
			uploader=self._optional_text(data.get('uploader')) or '',
			duration=self._parse_duration(data.get('duration')),
			extra={key: value for key, value in data.items() if key not in CORE_KEYS},
		)

	def _optional_text(self, value) -> Optional[str]:
		if value is None:
			return None
		return value if isinstance(value, str) else str(value)

	def _parse_tags(self, value) -> List[str]:
		"""
		Normalize a value that may be None, a list, or a comma-separated string
		into a list of clean strings.
		"""
		if value is None:  # missing field
			return []
		if isinstance(value, list):  # already a list
			return [str(item).strip() for item in value if item]
		if isinstance(value, str):  # comma-separated string
			return [item.strip() for item in value.split(',') if item.strip()]
		return []  # any other type becomes empty

	def _parse_duration(self, value) -> float:
		"""Duration in seconds; missing, invalid or negative values become 0."""
		try:
			duration = float(value) if value is not None else 0.0
		except (TypeError, ValueError):
			return 0.0
		if duration != duration or duration < 0:  # NaN or negative
			return 0.0
		return duration


def find_file_url(base_directory, record_id: str) -> Optional[str]:
	"""
	Find the downloaded media file for a record id.
	Returns a file:// URL for the first existing extension, or None.
	"""
	base = Path(base_directory).resolve()
	for extension in MEDIA_EXTENSIONS:
		candidate = base / f"{record_id}.{extension}"
		if candidate.exists():
			return candidate.as_uri()
	return None
