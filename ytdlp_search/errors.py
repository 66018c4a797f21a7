"""
Error taxonomy for the search core.
Separates bad input (reported back to the caller as-is) from failures that
happen while the computation is running.
"""


class SearchError(Exception):
	"""Base class for every error raised by the search core."""


class ConfigurationError(SearchError):
	"""Weight sets or settings are invalid. Raised at startup, fatal."""


class InputError(SearchError):
	"""The caller supplied something unusable (blank query, bad worker count...)."""


class RecordSourceError(InputError):
	"""The metadata directory or file cannot be found or read."""


class WorkerFailure(SearchError):
	"""A scoring worker raised or died. The whole batch is reported as failed."""

	def __init__(self, message: str, chunk_index: int = -1):
		super().__init__(message)
		self.chunk_index = chunk_index  # -1 when the pool itself broke
