"""Display helpers shared by the API and the command-line tool."""

import math
from datetime import datetime, timezone
from typing import Optional


def format_duration(duration: float) -> str:
	"""Seconds -> 'Xm Ys' (both parts floored)."""
	duration = max(0.0, float(duration or 0))
	minutes = math.floor(duration / 60)
	seconds = math.floor(duration % 60)  # floats like 59.999 must not print as 60
	return f"{minutes}m {seconds}s"


def format_percentage(value: float) -> str:
	"""0.1234 -> '12.34%'."""
	return f"{value * 100:.2f}%"


def parse_upload_date(value) -> Optional[int]:
	"""
	yt-dlp upload dates are 'YYYYMMDD' strings; return a UTC unix timestamp.
	Numbers are assumed to already be timestamps. Anything else gives None.
	"""
	if isinstance(value, bool) or value is None:
		return None
	if isinstance(value, (int, float)):
		return int(value)
	try:
		parsed = datetime.strptime(str(value), '%Y%m%d')
	except ValueError:
		return None
	return int(parsed.replace(tzinfo=timezone.utc).timestamp())
