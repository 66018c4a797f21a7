"""
Shared fixture records for the tests.
The three videos below are the reference ranking scenarios:
'roblox' -> 1, 2, 3 | 'crazy' -> 1, 3, 2 | 'games' -> 2, 1, 3
"""

from ytdlp_search.models import CandidateRecord


def mock_records():
	return [
		CandidateRecord(
			id='1',
			title='Roblox goes crazy',
			description='Wow, this roblox video is crazy!',
			tags=['games'],
			uploader='Crazy Videos!',
			duration=12,
		),
		CandidateRecord(
			id='2',
			title='Relaxing game music',
			description='This video has music from all my favorite games like roblox',
			tags=['music'],
			uploader='Music channel 12345',
			duration=6002,
		),
		CandidateRecord(
			id='3',
			title='Extreme parkour',
			description='Just a bunch of crazy parkour',
			tags=['city', 'jumps'],
			uploader='parkour city!',
			duration=120,
		),
	]


def many_records(count: int = 40):
	"""A larger synthetic batch with repeated words so several records tie or nearly tie."""
	words = ['roblox', 'music', 'parkour', 'crazy', 'games', 'city', 'relaxing', 'minecraft']
	records = []
	for i in range(count):
		first = words[i % len(words)]
		second = words[(i * 3 + 1) % len(words)]
		records.append(CandidateRecord(
			id=f"vid{i:03d}",
			title=f"{first} {second} part {i}",
			description=f"A video about {second} and {first}",
			tags=[first, second],
			uploader=f"channel {second}",
			duration=float(i * 10),
		))
	return records
