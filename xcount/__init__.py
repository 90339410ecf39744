"""
X Count Proxy

Hourly tweet-volume counts from the X API, cached in-process and
shielded from upstream rate limits and outages.
"""

__version__ = "1.0.0"
