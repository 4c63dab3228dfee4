"""Filing acquisition.

Paginators for the near-real-time SEC feed and the historical FMP feed, the
per-provider rate-limited request queue, and the selector that chooses a feed
for a date range.
"""
