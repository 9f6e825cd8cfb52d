"""SSE relay API for live collections."""
