"""Regional RSS briefings: fetch, deduplicate, summarize and stream."""

__all__ = ["config", "models", "pipeline"]
