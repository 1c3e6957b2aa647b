"""Benchmark core: pacing, concurrency, retries, sampling and statistics."""
