"""Query execution: executor protocol, outcomes and the retry/timeout wrapper."""
