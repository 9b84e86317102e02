"""Core orchestration and error types."""
