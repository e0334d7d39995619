"""HTTP API for InsightForge."""
