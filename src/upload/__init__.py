"""Upload-then-annotate orchestration and the duplicate-aware pipeline."""
