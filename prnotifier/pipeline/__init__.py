"""Review filtering pipeline."""

from prnotifier.pipeline.review_filter import evaluate, exclusion_reason, has_approval

__all__ = ["evaluate", "exclusion_reason", "has_approval"]
