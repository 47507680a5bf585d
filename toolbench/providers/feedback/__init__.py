"""Feedback board providers."""

from toolbench.providers.feedback.blob_feedback_provider import BlobFeedbackProvider
from toolbench.providers.feedback.sqlite_feedback_provider import SQLiteFeedbackProvider

__all__ = ["BlobFeedbackProvider", "SQLiteFeedbackProvider"]
