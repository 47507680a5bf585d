"""Storage backend selection shared by the server and the CLI."""

from __future__ import annotations

from toolbench.config.settings import Settings
from toolbench.interfaces.blob_store import IBlobStore
from toolbench.interfaces.feedback_provider import IFeedbackProvider
from toolbench.providers.blob.local_blob_store import LocalBlobStore
from toolbench.providers.blob.s3_blob_store import S3BlobStore
from toolbench.providers.feedback.blob_feedback_provider import BlobFeedbackProvider
from toolbench.providers.feedback.sqlite_feedback_provider import SQLiteFeedbackProvider
from toolbench.utils.errors import ConfigurationError


def build_blob_store(app_settings: Settings) -> IBlobStore:
    """Local directory by default; S3 when ``BLOB_BACKEND=s3``."""
    if app_settings.blob_backend == "s3":
        if not app_settings.blob_s3_bucket:
            raise ConfigurationError(message="BLOB_S3_BUCKET is required when BLOB_BACKEND=s3")
        return S3BlobStore(bucket=app_settings.blob_s3_bucket, region=app_settings.blob_s3_region)
    if app_settings.blob_backend != "local":
        raise ConfigurationError(message=f"Unknown BLOB_BACKEND: {app_settings.blob_backend}")
    return LocalBlobStore(root_dir=app_settings.blob_local_dir)


def build_feedback_provider(app_settings: Settings, blob_store: IBlobStore) -> IFeedbackProvider:
    if app_settings.feedback_backend == "sqlite":
        return SQLiteFeedbackProvider(db_path=app_settings.feedback_db_path)
    if app_settings.feedback_backend != "blob":
        raise ConfigurationError(message=f"Unknown FEEDBACK_BACKEND: {app_settings.feedback_backend}")
    return BlobFeedbackProvider(blob_store=blob_store)
