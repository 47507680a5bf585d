"""Blob stores.

LocalBlobStore keeps JSON documents on disk and suits single-host
deployments.  S3BlobStore shares state between hosts.  Both implement
IBlobStore, so analytics and feedback never know which one they got.
"""

from toolbench.providers.blob.local_blob_store import LocalBlobStore
from toolbench.providers.blob.s3_blob_store import S3BlobStore

__all__ = ["LocalBlobStore", "S3BlobStore"]
