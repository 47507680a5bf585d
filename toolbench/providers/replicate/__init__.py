"""Replicate API client shared by the Replicate-backed tools."""

from toolbench.providers.replicate.replicate_client import ReplicateClient

__all__ = ["ReplicateClient"]
