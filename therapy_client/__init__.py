"""HTTP client for the Therapy Queue API."""

from therapy_client.client import TherapyServiceClient

__all__ = ["TherapyServiceClient"]
