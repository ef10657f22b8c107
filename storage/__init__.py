"""Therapy session storage."""

from storage.therapies import TherapyStorage, get_storage

__all__ = ["TherapyStorage", "get_storage"]
