"""Therapy Queue HTTP API."""
