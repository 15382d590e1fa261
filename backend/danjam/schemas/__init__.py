"""Pydantic v2 schemas for hotel backend payloads and API responses."""
