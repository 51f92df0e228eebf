"""Conversation thread storage.

Keeps every thread of a browser session, the active selection, and the
upstream identity of each thread, persisted after every change.
"""

from src.threads.store import STORAGE_KEY, ThreadIndexError, ThreadStore, derive_title

__all__ = ["STORAGE_KEY", "ThreadIndexError", "ThreadStore", "derive_title"]
