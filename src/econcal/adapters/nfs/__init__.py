"""Public interface for the Fair Economy (NFS) adapter."""

from __future__ import annotations

from .client import NfsFetcher
from .schema import NfsEventPayload
from .translator import parse_nfs_calendar, parse_nfs_event

__all__ = ["NfsEventPayload", "NfsFetcher", "parse_nfs_calendar", "parse_nfs_event"]
