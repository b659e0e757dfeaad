"""Uploaded attachment domain model."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class StoredFile:
    """
    A profile photo written to durable storage.

    Attributes:
        path: Absolute location on disk
        filename: Generated ``<field>-<millis>-<random>.<ext>`` name
        public_path: Path exposed to clients under ``/uploads``
        size: Number of bytes written
    """

    path: Path
    filename: str
    public_path: str
    size: int
