"""Admission of profile photo uploads into durable storage."""

from __future__ import annotations

import logging
import os
import secrets
import time
from pathlib import Path, PurePosixPath
from typing import Optional, Protocol

import aiofiles
import aiofiles.os

from ...domain.errors import UploadRejected
from ...domain.models import StoredFile

logger = logging.getLogger(__name__)

PROFILE_IMAGE_FIELD = "profileImage"
ALLOWED_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif"})
MAX_UPLOAD_BYTES = 5 * 1024 * 1024


class IncomingFile(Protocol):
    filename: Optional[str]

    async def read(self, size: int = -1) -> bytes:
        ...


class UploadAdmissionPipeline:
    """
    Validates, names and writes one binary attachment per request.

    The pipeline never keeps track of what it wrote: whoever consumes a
    ``StoredFile`` owns it and must call ``delete_stored`` when the
    surrounding operation fails.
    """

    CHUNK_SIZE = 64 * 1024
    MAX_NAME_ATTEMPTS = 5

    def __init__(
        self,
        directory: Path,
        public_prefix: str,
        *,
        max_bytes: int = MAX_UPLOAD_BYTES,
        field_name: str = PROFILE_IMAGE_FIELD,
    ) -> None:
        self._directory = directory
        self._public_prefix = public_prefix.rstrip("/")
        self._max_bytes = max_bytes
        self._field_name = field_name

    @property
    def field_name(self) -> str:
        return self._field_name

    async def admit(self, upload: IncomingFile) -> StoredFile:
        extension = self._validated_extension(upload.filename)
        await aiofiles.os.makedirs(self._directory, exist_ok=True)

        for _ in range(self.MAX_NAME_ATTEMPTS):
            filename = self._generate_name(extension)
            path = self._directory / filename
            try:
                size = await self._write(upload, path)
            except FileExistsError:
                logger.debug("Generated upload name %s already taken, retrying", filename)
                continue
            logger.info("Stored upload %s (%d bytes)", filename, size)
            return StoredFile(
                path=path,
                filename=filename,
                public_path=f"{self._public_prefix}/{filename}",
                size=size,
            )
        raise RuntimeError("Could not allocate a unique name for the uploaded file.")

    async def delete_stored(self, stored: StoredFile) -> None:
        """Remove a previously admitted file; deleting twice is harmless."""
        await self._discard(stored.path)
        logger.info("Rolled back upload %s", stored.filename)

    async def delete_public_path(self, public_path: Optional[str]) -> None:
        if not public_path or not public_path.startswith(f"{self._public_prefix}/"):
            return
        name = PurePosixPath(public_path).name
        await self._discard(self._directory / name)

    def _validated_extension(self, filename: Optional[str]) -> str:
        extension = os.path.splitext(filename or "")[1]
        if extension.lower() not in ALLOWED_EXTENSIONS:
            raise UploadRejected("Only image files (jpg, jpeg, png, gif) are allowed!")
        return extension

    def _generate_name(self, extension: str) -> str:
        millis = time.time_ns() // 1_000_000
        suffix = 100_000_000 + secrets.randbelow(900_000_000)
        return f"{self._field_name}-{millis}-{suffix}{extension}"

    async def _write(self, upload: IncomingFile, path: Path) -> int:
        written = 0
        try:
            async with aiofiles.open(path, "xb") as out:
                while True:
                    chunk = await upload.read(self.CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > self._max_bytes:
                        raise UploadRejected(f"Image size cannot exceed {self._describe_limit()}.")
                    await out.write(chunk)
        except FileExistsError:
            raise
        except BaseException:
            await self._discard(path)
            raise
        return written

    def _describe_limit(self) -> str:
        if self._max_bytes % (1024 * 1024) == 0:
            return f"{self._max_bytes // (1024 * 1024)}MB"
        return f"{self._max_bytes} bytes"

    @staticmethod
    async def _discard(path: Path) -> None:
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            logger.debug("Upload %s already removed", path.name)
