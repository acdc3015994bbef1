"""Memory store backends keyed by (context, module)."""

from __future__ import annotations

import asyncio
import logging
import os
import re
from pathlib import Path
from typing import Any, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ci_orchestrator.errors import ConfigurationError, MemoryStoreError

logger = logging.getLogger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


def _safe(part: str) -> str:
    if not part:
        raise ValueError("Memory key parts must not be empty")
    return _UNSAFE_KEY_CHARS.sub("_", part)


class MemoryStore(Protocol):
    """Async key-value persistence for module memory records."""

    async def load(self, context: str, module: str) -> str | None:
        """Return stored content, or None when nothing was saved yet."""
        ...

    async def save(self, context: str, module: str, content: str) -> None:
        """Store ``content``, overwriting any previous record."""
        ...


class InMemoryStore:
    """Process-local store used for dry runs and tests."""

    def __init__(self) -> None:
        self._records: dict[tuple[str, str], str] = {}

    async def load(self, context: str, module: str) -> str | None:
        return self._records.get((context, module))

    async def save(self, context: str, module: str, content: str) -> None:
        self._records[(context, module)] = content

    def __len__(self) -> int:
        return len(self._records)


class FileMemoryStore:
    """One JSON file per (context, module) under a base directory."""

    def __init__(self, base_dir: str | Path | None = None) -> None:
        self._base_dir = Path(
            base_dir or os.environ.get("ORCHESTRATOR_MEMORY_DIR", ".orchestrator-memory")
        )

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def _path(self, context: str, module: str) -> Path:
        """Build the file path for a record."""
        return self._base_dir / _safe(context) / f"{_safe(module)}.json"

    def _read(self, path: Path) -> str | None:
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise MemoryStoreError(f"Cannot read memory file {path}: {e}") from e

    def _write(self, path: Path, content: str) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp = path.with_suffix(".json.tmp")
            tmp.write_text(content, encoding="utf-8")
            tmp.replace(path)
        except OSError as e:
            raise MemoryStoreError(f"Cannot write memory file {path}: {e}") from e

    async def load(self, context: str, module: str) -> str | None:
        return await asyncio.to_thread(self._read, self._path(context, module))

    async def save(self, context: str, module: str, content: str) -> None:
        path = self._path(context, module)
        await asyncio.to_thread(self._write, path, content)
        logger.debug("Saved memory for %s/%s to %s", context, module, path)


class S3MemoryStore:
    """Memory records stored as JSON objects in an S3 bucket."""

    def __init__(
        self,
        bucket: str | None = None,
        s3_client: Any | None = None,
        prefix: str = "memory",
    ) -> None:
        self._bucket = bucket or os.environ.get(
            "ORCHESTRATOR_MEMORY_BUCKET", "ci-orchestrator-memory"
        )
        self._s3 = s3_client or boto3.client("s3")
        self._prefix = prefix.strip("/")

    def _key(self, context: str, module: str) -> str:
        """Build the S3 object key for a record."""
        return f"{self._prefix}/{_safe(context)}/{_safe(module)}.json"

    def _get(self, key: str) -> str | None:
        try:
            resp = self._s3.get_object(Bucket=self._bucket, Key=key)
            return resp["Body"].read().decode("utf-8")
        except ClientError as e:
            if e.response["Error"]["Code"] in ("NoSuchKey", "404"):
                return None
            raise MemoryStoreError(f"Cannot load s3://{self._bucket}/{key}: {e}") from e
        except BotoCoreError as e:
            raise MemoryStoreError(f"Cannot load s3://{self._bucket}/{key}: {e}") from e

    def _put(self, key: str, content: str) -> None:
        try:
            self._s3.put_object(
                Bucket=self._bucket,
                Key=key,
                Body=content.encode("utf-8"),
                ContentType="application/json",
            )
        except (ClientError, BotoCoreError) as e:
            raise MemoryStoreError(f"Cannot save s3://{self._bucket}/{key}: {e}") from e

    async def load(self, context: str, module: str) -> str | None:
        return await asyncio.to_thread(self._get, self._key(context, module))

    async def save(self, context: str, module: str, content: str) -> None:
        key = self._key(context, module)
        await asyncio.to_thread(self._put, key, content)
        logger.debug("Saved memory for %s/%s to s3://%s/%s", context, module, self._bucket, key)


def create_store(
    backend: str,
    memory_dir: str | Path | None = None,
    bucket: str | None = None,
) -> MemoryStore:
    """Build a memory store for the named backend."""
    backend = backend.lower()
    if backend == "file":
        return FileMemoryStore(memory_dir)
    if backend == "s3":
        return S3MemoryStore(bucket=bucket)
    if backend == "memory":
        return InMemoryStore()
    raise ConfigurationError(
        f"Unknown memory backend '{backend}' (expected file, s3 or memory)"
    )
