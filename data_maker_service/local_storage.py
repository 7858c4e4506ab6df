import os
import threading
from contextlib import contextmanager
from typing import Any, BinaryIO, Iterable, Iterator

import fsspec

from .digest import DIGEST_BLOCK_SIZE, compute_digest
from .exceptions import LocalStorageError, OperationCancelledError
from .logger import logger

COPY_BLOCK_SIZE = 1024 * 1024


def raise_if_cancelled(cancel_event: threading.Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise OperationCancelledError


class LocalArtifactStore:
    """Transient on-disk copies of the objects being generated."""

    client: Any = None

    def __init__(self, root: str) -> None:
        self.root = root
        self.client = fsspec.filesystem("file")

    def ensure_root(self) -> None:
        try:
            self.client.makedirs(self.root, exist_ok=True)
        except OSError as exception:
            logger.exception(
                "Cannot create working directory", extra={"root": self.root}
            )
            raise LocalStorageError(f"Cannot create {self.root}") from exception
        logger.info("Working directory ready", extra={"root": self.root})

    def path_for(self, name: str) -> str:
        return os.path.join(self.root, name)

    def write_chunks(
        self,
        path: str,
        chunks: Iterable[bytes],
        cancel_event: threading.Event | None = None,
    ) -> int:
        written = 0
        try:
            with self.client.open(path, mode="wb") as fobj:
                for chunk in chunks:
                    raise_if_cancelled(cancel_event)
                    fobj.write(chunk)
                    written += len(chunk)
        except OSError as exception:
            logger.exception("Failed to write local artifact", extra={"path": path})
            raise LocalStorageError(f"Cannot write {path}") from exception
        logger.debug("Wrote local artifact", extra={"path": path, "bytes": written})
        return written

    def open_read(self, path: str) -> BinaryIO:
        try:
            return self.client.open(path, mode="rb")
        except OSError as exception:
            logger.exception("Failed to open local artifact", extra={"path": path})
            raise LocalStorageError(f"Cannot open {path}") from exception

    def digest(self, path: str, block_size: int = DIGEST_BLOCK_SIZE) -> str:
        """Hash the artifact as it was persisted, by reading it back."""
        with self.open_read(path) as fobj:
            try:
                return compute_digest(fobj, block_size)
            except OSError as exception:
                logger.exception("Failed to hash local artifact", extra={"path": path})
                raise LocalStorageError(f"Cannot read {path}") from exception

    def copy_range(
        self,
        source: BinaryIO,
        path: str,
        length: int,
        cancel_event: threading.Event | None = None,
    ) -> int:
        """Copy the next ``length`` bytes of ``source`` into a new file at ``path``."""
        copied = 0
        try:
            with self.client.open(path, mode="wb") as target:
                while copied < length:
                    raise_if_cancelled(cancel_event)
                    block = source.read(min(COPY_BLOCK_SIZE, length - copied))
                    if not block:
                        break
                    target.write(block)
                    copied += len(block)
        except OSError as exception:
            logger.exception("Failed to stage part", extra={"path": path})
            raise LocalStorageError(f"Cannot stage {path}") from exception
        if copied != length:
            raise LocalStorageError(
                f"Short read while staging {path}: {copied} of {length} bytes"
            )
        return copied

    def remove(self, path: str) -> None:
        try:
            if self.client.exists(path):
                self.client.rm_file(path)
        except OSError as exception:
            logger.exception("Failed to delete local artifact", extra={"path": path})
            raise LocalStorageError(f"Cannot delete {path}") from exception

    @contextmanager
    def artifact(self, path: str) -> Iterator[str]:
        """Yield ``path`` and delete whatever was written there on exit.

        A failed delete is logged by ``remove`` and never replaces the
        outcome of the block.
        """
        try:
            yield path
        finally:
            try:
                self.remove(path)
            except LocalStorageError:
                logger.warning("Leaving local artifact behind", extra={"path": path})
