"""
Streaming ZIP archive of a job's outputs.

Entries are read from object storage chunk by chunk and compressed into an
unseekable buffer that is drained after every write, so the archive is
emitted while it is built and never held in memory as a whole.

Dependencies: zipfile (stdlib), vecta.boundary.aws
System role: Bulk download for completed jobs
"""

import asyncio
import logging
import zipfile
from dataclasses import dataclass
from typing import AsyncIterator, Iterator, Sequence

from vecta.boundary.aws.s3_client import ObjectStorage

logger = logging.getLogger(__name__)

ZIP_COMPRESSION_LEVEL = 1

_END = object()


@dataclass(frozen=True)
class ArchiveEntry:
    name: str
    key: str


class _DrainableBuffer:
    """
    Write-only sink for ZipFile.

    It has no seek(), so ZipFile writes data descriptors after each entry
    instead of seeking back to patch local headers.
    """

    def __init__(self) -> None:
        self._chunks: list[bytes] = []
        self._position = 0

    def write(self, data) -> int:
        chunk = bytes(data)
        self._chunks.append(chunk)
        self._position += len(chunk)
        return len(chunk)

    def tell(self) -> int:
        return self._position

    def flush(self) -> None:
        pass

    def drain(self) -> bytes:
        data = b"".join(self._chunks)
        self._chunks.clear()
        return data


async def _next_chunk(chunks: Iterator[bytes]):
    return await asyncio.to_thread(next, chunks, _END)


async def stream_zip(
    storage: ObjectStorage,
    entries: Sequence[ArchiveEntry],
) -> AsyncIterator[bytes]:
    """
    Yield a deflate-compressed ZIP of entries, in order.

    Args:
        storage: Object storage the entry keys are read from
        entries: Archive member names and their storage keys

    Yields:
        bytes: Archive bytes as they are produced
    """
    buffer = _DrainableBuffer()
    with zipfile.ZipFile(
        buffer,
        mode="w",
        compression=zipfile.ZIP_DEFLATED,
        compresslevel=ZIP_COMPRESSION_LEVEL,
    ) as archive:
        for entry in entries:
            chunks = storage.get_stream(entry.key)
            try:
                with archive.open(entry.name, mode="w") as member:
                    while True:
                        chunk = await _next_chunk(chunks)
                        if chunk is _END:
                            break
                        member.write(chunk)
                        data = buffer.drain()
                        if data:
                            yield data
            finally:
                chunks.close()
            data = buffer.drain()
            if data:
                yield data

    data = buffer.drain()
    if data:
        yield data
    logger.info("Archive streamed", extra={"entries": len(entries)})
