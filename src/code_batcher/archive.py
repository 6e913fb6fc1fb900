from __future__ import annotations

import zipfile
from pathlib import Path
from typing import TYPE_CHECKING

from code_batcher.config import BATCH_ENTRY_PREFIX, ZIP_COMPRESSLEVEL
from code_batcher.exceptions import ArchiveError
from code_batcher.logging import logger

if TYPE_CHECKING:
    from collections.abc import Iterable

    from code_batcher.config import Batch


def batch_entry_name(batch_number: int, prefix: str = BATCH_ENTRY_PREFIX) -> str:
    return f"{prefix}{batch_number}.txt"


def write_batches_zip(
    batches: Iterable[Batch],
    destination: str | Path,
    *,
    entry_prefix: str = BATCH_ENTRY_PREFIX,
) -> int:
    """Write each batch as one entry of a deflated zip archive.

    Batches are consumed one at a time, so a lazy iterable is never fully
    materialized. On failure the partial archive is removed.

    Args:
        batches (Iterable[Batch]): the batches to archive, in order
        destination (str | Path): the zip file to create
        entry_prefix (str): entry name prefix, followed by the batch number and ``.txt``

    Raises:
        ArchiveError: if the archive cannot be written

    Returns:
        int: the number of entries written
    """
    dest = Path(destination)
    count = 0
    opened = False
    try:
        with zipfile.ZipFile(dest, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=ZIP_COMPRESSLEVEL) as zf:
            opened = True
            for batch in batches:
                zf.writestr(batch_entry_name(batch.batch_number, entry_prefix), batch.content)
                count += 1
    except (OSError, zipfile.BadZipFile, zipfile.LargeZipFile) as e:
        logger.error("zip_generation_failed", destination=str(dest), entries_written=count, error=str(e))
        if opened:
            dest.unlink(missing_ok=True)
        raise ArchiveError(message=f"Failed to generate batch ZIP: {e}", destination=str(dest)) from e

    logger.info("zip_written", destination=str(dest), entries=count)
    return count
