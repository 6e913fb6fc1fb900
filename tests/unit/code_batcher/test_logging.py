from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

import pytest

from code_batcher import logging as batcher_logging

if TYPE_CHECKING:
    from pathlib import Path


@pytest.mark.unit
def test_setup_logging_with_file_retargets_output(tmp_path: Path) -> None:
    log_file = tmp_path / "batcher.log"

    try:
        log = batcher_logging.setup_logging(log_file)
        log.info("zip_written", entries=2)
    finally:
        batcher_logging._route_records(None)

    record = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
    assert record["event"] == "zip_written"
    assert record["entries"] == 2
    assert record["level"] == "info"
    assert "timestamp" in record


@pytest.mark.unit
def test_route_records_replaces_previous_handlers(tmp_path: Path) -> None:
    try:
        batcher_logging._route_records(tmp_path / "a.log")
        batcher_logging._route_records(tmp_path / "b.log")
        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert handlers[0].baseFilename == str(tmp_path / "b.log")
    finally:
        batcher_logging._route_records(None)
