from __future__ import annotations

import os
from pathlib import Path

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field

ENV_FILE = find_dotenv(usecwd=True)
if ENV_FILE:
    load_dotenv(ENV_FILE)

LINES_PER_BATCH_ENV = "CODE_BATCHER_LINES_PER_BATCH"
LOG_FILE_ENV = "CODE_BATCHER_LOG_FILE"


class Settings(BaseModel):
    """Configuration settings for a code_batcher command."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    command: str = Field(default="scan", description="Sub-command to run.")
    project_path: Path = Field(default_factory=Path.cwd, description="Project root.")
    selection: Path | None = Field(default=None, description="JSON selection tree file.")
    output: Path | None = Field(default=None, description="Output file (stdout if unset).")
    lines_per_batch: int | None = Field(
        default_factory=lambda: os.getenv(LINES_PER_BATCH_ENV) or None,
        validate_default=True,
        description="Lines per batch (default 3000).",
    )
    exclude_name: list[str] = Field(
        default_factory=list,
        description="Extra entry names to skip during scans.",
    )
    log_file: str = Field(
        default_factory=lambda: os.getenv(LOG_FILE_ENV, ""),
        description="Log file path.",
    )
