"""Atomic JSON writers for reports and cached summaries."""

from __future__ import annotations

import json
import logging
import os
import uuid
from contextlib import suppress
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

if TYPE_CHECKING:
    from talk_analytics.report import AnalyticsReport

logger = logging.getLogger(__name__)


def _sync_parent(directory: Path) -> None:
    """Best-effort fsync of a directory after a rename."""

    try:
        fd = os.open(directory, os.O_RDONLY)
    except OSError:
        logger.debug("Cannot open %s for fsync", directory)
        return
    try:
        os.fsync(fd)
    except OSError:
        logger.debug("fsync failed for %s", directory)
    finally:
        os.close(fd)


def write_text_atomic(path: str | Path, content: str) -> Path:
    """Write `content` to a hidden sibling file, then rename it over `path`.

    Readers see either the previous file or the complete new one.
    """

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    staging = target.with_name(f".{target.name}.{uuid.uuid4().hex}.tmp")
    try:
        with staging.open("w", encoding="utf-8") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(staging, target)
    finally:
        if staging.exists():
            with suppress(OSError):
                staging.unlink()
    _sync_parent(target.parent)
    return target


def save_json(path: str | Path, payload: dict[str, Any] | BaseModel) -> Path:
    """Save a mapping or pydantic model as indented UTF-8 JSON."""

    data = payload.model_dump(mode="json") if isinstance(payload, BaseModel) else payload
    return write_text_atomic(path, json.dumps(data, ensure_ascii=False, indent=2) + "\n")


def save_report(path: str | Path, report: AnalyticsReport) -> Path:
    return save_json(path, report.to_dict())
