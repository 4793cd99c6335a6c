"""
JSON snapshot files.

Each snapshot is one pretty-printed UTF-8 JSON file in the data
directory, overwritten wholesale on every write. Keys are sorted so the
same data always produces the same bytes.
"""

import dataclasses
import logging
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any

import orjson
from pydantic import BaseModel

from marketsnap.config.constants import (
    ARBITRAGE_DATA_SOURCE,
    SNAPSHOT_ERROR_REPORT,
    SNAPSHOT_LAST_UPDATED,
)
from marketsnap.utils.time import format_local, to_iso, utc_now


logger = logging.getLogger(__name__)

# Dataclasses are routed through _default so their keys are sorted too
DUMP_OPTIONS = (
    orjson.OPT_INDENT_2
    | orjson.OPT_SORT_KEYS
    | orjson.OPT_APPEND_NEWLINE
    | orjson.OPT_PASSTHROUGH_DATACLASS
)


def _default(obj: Any) -> Any:
    """Serialize types orjson does not handle natively."""
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if isinstance(obj, Path):
        return str(obj)
    raise TypeError(f"Type is not JSON serializable: {type(obj).__name__}")


def dumps(data: Any) -> bytes:
    """Serialize to the snapshot byte format."""
    return orjson.dumps(data, default=_default, option=DUMP_OPTIONS)


class SnapshotWriter:
    """
    Writes and reads snapshot files in one directory.

    Writes are plain overwrites: no temp file, no versioning.
    """

    def __init__(self, data_dir: Path | str) -> None:
        """
        Initialize the writer.

        Args:
            data_dir: Target directory, created on first write.
        """
        self._data_dir = Path(data_dir)

    @property
    def data_dir(self) -> Path:
        """Directory holding the snapshots."""
        return self._data_dir

    def path_for(self, name: str) -> Path:
        """Absolute path of a snapshot file."""
        return self._data_dir / name

    def write(self, name: str, data: Any) -> Path:
        """
        Serialize ``data`` and overwrite the snapshot ``name``.

        Returns:
            Path of the written file.
        """
        path = self.path_for(name)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = dumps(data)
        path.write_bytes(payload)
        logger.info(f"Saved {name} ({len(payload)} bytes)")
        return path

    def read(self, name: str, default: Any = None) -> Any:
        """
        Load a snapshot.

        Returns:
            Parsed content, or ``default`` if the file is missing or corrupt.
        """
        path = self.path_for(name)
        if not path.exists():
            return default
        try:
            return orjson.loads(path.read_bytes())
        except orjson.JSONDecodeError as e:
            logger.warning(f"Corrupt snapshot {name}: {e}")
            return default

    def write_last_updated(
        self,
        counts: dict[str, int],
        metrics: dict[str, Any] | None = None,
        now: datetime | None = None,
    ) -> dict[str, Any]:
        """Write the last-updated marker with item counts."""
        now = now or utc_now()
        marker: dict[str, Any] = {
            "timestamp": to_iso(now),
            "formatted": format_local(now),
            "data_source": ARBITRAGE_DATA_SOURCE,
        }
        marker.update({f"total_{key}": value for key, value in counts.items()})
        if metrics is not None:
            marker["metrics"] = metrics
        self.write(SNAPSHOT_LAST_UPDATED, marker)
        return marker

    def write_error_report(self, error: BaseException, now: datetime | None = None) -> dict[str, Any]:
        """Write diagnostics for a failed run."""
        now = now or utc_now()
        report = {
            "timestamp": to_iso(now),
            "error": str(error),
            "error_type": type(error).__name__,
            "stack": "".join(traceback.format_exception(error)),
            "data_source": "Error_Report",
        }
        self.write(SNAPSHOT_ERROR_REPORT, report)
        return report
