"""
Travel Store - Flat JSON Persistence
====================================

All travel entries live in one JSON array on disk. Every operation reads
the whole file, and every mutation rewrites it:

```
read travels.json -> mutate list -> write travels.json
```

There is no locking: two concurrent uploads can lose one entry, so the
app runs as a single-worker process.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from travel_diary.core.exceptions import StorageException

logger = logging.getLogger(__name__)

TravelRecord = Dict[str, Any]


class TravelStore:
    """
    Reads and writes travel records in a JSON file.

    Attributes:
        path: Location of the JSON file.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        """
        Open (and if needed create) the store.

        The parent directory and an empty ``[]`` file are created when
        missing.

        Raises:
            StorageException: If the file or its directory cannot be created.
        """
        self.path = Path(path)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            if not self.path.exists():
                self._write([])
                logger.info(f"Created empty travel store at: {self.path}")
        except OSError as e:
            raise StorageException(
                f"Failed to initialize travel store: {e}",
                details={"path": str(self.path)},
            )

    def list(self) -> List[TravelRecord]:
        """
        Return every stored travel, oldest first.

        A missing, unreadable or corrupt file yields an empty list; the
        error is logged rather than raised so list pages keep rendering.
        """
        try:
            return self._read()
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read travel store {self.path}: {e}")
            return []

    def count(self) -> int:
        """Number of stored travels. Raises on an unreadable or corrupt file."""
        return len(self._read())

    def get(self, travel_id: str) -> Optional[TravelRecord]:
        for travel in self.list():
            if travel.get("id") == travel_id:
                return travel
        return None

    def add(self, travel: TravelRecord) -> TravelRecord:
        travels = self._read_for_update()
        travels.append(travel)
        self._write(travels)
        logger.info(f"Saved travel {travel.get('id')} ({len(travels)} total)")
        return travel

    def remove(self, travel_id: str) -> Optional[TravelRecord]:
        """
        Remove a travel by id.

        Returns:
            The removed record, or None if no travel has that id.
        """
        travels = self._read_for_update()
        for index, travel in enumerate(travels):
            if travel.get("id") == travel_id:
                removed = travels.pop(index)
                self._write(travels)
                logger.info(f"Removed travel {travel_id}")
                return removed
        return None

    def _read(self) -> List[TravelRecord]:
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, list):
            raise ValueError("travel file does not hold a JSON array")
        return data

    def _read_for_update(self) -> List[TravelRecord]:
        # A file that does not parse must never be overwritten
        try:
            return self._read()
        except (OSError, ValueError) as e:
            logger.error(f"Refusing to update unreadable travel store {self.path}: {e}")
            raise StorageException(
                "Travel data is unreadable",
                details={"path": str(self.path), "error": str(e)},
            )

    def _write(self, travels: List[TravelRecord]) -> None:
        """
        Replace the file contents atomically.

        The JSON goes to a temporary file in the same directory first and
        is moved over ``path`` with ``os.replace``, so readers see either
        the old array or the new one.
        """
        payload = json.dumps(travels, indent=2, ensure_ascii=False)
        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(payload)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, self.path)
        except OSError as e:
            logger.error(f"Failed to write travel store {self.path}: {e}")
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageException(
                "Failed to save travels",
                details={"path": str(self.path)},
            )
