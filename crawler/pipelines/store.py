"""
JSON file storage for the latest snapshot (one file, overwritten per run).
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Union

logger = logging.getLogger(__name__)


class SnapshotStore:
    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def write(self, payload: Dict[str, Any]) -> Path:
        """
        Write `payload` atomically. Filesystem errors propagate: a run that
        cannot publish its snapshot has failed.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=str(self.path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, ensure_ascii=False, indent=2)
                handle.write("\n")
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.info("Snapshot written to %s", self.path)
        return self.path

    def read(self) -> Dict[str, Any]:
        return json.loads(self.path.read_text(encoding="utf-8"))
