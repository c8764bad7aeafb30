"""
File store infrastructure for mgrepos.

Provides JSON document persistence with:
- Atomic writes (write to temp, then rename)
- Pretty formatting for human editing
- Thread-safe operations
"""

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict
import logging

logger = logging.getLogger(__name__)


class FileStore:
    """
    A single JSON document on disk.

    Unlike a cache, reads always go to disk: the document is small and may
    be edited by hand between commands.

    Example:
        store = FileStore(Path("~/.config/mgconfig"))
        data = store.read()
        data["Aliases"]["gc"] = "git gc"
        store.write(data)
    """

    def __init__(self, path: Path, mode: int = 0o644):
        """
        Initialize FileStore.

        Args:
            path: Path to JSON file
            mode: Permission bits for newly written files
        """
        self.path = Path(path).expanduser()
        self.mode = mode
        self._lock = threading.Lock()

    def _write_atomic(self, data: Dict[str, Any]) -> None:
        """Write data atomically using temp file and rename."""
        # Temp file must live in the same directory for the rename to be atomic
        fd, temp_path = tempfile.mkstemp(
            dir=self.path.parent,
            prefix=f".{self.path.name}.",
            suffix=".tmp"
        )

        try:
            with os.fdopen(fd, 'w') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
                f.write('\n')  # Trailing newline
            os.chmod(temp_path, self.mode)
            os.replace(temp_path, self.path)

        except Exception:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise

    def read_text(self) -> str:
        """
        Read the raw document.

        Raises:
            FileNotFoundError: if the file does not exist
            OSError: if it cannot be read
        """
        with self._lock:
            return self.path.read_text()

    def read(self) -> Dict[str, Any]:
        """
        Read and decode the document.

        Raises:
            FileNotFoundError: if the file does not exist
            json.JSONDecodeError: if the file is not valid JSON
        """
        return json.loads(self.read_text())

    def write(self, data: Dict[str, Any]) -> None:
        """
        Replace the document.

        The parent directory must already exist.
        """
        with self._lock:
            self._write_atomic(data)
        logger.debug(f"Wrote {self.path}")
