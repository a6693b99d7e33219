"""
CSV export of simulation samples, one row per sample.
"""

from typing import List, Dict, Any, Optional, Iterable
from pathlib import Path
import csv


SAMPLE_COLUMNS = ['t', 'y_true', 'y_measured', 'reference', 'u', 'e']


class CSVLogger:
    """
    Row writer for sample records.

    Rows are held in memory and written every ``buffer_size`` rows and on
    close. Columns missing from a row are left empty.

    Example:
        >>> with CSVLogger("output/run.csv") as log:
        ...     log.log_batch(s.to_dict() for s in result.samples())
    """

    def __init__(
        self,
        file_path: str,
        columns: Optional[List[str]] = None,
        buffer_size: int = 500,
        append: bool = False
    ):
        """
        Args:
            file_path: Destination; parent directories are created
            columns: Header (SAMPLE_COLUMNS if None)
            buffer_size: Rows held before a write
            append: Add to an existing file, writing the header only if it is empty
        """
        self._columns = list(columns) if columns is not None else list(SAMPLE_COLUMNS)
        if not self._columns:
            raise ValueError("columns cannot be empty")
        if buffer_size < 1:
            raise ValueError("buffer_size must be at least 1")

        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        has_rows = append and path.exists() and path.stat().st_size > 0

        self._buffer_size = buffer_size
        self._pending: List[Dict[str, Any]] = []
        self._file = open(path, 'a' if append else 'w', newline='')
        self._writer = csv.DictWriter(self._file, fieldnames=self._columns, restval='',
                                      extrasaction='ignore')
        if not has_rows:
            self._writer.writeheader()
            self._file.flush()

    @property
    def closed(self) -> bool:
        return self._file.closed

    def log(self, row: Dict[str, Any]) -> None:
        """Queue one row; raises RuntimeError once closed."""
        if self.closed:
            raise RuntimeError("Logger is closed")
        self._pending.append(row)
        if len(self._pending) >= self._buffer_size:
            self.flush()

    def log_batch(self, rows: Iterable[Dict[str, Any]]) -> None:
        for row in rows:
            self.log(row)

    def flush(self) -> None:
        """Write queued rows to disk; on failure they stay queued."""
        if not self._pending or self.closed:
            return
        try:
            self._writer.writerows(self._pending)
            self._file.flush()
        except OSError as e:
            raise RuntimeError(f"Failed to write to CSV: {e}") from e
        self._pending.clear()

    def close(self) -> None:
        if self.closed:
            return
        try:
            self.flush()
        finally:
            self._file.close()

    def __enter__(self) -> 'CSVLogger':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
