"""CSV logging of simulation samples."""

from pid_playground.logging.csv_logger import CSVLogger, SAMPLE_COLUMNS

__all__ = [
    "CSVLogger",
    "SAMPLE_COLUMNS",
]
