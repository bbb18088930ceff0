"""Readers turning external files into domain records."""

from .csv_records import detect_header, read_records, record_from_values

__all__ = [
    "detect_header",
    "read_records",
    "record_from_values",
]
