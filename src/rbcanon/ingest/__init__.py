from rbcanon.ingest.ruby_adapter import (
    FILE_EXTENSIONS,
    FILE_NAMES,
    LANGUAGE_ID,
    parse_source,
)

__all__ = [
    "FILE_EXTENSIONS",
    "FILE_NAMES",
    "LANGUAGE_ID",
    "parse_source",
]
