"""Error types raised by graphsync codecs and conversions.

Every failure aborts the whole conversion. Messages name the sheet, column,
predicate or value involved so a failed run can be diagnosed from the error
alone.
"""

from __future__ import annotations

from pathlib import Path


class GraphSyncError(Exception):
    """Base exception for all graphsync failures."""


class JsonLdError(GraphSyncError):
    """Malformed JSON or a JSON-LD shape the codec cannot normalize."""


class RdfError(GraphSyncError):
    """RDF parsing or serialization failure."""


class InvalidLiteralError(RdfError):
    """A typed literal whose lexical form does not match its datatype."""

    def __init__(self, value: str, datatype: str):
        self.value = value
        self.datatype = datatype
        super().__init__(f"invalid literal value '{value}' for datatype {datatype}")


class WorkbookError(GraphSyncError):
    """A workbook that does not follow the sheet conventions."""


class MissingMetadataError(WorkbookError):
    """Metadata refers to a sheet that is not present in the workbook."""

    def __init__(self, sheet: str):
        self.sheet = sheet
        super().__init__(f"missing metadata entry for sheet '{sheet}'")


class UnsupportedConversionError(GraphSyncError):
    """The requested source/target pair has no conversion."""

    def __init__(self, source: str, target: str):
        self.source = source
        self.target = target
        super().__init__(f"unsupported conversion from {source} to {target}")


class MissingInputError(GraphSyncError):
    """The input path does not exist."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"input file not found: {path}")
