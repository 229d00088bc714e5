"""Conversions between JSON-LD, workbook and RDF files.

Each conversion reads the whole input into nodes with one codec and writes
them with another. Output files are written atomically: the data goes to a
temporary file in the destination directory which then replaces the target.

Example:
    from graphsync.sync import DataFormat, SyncRequest, run_sync

    run_sync(SyncRequest(
        source=DataFormat.JSONLD,
        target=DataFormat.EXCEL,
        input_path=Path("graph.jsonld"),
        output_path=Path("graph.xlsx"),
    ))
"""

from __future__ import annotations

import os
import stat
import tempfile
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from graphsync.adapters.jsonld import (
    dumps_document,
    loads_document,
    parse_document,
    serialize_nodes,
)
from graphsync.adapters.rdf import RdfFormat, parse_rdf, resolve_format, serialize_rdf
from graphsync.adapters.table import build_workbook, read_nodes, workbook_bytes
from graphsync.core.model import Node
from graphsync.errors import MissingInputError, RdfError, UnsupportedConversionError
from graphsync.observability.logging import LogContext, get_logger

logger = get_logger(__name__)


class DataFormat(str, Enum):
    """External representations a dataset can be converted between."""

    JSONLD = "jsonld"
    EXCEL = "excel"
    RDF = "rdf"


@dataclass(frozen=True)
class SyncRequest:
    """A single conversion request.

    Attributes:
        source: Format of the input file
        target: Format of the output file
        input_path: File to read
        output_path: File to write (replaced atomically)
        context_path: JSON-LD context used when writing JSON-LD
        rdf_format: Explicit RDF format for the RDF side of the conversion
        json_indent: 2 pretty-prints JSON-LD output, 0 writes compact JSON
        default_rdf_format: RDF output format when neither ``rdf_format``
            nor the output extension decide
    """

    source: DataFormat
    target: DataFormat
    input_path: Path
    output_path: Path
    context_path: Path | None = None
    rdf_format: RdfFormat | None = None
    json_indent: int = 2
    default_rdf_format: RdfFormat = RdfFormat.TURTLE


def atomic_write_bytes(path: str | Path, data: bytes) -> None:
    """Write ``data`` to ``path`` through a temporary file and ``os.replace``."""
    target = Path(path)
    with tempfile.NamedTemporaryFile(
        dir=target.parent, prefix=f".{target.name}.", suffix=".tmp", delete=False
    ) as temp_file:
        temp_path = Path(temp_file.name)
        try:
            temp_file.write(data)
        except BaseException:
            temp_file.close()
            temp_path.unlink(missing_ok=True)
            raise
    try:
        # NamedTemporaryFile creates 0600 files; outputs get the usual mode.
        os.chmod(temp_path, _output_mode(target))
        os.replace(temp_path, target)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise


def _output_mode(target: Path) -> int:
    try:
        return stat.S_IMODE(target.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def load_context(path: str | Path) -> Any:
    """Load a JSON-LD context file (with or without a wrapping ``@context``)."""
    return loads_document(Path(path).read_bytes())


def output_rdf_format(
    path: str | Path,
    explicit: RdfFormat | None = None,
    default: RdfFormat = RdfFormat.TURTLE,
) -> RdfFormat:
    """Pick the RDF output format: explicit, else the extension, else ``default``."""
    if explicit is not None:
        return explicit
    try:
        return RdfFormat.from_extension(path)
    except RdfError:
        return default


# Readers


def _read_jsonld(path: Path) -> list[Node]:
    return parse_document(loads_document(path.read_bytes()))


def _read_rdf(path: Path, format: RdfFormat | None) -> list[Node]:
    resolved = resolve_format(path, format)
    return parse_rdf(path.read_bytes(), resolved)


# Writers


def _write_jsonld(path: Path, nodes: list[Node], context: Any, indent: int) -> None:
    document = serialize_nodes(nodes, context)
    atomic_write_bytes(path, dumps_document(document, indent=indent))


def _write_excel(path: Path, nodes: list[Node]) -> None:
    workbook = build_workbook(nodes)
    atomic_write_bytes(path, workbook_bytes(workbook))
    logger.info("Wrote %d sheets to %s", len(workbook.tables), path)


def _write_rdf(path: Path, nodes: list[Node], format: RdfFormat) -> None:
    atomic_write_bytes(path, serialize_rdf(nodes, format).encode("utf-8"))


# Conversions


def jsonld_to_excel(input_path: Path, output_path: Path) -> list[Node]:
    nodes = _read_jsonld(input_path)
    logger.info("Read %d nodes from JSON-LD %s", len(nodes), input_path)
    _write_excel(output_path, nodes)
    return nodes


def excel_to_jsonld(
    input_path: Path, output_path: Path, context: Any = None, indent: int = 2
) -> list[Node]:
    nodes = read_nodes(input_path)
    logger.info("Read %d nodes from workbook %s", len(nodes), input_path)
    _write_jsonld(output_path, nodes, context, indent)
    return nodes


def rdf_to_excel(
    input_path: Path, output_path: Path, format: RdfFormat | None = None
) -> list[Node]:
    nodes = _read_rdf(input_path, format)
    logger.info("Read %d nodes from RDF %s", len(nodes), input_path)
    _write_excel(output_path, nodes)
    return nodes


def excel_to_rdf(input_path: Path, output_path: Path, format: RdfFormat) -> list[Node]:
    nodes = read_nodes(input_path)
    logger.info("Read %d nodes from workbook %s", len(nodes), input_path)
    _write_rdf(output_path, nodes, format)
    return nodes


def jsonld_to_rdf(input_path: Path, output_path: Path, format: RdfFormat) -> list[Node]:
    nodes = _read_jsonld(input_path)
    logger.info("Read %d nodes from JSON-LD %s", len(nodes), input_path)
    _write_rdf(output_path, nodes, format)
    return nodes


def rdf_to_jsonld(
    input_path: Path,
    output_path: Path,
    context: Any = None,
    format: RdfFormat | None = None,
    indent: int = 2,
) -> list[Node]:
    nodes = _read_rdf(input_path, format)
    logger.info("Read %d nodes from RDF %s", len(nodes), input_path)
    _write_jsonld(output_path, nodes, context, indent)
    return nodes


def run_sync(request: SyncRequest) -> list[Node]:
    """Run the conversion described by ``request``.

    Returns:
        The nodes that were converted

    Raises:
        MissingInputError: If the input file does not exist
        UnsupportedConversionError: If the format pair is not supported
    """
    source = DataFormat(request.source)
    target = DataFormat(request.target)
    if not request.input_path.exists():
        raise MissingInputError(request.input_path)
    handler = _dispatch(request, source, target)

    with LogContext(conversion=f"{source.value}->{target.value}"):
        logger.debug(
            "Resolved sync request: input=%s output=%s context=%s",
            request.input_path,
            request.output_path,
            request.context_path,
        )
        nodes = handler()
        logger.info("Converted %d nodes into %s", len(nodes), request.output_path)
        return nodes


def _dispatch(
    request: SyncRequest, source: DataFormat, target: DataFormat
) -> Callable[[], list[Node]]:
    def context() -> Any:
        return load_context(request.context_path) if request.context_path else None

    def rdf_output() -> RdfFormat:
        return output_rdf_format(
            request.output_path, request.rdf_format, request.default_rdf_format
        )

    src, dst, indent = request.input_path, request.output_path, request.json_indent
    handlers: dict[tuple[DataFormat, DataFormat], Callable[[], list[Node]]] = {
        (DataFormat.JSONLD, DataFormat.EXCEL): lambda: jsonld_to_excel(src, dst),
        (DataFormat.EXCEL, DataFormat.JSONLD): lambda: excel_to_jsonld(
            src, dst, context(), indent
        ),
        (DataFormat.RDF, DataFormat.EXCEL): lambda: rdf_to_excel(src, dst, request.rdf_format),
        (DataFormat.EXCEL, DataFormat.RDF): lambda: excel_to_rdf(src, dst, rdf_output()),
        (DataFormat.JSONLD, DataFormat.RDF): lambda: jsonld_to_rdf(src, dst, rdf_output()),
        (DataFormat.RDF, DataFormat.JSONLD): lambda: rdf_to_jsonld(
            src, dst, context(), request.rdf_format, indent
        ),
    }
    handler = handlers.get((source, target))
    if handler is None:
        raise UnsupportedConversionError(source.value, target.value)
    return handler
