"""
Response exporter: streams parsed responses into a text sink.

Lifecycle:
    CREATED --init()--> INITIALIZED --write_*()*--> ... --finish()--> FINISHED

    init()    writes the CSV header or opens the JSON container
    write_*() writes one response (one row, several long rows, or one record)
    finish()  closes the JSON container and flushes the sink

All sink I/O happens inside these calls. OSErrors from the sink are raised
as SinkIOError and never swallowed.

Formats:
    wide  CSV, one row per response (alias: csv)
    long  CSV, one row per response column
    json  {"responses": [ ...one flat record per response... ]}
"""

import csv
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Optional, TextIO

from surveyflat.errors import (
    ExportError,
    ExporterStateError,
    SinkIOError,
    UnsupportedOutputFormatError,
    VersionNotFoundError,
)
from surveyflat.model import ParsedResponse, SurveyResponse
from surveyflat.parser import ResponseParser
from surveyflat.serialization import json_default

logger = logging.getLogger(__name__)


class ExportFormat(Enum):
    WIDE = "wide"
    LONG = "long"
    JSON = "json"

    @classmethod
    def parse(cls, name: str) -> "ExportFormat":
        if name == "csv":
            return cls.WIDE
        try:
            return cls(name)
        except ValueError:
            raise UnsupportedOutputFormatError(name) from None


class ExporterState(Enum):
    CREATED = "created"
    INITIALIZED = "initialized"
    FINISHED = "finished"


JSON_OPEN = '{ "responses": ['
JSON_CLOSE = "]}"


class ResponseExporter:
    """
    Writes the responses of one export run to `sink`.

    Args:
        parser: Parser holding the column schema of the export
        sink: Text stream to write to (opened with newline="" for CSV)
        export_format: "wide", "csv", "long" or "json"

    Raises:
        UnsupportedOutputFormatError: For any other format
    """

    def __init__(self, parser: ResponseParser, sink: TextIO, export_format: str = "wide"):
        self.format = ExportFormat.parse(export_format)
        self.parser = parser
        self.sink = sink
        self.state = ExporterState.CREATED
        self.count = 0
        self._csv_writer = None

    def __enter__(self) -> "ResponseExporter":
        self.init()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.finish()

    def _write(self, text: str) -> None:
        try:
            self.sink.write(text)
        except OSError as e:
            raise SinkIOError(f"failed to write to export sink: {e}") from e

    def _write_csv_row(self, row) -> None:
        try:
            self._csv_writer.writerow(row)
        except OSError as e:
            raise SinkIOError(f"failed to write to export sink: {e}") from e

    def init(self) -> None:
        """Write the header (CSV) or open the container (JSON)."""
        if self.state is not ExporterState.CREATED:
            raise ExporterStateError(f"exporter already {self.state.value}")

        if self.format is ExportFormat.JSON:
            self._write(JSON_OPEN)
        else:
            self._csv_writer = csv.writer(self.sink)
            if self.format is ExportFormat.WIDE:
                self._write_csv_row(self.parser.columns.all_columns())
            else:
                self._write_csv_row(self.parser.long_header())
        self.state = ExporterState.INITIALIZED

    def write_parsed(self, parsed: ParsedResponse) -> None:
        """Write an already parsed response."""
        if self.state is not ExporterState.INITIALIZED:
            raise ExporterStateError(f"cannot write response, exporter is {self.state.value}")

        if self.format is ExportFormat.WIDE:
            self._write_csv_row(self.parser.to_row(parsed))
        elif self.format is ExportFormat.LONG:
            for row in self.parser.to_long_rows(parsed):
                self._write_csv_row(row)
        else:
            record = json.dumps(self.parser.to_flat_dict(parsed), default=json_default)
            if self.count > 0:
                self._write(",")
            self._write(record)
        self.count += 1

    def write_response(self, raw: SurveyResponse) -> None:
        """
        Parse and write a raw response.

        Raises:
            VersionNotFoundError: If no version matches; nothing is written
            SinkIOError: If the sink fails
        """
        if self.state is not ExporterState.INITIALIZED:
            raise ExporterStateError(f"cannot write response, exporter is {self.state.value}")
        self.write_parsed(self.parser.parse_response(raw))

    def finish(self) -> None:
        """Close the container and flush the sink. Further calls do nothing."""
        if self.state is ExporterState.FINISHED:
            logger.debug("exporter already finished")
            return
        if self.state is ExporterState.CREATED:
            self.init()

        if self.format is ExportFormat.JSON:
            self._write(JSON_CLOSE)
        try:
            self.sink.flush()
        except OSError as e:
            raise SinkIOError(f"failed to flush export sink: {e}") from e
        self.state = ExporterState.FINISHED


@dataclass
class ExportSummary:
    written: int = 0
    skipped: int = 0


def export_responses(
    exporter: ResponseExporter,
    responses: Iterable[SurveyResponse],
    on_progress: Optional[Callable[[int], None]] = None,
) -> ExportSummary:
    """
    Run a whole export: init, one write per response, finish.

    Responses without a matching version, or whose answers cannot be
    parsed, are logged and skipped. Sink errors abort the run and propagate.

    Args:
        exporter: A freshly created exporter
        responses: Finite, possibly lazy, sequence of raw responses
        on_progress: Called with the number of written responses after each write

    Returns:
        ExportSummary with written and skipped counts
    """
    summary = ExportSummary()
    if exporter.state is ExporterState.CREATED:
        exporter.init()

    for raw in responses:
        try:
            parsed = exporter.parser.parse_response(raw)
        except VersionNotFoundError as e:
            summary.skipped += 1
            logger.warning("skipping response %s: %s", raw.id, e)
            continue
        except ExportError:
            raise
        except Exception:
            # malformed answers or a failing custom handler
            summary.skipped += 1
            logger.exception("skipping response %s", raw.id)
            continue

        exporter.write_parsed(parsed)
        summary.written += 1
        if on_progress is not None:
            on_progress(summary.written)

    exporter.finish()
    logger.info("exported %d responses (%d skipped)", summary.written, summary.skipped)
    return summary


__all__ = [
    "ExportFormat",
    "ExporterState",
    "ResponseExporter",
    "ExportSummary",
    "export_responses",
]
