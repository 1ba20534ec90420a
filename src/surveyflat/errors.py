"""Exceptions raised by the export engine."""


class ExportError(Exception):
    """Base class for all export errors."""
    pass


class VersionNotFoundError(ExportError):
    """Raised when no survey version matches a response."""

    def __init__(self, submitted_at: int, version_id: str = ""):
        self.submitted_at = submitted_at
        self.version_id = version_id
        super().__init__(
            f"no survey version found: {submitted_at}"
            + (f" (reported version '{version_id}')" if version_id else "")
        )


class UnknownQuestionTypeError(ExportError):
    """Raised when no handler is registered for a question type."""

    def __init__(self, question_type: str):
        self.question_type = question_type
        super().__init__(f"no handler found for question type: {question_type!r}")


class UnsupportedOutputFormatError(ExportError, ValueError):
    """Raised when an exporter is created for an unknown output format."""

    def __init__(self, export_format: str):
        self.export_format = export_format
        super().__init__(f"unsupported format: {export_format}")


class SinkIOError(ExportError):
    """Raised when writing to or flushing the output sink fails."""
    pass


class ExporterStateError(ExportError):
    """Raised when an exporter is used outside its lifecycle."""
    pass


class DefinitionParseError(ExportError):
    """Raised when a survey definition cannot be read."""
    pass


class ConfigError(ExportError):
    """Raised when export options are invalid."""
    pass
