from __future__ import annotations


class PipelineError(Exception):
    """Run-level failure; the whole conversion is aborted."""


class MalformedInputError(PipelineError):
    pass


class EmptyInputError(PipelineError):
    def __init__(self, message: str, stage: str = "file") -> None:
        super().__init__(message)
        self.stage = stage


class NoProcessableRecordsError(PipelineError):
    pass


class ExtractionError(PipelineError):
    pass


# Per-record categories. These are never raised; they label diagnostics for
# records that were skipped while the run continued.
class RecordWarning(UserWarning):
    pass


class MissingBusinessKeyWarning(RecordWarning):
    pass


class DuplicateKeyWarning(RecordWarning):
    pass


class HandleGenerationWarning(RecordWarning):
    pass


class MissingHandleWarning(RecordWarning):
    pass


class CsvParseWarning(RecordWarning):
    pass
