"""
Exceptions raised by the spreadsheet import pipeline
"""


class TaskImportError(Exception):
    """Base class for import failures that abort before any row is persisted."""


class UnsupportedFileError(TaskImportError):
    """Upload has an extension we cannot read, or cannot be parsed as a workbook."""


class FileTooLargeError(TaskImportError):
    """Upload exceeds the configured size limit."""


class ImportStructureError(TaskImportError):
    """No usable header row, or a required column is missing."""


class InvalidMonthError(TaskImportError, ValueError):
    """Month is not a calendar month name or abbreviation."""


class InvalidUndoRequestError(TaskImportError):
    """Undo request carries no usable task ids."""
