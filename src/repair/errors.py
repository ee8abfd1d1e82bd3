"""
Error taxonomy for the repair recorder.

Only UploadFailure is contained by the save orchestrator; every other error
reaches the HTTP layer and is reported verbatim as a hard failure.
"""


class RepairRecorderError(Exception):
    """Base class for all repair recorder errors."""


class ConfigurationError(RepairRecorderError):
    """A required credential or target id is missing or malformed."""


class AuthorizationError(RepairRecorderError):
    """Token exchange or credential validation failed."""


class UploadFailure(RepairRecorderError):
    """Folder resolution, filename computation or Drive upload failed."""


class RecorderFailure(RepairRecorderError):
    """Spreadsheet metadata read or row append failed."""


class ExtractionError(RepairRecorderError):
    """The AI extraction call failed or returned unusable output."""
