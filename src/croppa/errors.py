from __future__ import annotations


class CroppaError(Exception):
    """Base class for failures that abort a derived-image request."""

    kind = "CroppaError"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class SourceNotFound(CroppaError):
    kind = "SourceNotFound"


class DestinationNotWritable(CroppaError):
    kind = "DestinationNotWritable"


class ConflictingOptions(CroppaError):
    kind = "ConflictingOptions"


class InvalidQuadrant(CroppaError):
    kind = "InvalidQuadrant"


class MissingDimensionForOption(CroppaError):
    kind = "MissingDimensionForOption"


class InvalidOptionArguments(CroppaError):
    kind = "InvalidOptionArguments"


class CropLimitExceeded(CroppaError):
    kind = "CropLimitExceeded"


class UnlinkFailed(CroppaError):
    kind = "UnlinkFailed"


class DimensionsUnreadable(CroppaError):
    kind = "DimensionsUnreadable"


class ImageTooLarge(CroppaError):
    kind = "ImageTooLarge"
