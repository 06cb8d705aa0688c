"""Exceptions raised by the analysis pipeline."""


class AnalysisError(Exception):
    """The analysis run failed and produced no result."""


class EmptyInputError(AnalysisError):
    """There was nothing to analyze."""

    def __init__(self, message: str = "No files or folders selected"):
        super().__init__(message)
