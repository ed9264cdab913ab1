"""
Typed swing analysis failures.

Results are all-or-nothing: any of these aborts the session and no
partial result is persisted.
"""


class SwingAnalysisError(Exception):
    """Base class for engine failures."""

    code = "analysis_error"
    message = "Swing analysis failed"

    def __init__(self, detail: str = ""):
        self.detail = detail
        super().__init__(f"{self.message}: {detail}" if detail else self.message)


class InsufficientData(SwingAnalysisError):
    """Buffer below the sample minimum, or peak acceleration too low."""

    code = "insufficient_data"
    message = "Not enough swing data collected"


class MLModelUnavailable(SwingAnalysisError):
    """Classifier absent, failed, or not confident enough."""

    code = "ml_model_unavailable"
    message = "Machine learning model not available"


class AnalysisTimeout(SwingAnalysisError):
    """No swing detected within the recording window."""

    code = "analysis_timeout"
    message = "Analysis timed out"


class SaveFailed(SwingAnalysisError):
    """Persistence collaborator could not store the result."""

    code = "save_failed"
    message = "Failed to save swing data"
