"""
Exception taxonomy for Site Design Advisor.

Every error that reaches the HTTP boundary carries its own status code and is
serialized as {"error": message} by the handlers registered in main.py.
"""


class AdvisorError(Exception):
    """Base class for errors surfaced to API callers"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(AdvisorError):
    """A required credential or URL is missing"""

    status_code = 500


class UpstreamError(AdvisorError):
    """The screenshot or model provider returned a non-success response"""

    status_code = 502


class ValidationError(AdvisorError):
    """Parsed model output is missing required shape or has the wrong count"""

    status_code = 500


class NotFoundError(AdvisorError):
    """Referenced scan, analysis or recommendation does not exist"""

    status_code = 404
