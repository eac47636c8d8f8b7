"""
Error Taxonomy

Exceptions raised by the automation pipeline and its entry points. Each error
carries a client-facing code so the HTTP layer can report it without guessing.
"""


class AutomationError(Exception):
    """Base class for all automation failures."""
    code = "internal"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(AutomationError):
    """Site configuration is missing or incomplete."""
    code = "failed-precondition"


class SourceError(AutomationError):
    """A record source could not produce records."""
    code = "failed-precondition"


class NoRecordsError(SourceError):
    """A record source produced zero records."""


class BrowserLaunchError(AutomationError):
    """The browser session could not be started."""
    code = "unavailable"


class InvalidArgumentError(AutomationError):
    """Caller supplied a malformed payload."""
    code = "invalid-argument"


class UnauthenticatedError(AutomationError):
    """Caller did not present valid credentials."""
    code = "unauthenticated"


class RecordGenerationError(AutomationError):
    """The AI record generator failed to return a usable record."""
    code = "internal"
