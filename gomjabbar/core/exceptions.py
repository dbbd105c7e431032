class GomJabbarError(Exception):
    """Base class for all errors raised by the eval engine."""


class ConfigurationError(GomJabbarError):
    """Invalid run configuration (unknown provider, bad option). Never retried."""


class NotFoundError(ConfigurationError):
    """Raised when a model identifier or test case name is not part of the suite."""

    def __init__(self, kind: str, name: str, available: list[str] | None = None):
        self.kind = kind
        self.name = name
        self.available = available or []
        message = f"{kind} not found: {name}"
        if self.available:
            message += f". Available: {', '.join(self.available)}"
        super().__init__(message)


class SuiteConstructionError(GomJabbarError, ValueError):
    """Raised while building a suite, before anything runs."""


class UnknownOutcomeError(GomJabbarError, TypeError):
    """The classifier received an outcome variant it does not know. This is a defect, not a runtime condition."""


class StatusTransitionError(GomJabbarError, RuntimeError):
    """A status cell was moved backwards or skipped a state."""
