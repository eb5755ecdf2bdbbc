"""
Error taxonomy for the LLM gateway.

ConfigurationError    -> fatal at startup, no gateway is built
PromptValidationError -> core-local precondition, no network attempted
GatewayError          -> provider round trip failed (transport / malformed output / unknown)
"""

TRANSPORT = "transport"
MALFORMED_OUTPUT = "malformed_output"
UNKNOWN = "unknown"

INVALID_FORMAT_HINT = ". The AI may have returned an invalid format."


class ConfigurationError(RuntimeError):
    """Required API credential is missing."""


class PromptValidationError(ValueError):
    """Input violates a prompt-building precondition."""


class MalformedOutputError(ValueError):
    """Provider replied, but the reply is not the JSON shape we asked for."""


class GatewayError(RuntimeError):
    """Classified failure surfaced to the caller with a human-readable message."""

    def __init__(self, message: str, kind: str = UNKNOWN):
        super().__init__(message)
        self.message = message
        self.kind = kind
