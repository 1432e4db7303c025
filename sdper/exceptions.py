"""SDP-specific exception hierarchy."""

class SDPError(Exception):
    """Base SDP exception."""
    pass

class SDPValidationError(SDPError):
    """Raised when a caller hands the engine the wrong kind of input."""
    pass

class SDPGrammarError(SDPError):
    """Raised when a grammar rule or table is built inconsistently."""
    pass
