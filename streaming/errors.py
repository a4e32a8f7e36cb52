"""
Recognition error taxonomy for streaming sessions.
Transient conditions are logged and ignored; anything else ends the session.
"""

TRANSIENT_ERROR_CODES = frozenset({"no-speech", "aborted", "audio-capture", "network"})


class RecognitionError(Exception):
    """Error signal from the upstream speech recognizer (e.g. 'no-speech', 'not-allowed')."""

    def __init__(self, code: str, message: str = ""):
        self.code = code
        self.message = message or f"Speech recognition error: {code}"
        super().__init__(self.message)

    @property
    def fatal(self) -> bool:
        return self.code not in TRANSIENT_ERROR_CODES


class UnsupportedCapabilityError(RuntimeError):
    """Raised when a session is started without any transcript source."""
