class InvalidArgument(ValueError):
    """Malformed enhancement parameters or undecodable frame data."""


class RecognizerFailure(RuntimeError):
    """The text-recognition engine errored for one image."""
