"""
Exceptions raised while processing compiled scripts.
"""


class FormatError(ValueError):
    """The script or translation file does not match the expected layout."""
    pass


class StateError(RuntimeError):
    """An operation was invoked on a script that has not been loaded."""
    pass
