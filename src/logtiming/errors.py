# src/logtiming/errors.py
"""Exceptions raised by the timing layer.

Only argument validation raises here. Failures inside the logging sink are
not wrapped; they propagate to whoever triggered the terminal transition.
"""


class OperationArgumentError(ValueError):
    """Raised when an operation or factory is given a missing argument.

    Attributes:
        argument_name: Name of the offending parameter
        message: Human-readable error description
    """

    def __init__(self, argument_name: str, message: str | None = None) -> None:
        self.argument_name = argument_name
        self.message = message or f"'{argument_name}' must not be None"
        super().__init__(self.message)
