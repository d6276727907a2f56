class InvalidInputError(ValueError):
    """Question or passage was not supplied."""


class InputTooLongError(ValueError):
    """Tokenized question is longer than the configured limit."""
