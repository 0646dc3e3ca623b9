"""Error types raised by the record core."""


class ParseError(ValueError):
    """Raised when numeric text at an input boundary cannot be parsed.

    Blank or null-equivalent text is never an error; it parses to the
    type's sentinel value instead.
    """
