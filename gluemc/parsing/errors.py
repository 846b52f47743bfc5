"""Parse failures.

Only :class:`DeathMessageTemplateExhausted` is meant to be seen outside the
parsing package; the line parser itself always returns an event.
"""


class ParseError(Exception):
    """Base class for all parser failures."""


class PrefixMalformed(ParseError):
    """Timestamp or logger-context prefix does not match the fixed grammar."""

    def __init__(self, position: int, expected: str):
        self.position = position
        self.expected = expected
        super().__init__(f"Expected {expected} at byte {position}")


class GrammarNotApplicable(ParseError):
    """The logger context does not satisfy a grammar's guard."""


class PayloadGrammarFailed(ParseError):
    """The guard held but the payload does not have the grammar's shape."""

    def __init__(self, grammar: str, reason: str = ""):
        self.grammar = grammar
        self.reason = reason
        message = f"Could not parse as {grammar} message"
        super().__init__(f"{message}: {reason}" if reason else message)


class DeathMessageTemplateExhausted(PayloadGrammarFailed):
    """No death template in the table matched the payload."""

    def __init__(self, tried: int):
        self.tried = tried
        super().__init__("death", f"none of {tried} templates matched")


class TemplateSourceEntryMalformed(ParseError):
    """A localization entry could not be turned into a death template."""

    def __init__(self, line: str, reason: str):
        self.line = line
        self.reason = reason
        super().__init__(f"{reason}: {line.strip()!r}")
