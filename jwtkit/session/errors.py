"""Errors raised by session operations invoked with unusable input."""


class JwtkitError(Exception):
    """Base class for jwtkit errors."""


class ClaimsJsonInvalidError(JwtkitError):
    """A header or payload buffer is not a JSON object."""

    def __init__(self, part: str, reason: str) -> None:
        super().__init__(f"Invalid JSON in {part}: {reason}")
        self.part = part


class UnknownPresetError(JwtkitError):
    """No preset is registered under the requested name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown preset: {name}")
        self.name = name
