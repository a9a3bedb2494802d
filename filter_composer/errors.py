class FilterComposerError(Exception):
    """Base class for errors raised by filter_composer."""


class UnknownDefinition(FilterComposerError, KeyError):
    """Raised when a filter is composed from an id that is not in the registry."""

    def __init__(self, definition_id: str):
        self.definition_id = definition_id
        super().__init__(f"Filter definition not found for id: {definition_id}")

    def __str__(self) -> str:
        return self.args[0]


class MalformedPersistedState(FilterComposerError, ValueError):
    """Raised when a persisted active filter set cannot be parsed."""


class UnresolvableFilterReference(FilterComposerError, LookupError):
    """Raised when a persisted active filter points to a vanished definition."""

    def __init__(self, definition_id: str):
        self.definition_id = definition_id
        super().__init__(f"Active filter references unknown definition: {definition_id}")


class InvalidFilterDefinition(FilterComposerError, ValueError):
    """Raised when a catalog entry violates its invariants."""


class ConfigurationError(FilterComposerError, ValueError):
    """Raised when a settings file does not match the settings schema."""
