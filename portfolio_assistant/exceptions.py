"""
Error taxonomy for the assistant.

Provider failures are caught at the orchestration boundary and never reach
the user. Filter errors are raised to the host, which is expected to only
offer valid, enabled choices.
"""


class AssistantError(Exception):
    """Base class for all assistant errors."""


class ProviderFailure(AssistantError):
    """A search or holdings provider failed to produce results."""

    def __init__(self, provider: str, term: str | None = None, cause: BaseException | None = None):
        self.provider = provider
        self.term = term
        self.cause = cause
        detail = f"{provider} failed"
        if term is not None:
            detail += f" for {term!r}"
        if cause is not None:
            detail += f": {cause}"
        super().__init__(detail)


class FilterError(AssistantError):
    """Base class for filter selection errors."""


class InvalidFilterSelection(FilterError):
    """The selected id is not among the field's available options."""

    def __init__(self, field: str, value: str):
        self.field = field
        self.value = value
        super().__init__(f"{value!r} is not a valid choice for {field}")


class FilterDisabledError(FilterError):
    """A selection was attempted on a disabled field."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"{field} is disabled")
