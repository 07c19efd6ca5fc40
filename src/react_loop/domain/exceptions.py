class ReactLoopError(Exception):
    """Base exception for the react_loop package."""

    pass


class ModelClientError(ReactLoopError):
    """Base exception for text generation failures."""

    pass


class RateLimitError(ModelClientError):
    """Provider returned 429 Rate Limit Exceeded."""

    pass


class ApiKeyError(ModelClientError):
    """Provider returned 401/403 Authentication Error."""

    pass


class ContextLengthError(ModelClientError):
    """Conversation exceeded model context limits."""

    pass


class ToolRegistryError(ReactLoopError):
    """The tool registry could not be queried."""

    pass
