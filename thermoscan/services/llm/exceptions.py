class LLMServiceError(Exception):
    """Base exception for the text-generation collaborator."""
    pass


class LLMAPIError(LLMServiceError):
    """Raised when the remote generation call cannot be made or fails."""
    pass


class LLMResponseParseError(LLMServiceError):
    """Raised when a response cannot be decoded into the requested structure."""
    pass
