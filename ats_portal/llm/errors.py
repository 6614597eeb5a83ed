"""
Errors raised while talking to a generative-AI provider.

Both are recovered inside the analysis service; neither reaches an HTTP handler.
"""


class LLMError(Exception):
    """Base class for AI provider failures."""


class AIProviderUnavailable(LLMError):
    """The completion call failed (not configured, network, quota, timeout)."""


class ExtractionError(LLMError):
    """No parseable JSON object was found in a model reply."""
