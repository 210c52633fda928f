"""Custom exception hierarchy for Yanıt."""


class YanitError(Exception):
    """Base exception for all Yanıt errors."""


class ConfigurationError(YanitError):
    """Raised when configuration is invalid or required settings are missing."""


class NormalizationTableError(ConfigurationError):
    """Raised when a typo-correction table is not closed under normalization."""


class InvalidQuestionError(YanitError):
    """Raised when a question is empty or cannot be normalized to any text."""


class ProviderError(YanitError):
    """Raised when an embedding or vector index call fails."""


class EmbeddingError(ProviderError):
    """Raised when embedding generation fails."""


class VectorIndexError(ProviderError):
    """Raised when the vector index encounters an error."""


class IndexInitializationError(VectorIndexError):
    """Raised when collection creation or index initialization fails."""


class StoreUnavailableError(YanitError):
    """Raised when the shared key-value store cannot serve a request."""


class FAQLoadError(YanitError):
    """Raised when an FAQ seed file cannot be read or parsed."""
