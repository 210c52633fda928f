"""Unit tests for yanit.exceptions hierarchy."""

import pytest

from yanit.exceptions import (
    ConfigurationError,
    EmbeddingError,
    FAQLoadError,
    IndexInitializationError,
    InvalidQuestionError,
    NormalizationTableError,
    ProviderError,
    StoreUnavailableError,
    VectorIndexError,
    YanitError,
)


class TestExceptionHierarchy:
    def test_all_catchable_via_yanit_error(self):
        exceptions = [
            ConfigurationError("cfg"),
            NormalizationTableError("table"),
            InvalidQuestionError("empty"),
            EmbeddingError("emb"),
            VectorIndexError("index"),
            IndexInitializationError("init"),
            StoreUnavailableError("store"),
            FAQLoadError("load"),
        ]
        for exc in exceptions:
            with pytest.raises(YanitError):
                raise exc

    def test_provider_errors(self):
        for exc in (EmbeddingError("e"), VectorIndexError("v"), IndexInitializationError("i")):
            with pytest.raises(ProviderError):
                raise exc

    def test_store_error_is_not_provider_error(self):
        assert not issubclass(StoreUnavailableError, ProviderError)

    def test_exception_messages(self):
        exc = ConfigurationError("bad config")
        assert str(exc) == "bad config"

    def test_inheritance_chain(self):
        assert issubclass(NormalizationTableError, ConfigurationError)
        assert issubclass(IndexInitializationError, VectorIndexError)
        assert issubclass(VectorIndexError, ProviderError)
        assert issubclass(EmbeddingError, ProviderError)
        assert issubclass(ProviderError, YanitError)
        assert issubclass(YanitError, Exception)
