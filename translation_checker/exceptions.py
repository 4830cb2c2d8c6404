"""Exceptions raised by the translation checker."""


class TranslationCheckerError(Exception):
    """Base class for all errors raised by this package."""


class CatalogError(TranslationCheckerError):
    """The catalog content could not be parsed."""


class GlossaryError(TranslationCheckerError):
    """A glossary file exists but could not be read or decoded."""


class EngineError(TranslationCheckerError):
    """A translation engine call or verification failed."""


class EngineConfigurationError(EngineError):
    """The requested engine cannot be built from the current configuration."""


class InteractionError(TranslationCheckerError):
    """
    The human interaction channel is unusable (stdin closed or unreadable).

    Unlike engine failures this is never swallowed: continuing an
    interactive pass without a reviewer is unsafe.
    """
