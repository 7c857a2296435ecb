"""
Exception classes for promo-site.

This module defines all custom exceptions used throughout the application.
Each exception carries a human-readable message plus an optional details
dictionary, so callers can log context without parsing strings.

Exception Hierarchy:
    PromoSiteError (base)
        ConfigError - Configuration file issues
        FetchError - Network / filesystem retrieval issues
            ContentIndexError - The album index could not be used
        StoreStateError - Content store used out of order
        RenderError - An expected page element is missing
        PlaybackError - The media element refused or failed playback
"""


class PromoSiteError(Exception):
    """
    Base exception for all promo-site errors.
    
    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (paths, status codes).
    
    Example:
        try:
            catalog = store.initialize()
        except PromoSiteError as e:
            logger.error(f"Startup failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """
    
    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Initialize the base exception.
        
        Args:
            message: Human-readable error description that will be shown to the user.
            details: Optional dictionary containing additional context about the error.
                     Common keys include:
                     - 'path': Content path involved in the error
                     - 'status_code': HTTP status returned by the server
                     - 'original_error': The underlying exception if wrapping another error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
    
    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(PromoSiteError):
    """
    Raised when there's an issue with the configuration file.
    
    This is a CRITICAL error that should stop program execution.
    
    Common causes:
        - config.yaml not found
        - config.yaml has invalid YAML syntax
        - 'site.content_root' missing
        - Invalid field values (e.g., zero fetch threads)
    """
    pass


class FetchError(PromoSiteError):
    """
    Raised when a content path cannot be retrieved.
    
    NON-CRITICAL for a single album, static document or lyrics file;
    callers log it and carry on with what they have.
    
    Attributes:
        status_code: HTTP status for non-success responses, None for
                     network failures and local files.
    
    Example:
        raise FetchError(
            "HTTP 404 for albums/demo/info.md",
            details={'path': 'albums/demo/info.md'},
            status_code=404
        )
    """
    
    def __init__(
        self,
        message: str,
        details: dict | None = None,
        status_code: int | None = None
    ) -> None:
        super().__init__(message, details)
        self.status_code = status_code


class ContentIndexError(FetchError):
    """
    Raised when the album index cannot be fetched or understood.
    
    This is the only CRITICAL content failure: without the index no
    catalogue can be shown, so initialization fails as a whole.
    
    Common causes:
        - index.json missing or server error
        - Invalid JSON syntax
        - 'albumDirectories' missing or not a list
    """
    pass


class StoreStateError(PromoSiteError):
    """
    Raised when the content store is used outside its lifecycle.
    
    The store is populated exactly once; a second initialize() call
    raises this error instead of silently refreshing the catalogue.
    """
    pass


class RenderError(PromoSiteError):
    """
    Raised when a render request cannot find the element it targets.
    
    The section renderer catches this at the request boundary: only the
    request in progress is aborted, the page stays as it was.
    """
    pass


class PlaybackError(PromoSiteError):
    """
    Raised (or recorded) when the media element refuses or fails playback.
    
    Playback widgets never let this escape to the caller; they store it
    as their last error and revert their control to the paused appearance.
    
    Attributes:
        kind: MediaErrorKind classification, or None when the host
              refused to start playback (e.g. autoplay blocked).
    """
    
    def __init__(
        self,
        message: str,
        details: dict | None = None,
        kind=None
    ) -> None:
        super().__init__(message, details)
        self.kind = kind
