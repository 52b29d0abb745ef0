class ContentCacheException(Exception):
    """Base class for all content_cache errors."""


class ConfigurationError(ContentCacheException):
    """Raised when a cache is misconfigured, e.g. built without a namespace."""


class InvalidKeyError(ContentCacheException):
    """Raised when a value cannot be turned into a cache key."""


class StoreUnavailableError(ContentCacheException):
    """Raised by a CacheStore when its backend cannot be reached."""


class PostTypeMismatchError(ContentCacheException, ValueError):
    def __init__(self, expected: str, found: str) -> None:
        self.expected = expected
        self.found = found
        super().__init__(f'The post should be of type "{expected}" ({found} found)')
