"""
Error types for passdmenu.

Filesystem failures are not wrapped: they surface as the built-in
IOError/OSError raised by the operation that failed.
"""


class PassDmenuError(Exception):
    """Base class for all passdmenu errors"""


class ConfigError(PassDmenuError):
    """The store root or its recipient configuration could not be resolved"""


class EngineUnavailable(PassDmenuError):
    """The encryption backend cannot be started"""


class NoSuchKey(PassDmenuError):
    """No key in the keyring matches the configured recipient"""


class CryptoError(PassDmenuError):
    """An encrypt or decrypt operation failed in the backend"""

    def __init__(self, message: str, operation: str = None, path=None):
        super().__init__(message)
        self.operation = operation
        self.path = path

    def __str__(self):
        message = super().__str__()
        if self.operation and self.path is not None:
            return f'{self.operation} failed for {self.path}: {message}'
        if self.operation:
            return f'{self.operation} failed: {message}'
        return message


class MalformedEntry(PassDmenuError, ValueError):
    """Decrypted content has no password line"""


class AmbiguousEdit(PassDmenuError):
    """An edit was requested on a service holding several users"""
