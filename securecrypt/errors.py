"""Error taxonomy shared by every transform, the search and the classifier."""

from typing import Optional


class SecureCryptError(Exception):
    """Base class for securecrypt errors."""

    error_code = "SECURECRYPT_ERROR"

    def __init__(self, message: str, *, algorithm: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.algorithm = algorithm

    def __str__(self) -> str:
        if self.algorithm:
            return f"[{self.algorithm}] {self.message}"
        return self.message


class AlgorithmError(SecureCryptError):
    error_code = "ALGORITHM_ERROR"


class InvalidKey(AlgorithmError):
    """Malformed or structurally invalid key (wrong shape, non-invertible)."""
    error_code = "INVALID_KEY"


class InvalidInput(AlgorithmError):
    """Text that cannot be decoded under the algorithm's format."""
    error_code = "INVALID_INPUT"


class AlgorithmUnsupported(AlgorithmError):
    error_code = "ALGORITHM_UNSUPPORTED"


class StorageError(SecureCryptError):
    error_code = "STORAGE_ERROR"


class ConfigurationError(SecureCryptError):
    error_code = "CONFIGURATION_ERROR"

    def __init__(self, message: str, *, config_field: Optional[str] = None):
        super().__init__(message)
        self.config_field = config_field

    def __str__(self) -> str:
        if self.config_field:
            return f"[{self.config_field}] {self.message}"
        return self.message


class ContractViolation(ValueError):
    """Caller broke the search contract (empty text, unknown category)."""
