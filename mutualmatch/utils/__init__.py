"""Utils package for the mutualmatch library."""

# Only the error taxonomy is re-exported here: config imports it, and
# logging/cache import config.
from mutualmatch.utils.errors import (
    AlreadyExistsError,
    ConfigurationError,
    ConflictingMutationError,
    InvalidPairError,
    MutualMatchError,
    NotFoundError,
    StoreError,
    StoreUnavailableError,
    ValidationError,
)

__all__ = [
    "AlreadyExistsError",
    "ConfigurationError",
    "ConflictingMutationError",
    "InvalidPairError",
    "MutualMatchError",
    "NotFoundError",
    "StoreError",
    "StoreUnavailableError",
    "ValidationError",
]
