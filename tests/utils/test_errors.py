import pytest

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


def test_base_error():
    err = MutualMatchError("test error", 503, {"foo": "bar"})
    assert str(err) == "test error"
    assert err.message == "test error"
    assert err.status_code == 503
    assert err.details == {"foo": "bar"}


def test_base_error_defaults():
    err = MutualMatchError("test error")
    assert err.status_code == 500
    assert err.details == {}


@pytest.mark.parametrize(
    "error_class, status_code",
    [
        (ConfigurationError, 500),
        (ValidationError, 400),
        (InvalidPairError, 400),
        (NotFoundError, 404),
        (AlreadyExistsError, 409),
        (StoreError, 500),
        (StoreUnavailableError, 503),
        (ConflictingMutationError, 409),
    ],
)
def test_status_codes(error_class, status_code):
    err = error_class("message", details={"operation": "get"})
    assert isinstance(err, MutualMatchError)
    assert err.status_code == status_code
    assert err.details == {"operation": "get"}


def test_hierarchy():
    assert issubclass(InvalidPairError, ValidationError)
    assert issubclass(StoreUnavailableError, StoreError)
    assert issubclass(ConflictingMutationError, StoreError)
    assert not issubclass(NotFoundError, StoreError)
