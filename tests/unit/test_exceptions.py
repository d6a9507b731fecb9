# tests/unit/test_exceptions.py
"""
Unit Tests for the error taxonomy
"""

import pytest

from src.domain.exceptions import (
    InvalidOperationError,
    PermissionDeniedError,
    ResourceAlreadyExistsError,
    ResourceConflictError,
    ResourceNotFoundError,
    ServiceError,
    ValidationError,
    error_to_http_status,
    is_retryable_error,
)


@pytest.mark.parametrize(
    "error,status",
    [
        (ResourceNotFoundError("Video", "v1"), 404),
        (PermissionDeniedError("edit", "Comment", "c1"), 403),
        (InvalidOperationError("nope"), 400),
        (ValidationError("bad", field="title"), 422),
        (ResourceAlreadyExistsError("User", "bob", field="username"), 409),
        (ResourceConflictError("Video", "v1"), 409),
        (ServiceError("generic"), 500),
    ],
)
def test_http_status_mapping(error, status):
    assert error_to_http_status(error) == status


def test_to_dict():
    error = ResourceNotFoundError("Video", "v1")

    assert error.to_dict() == {
        "error": "NOT_FOUND",
        "message": "Video not found: v1",
        "details": {"resource_type": "Video", "resource_id": "v1"},
    }


def test_validation_details():
    error = ValidationError("Invalid", field="title", errors=[{"field": "title"}])
    assert error.details == {"field": "title", "errors": [{"field": "title"}]}


def test_only_conflicts_are_retryable():
    assert is_retryable_error(ResourceConflictError("User", "u1"))
    assert not is_retryable_error(InvalidOperationError("self subscription"))
    assert not is_retryable_error(RuntimeError("boom"))
