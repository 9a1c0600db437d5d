"""Tests for the error hierarchy: codes, statuses and the REST envelope."""

from statusboard.core.errors import (
    DuplicateRecordError, ErrorCategory, InputValidationError,
    NotAuthenticatedError, PermissionDeniedError, ResourceNotFoundError,
    StatusBoardError, StoreFailureError,
)


def test_http_status_per_kind():
    assert InputValidationError("bad", "summary").http_status == 400
    assert NotAuthenticatedError().http_status == 401
    assert PermissionDeniedError("no").http_status == 403
    assert ResourceNotFoundError("Project", "x").http_status == 404
    assert DuplicateRecordError("Thanks", "k").http_status == 409
    assert StoreFailureError("down", "delete").http_status == 503


def test_all_errors_share_one_base():
    assert isinstance(StoreFailureError("down", "delete"), StatusBoardError)
    assert isinstance(DuplicateRecordError("Thanks", "k"), StatusBoardError)


def test_store_failure_keeps_operation_and_category():
    err = StoreFailureError("down", "delete")
    assert err.operation == "delete"
    assert err.category is ErrorCategory.DATABASE


def test_to_response_envelope():
    body = ResourceNotFoundError("Update", "42").to_response()
    assert body["error"]["code"] == "RESOURCE_NOT_FOUND"
    assert body["error"]["message"] == "Update '42' not found"
    assert body["error"]["category"] == "resource_not_found"
    assert "timestamp" in body["error"]
