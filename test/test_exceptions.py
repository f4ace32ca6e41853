"""
Tests for custom exception classes and the exception handlers

Tests exception initialization, messages, status codes, details and the
rendered error envelope.
"""

import pytest
from fastapi import FastAPI, status
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel

from newsdesk.exception_handlers import get_error_type, register_exception_handlers
from newsdesk.exceptions import (
    AuthenticationError,
    AuthorizationError,
    CMSError,
    ContentNotFoundError,
    CorruptPermissionDataError,
    DatabaseError,
    DuplicateResourceError,
    ErrorCode,
    InvalidPermissionError,
    InvalidStatusTransitionError,
    InvalidTokenError,
    ResourceNotFoundError,
    RoleInUseError,
    RoleLockedError,
    RoleNotFoundError,
    SchedulingViolationError,
    UserNotFoundError,
    ValidationError,
)


class TestCMSError:
    """Test base CMSError class"""

    def test_cms_exception_default(self):
        exc = CMSError("Test error")
        assert str(exc) == "Test error"
        assert exc.message == "Test error"
        assert exc.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert exc.details == {}
        assert exc.error_code is ErrorCode.INTERNAL_ERROR

    def test_cms_exception_with_details(self):
        details = {"key": "value", "count": 42}
        exc = CMSError("Test error", details=details)
        assert exc.details == details


class TestAuthExceptions:
    def test_authentication_error(self):
        exc = AuthenticationError()
        assert str(exc) == "Not authorized"
        assert exc.status_code == status.HTTP_401_UNAUTHORIZED

    def test_invalid_token_error(self):
        exc = InvalidTokenError()
        assert exc.status_code == status.HTTP_401_UNAUTHORIZED
        assert exc.error_code is ErrorCode.AUTH_TOKEN_INVALID

    def test_authorization_error_with_permission(self):
        exc = AuthorizationError(required_permission=[["PUBLISH_BLOG"]])
        assert exc.status_code == status.HTTP_403_FORBIDDEN
        assert exc.details["required_permission"] == [["PUBLISH_BLOG"]]

    def test_role_locked_is_forbidden_with_its_own_code(self):
        """Locked shares 403 with Forbidden but is distinguishable by error code"""
        exc = RoleLockedError(1)
        assert exc.status_code == status.HTTP_403_FORBIDDEN
        assert exc.error_code is ErrorCode.AUTH_ROLE_LOCKED
        assert exc.error_code != AuthorizationError().error_code


class TestDomainExceptions:
    def test_invalid_permission(self):
        exc = InvalidPermissionError(404)
        assert exc.status_code == status.HTTP_400_BAD_REQUEST
        assert "404" in str(exc)

    def test_corrupt_stored_permission_is_server_error(self):
        exc = CorruptPermissionDataError(404, role_id=3, user_id=7)
        assert exc.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert exc.error_code == ErrorCode.PERMISSION_DATA_CORRUPT
        assert exc.details == {"permission": "404", "role_id": 3, "user_id": 7}

    def test_role_not_found_is_server_error(self):
        exc = RoleNotFoundError(role_id=9, user_id=3)
        assert exc.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert exc.details == {"role_id": 9, "user_id": 3}

    def test_role_in_use(self):
        exc = RoleInUseError(4, 2)
        assert exc.status_code == status.HTTP_409_CONFLICT
        assert exc.details["user_count"] == 2

    def test_resource_not_found_with_id(self):
        exc = ResourceNotFoundError("Role", resource_id=123)
        assert str(exc) == "Role with id '123' not found"
        assert exc.status_code == status.HTTP_404_NOT_FOUND

    def test_user_and_content_not_found(self):
        assert UserNotFoundError(42).error_code is ErrorCode.RESOURCE_USER_NOT_FOUND
        exc = ContentNotFoundError("Blog", 100)
        assert str(exc) == "Blog with id '100' not found"

    def test_invalid_status_transition_is_conflict(self):
        exc = InvalidStatusTransitionError("published", "draft", "blog")
        assert exc.status_code == status.HTTP_409_CONFLICT
        assert exc.details["current_status"] == "published"
        assert exc.details["target_status"] == "draft"

    def test_scheduling_violation_is_teapot(self):
        exc = SchedulingViolationError("2000-01-01 00:00:00+00:00")
        assert exc.status_code == 418
        assert exc.error_code is ErrorCode.CONTENT_SCHEDULE_IN_PAST

    def test_validation_and_duplicate(self):
        assert ValidationError("Bad", field="role_id").details == {"field": "role_id"}
        assert DuplicateResourceError("Blog", "slug", "x").status_code == status.HTTP_409_CONFLICT

    def test_database_error(self):
        exc = DatabaseError(operation="publish")
        assert exc.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert exc.details == {"operation": "publish"}


class Payload(BaseModel):
    count: int


@pytest.fixture
async def handler_client():
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/locked")
    async def locked():
        raise RoleLockedError(2)

    @app.get("/teapot")
    async def teapot():
        raise SchedulingViolationError("2000-01-01")

    @app.post("/payload")
    async def payload(body: Payload):
        return body

    @app.get("/crash")
    async def crash():
        raise RuntimeError("internal detail")

    async with AsyncClient(transport=ASGITransport(app=app, raise_app_exceptions=False), base_url="http://test") as ac:
        yield ac


class TestExceptionHandlers:
    async def test_cms_error_envelope(self, handler_client):
        response = await handler_client.get("/locked")
        assert response.status_code == 403
        error = response.json()["error"]
        assert error["error_code"] == "AUTH_ROLE_LOCKED"
        assert error["type"] == "Forbidden"
        assert error["path"] == "/locked"
        assert error["details"] == {"role_id": 2}

    async def test_scheduling_violation_type(self, handler_client):
        response = await handler_client.get("/teapot")
        assert response.status_code == 418
        assert response.json()["error"]["type"] == "Scheduling Violation"

    async def test_request_validation_is_bad_request(self, handler_client):
        response = await handler_client.post("/payload", json={"count": "many"})
        assert response.status_code == 400
        errors = response.json()["error"]["details"]["validation_errors"]
        assert errors[0]["field"] == "count"

    async def test_unhandled_errors_hide_details(self, handler_client):
        response = await handler_client.get("/crash")
        assert response.status_code == 500
        assert "internal detail" not in response.text

    def test_error_types(self):
        assert get_error_type(404) == "Not Found"
        assert get_error_type(599) == "Error"
