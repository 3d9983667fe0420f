"""
Unit tests for admin capabilities and the exception hierarchy.
"""
from datetime import timedelta

import pytest

from survey_analytics.config import SecurityConfig
from survey_analytics.exceptions import (
    AuthorizationError,
    EmptyExportError,
    ErrorCategory,
    StoreError,
    StoreTimeoutError,
    ValidationError,
)
from survey_analytics.security import AdminCapability, JWTIdentityProvider, require_capability


class TestJWTIdentityProvider:
    """Tests for bearer JWT authentication."""

    def test_admin_token(self, identity_provider, token_factory):
        """Test an admin-role token yields a capability."""
        capability = identity_provider.authenticate(token_factory(sub="ops-1"))

        assert isinstance(capability, AdminCapability)
        assert capability.subject == "ops-1"
        assert capability.roles == ("admin",)

    def test_role_list(self, identity_provider, token_factory):
        """Test a list-valued role claim."""
        capability = identity_provider.authenticate(token_factory(role=["viewer", "admin"]))

        assert capability is not None
        assert "admin" in capability.roles

    @pytest.mark.parametrize("role", [None, "authenticated", ["viewer"]])
    def test_non_admin_rejected(self, identity_provider, token_factory, role):
        """Test valid tokens without the admin role are refused."""
        assert identity_provider.authenticate(token_factory(role=role)) is None

    def test_expired_token(self, identity_provider, token_factory):
        """Test expiry beyond the clock-skew leeway."""
        token = token_factory(expires_in=timedelta(minutes=-5))

        assert identity_provider.authenticate(token) is None

    def test_wrong_signature(self, identity_provider, token_factory):
        """Test tokens signed with another secret."""
        token = token_factory(secret="another-secret-that-is-also-32-bytes-long")

        assert identity_provider.authenticate(token) is None

    def test_wrong_audience(self, identity_provider, token_factory):
        """Test the audience is checked."""
        assert identity_provider.authenticate(token_factory(aud="someone-else")) is None

    @pytest.mark.parametrize("token", [None, "", "not-a-jwt"])
    def test_malformed_tokens(self, identity_provider, token):
        """Test missing and malformed credentials."""
        assert identity_provider.authenticate(token) is None

    def test_unconfigured_provider_rejects_all(self, token_factory):
        """Test an empty secret disables admin access."""
        assert JWTIdentityProvider("").authenticate(token_factory()) is None

    def test_from_config(self, token_factory):
        """Test settings drive the role claim and admin roles."""
        config = SecurityConfig(jwt_secret="cfg-secret-that-is-at-least-32-bytes",
                                role_claim="user_role", admin_roles=["superadmin"])
        provider = JWTIdentityProvider.from_config(config)

        good = token_factory(secret=config.jwt_secret, role=None, user_role="superadmin")
        bad = token_factory(secret=config.jwt_secret, user_role="admin")

        assert provider.authenticate(good).subject == "admin-user"
        assert provider.authenticate(bad) is None


class TestRequireCapability:
    """Tests for capability checks."""

    def test_passes_capability_through(self, capability):
        """Test a capability is returned unchanged."""
        assert require_capability(capability) is capability

    @pytest.mark.parametrize("value", [None, "admin", {"subject": "admin"}])
    def test_rejects_non_capabilities(self, value):
        """Test lookalikes are refused."""
        with pytest.raises(AuthorizationError):
            require_capability(value)


class TestExceptions:
    """Tests for the error hierarchy."""

    def test_validation_error(self):
        """Test validation errors carry the field."""
        error = ValidationError("bad", field="region", value="")

        assert error.http_status == 400
        assert error.retriable is True
        assert error.category == ErrorCategory.VALIDATION
        assert error.details["field"] == "region"
        assert "region" in error.user_message

    def test_store_timeout_is_store_error(self):
        """Test timeouts share store error handling."""
        error = StoreTimeoutError("slow", table_key="mental_health_responses")

        assert isinstance(error, StoreError)
        assert error.http_status == 503
        assert error.details["table_key"] == "mental_health_responses"

    def test_to_dict(self):
        """Test the public error shape."""
        payload = EmptyExportError("mental_health").to_dict()

        assert payload == {"error": {"code": "EMPTY_EXPORT", "message": "No data available to export.",
                                     "retriable": False}}

    def test_cause_is_kept(self):
        """Test wrapped causes stay attached."""
        cause = ConnectionError("refused")
        error = StoreError("down", cause=cause)

        assert error.cause is cause
        assert AuthorizationError().http_status == 401
