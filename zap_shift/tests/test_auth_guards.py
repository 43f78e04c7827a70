"""
Authentication and role guard tests.

Validates bearer token handling, the error envelope and that every
protected request goes back to the identity provider.
"""

import pytest
from firebase_admin import auth as firebase_auth

from zap_shift.app.core.exceptions import AuthenticationError, UpstreamServiceError
from zap_shift.app.core.firebase import FirebaseIdentityVerifier
from zap_shift.app.core.reliability import CircuitBreaker


@pytest.mark.asyncio
async def test_missing_header_is_unauthorized(client):
    response = await client.get("/users")

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"
    assert response.json() == {
        "error_code": "ERR_AUTH_001",
        "message": "Unauthorized access",
        "details": {},
    }


@pytest.mark.asyncio
async def test_non_bearer_scheme_is_unauthorized(client):
    response = await client.get("/users", headers={"Authorization": "Basic dXNlcjpwYXNz"})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_rejected_token_is_unauthorized(client, identity_verifier):
    response = await client.get("/users", headers={"Authorization": "Bearer garbage"})

    assert response.status_code == 401
    assert identity_verifier.calls == 1


@pytest.mark.asyncio
async def test_every_request_is_verified(client, identity_verifier, headers_for):
    """No verification result is reused between requests."""
    headers = headers_for("a@x.com")

    for _ in range(3):
        response = await client.get("/users", headers=headers)
        assert response.status_code == 200

    assert identity_verifier.calls == 3


@pytest.mark.asyncio
async def test_open_routes_skip_verification(client, identity_verifier):
    response = await client.get("/parcels/delivery-status/stats")

    assert response.status_code == 200
    assert identity_verifier.calls == 0


@pytest.mark.asyncio
async def test_role_guard_rejects_wrong_role(client, admin_headers):
    """An admin is not a rider."""
    response = await client.get("/parcels/rider", headers=admin_headers)

    assert response.status_code == 403
    assert response.json()["details"] == {"required_role": "rider"}


@pytest.mark.asyncio
async def test_root_and_health(client):
    root = await client.get("/")
    health = await client.get("/health")

    assert root.json() == "Zap Shift server is running!"
    assert health.json()["status"] == "healthy"
    assert "X-Correlation-ID" in health.headers


# Firebase verifier

@pytest.fixture
def verifier(mocker):
    mocker.patch("zap_shift.app.core.firebase.get_firebase_app", return_value=object())
    return FirebaseIdentityVerifier()


@pytest.mark.asyncio
async def test_verifier_returns_email(verifier, mocker):
    mocker.patch.object(firebase_auth, "verify_id_token", return_value={"uid": "u1", "email": "a@x.com"})

    assert await verifier.verify("token") == "a@x.com"


@pytest.mark.asyncio
async def test_verifier_rejects_invalid_token(verifier, mocker):
    mocker.patch.object(
        firebase_auth, "verify_id_token", side_effect=firebase_auth.InvalidIdTokenError("bad signature")
    )

    with pytest.raises(AuthenticationError):
        await verifier.verify("token")

    # Bad tokens are the caller's problem, not an outage
    assert verifier.breaker.failures == 0


@pytest.mark.asyncio
async def test_verifier_misconfiguration_is_not_a_bad_token(verifier, mocker):
    """A missing project id is a server fault, not the caller's."""
    mocker.patch.object(
        firebase_auth, "verify_id_token",
        side_effect=ValueError("A project ID is required to access the auth service.")
    )

    with pytest.raises(UpstreamServiceError) as exc_info:
        await verifier.verify("token")

    assert exc_info.value.status_code == 503
    assert verifier.breaker.failures == 1


@pytest.mark.asyncio
async def test_verifier_rejects_token_without_email(verifier, mocker):
    mocker.patch.object(firebase_auth, "verify_id_token", return_value={"uid": "anonymous"})

    with pytest.raises(AuthenticationError):
        await verifier.verify("token")


@pytest.mark.asyncio
async def test_verifier_reports_provider_outage(verifier, mocker):
    mocker.patch.object(
        firebase_auth, "verify_id_token",
        side_effect=firebase_auth.CertificateFetchError("timeout", cause=None)
    )
    verifier.breaker = CircuitBreaker("firebase-test", failure_threshold=2, reset_timeout=60)

    for _ in range(2):
        with pytest.raises(UpstreamServiceError) as exc_info:
            await verifier.verify("token")
        assert exc_info.value.status_code == 503

    assert verifier.breaker.state == "OPEN"
