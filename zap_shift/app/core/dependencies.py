"""
Authentication dependencies for FastAPI.

This module provides dependencies for protecting routes with Firebase ID tokens.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from zap_shift.app.core.exceptions import AuthenticationError
from zap_shift.app.core.firebase import FirebaseIdentityVerifier, get_identity_verifier

# HTTP Bearer security scheme; missing headers are reported as 401 below
security = HTTPBearer(auto_error=False)


async def get_verified_email(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    verifier: FirebaseIdentityVerifier = Depends(get_identity_verifier)
) -> str:
    """
    FastAPI dependency for bearer-token authentication.
    
    1. Requires an ``Authorization: Bearer <token>`` header
    2. Verifies the token against the identity provider
    
    Returns:
        The verified email address of the caller
        
    Raises:
        AuthenticationError: 401 if the header is missing or the token is rejected
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Unauthorized access")

    return await verifier.verify(credentials.credentials)
