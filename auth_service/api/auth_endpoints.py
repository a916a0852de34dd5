"""
Authentication Endpoints
------------------------
Registration, login (password and Google), refresh-token rotation and logout.

Service errors propagate to the registered exception handler; anything else is
logged and reported as a 500.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from loguru import logger

from auth_service.auth.dependencies import AuthenticatedPrincipal, get_current_user
from auth_service.core.exceptions import AuthServiceError
from auth_service.models.auth_models import (
    AuthTokenResponse,
    CurrentUserResponse,
    GoogleLoginRequest,
    LoginRequest,
    MessageResponse,
    RefreshTokenRequest,
    RefreshTokenResponse,
    RegisterRequest,
)
from auth_service.api.providers import get_auth_use_cases
from auth_service.services.auth_use_cases import AuthUseCases

# ============================================================================
# ROUTER INITIALIZATION
# ============================================================================

router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])


# ============================================================================
# REGISTRATION AND LOGIN
# ============================================================================


@router.post(
    "/register",
    response_model=AuthTokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new account",
    description="""
    Create an account with email and password and log it in.
    Returns an access token and a refresh token.
    """,
)
async def register(
    request: RegisterRequest,
    use_cases: AuthUseCases = Depends(get_auth_use_cases),
):
    try:
        return await use_cases.register(request.email, request.password)
    except AuthServiceError:
        raise
    except Exception as e:
        logger.error(f"Registration error: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Registration failed",
        )


@router.post(
    "/login",
    response_model=AuthTokenResponse,
    summary="Authenticate with email and password",
)
async def login(
    request: LoginRequest,
    use_cases: AuthUseCases = Depends(get_auth_use_cases),
):
    """
    Authenticate user with email and password.

    Raises:
        AuthenticationError (401): Unknown email or wrong password
    """
    try:
        return await use_cases.login(request.email, request.password)
    except AuthServiceError:
        raise
    except Exception as e:
        logger.error(f"Login error: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Authentication failed",
        )


@router.post(
    "/login/google",
    response_model=AuthTokenResponse,
    summary="Authenticate with a Google ID token",
    description="""
    Verify a Google ID token and log the matching account in.
    The account is created on first login.
    """,
)
async def login_with_google(
    request: GoogleLoginRequest,
    use_cases: AuthUseCases = Depends(get_auth_use_cases),
):
    try:
        return await use_cases.login_with_google(request.id_token)
    except AuthServiceError:
        raise
    except Exception as e:
        logger.error(f"Google login error: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Authentication failed",
        )


# ============================================================================
# REFRESH AND LOGOUT
# ============================================================================


@router.post(
    "/refresh",
    response_model=RefreshTokenResponse,
    summary="Rotate a refresh token",
    description="""
    Exchange a refresh token for a new access token and a new refresh token.
    The presented refresh token is revoked and cannot be used again.
    """,
)
async def refresh(
    request: RefreshTokenRequest,
    use_cases: AuthUseCases = Depends(get_auth_use_cases),
):
    try:
        return await use_cases.refresh(request.refresh_token)
    except AuthServiceError:
        raise
    except Exception as e:
        logger.error(f"Token refresh error: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Token refresh failed",
        )


@router.post("/logout", response_model=MessageResponse, summary="Revoke a refresh token")
async def logout(
    request: RefreshTokenRequest,
    use_cases: AuthUseCases = Depends(get_auth_use_cases),
):
    try:
        await use_cases.logout(request.refresh_token)
    except AuthServiceError:
        raise
    except Exception as e:
        logger.error(f"Logout error: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Logout failed",
        )
    return MessageResponse(message="Successfully logged out")


@router.post(
    "/logout-all",
    response_model=MessageResponse,
    summary="Revoke every refresh token of the caller",
)
async def logout_all(
    principal: AuthenticatedPrincipal = Depends(get_current_user),
    use_cases: AuthUseCases = Depends(get_auth_use_cases),
):
    try:
        await use_cases.logout_all(principal.user_id)
    except AuthServiceError:
        raise
    except Exception as e:
        logger.error(f"Logout-all error: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Logout failed",
        )
    return MessageResponse(message="Successfully logged out from all devices")


@router.get(
    "/me",
    response_model=CurrentUserResponse,
    summary="Get claims of the current access token",
)
async def get_current_user_info(
    principal: AuthenticatedPrincipal = Depends(get_current_user),
):
    """Return the identity carried by the presented access token."""
    claims = principal.claims
    return CurrentUserResponse(
        user_id=principal.user_id,
        role=claims.role,
        permissions=principal.permissions,
        expires_at=claims.exp,
    )
