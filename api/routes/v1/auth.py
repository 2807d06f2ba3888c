"""
api/routes/v1/auth.py -- Authentication REST endpoints.

Routes:
  POST /api/v1/auth/register         -- create account; returns bearer token
  POST /api/v1/auth/login            -- password login; returns bearer token
  GET  /api/v1/auth/me               -- current identity (requires auth)
  POST /api/v1/auth/change-password  -- replace password (requires auth)

Every response is a ResultResponse envelope whose status_code matches the
HTTP status.

Security:
  [H2] register and login are rate-limited per IP (AUTH_RATE_LIMIT,
       default 10/minute).
  [C1] AuthService.login() provides timing equalization -- use it, never inline
       get_by_username() + verify_password().
  [M5] Cache-Control: no-store on every response that can carry a token.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter
from api.models import AuthData, ChangePasswordRequest, LoginRequest, MeData, RegisterRequest, ResultResponse
from api.responses import envelope
from auth.dependencies import get_current_user
from auth.models import AuthResult, User
from auth.service import AuthService
from core.config import get_settings
from core.messages import MessageKey
from core.results import Result

router = APIRouter()

_NO_STORE = {"Cache-Control": "no-store"}  # [M5]


def _auth_rate_limit() -> str:
    """Per-IP limit string, read per request so a settings change applies without re-import."""
    return get_settings().auth_rate_limit


def _auth_response(request: Request, result: Result[AuthResult]) -> JSONResponse:
    data = None
    if result.success and result.data is not None:
        data = AuthData(
            user_id=result.data.user_id,
            username=result.data.username,
            token=result.data.token,
            expires_in=request.app.state.token_issuer.expire_minutes * 60,
        )
    return envelope(result, request.app.state.localizer, data, headers=_NO_STORE)


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@router.post("/auth/register", response_model=ResultResponse[AuthData])
@limiter.limit(_auth_rate_limit)  # [H2] must be BELOW @router so FastAPI registers the limited wrapper
def register(request: Request, body: RegisterRequest) -> JSONResponse:
    """Create a local account and return a bearer token for it.

    400 ValidationFailed for a blank username or empty password, 409
    UsernameAlreadyExists when the name is taken (case-insensitive).
    """
    auth_service: AuthService = request.app.state.auth_service
    return _auth_response(request, auth_service.register(body.username, body.password))


@router.post("/auth/login", response_model=ResultResponse[AuthData])
@limiter.limit(_auth_rate_limit)  # [H2]
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with username and password; return a bearer token.

    Returns the same InvalidCredentials envelope for an unknown username and
    for a wrong password.
    """
    auth_service: AuthService = request.app.state.auth_service
    return _auth_response(request, auth_service.login(body.username, body.password))


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.get("/auth/me", response_model=ResultResponse[MeData])
def me(request: Request, current_user: User = Depends(get_current_user)) -> JSONResponse:
    """Return identity information for the currently authenticated user."""
    data = MeData(user_id=current_user.id, username=current_user.username, created_at=current_user.created_at)
    return envelope(Result.ok(data, MessageKey.IDENTITY_RETRIEVED), request.app.state.localizer, data)


@router.post("/auth/change-password", response_model=ResultResponse[None])
def change_password(
    request: Request,
    body: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
) -> JSONResponse:
    """Replace the caller's password. The current password must be supplied.

    Tokens issued before the change stay valid until they expire.
    """
    auth_service: AuthService = request.app.state.auth_service
    result = auth_service.change_password(current_user.id, body.current_password, body.new_password)
    return envelope(result, request.app.state.localizer, headers=_NO_STORE)
