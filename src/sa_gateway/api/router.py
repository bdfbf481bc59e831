"""Auth API router: issue a placeholder access token.

POST /auth/token  {user_id, role, name} -> bearer token for that identity
"""

from fastapi import APIRouter, Request, status

from config.settings import settings
from src.sa_common.response import ApiResponse, success_response
from src.sa_gateway.api.schemas import TokenRequest, TokenResponse
from src.sa_gateway.auth.jwt_handler import create_access_token

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/token",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    summary="Issue access token",
)
async def issue_token(request: Request, body: TokenRequest) -> ApiResponse:
    token = create_access_token(body.user_id, body.role.value, body.name)
    data = TokenResponse(
        access_token=token,
        expires_in=settings.JWT_EXPIRE_MINUTES * 60,
        user_id=body.user_id,
        role=body.role.value,
        name=body.name,
    )
    resp = success_response(data.model_dump(), getattr(request.state, "request_id", None))
    resp.message = "Token issued"
    return resp
