"""OAuth2 password-grant token endpoint.

Clients authenticate with HTTP Basic (client id and secret) and exchange a
user's email and password for a signed bearer token:

    POST /oauth2/token
    Authorization: Basic base64(myclientid:myclientsecret)
    Content-Type: application/x-www-form-urlencoded

    grant_type=password&username=maria@gmail.com&password=123456
"""

import secrets
from typing import Optional

from fastapi import APIRouter, Depends, Form
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from dscommerce.api.models import TokenResponse
from dscommerce.api.shared.auth import create_access_token, verify_password
from dscommerce.api.shared.helpers.errors import AuthenticationError, ErrorCode
from dscommerce.config import SecurityConfig, get_config
from dscommerce.db.repositories import UserRepository
from dscommerce.db.session import get_db
from dscommerce.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/oauth2", tags=["auth"])

client_basic = HTTPBasic(auto_error=False)


def _client_is_valid(
    security: SecurityConfig,
    client_id: Optional[str],
    client_secret: Optional[str],
) -> bool:
    if client_id is None or client_secret is None:
        return False
    return secrets.compare_digest(client_id, security.client_id) and secrets.compare_digest(
        client_secret, security.client_secret
    )


@router.post("/token", response_model=TokenResponse)
async def issue_token(
    grant_type: str = Form(...),
    username: str = Form(...),
    password: str = Form(...),
    client_id: Optional[str] = Form(default=None),
    client_secret: Optional[str] = Form(default=None),
    basic: Optional[HTTPBasicCredentials] = Depends(client_basic),
    db: AsyncSession = Depends(get_db),
) -> TokenResponse:
    """Exchange user credentials for an access token.

    Client credentials are read from HTTP Basic, or from the form body when
    no Authorization header is sent.
    """
    security = get_config().security

    if basic is not None:
        client_id, client_secret = basic.username, basic.password
    if not _client_is_valid(security, client_id, client_secret):
        logger.info("token_client_rejected", client_id=client_id)
        raise AuthenticationError(error_code=ErrorCode.AUTH_INVALID_CLIENT)

    if grant_type != "password":
        raise AuthenticationError(
            f"Unsupported grant type: {grant_type}",
            error_code=ErrorCode.AUTH_INVALID_CLIENT,
        )

    user = await UserRepository(db).get_by_email(username)
    if user is None or not verify_password(password, user.password):
        logger.info("token_credentials_rejected", username=username)
        raise AuthenticationError(error_code=ErrorCode.AUTH_BAD_CREDENTIALS)

    logger.info("token_issued", user_id=user.id)
    return TokenResponse(
        access_token=create_access_token(user, security),
        expires_in=security.jwt_ttl_seconds,
    )
