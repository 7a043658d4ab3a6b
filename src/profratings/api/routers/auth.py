import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ...core.errors import AuthenticationError, ProfRatingsError
from ...core.security import verify_password
from ...dao.kv_dao import KVDAO
from ..dependencies import get_dao

logger = logging.getLogger(__name__)

router: APIRouter = APIRouter(prefix="/auth", tags=["Auth"])


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    username: str
    nickname: Optional[str] = None


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"description": "Incorrect credentials"}},
    summary="/auth/login",
)
async def login(credentials: LoginRequest, dao: KVDAO = Depends(get_dao)):
    try:
        user = await dao.get_user(credentials.username)
        if not verify_password(credentials.password, user.password_hash):
            raise AuthenticationError("Incorrect Credentials")
    except ProfRatingsError as e:
        logger.warning("Rejected login attempt")
        raise HTTPException(status_code=e.status_code, detail=e.message)

    return LoginResponse(username=user.username, nickname=user.nickname)
