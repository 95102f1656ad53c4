import logging

from fastapi import APIRouter, status

from reva.core.deps import AuthServiceDep, CurrentUserDep
from reva.models.domain.user import Token, UserCreate, UserLogin, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(data: UserCreate, service: AuthServiceDep):
    return service.register(data)


@router.post("/login", response_model=Token)
async def login(data: UserLogin, service: AuthServiceDep):
    return service.login(data)


@router.get("/me", response_model=UserResponse)
async def me(user: CurrentUserDep):
    return UserResponse.model_validate(user)
