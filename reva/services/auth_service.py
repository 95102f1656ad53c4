import logging

from fastapi import HTTPException, status

from reva.config import Settings
from reva.core.security import create_access_token, hash_password, verify_password
from reva.models.domain.user import Token, UserCreate, UserLogin, UserResponse
from reva.models.entities.user import User
from reva.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

class AuthService:
    def __init__(self, repository: UserRepository, settings: Settings):
        self.repository = repository
        self.settings = settings

    def register(self, data: UserCreate) -> UserResponse:
        if self.repository.get_by_username(data.username):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already taken")

        user = self.repository.save(User(username=data.username, password_hash=hash_password(data.password)))
        logger.info(f"Registered user {user.username}")
        return UserResponse.model_validate(user)

    def login(self, data: UserLogin) -> Token:
        user = self.repository.get_by_username(data.username)
        if user is None or not verify_password(data.password, user.password_hash):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid username or password",
                headers={"WWW-Authenticate": "Bearer"}
            )
        return Token(access_token=create_access_token(user.id, user.username, self.settings))
