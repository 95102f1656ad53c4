"""
FastAPI dependencies for dependency injection.

This module provides reusable dependencies for:
- The process-wide cache, monitor, settings and HTTP clients
- Database sessions
- Bearer-token authentication

Design decisions:
- Shared objects are created once in create_app() and stored on app.state;
  dependencies read them from the request so tests can build a fresh app
  (and fresh cache/monitor) per test case
- HTTP clients are reused across requests for connection pooling and
  closed in the lifespan shutdown hook
"""

from typing import Annotated, Generator

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from reva.config import Settings
from reva.core.metrics import PerformanceMonitor
from reva.core.security import decode_access_token
from reva.models.entities.user import User
from reva.repositories import LeadRepository, UserRepository
from reva.services.auth_service import AuthService
from reva.services.lead_service import LeadService
from reva.services.pdl_client import PDLClient
from reva.services.places_client import PlacesClient

bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_monitor(request: Request) -> PerformanceMonitor:
    return request.app.state.monitor


def get_pdl_client(request: Request) -> PDLClient:
    return request.app.state.pdl_client


def get_places_client(request: Request) -> PlacesClient:
    return request.app.state.places_client


def get_db(request: Request) -> Generator[Session, None, None]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


SettingsDep = Annotated[Settings, Depends(get_settings)]
MonitorDep = Annotated[PerformanceMonitor, Depends(get_monitor)]
PDLClientDep = Annotated[PDLClient, Depends(get_pdl_client)]
PlacesClientDep = Annotated[PlacesClient, Depends(get_places_client)]
DbDep = Annotated[Session, Depends(get_db)]


def get_lead_service(db: DbDep, pdl: PDLClientDep, settings: SettingsDep) -> LeadService:
    return LeadService(LeadRepository(db), pdl, settings.enrichment_top_count)


def get_auth_service(db: DbDep, settings: SettingsDep) -> AuthService:
    return AuthService(UserRepository(db), settings)


async def get_current_user(
    db: DbDep,
    settings: SettingsDep,
    credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme)
) -> User:
    """
    Resolve the user from a Bearer access token.

    Raises:
        HTTPException: 401 if the token is missing, 403 if invalid/expired
            or the user no longer exists
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token required",
            headers={"WWW-Authenticate": "Bearer"}
        )

    claims = decode_access_token(credentials.credentials, settings)
    subject = str(claims.get("sub", "")) if claims else ""
    user = UserRepository(db).get_by_id(int(subject)) if subject.isdigit() else None
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or expired token"
        )
    return user


LeadServiceDep = Annotated[LeadService, Depends(get_lead_service)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
CurrentUserDep = Annotated[User, Depends(get_current_user)]
