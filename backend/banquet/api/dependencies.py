from typing import Generator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from ..auth.principal import Principal, identity_headers, resolve_principal
from ..context import AppContext
from ..crud.base import normalize_page
from ..services.directories import (
    LocalBookingDirectory,
    LocalVenueDirectory,
    RemoteVenueDirectory,
    UserDirectory,
)
from ..services.ownership import OwnershipResolver


def get_context(request: Request) -> AppContext:
    return request.app.state.ctx


def get_db(ctx: AppContext = Depends(get_context)) -> Generator[Session, None, None]:
    db = ctx.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_principal(request: Request, ctx: AppContext = Depends(get_context)) -> Principal:
    """Authenticate the caller; raises Unauthenticated or InvalidCredential."""
    principal = resolve_principal(request.headers, ctx.settings)
    request.state.principal = principal
    return principal


def get_venue_directory(
    principal: Principal = Depends(get_principal),
    ctx: AppContext = Depends(get_context),
    db: Session = Depends(get_db),
):
    if ctx.venue_client is not None:
        return RemoteVenueDirectory(ctx.venue_client, identity_headers(principal))
    return LocalVenueDirectory(db)


def get_user_directory(
    principal: Principal = Depends(get_principal),
    ctx: AppContext = Depends(get_context),
) -> UserDirectory:
    return UserDirectory(ctx.auth_client, identity_headers(principal))


def get_ownership_resolver(
    venues=Depends(get_venue_directory),
    db: Session = Depends(get_db),
) -> OwnershipResolver:
    return OwnershipResolver(venues, LocalBookingDirectory(db))


def page_params(page: int = 1, limit: int = 0, ctx: AppContext = Depends(get_context)) -> tuple:
    return normalize_page(page, limit, ctx.settings.DEFAULT_PAGE_SIZE, ctx.settings.MAX_PAGE_SIZE)
