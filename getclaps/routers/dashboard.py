"""
Dashboard session routes.

The active dashboard id lives in the encrypted `did` cookie; the list of
dashboards signed in on this browser lives in the signed `ids` cookie.
"""
from fastapi import APIRouter, Depends, Query, Request
import logging
import uuid

from getclaps.middleware.cookie_middleware import (
    get_cookie_store,
    get_encrypted_cookie_store,
    get_signed_cookie_store,
)
from getclaps.models.common import SuccessResponse
from getclaps.models.dashboard import Dashboard, LoginRequest, SessionInfo
from getclaps.services.claps_dao import ClapsDAO, get_dao
from getclaps.services.visitor import IP_HEADER
from getclaps.utils.claps_cookies import (
    LOGIN_COOKIE,
    dnt_cookie,
    login_cookie,
    logins_cookie,
    logouts_cookie,
    read_ids,
)
from getclaps.utils.cookie_jar import RequestCookieStore
from getclaps.utils.encrypted_cookies import EncryptedCookieStore
from getclaps.utils.errors import BadRequestError, NotFoundError
from getclaps.utils.signed_cookies import SignedCookieStore
from getclaps.utils.urls import validate_url

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


def _parse_dashboard_id(value: str) -> str:
    try:
        return str(uuid.UUID(value))
    except (ValueError, AttributeError):
        raise BadRequestError("Malformed dashboard key. Needs to be UUID")


@router.post("/login", response_model=SessionInfo, summary="Sign in to a dashboard")
async def login(
    body: LoginRequest,
    request: Request,
    signed: SignedCookieStore = Depends(get_signed_cookie_store),
    encrypted: EncryptedCookieStore = Depends(get_encrypted_cookie_store),
    dao: ClapsDAO = Depends(get_dao),
):
    id = _parse_dashboard_id(body.id)
    dashboard = await dao.get_dashboard(id)
    if dashboard is None:
        # Forget a dashboard that no longer exists
        if id in read_ids(signed):
            signed.set(logouts_cookie(signed, id))
        raise NotFoundError("Dashboard not found")

    encrypted.set(login_cookie(id))
    signed.set(logins_cookie(signed, id))

    update = {"id": id, "ip": request.headers.get(IP_HEADER)}
    if body.hostname:
        update["hostname"] = validate_url(body.hostname).hostname
    await dao.upsert_dashboard(Dashboard(**update))

    logger.info(f"Dashboard login for {id}")
    return SessionInfo(id=id, ids=read_ids(signed))


@router.get("/me", response_model=SessionInfo, summary="Current dashboard session")
async def whoami(
    signed: SignedCookieStore = Depends(get_signed_cookie_store),
    encrypted: EncryptedCookieStore = Depends(get_encrypted_cookie_store),
):
    cookie = encrypted.get(LOGIN_COOKIE)
    return SessionInfo(id=cookie.value if cookie else None, ids=read_ids(signed))


@router.post("/logout", response_model=SessionInfo, summary="Sign out of the active dashboard")
async def logout(
    signed: SignedCookieStore = Depends(get_signed_cookie_store),
    encrypted: EncryptedCookieStore = Depends(get_encrypted_cookie_store),
):
    current = encrypted.get(LOGIN_COOKIE)
    current_id = current.value if current else None

    signed.set(logouts_cookie(signed, current_id))
    remaining = read_ids(signed)
    if remaining:
        encrypted.set(login_cookie(remaining[0]))
    else:
        encrypted.delete(LOGIN_COOKIE)

    return SessionInfo(id=remaining[0] if remaining else None, ids=remaining)


@router.put("/dnt", response_model=SuccessResponse, summary="Stop counting this browser's claps")
async def enable_dnt(
    hostname: str = Query(..., description="Site hostname"),
    cookie_store: RequestCookieStore = Depends(get_cookie_store),
):
    host = validate_url(hostname).hostname
    cookie_store.set(dnt_cookie(True, host))
    return SuccessResponse(message=f"Claps from this browser on {host} will not be counted")


@router.delete("/dnt", response_model=SuccessResponse, summary="Count this browser's claps again")
async def disable_dnt(
    hostname: str = Query(..., description="Site hostname"),
    cookie_store: RequestCookieStore = Depends(get_cookie_store),
):
    host = validate_url(hostname).hostname
    cookie_store.set(dnt_cookie(False, host))
    return SuccessResponse(message=f"Claps from this browser on {host} will be counted")
