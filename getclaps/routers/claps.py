from fastapi import APIRouter, Depends, Query, Request
from typing import Dict, Optional
import logging

from getclaps.middleware.cookie_middleware import get_cookie_store
from getclaps.models.claps import ClapCount, ClapRecord, ClapsRequest, UpdateOptions
from getclaps.services.claps_dao import ClapsDAO, get_dao
from getclaps.services.visitor import IP_HEADER, extract_data
from getclaps.utils.claps_cookies import dnt_cookie_key
from getclaps.utils.cookie_jar import RequestCookieStore
from getclaps.utils.errors import BadRequestError, ErrorMessages
from getclaps.utils.proof_of_clap import validate_pow_input, verify
from getclaps.utils.urls import canonical_url, validate_url

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/claps", tags=["claps"])


def _target(href: Optional[str], url: Optional[str]) -> str:
    return href or url or ""


@router.post(
    "",
    response_model=ClapCount,
    summary="Submit claps",
    description="Record claps for a page. The body must carry a proof-of-clap nonce for the canonical page URL."
)
async def post_claps(
    body: ClapsRequest,
    request: Request,
    href: Optional[str] = Query(None, description="Page URL"),
    url: Optional[str] = Query(None, description="Alias for href"),
    cookie_store: RequestCookieStore = Depends(get_cookie_store),
    dao: ClapsDAO = Depends(get_dao),
):
    """
    Verify a clap submission and hand it to the analytics backend.

    Malformed ids and nonces are rejected before any hashing; a nonce that
    does not meet the difficulty for the claimed claps is a 400.

    Raises:
        BadRequestError: Missing/invalid URLs or a failed proof
        MalformedPoWInputError: Bad id, nonce or claps
    """
    origin = validate_url(request.headers.get("origin"))
    target = validate_url(_target(href, url))
    canonical = canonical_url(_target(href, url))

    validate_pow_input(body.id, body.nonce, body.claps)
    claps, nonce = int(body.claps), int(body.nonce)

    if verify(canonical, claps, body.id, nonce) is not True:
        logger.info(f"Rejected claps for {canonical}: proof does not meet difficulty")
        raise BadRequestError(ErrorMessages.INVALID_NONCE)

    extracted = extract_data(request.headers)
    record = ClapRecord(
        hostname=target.hostname,
        href=canonical,
        hash=f"#{target.fragment}" if target.fragment else "",
        id=body.id.lower(),
        claps=claps,
        nonce=nonce,
        **extracted,
    )
    options = UpdateOptions(
        ip=request.headers.get(IP_HEADER),
        dnt=cookie_store.get(dnt_cookie_key(target.hostname)) is not None,
        origin_hostname=origin.hostname,
    )
    return await dao.update_claps(record, options)


@router.get(
    "",
    response_model=Dict[str, ClapCount],
    summary="Get claps",
    description="Clap totals for a page, keyed by its canonical URL"
)
async def get_claps(
    href: Optional[str] = Query(None, description="Page URL"),
    url: Optional[str] = Query(None, description="Alias for href"),
    dao: ClapsDAO = Depends(get_dao),
):
    return await dao.get_claps(canonical_url(_target(href, url)))
