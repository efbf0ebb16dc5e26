"""Cookie presets for do-not-track and dashboard logins."""
from datetime import datetime, timedelta, timezone
from typing import List, Optional
from urllib.parse import quote

from getclaps.models.cookies import Cookie, SameSite
from getclaps.utils.cookie_jar import CookieStore, EPOCH

LOGIN_COOKIE = "did"
LOGINS_COOKIE = "ids"


def one_year_from_now() -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=365)


def dnt_cookie_key(hostname: str) -> str:
    return f"dnt_{quote(hostname, safe='')}"


def dnt_cookie(dnt: bool, hostname: str) -> Cookie:
    """Marks this browser as the site owner's so its claps are not counted."""
    return Cookie(
        name=dnt_cookie_key(hostname),
        value="1" if dnt else "",
        same_site=SameSite.NONE,
        expires=one_year_from_now() if dnt else EPOCH,
    )


def login_cookie(id: str) -> Cookie:
    return Cookie(
        name=LOGIN_COOKIE,
        value=id,
        same_site=SameSite.LAX,
        http_only=True,
        expires=one_year_from_now(),
    )


def read_ids(store: CookieStore) -> List[str]:
    cookie = store.get(LOGINS_COOKIE)
    return [x for x in cookie.value.split(",") if x] if cookie else []


def logins_cookie(store: CookieStore, id: str) -> Cookie:
    """The `ids` cookie with `id` added."""
    ids = read_ids(store)
    if id and id not in ids:
        ids.append(id)
    return Cookie(
        name=LOGINS_COOKIE,
        value=",".join(ids),
        same_site=SameSite.LAX,
        http_only=True,
        expires=one_year_from_now(),
    )


def logouts_cookie(store: CookieStore, id: Optional[str]) -> Cookie:
    """The `ids` cookie with `id` removed."""
    ids = [x for x in read_ids(store) if x != id]
    return Cookie(
        name=LOGINS_COOKIE,
        value=",".join(ids),
        same_site=SameSite.LAX,
        http_only=True,
        expires=one_year_from_now() if ids else EPOCH,
    )
