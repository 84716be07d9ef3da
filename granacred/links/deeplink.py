import webbrowser
from typing import Callable, Optional
from urllib.parse import quote

from granacred.settings import settings
from granacred.observability.logging import log

Opener = Callable[[str], bool]


def _browser_open(uri: str) -> bool:
    return bool(webbrowser.open(uri, new=2))


def open_uri(uri: str, opener: Optional[Opener] = None) -> bool:
    """
    Hands the URI to an external handler. Returns False (and logs) when it could
    not be opened; callers report that to the user, workflow state is untouched.
    """
    if not uri:
        log(event="deeplink_open_failed", url="", reason="empty_uri")
        return False
    handler = opener or _browser_open
    try:
        ok = bool(handler(uri))
    except webbrowser.Error as e:
        log(event="deeplink_open_failed", url=uri, errorType=type(e).__name__, error=str(e)[:200])
        return False
    if not ok:
        log(event="deeplink_open_failed", url=uri, reason="handler_refused")
    return ok


def support_link() -> str:
    return settings.WHATSAPP_URL


def referral_link(message: Optional[str] = None) -> str:
    text = quote(message or settings.REFERRAL_MESSAGE, safe="")
    return f"{settings.WHATSAPP_URL}?text={text}"


def instructions_image_url() -> str:
    return settings.HOWTO_IMAGE_URL
