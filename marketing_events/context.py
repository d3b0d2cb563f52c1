from dataclasses import dataclass
from urllib.parse import unquote


UTM_PARAMS = (
    "utm_source",
    "utm_medium",
    "utm_campaign",
    "utm_term",
    "utm_content",
)


@dataclass
class ClientContext:
    client_ip: str | None = None
    user_agent: str | None = None


def _first_ip(headers) -> str | None:
    cf_ip = headers.get("cf-connecting-ip")
    if cf_ip:
        return cf_ip
    xff = headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip() or None
    return None


def extract_client_context(headers) -> ClientContext:
    """Read client IP and user agent from a case-insensitive header mapping."""
    if not headers:
        return ClientContext()
    return ClientContext(
        client_ip=_first_ip(headers),
        user_agent=headers.get("user-agent") or None,
    )


def extract_utms(url: str | None) -> dict[str, str | None]:
    utm = dict.fromkeys(UTM_PARAMS)
    if not url:
        return utm

    query_index = url.find("?")
    if query_index == -1:
        return utm

    for segment in url[query_index + 1:].split("&"):
        if "=" not in segment:
            continue
        key, value = segment.split("=", 1)
        if key in utm and value:
            utm[key] = unquote(value)
    return utm
