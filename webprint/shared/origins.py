"""Origin allow-list predicate."""


def is_origin_allowed(origin: str | None, allowlist: list[str]) -> bool:
    """
    Decide whether a browser origin may call the API.

    Requests without an Origin header (curl, server-to-server) are allowed.
    A "*" entry allows every origin. Otherwise the match is exact, the same
    comparison CORSMiddleware uses when it sets Access-Control-Allow-Origin.
    """
    if not origin:
        return True
    return "*" in allowlist or origin in allowlist
