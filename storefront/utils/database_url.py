import ssl as _ssl
from urllib.parse import parse_qs, urlencode, urlsplit, urlunsplit


def asyncpg_url(url: str) -> tuple[str, dict]:
    """Split a PostgreSQL URL into an asyncpg-compatible URL and ``connect_args``.

    asyncpg rejects ``sslmode`` in the query string; it wants an ``ssl``
    context in ``connect_args`` instead.  Other URLs pass through untouched.
    """
    parts = urlsplit(url)
    qs = parse_qs(parts.query)
    connect_args: dict = {}

    if "sslmode" in qs:
        mode = qs.pop("sslmode")[0]
        if mode in ("require", "verify-ca", "verify-full"):
            connect_args["ssl"] = _ssl.create_default_context()
        url = urlunsplit(parts._replace(query=urlencode(qs, doseq=True)))

    return url, connect_args


def to_async_driver(url: str) -> str:
    """Rewrite a plain ``postgres://`` / ``postgresql://`` URL to use asyncpg."""
    for prefix in ("postgresql://", "postgres://"):
        if url.startswith(prefix):
            return "postgresql+asyncpg://" + url[len(prefix) :]
    return url
