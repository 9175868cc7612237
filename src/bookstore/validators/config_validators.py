def to_uppercase(value: str | None) -> str | None:
    """
    Converts a string to uppercase if it's not None.
    """
    if value is None:
        return None
    return value.upper()

def to_lowercase(value: str | None) -> str | None:
    """
    Converts a string to lowercase if it's not None.
    """
    if value is None:
        return None
    return value.lower()

def with_async_driver(url: str, driver: str) -> str:
    """
    Rewrite a driver-less Postgres URL so it names the async driver.

        postgres://host/db    -> postgresql+<driver>://host/db
        postgresql://host/db  -> postgresql+<driver>://host/db

    URLs that already carry a driver (or use another backend, e.g. sqlite+aiosqlite)
    are returned unchanged.
    """
    for prefix in ("postgres://", "postgresql://"):
        if url.startswith(prefix):
            return f"postgresql+{driver}://" + url[len(prefix):]
    return url
