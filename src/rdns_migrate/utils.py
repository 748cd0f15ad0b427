_ENDPOINT_MAP = {
    "domain": "v1/domain/{fqdn}",
    "acme_txt": "v1/domain/_acme-challenge.{fqdn}/txt",
    "frozen": "v1/migrate/frozen",
    "token": "v1/migrate/token",
    "record": "v1/migrate/record",
}


def get_endpoint(name: str, **params: str) -> str:
    """Return the relative API path for one of the known RDNS endpoints."""
    try:
        path = _ENDPOINT_MAP[name]
    except KeyError as exc:
        raise ValueError(f"No endpoint configured for '{name}'") from exc
    return path.format(**params)
