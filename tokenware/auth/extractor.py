"""Bearer token extraction from HTTP headers."""

from collections.abc import Mapping

from tokenware.config import TokenConfig
from tokenware.errors import TokenNotFoundError


def extract_token(header_value: str | None, config: TokenConfig) -> str:
    """Strip ``config.header_prefix`` from *header_value* and return the rest.

    The remainder is returned unchanged; no trimming or format checks happen
    here. Raises ``TokenNotFoundError`` when the prefix is absent.
    """
    if header_value is None or not header_value.startswith(config.header_prefix):
        raise TokenNotFoundError(f"token not in {config.header} header")
    return header_value[len(config.header_prefix):]


def extract_from_headers(headers: Mapping[str, str], config: TokenConfig) -> str:
    """Read ``config.header`` from *headers* (case-insensitively) and extract the token."""
    value = headers.get(config.header)
    if value is None:
        wanted = config.header.lower()
        value = next((v for k, v in headers.items() if k.lower() == wanted), None)
    return extract_token(value, config)
