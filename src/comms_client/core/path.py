"""
Path resolution utilities.
"""
import re
from typing import Any
from urllib.parse import quote, urljoin, urlparse

from ..errors import PreconditionError

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


def path_template(template: str, **params: Any) -> str:
    """
    Substitute ``{name}`` placeholders with URL-quoted values.

    Raises:
        PreconditionError: a placeholder has no value, or its value is empty
    """

    def replace(match: "re.Match[str]") -> str:
        name = match.group(1)
        if name not in params:
            raise PreconditionError(f"Missing path parameter '{name}'", field=name, constraint="required")
        value = params[name]
        if value is None or not str(value).strip():
            raise PreconditionError(f"Path parameter '{name}' must not be empty", field=name, constraint="non-empty")
        return quote(str(value), safe="")

    return _PLACEHOLDER.sub(replace, template)


def build_url(base_uri: str, path: str) -> str:
    """
    Append an endpoint path to a product base URI.

    Any path already on the base URI is kept. Endpoint paths are absolute
    (``/v0.3/conversations``); a relative path is joined under the base.
    """
    parsed = urlparse(base_uri)
    if not path:
        return base_uri
    base_path = parsed.path.rstrip("/")
    if path.startswith("/"):
        return f"{parsed.scheme}://{parsed.netloc}{base_path}{path}"
    return urljoin(f"{parsed.scheme}://{parsed.netloc}{base_path}/", path)
