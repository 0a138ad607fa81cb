"""
Console output for HTTP tracing.

Request/response panels are printed with Rich when ``ClientConfig.trace_http``
is on. Secrets are masked before anything is printed or logged.
"""
from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax

SENSITIVE_HEADERS = frozenset({"authorization", "proxy-authorization", "x-api-key"})
SENSITIVE_PARAMS = frozenset({"sig", "api_secret", "signature_secret", "token"})

_console: Optional[Console] = None


def get_console() -> Console:
    global _console
    if _console is None:
        _console = Console(stderr=True)
    return _console


def set_console(console: Optional[Console]) -> None:
    """Replace the console used for traces (tests capture output this way)."""
    global _console
    _console = console


def mask_sensitive(value: Optional[str], show_chars: int = 4, placeholder: str = "<none>") -> str:
    """
    Mask sensitive values for logging.

    Args:
        value: Value to mask
        show_chars: Number of characters to show before masking
        placeholder: Returned for null/empty values

    Returns:
        str: Masked value
    """
    if not value:
        return placeholder
    if len(value) <= show_chars:
        return "*" * len(value)
    return value[:show_chars] + "***"


def mask_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    masked = {}
    for name, value in headers.items():
        if name.lower() in SENSITIVE_HEADERS:
            scheme, _, secret = value.partition(" ")
            masked[name] = f"{scheme} {mask_sensitive(secret)}" if secret else mask_sensitive(value)
        else:
            masked[name] = value
    return masked


def mask_params(params: Mapping[str, str]) -> Dict[str, str]:
    return {k: mask_sensitive(v) if k in SENSITIVE_PARAMS else v for k, v in params.items()}


def print_panel(content: str, title: Optional[str] = None) -> None:
    """Print content in a panel."""
    get_console().print(Panel(content, title=title))


def print_syntax_panel(
    code: str,
    lexer: str = "json",
    title: Optional[str] = None,
    theme: str = "monokai",
    expand: bool = True,
) -> None:
    """Print syntax-highlighted text in a panel."""
    syntax = Syntax(code, lexer, theme=theme)
    get_console().print(Panel(syntax, title=title, expand=expand))


def _format_body(body: Any) -> str:
    if isinstance(body, (bytes, bytearray)):
        text = bytes(body).decode("utf-8", errors="replace")
        try:
            return json.dumps(json.loads(text), indent=2)
        except ValueError:
            return text
    return json.dumps(body, indent=2, default=str)


def trace_request(method: str, url: str, headers: Mapping[str, str], params: Mapping[str, str], body: Any) -> None:
    lines = [f"{method} {url}"]
    for name, value in mask_headers(headers).items():
        lines.append(f"{name}: {value}")
    if params:
        lines.append(f"params: {mask_params(params)}")
    print_panel("\n".join(lines), title="[bold cyan]Request[/bold cyan]")
    if body:
        print_syntax_panel(_format_body(body), title="Request body")


def trace_response(status_code: int, reason: str, content: bytes) -> None:
    style = "green" if 200 <= status_code < 300 else "red"
    title = f"[bold {style}]Response {status_code} {reason}[/bold {style}]"
    if content:
        print_syntax_panel(_format_body(content), title=title)
    else:
        print_panel("<empty body>", title=title)
