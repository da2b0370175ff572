from __future__ import annotations

import json
import urllib.error
import urllib.request
from collections.abc import Iterable
from typing import Any

from pdfrecog.core.errors import HttpRequestError

USER_AGENT = "pdfrecog/0.1 (+https://pypi.org/project/pdfrecog/)"


def request_json(
    url: str,
    *,
    method: str = "GET",
    payload: Any = None,
    headers: dict[str, str] | None = None,
    timeout: float = 30.0,
    success_codes: Iterable[int] = (200,),
) -> Any:
    """Perform one HTTP request and return the decoded JSON body (None for an empty body)."""
    request_headers = {"Accept": "application/json", "User-Agent": USER_AGENT}
    request_headers.update(headers or {})
    data: bytes | None = None
    if payload is not None:
        data = json.dumps(payload, ensure_ascii=True).encode("utf-8")
        request_headers["Content-Type"] = "application/json"

    request = urllib.request.Request(url, data=data, headers=request_headers, method=method)
    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            status = int(response.status)
            body = response.read()
    except urllib.error.HTTPError as exc:
        raise HttpRequestError(f"HTTP {exc.code} from {url}", status=int(exc.code)) from exc
    except (urllib.error.URLError, TimeoutError, ValueError, OSError) as exc:
        raise HttpRequestError(f"Request to {url} failed: {exc}") from exc

    if status not in set(success_codes):
        raise HttpRequestError(f"Unexpected HTTP {status} from {url}", status=status)
    if not body.strip():
        return None
    try:
        return json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise HttpRequestError(f"Invalid JSON from {url}: {exc}", status=status) from exc
