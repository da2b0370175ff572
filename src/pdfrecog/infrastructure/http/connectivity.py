from __future__ import annotations

import logging
import urllib.error
import urllib.request

logger = logging.getLogger(__name__)


class ConnectivityProbe:
    """Reports whether the network path to a service is currently down."""

    def __init__(self, url: str, timeout_seconds: float = 3.0) -> None:
        self.url = url
        self.timeout_seconds = timeout_seconds

    def is_offline(self) -> bool:
        request = urllib.request.Request(self.url, method="HEAD")
        try:
            with urllib.request.urlopen(request, timeout=self.timeout_seconds):
                return False
        except urllib.error.HTTPError:
            # The server answered, so the network is up.
            return False
        except (urllib.error.URLError, TimeoutError, ValueError, OSError) as exc:
            logger.debug("Connectivity probe to %s failed: %s", self.url, exc)
            return True
