"""Shared HTTP client for the auth provider, with retry on gateway errors."""

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

_session: requests.Session | None = None


def get_session() -> requests.Session:
    """Return a shared requests.Session that retries 502/503/504 responses.

    Retries up to 3 times with exponential backoff (0.5s, 1s, 2s). Identity
    Toolkit reports credential and quota failures as 400 with an error code
    in the body, so those are never retried.
    """
    global _session
    if _session is None:
        _session = requests.Session()
        retry = Retry(
            total=3,
            backoff_factor=0.5,
            status_forcelist=[502, 503, 504],
            allowed_methods=["GET", "POST"],
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        _session.mount("http://", adapter)
        _session.mount("https://", adapter)
    return _session
