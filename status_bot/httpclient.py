import requests
from requests.adapters import HTTPAdapter

from . import __version__

USER_AGENT = f"ServerStatusBot/{__version__}"


def create_session() -> requests.Session:
    session = requests.Session()
    session.mount("https://", HTTPAdapter(pool_connections=8, pool_maxsize=16))
    session.mount("http://", HTTPAdapter(pool_connections=4, pool_maxsize=8))
    session.headers.update({"User-Agent": USER_AGENT})
    return session


def request(session: requests.Session, method: str, url: str, *, json_payload=None, timeout: float = 15):
    """Single-shot request wrapper. Returns (resp, errstr|None).

    ``resp`` is None when the request never produced a response. A response
    outside 2xx comes back together with an error string.
    """
    try:
        resp = session.request(method, url, json=json_payload, timeout=timeout)
    except requests.RequestException as e:
        # exception text embeds the request URL, token and all
        return None, f"request exception: {type(e).__name__}"

    if 200 <= resp.status_code < 300:
        return resp, None
    return resp, f"{resp.status_code} - {resp.text[:180]}"
