import requests
from requests.adapters import HTTPAdapter, Retry

UA   = "NVIDIA-Driver-CLI/0.3"

def make_session(retries: int = 2) -> requests.Session:
    retry = Retry(
        total=retries, backoff_factor=0.3,
        status_forcelist=(429,500,502,503,504),
        allowed_methods=frozenset(["GET","HEAD"]),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry, pool_connections=10, pool_maxsize=10)
    s = requests.Session()
    s.mount("http://", adapter); s.mount("https://", adapter)
    s.headers.update({"User-Agent": UA})
    return s

SESSION = make_session()
# link checks are single-shot, the caller decides what to try next
PROBE_SESSION = make_session(retries=0)
