from prometheus_client import Counter, Histogram

REQ_LATENCY = Histogram("solosubs_request_seconds", "Request latency seconds", ["route"])  # noqa: N816
SEARCH_COUNT = Counter("solosubs_search_total", "Subtitle searches", ["outcome"])  # noqa: N816
DOWNLOAD_COUNT = Counter("solosubs_download_total", "Subtitle downloads", ["outcome"])  # noqa: N816
LOGIN_COUNT = Counter("solosubs_provider_login_total", "Subtitle provider logins", ["outcome"])  # noqa: N816
MAPPING_FALLBACK_COUNT = Counter("solosubs_mapping_fallback_total", "ID mapping fallbacks", ["provider", "outcome"])  # noqa: N816
