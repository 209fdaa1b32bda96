"""HTTP request and response header constants

Headers sent to the upstream chat API and returned to the browser on
event-stream responses.
"""

from typing import Dict

# User-Agent string expected by the upstream chat API
USER_AGENT = "Dn/JS 6.9.0"

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

# Headers for the upstream chat request (Authorization is added per request)
UPSTREAM_CHAT_HEADERS: Dict[str, str] = {
    "Content-Type": "application/json",
    "Accept": "text/event-stream",
    "User-Agent": USER_AGENT,
}

# Headers for the event-stream response relayed to the browser.
# X-Accel-Buffering stops nginx-style reverse proxies from holding back chunks.
SSE_RESPONSE_HEADERS: Dict[str, str] = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

# Request headers whose values are never written to logs
REDACTED_HEADERS = frozenset({"authorization", "cookie", "set-cookie"})
