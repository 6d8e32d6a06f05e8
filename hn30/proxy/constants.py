"""Constants for the content fetch proxy."""

from hn30.fetch.constants import DEFAULT_MAX_RESPONSE_SIZE_BYTES

PROXY_MAX_BYTES = DEFAULT_MAX_RESPONSE_SIZE_BYTES

PROXY_CACHE_CONTROL = "public, max-age=31536000, immutable"
PROXY_NOSNIFF = "nosniff"

ALLOWED_SCHEMES = frozenset({"http", "https"})

# Loopback, link-local and unspecified addresses are checked via ipaddress
# predicates; these are the remaining private ranges.
FORBIDDEN_NETWORKS = (
    "10.0.0.0/8",
    "172.16.0.0/12",
    "192.168.0.0/16",
    "fc00::/7",
    "224.0.0.0/24",
    "ff02::/16",
)
