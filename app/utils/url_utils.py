import logging
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)


def normalize_asset_url(raw_url: str, private_domain: str, public_base: str, bucket_path: str) -> str:
    """
    Rewrite a private object-storage URL to its public CDN equivalent.

    Args:
        raw_url: URL returned by the generation service
        private_domain: Host suffix of the private storage (e.g. r2.cloudflarestorage.com)
        public_base: CDN base URL the rewritten path is appended to
        bucket_path: Bucket name stripped from the head of the path

    URLs on any other host, and URLs that cannot be parsed, are returned unchanged.
    """
    if not raw_url or not public_base or not private_domain:
        return raw_url

    try:
        parts = urlsplit(raw_url)
        host = parts.hostname or ""
    except ValueError as e:
        logger.warning(f"Could not parse asset URL, returning it unchanged: {str(e)}")
        return raw_url

    if host != private_domain and not host.endswith("." + private_domain):
        return raw_url

    path = parts.path
    prefix = f"/{bucket_path.strip('/')}/"
    if bucket_path and path.startswith(prefix):
        path = "/" + path[len(prefix):]

    rewritten = f"{public_base.rstrip('/')}{path}"
    logger.debug(f"Rewrote storage URL {raw_url} -> {rewritten}")
    return rewritten
