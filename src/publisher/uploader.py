"""Upload built site assets and invalidate the distribution."""

import logging
from datetime import datetime
from pathlib import Path

import boto3
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

CONTENT_TYPES = {
    ".html": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".mjs": "application/javascript",
    ".json": "application/json",
    ".map": "application/json",
    ".txt": "text/plain",
    ".xml": "application/xml",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".woff": "font/woff",
    ".woff2": "font/woff2",
}

# HTML is revalidated, hashed assets are cached for a year
NO_CACHE = "no-cache, no-store, must-revalidate"
LONG_CACHE = "public, max-age=31536000, immutable"

# Lazy-loaded AWS clients (avoid import-time initialization for testability)
_clients: dict = {}


def _get_s3_client():
    """Get or create S3 client."""
    if "s3" not in _clients:
        _clients["s3"] = boto3.client("s3")
    return _clients["s3"]


def _get_cloudfront_client():
    """Get or create CloudFront client."""
    if "cloudfront" not in _clients:
        _clients["cloudfront"] = boto3.client("cloudfront")
    return _clients["cloudfront"]


def cache_control_for(key: str) -> str:
    """HTML is revalidated on every request, other assets are immutable."""
    return NO_CACHE if key.endswith(".html") else LONG_CACHE


def upload_directory(local_dir: str | Path, bucket: str, prefix: str = "") -> int:
    """
    Upload directory contents to a site bucket.

    Args:
        local_dir: Directory holding the built site
        bucket: Target S3 bucket
        prefix: Optional key prefix inside the bucket

    Returns:
        Number of uploaded files
    """
    local_path = Path(local_dir)
    if not local_path.is_dir():
        raise FileNotFoundError(f"Site directory not found: {local_path}")

    prefix = prefix.strip("/")
    uploaded = 0

    for file_path in sorted(local_path.rglob("*")):
        if not file_path.is_file():
            continue

        key = file_path.relative_to(local_path).as_posix()
        if prefix:
            key = f"{prefix}/{key}"
        content_type = CONTENT_TYPES.get(
            file_path.suffix.lower(), "application/octet-stream"
        )

        _get_s3_client().upload_file(
            str(file_path),
            bucket,
            key,
            ExtraArgs={
                "ContentType": content_type,
                "CacheControl": cache_control_for(key),
            },
        )
        uploaded += 1
        logger.debug(f"Uploaded: s3://{bucket}/{key}")

    logger.info(f"Uploaded {uploaded} files to s3://{bucket}")
    return uploaded


def invalidate(distribution_id: str, paths: tuple[str, ...] = ("/*",)) -> str | None:
    """Create a CloudFront invalidation, returning its ID."""
    if not distribution_id:
        logger.warning("No CloudFront distribution ID configured")
        return None

    try:
        response = _get_cloudfront_client().create_invalidation(
            DistributionId=distribution_id,
            InvalidationBatch={
                "Paths": {"Quantity": len(paths), "Items": list(paths)},
                "CallerReference": f"static-sites-{datetime.now().timestamp()}",
            },
        )
    except ClientError as e:
        logger.error(f"Failed to invalidate CloudFront: {e}")
        return None

    invalidation_id = response["Invalidation"]["Id"]
    logger.info(f"Created CloudFront invalidation: {invalidation_id}")
    return invalidation_id


def publish_site(
    local_dir: str | Path,
    bucket: str,
    distribution_id: str | None = None,
    prefix: str = "",
) -> tuple[int, str | None]:
    """Upload a site and invalidate its distribution."""
    uploaded = upload_directory(local_dir, bucket, prefix=prefix)
    invalidation_id = invalidate(distribution_id or "")
    return uploaded, invalidation_id
