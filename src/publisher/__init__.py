"""Publishing built sites to their buckets."""

from src.publisher.uploader import invalidate, publish_site, upload_directory

__all__ = [
    "invalidate",
    "publish_site",
    "upload_directory",
]
