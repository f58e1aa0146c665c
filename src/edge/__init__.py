"""Edge function code for CloudFront behaviors."""

from src.edge.viewer_request import (
    js_regex_escape,
    spa_index_code,
    strip_prefix_code,
    trailing_slash_redirect_code,
)

__all__ = [
    "js_regex_escape",
    "spa_index_code",
    "strip_prefix_code",
    "trailing_slash_redirect_code",
]
