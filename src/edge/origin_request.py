"""Lambda@Edge origin-request handler for single-page applications."""

import json
import logging
import posixpath

logger = logging.getLogger()
logger.setLevel(logging.INFO)

INDEX_PAGE = "/index.html"


def has_file_extension(uri: str) -> bool:
    """Check whether the last path segment of a URI has a file extension."""
    return posixpath.splitext(uri.rsplit("/", 1)[-1])[1] != ""


def handler(event, context):
    """
    Rewrite extension-less URIs to the SPA entry point before hitting S3.

    Asset requests (anything with a file extension) are forwarded unchanged
    so missing assets still 404.
    """
    request = event["Records"][0]["cf"]["request"]

    logger.info(
        "Received request: "
        + json.dumps(
            {
                "ip": request.get("clientIp"),
                "method": request.get("method"),
                "uri": request.get("uri"),
                "awsRequestId": getattr(context, "aws_request_id", None),
            }
        )
    )

    if not has_file_extension(request["uri"]):
        request["uri"] = INDEX_PAGE

    return request
