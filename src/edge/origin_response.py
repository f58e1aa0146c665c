"""Lambda@Edge origin-response handler regenerating SPA pages.

When S3 answers 403/404 for a GET (typically a client-side route such as
/en/account), the handler fetches the index page of the request's first path
segment through the distribution and returns it in place of the error.
"""

import json
import logging

import httpx

logger = logging.getLogger()
logger.setLevel(logging.INFO)

INDEX_PAGE = "index.html"

# Marks requests issued by this function so they are never regenerated again
ORIGIN_REQUEST_HEADER = "x-lambda-origin-request"
ORIGIN_REQUEST_VALUE = "spa-origin-response"

# httpx decodes bodies, so encoding and length headers are not passed through
ALLOWED_HEADERS = (
    "content-type",
    "last-modified",
    "date",
    "etag",
)

REGENERATED_STATUSES = ("403", "404")

FETCH_TIMEOUT = 5.0


def get_index_path(uri: str) -> str:
    """
    Get the index page for the first segment of a request URI.

    /en -> /en/index.html
    /it/foo/bar -> /it/index.html
    / -> /index.html
    """
    app_path = uri.lstrip("/").split("/")[0]
    if not app_path:
        return f"/{INDEX_PAGE}"
    return f"/{app_path}/{INDEX_PAGE}"


def filter_headers(headers) -> dict[str, list[dict[str, str]]]:
    """Convert upstream headers to CloudFront format, keeping the allowed subset."""
    response_headers: dict[str, list[dict[str, str]]] = {}
    if not headers:
        return response_headers

    for name, value in headers.items():
        if name.lower() in ALLOWED_HEADERS:
            response_headers[name.lower()] = [{"key": name, "value": value}]

    return response_headers


def _error_response(index_path: str) -> dict:
    logger.error(f"Could not regenerate {index_path}")
    return {
        "status": "500",
        "statusDescription": "Internal Server Error",
        "headers": {
            "content-type": [{"key": "Content-Type", "value": "text/plain"}],
        },
        "body": "An error occurred loading the page",
    }


def generate_response(distribution_domain_name: str, request: dict) -> dict:
    """
    Fetch the SPA index page through the distribution.

    Args:
        distribution_domain_name: Domain of the CloudFront distribution
        request: CloudFront request from the event

    Returns:
        CloudFront response dict
    """
    index_path = get_index_path(request["uri"])
    url = f"https://{distribution_domain_name}{index_path}"
    logger.debug(f"HTTP GET {url}")

    try:
        response = httpx.get(
            url,
            headers={ORIGIN_REQUEST_HEADER: ORIGIN_REQUEST_VALUE},
            timeout=FETCH_TIMEOUT,
        )
    except httpx.HTTPError as e:
        logger.error(f"Failed to fetch {url}: {e}")
        return _error_response(index_path)

    logger.info(f"Response was regenerated from {index_path} ({response.status_code})")

    return {
        "status": str(response.status_code),
        "statusDescription": response.reason_phrase,
        "headers": filter_headers(response.headers),
        "body": response.text,
    }


def _is_own_request(request: dict) -> bool:
    """Check whether the request is a regeneration fetch or targets the index page itself."""
    if ORIGIN_REQUEST_HEADER in request.get("headers", {}):
        return True
    return request.get("uri") == get_index_path(request.get("uri", ""))


def handler(event, context):
    """Replace 403/404 GET responses with the SPA index page."""
    cf = event["Records"][0]["cf"]
    request = cf["request"]
    response = cf["response"]
    status = str(response.get("status", ""))

    # Only log on error
    if status.isdigit() and int(status) >= 400:
        logger.info(
            "Received response: "
            + json.dumps(
                {
                    "ip": request.get("clientIp"),
                    "method": request.get("method"),
                    "uri": request.get("uri"),
                    "responseStatus": status,
                    "awsRequestId": getattr(context, "aws_request_id", None),
                }
            )
        )

    if (
        request.get("method") == "GET"
        and status in REGENERATED_STATUSES
        and not _is_own_request(request)
    ):
        return generate_response(cf["config"]["distributionDomainName"], request)

    return response
