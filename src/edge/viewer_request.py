"""Viewer-request CloudFront Function bodies.

CloudFront Functions only run JavaScript (cloudfront-js-2.0), so each
function is rendered here as a small source string and attached to a
behavior by the Site construct.
"""

import json

_JS_REGEX_SPECIAL = set("\\^$.*+?()[]{}|/")

_SPA_INDEX = """\
    if (request.uri.split("/").pop().indexOf(".") === -1) {
        request.uri = "/index.html";
    }"""

_DIRECTORY_INDEX = """\
    if (request.uri.endsWith("/")) {
        request.uri += "index.html";
    }"""


def js_regex_escape(text: str) -> str:
    """Escape text for use inside a JavaScript regex literal."""
    return "".join(f"\\{char}" if char in _JS_REGEX_SPECIAL else char for char in text)


def _check_prefix(prefix: str) -> str:
    if not prefix.startswith("/") or prefix.endswith("/") or len(prefix) < 2:
        raise ValueError(f"Path prefix must look like /name, got {prefix!r}")
    return prefix


def _render(body: str) -> str:
    return (
        "function handler(event) {\n"
        "    var request = event.request;\n"
        + body
        + "\n    return request;\n"
        "}\n"
    )


def strip_prefix_code(prefix: str, spa: bool = False) -> str:
    """
    Build a function that removes a sub-site prefix before hitting the origin.

    /sub-site/app.js is fetched as /app.js from the sub-site bucket. For SPA
    sites any URI without a file extension is served /index.html; otherwise
    directory URIs get index.html appended.

    Args:
        prefix: Path prefix without trailing slash, e.g. /sub-site
        spa: Rewrite extension-less URIs to /index.html

    Returns:
        Function source code
    """
    prefix = _check_prefix(prefix)
    pattern = f"/^{js_regex_escape(prefix + '/')}/"
    body = f'    request.uri = request.uri.replace({pattern}, "/");\n'
    body += _SPA_INDEX if spa else _DIRECTORY_INDEX
    return _render(body)


def trailing_slash_redirect_code(prefix: str) -> str:
    """Build a function redirecting the bare sub-site path to its trailing-slash form."""
    prefix = _check_prefix(prefix)
    location = json.dumps(prefix + "/")
    return (
        "function handler(event) {\n"
        "    return {\n"
        "        statusCode: 301,\n"
        '        statusDescription: "Moved Permanently",\n'
        f"        headers: {{ location: {{ value: {location} }} }},\n"
        "    };\n"
        "}\n"
    )


def spa_index_code() -> str:
    """Build a function serving /index.html for extension-less URIs."""
    return _render(_SPA_INDEX)
