"""
Route id resolution.

Navigation targets name abstract route ids such as
"public/apply/$id/adult/review-information". This module turns them into
page paths and 303 responses.
"""

from urllib.parse import quote

from fastapi import status
from fastapi.responses import RedirectResponse

from domain.results import RouteTarget

DEFAULT_LANG = "en"
SUPPORTED_LANGS = ("en", "fr")

# Route id prefix -> page path prefix
_AREA_PREFIXES = (
    ("public/", ""),
    ("protected/", "protected/"),
)


def normalize_lang(lang: str) -> str:
    return lang if lang in SUPPORTED_LANGS else DEFAULT_LANG


def resolve_path(target: RouteTarget, lang: str = DEFAULT_LANG) -> str:
    """
    Resolve a route target to a page path.

    Placeholders are "$" followed by a parameter name; every placeholder in
    the route id must have a parameter.

    Raises:
        KeyError: a placeholder has no parameter
    """
    route_id = target.route_id
    for prefix, replacement in _AREA_PREFIXES:
        if route_id.startswith(prefix):
            route_id = replacement + route_id[len(prefix):]
            break

    segments = []
    for segment in route_id.split("/"):
        if segment.startswith("$"):
            name = segment[1:]
            if name not in target.params:
                raise KeyError(f"Missing route parameter {name!r} for {target.route_id}")
            segment = quote(str(target.params[name]), safe="")
        segments.append(segment)

    return f"/{normalize_lang(lang)}/" + "/".join(segments)


def redirect_to(target: RouteTarget, lang: str = DEFAULT_LANG) -> RedirectResponse:
    return RedirectResponse(resolve_path(target, lang), status_code=status.HTTP_303_SEE_OTHER)
