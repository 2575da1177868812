"""Tests for route id resolution."""

import pytest

from domain.results import RouteTarget
from web.routes import normalize_lang, redirect_to, resolve_path

FLOW = "6f1c2a52-6d38-4c55-9b3c-1f6f0e9a0b11"


class TestResolvePath:

    def test_public_route(self):
        target = RouteTarget("public/apply/$id/adult/review-information", {"id": FLOW})
        assert resolve_path(target) == f"/en/apply/{FLOW}/adult/review-information"

    def test_protected_route(self):
        target = RouteTarget("protected/renew/$id/member-selection", {"id": FLOW})
        assert resolve_path(target, "fr") == f"/fr/protected/renew/{FLOW}/member-selection"

    def test_several_parameters(self):
        target = RouteTarget("public/apply/$id/adult-child/children/$childId/information", {"id": FLOW, "childId": "c-1"})
        assert resolve_path(target) == f"/en/apply/{FLOW}/adult-child/children/c-1/information"

    def test_parameters_quoted(self):
        target = RouteTarget("public/apply/$id/terms-and-conditions", {"id": "a/b c"})
        assert resolve_path(target) == "/en/apply/a%2Fb%20c/terms-and-conditions"

    def test_missing_parameter(self):
        target = RouteTarget("public/apply/$id/adult/children/$childId/information", {"id": FLOW})

        with pytest.raises(KeyError, match="childId"):
            resolve_path(target)

    def test_unsupported_language(self):
        target = RouteTarget("public/apply/$id/terms-and-conditions", {"id": FLOW})
        assert resolve_path(target, "de").startswith("/en/")


class TestNormalizeLang:

    @pytest.mark.parametrize("lang,expected", [("en", "en"), ("fr", "fr"), ("", "en"), ("EN", "en")])
    def test_normalize(self, lang, expected):
        assert normalize_lang(lang) == expected


class TestRedirectTo:

    def test_see_other(self):
        response = redirect_to(RouteTarget("public/renew/$id/type-renewal", {"id": FLOW}), "fr")

        assert response.status_code == 303
        assert response.headers["location"] == f"/fr/renew/{FLOW}/type-renewal"
