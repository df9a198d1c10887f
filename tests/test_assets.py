"""
Asset URL rewriting tests.
"""

import pytest

from phasenav.utils import (
    add_token,
    phase_folder_from_path,
    resolve_asset_url,
    rewrite_asset_urls,
    should_rewrite,
)


API_BASE = "https://api.example.com/api/realtime-projects/foo"
PAGE_PATH = "/api/realtime-projects/foo/BRD_phase/Overview.html"


class TestShouldRewrite:
    """Which references point inside the project."""

    @pytest.mark.parametrize("value", [
        None, "", "   ", "#section", "//cdn.test/a.js",
        "https://cdn.test/a.png", "http://cdn.test/a.png",
        "data:image/png;base64,AAAA", "mailto:someone@example.com", "tel:+123",
    ])
    def test_skipped(self, value):
        assert not should_rewrite(value)

    @pytest.mark.parametrize("value", ["logo.svg", "./img/a.png", "../logo.svg", "/static/a.css"])
    def test_rewritten(self, value):
        assert should_rewrite(value)


class TestResolveAssetUrl:
    """Resolution against the API base."""

    def test_parent_reference(self):
        assert resolve_asset_url("../logo.svg", API_BASE) == f"{API_BASE}/logo.svg"

    def test_multiple_parents_stop_at_project_root(self):
        assert resolve_asset_url("../../assets/logo.svg", API_BASE) == f"{API_BASE}/assets/logo.svg"

    def test_current_folder_with_phase(self):
        assert resolve_asset_url("./img/a.png", API_BASE, "BRD_phase") == f"{API_BASE}/BRD_phase/img/a.png"

    def test_current_folder_without_phase(self):
        assert resolve_asset_url("./img/a.png", API_BASE) == f"{API_BASE}/img/a.png"

    def test_bare_reference(self):
        assert resolve_asset_url("img/a.png", API_BASE) == f"{API_BASE}/img/a.png"

    def test_root_relative_uses_api_origin(self):
        assert resolve_asset_url("/static/a.css", API_BASE) == "https://api.example.com/static/a.css"

    def test_trailing_slash_on_base(self):
        assert resolve_asset_url("a.png", API_BASE + "/") == f"{API_BASE}/a.png"


class TestAddToken:
    """Token query parameter handling."""

    def test_appends_token(self):
        assert add_token("https://a.test/x.png", "abc") == "https://a.test/x.png?token=abc"

    def test_keeps_existing_query(self):
        assert add_token("https://a.test/x.png?v=2", "abc") == "https://a.test/x.png?v=2&token=abc"

    def test_existing_token_untouched(self):
        assert add_token("https://a.test/x.png?token=old", "abc") == "https://a.test/x.png?token=old"

    def test_no_token(self):
        assert add_token("https://a.test/x.png", None) == "https://a.test/x.png"
        assert add_token("https://a.test/x.png", "") == "https://a.test/x.png"

    def test_fragment_preserved(self):
        assert add_token("https://a.test/doc.html#top", "abc") == "https://a.test/doc.html?token=abc#top"

    def test_token_is_encoded(self):
        assert add_token("https://a.test/x", "a b&c") == "https://a.test/x?token=a+b%26c"


class TestPhaseFolder:
    """Phase folder lookup in gateway page paths."""

    def test_found(self):
        assert phase_folder_from_path(PAGE_PATH) == "BRD_phase"

    def test_encoded_space(self):
        path = "/api/realtime-projects/foo/Development%20Phase/Overview.html"
        assert phase_folder_from_path(path) == "Development%20Phase"

    def test_missing(self):
        assert phase_folder_from_path("/BRD_phase/Overview.html") is None


class TestRewriteFragment:
    """Whole-fragment rewriting."""

    def test_parent_image_with_token(self):
        fragment = '<p>Logo</p><img src="../logo.svg"><img src="https://cdn.test/x.png" alt="x">'
        result = rewrite_asset_urls(fragment, API_BASE, token="t0k", page_path=PAGE_PATH)
        assert result == (
            '<p>Logo</p><img src="https://api.example.com/api/realtime-projects/foo/logo.svg?token=t0k">'
            '<img src="https://cdn.test/x.png" alt="x">'
        )

    def test_without_token(self):
        result = rewrite_asset_urls('<img src="../logo.svg">', API_BASE)
        assert result == f'<img src="{API_BASE}/logo.svg">'

    def test_other_markup_preserved(self):
        fragment = (
            '<div class="card">\n'
            '  <!-- note -->\n'
            '  <h2 id="t">Title &amp; more</h2>\n'
            "  <img alt='diagram' src='./diagram.png' width=300>\n"
            '</div>'
        )
        result = rewrite_asset_urls(fragment, API_BASE, token="t", page_path=PAGE_PATH)
        assert result == (
            '<div class="card">\n'
            '  <!-- note -->\n'
            '  <h2 id="t">Title &amp; more</h2>\n'
            f"  <img alt='diagram' src='{API_BASE}/BRD_phase/diagram.png?token=t' width=300>\n"
            '</div>'
        )

    def test_all_asset_kinds(self):
        fragment = (
            '<link rel="stylesheet" href="style.css">'
            '<link rel="icon" href="favicon.ico">'
            '<script src="app.js"></script>'
            '<video src="intro.mp4"></video>'
            '<a href="Conclusion.html">next</a>'
            '<div data-image="hero.jpg"></div>'
        )
        result = rewrite_asset_urls(fragment, API_BASE)
        assert f'<link rel="stylesheet" href="{API_BASE}/style.css">' in result
        assert '<link rel="icon" href="favicon.ico">' in result
        assert f'<script src="{API_BASE}/app.js"></script>' in result
        assert f'<video src="{API_BASE}/intro.mp4"></video>' in result
        assert f'<a href="{API_BASE}/Conclusion.html">next</a>' in result
        assert f'<div data-image="{API_BASE}/hero.jpg"></div>' in result

    def test_skipped_references_untouched(self):
        fragment = (
            '<a href="#top">top</a>'
            '<a href="mailto:a@b.test">mail</a>'
            '<img src="data:image/png;base64,AAAA">'
            '<script src="//cdn.test/lib.js"></script>'
        )
        assert rewrite_asset_urls(fragment, API_BASE, token="t") == fragment

    def test_self_closing_tag(self):
        result = rewrite_asset_urls('<img src="a.png" />', API_BASE)
        assert result == f'<img src="{API_BASE}/a.png" />'

    def test_ampersand_escaped_in_attribute(self):
        result = rewrite_asset_urls('<img src="a.png?v=1">', API_BASE, token="t")
        assert result == f'<img src="{API_BASE}/a.png?v=1&amp;token=t">'

    def test_empty_api_base_returns_fragment(self):
        fragment = '<img src="../logo.svg">'
        assert rewrite_asset_urls(fragment, "") == fragment

    def test_attribute_text_inside_other_values_untouched(self):
        fragment = '<img alt="logo src=old" src="../logo.svg">'
        result = rewrite_asset_urls(fragment, API_BASE, token="t", page_path=PAGE_PATH)
        assert result == f'<img alt="logo src=old" src="{API_BASE}/logo.svg?token=t">'

    def test_href_in_title_untouched(self):
        fragment = "<a title='see href=x' href=\"Conclusion.html\">next</a>"
        result = rewrite_asset_urls(fragment, API_BASE)
        assert result == f"<a title='see href=x' href=\"{API_BASE}/Conclusion.html\">next</a>"

    def test_unquoted_value_gets_quoted(self):
        result = rewrite_asset_urls("<img src=a.png width=3>", API_BASE)
        assert result == f'<img src="{API_BASE}/a.png" width=3>'
