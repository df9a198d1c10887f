"""
Content region extraction tests.
"""

from phasenav.utils import extract_region


class TestExtractRegion:
    """Locate the module content inside a full document."""

    def test_content_body_region(self):
        doc = '<html><body><nav>x</nav><div class="content-body"><p>Hi</p></div></body></html>'
        region = extract_region(doc)
        assert region.source == "region"
        assert region.markup == "<p>Hi</p>"

    def test_nested_same_tag(self):
        doc = (
            '<body><div class="wrapper content-body">'
            '<div class="card"><div>inner</div></div><p>after</p>'
            '</div><footer>f</footer></body>'
        )
        region = extract_region(doc)
        assert region.markup == '<div class="card"><div>inner</div></div><p>after</p>'

    def test_first_match_wins(self):
        doc = '<section class="content-body">one</section><section class="content-body">two</section>'
        assert extract_region(doc).markup == "one"

    def test_markup_kept_verbatim(self):
        inner = "\n  <h1 id='t'>A &amp; B</h1>\n  <img src=\"a.png\"/>\n  <!-- c -->\n"
        doc = f'<!DOCTYPE html>\n<html>\n<body>\n<main class="content-body">{inner}</main>\n</body>\n</html>'
        assert extract_region(doc).markup == inner

    def test_falls_back_to_body(self):
        doc = "<html><head><title>t</title></head><body><p>plain</p></body></html>"
        region = extract_region(doc)
        assert region.source == "body"
        assert region.markup == "<p>plain</p>"

    def test_falls_back_to_document(self):
        doc = "<p>fragment only</p>"
        region = extract_region(doc)
        assert region.source == "document"
        assert region.markup == doc

    def test_unclosed_region_runs_to_end(self):
        doc = '<div class="content-body"><p>open'
        assert extract_region(doc).markup == "<p>open"

    def test_custom_class(self):
        doc = '<body><article class="lesson">L</article></body>'
        region = extract_region(doc, class_name="lesson")
        assert region.source == "region"
        assert region.markup == "L"

    def test_class_must_match_whole_token(self):
        doc = '<body><div class="content-body-wide">W</div></body>'
        region = extract_region(doc)
        assert region.source == "body"

    def test_region_on_later_line(self):
        doc = '<html>\n<body>\n  <nav>x</nav>\n  <div class="content-body">\n<p>Hi</p>\n  </div>\n</body>\n</html>'
        assert extract_region(doc).markup == "\n<p>Hi</p>\n  "
