"""
Tests for HTML -> JSX conversion helpers used by the pixel-faithful strategy.
"""

from componentizer.services.synthesis.markup import (
    CHILDREN_PLACEHOLDER,
    SVG_PLACEHOLDER,
    extract_jsx_content,
    html_to_jsx,
    is_carousel_markup,
    parse_style_declarations,
    style_to_jsx,
    truncate_markup,
)


class TestStyleConversion:
    """Inline style strings become JSX style objects."""

    def test_camel_case_properties(self):
        assert parse_style_declarations("background-color: red; font-size: 12px") == [
            ("backgroundColor", "red"),
            ("fontSize", "12px"),
        ]

    def test_custom_properties_dropped(self):
        assert parse_style_declarations("--token: 1; -webkit-mask: none; color: blue") == [("color", "blue")]

    def test_var_fallback_resolved(self):
        assert parse_style_declarations("color: var(--brand, rgb(0, 0, 0))") == [("color", "rgb(0, 0, 0)")]

    def test_style_to_jsx(self):
        assert style_to_jsx("color: red") == "style={{color: 'red'}}"
        assert style_to_jsx("--only-custom: 1") == ""


class TestHtmlToJsx:
    """Attribute renames, void elements and event handlers."""

    def test_class_and_void_elements(self):
        jsx = html_to_jsx('<div class="a"><img src="x.png"><br></div>')
        assert 'className="a"' in jsx
        assert '<img src="x.png" />' in jsx
        assert '<br />' in jsx

    def test_event_handlers_removed(self):
        jsx = html_to_jsx('<button onclick="go()">Go</button>')
        assert 'onclick' not in jsx.lower()

    def test_script_urls_removed(self):
        jsx = html_to_jsx(
            '<a href="javascript:alert(1)">x</a>'
            '<a href=" JavaScript:void(0)">y</a>'
            '<iframe src="data:text/html;base64,PGI+"></iframe>'
            '<a href="vbscript:msgbox">z</a>'
        )
        assert "script:" not in jsx.lower()
        assert "data:text/html" not in jsx
        assert jsx.startswith("<a>x</a>")

    def test_safe_urls_kept(self):
        jsx = html_to_jsx('<a href="/pricing">p</a><img src="data:image/png;base64,AAAA">')
        assert 'href="/pricing"' in jsx
        assert 'src="data:image/png;base64,AAAA"' in jsx

    def test_braces_escaped(self):
        assert html_to_jsx("<p>{x}</p>") == "<p>&#123;x&#125;</p>"

    def test_empty(self):
        assert html_to_jsx("") == ""


class TestExtractJsxContent:
    """Body extraction for pixel-faithful components."""

    def test_svg_elided_and_scripts_removed(self):
        jsx = extract_jsx_content('<div><svg><path d="M0"/></svg><script>x()</script><p>Hi</p></div>')
        assert SVG_PLACEHOLDER in jsx
        assert "script" not in jsx
        assert "<p>Hi</p>" in jsx

    def test_empty_markup_gives_children(self):
        assert extract_jsx_content("") == CHILDREN_PLACEHOLDER

    def test_truncation_closes_tags(self):
        markup = "<section><div>" + "<p>word</p>" * 200 + "</div></section>"
        cut = truncate_markup(markup, max_bytes=300)
        assert len(cut) < len(markup)
        assert cut.endswith("</div></section>")

    def test_truncation_budget_is_in_bytes(self):
        markup = "<section><div>" + "<p>café ünïcode</p>" * 110 + "</div></section>"
        assert len(markup) < 2500 < len(markup.encode("utf-8"))

        cut = truncate_markup(markup, max_bytes=2500)

        assert cut != markup
        assert len(cut.encode("utf-8")) <= 2500 + len("</p></div></section>")
        assert cut.endswith("</div></section>")

    def test_multibyte_character_not_split(self):
        markup = "<p>" + "é" * 50 + "</p>"
        cut = truncate_markup(markup, max_bytes=20)
        assert "�" not in cut
        assert cut.endswith("</p>")


class TestCarouselDetection:
    def test_carousel_class(self):
        assert is_carousel_markup('<div class="swiper-wrapper"></div>')

    def test_plain_markup(self):
        assert not is_carousel_markup('<div class="grid"></div>')
