"""
Tests for extract_region_content.
"""

from componentizer.services.content_extractor import extract_region_content


class TestExtraction:
    """Headings, paragraphs, buttons, links, images and list items are collected."""

    def test_hero_content(self):
        content = extract_region_content(
            '<section class="hero">'
            '<h1>Welcome</h1><h2>Build faster</h2>'
            '<p>Ship   your\n product today.</p>'
            '<a class="btn btn-primary" href="/signup">Start free</a>'
            '<a href="/docs">Docs</a>'
            '<img src="/hero.png" alt="Dashboard">'
            '<ul><li>Fast</li><li>Secure</li></ul>'
            '</section>'
        )
        assert content.headings == ["Welcome", "Build faster"]
        assert content.heading_levels == [1, 2]
        assert content.paragraphs == ["Ship your product today."]
        assert [b.text for b in content.buttons] == ["Start free"]
        assert content.buttons[0].href == "/signup"
        assert [link.text for link in content.links] == ["Docs"]
        assert content.images[0].src == "/hero.png"
        assert content.images[0].alt == "Dashboard"
        assert content.list_items == ["Fast", "Secure"]

    def test_scripts_and_styles_ignored(self):
        content = extract_region_content(
            '<div><script>var x = "<p>no</p>";</script><style>p{}</style><p>yes</p></div>'
        )
        assert content.paragraphs == ["yes"]

    def test_button_element_and_role_button(self):
        content = extract_region_content(
            '<div><button>Buy</button><a role="button" href="#x">Try</a></div>'
        )
        assert [b.text for b in content.buttons] == ["Buy", "Try"]
        assert content.links == []

    def test_empty_markup(self):
        content = extract_region_content("")
        assert content.is_empty

    def test_unclosed_tags_flushed(self):
        content = extract_region_content("<div><h2>Pricing<p>Simple plans")
        assert content.headings
        assert "Pricing" in content.headings[0]
