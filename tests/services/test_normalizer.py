"""
Tests for normalize_markup - animation entry-state reset and noise overlay removal.
"""

from componentizer.services.normalizer import normalize_markup, remove_noise_overlays


class TestEntryStateReset:
    """Pre-animation inline styles are made visible."""

    def test_zero_opacity_becomes_one(self):
        out = normalize_markup('<div style="opacity: 0; color: red">Hi</div>')
        assert 'opacity: 1' in out
        assert 'color: red' in out

    def test_fractional_opacity_untouched(self):
        out = normalize_markup('<div style="opacity: 0.5">Hi</div>')
        assert 'opacity: 0.5' in out

    def test_hidden_visibility_becomes_visible(self):
        out = normalize_markup('<p style="visibility: hidden">x</p>')
        assert 'visibility: visible' in out
        assert 'hidden' not in out

    def test_entry_transform_removed(self):
        out = normalize_markup('<div style="transform: translateY(40px); color: blue">x</div>')
        assert 'transform' not in out
        assert 'color: blue' in out

    def test_data_style_attribute_untouched(self):
        markup = '<div data-style="opacity: 0" style="opacity: 0">x</div>'
        out = normalize_markup(markup)
        assert 'data-style="opacity: 0"' in out
        assert ' style="opacity: 1"' in out

    def test_blur_filter_and_will_change_removed(self):
        out = normalize_markup('<div style="filter: blur(10px); will-change: transform; margin: 0">x</div>')
        assert 'blur' not in out
        assert 'will-change' not in out
        assert 'margin: 0' in out


class TestNoiseOverlays:
    """Decorative repeating textures are removed."""

    def test_repeat_texture_overlay_removed(self):
        markup = (
            '<section><div style="background-repeat: repeat; background-image: url(noise.png)"></div>'
            '<h1>Title</h1></section>'
        )
        out = remove_noise_overlays(markup)
        assert 'background-repeat' not in out
        assert '<h1>Title</h1>' in out

    def test_content_div_kept(self):
        markup = '<div style="background-color: red"><p>Keep me</p></div>'
        assert remove_noise_overlays(markup) == markup


class TestIdempotence:
    """normalize(normalize(x)) == normalize(x)."""

    def test_idempotent_on_mixed_markup(self):
        markup = (
            '<section style="opacity: 0; transform: scale(0.9)">'
            '<div style="background-repeat: repeat; background-image: url(grain.png)" />'
            '<h2 style="visibility: hidden; filter: blur(4px)">Features</h2>'
            '<p style="opacity: 0.4">Body</p></section>'
        )
        once = normalize_markup(markup)
        assert normalize_markup(once) == once

    def test_empty_markup(self):
        assert normalize_markup('') == ''
