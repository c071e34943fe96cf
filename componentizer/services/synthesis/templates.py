"""Per-type layout templates for the semantic and accessible strategies.

Every section type has its own layout. Templates are filled with text
extracted from the captured region (headings, paragraphs, call-to-action
buttons, links, images); when a region carries no usable text they fall
back to structural placeholders, so an empty region still renders.

The accessible flavour of each template keeps the same content and adds
list semantics, ARIA labelling and heading ids.
"""

import logging
from dataclasses import dataclass, field
from itertools import zip_longest
from typing import Callable, Dict, List, Optional, Tuple

from ..content_extractor import extract_region_content
from ..models import ContentImage, ContentLink, Region, RegionContent, SectionType, display_name_for
from .markup import is_unsafe_url

logger = logging.getLogger(__name__)

MAX_TEMPLATE_ITEMS = 12

DEFAULT_PRIMARY_CTA = "Get Started"
DEFAULT_SECONDARY_CTA = "Learn More"
DEFAULT_SUBMIT_LABEL = "Send Message"


# ---------------------------------------------------------------------------
# Landmarks and ARIA labels
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Landmark:
    tag: str
    role: Optional[str] = None
    aria_label: str = ""
    # Native landmark elements already expose their role
    native: bool = False


LANDMARKS: Dict[SectionType, Landmark] = {
    SectionType.HEADER: Landmark("header", "banner", "Site header", native=True),
    SectionType.HERO: Landmark("section", None, "Hero section"),
    SectionType.FEATURES: Landmark("section", None, "Features"),
    SectionType.TESTIMONIALS: Landmark("section", None, "Customer testimonials"),
    SectionType.PRICING: Landmark("section", None, "Pricing plans"),
    SectionType.CTA: Landmark("aside", "complementary", "Call to action"),
    SectionType.FOOTER: Landmark("footer", "contentinfo", "Site footer", native=True),
    SectionType.CARDS: Landmark("section", None, "Content cards"),
    SectionType.GALLERY: Landmark("section", None, "Image gallery"),
    SectionType.CONTACT: Landmark("section", None, "Contact form"),
    SectionType.FAQ: Landmark("section", None, "Frequently asked questions"),
    SectionType.STATS: Landmark("section", None, "Statistics"),
    SectionType.TEAM: Landmark("section", None, "Team members"),
    SectionType.LOGOS: Landmark("section", None, "Partner logos"),
}


def landmark_for(section_type: SectionType) -> Landmark:
    return LANDMARKS[SectionType(section_type)]


# ---------------------------------------------------------------------------
# JSX escaping
# ---------------------------------------------------------------------------

def jsx_text(text: str) -> str:
    """Escape text for a JSX child position."""
    return (
        text.replace('&', '&amp;')
        .replace('<', '&lt;')
        .replace('>', '&gt;')
        .replace('{', '&#123;')
        .replace('}', '&#125;')
    )


def jsx_attr(value: str) -> str:
    """Escape text for a double-quoted JSX attribute."""
    return value.replace('&', '&amp;').replace('"', '&quot;')


def placeholder(label: str) -> str:
    return "{/* " + label + " */}"


# ---------------------------------------------------------------------------
# Section copy
# ---------------------------------------------------------------------------

@dataclass
class SectionCopy:
    """Text available to a template, with placeholder fallbacks applied."""
    section_type: SectionType
    title: Optional[str] = None
    description: Optional[str] = None
    primary_cta: Optional[ContentLink] = None
    secondary_cta: Optional[ContentLink] = None
    items: List[Tuple[str, str]] = field(default_factory=list)
    links: List[ContentLink] = field(default_factory=list)
    images: List[ContentImage] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)

    @property
    def fallback_title(self) -> str:
        return display_name_for(self.section_type)


def _pair_items(content: RegionContent, description_used: bool) -> List[Tuple[str, str]]:
    titles = content.headings[1:]
    bodies = content.paragraphs[1:] if description_used else list(content.paragraphs)
    if not titles:
        titles = list(content.list_items)
        if not titles:
            return []
    pairs = [(title or '', body or '') for title, body in zip_longest(titles, bodies[:len(titles)])]
    return pairs[:MAX_TEMPLATE_ITEMS]


def build_section_copy(region: Region) -> SectionCopy:
    """
    Collect template text for a region.

    Uses region.content when detection attached it, else extracts it
    from the markup snapshot.
    """
    content = region.content
    if content is None:
        content = extract_region_content(region.html_snapshot)

    title = content.headings[0] if content.headings else None
    # Hero subheadline is the second heading when present, like a tagline
    description = None
    description_used = False
    if region.type == SectionType.HERO and len(content.headings) > 1 and not content.paragraphs:
        description = content.headings[1]
    elif content.paragraphs:
        description = content.paragraphs[0]
        description_used = True

    buttons = list(content.buttons)
    primary = buttons[0] if buttons else None
    secondary = buttons[1] if len(buttons) > 1 else None

    return SectionCopy(
        section_type=region.type,
        title=title,
        description=description,
        primary_cta=primary,
        secondary_cta=secondary,
        items=_pair_items(content, description_used),
        links=list(content.links)[:MAX_TEMPLATE_ITEMS * 2],
        images=list(content.images)[:MAX_TEMPLATE_ITEMS],
        notes=content.paragraphs[1:] if description_used else list(content.paragraphs),
    )


# ---------------------------------------------------------------------------
# Shared fragments
# ---------------------------------------------------------------------------

def _heading(level: int, copy: SectionCopy, accessible: bool, css: str, heading_id: Optional[str]) -> str:
    if copy.title:
        text = jsx_text(copy.title)
    elif accessible:
        text = jsx_text(copy.fallback_title)
    else:
        text = placeholder("Section title" if level > 1 else "Headline")
    id_attr = f' id="{heading_id}"' if accessible and heading_id else ''
    return f'<h{level}{id_attr} className="{css}">{text}</h{level}>'


def _description(copy: SectionCopy, css: str) -> str:
    if copy.description:
        return f'<p className="{css}">{jsx_text(copy.description)}</p>'
    return f'<p className="{css}">{placeholder("Section description")}</p>'


def _link(link: ContentLink, css: str, fallback_text: str) -> str:
    href = jsx_attr(link.href) if link and link.href and not is_unsafe_url(link.href) else '#'
    text = jsx_text(link.text) if link and link.text else fallback_text
    return f'<a href="{href}" className="{css}">{text}</a>'


def _cta_group(copy: SectionCopy, accessible: bool, justify: str = "justify-center") -> str:
    primary = _link(copy.primary_cta, "btn btn-primary", DEFAULT_PRIMARY_CTA)
    secondary = _link(copy.secondary_cta, "btn btn-secondary", DEFAULT_SECONDARY_CTA)
    group_attrs = ' role="group" aria-label="Call to action"' if accessible else ''
    return (
        f'<div className="cta-buttons flex {justify} gap-4"{group_attrs}>\n'
        f'  {primary}\n'
        f'  {secondary}\n'
        f'</div>'
    )


def _image(image: ContentImage, css: str, accessible: bool, fallback_alt: str) -> str:
    alt = image.alt or (fallback_alt if accessible else '')
    src = '' if is_unsafe_url(image.src or '') else jsx_attr(image.src)
    return f'<img src="{src}" alt="{jsx_attr(alt)}" className="{css}" />'


def _indent(block: str, spaces: int) -> str:
    pad = ' ' * spaces
    return '\n'.join(pad + line if line else line for line in block.split('\n'))


def _list_wrapper(items: List[str], css: str, accessible: bool, label: Optional[str] = None) -> str:
    """Grid of items; a real list in the accessible flavour."""
    if not items:
        return f'<div className="{css}">\n  {{children}}\n</div>'
    if accessible:
        label_attr = f' aria-label="{label}"' if label else ''
        body = '\n'.join(f'<li>\n{_indent(item, 2)}\n</li>' for item in items)
        return f'<ul role="list" className="{css}"{label_attr}>\n{_indent(body, 2)}\n</ul>'
    return f'<div className="{css}">\n{_indent(chr(10).join(items), 2)}\n</div>'


def _container(*blocks: str, css: str = "container mx-auto px-4 py-16") -> str:
    body = '\n'.join(b for b in blocks if b)
    return f'<div className="{css}">\n{_indent(body, 2)}\n</div>'


# ---------------------------------------------------------------------------
# Per-type templates
# ---------------------------------------------------------------------------

def _header(copy: SectionCopy, a11y: bool, hid: str) -> str:
    if copy.images:
        brand = _image(copy.images[0], "h-8 w-auto", a11y, "Company logo")
    elif copy.title:
        brand = f'<span className="text-xl font-bold">{jsx_text(copy.title)}</span>'
    else:
        brand = placeholder("Logo")
    home_attrs = ' aria-label="Go to homepage"' if a11y else ''
    logo = f'<a href="/" className="logo"{home_attrs}>\n  {brand}\n</a>'

    nav_links = [_link(link, "nav-link", "Link") for link in copy.links[:8]]
    if a11y:
        items = '\n'.join(f'<li>{link}</li>' for link in nav_links) or placeholder("Navigation items")
        nav = f'<nav aria-label="Main navigation">\n  <ul role="list" className="flex gap-6">\n{_indent(items, 4)}\n  </ul>\n</nav>'
    else:
        items = '\n'.join(nav_links) or placeholder("Navigation links")
        nav = f'<nav className="navigation flex gap-6">\n{_indent(items, 2)}\n</nav>'

    actions = _link(copy.primary_cta, "btn btn-primary", DEFAULT_PRIMARY_CTA) if copy.primary_cta else placeholder("CTA buttons")
    actions_block = f'<div className="actions flex gap-4">\n  {actions}\n</div>'
    return _container(logo, nav, actions_block, css="container mx-auto flex items-center justify-between px-4 py-4")


def _hero(copy: SectionCopy, a11y: bool, hid: str) -> str:
    blocks = [
        _heading(1, copy, a11y, "text-4xl md:text-6xl font-bold mb-4", hid),
        _description(copy, "text-xl text-gray-600 mb-8 max-w-2xl mx-auto"),
        _cta_group(copy, a11y),
    ]
    if copy.images:
        blocks.append(_image(copy.images[0], "mt-12 mx-auto rounded-lg", a11y, "Hero illustration"))
    return _container(*blocks, css="container mx-auto px-4 py-16 md:py-24 text-center")


def _feature_card(title: str, body: str) -> str:
    lines = [f'<h3 className="text-xl font-semibold mb-2">{jsx_text(title)}</h3>']
    if body:
        lines.append(f'<p className="text-gray-600">{jsx_text(body)}</p>')
    return '<article className="feature-card">\n' + _indent('\n'.join(lines), 2) + '\n</article>'


def _features(copy: SectionCopy, a11y: bool, hid: str) -> str:
    cards = [_feature_card(t, b) for t, b in copy.items]
    return _container(
        _heading(2, copy, a11y, "text-3xl font-bold text-center mb-4", hid),
        _description(copy, "text-gray-600 text-center mb-12 max-w-2xl mx-auto"),
        _list_wrapper(cards, "grid grid-cols-1 md:grid-cols-3 gap-8", a11y),
    )


def _testimonials(copy: SectionCopy, a11y: bool, hid: str) -> str:
    quotes = copy.notes or [body for _, body in copy.items if body]
    authors = [title for title, _ in copy.items]
    figures = []
    for index, quote in enumerate(quotes[:MAX_TEMPLATE_ITEMS]):
        author = authors[index] if index < len(authors) else ''
        caption = f'\n  <figcaption className="mt-4 font-semibold">{jsx_text(author)}</figcaption>' if author else ''
        figures.append(
            f'<figure className="testimonial-card">\n'
            f'  <blockquote>\n    <p>{jsx_text(quote)}</p>\n  </blockquote>{caption}\n'
            f'</figure>'
        )
    if a11y:
        inner = '\n'.join(figures) or '{children}'
        grid = (
            f'<div\n  className="testimonials-grid grid grid-cols-1 md:grid-cols-3 gap-8"\n'
            f'  role="region"\n  aria-roledescription="carousel"\n  aria-label="Customer testimonials"\n>\n'
            f'{_indent(inner, 2)}\n</div>'
        )
    else:
        grid = _list_wrapper(figures, "testimonials-grid grid grid-cols-1 md:grid-cols-3 gap-8", False)
    return _container(_heading(2, copy, a11y, "text-3xl font-bold text-center mb-12", hid), grid)


def _pricing_card(title: str, body: str, copy: SectionCopy, a11y: bool) -> str:
    lines = [f'<h3 className="text-xl font-semibold">{jsx_text(title)}</h3>']
    if body:
        price_label = f' aria-label="Price: {jsx_attr(body)}"' if a11y else ''
        lines.append(f'<p className="price text-4xl font-bold my-4"{price_label}>{jsx_text(body)}</p>')
    lines.append(_link(copy.primary_cta, "btn btn-primary w-full", DEFAULT_PRIMARY_CTA))
    return '<div className="pricing-card rounded-lg border p-8">\n' + _indent('\n'.join(lines), 2) + '\n</div>'


def _pricing(copy: SectionCopy, a11y: bool, hid: str) -> str:
    cards = [_pricing_card(t, b, copy, a11y) for t, b in copy.items]
    return _container(
        _heading(2, copy, a11y, "text-3xl font-bold text-center mb-4", hid),
        _description(copy, "text-gray-600 text-center mb-12"),
        _list_wrapper(cards, "grid grid-cols-1 md:grid-cols-3 gap-8", a11y, "Pricing tiers"),
    )


def _cta(copy: SectionCopy, a11y: bool, hid: str) -> str:
    return _container(
        _heading(2, copy, a11y, "text-3xl md:text-4xl font-bold mb-4", hid),
        _description(copy, "text-lg mb-8 max-w-xl mx-auto"),
        _cta_group(copy, a11y),
        css="container mx-auto px-4 py-16 text-center",
    )


def _footer(copy: SectionCopy, a11y: bool, hid: str) -> str:
    columns: List[str] = []
    chunk = 4
    for start in range(0, min(len(copy.links), 12), chunk):
        links = copy.links[start:start + chunk]
        items = '\n'.join(f'<li>{_link(link, "footer-link", "Link")}</li>' for link in links)
        label = f' aria-label="Footer navigation {start // chunk + 1}"' if a11y else ''
        list_role = ' role="list"' if a11y else ''
        columns.append(f'<nav{label}>\n  <ul{list_role}>\n{_indent(items, 4)}\n  </ul>\n</nav>')

    brand = f'<p className="font-bold">{jsx_text(copy.title)}</p>' if copy.title else placeholder("Company info")
    grid_body = '\n'.join([f'<div>\n  {brand}\n</div>'] + (columns or [placeholder("Footer columns")]))
    grid = f'<div className="grid grid-cols-1 md:grid-cols-4 gap-8">\n{_indent(grid_body, 2)}\n</div>'

    notice = copy.notes[-1] if copy.notes else (copy.description or '')
    notice_text = jsx_text(notice) if notice else placeholder("Copyright")
    bottom = f'<div className="border-t mt-8 pt-8 text-center text-gray-500">\n  <p>{notice_text}</p>\n</div>'
    return _container(grid, bottom, css="container mx-auto px-4 py-8")


def _cards(copy: SectionCopy, a11y: bool, hid: str) -> str:
    cards = []
    for index, (title, body) in enumerate(copy.items):
        lines = []
        if index < len(copy.images):
            lines.append(_image(copy.images[index], "w-full rounded-t-lg", a11y, title))
        lines.append(f'<h3 className="text-lg font-semibold mt-4">{jsx_text(title)}</h3>')
        if body:
            lines.append(f'<p className="text-gray-600">{jsx_text(body)}</p>')
        cards.append('<article className="card rounded-lg shadow">\n' + _indent('\n'.join(lines), 2) + '\n</article>')
    return _container(
        _heading(2, copy, a11y, "text-3xl font-bold text-center mb-12", hid),
        _list_wrapper(cards, "grid grid-cols-1 md:grid-cols-2 lg:grid-cols-3 gap-6", a11y),
    )


def _gallery(copy: SectionCopy, a11y: bool, hid: str) -> str:
    figures = [
        f'<figure>\n  {_image(image, "w-full h-64 object-cover rounded", a11y, f"Gallery image {index + 1}")}\n</figure>'
        for index, image in enumerate(copy.images)
    ]
    return _container(
        _heading(2, copy, a11y, "text-3xl font-bold text-center mb-12", hid),
        _list_wrapper(figures, "grid grid-cols-2 md:grid-cols-3 gap-4", a11y),
    )


def _contact(copy: SectionCopy, a11y: bool, hid: str) -> str:
    submit = jsx_text(copy.primary_cta.text) if copy.primary_cta and copy.primary_cta.text else DEFAULT_SUBMIT_LABEL
    required = ' required aria-required="true"' if a11y else ' required'
    form_label = ' aria-label="Contact form"' if a11y else ''
    fields = (
        f'<label htmlFor="contact-name">Name</label>\n'
        f'<input id="contact-name" name="name" type="text"{required} />\n'
        f'<label htmlFor="contact-email">Email</label>\n'
        f'<input id="contact-email" name="email" type="email"{required} />\n'
        f'<label htmlFor="contact-message">Message</label>\n'
        f'<textarea id="contact-message" name="message" rows={{5}}{required} />\n'
        f'<button type="submit" className="btn btn-primary">{submit}</button>'
    )
    form = f'<form className="grid gap-4 max-w-xl mx-auto"{form_label}>\n{_indent(fields, 2)}\n</form>'
    return _container(
        _heading(2, copy, a11y, "text-3xl font-bold text-center mb-4", hid),
        _description(copy, "text-gray-600 text-center mb-12"),
        form,
    )


def _faq(copy: SectionCopy, a11y: bool, hid: str) -> str:
    if a11y:
        entries = '\n'.join(
            f'<div className="py-4">\n  <dt className="font-semibold">{jsx_text(q)}</dt>\n'
            f'  <dd className="mt-2 text-gray-600">{jsx_text(a) if a else placeholder("Answer")}</dd>\n</div>'
            for q, a in copy.items
        ) or '{children}'
        body = f'<dl className="max-w-3xl mx-auto divide-y">\n{_indent(entries, 2)}\n</dl>'
    else:
        entries = '\n'.join(
            f'<details className="py-4">\n  <summary className="font-semibold cursor-pointer">{jsx_text(q)}</summary>\n'
            f'  <p className="mt-2 text-gray-600">{jsx_text(a) if a else placeholder("Answer")}</p>\n</details>'
            for q, a in copy.items
        ) or '{children}'
        body = f'<div className="max-w-3xl mx-auto divide-y">\n{_indent(entries, 2)}\n</div>'
    return _container(_heading(2, copy, a11y, "text-3xl font-bold text-center mb-12", hid), body)


def _stats(copy: SectionCopy, a11y: bool, hid: str) -> str:
    if a11y:
        entries = '\n'.join(
            f'<div>\n  <dt className="text-gray-600">{jsx_text(label) if label else placeholder("Label")}</dt>\n'
            f'  <dd className="text-4xl font-bold">{jsx_text(value)}</dd>\n</div>'
            for value, label in copy.items
        ) or '{children}'
        body = f'<dl className="grid grid-cols-2 md:grid-cols-4 gap-8 text-center">\n{_indent(entries, 2)}\n</dl>'
    else:
        entries = '\n'.join(
            f'<div className="stat">\n  <p className="stat-value text-4xl font-bold">{jsx_text(value)}</p>\n'
            f'  <p className="stat-label text-gray-600">{jsx_text(label) if label else placeholder("Label")}</p>\n</div>'
            for value, label in copy.items
        ) or '{children}'
        body = f'<div className="grid grid-cols-2 md:grid-cols-4 gap-8 text-center">\n{_indent(entries, 2)}\n</div>'
    return _container(_heading(2, copy, a11y, "text-3xl font-bold text-center mb-12", hid), body)


def _team(copy: SectionCopy, a11y: bool, hid: str) -> str:
    members = []
    for index, (name, role) in enumerate(copy.items):
        lines = []
        if index < len(copy.images):
            lines.append(_image(copy.images[index], "w-32 h-32 rounded-full mx-auto", a11y, f"Photo of {name}"))
        lines.append(f'<h3 className="text-lg font-semibold mt-4">{jsx_text(name)}</h3>')
        if role:
            lines.append(f'<p className="text-gray-600">{jsx_text(role)}</p>')
        members.append('<article className="team-member text-center">\n' + _indent('\n'.join(lines), 2) + '\n</article>')
    return _container(
        _heading(2, copy, a11y, "text-3xl font-bold text-center mb-12", hid),
        _list_wrapper(members, "grid grid-cols-1 md:grid-cols-4 gap-8", a11y),
    )


def _logos(copy: SectionCopy, a11y: bool, hid: str) -> str:
    logos = [
        _image(image, "h-10 w-auto opacity-70", a11y, f"Partner logo {index + 1}")
        for index, image in enumerate(copy.images)
    ]
    caption = (
        f'<p className="text-center text-sm text-gray-500 mb-8">{jsx_text(copy.title)}</p>'
        if copy.title else ''
    )
    heading = _heading(2, copy, a11y, "sr-only", hid) if a11y else caption
    return _container(
        heading,
        _list_wrapper(logos, "flex flex-wrap items-center justify-center gap-8", a11y),
        css="container mx-auto px-4 py-12",
    )


_TEMPLATES: Dict[SectionType, Callable[[SectionCopy, bool, str], str]] = {
    SectionType.HEADER: _header,
    SectionType.HERO: _hero,
    SectionType.FEATURES: _features,
    SectionType.TESTIMONIALS: _testimonials,
    SectionType.PRICING: _pricing,
    SectionType.CTA: _cta,
    SectionType.FOOTER: _footer,
    SectionType.CARDS: _cards,
    SectionType.GALLERY: _gallery,
    SectionType.CONTACT: _contact,
    SectionType.FAQ: _faq,
    SectionType.STATS: _stats,
    SectionType.TEAM: _team,
    SectionType.LOGOS: _logos,
}


def render_section_body(
    section_type: SectionType,
    copy: SectionCopy,
    accessible: bool = False,
    heading_id: str = "",
) -> str:
    """
    Render the inner JSX for a section type.

    Args:
        section_type: Which per-type template to use
        copy: Text to fill the template with
        accessible: Add list semantics and ARIA labelling
        heading_id: id given to the top-level heading (accessible only)

    Returns:
        JSX markup for the landmark element's children
    """
    template = _TEMPLATES[SectionType(section_type)]
    return template(copy, accessible, heading_id)
