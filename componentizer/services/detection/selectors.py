"""Structural queries and in-page scripts used by the section detector."""

from typing import Dict, List, Optional

from ..models import SectionType

# Ordered most-specific first; earlier matches win overlap conflicts
SECTION_SELECTORS: Dict[SectionType, List[str]] = {
    SectionType.HEADER: [
        'header',
        '[role="banner"]',
        'nav:first-of-type',
        '.header',
        '#header',
        '[class*="header"]',
        '[class*="navbar"]',
        '[class*="nav-bar"]',
        '[class*="top-bar"]',
        '[class*="topbar"]',
    ],
    SectionType.HERO: [
        '[class*="hero"]',
        '[id*="hero"]',
        'section:first-of-type',
        'main > section:first-child',
        '[class*="banner"]:not(header)',
        '[class*="jumbotron"]',
        '[class*="landing"]',
        '[class*="masthead"]',
        '[class*="above-fold"]',
        '[class*="intro-section"]',
    ],
    SectionType.FEATURES: [
        '[class*="feature"]',
        '[id*="feature"]',
        '[class*="services"]',
        '[id*="services"]',
        '[class*="benefits"]',
        '[class*="capabilities"]',
        '[class*="what-we-do"]',
        '[class*="offerings"]',
        '[class*="solutions"]',
    ],
    SectionType.TESTIMONIALS: [
        '[class*="testimonial"]',
        '[id*="testimonial"]',
        '[class*="review"]',
        '[id*="review"]',
        '[class*="quote"]',
        '[class*="customer"]',
        '[class*="social-proof"]',
        '[class*="feedback"]',
        '[class*="client-say"]',
    ],
    SectionType.PRICING: [
        '[class*="pricing"]',
        '[id*="pricing"]',
        '[class*="plans"]',
        '[id*="plans"]',
        '[class*="subscription"]',
        '[class*="packages"]',
        '[class*="price-table"]',
        '[class*="tier"]',
    ],
    SectionType.CTA: [
        '[class*="cta"]',
        '[id*="cta"]',
        '[class*="call-to-action"]',
        '[class*="signup"]',
        '[class*="get-started"]',
        '[class*="action"]',
        '[class*="subscribe"]',
        '[class*="newsletter"]',
        # Framer names CTA blocks after their purpose
        '[data-framer-name*="CTA"]',
        '[data-framer-name*="Contact"]',
        '[data-framer-name*="Request"]',
        '[data-framer-name*="FAQ"]',
    ],
    SectionType.FOOTER: [
        'footer',
        '[role="contentinfo"]',
        '.footer',
        '#footer',
        '[class*="footer"]',
        '[class*="site-footer"]',
        '[class*="bottom-bar"]',
        '[data-framer-name*="Footer"]',
        '[data-framer-name*="CTA Footer"]',
    ],
    SectionType.CARDS: [
        '[class*="card-grid"]',
        '[class*="cards"]',
        '[class*="card-container"]',
        '[class*="card-section"]',
        '[class*="card-list"]',
        '[class*="grid-cards"]',
        '[class*="card-deck"]',
    ],
    SectionType.GALLERY: [
        '[class*="gallery"]',
        '[id*="gallery"]',
        '[class*="portfolio"]',
        '[id*="portfolio"]',
        '[class*="showcase"]',
        '[class*="work-samples"]',
        '[class*="project-grid"]',
        '[class*="image-grid"]',
    ],
    SectionType.CONTACT: [
        '[class*="contact"]',
        '[id*="contact"]',
        '[class*="get-in-touch"]',
        '[class*="reach-us"]',
        '[class*="form-section"]',
        '[class*="inquiry"]',
        'form[action*="contact"]',
    ],
    SectionType.FAQ: [
        '[class*="faq"]',
        '[id*="faq"]',
        '[class*="questions"]',
        '[class*="accordion"]',
        '[class*="frequently-asked"]',
        '[class*="help-section"]',
        '[class*="support"]',
    ],
    SectionType.STATS: [
        '[class*="stats"]',
        '[id*="stats"]',
        '[class*="statistics"]',
        '[class*="numbers"]',
        '[class*="metrics"]',
        '[class*="counter"]',
        '[class*="achievements"]',
        '[class*="by-the-numbers"]',
    ],
    SectionType.TEAM: [
        '[class*="team"]',
        '[id*="team"]',
        '[class*="people"]',
        '[class*="staff"]',
        '[class*="members"]',
        '[class*="about-us"]',
        '[class*="leadership"]',
        '[class*="founders"]',
    ],
    SectionType.LOGOS: [
        '[class*="logo-grid"]',
        '[class*="logos"]',
        '[class*="clients"]',
        '[class*="partners"]',
        '[class*="trusted-by"]',
        '[class*="brands"]',
        '[class*="companies"]',
        '[class*="sponsors"]',
        '[class*="as-seen"]',
    ],
}

GENERIC_CONTAINER_SELECTOR = 'section, article, main > div'

CAPTURED_STYLE_PROPERTIES = [
    'backgroundColor',
    'color',
    'fontSize',
    'fontFamily',
    'fontWeight',
    'padding',
    'margin',
    'display',
    'flexDirection',
    'justifyContent',
    'alignItems',
    'gap',
    'gridTemplateColumns',
    'borderRadius',
    'boxShadow',
]

# ---------------------------------------------------------------------------
# In-page scripts (Playwright evaluate expressions)
# ---------------------------------------------------------------------------

PAGE_METRICS_SCRIPT = """() => ({
    pageHeight: Math.max(
        document.body.scrollHeight,
        document.documentElement.scrollHeight,
        document.body.offsetHeight,
        document.documentElement.offsetHeight
    ),
    viewportHeight: window.innerHeight,
    pageWidth: document.body.scrollWidth || window.innerWidth,
})"""

ELEMENT_SNAPSHOT_SCRIPT = """(el, props) => {
    const computed = window.getComputedStyle(el);
    const styles = {};
    for (const prop of props) {
        styles[prop] = computed.getPropertyValue(prop.replace(/([A-Z])/g, '-$1').toLowerCase());
    }
    return { html: el.outerHTML, styles };
}"""

GENERIC_CONTAINERS_SCRIPT = """({ selector, minHeight, minWidth, props }) => {
    const results = [];
    document.querySelectorAll(selector).forEach((el) => {
        const rect = el.getBoundingClientRect();
        if (rect.height < minHeight || rect.width <= minWidth) return;
        const computed = window.getComputedStyle(el);
        const styles = {};
        for (const prop of props) {
            styles[prop] = computed.getPropertyValue(prop.replace(/([A-Z])/g, '-$1').toLowerCase());
        }
        results.push({
            x: Math.round(rect.x + window.scrollX),
            y: Math.round(rect.y + window.scrollY),
            width: Math.round(rect.width),
            height: Math.round(rect.height),
            html: el.outerHTML,
            styles,
        });
    });
    return results;
}"""


def build_selector_table(overrides: Optional[Dict[str, List[str]]] = None) -> Dict[SectionType, List[str]]:
    """
    Merge extra selectors into the default table.

    Override selectors are tried before the defaults for their type.
    Unknown type names are ignored.
    """
    table = {section_type: list(selectors) for section_type, selectors in SECTION_SELECTORS.items()}
    for key, extra in (overrides or {}).items():
        try:
            section_type = SectionType(key)
        except ValueError:
            continue
        table[section_type] = [s for s in extra if s not in table[section_type]] + table[section_type]
    return table
