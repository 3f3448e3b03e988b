import re

# Structurally critical tags/tokens. Blocks carrying any of these are never
# deleted, whatever the ledger says.
CRITICAL_SELECTORS = frozenset({
    'html',
    'body',
    '*',
    ':root',
    'head',
    'title',
    'meta',
    'link',
    'script',
    'style',
    'base',
})

_IDENT = r'[A-Za-z][A-Za-z0-9_-]*'

# Any match makes a selector permanently "used"
ALWAYS_KEEP_PATTERNS = (
    re.compile(r'::?[A-Za-z]'),                       # :hover, ::before
    re.compile(r'@'),                                 # at-rule marker
    re.compile(r'--'),                                # custom property
    re.compile(r'-(?:webkit|moz|ms|o)-'),             # vendor prefixes
    re.compile(r'keyframes|animation|transform|transition|filter|mask|clip-path', re.IGNORECASE),
    re.compile(r'\['),                                # [attr]
    re.compile(r'[>+~]'),                             # combinators
    re.compile(r'\('),                                # :not(), nth-child() ...
)

# Whitelist: only these shapes may ever be removed
SAFE_SHAPES = (
    re.compile(rf'^{_IDENT}$'),                       # div
    re.compile(rf'^\.{_IDENT}$'),                     # .button
    re.compile(rf'^#{_IDENT}$'),                      # #main
    re.compile(rf'^{_IDENT}\.{_IDENT}$'),             # button.primary
    re.compile(rf'^{_IDENT}#{_IDENT}$'),              # section#intro
)

_WHITESPACE = re.compile(r'\s+')


def normalize_selector(selector):
    """Trim a selector and collapse internal whitespace runs to one space"""
    if not selector:
        return ''
    return _WHITESPACE.sub(' ', selector).strip()


def is_critical_selector(selector):
    """True for html, body, * and the other structural tokens (case-insensitive)"""
    return normalize_selector(selector).lower() in CRITICAL_SELECTORS


def is_always_keep(selector):
    """True when any of the always-keep patterns matches"""
    return any(pattern.search(selector) for pattern in ALWAYS_KEEP_PATTERNS)


def classify(selector):
    """
    Decide whether a selector is eligible for removal.

    The pseudo-class check and the "(" check overlap on purpose; both run
    independently. Anything not matching one of the narrow safe shapes is
    ineligible.

    Args:
        selector (str): A single, comma-free selector.

    Returns:
        bool: True if the selector may be removed when unused.
    """
    selector = normalize_selector(selector)
    if not selector:
        return False
    if selector.lower() in CRITICAL_SELECTORS:
        return False
    if is_always_keep(selector):
        return False
    return any(shape.match(selector) for shape in SAFE_SHAPES)
