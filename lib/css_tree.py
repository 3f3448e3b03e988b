"""
Rule tree on top of tinycss2.

Every node keeps the whitespace and comments that precede it in ``leading``
and its own source text, so an untouched tree renders back to the text it
was parsed from (quotes, escapes and all), and dropping a node drops its
surrounding trivia with it. Newlines are normalized the way the tokenizer
sees them.
"""
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

import tinycss2

from services.errors import CssParseError
from services.selector_rules import normalize_selector

CONTAINER_AT_RULES = frozenset({'media', 'supports', 'document', 'layer', 'container'})


@dataclass
class DeclarationBlock:
    prelude: str
    body: str
    selectors: List[str]
    leading: str = ''
    text: Optional[str] = None

    def render(self):
        if self.text is not None:
            return f'{self.leading}{self.text}'
        return f'{self.leading}{self.prelude}{{{self.body}}}'


@dataclass
class AtRuleContainer:
    name: str
    head: str
    prelude: str
    children: list = field(default_factory=list)
    trailing: str = ''
    leading: str = ''

    def render(self):
        inner = ''.join(child.render() for child in self.children)
        return f'{self.leading}{self.head}{{{inner}{self.trailing}}}'


@dataclass
class OpaqueRule:
    name: str
    text: str
    leading: str = ''
    import_url: Optional[str] = None
    import_media: Optional[str] = None

    def render(self):
        return f'{self.leading}{self.text}'


@dataclass
class Stylesheet:
    children: list = field(default_factory=list)
    trailing: str = ''

    def render(self):
        return ''.join(child.render() for child in self.children) + self.trailing


def split_selectors(prelude_tokens):
    """Split a rule prelude on top-level commas into normalized selectors."""
    selectors = []
    current = []
    for token in prelude_tokens:
        if token.type == 'literal' and token.value == ',':
            selectors.append(current)
            current = []
        else:
            current.append(token)
    selectors.append(current)

    result = []
    for tokens in selectors:
        selector = normalize_selector(tinycss2.serialize(tokens))
        if selector:
            result.append(selector)
    return result


class _Source:
    """Maps tinycss2 (line, column) positions back onto the parsed text"""

    def __init__(self, css):
        self.text = css.replace('\r\n', '\n').replace('\r', '\n').replace('\f', '\n')
        self.line_starts = [0]
        position = self.text.find('\n')
        while position != -1:
            self.line_starts.append(position + 1)
            position = self.text.find('\n', position + 1)

    def offset(self, node):
        # columns are 1-based
        return self.line_starts[node.source_line - 1] + node.source_column - 1


def parse_stylesheet(css):
    """Parse CSS text into a Stylesheet tree. Raises CssParseError."""
    source = _Source(css)
    nodes = tinycss2.parse_stylesheet(source.text, skip_comments=False, skip_whitespace=False)
    children, trailing = _build_children(nodes, source, len(source.text))
    return Stylesheet(children=children, trailing=trailing)


def _build_children(nodes, source, end):
    """
    Each node owns the text from its own start to the next node's start;
    the last one owns everything up to ``end``.
    """
    offsets = [source.offset(node) for node in nodes] + [end]
    children = []
    pending = []
    for index, node in enumerate(nodes):
        start, stop = offsets[index], offsets[index + 1]
        if node.type in ('whitespace', 'comment'):
            pending.append(source.text[start:stop])
            continue
        if node.type == 'error':
            raise CssParseError(node.message, node.source_line, node.source_column)
        children.append(_build_node(node, ''.join(pending), source, start, stop))
        pending = []
    return children, ''.join(pending)


def _build_node(node, leading, source, start, stop):
    text = source.text[start:stop]
    if node.type == 'qualified-rule':
        _check_tokens(node.prelude)
        return DeclarationBlock(
            prelude=tinycss2.serialize(node.prelude),
            body=tinycss2.serialize(node.content),
            selectors=split_selectors(node.prelude),
            leading=leading,
            text=text,
        )

    name = node.lower_at_keyword
    if node.content is not None and name in CONTAINER_AT_RULES:
        inner = tinycss2.parse_stylesheet(node.content, skip_comments=False, skip_whitespace=False)
        content_end = stop - 1 if text.endswith('}') else stop
        content_start = source.offset(inner[0]) if inner else content_end
        children, trailing = _build_children(inner, source, content_end)
        return AtRuleContainer(
            name=name,
            # up to, not including, the opening brace
            head=source.text[start:content_start - 1],
            prelude=normalize_selector(tinycss2.serialize(node.prelude)),
            children=children,
            trailing=trailing,
            leading=leading,
        )

    rule = OpaqueRule(name=name, text=text, leading=leading)
    if name == 'import':
        rule.import_url, rule.import_media = _parse_import(node.prelude)
    return rule


def _check_tokens(tokens):
    for token in tokens:
        if token.type == 'error':
            raise CssParseError(token.message, token.source_line, token.source_column)


def _parse_import(prelude):
    """Return (url, media) for an @import prelude"""
    url = None
    rest = []
    for token in prelude:
        if url is None:
            if token.type in ('url', 'string'):
                url = token.value
                continue
            if token.type == 'function' and token.lower_name == 'url':
                strings = [arg.value for arg in token.arguments if arg.type == 'string']
                url = strings[0] if strings else None
                continue
            if token.type == 'whitespace':
                continue
        rest.append(token)
    media = normalize_selector(tinycss2.serialize(rest)) or None
    return url, media


def iter_selectors(tree, media=None) -> Iterator[Tuple[str, Optional[str]]]:
    """
    Yield (selector, media) for every declaration block outside opaque rules.

    Nested @media preludes are joined with " and ".
    """
    for child in tree.children:
        if isinstance(child, DeclarationBlock):
            for selector in child.selectors:
                yield selector, media
        elif isinstance(child, AtRuleContainer):
            child_media = media
            if child.name == 'media' and child.prelude:
                child_media = f'{media} and {child.prelude}' if media else child.prelude
            yield from iter_selectors(child, child_media)
