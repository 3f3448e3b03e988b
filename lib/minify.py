"""
Whitespace/comment stripping over tinycss2 tokens. No shorthand folding,
no rule merging, no value rewriting.

Whitespace is only dropped next to tokens that never need it: ``{}``
blocks, ``;`` ``,`` ``>`` ``~``, after ``:``, and before ``:`` inside a
declaration. Spaces around ``+`` and ``-`` (``calc()``) and descendant
combinators in selectors (``div :first-child``) survive.
"""
import tinycss2
from tinycss2.serializer import serialize_identifier

_SPACE = object()
_TIGHT_LITERALS = frozenset({';', ',', '>', '~'})
_BRACKETS = {'{} block': ('{', '}'), '() block': ('(', ')'), '[] block': ('[', ']')}


def minify_css(css):
    tokens = tinycss2.parse_component_value_list(css, skip_comments=False)
    return _minify_tokens(tokens)


def _is_literal(token, values):
    return token is not _SPACE and token.type == 'literal' and token.value in values


def _is_tight(token):
    return token is not _SPACE and (token.type == '{} block' or _is_literal(token, _TIGHT_LITERALS))


def _in_declaration(items, index):
    """True if the next ';' at this level comes before the next {} block"""
    for token in items[index:]:
        if token is _SPACE:
            continue
        if token.type == '{} block':
            return False
        if _is_literal(token, (';',)):
            return True
    return True


def _minify_tokens(tokens, curly=False):
    items = []
    for token in tokens:
        if token.type in ('whitespace', 'comment'):
            if items and items[-1] is not _SPACE:
                items.append(_SPACE)
            continue
        items.append(token)
    while items and items[-1] is _SPACE:
        items.pop()
    if curly:
        while items and _is_literal(items[-1], (';',)):
            items.pop()
            while items and items[-1] is _SPACE:
                items.pop()

    out = []
    for index, token in enumerate(items):
        if token is not _SPACE:
            out.append(_serialize(token))
            continue
        before = items[index - 1] if index else None
        after = items[index + 1] if index + 1 < len(items) else None
        if before is None or after is None:
            continue
        if _is_tight(before) or _is_tight(after) or _is_literal(before, (':',)):
            continue
        if _is_literal(after, (':',)) and _in_declaration(items, index + 1):
            continue
        out.append(' ')
    return ''.join(out)


def _serialize(token):
    if token.type in _BRACKETS:
        opening, closing = _BRACKETS[token.type]
        return opening + _minify_tokens(token.content, curly=token.type == '{} block') + closing
    if token.type == 'function':
        return serialize_identifier(token.name) + '(' + _minify_tokens(token.arguments) + ')'
    return tinycss2.serialize([token])
