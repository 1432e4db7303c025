"""SessionDescription -> SDP text.

Lines are emitted by walking the grammar in a fixed tag order (RFC 4566's
own line order) and, within a tag, in rule order. Session fields come
first, then each media block: its m= line followed by the inner order.
Output is deterministic, so write(parse(write(s))) == write(s).
"""

from __future__ import annotations

import logging
import re
from typing import Any, List, Optional, Sequence

from .description import MediaDescription, SessionDescription, _Description
from .exceptions import SDPGrammarError, SDPValidationError
from .grammar import DEFAULT_INNER_ORDER, DEFAULT_OUTER_ORDER, GRAMMAR, Grammar, GrammarRule
from .utils import render_value, validate_order

log = logging.getLogger("sdper.writer")

_PLACEHOLDER_RE = re.compile(r"%[sdv%]")

LINE_END = "\r\n"


def format_line(template: str, args: Sequence[Any]) -> str:
    """Fill a grammar template from positional arguments.

    ``%s``/``%d`` render the next argument and ``%v`` swallows it, which
    lets a template skip an absent optional field in the middle of the
    list. ``%%`` is a literal percent sign and uses no argument. A None
    argument, or no argument left, keeps the placeholder text as is so
    incomplete records show up in the output. Surplus arguments are ignored.

    >>> format_line('rtpmap:%d %s%v', [111, 'opus', None])
    'rtpmap:111 opus'
    """
    remaining = iter(args)

    def substitute(m):
        token = m.group(0)
        if token == '%%':
            return '%'
        try:
            value = next(remaining)
        except StopIteration:
            return token
        if token == '%v':
            return ''
        if value is None:
            return token
        return render_value(value)

    return _PLACEHOLDER_RE.sub(substitute, template)


def _lookup(source: Any, key: str) -> Any:
    if isinstance(source, dict):
        return source.get(key)
    if isinstance(source, _Description):
        return source.get_field(key)
    return None


def _make_line(tag: str, rule: GrammarRule, location: Any) -> str:
    # location is the record itself for collection rules, the description otherwise
    if rule.scalar_field and not rule.collection_field:
        record = _lookup(location, rule.scalar_field)
    else:
        record = location
    template = rule.template_for(record)
    if rule.capture_names:
        args = [_lookup(record, name) for name in rule.capture_names]
    else:
        args = [record]
    return format_line(f"{tag}={template}", args)


def _emit(lines: List[str], order: Sequence[str], grammar: Grammar, location: _Description) -> None:
    for tag in order:
        for rule in grammar.rules_for(tag):
            if rule.scalar_field:
                if location.get_field(rule.scalar_field) is not None:
                    lines.append(_make_line(tag, rule, location))
            elif rule.collection_field:
                items = location.get_field(rule.collection_field)
                if isinstance(items, (list, tuple)):
                    for item in items:
                        lines.append(_make_line(tag, rule, item))


def write(session: SessionDescription, *,
          outer_order: Optional[Sequence[str]] = None,
          inner_order: Optional[Sequence[str]] = None,
          grammar: Optional[Grammar] = None) -> str:
    """Serialize *session* to SDP text ending in CRLF.

    Fills in ``version`` (0), ``name`` (a single space) and every media
    block's ``payloads`` ('') when they are None; this changes *session* in
    place.

    Args:
        session: the description to write.
        outer_order: session-level tag order, defaults to DEFAULT_OUTER_ORDER.
        inner_order: media-level tag order, defaults to DEFAULT_INNER_ORDER.
        grammar: rule table to use instead of the built-in GRAMMAR.

    Raises:
        SDPValidationError for a non-SessionDescription or a bad order.
        SDPGrammarError if there is media but the grammar has no m= rule.
    """
    if not isinstance(session, SessionDescription):
        raise SDPValidationError("session must be a SessionDescription")
    outer = DEFAULT_OUTER_ORDER if outer_order is None else validate_order('outer_order', outer_order)
    inner = DEFAULT_INNER_ORDER if inner_order is None else validate_order('inner_order', inner_order)
    if grammar is None:
        grammar = GRAMMAR

    if session.version is None:
        # v=0 is the only version there is
        session.version = 0
    if session.name is None:
        # s= may not be empty
        session.name = ' '
    for media in session.media:
        if not isinstance(media, MediaDescription):
            raise SDPValidationError("session.media must hold MediaDescription objects")
        if media.payloads is None:
            media.payloads = ''

    if session.media and not grammar.rules_for('m'):
        raise SDPGrammarError("Grammar has no m= rule to write media with")

    lines: List[str] = []
    _emit(lines, outer, grammar, session)
    for media in session.media:
        lines.append(_make_line('m', grammar.rules_for('m')[0], media))
        _emit(lines, inner, grammar, media)

    log.debug('wrote %d line(s) for %d media block(s)', len(lines), len(session.media))
    return LINE_END.join(lines) + LINE_END
