"""SDP text -> SessionDescription.

parse() is total over its input: lines that are not ``x=...`` shaped, lines
with an unknown type letter and lines no rule of their type matches are
dropped, and attribute lines nothing specific understands are kept verbatim
in the ``invalid`` list of their scope. Only a non-string argument raises.
"""

from __future__ import annotations

import logging
import re
from typing import Optional, Sequence, Union

from .description import MediaDescription, SessionDescription
from .exceptions import SDPValidationError
from .grammar import CATCH_ALL, GRAMMAR, Grammar, GrammarRule
from .utils import split_lines, to_int_if_int

log = logging.getLogger("sdper.parser")

_LINE_RE = re.compile(r"^([a-z])=")

Location = Union[SessionDescription, MediaDescription]


def _attach(match: "re.Match", target, names: Sequence[str]) -> None:
    for i, name in enumerate(names, 1):
        raw = match.group(i) if i <= match.re.groups else None
        # optional groups that did not take part leave the field unset
        if raw is None:
            continue
        if isinstance(target, dict):
            target[name] = to_int_if_int(raw)
        else:
            target.set_field(name, to_int_if_int(raw))


def _apply(rule: GrammarRule, match: "re.Match", location: Location) -> None:
    if rule.collection_field:
        items = location.get_field(rule.collection_field)
        if items is None:
            items = []
            location.set_field(rule.collection_field, items)
        record = {}
        _attach(match, record, rule.capture_names)
        items.append(record)
    elif rule.scalar_field and rule.capture_names:
        # a repeated line updates the record it finds rather than replacing it
        record = location.get_field(rule.scalar_field)
        if not isinstance(record, dict):
            record = {}
            location.set_field(rule.scalar_field, record)
        _attach(match, record, rule.capture_names)
    elif rule.scalar_field:
        raw = match.group(1)
        if raw is not None:
            location.set_field(rule.scalar_field, to_int_if_int(raw))
    else:
        _attach(match, location, rule.capture_names)


def parse(sdp_text: str, *, grammar: Optional[Grammar] = None) -> SessionDescription:
    """Parse an SDP document.

    Args:
        sdp_text: the document; CRLF, LF and CR line endings are accepted.
        grammar: rule table to use instead of the built-in GRAMMAR.

    Returns:
        A new SessionDescription with its media blocks in document order.

    Raises:
        SDPValidationError if sdp_text is not a str.
    """
    if not isinstance(sdp_text, str):
        raise SDPValidationError("sdp_text must be a string")
    if grammar is None:
        grammar = GRAMMAR

    session = SessionDescription()
    location: Location = session

    for lineno, line in enumerate(split_lines(sdp_text), 1):
        if not _LINE_RE.match(line):
            continue
        tag, content = line[0], line[2:]

        if tag == 'm':
            location = MediaDescription()
            session.media.append(location)

        rules = grammar.rules_for(tag)
        if not rules:
            log.debug('line %d: unknown line type %r, ignored', lineno, tag)
            continue

        for rule in rules:
            match = rule.match(content)
            if match:
                if rule is CATCH_ALL:
                    log.debug('line %d: unrecognized attribute kept verbatim: %r', lineno, content)
                _apply(rule, match, location)
                break
        else:
            log.debug('line %d: no %s= rule matched %r, dropped', lineno, tag, content)

    log.debug('parsed session with %d media block(s)', len(session.media))
    return session
