"""Decoders for attribute values the grammar leaves as raw strings.

parse() keeps values like ``fmtp.config`` or ``simulcast.list1`` exactly as
written so they write back unchanged; these helpers turn them into
structures on request. Each accepts None or an empty string and returns an
empty result for it.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from .utils import render_value, to_int_if_int

ParamMap = Dict[str, Any]


def _add_param(params: ParamMap, expr: str) -> ParamMap:
    # a token with nothing after its '=' counts as a bare key
    key, sep, value = expr.partition('=')
    if sep and value:
        params[key] = to_int_if_int(value)
    elif len(expr) > 1:
        params[expr] = None
    return params


def parse_params(text: Optional[str]) -> ParamMap:
    """Parse a ``key=value;key=value`` string such as ``fmtp.config`` or ``rid.params``.

    Keys without a value map to None; values are numeric-coerced.

    >>> parse_params('profile-level-id=4d0028;packetization-mode=1')
    {'profile-level-id': '4d0028', 'packetization-mode': 1}
    """
    params: ParamMap = {}
    if not text:
        return params
    for expr in re.split(r';\s?', text):
        _add_param(params, expr)
    return params


def parse_payloads(text: Any) -> List[Any]:
    """Split the m-line payload list, e.g. ``'97 98'`` -> ``[97, 98]``."""
    if text is None or text == '':
        return []
    return [to_int_if_int(token) for token in render_value(text).split(' ')]


def parse_remote_candidates(text: Optional[str]) -> List[Dict[str, Any]]:
    """Parse ``remote-candidates`` into component/ip/port dicts.

    An incomplete trailing triple is ignored.
    """
    if not text:
        return []
    parts = [to_int_if_int(token) for token in text.split(' ')]
    candidates = []
    for i in range(0, len(parts) - 2, 3):
        candidates.append({
            'component': parts[i],
            'ip': str(parts[i + 1]),
            'port': parts[i + 2],
        })
    return candidates


def parse_image_attributes(text: Optional[str]) -> List[ParamMap]:
    """Parse an ``imageattrs`` attrs1/attrs2 string (RFC 6236).

    ``'[x=1280,y=720] [x=320,y=180]'`` -> ``[{'x': 1280, 'y': 720}, {'x': 320, 'y': 180}]``
    """
    if not text:
        return []
    result = []
    for item in text.split(' '):
        params: ParamMap = {}
        for expr in item[1:-1].split(','):
            _add_param(params, expr)
        result.append(params)
    return result


def parse_simulcast(text: Optional[str]) -> List[List[Dict[str, Any]]]:
    """Parse a simulcast stream list (RFC 8853), ``list1`` or ``list2``.

    Returns one list per stream, each holding the alternative formats of
    that stream. A leading ``~`` marks a paused format.
    """
    if not text:
        return []
    streams = []
    for stream in text.split(';'):
        formats = []
        for fmt in stream.split(','):
            paused = fmt.startswith('~')
            if paused:
                fmt = fmt[1:]
            formats.append({'scid': to_int_if_int(fmt), 'paused': paused})
        streams.append(formats)
    return streams
