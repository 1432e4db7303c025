"""Structured session and media descriptions produced by parse().

Fields mirror the rule fields of the built-in grammar. A field is ``None``
until a line for it was seen, so "absent" and "stated but empty" (``s= ``
gives ``name == ' '``) stay distinguishable. Rules with capture names store
plain dicts keyed by those names; collection fields hold lists of them in
order of appearance.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, fields
from functools import lru_cache
from typing import Any, Dict, FrozenSet, List, Optional, Union

from .decoders import parse_payloads

Value = Union[int, float, str]
Record = Dict[str, Value]

# never filled from grammar rules, whatever a custom rule is called
_RESERVED = frozenset(('extensions', 'media'))


@lru_cache(maxsize=None)
def _rule_fields(cls: type) -> FrozenSet[str]:
    return frozenset(f.name for f in fields(cls)) - _RESERVED


@dataclass
class _Description:
    # i=, c=, b= may appear at either level
    description: Optional[str] = None
    connection: Optional[Record] = None
    bandwidth: Optional[List[Record]] = None

    rtp: Optional[List[Record]] = None
    fmtp: Optional[List[Record]] = None
    control: Optional[str] = None
    rtcp: Optional[Record] = None
    rtcp_fb_trr_int: Optional[List[Record]] = None
    rtcp_fb: Optional[List[Record]] = None
    ext: Optional[List[Record]] = None
    extmap_allow_mixed: Optional[str] = None
    crypto: Optional[List[Record]] = None
    setup: Optional[str] = None
    connection_type: Optional[str] = None
    mid: Optional[Value] = None
    msid: Optional[List[Record]] = None
    ptime: Optional[Value] = None
    maxptime: Optional[Value] = None
    direction: Optional[str] = None
    icelite: Optional[str] = None
    ice_ufrag: Optional[Value] = None
    ice_pwd: Optional[Value] = None
    fingerprint: Optional[Record] = None
    candidates: Optional[List[Record]] = None
    end_of_candidates: Optional[str] = None
    remote_candidates: Optional[str] = None
    ice_options: Optional[str] = None
    ssrcs: Optional[List[Record]] = None
    ssrc_groups: Optional[List[Record]] = None
    msid_semantic: Optional[Record] = None
    groups: Optional[List[Record]] = None
    rtcp_mux: Optional[str] = None
    rtcp_rsize: Optional[str] = None
    sctpmap: Optional[Record] = None
    x_google_flag: Optional[str] = None
    rids: Optional[List[Record]] = None
    imageattrs: Optional[List[Record]] = None
    simulcast: Optional[Record] = None
    simulcast_03: Optional[Record] = None
    framerate: Optional[Value] = None
    source_filter: Optional[Record] = None
    bundle_only: Optional[str] = None
    label: Optional[Value] = None
    sctp_port: Optional[int] = None
    max_message_size: Optional[int] = None
    ts_ref_clocks: Optional[List[Record]] = None
    media_clk: Optional[Record] = None
    keywords: Optional[Value] = None
    content: Optional[Value] = None
    bfcp_floor_ctrl: Optional[str] = None
    bfcp_conf_id: Optional[int] = None
    bfcp_user_id: Optional[int] = None
    bfcp_floor_id: Optional[Record] = None
    # a= lines nothing else matched, as {'value': <line content>}
    invalid: Optional[List[Record]] = None
    # fields of custom grammar rules without a declared attribute
    extensions: Dict[str, Any] = field(default_factory=dict)

    def get_field(self, name: str) -> Any:
        if name in _rule_fields(type(self)):
            return getattr(self, name)
        return self.extensions.get(name)

    def set_field(self, name: str, value: Any) -> None:
        if name in _rule_fields(type(self)):
            setattr(self, name, value)
        else:
            self.extensions[name] = value

    def to_dict(self) -> Dict[str, Any]:
        """Return the fields that are set, as plain data."""
        out: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None or (f.name == 'extensions' and not value):
                continue
            if f.name == 'media':
                out['media'] = [m.to_dict() for m in value]
            else:
                out[f.name] = copy.deepcopy(value)
        return out


@dataclass
class MediaDescription(_Description):
    """One ``m=`` block and the lines that followed it."""

    type: Optional[str] = None
    port: Optional[Value] = None
    protocol: Optional[str] = None
    payloads: Optional[Value] = None
    rtp: List[Record] = field(default_factory=list)
    fmtp: List[Record] = field(default_factory=list)

    @property
    def payload_types(self) -> List[Value]:
        """The m-line payload list split into (numeric where possible) items."""
        return parse_payloads(self.payloads)


@dataclass
class SessionDescription(_Description):
    """Root of a parsed document; media blocks are kept in source order."""

    version: Optional[Value] = None
    origin: Optional[Record] = None
    name: Optional[Value] = None
    uri: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    timezones: Optional[str] = None
    repeats: Optional[str] = None
    timing: Optional[Record] = None
    media: List[MediaDescription] = field(default_factory=list)
