"""Declarative SDP grammar: one list of line rules per line-type tag.

The same table drives both directions. The parser tries the rules of a
tag in order and applies the first whose pattern matches; the writer walks
the rules in order and renders every field that is set. More specific
patterns therefore have to come before general ones, and the ``a`` list
always ends with CATCH_ALL so no attribute line is lost.

Extending the grammar (e.g. for private attributes) means building a new
table from the built-in one::

    from sdper import GRAMMAR, GrammarRule, parse

    custom = GRAMMAR.with_rules('a', GrammarRule(
        pattern=r'^x-custom-tag:(\\d*)',
        scalar_field='x_custom_tag',
        template='x-custom-tag:%d',
    ))
    session = parse(text, grammar=custom)

Fields named by such rules that SessionDescription/MediaDescription do not
declare end up in their ``extensions`` dict.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Sequence, Tuple, Union

from .exceptions import SDPGrammarError
from .utils import validate_tag

Template = Union[str, Callable[[Any], str]]

# RFC 4566 line order
DEFAULT_OUTER_ORDER: Tuple[str, ...] = ('v', 'o', 's', 'i', 'u', 'e', 'p', 'c', 'b', 't', 'r', 'z', 'a')
DEFAULT_INNER_ORDER: Tuple[str, ...] = ('i', 'c', 'b', 'a')


@dataclass(frozen=True)
class GrammarRule:
    """One way a line under a given tag can look.

    Parameters:
        pattern: regex searched in the line content (text after ``x=``).
        scalar_field: store captures directly under this field; a repeated
            line overwrites it.
        collection_field: append one record per line to this list field.
        capture_names: names for capture groups 1..N. Without names the
            rule stores group 1 itself instead of a record.
        template: format string, or a function of the record returning the
            format string to use for that record.
    """

    pattern: Union[str, re.Pattern]
    template: Template
    scalar_field: Optional[str] = None
    collection_field: Optional[str] = None
    capture_names: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if isinstance(self.pattern, str):
            object.__setattr__(self, 'pattern', re.compile(self.pattern, re.ASCII))
        object.__setattr__(self, 'capture_names', tuple(self.capture_names))
        if self.scalar_field and self.collection_field:
            raise SDPGrammarError(
                f"Rule {self.pattern.pattern!r} sets both scalar_field and collection_field")
        if not self.capture_names and self.pattern.groups < 1:
            raise SDPGrammarError(
                f"Rule {self.pattern.pattern!r} has no capture names and no capture group")

    def match(self, content: str):
        return self.pattern.search(content)

    def template_for(self, record: Any) -> str:
        if callable(self.template):
            return self.template(record)
        return self.template


def _rtpmap(o: Mapping) -> str:
    if o.get('encoding') is not None:
        return 'rtpmap:%d %s/%s/%s'
    if o.get('rate') is not None:
        return 'rtpmap:%d %s/%s'
    return 'rtpmap:%d %s'


def _rtcp(o: Mapping) -> str:
    return 'rtcp:%d %s IP%d %s' if o.get('address') is not None else 'rtcp:%d'


def _rtcp_fb(o: Mapping) -> str:
    return 'rtcp-fb:%s %s %s' if o.get('subtype') is not None else 'rtcp-fb:%s %s'


def _extmap(o: Mapping) -> str:
    return ('extmap:%d'
            + ('/%s' if o.get('direction') is not None else '%v')
            + (' %s' if o.get('encrypt_uri') else '%v')
            + ' %s'
            + (' %s' if o.get('config') is not None else ''))


def _crypto(o: Mapping) -> str:
    return 'crypto:%d %s %s %s' if o.get('session_config') is not None else 'crypto:%d %s %s'


def _candidate(o: Mapping) -> str:
    line = 'candidate:%s %d %s %d %s %d typ %s'
    line += ' raddr %s rport %d' if o.get('raddr') is not None else '%v%v'
    # three optional chunks follow, %v keeps later ones aligned when one is missing
    line += ' tcptype %s' if o.get('tcptype') is not None else '%v'
    line += ' generation %d' if o.get('generation') is not None else '%v'
    line += ' network-id %d' if o.get('network_id') is not None else '%v'
    line += ' network-cost %d' if o.get('network_cost') is not None else '%v'
    return line


def _ssrc(o: Mapping) -> str:
    line = 'ssrc:%d'
    if o.get('attribute') is not None:
        line += ' %s'
        if o.get('value') is not None:
            line += ':%s'
    return line


def _sctpmap(o: Mapping) -> str:
    return 'sctpmap:%d %s %d' if o.get('max_message_size') is not None else 'sctpmap:%d %s'


def _rid(o: Mapping) -> str:
    return 'rid:%d %s %s' if o.get('params') else 'rid:%d %s'


def _imageattr(o: Mapping) -> str:
    return 'imageattr:%s %s %s' + (' %s %s' if o.get('dir2') else '')


def _simulcast(o: Mapping) -> str:
    return 'simulcast:%s %s' + (' %s %s' if o.get('dir2') else '')


def _ts_refclk(o: Mapping) -> str:
    return 'ts-refclk:%s' + ('=%s' if o.get('clksrc_ext') is not None else '')


def _mediaclk(o: Mapping) -> str:
    line = 'mediaclk:'
    line += 'id=%s %s' if o.get('id') is not None else '%v%s'
    line += '=%s' if o.get('media_clock_value') is not None else ''
    line += ' rate=%s' if o.get('rate_numerator') is not None else ''
    line += '/%s' if o.get('rate_denominator') is not None else ''
    return line


def _flag(pattern: str, scalar_field: str) -> GrammarRule:
    """Property attribute with no value, e.g. ``a=rtcp-mux``."""
    return GrammarRule(pattern=pattern, scalar_field=scalar_field, template='%s')


# any a= that nothing else understands is kept verbatim under ``invalid``
CATCH_ALL = GrammarRule(
    pattern=r'(.*)', collection_field='invalid', capture_names=('value',), template='%s')


_DEFAULT_RULES: Dict[str, Sequence[GrammarRule]] = {
    'v': [GrammarRule(pattern=r'^(\d*)$', scalar_field='version', template='%s')],
    'o': [
        # o=- 20518 0 IN IP4 203.0.113.1
        # session_id is usually too big to survive coercion and stays a str
        GrammarRule(
            pattern=r'^(\S*) (\d*) (\d*) (\S*) IP(\d) (\S*)',
            scalar_field='origin',
            capture_names=('username', 'session_id', 'session_version', 'net_type', 'ip_ver', 'address'),
            template='%s %s %d %s IP%d %s',
        ),
    ],
    's': [GrammarRule(pattern=r'(.*)', scalar_field='name', template='%s')],
    'i': [GrammarRule(pattern=r'(.*)', scalar_field='description', template='%s')],
    'u': [GrammarRule(pattern=r'(.*)', scalar_field='uri', template='%s')],
    'e': [GrammarRule(pattern=r'(.*)', scalar_field='email', template='%s')],
    'p': [GrammarRule(pattern=r'(.*)', scalar_field='phone', template='%s')],
    'z': [GrammarRule(pattern=r'(.*)', scalar_field='timezones', template='%s')],
    'r': [GrammarRule(pattern=r'(.*)', scalar_field='repeats', template='%s')],
    't': [
        # t=0 0
        GrammarRule(pattern=r'^(\d*) (\d*)', scalar_field='timing',
                    capture_names=('start', 'stop'), template='%d %d'),
    ],
    'c': [
        # c=IN IP4 10.47.197.26
        GrammarRule(pattern=r'^IN IP(\d) (\S*)', scalar_field='connection',
                    capture_names=('version', 'ip'), template='IN IP%d %s'),
    ],
    'b': [
        # b=AS:4000
        GrammarRule(pattern=r'^(TIAS|AS|CT|RR|RS):(\d*)', collection_field='bandwidth',
                    capture_names=('type', 'limit'), template='%s:%s'),
    ],
    'm': [
        # m=video 51744 RTP/AVP 126 97 98 34 31
        # fields land on the media block itself
        GrammarRule(pattern=r'^(\w*) (\d*) ([\w/]*)(?: (.*))?',
                    capture_names=('type', 'port', 'protocol', 'payloads'), template='%s %d %s %s'),
    ],
    'a': [
        # a=rtpmap:110 opus/48000/2
        GrammarRule(
            pattern=r'^rtpmap:(\d*) ([\w\-.]*)(?:\s*/(\d*)(?:\s*/(\S*))?)?',
            collection_field='rtp',
            capture_names=('payload', 'codec', 'rate', 'encoding'),
            template=_rtpmap,
        ),
        # a=fmtp:108 profile-level-id=24;object=23;bitrate=64000
        # a=fmtp:111 minptime=10; useinbandfec=1
        GrammarRule(pattern=r'^fmtp:(\d*) ([\S| ]*)', collection_field='fmtp',
                    capture_names=('payload', 'config'), template='fmtp:%d %s'),
        # a=control:streamid=0
        GrammarRule(pattern=r'^control:(.*)', scalar_field='control', template='control:%s'),
        # a=rtcp:65179 IN IP4 193.84.77.194
        GrammarRule(pattern=r'^rtcp:(\d*)(?: (\S*) IP(\d) (\S*))?', scalar_field='rtcp',
                    capture_names=('port', 'net_type', 'ip_ver', 'address'), template=_rtcp),
        # a=rtcp-fb:98 trr-int 100
        GrammarRule(pattern=r'^rtcp-fb:(\*|\d*) trr-int (\d*)', collection_field='rtcp_fb_trr_int',
                    capture_names=('payload', 'value'), template='rtcp-fb:%s trr-int %d'),
        # a=rtcp-fb:98 nack rpsi
        GrammarRule(pattern=r'^rtcp-fb:(\*|\d*) ([\w_-]*)(?: ([\w_-]*))?', collection_field='rtcp_fb',
                    capture_names=('payload', 'type', 'subtype'), template=_rtcp_fb),
        # a=extmap:2 urn:ietf:params:rtp-hdrext:toffset
        # a=extmap:1/recvonly URI-gps-string
        # a=extmap:3 urn:ietf:params:rtp-hdrext:encrypt urn:ietf:params:rtp-hdrext:smpte-tc 25@600/24
        GrammarRule(
            pattern=r'^extmap:(\d+)(?:/(\w+))?(?: (urn:ietf:params:rtp-hdrext:encrypt))? (\S*)(?: (\S*))?',
            collection_field='ext',
            capture_names=('value', 'direction', 'encrypt_uri', 'uri', 'config'),
            template=_extmap,
        ),
        _flag(r'^(extmap-allow-mixed)', 'extmap_allow_mixed'),
        # a=crypto:1 AES_CM_128_HMAC_SHA1_80 inline:PS1uQCVeeCFCanVmcjkpPywjNWhcYD0mXXtxaVBR|2^20|1:32
        GrammarRule(pattern=r'^crypto:(\d*) ([\w_]*) (\S*)(?: (\S*))?', collection_field='crypto',
                    capture_names=('id', 'suite', 'config', 'session_config'), template=_crypto),
        # a=setup:actpass
        GrammarRule(pattern=r'^setup:(\w*)', scalar_field='setup', template='setup:%s'),
        # a=connection:new
        GrammarRule(pattern=r'^connection:(new|existing)', scalar_field='connection_type',
                    template='connection:%s'),
        # a=mid:1
        GrammarRule(pattern=r'^mid:([^\s]*)', scalar_field='mid', template='mid:%s'),
        # a=msid:0c8b064d-d807-43b4-b434-f92a889d8587 98178685-d409-46e0-8e16-7ef0db0db64a
        GrammarRule(pattern=r'^msid:([\w-]+)(?: ([\w-]+))?', collection_field='msid',
                    capture_names=('id', 'appdata'), template='msid:%s %s'),
        # a=ptime:20
        GrammarRule(pattern=r'^ptime:(\d*(?:\.\d*)*)', scalar_field='ptime', template='ptime:%d'),
        # a=maxptime:60
        GrammarRule(pattern=r'^maxptime:(\d*(?:\.\d*)*)', scalar_field='maxptime', template='maxptime:%d'),
        # a=sendrecv
        GrammarRule(pattern=r'^(sendrecv|recvonly|sendonly|inactive)', scalar_field='direction',
                    template='%s'),
        _flag(r'^(ice-lite)', 'icelite'),
        # a=ice-ufrag:F7gI
        GrammarRule(pattern=r'^ice-ufrag:(\S*)', scalar_field='ice_ufrag', template='ice-ufrag:%s'),
        # a=ice-pwd:x9cml/YzichV2+XlhiMu8g
        GrammarRule(pattern=r'^ice-pwd:(\S*)', scalar_field='ice_pwd', template='ice-pwd:%s'),
        # a=fingerprint:SHA-1 00:11:22:33:44:55:66:77:88:99:AA:BB:CC:DD:EE:FF:00:11:22:33
        GrammarRule(pattern=r'^fingerprint:(\S*) (\S*)', scalar_field='fingerprint',
                    capture_names=('type', 'hash'), template='fingerprint:%s %s'),
        # a=candidate:0 1 UDP 2113667327 203.0.113.1 54400 typ host
        # a=candidate:3289912957 2 tcp 1845501695 193.84.77.194 60017 typ srflx raddr 192.168.34.75 rport 60017 tcptype passive generation 0 network-id 3 network-cost 10
        GrammarRule(
            pattern=(r'^candidate:(\S*) (\d*) (\S*) (\d*) (\S*) (\d*) typ (\S*)'
                     r'(?: raddr (\S*) rport (\d*))?'
                     r'(?: tcptype (\S*))?'
                     r'(?: generation (\d*))?'
                     r'(?: network-id (\d*))?'
                     r'(?: network-cost (\d*))?'),
            collection_field='candidates',
            capture_names=('foundation', 'component', 'transport', 'priority', 'ip', 'port', 'type',
                           'raddr', 'rport', 'tcptype', 'generation', 'network_id', 'network_cost'),
            template=_candidate,
        ),
        # kept after candidate so it is written after the candidate lines
        _flag(r'^(end-of-candidates)', 'end_of_candidates'),
        # a=remote-candidates:1 203.0.113.1 54400 2 203.0.113.1 54401
        GrammarRule(pattern=r'^remote-candidates:(.*)', scalar_field='remote_candidates',
                    template='remote-candidates:%s'),
        # a=ice-options:google-ice
        GrammarRule(pattern=r'^ice-options:(\S*)', scalar_field='ice_options', template='ice-options:%s'),
        # a=ssrc:2566107569 cname:t9YU8M1UxTF8Y1A1
        GrammarRule(pattern=r'^ssrc:(\d*) ([\w_-]*)(?::(.*))?', collection_field='ssrcs',
                    capture_names=('id', 'attribute', 'value'), template=_ssrc),
        # a=ssrc-group:FEC-FR 3004364195 1080772241
        # semantics is an RFC 4566 token
        GrammarRule(pattern=r'^ssrc-group:([\x21\x23\x24\x25\x26\x27\x2A\x2B\x2D\x2E\w]*) (.*)',
                    collection_field='ssrc_groups', capture_names=('semantics', 'ssrcs'),
                    template='ssrc-group:%s %s'),
        # a=msid-semantic: WMS Jvlam5X3SX1OP6pn20zWogvaKJz5Hjf9OnlV
        # written with the space after the colon
        GrammarRule(pattern=r'^msid-semantic:\s?(\w*) (\S*)', scalar_field='msid_semantic',
                    capture_names=('semantic', 'token'), template='msid-semantic: %s %s'),
        # a=group:BUNDLE audio video
        GrammarRule(pattern=r'^group:(\w*) (.*)', collection_field='groups',
                    capture_names=('type', 'mids'), template='group:%s %s'),
        _flag(r'^(rtcp-mux)', 'rtcp_mux'),
        _flag(r'^(rtcp-rsize)', 'rtcp_rsize'),
        # a=sctpmap:5000 webrtc-datachannel 1024
        GrammarRule(pattern=r'^sctpmap:([\w_/]*) (\S*)(?: (\S*))?', scalar_field='sctpmap',
                    capture_names=('sctpmap_number', 'app', 'max_message_size'), template=_sctpmap),
        # a=x-google-flag:conference
        GrammarRule(pattern=r'^x-google-flag:([^\s]*)', scalar_field='x_google_flag',
                    template='x-google-flag:%s'),
        # a=rid:1 send max-width=1280;max-height=720;max-fps=30;depend=0
        GrammarRule(pattern=r'^rid:([\w]+) (\w+)(?: ([\S| ]*))?', collection_field='rids',
                    capture_names=('id', 'direction', 'params'), template=_rid),
        # a=imageattr:97 send [x=800,y=640,sar=1.1,q=0.6] [x=480,y=320] recv [x=330,y=250]
        # a=imageattr:* send [x=800,y=640] recv *
        GrammarRule(
            pattern=(r'^imageattr:(\d+|\*)'
                     r'[\s\t]+(send|recv)[\s\t]+(\*|\[\S+\](?:[\s\t]+\[\S+\])*)'
                     r'(?:[\s\t]+(recv|send)[\s\t]+(\*|\[\S+\](?:[\s\t]+\[\S+\])*))?'),
            collection_field='imageattrs',
            capture_names=('pt', 'dir1', 'attrs1', 'dir2', 'attrs2'),
            template=_imageattr,
        ),
        # a=simulcast:send 1,2,3;~4,~5 recv 6;~7,~8
        GrammarRule(
            pattern=(r'^simulcast:'
                     r'(send|recv) ([a-zA-Z0-9\-_~;,]+)'
                     r'(?:\s?(send|recv) ([a-zA-Z0-9\-_~;,]+))?'
                     r'$'),
            scalar_field='simulcast',
            capture_names=('dir1', 'list1', 'dir2', 'list2'),
            template=_simulcast,
        ),
        # draft-ietf-mmusic-sdp-simulcast-03, as sent by Firefox
        # a=simulcast: recv pt=97;98 send pt=97
        GrammarRule(pattern=r'^simulcast:[\s\t]+([\S+\s\t]+)$', scalar_field='simulcast_03',
                    capture_names=('value',), template='simulcast: %s'),
        # a=framerate:29.97
        GrammarRule(pattern=r'^framerate:(\d+(?:$|\.\d+))', scalar_field='framerate',
                    template='framerate:%s'),
        # RFC 4570
        # a=source-filter: incl IN IP4 239.5.2.31 10.1.15.5
        GrammarRule(
            pattern=r'^source-filter: *(excl|incl) (\S*) (IP4|IP6|\*) (\S*) (.*)',
            scalar_field='source_filter',
            capture_names=('filter_mode', 'net_type', 'address_types', 'dest_address', 'src_list'),
            template='source-filter: %s %s %s %s %s',
        ),
        _flag(r'^(bundle-only)', 'bundle_only'),
        # a=label:1
        GrammarRule(pattern=r'^label:(.+)', scalar_field='label', template='label:%s'),
        # RFC 8841 SCTP over DTLS
        GrammarRule(pattern=r'^sctp-port:(\d+)$', scalar_field='sctp_port', template='sctp-port:%s'),
        GrammarRule(pattern=r'^max-message-size:(\d+)$', scalar_field='max_message_size',
                    template='max-message-size:%s'),
        # RFC 7273
        # a=ts-refclk:ptp=IEEE1588-2008:39-A7-94-FF-FE-07-CB-D0:37
        GrammarRule(pattern=r'^ts-refclk:([^\s=]*)(?:=(\S*))?', collection_field='ts_ref_clocks',
                    capture_names=('clksrc', 'clksrc_ext'), template=_ts_refclk),
        # a=mediaclk:direct=963214424
        GrammarRule(
            pattern=r'^mediaclk:(?:id=(\S*))? *([^\s=]*)(?:=(\S*))?(?: *rate=(\d+)/(\d+))?',
            scalar_field='media_clk',
            capture_names=('id', 'media_clock_name', 'media_clock_value', 'rate_numerator',
                           'rate_denominator'),
            template=_mediaclk,
        ),
        # a=keywds:keywords
        GrammarRule(pattern=r'^keywds:(.+)$', scalar_field='keywords', template='keywds:%s'),
        # a=content:main
        GrammarRule(pattern=r'^content:(.+)', scalar_field='content', template='content:%s'),
        # BFCP, RFC 4583
        GrammarRule(pattern=r'^floorctrl:(c-only|s-only|c-s)', scalar_field='bfcp_floor_ctrl',
                    template='floorctrl:%s'),
        GrammarRule(pattern=r'^confid:(\d+)', scalar_field='bfcp_conf_id', template='confid:%s'),
        GrammarRule(pattern=r'^userid:(\d+)', scalar_field='bfcp_user_id', template='userid:%s'),
        GrammarRule(pattern=r'^floorid:(.+) (?:m-stream|mstrm):(.+)', scalar_field='bfcp_floor_id',
                    capture_names=('id', 'm_stream'), template='floorid:%s mstrm:%s'),
        CATCH_ALL,
    ],
}


class Grammar:
    """Read-only table of line rules keyed by line-type tag.

    Instances are never changed after construction; with_rules() and copy()
    build new ones, so a grammar can be shared between threads freely.
    """

    def __init__(self, rules: Mapping[str, Iterable[GrammarRule]]):
        table: Dict[str, Tuple[GrammarRule, ...]] = {}
        for tag, tag_rules in rules.items():
            if not validate_tag(tag):
                raise SDPGrammarError(f"Invalid line tag: {tag!r}")
            tag_rules = tuple(tag_rules)
            for rule in tag_rules:
                if not isinstance(rule, GrammarRule):
                    raise SDPGrammarError(f"Rules for {tag!r} must be GrammarRule instances")
            table[tag] = tag_rules
        if table.get('a') and table['a'][-1] is not CATCH_ALL:
            raise SDPGrammarError("The 'a' rules must end with the CATCH_ALL rule")
        self._rules = table

    def rules_for(self, tag: str) -> Tuple[GrammarRule, ...]:
        """Rules for *tag* in match order; empty if the tag is unknown."""
        return self._rules.get(tag, ())

    def tags(self) -> Tuple[str, ...]:
        return tuple(self._rules)

    def __contains__(self, tag: str) -> bool:
        return tag in self._rules

    def with_rules(self, tag: str, *rules: GrammarRule) -> "Grammar":
        """Return a new grammar with *rules* added after the existing ones for *tag*.

        For ``a`` they go just before CATCH_ALL, otherwise they could never
        match.
        """
        table = dict(self._rules)
        existing = list(table.get(tag, ()))
        if existing and existing[-1] is CATCH_ALL:
            existing[-1:-1] = rules
        elif tag == 'a':
            existing.extend(rules)
            existing.append(CATCH_ALL)
        else:
            existing.extend(rules)
        table[tag] = existing
        return Grammar(table)

    def copy(self) -> "Grammar":
        return Grammar(self._rules)

    def __repr__(self) -> str:
        count = sum(len(r) for r in self._rules.values())
        return f"<Grammar tags={''.join(self._rules)!r} rules={count}>"


GRAMMAR = Grammar(_DEFAULT_RULES)
