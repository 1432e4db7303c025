"""sdper - grammar-driven SDP parser and writer

Public API:
  - parse / write: SDP text <-> SessionDescription
  - SessionDescription, MediaDescription: the parsed structure
  - Grammar, GrammarRule, GRAMMAR, CATCH_ALL: the rule table both directions use
  - parse_params, parse_payloads, parse_remote_candidates,
    parse_image_attributes, parse_simulcast: decoders for raw attribute values
  - to_int_if_int: the numeric coercion applied to every captured value
"""

from .parser import parse
from .writer import write, format_line
from .description import SessionDescription, MediaDescription
from .grammar import (
    CATCH_ALL,
    DEFAULT_INNER_ORDER,
    DEFAULT_OUTER_ORDER,
    GRAMMAR,
    Grammar,
    GrammarRule,
)
from .decoders import (
    parse_image_attributes,
    parse_params,
    parse_payloads,
    parse_remote_candidates,
    parse_simulcast,
)
from .utils import to_int_if_int
from .exceptions import *

__all__ = [
    "parse",
    "write",
    "format_line",
    "SessionDescription",
    "MediaDescription",
    "Grammar",
    "GrammarRule",
    "GRAMMAR",
    "CATCH_ALL",
    "DEFAULT_OUTER_ORDER",
    "DEFAULT_INNER_ORDER",
    "parse_params",
    "parse_payloads",
    "parse_remote_candidates",
    "parse_image_attributes",
    "parse_simulcast",
    "to_int_if_int",
    # exceptions
    "SDPError", "SDPValidationError", "SDPGrammarError"
]
