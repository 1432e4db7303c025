"""Round-trip verifier: parse and rewrite SDP files and report what changed.

Usage::

    sdper-check offer.sdp answer.sdp [--debug]

Exit status is 0 when every file survives parse -> write with the same set
of lines, 1 when some file gained or lost lines, 2 on usage or read errors.
Lines may move around (the writer uses its own order), only presence counts.
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .parser import parse
from .utils import split_lines
from .writer import write

log = logging.getLogger("sdper.checker")


@dataclass
class CheckReport:
    missing: List[Tuple[int, str]] = field(default_factory=list)
    new: List[Tuple[int, str]] = field(default_factory=list)
    # (scope, value) of attribute lines only the catch-all understood
    unrecognized: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.missing and not self.new


def _content_lines(text: str) -> List[str]:
    return [line for line in split_lines(text) if line]


def check_sdp(sdp_text: str) -> CheckReport:
    """Round-trip *sdp_text* and compare the line sets."""
    session = parse(sdp_text)
    rewritten = write(session)
    report = CheckReport()

    for item in session.invalid or []:
        report.unrecognized.append(('session', str(item.get('value'))))
    for media in session.media:
        for item in media.invalid or []:
            report.unrecognized.append((f"m={media.type}", str(item.get('value'))))

    original_lines = _content_lines(sdp_text)
    written_lines = _content_lines(rewritten)
    original_set, written_set = set(original_lines), set(written_lines)
    report.missing = [(i, line) for i, line in enumerate(original_lines) if line not in written_set]
    report.new = [(i, line) for i, line in enumerate(written_lines) if line not in original_set]
    return report


def check_file(path: str, encoding: str = 'utf-8') -> CheckReport:
    with open(path, encoding=encoding) as fh:
        return check_sdp(fh.read())


def _log_report(path: str, report: CheckReport) -> None:
    for scope, value in report.unrecognized:
        log.warning('unrecognized a=%s belonging to %s', value, scope)
    for i, line in report.missing:
        log.error('l%d lost (%s)', i, line)
    for i, line in report.new:
        log.error('l%d new (%s)', i, line)

    copied = f"{len(report.unrecognized)} unrecognized line(s) copied blindly"
    if not report.ok:
        log.warning('%s changes during transform:', path)
        log.warning('%d missing line(s), %d new line(s)%s', len(report.missing), len(report.new),
                    f", {copied}" if report.unrecognized else '')
    else:
        log.info('%s verified%s', path, f", but had {copied}" if report.unrecognized else '')


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='sdper-check',
        description='Verify that SDP files survive a parse/write round trip.')
    parser.add_argument('files', nargs='+', metavar='FILE', help='SDP file(s) to check')
    parser.add_argument('--encoding', default='utf-8', help='file encoding (default: utf-8)')
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument('--debug', action='store_true', help='log parser and writer details')
    verbosity.add_argument('--quiet', action='store_true', help='only log errors')
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    logging.basicConfig(format='[%(levelname)s] %(message)s', level=logging.INFO)
    package_logger = logging.getLogger('sdper')
    if args.debug:
        package_logger.setLevel(logging.DEBUG)
    elif args.quiet:
        package_logger.setLevel(logging.ERROR)

    status = 0
    for path in args.files:
        try:
            report = check_file(path, args.encoding)
        except (OSError, UnicodeDecodeError, LookupError) as e:
            log.error('cannot read %s: %s', path, e)
            status = 2
            continue
        _log_report(path, report)
        if not report.ok and status == 0:
            status = 1
    return status


if __name__ == '__main__':
    sys.exit(main())
