import logging
from pathlib import Path

import pytest
from sdper.checker import build_arg_parser, check_file, check_sdp, main

FIXTURES = Path(__file__).parent / "fixtures"

CLEAN = "v=0\r\no=- 1 1 IN IP4 127.0.0.1\r\ns=-\r\nt=0 0\r\nm=audio 9 RTP/AVP 0\r\na=rtpmap:0 PCMU/8000\r\n"
LOSSY = "v=0\nx=unknown\ns=-\na=msid-semantic:WMS *\n"

def test_check_clean_document():
    report = check_sdp(CLEAN)
    assert report.ok
    assert report.missing == []
    assert report.new == []
    assert report.unrecognized == []

def test_check_reordered_lines_are_fine():
    # the writer puts t= after c=, only presence counts
    text = "v=0\r\ns=-\r\nt=0 0\r\nc=IN IP4 10.0.0.1\r\n"
    assert check_sdp(text).ok

def test_check_line_endings_and_blank_lines_ignored():
    assert check_sdp(CLEAN.replace("\r\n", "\n") + "\n\n").ok

def test_check_reports_lost_and_new_lines():
    report = check_sdp(LOSSY)
    assert not report.ok
    assert report.missing == [(1, 'x=unknown'), (3, 'a=msid-semantic:WMS *')]
    assert report.new == [(2, 'a=msid-semantic: WMS *')]

def test_check_reports_unrecognized_per_scope():
    text = "v=0\r\ns=-\r\na=tool:gst\r\nm=audio 9 RTP/AVP 0\r\na=x-foo:bar\r\n"
    report = check_sdp(text)
    assert report.ok
    assert report.unrecognized == [('session', 'tool:gst'), ('m=audio', 'x-foo:bar')]

def test_check_file():
    report = check_file(str(FIXTURES / "normal.sdp"))
    assert report.ok
    assert check_file(str(FIXTURES / "alac.sdp")).unrecognized[0][0] == 'm=audio'

def test_arg_parser():
    args = build_arg_parser().parse_args(["a.sdp", "b.sdp", "--debug"])
    assert args.files == ["a.sdp", "b.sdp"]
    assert args.debug
    assert not args.quiet
    assert args.encoding == "utf-8"

def test_arg_parser_debug_and_quiet_exclusive():
    with pytest.raises(SystemExit):
        build_arg_parser().parse_args(["a.sdp", "--debug", "--quiet"])

def test_main_requires_a_file():
    with pytest.raises(SystemExit):
        main([])

def test_main_ok(tmp_path, caplog):
    caplog.set_level(logging.INFO, logger="sdper")
    path = tmp_path / "clean.sdp"
    path.write_text(CLEAN)
    assert main([str(path)]) == 0
    assert any("verified" in r.getMessage() for r in caplog.records)

def test_main_ok_with_unrecognized_lines(caplog):
    caplog.set_level(logging.INFO, logger="sdper")
    assert main([str(FIXTURES / "onvif.sdp")]) == 0
    warnings = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
    assert warnings == ["unrecognized a=tool:libavformat 55.12.100 belonging to session"]
    assert any("but had 1 unrecognized line(s)" in r.getMessage() for r in caplog.records)

def test_main_reports_changes(tmp_path, caplog):
    caplog.set_level(logging.INFO, logger="sdper")
    path = tmp_path / "lossy.sdp"
    path.write_text(LOSSY)
    assert main([str(path)]) == 1
    errors = [r.getMessage() for r in caplog.records if r.levelno == logging.ERROR]
    assert "l1 lost (x=unknown)" in errors
    assert "l2 new (a=msid-semantic: WMS *)" in errors

def test_main_missing_file(tmp_path, caplog):
    caplog.set_level(logging.INFO, logger="sdper")
    path = tmp_path / "clean.sdp"
    path.write_text(CLEAN)
    assert main([str(tmp_path / "nope.sdp"), str(path)]) == 2
    assert any("cannot read" in r.getMessage() for r in caplog.records)

def test_main_read_error_wins_over_diff(tmp_path, caplog):
    caplog.set_level(logging.INFO, logger="sdper")
    path = tmp_path / "lossy.sdp"
    path.write_text(LOSSY)
    assert main([str(path), str(tmp_path / "nope.sdp")]) == 2

def test_main_bad_encoding(tmp_path, caplog):
    caplog.set_level(logging.INFO, logger="sdper")
    path = tmp_path / "clean.sdp"
    path.write_text(CLEAN)
    assert main([str(path), "--encoding", "no-such-codec"]) == 2

def test_main_quiet(tmp_path, caplog):
    caplog.set_level(logging.INFO, logger="sdper")
    path = tmp_path / "clean.sdp"
    path.write_text(CLEAN)
    assert main([str(path), "--quiet"]) == 0
    assert not [r for r in caplog.records if r.name.startswith("sdper")]

def test_main_debug(tmp_path, caplog):
    caplog.set_level(logging.DEBUG, logger="sdper")
    path = tmp_path / "clean.sdp"
    path.write_text(CLEAN)
    assert main([str(path), "--debug"]) == 0
    assert any(r.name == "sdper.writer" for r in caplog.records)
