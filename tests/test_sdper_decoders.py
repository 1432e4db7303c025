from sdper import (
    parse,
    parse_image_attributes,
    parse_params,
    parse_payloads,
    parse_remote_candidates,
    parse_simulcast,
)

def test_parse_params_coerces_numbers():
    assert parse_params("profile-level-id=4d0028;packetization-mode=1") == {
        'profile-level-id': '4d0028',
        'packetization-mode': 1,
    }

def test_parse_params_space_after_separator():
    assert parse_params("minptime=10; useinbandfec=1") == {'minptime': 10, 'useinbandfec': 1}

def test_parse_params_bare_key():
    assert parse_params("interlace;depth=10") == {'interlace': None, 'depth': 10}

def test_parse_params_splits_on_first_equals():
    assert parse_params("key=a=b") == {'key': 'a=b'}

def test_parse_params_skips_single_character_tokens():
    assert parse_params("x;y=1") == {'y': 1}

def test_parse_params_empty():
    assert parse_params("") == {}
    assert parse_params(None) == {}

def test_parse_payloads():
    assert parse_payloads("97 98") == [97, 98]
    assert parse_payloads(111) == [111]
    assert parse_payloads("0") == [0]

def test_parse_payloads_non_numeric():
    assert parse_payloads("*") == ['*']
    assert parse_payloads("webrtc-datachannel") == ['webrtc-datachannel']

def test_parse_payloads_empty():
    assert parse_payloads("") == []
    assert parse_payloads(None) == []

def test_parse_remote_candidates():
    text = "1 203.0.113.1 54400 2 203.0.113.1 54401"
    assert parse_remote_candidates(text) == [
        {'component': 1, 'ip': '203.0.113.1', 'port': 54400},
        {'component': 2, 'ip': '203.0.113.1', 'port': 54401},
    ]

def test_parse_remote_candidates_incomplete_triple_dropped():
    assert parse_remote_candidates("1 203.0.113.1 54400 2 203.0.113.1") == [
        {'component': 1, 'ip': '203.0.113.1', 'port': 54400},
    ]
    assert parse_remote_candidates("1 203.0.113.1") == []
    assert parse_remote_candidates("") == []

def test_parse_remote_candidates_from_session():
    session = parse("v=0\r\nm=audio 9 RTP/AVP 0\r\na=remote-candidates:1 10.0.0.1 9000\r\n")
    assert parse_remote_candidates(session.media[0].remote_candidates) == [
        {'component': 1, 'ip': '10.0.0.1', 'port': 9000},
    ]

def test_parse_image_attributes():
    assert parse_image_attributes("[x=1280,y=720] [x=320,y=180]") == [
        {'x': 1280, 'y': 720},
        {'x': 320, 'y': 180},
    ]

def test_parse_image_attributes_fractional_values():
    assert parse_image_attributes("[x=800,y=640,sar=1.1,q=0.6]") == [
        {'x': 800, 'y': 640, 'sar': 1.1, 'q': 0.6},
    ]

def test_parse_image_attributes_from_session(load_sdp):
    video = parse(load_sdp("simulcast.sdp")).media[1]
    first = video.imageattrs[0]
    assert parse_image_attributes(first['attrs1']) == [{'x': 1280, 'y': 720}]
    assert parse_image_attributes(first['attrs2']) == [
        {'x': 1280, 'y': 720},
        {'x': 320, 'y': 180},
        {'x': 160, 'y': 90},
    ]

def test_parse_simulcast():
    assert parse_simulcast("1,~4;2;3") == [
        [{'scid': 1, 'paused': False}, {'scid': 4, 'paused': True}],
        [{'scid': 2, 'paused': False}],
        [{'scid': 3, 'paused': False}],
    ]

def test_parse_simulcast_rid_names():
    assert parse_simulcast("~hi;lo") == [
        [{'scid': 'hi', 'paused': True}],
        [{'scid': 'lo', 'paused': False}],
    ]

def test_parse_simulcast_empty():
    assert parse_simulcast("") == []
    assert parse_simulcast(None) == []
