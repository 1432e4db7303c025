from pathlib import Path

import pytest

FIXTURES = Path(__file__).parent / "fixtures"


def read_fixture(name):
    return (FIXTURES / name).read_text(encoding="utf-8")


@pytest.fixture
def load_sdp():
    return read_fixture


@pytest.fixture(params=sorted(p.name for p in FIXTURES.glob("*.sdp")))
def sdp_file(request):
    return request.param
