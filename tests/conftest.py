import pytest

from unpacktools import utils

PACKED = ("eval(function(p,a,c,k,e,r){e=String;return p}('0 2=1',62,3,"
          "'var||a'.split('|'),0,{}))")


class FakeResponse(object):

    def __init__(self, text, status_code=200):
        self.text = text
        self.status_code = status_code

    def close(self):
        pass


class FakeSession(object):
    """Stands in for requests.Session, serving canned pages by URL."""
    pages = {}

    def __init__(self):
        self.requests = []

    def mount(self, prefix, adapter):
        pass

    def get(self, url, **kwargs):
        self.requests.append((url, kwargs))
        if url not in self.pages:
            return FakeResponse('', 404)
        return FakeResponse(self.pages[url])

    def close(self):
        pass


@pytest.fixture
def packed():
    return PACKED


@pytest.fixture
def args(tmp_path):
    return utils.get_args([
        '--download-path', str(tmp_path),
        '--output-path', str(tmp_path / 'unpacked'),
        '--log-path', str(tmp_path / 'logs')])


@pytest.fixture
def fake_session(monkeypatch):
    monkeypatch.setattr('unpacktools.script_scrapper.requests.Session',
                        FakeSession)
    FakeSession.pages = {}
    return FakeSession
