import pytest

import start


def write(path, content):
    path.write_text(content, encoding='utf-8')
    return str(path)


def test_unpack_file(args, tmp_path, packed):
    start.setup_workspace(args)
    filename = write(tmp_path / 'packed.js', packed)

    assert start.unpack_file(args, filename)
    output = tmp_path / 'unpacked' / 'packed.unpacked.js'
    assert output.read_text(encoding='utf-8') == 'var a=1'


def test_unpack_plain_file(args, tmp_path):
    start.setup_workspace(args)
    filename = write(tmp_path / 'plain.js', 'var a=1;')

    assert start.unpack_file(args, filename)
    output = tmp_path / 'unpacked' / 'plain.unpacked.js'
    assert output.read_text(encoding='utf-8') == 'var a=1;'

    args.skip_plain = True
    output.unlink()
    assert start.unpack_file(args, filename)
    assert not output.exists()


def test_unpack_broken_file(args, tmp_path, packed):
    start.setup_workspace(args)
    filename = write(tmp_path / 'broken.js',
                     packed.replace("'var||a'", "'var|a'"))

    assert not start.unpack_file(args, filename)


def test_work_to_stdout(args, tmp_path, capsys, fake_session, packed):
    args.output_stdout = True
    args.file = [write(tmp_path / 'packed.js', packed)]
    fake_session.pages['http://example.com/a.js'] = packed
    args.url = ['http://example.com/a.js', 'http://example.com/missing.js']

    assert start.work(args)
    assert capsys.readouterr().out == 'var a=1\nvar a=1\n'


def test_check_configuration_requires_input(args):
    with pytest.raises(SystemExit):
        start.check_configuration(args)


def test_check_configuration_overrides(args):
    args.url = ['http://example.com']
    args.scrapper_timeout = 0
    args.scrapper_retries = -1
    args.scrapper_proxy = 'None'

    start.check_configuration(args)

    assert args.scrapper_timeout == 5
    assert args.scrapper_retries == 0
    assert args.scrapper_proxy is None


def test_work_survives_output_errors(args, fake_session, packed,
                                     monkeypatch):
    saved = []

    def fail(filename, content):
        saved.append(filename)
        raise IOError('disk full')

    monkeypatch.setattr(start.utils, 'export_file', fail)
    fake_session.pages['http://example.com/a.js'] = packed
    fake_session.pages['http://example.com/b.js'] = packed
    args.url = ['http://example.com/a.js', 'http://example.com/b.js']
    start.setup_workspace(args)

    assert not start.work(args)
    assert len(saved) == 2
