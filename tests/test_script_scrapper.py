from unpacktools.script_scrapper import ScriptScrapper

PROXYS = ("eval(function(p,r,o,x,y,s){return p}('0 1=2',62,3,"
          "'var~b~3'.split('~'),0,{}))")


def html_page(*scripts):
    body = ''.join('<script type="text/javascript">{}</script>'.format(s)
                   for s in scripts)
    return '<html><head>{}</head><body><p>hi</p></body></html>'.format(body)


def test_parse_webpage(args, packed):
    scrapper = ScriptScrapper(args)
    html = html_page('var plain = 1;', packed, PROXYS)

    assert scrapper.parse_webpage(html) == ['var a=1', 'var b=3']


def test_parse_webpage_skips_broken_scripts(args, packed):
    scrapper = ScriptScrapper(args)
    broken = packed.replace("'var||a'", "'var|a'")

    assert scrapper.parse_webpage(html_page(broken, packed)) == ['var a=1']


def test_parse_webpage_exports_page_when_verbose(args, tmp_path):
    args.verbose = True
    scrapper = ScriptScrapper(args, 'test-page')

    assert scrapper.parse_webpage(html_page('var plain = 1;')) == []
    assert (tmp_path / 'test-page.html').exists()


def test_scrap_webpage(args, fake_session, packed):
    fake_session.pages['http://example.com/'] = html_page(packed)
    scrapper = ScriptScrapper(args)

    assert scrapper.scrap('http://example.com/') == ['var a=1']
    url, kwargs = scrapper.session.requests[0]
    assert url == 'http://example.com/'
    assert kwargs['headers']['Referer'] == 'http://example.com/'
    assert kwargs['timeout'] == args.scrapper_timeout


def test_scrap_script(args, fake_session, packed):
    fake_session.pages['http://example.com/app.js'] = 'x=0;' + packed
    scrapper = ScriptScrapper(args)

    assert scrapper.scrap('http://example.com/app.js') == ['x=0;var a=1']


def test_scrap_failed_request(args, fake_session):
    scrapper = ScriptScrapper(args)

    assert scrapper.scrap('http://example.com/missing.js') == []


def test_scrap_script_writing_script_tags(args, fake_session, packed):
    writer = 'document.write(\'<script src="x.js"></script>\');'
    fake_session.pages['http://example.com/loader.js'] = writer + packed
    scrapper = ScriptScrapper(args)

    assert scrapper.scrap('http://example.com/loader.js') == [
        writer + 'var a=1']
