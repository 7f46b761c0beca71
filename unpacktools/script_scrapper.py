#!/usr/bin/python
# -*- coding: utf-8 -*-

import logging
import os
import requests

from bs4 import BeautifulSoup
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .packer import UnpackingError, deobfuscate
from .utils import export_file

log = logging.getLogger(__name__)


class ScriptScrapper(object):
    REFERER = 'http://google.com'
    USER_AGENT = ('Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:76.0) '
                  'Gecko/20100101 Firefox/76.0')
    CLIENT_HEADERS = {
        'User-Agent': USER_AGENT,
        'Accept-Language': 'en-US,en',
        'Accept-Encoding': 'gzip, deflate',
        'Referer': REFERER
    }
    STATUS_FORCELIST = [500, 502, 503, 504]

    def __init__(self, args, name='script-scrapper'):
        self.timeout = args.scrapper_timeout
        self.proxy = args.scrapper_proxy
        self.debug = args.verbose
        self.download_path = args.download_path

        self.name = name
        log.info('Initialized script scrapper: %s.', name)

        self.session = None
        self.retries = Retry(
            total=args.scrapper_retries,
            backoff_factor=args.scrapper_backoff_factor,
            status_forcelist=self.STATUS_FORCELIST)

    def setup_session(self):
        self.session = requests.Session()
        # Mount handler on both HTTP & HTTPS.
        self.session.mount('http://', HTTPAdapter(max_retries=self.retries))
        self.session.mount('https://', HTTPAdapter(max_retries=self.retries))

    def request_url(self, url, referer=None):
        content = None
        try:
            # Setup request headers.
            headers = self.CLIENT_HEADERS.copy()
            if referer:
                headers['Referer'] = referer

            response = self.session.get(
                url,
                proxies={'http': self.proxy, 'https': self.proxy},
                timeout=self.timeout,
                headers=headers)

            if response.status_code == 200:
                content = response.text
            else:
                log.warning('Request to %s returned status code %d.',
                            url, response.status_code)

            response.close()
        except Exception as e:
            log.exception('Failed to request URL "%s": %s', url, e)

        return content

    def export_webpage(self, soup, filename):
        content = soup.prettify()
        filename = os.path.join(self.download_path, filename)

        export_file(filename, content)
        log.debug('Web page output saved to: %s', filename)

    def scrap(self, url):
        """Download `url` and return the list of unpacked scripts found."""
        self.setup_session()
        scripts = []

        content = self.request_url(url, url)
        if content is None:
            log.error('Failed to download webpage: %s', url)
        elif '<script' in content.lower():
            log.info('Parsing scripts from webpage: %s', url)
            scripts.extend(self.parse_webpage(content))

        # Plain scripts may still mention <script> in their strings.
        if content is not None and not scripts:
            log.info('Unpacking script from: %s', url)
            unpacked = self.unpack_script(content)
            if unpacked is not None:
                scripts.append(unpacked)

        self.session.close()
        return scripts

    def parse_webpage(self, html):
        scripts = []
        soup = BeautifulSoup(html, 'html.parser')

        for script in soup.find_all('script'):

            code = script.string
            if not code:
                continue

            unpacked = self.unpack_script(code.strip())
            if unpacked is not None:
                scripts.append(unpacked)

        if not scripts:
            log.warning('Unable to find packed scripts in webpage.')

            if self.debug:
                self.export_webpage(soup, self.name + '.html')

        log.info('Unpacked %d scripts from webpage.', len(scripts))
        return scripts

    def unpack_script(self, code):
        try:
            unpacked = deobfuscate(code)
        except UnpackingError as e:
            log.warning('Failed to unpack script: %s', e)
            return None

        if unpacked is None:
            log.debug('Script is not packed, skipping it.')
        return unpacked
