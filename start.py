#!/usr/bin/python
# -*- coding: utf-8 -*-

import logging
import os
import sys
import time

from unpacktools import utils
from unpacktools.packer import UnpackingError, deobfuscate
from unpacktools.script_scrapper import ScriptScrapper

log = logging.getLogger()


class LogFilter(logging.Filter):

    def __init__(self, level):
        self.level = level

    def filter(self, record):
        return record.levelno < self.level


def setup_workspace(args):
    if not os.path.exists(args.log_path):
        # Create directory for log files.
        os.mkdir(args.log_path)

    if not os.path.exists(args.download_path):
        # Create directory for downloaded files.
        os.mkdir(args.download_path)

    if not args.output_stdout and not os.path.exists(args.output_path):
        # Create directory for unpacked scripts.
        os.mkdir(args.output_path)


def configure_logging(args, log):
    date = time.strftime('%Y%m%d_%H%M')
    filename = os.path.join(args.log_path, '{}-unpacker.log'.format(date))
    filelog = logging.FileHandler(filename)
    formatter = logging.Formatter(
        '%(asctime)s [%(module)14s][%(levelname)8s] %(message)s')
    filelog.setFormatter(formatter)
    log.addHandler(filelog)

    if args.verbose:
        log.setLevel(logging.DEBUG)
        log.debug('Running in verbose mode (-v).')
    else:
        log.setLevel(logging.INFO)

    logging.getLogger('requests').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.ERROR)

    # Unpacked scripts go to stdout when requested, keep it clean.
    if args.output_stdout:
        stderr_hdlr = logging.StreamHandler(sys.stderr)
        stderr_hdlr.setFormatter(formatter)
        log.addHandler(stderr_hdlr)
        return

    # Redirect messages lower than WARNING to stdout
    stdout_hdlr = logging.StreamHandler(sys.stdout)
    stdout_hdlr.setFormatter(formatter)
    log_filter = LogFilter(logging.WARNING)
    stdout_hdlr.addFilter(log_filter)
    stdout_hdlr.setLevel(5)

    # Redirect messages equal or higher than WARNING to stderr
    stderr_hdlr = logging.StreamHandler(sys.stderr)
    stderr_hdlr.setFormatter(formatter)
    stderr_hdlr.setLevel(logging.WARNING)

    log.addHandler(stdout_hdlr)
    log.addHandler(stderr_hdlr)


def check_configuration(args):
    if not args.file and not args.url:
        log.error('You must supply a javascript file or an URL to unpack.')
        sys.exit(1)

    for filename in args.file:
        if not os.path.isfile(filename):
            log.error('Input file does not exist: %s', filename)
            sys.exit(1)

    if args.scrapper_retries < 0:
        log.warning('Scrapper retries cannot be negative.')
        args.scrapper_retries = 0
        log.warning('Scrapper retries overriden to 0.')

    if args.scrapper_timeout <= 0:
        log.warning('Scrapper timeout must be greater than zero.')
        args.scrapper_timeout = 5
        log.warning('Scrapper timeout overriden to 5 seconds.')

    disabled_values = ['none', 'false']
    if (args.scrapper_proxy and
            args.scrapper_proxy.lower() in disabled_values):
        args.scrapper_proxy = None


def unpack_file(args, filename):
    """Returns False only when a packed file failed to unpack."""
    content = utils.load_file(filename)

    try:
        unpacked = deobfuscate(content)
    except UnpackingError as e:
        log.error('Failed to unpack %s: %s', filename, e)
        return False

    if unpacked is None:
        log.warning('File is not packed: %s', filename)
        if args.skip_plain:
            return True
        unpacked = content
    else:
        log.info('Unpacked %s: %d -> %d characters.',
                 filename, len(content), len(unpacked))

    output(args, utils.output_filename(filename), unpacked)
    return True


def unpack_url(args, scrapper, url):
    scripts = scrapper.scrap(url)
    if not scripts:
        log.warning('Found no packed scripts in: %s', url)
        return False

    for index, script in enumerate(scripts):
        if len(scripts) > 1:
            filename = utils.output_filename(url, index)
        else:
            filename = utils.output_filename(url)
        output(args, filename, script)

    return True


def output(args, filename, content):
    if args.output_stdout:
        sys.stdout.write(content + '\n')
        return

    filename = os.path.join(args.output_path, filename)
    log.info('Writing unpacked script to: %s', filename)
    utils.export_file(filename, content)


def work(args):
    errors = 0
    total = len(args.file) + len(args.url)

    for filename in args.file:
        try:
            if not unpack_file(args, filename):
                errors += 1
        except (IOError, UnicodeDecodeError) as e:
            log.exception('Failed to read file %s: %s', filename, e)
            errors += 1

    if args.url:
        scrapper = ScriptScrapper(args)
        for url in args.url:
            try:
                if not unpack_url(args, scrapper, url):
                    errors += 1
            except IOError as e:
                log.exception('Failed to save scripts from %s: %s', url, e)
                errors += 1

    log.info('Processed %d inputs with %d errors.', total, errors)
    return errors < total


if __name__ == '__main__':

    args = utils.get_args()

    setup_workspace(args)
    configure_logging(args, log)
    check_configuration(args)

    try:
        success = work(args)
    except KeyboardInterrupt:
        log.info('Shutting down...')
        success = False

    sys.exit(0 if success else 1)
