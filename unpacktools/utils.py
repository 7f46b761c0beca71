#!/usr/bin/python
# -*- coding: utf-8 -*-

import configargparse
import logging
import os
import sys

log = logging.getLogger(__name__)


def get_args(argv=None):
    if argv is None:
        argv = sys.argv[1:]

    default_config = []
    if '-cf' not in argv and '--config' not in argv:
        default_config = [os.path.join(
            os.path.dirname(__file__), '../config/config.ini')]
    parser = configargparse.ArgParser(default_config_files=default_config)

    parser.add_argument('-cf', '--config',
                        is_config_file=True, help='Set configuration file.')
    parser.add_argument('-v', '--verbose',
                        help='Run in the verbose mode.',
                        action='store_true')
    parser.add_argument('--log-path',
                        help='Directory where log files are saved.',
                        default='logs')
    parser.add_argument('--download-path',
                        help='Directory where download files are saved.',
                        default='downloads')

    group = parser.add_argument_group('Input')
    group.add_argument('-f', '--file',
                       help='Javascript file to unpack. Can be repeated.',
                       default=[],
                       action='append')
    group.add_argument('-u', '--url',
                       help=('URL of a webpage or script to fetch and '
                             'unpack. Can be repeated.'),
                       default=[],
                       action='append')
    group.add_argument('-Is', '--skip-plain',
                       help=('Do not output input files that are not '
                             'packed.'),
                       default=False,
                       action='store_true')

    group = parser.add_argument_group('Output')
    group.add_argument('-Op', '--output-path',
                       help=('Directory where unpacked scripts are saved. '
                             'Default: unpacked.'),
                       default='unpacked')
    group.add_argument('-Os', '--output-stdout',
                       help='Print unpacked scripts instead of saving them.',
                       default=False,
                       action='store_true')

    group = parser.add_argument_group('Script Scrapper')
    group.add_argument('-Sr', '--scrapper-retries',
                       help=('Maximum number of web request attempts. '
                             'Default: 3.'),
                       default=3,
                       type=int)
    group.add_argument('-Sbf', '--scrapper-backoff-factor',
                       help=('Time factor (in seconds) by which the delay '
                             'until next retry will increase. Default: 0.5.'),
                       default=0.5,
                       type=float)
    group.add_argument('-St', '--scrapper-timeout',
                       help='Connection timeout in seconds. Default: 5.',
                       default=5,
                       type=float)
    group.add_argument('-Sp', '--scrapper-proxy',
                       help=('Use this proxy for webpage scrapping. '
                             'Format: <proto>://[<user>:<pass>@]<ip>:<port> '
                             'Default: None.'),
                       default=None)
    args = parser.parse_args(argv)

    return args


def load_file(filename):
    with open(filename, 'r', encoding='utf-8') as f:
        content = f.read()

    log.info('Read %d characters from file %s.', len(content), filename)
    return content


def export_file(filename, content):
    with open(filename, 'w', encoding='utf-8') as file:
        file.truncate()
        if isinstance(content, list):
            for line in content:
                file.write(line + '\n')
        else:
            file.write(content)


def output_filename(source, index=None):
    """Name of the file an unpacked `source` (path or URL) is saved to."""
    name = source.rstrip('/').split('/')[-1] or 'script'
    name = name.split('?')[0].split('#')[0] or 'script'

    if name.endswith('.js'):
        name = name[:-3]
    if index is not None:
        name = '{}-{}'.format(name, index)

    return name + '.unpacked.js'
