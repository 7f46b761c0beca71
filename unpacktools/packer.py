#!/usr/bin/python
# -*- coding: utf-8 -*-
#
# Unpacker for Dean Edward's p.a.c.k.e.r, a part of javascript beautifier
# by Einar Lielmanis <einar@jsbeautifier.org>
#
#     written by Stefano Sanfilippo <a.little.coder@gmail.com>
#
# usage:
#
# if detect(some_string):
#     unpacked = unpack(some_string)
#
"""Unpacker for Dean Edward's p.a.c.k.e.r"""

import logging
import re

from .unbaser import Unbaser

log = logging.getLogger(__name__)

PACKED_REGEX = re.compile(
    r'eval[ \t]*\([ \t]*function[ \t]*\([ \t]*p[ \t]*,[ \t]*a[ \t]*,'
    r'[ \t]*c[ \t]*,[ \t]*k[ \t]*,[ \t]*e[ \t]*,[ \t]*')

# Everything up to the last parameter, which is kept when converting.
PROXYS_REGEX = re.compile(
    r'eval[ \t]*\([ \t]*function[ \t]*\([ \t]*p[ \t]*,[ \t]*r[ \t]*,'
    r'[ \t]*o[ \t]*,[ \t]*x[ \t]*,[ \t]*y[ \t]*,[ \t]*(?=s)')

# Tried in order: full call with seed and accumulator, then a bare call.
JUICERS = [
    re.compile(r"}\('(.*)', *(\d+|\[\]), *(\d+), *'(.*)'\.split\('\|'\), "
               r"*(\d+), *(.*)\)\)"),
    re.compile(r"}\('(.*)', *(\d+|\[\]), *(\d+), *'(.*)'\.split\('\|'\)")
]

END_DELIMITERS = ["')))", '}))']

WORD_REGEX = re.compile(r'\b\w+\b')

STRINGS_REGEX = re.compile(r'var *(_\w+)\=\["(.*?)"\];')


class UnpackingError(Exception):
    """Badly packed source or general error. Argument is a
    meaningful description."""
    pass


def detect(source):
    """Detects whether `source` is P.A.C.K.E.R. coded."""
    return PACKED_REGEX.search(source) is not None


def deobfuscate(source):
    """Unpacks `source` if it is P.R.O.X.Y.S. or P.A.C.K.E.R. coded.
    Returns None for anything else."""
    if PROXYS_REGEX.search(source):
        return unpack_unchecked(convert_proxys(source))

    if detect(source):
        return unpack_unchecked(source)

    return None


def convert_proxys(source):
    """Convert P.R.O.X.Y.S. to P.A.C.K.E.R."""
    pieces = source.split("'")
    if len(pieces) < 4:
        raise UnpackingError('Unknown p.r.o.x.y.s. encoding.')

    if pieces[-3] != '.split(':
        raise UnpackingError('Unknown p.r.o.x.y.s. encoding.')

    # Find custom separator
    try:
        separator = pieces[-2].encode().decode('unicode_escape')
    except UnicodeDecodeError:
        raise UnpackingError('Unknown p.r.o.x.y.s. separator.')

    if not separator:
        raise UnpackingError('Unknown p.r.o.x.y.s. separator.')

    # Replace with standard P.A.C.K.E.R. separator
    pieces[-2] = '|'
    pieces[-4] = pieces[-4].replace(separator, '|')

    source = "'".join(pieces)
    return PROXYS_REGEX.sub('eval(function(p,a,c,k,e,', source, count=1)


def unpack(source):
    """Unpacks P.A.C.K.E.R. packed js code."""
    if not detect(source):
        raise UnpackingError('Invalid p.a.c.k.e.r data.')

    return unpack_unchecked(source)


def unpack_unchecked(source):
    """Unpacks P.A.C.K.E.R. packed js code without checking the
    signature first. Only call it after detect() returned True."""
    match = PACKED_REGEX.search(source)
    if not match:
        raise UnpackingError('Invalid p.a.c.k.e.r data.')

    begin_string = source[:match.start()]
    end_string = ''
    for delimiter in END_DELIMITERS:
        if delimiter in source:
            end_string = source.split(delimiter, 1)[1]
            break

    payload, symtab, radix, count = _filterargs(source)

    if count != len(symtab):
        raise UnpackingError('Malformed p.a.c.k.e.r. symtab. ({} != {})'
                             .format(count, len(symtab)))

    try:
        unbaser = Unbaser(radix)
    except TypeError as e:
        raise UnpackingError('Unknown p.a.c.k.e.r. encoding. {}'.format(e))

    log.debug('Decoding %d symbols in base %d.', count, radix)
    source = decode_words(payload, symtab, unbaser)
    source = _replacestrings(source)

    return begin_string + source + end_string


def decode_words(payload, symtab, unbaser):
    """Replace placeholder words in `payload` with their symtab entry.
    Words that do not resolve to a non-empty entry are kept as found."""
    payload = payload.replace('\\\\', '\\').replace("\\'", "'")

    def lookup(match):
        """Look up symbols in the synthetic symtab."""
        word = match.group(0)
        try:
            index = unbaser(word)
        except ValueError:
            return word

        if index < len(symtab):
            return symtab[index] or word
        return word

    return WORD_REGEX.sub(lookup, payload)


def _filterargs(source):
    """Juice from a source file the four args needed by decoder."""
    for number, juicer in enumerate(JUICERS, 1):
        args = juicer.search(source)
        if not args:
            continue

        payload, radix, count, symbols = args.group(1, 2, 3, 4)
        log.debug('Matched p.a.c.k.e.r. call with juicer #%d.', number)

        # \d also matches non-ASCII digits, which int() would accept.
        if radix == '[]':
            radix = 62
        elif radix.isascii():
            radix = int(radix)
        else:
            raise UnpackingError('Invalid radix')

        if not count.isascii():
            raise UnpackingError('Invalid count')
        count = int(count)

        return payload, symbols.split('|'), radix, count

    # could not find a satisfying regex
    raise UnpackingError('Could not make sense of p.a.c.k.e.r data '
                         '(unexpected code structure)')


def _replacestrings(source):
    """Strip string lookup table (list) and replace values in source."""
    match = STRINGS_REGEX.search(source)

    if match:
        varname, strings = match.groups()
        source = source[match.end():]
        lookup = strings.split('","')
        variable = '%s[%%d]' % varname
        for index, value in enumerate(lookup):
            source = source.replace(variable % index, '"%s"' % value)
        return source
    return source
