#!/usr/bin/python
# -*- coding: utf-8 -*-
#
# Positional numeral decoder used by the p.a.c.k.e.r. unpacker.
#
# Bases 2 to 36 are parsed natively, 37 to 62 and 95 through a lookup
# dictionary built from the matching alphabet.
#


class Unbaser(object):
    """Functor for a given base. Will efficiently convert
    strings to natural numbers."""
    ALPHABET = {
        36: '0123456789abcdefghijklmnopqrstuvwxyz',
        62: '0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ',
        95: (' !"#$%&\'()*+,-./0123456789:;<=>?@ABCDEFGHIJKLMNOPQRSTUVWXYZ'
             '[\\]^_`abcdefghijklmnopqrstuvwxyz{|}~')
    }

    def __init__(self, base):
        self.base = base
        self.dictionary = None

        if not isinstance(base, int) or isinstance(base, bool):
            raise TypeError('Unsupported base encoding.')

        if 2 <= base <= 36:
            digits = self.ALPHABET[36][:base]
            self.digits = frozenset(digits + digits.upper())
            self.unbase = self._nativeunbaser
        elif 36 < base <= 62:
            self.dictionary = self._build_dictionary(self.ALPHABET[62][:base])
            self.unbase = self._dictunbaser
        elif base == 95:
            self.dictionary = self._build_dictionary(self.ALPHABET[95])
            self.unbase = self._dictunbaser
        else:
            raise TypeError('Unsupported base encoding.')

    def __call__(self, string):
        return self.unbase(string)

    def __repr__(self):
        return '{}({})'.format(type(self).__name__, self.base)

    @staticmethod
    def _build_dictionary(alphabet):
        return dict((cipher, index) for index, cipher in enumerate(alphabet))

    def _nativeunbaser(self, string):
        """Decodes with int(), rejecting what it would otherwise accept
        (signs, underscores, whitespace, non-ASCII digits)."""
        if not string or any(c not in self.digits for c in string):
            raise ValueError('Invalid number format')
        return int(string, self.base)

    def _dictunbaser(self, string):
        """Decodes a value to an integer."""
        ret = 0
        for index, cipher in enumerate(string[::-1]):
            try:
                ret += (self.base ** index) * self.dictionary[cipher]
            except KeyError:
                raise ValueError('Invalid character in input string.')
        return ret
