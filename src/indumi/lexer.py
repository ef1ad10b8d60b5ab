from collections import namedtuple
from functools import reduce
import operator

import regex

from .util import UnparseableToken, wrap_user_errors


NUMBER = 'number'
IDENTIFIER = 'identifier'
OPERATOR = 'operator'
CURRENCY = 'currency'
UNKNOWN = 'unknown'

Token = namedtuple('Token', 'kind text value')

# Magnitude words folded into the number before them.
MAGNITUDES = {
    'thousand': 1e3,
    'thousands': 1e3,
    'k': 1e3,
    'lakh': 1e5,
    'lakhs': 1e5,
    'lac': 1e5,
    'lacs': 1e5,
    'million': 1e6,
    'millions': 1e6,
    'm': 1e6,
    'crore': 1e7,
    'crores': 1e7,
    'cr': 1e7,
    'billion': 1e9,
    'billions': 1e9,
    'b': 1e9,
}


def multiplier(text):
    '''
    Return the factor a magnitude word stands for, 1.0 for anything else.
    '''
    return MAGNITUDES.get(text.lower(), 1.0)


class Lexer:
    '''
    Lexer for calculator lines.

    Holds no state between lines; one instance can be shared by any number
    of parsers.
    '''
    # Integral part of a number
    INTEGRAL = r'''
                (?:
                    # 1, 12, or the 1 in 1_200.
                    \d{1,3}
                    (?:
                        # The 4, 45, etc. in 1234, 12345, etc.
                        \d
                        |
                        # Underscores as thousands separators
                        (?:
                            _\d{3}
                        )
                    )*
                )
                '''
    # Fractional part of a number
    FRACTIONAL = r'''
                  (?:
                      \d+
                  )
                  '''
    NUMBER = r'''
              (?:
                  # 1, 12, 1_200, 1_200. (notice trailing dot), 1.3
                  {INTEGRAL}
                  (?:
                      \.
                      {FRACTIONAL}?
                  )?
              )|(?:
                  # .2, 0.2
                  {INTEGRAL}?
                  \.
                  {FRACTIONAL}
              )
              '''.format(INTEGRAL=INTEGRAL, FRACTIONAL=FRACTIONAL)
    # Letters, digits and underscores, not starting with a digit.
    IDENTIFIER = r'[^\W\d]\w*'

    OPERATORS = '+-*/%^()'
    CURRENCY_SYMBOLS = frozenset('$€₹')

    OPERATOR = r'(?:' + r'|'.join(map(regex.escape, OPERATORS)) + r')'
    SPACE = r'\s+'
    # Anything else runs up to the next space or operator.
    WORD = r'[^\s+\-*/%^()]+'

    CHUNK = r'(?<space>' + SPACE + r')|' \
            r'(?<operator>' + OPERATOR + r')|' \
            r'(?<word>' + WORD + r')'
    FLAGS = reduce(operator.__or__,
                   {regex.DOTALL,
                    regex.VERBOSE},
                   0)

    def lex(self, line):
        '''
        Take a line and yield its tokens, whitespace dropped.

        Never fails; text that is neither number, name nor currency symbol
        comes out as an UNKNOWN token for the parser to reject.
        '''
        for match in regex.finditer(type(self).CHUNK, line,
                                    flags=type(self).FLAGS):
            if match.group('operator'):
                yield Token(OPERATOR, match.group('operator'), None)
            elif match.group('word'):
                yield self.classify(match.group('word'))

    def classify(self, text):
        '''
        Turn one word into a token.
        '''
        cls = type(self)
        if regex.fullmatch(cls.NUMBER, text, flags=cls.FLAGS):
            return Token(NUMBER, text, self._convert(text))
        elif regex.fullmatch(cls.IDENTIFIER, text, flags=cls.FLAGS):
            return Token(IDENTIFIER, text, None)
        elif text in cls.CURRENCY_SYMBOLS:
            return Token(CURRENCY, text, None)
        return Token(UNKNOWN, text, None)

    def fold(self, tokens):
        '''
        Collapse each number followed by a magnitude word into one number.

        Both tokens of a pair are consumed, so a variable named like a
        magnitude word (k, m, b, ...) cannot follow a number.
        '''
        tokens = list(tokens)
        folded = []
        i = 0
        while i < len(tokens):
            token = tokens[i]
            if token.kind == NUMBER and i + 1 < len(tokens):
                following = tokens[i + 1]
                factor = multiplier(following.text)
                if factor != 1.0:
                    folded.append(Token(NUMBER,
                                        token.text + ' ' + following.text,
                                        token.value * factor))
                    i += 2
                    continue
            folded.append(token)
            i += 1
        return folded

    def tokenize(self, line):
        '''
        Return the tokens of line with magnitude words folded.
        '''
        return self.fold(self.lex(line))

    @wrap_user_errors('Cannot convert {1}', error=UnparseableToken)
    def _convert(self, number):
        return float(number.replace('_', ''))
