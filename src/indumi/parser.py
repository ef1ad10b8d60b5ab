import regex

from .expression import (ADD, SUBTRACT, MULTIPLY, DIVIDE, Number, Variable,
                         BinaryOp, Assignment, CurrencyAnnotation,
                         CurrencyConversion)
from .lexer import Lexer, NUMBER, IDENTIFIER, OPERATOR, CURRENCY
from .util import (EmptyInput, UnmatchedParenthesis, MissingOperand,
                   UnparseableToken, MissingCurrency)


# The only spellings recognised as annotations after a number.
CURRENCIES = {
    'USD': 'USD',
    '$': 'USD',
    'EUR': 'EUR',
    '€': 'EUR',
    'INR': 'INR',
    '₹': 'INR',
}

CONVERSION_KEYWORD = 'to'


def is_currency(text):
    return text.upper() in CURRENCIES


def normalize_currency(text):
    '''
    Return the canonical code for a currency symbol or code.

    Codes outside the annotation allow-list are upper-cased as is.
    '''
    return CURRENCIES.get(text.upper(), text.upper())


def split_assignment(line):
    '''
    Return (name, rest) if line assigns to a bare name, else None.

    Only the first = outside parentheses counts, and everything left of it
    must be a single identifier.
    '''
    depth = 0
    for i, char in enumerate(line):
        if char == '(':
            depth += 1
        elif char == ')':
            depth -= 1
        elif char == '=' and depth == 0:
            name = line[:i].strip()
            if regex.fullmatch(Lexer.IDENTIFIER, name):
                return name, line[i + 1:]
            return None
    return None


class TokenStream:
    '''
    Cursor over a list of tokens, shared by the grammar levels.
    '''

    def __init__(self, tokens):
        self.tokens = list(tokens)
        self.position = 0

    def peek(self):
        '''
        Return the next token, or None at the end.
        '''
        if self.position < len(self.tokens):
            return self.tokens[self.position]
        return None

    def next(self):
        token = self.peek()
        if token is not None:
            self.position += 1
        return token

    def previous(self):
        if self.position:
            return self.tokens[self.position - 1]
        return None

    def accept(self, *texts):
        '''
        Consume and return the next token if it is one of these operators.
        '''
        token = self.peek()
        if token is not None and token.kind == OPERATOR and \
           token.text in texts:
            return self.next()
        return None


class Parser:
    '''
    Recursive-descent parser for one calculator line.

    Precedence, lowest first: assignment, conversion (to), additive,
    multiplicative, primary. Every level is left-associative.
    '''

    ADDITIVE = {'+': ADD, '-': SUBTRACT}
    MULTIPLICATIVE = {'*': MULTIPLY, '/': DIVIDE}

    def __init__(self, lexer=None):
        self.lexer = lexer or Lexer()

    def parse(self, line):
        '''
        Parse line into an expression tree, or raise a ParseError.
        '''
        line = line.strip()
        if not line:
            raise EmptyInput('Empty input')
        assignment = split_assignment(line)
        if assignment is not None:
            name, rest = assignment
            if not rest.strip():
                raise MissingOperand(
                    'Expected expression after {} ='.format(name))
            return Assignment(name, self.parse(rest))
        stream = TokenStream(self.lexer.tokenize(line))
        if stream.peek() is None:
            raise EmptyInput('Empty input')
        expr = self.conversion(stream)
        self._expect_end(stream)
        return expr

    def _expect_end(self, stream):
        token = stream.peek()
        if token is None:
            return
        elif token.kind == OPERATOR and token.text == ')':
            raise UnmatchedParenthesis('Unmatched closing parenthesis')
        raise UnparseableToken('Unexpected token: {}'.format(token.text))

    def conversion(self, stream):
        '''
        additive ( 'to' CURRENCY )?

        Wraps everything parsed so far, so 'a + b to X' converts a + b.
        '''
        expr = self.additive(stream)
        token = stream.peek()
        if token is not None and token.kind == IDENTIFIER and \
           token.text.lower() == CONVERSION_KEYWORD:
            stream.next()
            target = stream.next()
            if target is None or target.kind not in {IDENTIFIER, CURRENCY}:
                raise MissingCurrency('Expected currency after {}'.format(
                                      repr(CONVERSION_KEYWORD)))
            expr = CurrencyConversion(expr, normalize_currency(target.text))
        return expr

    def additive(self, stream):
        expr = self.multiplicative(stream)
        while True:
            token = stream.accept(*type(self).ADDITIVE)
            if token is None:
                return expr
            expr = BinaryOp(type(self).ADDITIVE[token.text],
                            expr,
                            self.multiplicative(stream))

    def multiplicative(self, stream):
        expr = self.primary(stream)
        while True:
            token = stream.accept(*type(self).MULTIPLICATIVE)
            if token is None:
                return expr
            expr = BinaryOp(type(self).MULTIPLICATIVE[token.text],
                            expr,
                            self.primary(stream))

    def primary(self, stream):
        '''
        NUMBER CURRENCY? | IDENT | '(' conversion ')'
        '''
        token = stream.next()
        if token is None:
            previous = stream.previous()
            if previous is None:
                raise MissingOperand('Expected expression')
            raise MissingOperand(
                'Expected expression after {}'.format(previous.text))
        elif token.kind == OPERATOR and token.text == '(':
            expr = self.conversion(stream)
            if stream.accept(')') is None:
                raise UnmatchedParenthesis('Expected closing parenthesis')
            return expr
        elif token.kind == NUMBER:
            following = stream.peek()
            if following is not None and \
               following.kind in {IDENTIFIER, CURRENCY} and \
               is_currency(following.text):
                stream.next()
                return CurrencyAnnotation(Number(token.value),
                                          normalize_currency(following.text))
            return Number(token.value)
        elif token.kind == IDENTIFIER:
            return Variable(token.text)
        elif token.kind == OPERATOR:
            raise MissingOperand(
                'Expected expression before {}'.format(token.text))
        raise UnparseableToken('Cannot parse: {}'.format(token.text))
