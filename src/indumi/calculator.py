import logging
import math
import operator

from .expression import (ADD, SUBTRACT, MULTIPLY, DIVIDE, POWER, MODULO,
                         Number, Variable, BinaryOp, Assignment,
                         CurrencyAnnotation, CurrencyConversion)
from .formatter import format_currency, format_number
from .parser import Parser
from .util import (IndumiError, ParseError, UndefinedVariable,
                   DivisionByZero, MissingCurrencyAnnotation,
                   wrap_user_errors)


logger = logging.getLogger(__name__)


def _divide(left, right):
    if right == 0.0:
        raise DivisionByZero('Division by zero')
    return left / right


def _modulo(left, right):
    '''
    Floating remainder, with the sign of the dividend.
    '''
    if right == 0.0:
        raise DivisionByZero('Division by zero')
    return math.fmod(left, right)


class Calculator:
    '''
    Evaluates expression trees against variables and exchange rates.

    Owns the variables of one session; not meant to be shared between
    threads.
    '''

    ARITHMETIC = {
        ADD: operator.__add__,
        SUBTRACT: operator.__sub__,
        MULTIPLY: operator.__mul__,
        DIVIDE: _divide,
        POWER: math.pow,
        MODULO: _modulo,
    }
    TOO_DEEP = 'Expression too deeply nested'

    def __init__(self, rates, parser=None):
        '''
        :param rates: Anything with convert(amount, from_code, to_code).
        :param parser: Parser for evaluate_line; a fresh one by default.
        '''
        self.rates = rates
        self.parser = parser or Parser()
        self.environment = dict()

    def evaluate(self, expr):
        '''
        Reduce expr to a float, or raise an EvaluationError.

        Only assignments change the environment, and only on success.
        '''
        try:
            evaluator = type(self).EVALUATORS[type(expr)]
        except KeyError:
            raise TypeError('Not an expression: {}'.format(repr(expr)))
        return evaluator(self, expr)

    def _number(self, expr):
        return expr.value

    def _variable(self, expr):
        try:
            return self.environment[expr.name]
        except KeyError:
            raise UndefinedVariable('Undefined variable: {}'.format(
                                    expr.name))

    def _assignment(self, expr):
        value = self.evaluate(expr.expr)
        self.environment[expr.name] = value
        return value

    def _annotation(self, expr):
        return self.evaluate(expr.expr)

    def _binary(self, expr):
        # Left spine walked in a loop, so long chains like 1 + 1 + ... do
        # not recurse. Left strictly first: assignments inside operands are
        # visible to the right.
        spine = []
        while isinstance(expr, BinaryOp):
            spine.append(expr)
            expr = expr.left
        value = self.evaluate(expr)
        for node in reversed(spine):
            value = self._apply(node.operator, value,
                                self.evaluate(node.right))
        return value

    @wrap_user_errors('Cannot compute {2} {1} {3}')
    def _apply(self, op, left, right):
        return type(self).ARITHMETIC[op](left, right)

    def _conversion(self, expr):
        amount = self.evaluate(expr.source)
        currency = self.extract_currency(expr.source)
        return self.rates.convert(amount, currency, expr.currency)

    def extract_currency(self, expr):
        '''
        Find the currency of an unevaluated expression.

        Follows left operands only: 50 USD + 50 has a currency, 50 + 50 USD
        does not.
        '''
        while isinstance(expr, BinaryOp):
            expr = expr.left
        if isinstance(expr, CurrencyAnnotation):
            return expr.currency
        raise MissingCurrencyAnnotation(
            'Expression does not have a currency annotation')

    EVALUATORS = {
        Number: _number,
        Variable: _variable,
        Assignment: _assignment,
        CurrencyAnnotation: _annotation,
        BinaryOp: _binary,
        CurrencyConversion: _conversion,
    }

    def evaluate_line(self, line):
        '''
        Parse, evaluate and format one line of text.

        Returns None for a blank line. Parse and evaluation errors come back as
        text and leave the session usable.
        '''
        if not line.strip():
            return None
        try:
            expr = self.parser.parse(line)
        except ParseError as e:
            logger.debug('Cannot parse %r', line, exc_info=True)
            return 'Parse error: {}'.format(e.args[0])
        except RecursionError:
            logger.debug('Cannot parse %r: too deeply nested', line)
            return 'Parse error: {}'.format(type(self).TOO_DEEP)
        try:
            value = self.evaluate(expr)
        except IndumiError as e:
            logger.debug('Cannot evaluate %r', line, exc_info=True)
            return 'Error: {}'.format(e.args[0])
        except RecursionError:
            logger.debug('Cannot evaluate %r: too deeply nested', line)
            return 'Error: {}'.format(type(self).TOO_DEEP)
        if isinstance(expr, CurrencyConversion):
            return format_currency(value, expr.currency)
        return format_number(value)
