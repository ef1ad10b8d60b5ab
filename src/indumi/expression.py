'''
Expression trees produced by the parser.

Every node is an immutable tuple; children belong to exactly one parent.
'''

from collections import namedtuple


ADD = '+'
SUBTRACT = '-'
MULTIPLY = '*'
DIVIDE = '/'
# Representable, but the grammar has no rule producing them.
POWER = '^'
MODULO = '%'

OPERATORS = ADD, SUBTRACT, MULTIPLY, DIVIDE, POWER, MODULO


class Expression:
    '''
    Base of all nodes.

    Nodes of different kinds never compare equal, even with equal fields.
    '''
    __slots__ = ()

    def __eq__(self, other):
        return type(self) is type(other) and tuple.__eq__(self, other)

    # Otherwise tuple.__ne__, which ignores the kind.
    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash((type(self).__name__,) + tuple(self))


class Number(Expression, namedtuple('Number', 'value')):
    __slots__ = ()


class Variable(Expression, namedtuple('Variable', 'name')):
    __slots__ = ()


class BinaryOp(Expression, namedtuple('BinaryOp', 'operator left right')):
    __slots__ = ()

    def __new__(cls, operator, left, right):
        if operator not in OPERATORS:
            raise ValueError('No such operator {}'.format(repr(operator)))
        return super().__new__(cls, operator, left, right)


class Assignment(Expression, namedtuple('Assignment', 'name expr')):
    __slots__ = ()


class CurrencyAnnotation(Expression,
                         namedtuple('CurrencyAnnotation', 'expr currency')):
    '''
    Numeric sub-expression tagged with a 3-letter currency code.

    The tag does not take part in arithmetic.
    '''
    __slots__ = ()


class CurrencyConversion(Expression,
                         namedtuple('CurrencyConversion', 'source currency')):
    __slots__ = ()


def dump(expr, indent=0):
    '''
    Return a multi-line, indented rendition of an expression tree.
    '''
    pad = '  ' * indent
    if isinstance(expr, Number):
        return '{}Number {}'.format(pad, expr.value)
    elif isinstance(expr, Variable):
        return '{}Variable {}'.format(pad, expr.name)
    elif isinstance(expr, BinaryOp):
        return '\n'.join(['{}BinaryOp {}'.format(pad, expr.operator),
                          dump(expr.left, indent + 1),
                          dump(expr.right, indent + 1)])
    elif isinstance(expr, Assignment):
        return '\n'.join(['{}Assignment {}'.format(pad, expr.name),
                          dump(expr.expr, indent + 1)])
    elif isinstance(expr, CurrencyAnnotation):
        return '\n'.join(['{}CurrencyAnnotation {}'.format(pad,
                                                           expr.currency),
                          dump(expr.expr, indent + 1)])
    elif isinstance(expr, CurrencyConversion):
        return '\n'.join(['{}CurrencyConversion {}'.format(pad,
                                                           expr.currency),
                          dump(expr.source, indent + 1)])
    raise TypeError('Not an expression: {}'.format(repr(expr)))
