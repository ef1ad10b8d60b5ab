from functools import wraps


class IndumiError(Exception):
    pass


class ParseError(IndumiError):
    '''
    Line could not be turned into an expression tree.
    '''


class EmptyInput(ParseError):
    pass


class UnmatchedParenthesis(ParseError):
    pass


class MissingOperand(ParseError):
    pass


class UnparseableToken(ParseError):
    pass


class MissingCurrency(ParseError):
    '''
    Conversion keyword without a currency after it.
    '''


class EvaluationError(IndumiError):
    '''
    Expression tree could not be reduced to a value.
    '''


class UndefinedVariable(EvaluationError):
    pass


class DivisionByZero(EvaluationError):
    pass


class MissingCurrencyAnnotation(EvaluationError):
    pass


class UnknownCurrency(EvaluationError):
    pass


def wrap_user_errors(fmt, error=EvaluationError):
    '''
    Decorator that converts stray exceptions into calculator errors.

    Passes through IndumiErrors. The message is fmt formatted with the
    wrapped call's arguments.
    '''
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except IndumiError:
                raise
            except (ArithmeticError, ValueError) as e:
                raise error(fmt.format(*args, **kwargs), e)
        return wrapper
    return decorator
