'''
Evaluator and whole-line tests
'''

from pytest import raises, approx, mark

from indumi.calculator import Calculator
from indumi.expression import (Number, Variable, BinaryOp, Assignment,
                               CurrencyAnnotation, CurrencyConversion)
from indumi.util import (EvaluationError, UndefinedVariable, DivisionByZero,
                         MissingCurrencyAnnotation, UnknownCurrency)


def usd(amount):
    return CurrencyAnnotation(Number(amount), 'USD')


def test_number(calculator):
    assert calculator.evaluate(Number(42.0)) == 42.0


@mark.parametrize('operator,expected', [
    ('+', 12.0),
    ('-', 8.0),
    ('*', 20.0),
    ('/', 5.0),
    ('^', 100.0),
    ('%', 0.0),
])
def test_binary(calculator, operator, expected):
    expr = BinaryOp(operator, Number(10.0), Number(2.0))
    assert calculator.evaluate(expr) == expected


def test_modulo_sign_follows_dividend(calculator):
    assert calculator.evaluate(BinaryOp('%', Number(-7.0), Number(3.0))) == \
        -1.0
    assert calculator.evaluate(BinaryOp('%', Number(7.0), Number(-3.0))) == \
        1.0


def test_division_by_zero(calculator):
    with raises(DivisionByZero, match='Division by zero'):
        calculator.evaluate(BinaryOp('/', Number(10.0), Number(0.0)))


def test_modulo_by_zero(calculator):
    with raises(DivisionByZero):
        calculator.evaluate(BinaryOp('%', Number(10.0), Number(0.0)))


def test_power_overflow(calculator):
    with raises(EvaluationError, match='Cannot compute'):
        calculator.evaluate(BinaryOp('^', Number(10.0), Number(400.0)))


def test_unknown_operator():
    with raises(ValueError):
        BinaryOp('&', Number(1.0), Number(2.0))


def test_assignment_then_read(calculator):
    assert calculator.evaluate(Assignment('x', Number(100.0))) == 100.0
    assert calculator.evaluate(Variable('x')) == 100.0
    assert calculator.environment == {'x': 100.0}


def test_assignment_overwrites(calculator):
    calculator.evaluate(Assignment('x', Number(1.0)))
    calculator.evaluate(Assignment('x', Number(2.0)))
    assert calculator.evaluate(Variable('x')) == 2.0


def test_failed_assignment_stores_nothing(calculator):
    calculator.evaluate(Assignment('x', Number(1.0)))
    with raises(DivisionByZero):
        calculator.evaluate(
            Assignment('x', BinaryOp('/', Number(1.0), Number(0.0))))
    with raises(UndefinedVariable):
        calculator.evaluate(Assignment('y', Variable('nope')))
    assert calculator.environment == {'x': 1.0}


def test_left_evaluated_before_right(calculator):
    expr = BinaryOp('+', Assignment('x', Number(2.0)), Variable('x'))
    assert calculator.evaluate(expr) == 4.0


def test_undefined_variable(calculator):
    with raises(UndefinedVariable, match='Undefined variable: nope'):
        calculator.evaluate(Variable('nope'))


def test_annotation_is_its_value(calculator):
    assert calculator.evaluate(usd(100.0)) == 100.0


def test_conversion(calculator):
    expr = CurrencyConversion(usd(100.0), 'INR')
    assert calculator.evaluate(expr) == approx(8350.0)


def test_conversion_through_reference(calculator):
    expr = CurrencyConversion(CurrencyAnnotation(Number(92.0), 'EUR'), 'INR')
    assert calculator.evaluate(expr) == approx(8350.0)


def test_conversion_unknown_target(calculator):
    with raises(UnknownCurrency, match='Unknown currency: XYZ'):
        calculator.evaluate(CurrencyConversion(usd(1.0), 'XYZ'))


def test_conversion_without_annotation(calculator):
    with raises(MissingCurrencyAnnotation):
        calculator.evaluate(CurrencyConversion(Number(1.0), 'INR'))


def test_conversion_source_errors_first(calculator):
    with raises(UndefinedVariable):
        calculator.evaluate(CurrencyConversion(Variable('nope'), 'INR'))


def test_extract_currency_annotation(calculator):
    assert calculator.extract_currency(usd(100.0)) == 'USD'


def test_extract_currency_left_operand(calculator):
    assert calculator.extract_currency(
        BinaryOp('+', usd(50.0), Number(50.0))) == 'USD'
    assert calculator.extract_currency(
        BinaryOp('*', BinaryOp('+', usd(50.0), Number(1.0)),
                 Number(2.0))) == 'USD'


def test_extract_currency_ignores_right_operand(calculator):
    with raises(MissingCurrencyAnnotation):
        calculator.extract_currency(BinaryOp('+', Number(50.0), usd(50.0)))


def test_extract_currency_variable(calculator):
    with raises(MissingCurrencyAnnotation):
        calculator.extract_currency(Variable('x'))


def test_rate_supplier_contract():
    class Doubler:
        def convert(self, amount, from_code, to_code):
            return amount * 2

    calculator = Calculator(Doubler())
    assert calculator.evaluate_line('21 EUR to XYZ') == 'XYZ 42'


def test_evaluation_is_repeatable(calculator):
    calculator.evaluate_line('x = 7')
    expr = calculator.parser.parse('(x + 3) * 2 / 4 - 1')
    assert calculator.evaluate(expr) == calculator.evaluate(expr) == 4.0


# Whole lines

@mark.parametrize('line,expected', [
    ('2 + 3', '5'),
    ('10 - 5', '5'),
    ('4 * 5', '20'),
    ('20 / 4', '5'),
    ('2 + 3 * 4', '14'),
    ('10 - 2 * 3', '4'),
    ('(2 + 3) * 4', '20'),
    ('2 * (3 + 4)', '14'),
    ('((2 + 3) * 4) / 2', '10'),
    ('1000', '1,000 (1 K)'),
    ('1000000', '1,000,000 (1 M)'),
    ('1000000000', '1,000,000,000 (1 B)'),
    ('1 b', '1,000,000,000 (1 B)'),
    ('5 m', '5,000,000 (5 M)'),
    ('10 k', '10,000 (10 K)'),
    ('2 cr', '20,000,000 (20 M)'),
    ('3 lakh', '300,000 (300 K)'),
    ('1 b / 4', '250,000,000 (250 M)'),
    ('10 k * 3', '30,000 (30 K)'),
    ('1 m + 500 k', '1,500,000 (1.5 M)'),
    ('(1500 + 800 + 300) * 12', '31,200 (31.2 K)'),
    ('1 b / 1 m', '1,000 (1 K)'),
    ('(10 k + 5 k) * 2', '30,000 (30 K)'),
    ('0.001', '0'),
    ('0 - 0.001', '-0'),
    ('0 - 5 + 10', '5'),
    ('5 - 10', '-5'),
    ('0', '0'),
    ('10 / 3', '3.33'),
    ('1.5 * 2.5', '3.75'),
    ('50 USD + 50 USD', '100'),
])
def test_evaluate_line(calculator, line, expected):
    assert calculator.evaluate_line(line) == expected


@mark.parametrize('line,expected', [
    ('100 USD to INR', '₹ 8,350 (8.3 K)'),
    ('100 USD to EUR', '€ 92'),
    ('1000 INR to USD', '$ 11.98'),
    ('1 cr INR to USD', '$ 119,760.48 (119.8 K)'),
    ('(50 USD + 50 USD) to EUR', '€ 92'),
    ('1 m USD to INR', '₹ 8,35,00,000 (8.3 Cr)'),
    ('100 USD to GBP', 'GBP 80'),
])
def test_evaluate_line_conversion(calculator, line, expected):
    assert calculator.evaluate_line(line) == expected


def test_converted_then_divided_is_plain(calculator):
    assert calculator.evaluate_line('(100 USD to INR) / 4') == \
        '2,087.50 (2.1 K)'


@mark.parametrize('line', ['', '   ', '\t\n'])
def test_evaluate_line_blank(calculator, line):
    assert calculator.evaluate_line(line) is None


@mark.parametrize('line,expected', [
    ('10 / 0', 'Error: Division by zero'),
    ('undefined + 5', 'Error: Undefined variable: undefined'),
    ('100 to INR', 'Error: Expression does not have a currency annotation'),
    ('50 + 50 USD to INR',
     'Error: Expression does not have a currency annotation'),
    ('100 USD to XYZ', 'Error: Unknown currency: XYZ'),
    ('5 +', 'Parse error: Expected expression after +'),
    ('(2 + 3', 'Parse error: Expected closing parenthesis'),
    ('100 USD to', "Parse error: Expected currency after 'to'"),
    ('5 & 3', 'Parse error: Unexpected token: &'),
])
def test_evaluate_line_errors(calculator, line, expected):
    assert calculator.evaluate_line(line) == expected


def test_variables(calculator):
    assert calculator.evaluate_line('x = 100') == '100'
    assert calculator.evaluate_line('x + 50') == '150'
    assert calculator.evaluate_line('x * 2') == '200'


def test_sequential_calculations(calculator):
    calculator.evaluate_line('a = 10')
    calculator.evaluate_line('b = 20')
    calculator.evaluate_line('c = a + b')
    assert calculator.evaluate_line('c * 2') == '60'


def test_assigned_conversion_is_plain_number(calculator):
    assert calculator.evaluate_line('converted = 100 USD to INR') == \
        '8,350 (8.3 K)'
    assert calculator.evaluate_line('converted / 4') == '2,087.50 (2.1 K)'


def test_error_leaves_session_usable(calculator):
    calculator.evaluate_line('x = 1')
    assert calculator.evaluate_line('x = 1 / 0') == 'Error: Division by zero'
    assert calculator.evaluate_line('x = (').startswith('Parse error:')
    assert calculator.evaluate_line('x') == '1'


def test_long_sum(calculator):
    assert calculator.evaluate_line(' + '.join(['1'] * 600)) == '600'


def test_long_sum_converted(calculator):
    line = ' + '.join(['1 USD'] * 600) + ' to EUR'
    assert calculator.evaluate_line(line) == '€ 552'


def test_long_difference(calculator):
    line = '1000 - ' + ' - '.join(['1'] * 600)
    assert calculator.evaluate_line(line) == '400'


def test_deep_parentheses(calculator):
    calculator.evaluate_line('x = 1')
    line = '(' * 300 + '1' + ')' * 300
    assert calculator.evaluate_line(line) == \
        'Parse error: Expression too deeply nested'
    assert calculator.evaluate_line('x') == '1'


def test_deep_tree(rates):
    class Nested:
        def parse(self, line):
            expr = Number(1.0)
            for _ in range(5000):
                expr = BinaryOp('+', Number(1.0), expr)
            return expr

    calculator = Calculator(rates, parser=Nested())
    calculator.environment['x'] = 1.0
    assert calculator.evaluate_line('anything') == \
        'Error: Expression too deeply nested'
    assert calculator.environment == {'x': 1.0}


def test_magnitude_name_after_number_folds(calculator):
    calculator.evaluate_line('k = 5')
    assert calculator.evaluate_line('k') == '5'
    # Not 2 * k: the pair is read as 2 thousand.
    assert calculator.evaluate_line('2 k') == '2,000 (2 K)'
