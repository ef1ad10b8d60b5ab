from pytest import fixture

from indumi.calculator import Calculator
from indumi.rates import RateTable, session_rates


# Fixed rates, so nothing depends on the network or on today's market.
RATES = {
    'USD': 1.0,
    'EUR': 0.92,
    'INR': 83.50,
    'GBP': 0.80,
}


@fixture
def rates():
    return RateTable(RATES, source='test')


@fixture
def calculator(rates):
    return Calculator(rates)


@fixture(autouse=True)
def _fresh_session_rates():
    '''
    Forget rates cached by a previous test.
    '''
    session_rates.cache_clear()
    yield
    session_rates.cache_clear()
