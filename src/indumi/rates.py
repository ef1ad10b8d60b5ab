'''
Exchange rates, relative to one reference currency.

A table is built once per session, from the live source if it answers and
from a small static table otherwise, and never changes afterwards.
'''

from functools import lru_cache
from types import MappingProxyType
import logging

import requests

from .util import UnknownCurrency


logger = logging.getLogger(__name__)

DEFAULT_URL = 'https://api.exchangerate-api.com/v4/latest/USD'
# Seconds
DEFAULT_TIMEOUT = 5.0


class RateTable:
    '''
    Immutable mapping of currency code to rate against the reference
    currency.
    '''

    REFERENCE = 'USD'
    FALLBACK = {
        'USD': 1.0,
        'EUR': 0.92,
        'INR': 83.50,
    }

    def __init__(self, rates, source='static'):
        '''
        :param rates: Mapping of currency code to positive rate.
        :param source: Where the rates came from, for display only.
        '''
        checked = dict()
        for code, rate in dict(rates).items():
            try:
                rate = float(rate)
            except TypeError as e:
                raise ValueError('Rate for {} not a number: {}'.format(
                                 code, repr(rate))) from e
            if not rate > 0:
                raise ValueError('Rate for {} not positive: {}'.format(code,
                                                                       rate))
            checked[code.upper()] = rate
        self.rates = MappingProxyType(checked)
        self.source = source

    def __contains__(self, code):
        return code in self.rates

    def __len__(self):
        return len(self.rates)

    def __repr__(self):
        return '{}({} rates from {})'.format(type(self).__name__,
                                             len(self),
                                             self.source)

    def rate(self, code):
        try:
            return self.rates[code]
        except KeyError:
            raise UnknownCurrency('Unknown currency: {}'.format(code))

    def convert(self, amount, from_code, to_code):
        '''
        Convert amount between two currencies through the reference one.
        '''
        from_rate = self.rate(from_code)
        to_rate = self.rate(to_code)
        return (amount / from_rate) * to_rate

    @classmethod
    def fallback(cls):
        return cls(cls.FALLBACK, source='fallback')

    @classmethod
    def fetch(cls, url=DEFAULT_URL, timeout=DEFAULT_TIMEOUT):
        '''
        Fetch live rates.

        Raises requests exceptions on network failure, ValueError on a
        malformed answer.
        '''
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        try:
            rates = response.json()['rates']
        except (KeyError, TypeError) as e:
            raise ValueError('No rates in answer from {}'.format(url)) from e
        return cls(rates, source=url)


@lru_cache(maxsize=None)
def session_rates(url=DEFAULT_URL, timeout=DEFAULT_TIMEOUT, offline=False):
    '''
    Return the rate table for this process.

    Tries the live source once; any failure falls back to the static table.
    The answer is cached, so later calls never touch the network.
    '''
    if offline:
        logger.info('Offline, using fallback rates')
        return RateTable.fallback()
    try:
        table = RateTable.fetch(url, timeout)
    except (requests.RequestException, ValueError) as e:
        logger.warning('Failed to fetch currency rates: %s. '
                       'Using fallback rates.', e)
        return RateTable.fallback()
    logger.info('Fetched %d rates from %s', len(table), url)
    return table
