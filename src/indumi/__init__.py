'''
Natural-language arithmetic calculator.

Reads short lines like "1 b / 4", "x = 2 lakh * 3" or "100 USD to INR" and
answers with a grouped number and a rough magnitude, e.g.
"250,000,000 (250 M)" or "₹ 8,350 (8.4 K)".

Supports +, -, *, / and parentheses, variables, magnitude words (thousand,
lakh, million, crore, billion and their abbreviations), currency tags and
conversions. Not intended to be a programming language!
'''

from .calculator import Calculator
from .cli import CLI
from .lexer import Lexer
from .parser import Parser
from .rates import RateTable, session_rates


__all__ = 'Calculator', 'Parser', 'Lexer', 'RateTable', 'session_rates', \
          'CLI'
