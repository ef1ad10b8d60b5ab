from os import isatty, path
from sys import stdin, stdout, stderr, exit
from argparse import ArgumentParser, REMAINDER, OPTIONAL
import logging

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory

from .calculator import Calculator
from .expression import dump
from .lexer import Lexer
from .parser import Parser
from .rates import session_rates, DEFAULT_URL, DEFAULT_TIMEOUT
from .util import ParseError


class InteractiveInput:
    def __init__(self, prompt, history=None):
        self.prompt = prompt
        self.history = history

    def __iter__(self):
        try:
            session = PromptSession(message=self.prompt,
                                    history=self.history,
                                    enable_suspend=True,
                                    prompt_continuation=' ' * len(self.prompt),
                                    # Certainly not! But be explicit.
                                    erase_when_done=False)
            while True:
                yield session.prompt()
        except EOFError:
            return


class CLI:
    '''
    Command line interface to the calculator.
    '''

    DEFAULT_PROMPT = '> '
    HISTORY_FILE = '~/.indumi_history'
    LOG_FORMAT = '%(levelname)s: %(message)s'

    def dumper(self):
        '''
        Dump tokens and expression tree of every line.
        '''
        lexer = Lexer()
        parser = Parser(lexer)
        print('<kind>\t<repr(text)>\t<value>')
        for line in self.args.expressions:
            if not line.strip():
                continue
            for token in lexer.tokenize(line):
                print(token.kind, repr(token.text), token.value, sep='\t')
            try:
                print(dump(parser.parse(line)))
            except ParseError as e:
                print('Parse error:', e.args[0], file=stderr)

    def executor(self):
        '''
        Run calculator, one result per non-blank line.
        '''
        rates = session_rates(url=self.args.rates_url,
                              timeout=self.args.timeout,
                              offline=self.args.offline)
        calculator = Calculator(rates)
        for line in self.args.expressions:
            result = calculator.evaluate_line(line)
            if result is not None:
                print(result, flush=True)

    def raw_grammar(self):
        '''
        Print current internally defined lexer patterns.
        '''
        lexer = Lexer()
        for name in 'CHUNK', 'NUMBER', 'IDENTIFIER':
            print('[{}]'.format(name))
            print(getattr(lexer, name))

    def _prompting_input(self):
        '''
        Return prompting input if either:
        - prompt explicitly specified.
        - both stdin/out are a tty

        Otherwise, plain stdin.
        '''
        if self.args.prompt or \
           isatty(stdin.fileno()) and isatty(stdout.fileno()):
            history = FileHistory(path.expanduser(self.HISTORY_FILE))
            return InteractiveInput(prompt=self.args.prompt or
                                    self.DEFAULT_PROMPT,
                                    history=history)
        else:
            return stdin

    def __init__(self):
        '''
        Create ready to run CLI.

        Does not run or parse command line arguments.
        '''
        self.argument_parser = ArgumentParser(
            description='Natural-language arithmetic and currency calculator')
        self.argument_parser.add_argument('-v', '--verbose',
                                          action='store_true')
        self.argument_parser.add_argument('--offline',
                                          action='store_true',
                                          help="don't fetch live rates")
        self.argument_parser.add_argument('--rates-url',
                                          default=DEFAULT_URL)
        self.argument_parser.add_argument('--timeout',
                                          type=float,
                                          default=DEFAULT_TIMEOUT,
                                          help='seconds to wait for rates')
        int_nonint_groups = self.argument_parser.add_mutually_exclusive_group()
        int_nonint_groups.add_argument('-e', '--expression',
                                       nargs=REMAINDER,
                                       dest='expressions')
        int_nonint_groups.add_argument('-p', '--prompt',
                                       nargs=OPTIONAL,
                                       const=self.DEFAULT_PROMPT)
        main_groups = self.argument_parser.add_mutually_exclusive_group()
        for short_, long_, action in [('-G', '--raw-grammar',
                                       self.raw_grammar),
                                      ('-D', '--dump', self.dumper)]:
            main_groups.add_argument(short_, long_,
                                     action='store_const',
                                     const=action,
                                     dest='action')
        self.argument_parser.set_defaults(action=self.executor,
                                          expressions=stdin)

    def _configure_logging(self):
        logging.basicConfig(level=logging.DEBUG if self.args.verbose
                            else logging.WARNING,
                            format=self.LOG_FORMAT,
                            stream=stderr)

    def run(self, *, args=None):
        '''
        Run CLI, given these args, or previously passed CLI args.
        '''
        self.args = self.argument_parser.parse_args(args)
        self._configure_logging()
        if self.args.expressions is stdin:
            self.args.expressions = self._prompting_input()
        try:
            self.args.action()
        except KeyboardInterrupt:
            exit(1)
