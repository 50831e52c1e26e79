"""
Source text to syntax tree.

Wraps a cached LALR Lark parser, drives it token by token through Lark's
interactive interface to insert semicolons, and converts Lark exceptions into
``JSSyntaxError``.
"""
import re
from functools import lru_cache

from lark import Lark, Token
from lark.exceptions import UnexpectedInput, UnexpectedToken, VisitError

from .errors import JSSyntaxError, UnbrowserifyError, get_line_context
from .grammar import js_grammar
from .transformer import JSTransformer
from .diagnostics import debug_log

_LINE_TERMINATORS = '\n\r\u2028\u2029'
_SPACES = ' \t\v\f\ufeff\xa0'


@lru_cache(maxsize=None)
def get_parser():
    """Build the Lark parser once; table construction dominates start-up time."""
    return Lark(
        js_grammar,
        parser='lalr',
        lexer='contextual',
        propagate_positions=True,
        maybe_placeholders=True,
    )


@lru_cache(maxsize=None)
def keyword_terminals():
    """Keyword terminals, which outrank NAME wherever both are allowed."""
    return [(re.compile(t.pattern.to_regexp()), t.name) for t in get_parser().terminals if t.priority > 0]


def newline_before(text, position):
    """Is there a line terminator between the previous token and ``position``?"""
    i = position - 1
    while i >= 0:
        ch = text[i]
        if ch in _LINE_TERMINATORS:
            return True
        if ch in _SPACES:
            i -= 1
            continue
        if ch == '/' and i > 0 and text[i - 1] == '*':
            start = text.rfind('/*', 0, i - 1)
            if start == -1:
                return False
            if any(c in _LINE_TERMINATORS for c in text[start:i]):
                return True
            i = start - 1
            continue
        # A line comment runs to the end of its line, so reaching one here is impossible
        return False
    return False


# Keywords after which a line break ends the statement
RESTRICTED_KEYWORDS = {'_RETURN', '_BREAK', '_CONTINUE', '_THROW'}
# Tokens that can close the operand of a postfix ++ or --
OPERAND_END = {'NAME', 'NUMBER', 'STRING', 'REGEX', '_THIS', '_NULL', '_TRUE', '_FALSE', 'RPAR', 'RSQB'}


class SemicolonInsertion:
    """
    Automatic semicolon insertion on top of Lark's interactive parser.

    ``recover`` handles the general rule: a ``;`` is inserted before the
    offending token when the parser could accept one and the token is ``}``,
    the end of input, or the first token on a new line.

    ``before`` handles the restricted productions, where a line break ends
    the statement even though the next token would parse: after ``return``,
    ``break`` and ``continue``, and before a ``++``/``--`` that would
    otherwise be read as postfix.
    """

    def __init__(self, text, filename='<input>'):
        self.text = text
        self.filename = filename
        self.previous = None
        self._patched = set()

    def _insert(self, parser, token):
        debug_log(f"Inserting semicolon before {token.type} at line {token.line}")
        parser.feed_token(Token.new_borrow_pos('SEMICOLON', ';', token))

    def _as_keyword(self, parser, token):
        # After return, break or continue only a name is allowed, so a keyword was lexed as NAME
        if token.type != 'NAME':
            return token
        choices = parser.choices()
        for pattern, name in keyword_terminals():
            if name in choices and pattern.fullmatch(token.value):
                return Token.new_borrow_pos(name, token.value, token)
        return token

    def before(self, parser, token):
        """Returns the token to feed next."""
        previous = self.previous
        if previous is None or not newline_before(self.text, token.start_pos or 0):
            return token
        if previous.type in RESTRICTED_KEYWORDS:
            if token.type == 'SEMICOLON':
                return token
            if previous.type == '_THROW':
                raise JSSyntaxError(
                    "Illegal newline after throw",
                    filename=self.filename,
                    line_number=previous.line,
                    column=previous.column,
                    context=get_line_context(self.text, previous.line),
                )
            self._insert(parser, token)
            return self._as_keyword(parser, token)
        if token.value in ('++', '--') and previous.type in OPERAND_END:
            choices = parser.choices()
            # a state that accepts a statement keyword reads the ++ as prefix already
            if 'SEMICOLON' in choices and '_RETURN' not in choices:
                self._insert(parser, token)
        return token

    def recover(self, parser, error):
        if 'SEMICOLON' not in error.expected:
            return False
        token = error.token
        at_end = token.type == '$END'
        key = (token.type, token.start_pos)
        if key in self._patched:
            return False
        if not (at_end or token.type == 'RBRACE' or newline_before(self.text, token.start_pos or 0)):
            return False
        self._patched.add(key)
        self._insert(parser, token)
        if not at_end:
            parser.feed_token(token)
            self.previous = token
        return True


def parse_tree(text, filename='<input>'):
    """Run the Lark parser over ``text``, inserting semicolons where needed."""
    parser = get_parser().parse_interactive(text)
    insertion = SemicolonInsertion(text, filename)
    while True:
        try:
            for token in parser.lexer_thread.lex(parser.parser_state):
                token = insertion.before(parser, token)
                parser.feed_token(token)
                insertion.previous = token
            return parser.feed_eof(parser.lexer_thread.state.last_token)
        except UnexpectedToken as e:
            if not insertion.recover(parser, e):
                raise


def _strip_hashbang(text):
    if text.startswith('#!'):
        end = text.find('\n')
        return '//' + text[2:] if end == -1 else '//' + text[2:end] + text[end:]
    return text


def parse(text, filename='<input>'):
    """Parse JavaScript source into a ``Toplevel`` node."""
    text = _strip_hashbang(text)
    try:
        tree = parse_tree(text, filename)
    except UnexpectedInput as e:
        line = getattr(e, 'line', None)
        if isinstance(e, UnexpectedToken) and e.token.type == '$END':
            message = "Unexpected end of input"
        elif isinstance(e, UnexpectedToken):
            message = f"Unexpected token {e.token.value!r}"
        else:
            message = f"Unexpected character {text[e.pos_in_stream]!r}" if e.pos_in_stream is not None \
                else "Unexpected character"
        raise JSSyntaxError(
            message,
            filename=filename,
            line_number=line if line and line > 0 else None,
            column=getattr(e, 'column', None),
            context=get_line_context(text, line),
        ) from e

    try:
        return JSTransformer(filename, text).transform(tree)
    except VisitError as e:
        if isinstance(e.orig_exc, UnbrowserifyError):
            raise e.orig_exc from None
        raise
