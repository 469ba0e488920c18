import ply.lex as lex
from sfl.errors import LexError, SourceLocation
import logging

logger = logging.getLogger(__name__)


class Lexer:
    # A string containing ignored characters (spaces, tabs and carriage returns)
    t_ignore = ' \t\r'

    # Keywords
    reserved = {
        'def': 'DEF',
        'let': 'LET',
        'if': 'IF',
        'else': 'ELSE',
        'true': 'TRUE',
        'false': 'FALSE',
    }

    # List of token names
    tokens = [
        'IDENTIFIER', 'NUMBER', 'TYPEVAR',
        'PLUS', 'MINUS', 'TIMES', 'DIVIDE',
        'LPAREN', 'RPAREN', 'LBRACE', 'RBRACE',
        'EQUALS', 'SEMICOLON', 'COLON', 'COMMA', 'ARROW', 'BACKSLASH',
        'LESS', 'GREATER', 'LESSEQUAL', 'GREATEREQUAL', 'EQUALEQUAL', 'NOTEQUAL',
    ] + list(reserved.values())

    # Regular expression rules for simple tokens
    t_PLUS = r'\+'
    t_MINUS = r'-'
    t_TIMES = r'\*'
    t_DIVIDE = r'/'
    t_EQUALS = r'='
    t_EQUALEQUAL = r'=='
    t_NOTEQUAL = r'!='
    t_LESSEQUAL = r'<='
    t_GREATEREQUAL = r'>='
    t_LESS = r'<'
    t_GREATER = r'>'
    t_LPAREN = r'\('
    t_RPAREN = r'\)'
    t_LBRACE = r'\{'
    t_RBRACE = r'\}'
    t_SEMICOLON = r';'
    t_COLON = r':'
    t_COMMA = r','
    t_ARROW = r'->'
    t_BACKSLASH = r'\\'

    # Regular expression rules with actions
    def t_TYPEVAR(self, t):
        r"'[a-zA-Z_][a-zA-Z_0-9]*"
        t.value = t.value[1:]
        return t

    def t_IDENTIFIER(self, t):
        r'[a-zA-Z_][a-zA-Z_0-9]*'
        # Check for reserved words
        t.type = self.reserved.get(t.value, 'IDENTIFIER')
        logger.debug("Token recognized: %s, value: %s", t.type, t.value)
        return t

    def t_NUMBER(self, t):
        r'\d+'
        t.value = int(t.value)
        return t

    # Comments
    def t_COMMENT(self, t):
        r'\#.*'
        pass

    # Define a rule so we can track line numbers
    def t_newline(self, t):
        r'\n+'
        t.lexer.lineno += len(t.value)

    # Error handling rule
    def t_error(self, t):
        raise LexError(
            f"Illegal character '{t.value[0]}'",
            SourceLocation(self.source_file, t.lineno, self.column(t.lexpos)),
        )

    # Build the lexer
    def __init__(self):
        self.lexer = lex.lex(module=self)
        self.source = ''
        self.source_file = '<unknown>'

    def input(self, data, source_file='<unknown>'):
        self.source = data
        self.source_file = source_file
        self.lexer.lineno = 1
        self.lexer.input(data)

    def column(self, lexpos):
        """1-based column of an absolute offset into the current source"""
        line_start = self.source.rfind('\n', 0, lexpos) + 1
        return lexpos - line_start + 1

    def location(self, lineno, lexpos):
        return SourceLocation(self.source_file, lineno, self.column(lexpos))

    def token(self):
        tok = self.lexer.token()
        if tok:
            tok.column = self.column(tok.lexpos)
        return tok

    def tokenize(self, data, source_file='<unknown>'):
        """All tokens of `data`, mostly useful for tests and debugging"""
        self.input(data, source_file)
        return list(iter(self.token, None))
