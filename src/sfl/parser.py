import ply.yacc as yacc
from sfl.lexer import Lexer
import sfl.sfl_ast as ast
from sfl.errors import ParseError, SourceLocation
import logging

logger = logging.getLogger(__name__)


class Parser:
    start = 'program'

    def __init__(self):
        # Initialize the lexer
        self.lexer = Lexer()
        self.tokens = self.lexer.tokens  # Get token list from lexer
        self.parser = yacc.yacc(module=self, write_tables=False, debug=False)
        logger.debug("Parser initialized")

    def parse(self, source: str, file_path: str = "<unknown>") -> ast.Program:
        """Parse source code into an AST"""
        self.lexer.input(source, file_path)
        statements, result = self.parser.parse(lexer=self.lexer)
        logger.debug("Parsed %d top-level item(s) from %s", len(statements), file_path)
        return ast.Program(statements, result, source_file=file_path,
                           location=SourceLocation(file_path, 1, 1))

    def _loc(self, p, n):
        """Location of the n-th symbol of a production, which must be a token"""
        return self.lexer.location(p.lineno(n), p.lexpos(n))

    # Program structure

    def p_program(self, p):
        '''program : item_list
                   | item_list expression'''
        p[0] = (tuple(p[1]), p[2] if len(p) == 3 else None)

    def p_item_list(self, p):
        '''item_list : item_list item
                     | empty'''
        if len(p) == 3:
            p[0] = p[1] + [p[2]]
        else:
            p[0] = []

    def p_item(self, p):
        '''item : function_definition
                | let_statement
                | expression_statement'''
        p[0] = p[1]

    def p_expression_statement(self, p):
        '''expression_statement : expression SEMICOLON'''
        p[0] = ast.ExpressionStatement(p[1], location=p[1].location)

    def p_let_statement(self, p):
        '''let_statement : LET IDENTIFIER EQUALS expression SEMICOLON
                         | LET IDENTIFIER COLON type_expression EQUALS expression SEMICOLON'''
        if len(p) == 6:  # let x = e;
            p[0] = ast.LetStatement(p[2], p[4], location=self._loc(p, 2))
        else:  # let x: T = e;
            p[0] = ast.LetStatement(p[2], p[6], type_annotation=p[4], location=self._loc(p, 2))

    def p_function_definition(self, p):
        '''function_definition : DEF IDENTIFIER LPAREN parameter_list RPAREN return_annotation block
                               | DEF IDENTIFIER LPAREN RPAREN return_annotation block'''
        if len(p) == 8:
            params, return_type, body = p[4], p[6], p[7]
        else:
            params, return_type, body = [], p[5], p[6]
        p[0] = ast.FunctionDefinition(p[2], tuple(params), return_type, body, location=self._loc(p, 2))

    def p_return_annotation(self, p):
        '''return_annotation : COLON type_expression
                             | empty'''
        p[0] = p[2] if len(p) == 3 else None

    def p_parameter_list(self, p):
        '''parameter_list : parameter
                          | parameter_list COMMA parameter'''
        if len(p) == 2:
            p[0] = [p[1]]
        else:
            p[0] = p[1] + [p[3]]

    def p_parameter(self, p):
        '''parameter : IDENTIFIER
                     | IDENTIFIER COLON type_expression'''
        annotation = p[3] if len(p) == 4 else None
        p[0] = ast.Parameter(p[1], annotation, location=self._loc(p, 1))

    def p_block(self, p):
        '''block : LBRACE item_list RBRACE
                 | LBRACE item_list expression RBRACE'''
        result = p[3] if len(p) == 5 else None
        p[0] = ast.Block(tuple(p[2]), result, location=self._loc(p, 1))

    # Type annotations

    def p_type_expression(self, p):
        '''type_expression : IDENTIFIER
                           | TYPEVAR
                           | LPAREN type_list RPAREN ARROW type_expression
                           | LPAREN RPAREN ARROW type_expression'''
        location = self._loc(p, 1)
        if len(p) == 2:
            if p.slice[1].type == 'TYPEVAR':
                p[0] = ast.TypeVariableName(p[1], location=location)
            else:
                p[0] = ast.TypeName(p[1], location=location)
        elif len(p) == 6:
            p[0] = ast.FunctionTypeExpression(tuple(p[2]), p[5], location=location)
        else:
            p[0] = ast.FunctionTypeExpression((), p[4], location=location)

    def p_type_list(self, p):
        '''type_list : type_expression
                     | type_list COMMA type_expression'''
        if len(p) == 2:
            p[0] = [p[1]]
        else:
            p[0] = p[1] + [p[3]]

    # Expressions

    def p_expression(self, p):
        '''expression : lambda_expression
                      | comparison_expression'''
        p[0] = p[1]

    def p_lambda_expression(self, p):
        '''lambda_expression : BACKSLASH parameter_list ARROW expression'''
        p[0] = ast.Lambda(tuple(p[2]), p[4], location=self._loc(p, 1))

    def p_comparison_expression(self, p):
        '''comparison_expression : additive_expression
                                 | additive_expression EQUALEQUAL additive_expression
                                 | additive_expression NOTEQUAL additive_expression
                                 | additive_expression LESS additive_expression
                                 | additive_expression LESSEQUAL additive_expression
                                 | additive_expression GREATER additive_expression
                                 | additive_expression GREATEREQUAL additive_expression'''
        if len(p) == 2:
            p[0] = p[1]
        else:
            p[0] = ast.BinaryOperation(p[1], p[2], p[3], location=self._loc(p, 2))

    def p_additive_expression(self, p):
        '''additive_expression : multiplicative_expression
                               | additive_expression PLUS multiplicative_expression
                               | additive_expression MINUS multiplicative_expression'''
        if len(p) == 2:
            p[0] = p[1]
        else:
            p[0] = ast.BinaryOperation(p[1], p[2], p[3], location=self._loc(p, 2))

    def p_multiplicative_expression(self, p):
        '''multiplicative_expression : postfix_expression
                                     | multiplicative_expression TIMES postfix_expression
                                     | multiplicative_expression DIVIDE postfix_expression'''
        if len(p) == 2:
            p[0] = p[1]
        else:
            p[0] = ast.BinaryOperation(p[1], p[2], p[3], location=self._loc(p, 2))

    def p_postfix_expression(self, p):
        '''postfix_expression : primary_expression
                              | postfix_expression LPAREN argument_list RPAREN
                              | postfix_expression LPAREN RPAREN'''
        if len(p) == 2:
            p[0] = p[1]
        else:
            args = p[3] if len(p) == 5 else []
            p[0] = ast.FunctionCall(p[1], tuple(args), location=p[1].location)

    def p_argument_list(self, p):
        '''argument_list : expression
                         | argument_list COMMA expression'''
        if len(p) == 2:
            p[0] = [p[1]]
        else:
            p[0] = p[1] + [p[3]]

    def p_primary_expression_number(self, p):
        '''primary_expression : NUMBER'''
        p[0] = ast.IntLiteral(p[1], location=self._loc(p, 1))

    def p_primary_expression_bool(self, p):
        '''primary_expression : TRUE
                              | FALSE'''
        p[0] = ast.BoolLiteral(p[1] == 'true', location=self._loc(p, 1))

    def p_primary_expression_identifier(self, p):
        '''primary_expression : IDENTIFIER'''
        p[0] = ast.Identifier(p[1], location=self._loc(p, 1))

    def p_primary_expression_group(self, p):
        '''primary_expression : LPAREN expression RPAREN
                              | block
                              | if_expression'''
        p[0] = p[2] if len(p) == 4 else p[1]

    def p_if_expression(self, p):
        '''if_expression : IF expression block ELSE block
                         | IF expression block ELSE if_expression'''
        p[0] = ast.IfExpression(p[2], p[3], p[5], location=self._loc(p, 1))

    def p_empty(self, p):
        'empty :'
        pass

    def p_error(self, p):
        if p:
            raise ParseError(
                f"Syntax error at '{p.value}'",
                location=self.lexer.location(p.lineno, p.lexpos),
                notes=["Check syntax near this location"],
            )
        raise ParseError(
            "Syntax error at end of input",
            location=SourceLocation(self.lexer.source_file, self.lexer.lexer.lineno, 0),
            notes=["Unexpected end of file"],
        )
