"""
JavaScript Grammar Definition.

This module contains the Lark grammar for ECMAScript 5 (plus ``let`` and
``const`` declarations). It is written for the LALR parser with the
contextual lexer: reserved words only win over identifiers where the parser
can accept them, so ``a.default`` and ``{ if: 1 }`` still lex as names, and
a ``/`` lexes as a regular expression only where an expression may start.

Expression statements use the ``_nb`` ("no brace") copy of the leftmost
expression chain, which cannot begin with an object literal or a function
expression. Binary operators are parsed as a flat chain; precedence is
rebuilt by the transformer.
"""

js_grammar = r"""
    start: statement*

    // --- Statements ---
    ?statement: block
        | var_stmt
        | empty_stmt
        | expr_stmt
        | if_stmt
        | do_stmt
        | while_stmt
        | for_stmt
        | for_in_stmt
        | for_in_var_stmt
        | continue_stmt
        | break_stmt
        | return_stmt
        | with_stmt
        | switch_stmt
        | labeled_stmt
        | throw_stmt
        | try_stmt
        | debugger_stmt
        | function_decl

    block: "{" statement* "}"
    var_stmt: var_decls ";"
    var_decls: VAR_KIND var_decl ("," var_decl)*
    var_decl: NAME ["=" assign]
    empty_stmt: ";"
    expr_stmt: expression_nb ";"
    if_stmt: _IF "(" expression ")" statement [_ELSE statement]
    do_stmt: _DO statement _WHILE "(" expression ")" ";"?
    while_stmt: _WHILE "(" expression ")" statement
    for_stmt: _FOR "(" [for_init] ";" [expression] ";" [expression] ")" statement
    ?for_init: var_decls | expression
    for_in_stmt: _FOR "(" expression ")" statement
    for_in_var_stmt: _FOR "(" VAR_KIND NAME IN expression ")" statement
    continue_stmt: _CONTINUE [NAME] ";"
    break_stmt: _BREAK [NAME] ";"
    return_stmt: _RETURN [expression] ";"
    with_stmt: _WITH "(" expression ")" statement
    switch_stmt: _SWITCH "(" expression ")" "{" (case_clause | default_clause)* "}"
    case_clause: _CASE expression ":" statement*
    default_clause: _DEFAULT ":" statement*
    labeled_stmt: NAME ":" statement
    throw_stmt: _THROW expression ";"
    try_stmt: _TRY block (catch_clause finally_clause? | finally_clause)
    catch_clause: _CATCH "(" NAME ")" block
    finally_clause: _FINALLY block
    debugger_stmt: _DEBUGGER ";"

    // --- Functions ---
    function_decl: _FUNCTION NAME "(" params ")" function_body
    function_expr: _FUNCTION [NAME] "(" params ")" function_body
    params: (NAME ("," NAME)*)?
    function_body: "{" statement* "}"

    // --- Expressions ---
    ?expression: assign
        | expression "," assign -> sequence
    ?expression_nb: assign_nb
        | expression_nb "," assign -> sequence

    ?assign: conditional
        | lhs assign_op assign -> assign
    ?assign_nb: conditional_nb
        | lhs_nb assign_op assign -> assign
    !assign_op: "=" | "+=" | "-=" | "*=" | "/=" | "%=" | "<<=" | ">>=" | ">>>=" | "&=" | "^=" | "|="

    ?conditional: binary
        | binary "?" assign ":" assign -> conditional
    ?conditional_nb: binary_nb
        | binary_nb "?" assign ":" assign -> conditional

    ?binary: unary (binop unary)*
    ?binary_nb: unary_nb (binop unary)* -> binary
    !binop: "||" | "&&" | "|" | "^" | "&"
        | "==" | "!=" | "===" | "!=="
        | "<" | ">" | "<=" | ">=" | INSTANCEOF | IN
        | "<<" | ">>" | ">>>"
        | "+" | "-" | "*" | "/" | "%"

    ?unary: postfix
        | unary_op unary -> unary_prefix
    ?unary_nb: postfix_nb
        | unary_op unary -> unary_prefix
    !unary_op: DELETE | VOID | TYPEOF | "++" | "--" | "+" | "-" | "~" | "!"

    ?postfix: lhs
        | lhs postfix_op -> unary_postfix
    ?postfix_nb: lhs_nb
        | lhs_nb postfix_op -> unary_postfix
    !postfix_op: "++" | "--"

    ?lhs: new_expr | call
    ?lhs_nb: new_expr_nb | call_nb

    ?new_expr: member
        | _NEW new_expr -> new_noargs
    ?new_expr_nb: member_nb
        | _NEW new_expr -> new_noargs

    ?member: primary
        | function_expr
        | member "." prop_ident -> dot
        | member "[" expression "]" -> sub
        | _NEW member arguments -> new
    ?member_nb: primary_nb
        | member_nb "." prop_ident -> dot
        | member_nb "[" expression "]" -> sub
        | _NEW member arguments -> new

    ?call: member arguments -> call
        | call arguments -> call
        | call "." prop_ident -> dot
        | call "[" expression "]" -> sub
    ?call_nb: member_nb arguments -> call
        | call_nb arguments -> call
        | call_nb "." prop_ident -> dot
        | call_nb "[" expression "]" -> sub

    arguments: "(" (assign ("," assign)*)? ")"
    prop_ident: NAME

    ?primary: primary_nb
        | object
    ?primary_nb: _THIS -> this
        | NAME -> name
        | NUMBER -> number
        | STRING -> string
        | REGEX -> regex
        | _NULL -> null
        | _TRUE -> true
        | _FALSE -> false
        | array
        | "(" expression ")"

    array: "[" element ("," element)* "]"
    element: assign?

    object: "{" (property ("," property)* ","?)? "}"
    property: prop_key ":" assign -> key_value
        | NAME prop_key "(" params ")" function_body -> accessor
    ?prop_key: NAME | STRING | NUMBER

    // --- Keywords ---
    VAR_KIND.2: /(?:var|let|const)(?![\w$])/
    _IF.2: /if(?![\w$])/
    _ELSE.2: /else(?![\w$])/
    _DO.2: /do(?![\w$])/
    _WHILE.2: /while(?![\w$])/
    _FOR.2: /for(?![\w$])/
    _CONTINUE.2: /continue(?![\w$])/
    _BREAK.2: /break(?![\w$])/
    _RETURN.2: /return(?![\w$])/
    _WITH.2: /with(?![\w$])/
    _SWITCH.2: /switch(?![\w$])/
    _CASE.2: /case(?![\w$])/
    _DEFAULT.2: /default(?![\w$])/
    _THROW.2: /throw(?![\w$])/
    _TRY.2: /try(?![\w$])/
    _CATCH.2: /catch(?![\w$])/
    _FINALLY.2: /finally(?![\w$])/
    _DEBUGGER.2: /debugger(?![\w$])/
    _FUNCTION.2: /function(?![\w$])/
    _NEW.2: /new(?![\w$])/
    _THIS.2: /this(?![\w$])/
    _NULL.2: /null(?![\w$])/
    _TRUE.2: /true(?![\w$])/
    _FALSE.2: /false(?![\w$])/
    DELETE.2: /delete(?![\w$])/
    VOID.2: /void(?![\w$])/
    TYPEOF.2: /typeof(?![\w$])/
    INSTANCEOF.2: /instanceof(?![\w$])/
    IN.2: /in(?![\w$])/

    // --- Tokens ---
    NAME: /(?:[^\W\d]|\$)(?:\w|\$)*/
    NUMBER: /0[xX][0-9a-fA-F]+|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?/
    STRING: /"(?:[^"\\\n\r]|\\(?:\r\n|[\s\S]))*"|'(?:[^'\\\n\r]|\\(?:\r\n|[\s\S]))*'/
    REGEX: /\/(?![*\/])(?:[^\\\/\[\n\r]|\\.|\[(?:[^\]\\\n\r]|\\.)*\])+\/[a-zA-Z]*/

    // Named so that automatic semicolon insertion can recognise them
    SEMICOLON: ";"
    RBRACE: "}"

    LINE_COMMENT: /\/\/[^\n\r\u2028\u2029]*/
    BLOCK_COMMENT: /\/\*[\s\S]*?\*\//
    WS: /[\s\ufeff]+/

    %ignore WS
    %ignore LINE_COMMENT
    %ignore BLOCK_COMMENT
"""
