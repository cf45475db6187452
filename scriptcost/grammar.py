"""
grammar.py — PEG grammar for the game-script language
======================================================

A parsimonious grammar covering the JavaScript subset that game scripts
are written in: ES module imports/exports, (async) functions, arrow
functions, ``const``/``let``/``var`` with destructuring, the usual
statements and the full expression precedence ladder, template literals
with substitutions, and ``await``.

Conventions
-----------
* ``_`` is whitespace *and* comments (``//…`` and ``/* … */``).
* Statements consume their own trailing ``_``; expressions do not.
* Keywords are regexes with an identifier-boundary lookahead so that
  ``iffy`` is an identifier, not ``if`` followed by ``fy``.
* Regular-expression literals, classes, ``switch`` and labels are not
  part of the subset.

The compiled grammar is exported as ``SCRIPT_GRAMMAR``; the raw text as
``SCRIPT_GRAMMAR_TEXT`` (useful for tests that compile it themselves).
"""

from __future__ import annotations

from parsimonious.grammar import Grammar

SCRIPT_GRAMMAR_TEXT = r'''
    # ─────────────────────────────────────────────────────────────
    # Top-Level Structure
    # ─────────────────────────────────────────────────────────────

    program             = _ statement*

    statement           = block / import_decl / export_decl / function_decl
                        / var_statement / if_stmt / while_stmt / do_while_stmt
                        / for_in_of_stmt / for_stmt / try_stmt / return_stmt
                        / break_stmt / continue_stmt / throw_stmt / empty_stmt
                        / expr_stmt

    block               = "{" _ statement* "}" _
    empty_stmt          = ";" _
    semi                = ";"? _

    # ─────────────────────────────────────────────────────────────
    # Modules
    # ─────────────────────────────────────────────────────────────

    import_decl         = import_from / import_bare
    import_from         = IMPORT _ import_clause _ FROM _ string _ semi
    import_bare         = IMPORT _ string _ semi
    import_clause       = import_named / import_namespace / import_default_named
                        / identifier
    import_default_named = identifier _ "," _ (import_named / import_namespace)
    import_named        = "{" _ (import_spec _ ("," _ import_spec _)* ("," _)?)? "}"
    import_spec         = property_name (_ AS _ identifier)?
    import_namespace    = "*" _ AS _ identifier

    export_decl         = EXPORT _ (DEFAULT _)? (function_decl / var_statement / expr_stmt)

    # ─────────────────────────────────────────────────────────────
    # Declarations
    # ─────────────────────────────────────────────────────────────

    function_decl       = (ASYNC _)? FUNCTION _ ("*" _)? identifier _ params _ block
    params              = "(" _ (param _ ("," _ param _)* ("," _)?)? ")"
    param               = rest_element / param_default / binding
    param_default       = binding _ "=" _ assign_expr
    rest_element        = "..." _ binding

    binding             = identifier / array_pattern / object_pattern
    array_pattern       = "[" _ (param _ ("," _ param _)* ("," _)?)? "]"
    object_pattern      = "{" _ (pattern_prop _ ("," _ pattern_prop _)* ("," _)?)? "}"
    pattern_prop        = rest_element / pattern_keyed / pattern_default / identifier
    pattern_keyed       = property_name _ ":" _ param
    pattern_default     = identifier _ "=" _ assign_expr

    var_statement       = var_decl _ semi
    var_decl            = VAR_KIND _ declarator (_ "," _ declarator)*
    declarator          = binding (_ "=" _ assign_expr)?

    # ─────────────────────────────────────────────────────────────
    # Statements
    # ─────────────────────────────────────────────────────────────

    if_stmt             = IF _ "(" _ expr _ ")" _ statement (ELSE _ statement)?
    while_stmt          = WHILE _ "(" _ expr _ ")" _ statement
    do_while_stmt       = DO _ statement WHILE _ "(" _ expr _ ")" _ semi
    for_stmt            = FOR _ "(" _ for_init? _ ";" _ expr? _ ";" _ expr? _ ")" _ statement
    for_init            = var_decl / expr
    for_in_of_stmt      = FOR _ "(" _ for_left _ (OF / IN) _ expr _ ")" _ statement
    for_left            = var_head / call_member
    var_head            = VAR_KIND _ binding
    try_stmt            = TRY _ block catch_clause? finally_clause?
    catch_clause        = CATCH _ ("(" _ binding _ ")" _)? block
    finally_clause      = FINALLY _ block
    return_stmt         = RETURN (_ expr)? _ semi
    break_stmt          = BREAK _ semi
    continue_stmt       = CONTINUE _ semi
    throw_stmt          = THROW _ expr _ semi
    expr_stmt           = expr _ semi

    # ─────────────────────────────────────────────────────────────
    # Expressions
    # ─────────────────────────────────────────────────────────────

    expr                = assign_expr (_ "," _ assign_expr)*
    assign_expr         = arrow_function / assignment / conditional
    assignment          = call_member _ assign_op _ assign_expr
    arrow_function      = (ASYNC _)? arrow_params _ "=>" _ (block / assign_expr)
    arrow_params        = params / identifier
    conditional         = logical_or (_ "?" _ assign_expr _ ":" _ assign_expr)?

    logical_or          = logical_and (_ or_op _ logical_and)*
    logical_and         = bit_or (_ and_op _ bit_or)*
    bit_or              = bit_xor (_ bit_or_op _ bit_xor)*
    bit_xor             = bit_and (_ bit_xor_op _ bit_and)*
    bit_and             = equality (_ bit_and_op _ equality)*
    equality            = relational (_ equality_op _ relational)*
    relational          = shift (_ relational_op _ shift)*
    shift               = additive (_ shift_op _ additive)*
    additive            = multiplicative (_ additive_op _ multiplicative)*
    multiplicative      = exponent (_ mul_op _ exponent)*
    exponent            = unary (_ exp_op _ exponent)?

    unary               = await_expr / prefix_update / prefix_unary / postfix_expr
    await_expr          = AWAIT _ unary
    prefix_update       = update_op _ unary
    prefix_unary        = unary_op _ unary
    postfix_expr        = call_member (~r"[ \t]*" update_op)?

    call_member         = (new_expr / primary) call_tail*
    call_tail           = _ (arguments / member_dot / member_index / optional_chain)
    arguments           = "(" _ (argument _ ("," _ argument _)* ("," _)?)? ")"
    argument            = spread_element / assign_expr
    spread_element      = "..." _ assign_expr
    member_dot          = "." !"." _ property_name
    member_index        = "[" _ expr _ "]"
    optional_chain      = "?." !~r"\d" _ (arguments / member_index / property_name)
    new_expr            = NEW _ new_callee (_ arguments)?
    new_callee          = (new_expr / primary) (_ (member_dot / member_index))*

    primary             = literal / template / array_literal / object_literal
                        / function_expr / paren_expr / this_expr / identifier
    paren_expr          = "(" _ expr _ ")"
    this_expr           = ~r"this(?![A-Za-z0-9_$])"
    function_expr       = (ASYNC _)? FUNCTION _ ("*" _)? identifier? _ params _ block

    array_literal       = "[" _ (argument _ ("," _ argument _)* ("," _)?)? "]"
    object_literal      = "{" _ (object_member _ ("," _ object_member _)* ("," _)?)? "}"
    object_member       = spread_element / method_member / keyed_member / identifier
    method_member       = (ASYNC _)? ("*" _)? prop_key _ params _ block
    keyed_member        = prop_key _ ":" _ assign_expr
    prop_key            = computed_key / property_name / string / number
    computed_key        = "[" _ assign_expr _ "]"

    template            = "`" template_part* "`"
    template_part       = template_subst / template_chars
    template_subst      = "${" _ expr _ "}"
    template_chars      = ~r"(?:[^`\\$]|\\[\s\S]|\$(?!\{))+"

    # ─────────────────────────────────────────────────────────────
    # Operators
    # ─────────────────────────────────────────────────────────────

    assign_op           = ~r"(?:\*\*|>>>|<<|>>|\?\?|&&|\|\||[-+*/%&|^])?=(?![=>])"
    or_op               = ~r"\|\|(?!=)|\?\?(?!=)"
    and_op              = ~r"&&(?!=)"
    bit_or_op           = ~r"\|(?![|=])"
    bit_xor_op          = ~r"\^(?!=)"
    bit_and_op          = ~r"&(?![&=])"
    equality_op         = ~r"===|!==|==|!="
    relational_op       = ~r"<=|>=|<(?![<=])|>(?![>=])|instanceof(?![A-Za-z0-9_$])|in(?![A-Za-z0-9_$])"
    shift_op            = ~r"(?:>>>|<<|>>)(?!=)"
    additive_op         = ~r"\+(?![+=])|-(?![-=])"
    mul_op              = ~r"\*(?![*=])|/(?![/*=])|%(?!=)"
    exp_op              = ~r"\*\*(?!=)"
    update_op           = ~r"\+\+|--"
    unary_op            = ~r"[!~]|\+(?!\+)|-(?!-)|(?:typeof|void|delete)(?![A-Za-z0-9_$])"

    # ─────────────────────────────────────────────────────────────
    # Literals
    # ─────────────────────────────────────────────────────────────

    literal             = number / string / boolean / null
    number              = ~r"0[xX][0-9a-fA-F_]+n?|0[bB][01_]+n?|0[oO][0-7_]+n?|(?:\d[\d_]*\.?[\d_]*|\.\d[\d_]*)(?:[eE][+-]?\d+)?n?"
    string              = ~r'"(?:[^"\\\n]|\\[\s\S])*"' / ~r"'(?:[^'\\\n]|\\[\s\S])*'"
    boolean             = ~r"(?:true|false)(?![A-Za-z0-9_$])"
    null                = ~r"null(?![A-Za-z0-9_$])"

    # ─────────────────────────────────────────────────────────────
    # Keywords
    # ─────────────────────────────────────────────────────────────

    keyword             = ~r"(?:await|break|case|catch|class|const|continue|debugger|default|delete|do|else|export|extends|false|finally|for|function|if|import|in|instanceof|let|new|null|return|super|switch|this|throw|true|try|typeof|var|void|while|with|yield)(?![A-Za-z0-9_$])"

    IMPORT              = ~r"import(?![A-Za-z0-9_$])"
    EXPORT              = ~r"export(?![A-Za-z0-9_$])"
    DEFAULT             = ~r"default(?![A-Za-z0-9_$])"
    FROM                = ~r"from(?![A-Za-z0-9_$])"
    AS                  = ~r"as(?![A-Za-z0-9_$])"
    ASYNC               = ~r"async(?![A-Za-z0-9_$])"
    AWAIT               = ~r"await(?![A-Za-z0-9_$])"
    FUNCTION            = ~r"function(?![A-Za-z0-9_$])"
    VAR_KIND            = ~r"(?:const|let|var)(?![A-Za-z0-9_$])"
    IF                  = ~r"if(?![A-Za-z0-9_$])"
    ELSE                = ~r"else(?![A-Za-z0-9_$])"
    WHILE               = ~r"while(?![A-Za-z0-9_$])"
    DO                  = ~r"do(?![A-Za-z0-9_$])"
    FOR                 = ~r"for(?![A-Za-z0-9_$])"
    OF                  = ~r"of(?![A-Za-z0-9_$])"
    IN                  = ~r"in(?![A-Za-z0-9_$])"
    TRY                 = ~r"try(?![A-Za-z0-9_$])"
    CATCH               = ~r"catch(?![A-Za-z0-9_$])"
    FINALLY             = ~r"finally(?![A-Za-z0-9_$])"
    RETURN              = ~r"return(?![A-Za-z0-9_$])"
    BREAK               = ~r"break(?![A-Za-z0-9_$])"
    CONTINUE            = ~r"continue(?![A-Za-z0-9_$])"
    THROW               = ~r"throw(?![A-Za-z0-9_$])"
    NEW                 = ~r"new(?![A-Za-z0-9_$])"

    # ─────────────────────────────────────────────────────────────
    # Identifiers & Whitespace
    # ─────────────────────────────────────────────────────────────

    identifier          = !keyword ~r"[A-Za-z_$][A-Za-z0-9_$]*"
    property_name       = ~r"[A-Za-z_$][A-Za-z0-9_$]*"
    _                   = ~r"(?:\s|//[^\n]*|/\*[\s\S]*?\*/)*"
'''

SCRIPT_GRAMMAR = Grammar(SCRIPT_GRAMMAR_TEXT)
