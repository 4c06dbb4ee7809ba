"""Lark grammars for comprehension text and binding patterns.

The comprehension grammar only recognises Rust tokens and balanced
delimiters; sentence structure is resolved over the resulting token trees
by the parser. Patterns get a full grammar of their own.
"""

from __future__ import annotations

from functools import lru_cache

from lark import Lark

TOKEN_TREE_GRAMMAR = r"""
start: _tt*

_tt: paren
   | bracket
   | brace
   | NAME
   | LIFETIME
   | NUMBER
   | STRING
   | RAW_STRING
   | CHAR
   | PUNCT

paren: "(" _tt* ")"
bracket: "[" _tt* "]"
brace: "{" _tt* "}"

NAME: /(?:r#)?[^\W\d]\w*/
LIFETIME: /'[^\W\d]\w*/
NUMBER: /\d[\d_]*(?:\.\d[\d_]*)?(?:[eE][+-]?[\d_]+)?\w*/
STRING.2: /b?"(?:\\[\s\S]|[^"\\])*"/
RAW_STRING.3: /b?r"[^"]*"|b?r#"[\s\S]*?"#|b?r##"[\s\S]*?"##/
CHAR.2: /b?'(?:\\u\{[0-9a-fA-F_]{1,8}\}|\\x[0-9a-fA-F]{2}|\\.|[^'\\\n])'/
PUNCT: /<-|<<=|>>=|\.\.\.|\.\.=|::|->|=>|==|!=|<=|>=|&&|\|\||\+=|-=|\*=|\/=|%=|\^=|&=|\|=|<<|>>|\.\.|[-+*\/%^!&|=<>@.,;:#$?~]/

LINE_COMMENT: /\/\/[^\n]*/
BLOCK_COMMENT: /\/\*[\s\S]*?\*\//

%import common.WS
%ignore WS
%ignore LINE_COMMENT
%ignore BLOCK_COMMENT
"""

PATTERN_GRAMMAR = r"""
?start: pattern

?pattern: ident_pattern
        | wildcard
        | tuple_pattern
        | tuple_struct_pattern
        | struct_pattern
        | ref_pattern

ident_pattern: REF? MUT? NAME
wildcard: UNDERSCORE
ref_pattern: (AMP | AMP_MUT) pattern
tuple_pattern: "(" _elements? ")"
tuple_struct_pattern: path "(" _elements? ")"
struct_pattern: path "{" _fields? "}"
path: NAME ("::" NAME)*

_elements: _element (COMMA _element)* COMMA?
_element: pattern | rest
rest: DOTDOT

_fields: _field (COMMA _field)* COMMA?
_field: field | shorthand_field | rest
field: NAME ":" pattern
shorthand_field: REF? MUT? NAME

REF: "ref"
MUT: "mut"
UNDERSCORE: "_"
AMP: "&"
AMP_MUT.2: /&\s*mut\b/
COMMA: ","
DOTDOT: ".."
NAME: /(?:r#)?[^\W\d]\w*/

LINE_COMMENT: /\/\/[^\n]*/
BLOCK_COMMENT: /\/\*[\s\S]*?\*\//

%import common.WS
%ignore WS
%ignore LINE_COMMENT
%ignore BLOCK_COMMENT
"""


@lru_cache(maxsize=1)
def token_tree_parser() -> Lark:
    """Create the LALR parser that turns DSL text into token trees."""
    return Lark(
        TOKEN_TREE_GRAMMAR,
        parser="lalr",
        keep_all_tokens=True,
    )


@lru_cache(maxsize=1)
def pattern_parser() -> Lark:
    """Create the LALR parser for binding patterns."""
    return Lark(
        PATTERN_GRAMMAR,
        parser="lalr",
    )
