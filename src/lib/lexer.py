"""
Custom Pygments lexer for nutcompiler template syntax

Provides syntax highlighting for template sources, used by the CLI's
--highlight option to render a browsable view of each template.

Token types:
- Comment.Multiline: {{-- comments --}}
- Comment.Preproc: directive and echo delimiters
- Keyword: directive names (if, for, switch, ...)
- Name.Variable / Name.Attribute: variables and property steps
- Name.Function: function calls and filter names
- Operator: ternary, arithmetic and filter operators
- Literal: strings and numbers
- Other: literal template text (HTML passes through as Name.Builtin)
"""

import re

from pygments.lexer import RegexLexer, bygroups
from pygments.token import (
    Comment,
    Keyword,
    Name,
    Number,
    Operator,
    Other,
    Punctuation,
    String,
    Text,
)


class NutLexer(RegexLexer):
    """
    Lexer for nutcompiler templates

    Example:
        <h1>{{ title|upper }}</h1>{@if:user.active}Hi{@endif}

    Tokens:
        {{ → Comment.Preproc
        title → Name.Variable
        | → Operator
        upper → Name.Function
        {@ → Comment.Preproc
        if → Keyword
        user → Name.Variable
        .active → Name.Attribute
    """

    name = 'Nut'
    aliases = ['nut', 'nutcompiler']
    filenames = ['*.nut']
    flags = re.MULTILINE | re.DOTALL

    expression = [
        (r'\s+', Text),
        (r"'[^']*'|\"[^\"]*\"", String),
        (r'\d+(\.\d+)?', Number),
        (r'(\|)(\s*)(\w+(?:\s+\w+)*)', bygroups(Operator, Text, Name.Function)),
        (r'\b(and|or)\b|\?|:|&&|\|\||[-+*/%]|==|!=|<=|>=|<|>|!|=', Operator),
        (r'\b(in)\b', Keyword),
        (r'\w+(?=\()', Name.Function),
        (r'(\.)(\w+)', bygroups(Punctuation, Name.Attribute)),
        (r'\$?\w+', Name.Variable),
        (r'[()\[\],]', Punctuation),
    ]

    tokens = {
        'root': [
            # {{-- comment --}} must win over {{ echo }}
            (r'\{\{--.*?--\}\}', Comment.Multiline),

            # {@name or {@name:
            (r'(\{@)(\s*)(\w+)(\s*)(:?)',
             bygroups(Comment.Preproc, Text, Keyword, Text, Punctuation), 'directive'),

            # {{ expression }}
            (r'\{\{', Comment.Preproc, 'content'),

            # HTML tags (pass through as-is)
            (r'<[^>]+>', Name.Builtin),

            # Everything else is literal text
            (r'[^{<]+', Other),
            (r'.', Other),
        ],

        'directive': [
            (r'\}', Comment.Preproc, '#pop'),
        ] + expression + [
            (r'.', Text),
        ],

        'content': [
            (r'\}\}', Comment.Preproc, '#pop'),
        ] + expression + [
            (r'.', Text),
        ],
    }


def get_lexer() -> NutLexer:
    """
    Get the NutLexer instance

    Returns:
        NutLexer instance ready for use with Pygments
    """
    return NutLexer()
