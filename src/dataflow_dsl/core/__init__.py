"""Grammar-tree engine shared by all surface languages.

It provides:
- grammar words, the atoms matching single tokens;
- grammar nodes and grammars, forests of words describing statements;
- the evaluator verifying, completing and refactoring text.
"""

from .evaluator import LINE_SEPARATOR, Evaluator, Token, split_lines
from .grammar import Grammar, GrammarBuilder, GrammarNode
from .words import (
    AnyWord,
    BracketWord,
    BaseWord,
    ConstantWord,
    InputLabelWord,
    InputWord,
    IntersectionWord,
    LabelWord,
    ListWord,
    NegatableWord,
    ParenthesesWord,
    Replacement,
    Word,
)

__all__ = (
    'AnyWord',
    'BracketWord',
    'BaseWord',
    'ConstantWord',
    'LINE_SEPARATOR',
    'Evaluator',
    'Grammar',
    'GrammarBuilder',
    'GrammarNode',
    'InputLabelWord',
    'InputWord',
    'IntersectionWord',
    'LabelWord',
    'ListWord',
    'NegatableWord',
    'ParenthesesWord',
    'Replacement',
    'Token',
    'Word',
    'split_lines',
)
