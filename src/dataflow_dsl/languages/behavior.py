"""Grammar of the node behavior language.

Each line of a behavior describes what an output port of a node emits:

    forward <input>[,<input>]*
    set <Type.Value>[,<Type.Value>]*
    unset <Type.Value>[,<Type.Value>]*
    assign <Type.Value>[,<Type.Value>]* if <term> [from <input>[,<input>]*]

A term combines `TRUE`, `FALSE` and label references (`input.Type.Value`
or `Type.Value`, optionally negated with `!` and wrapped in parentheses)
with `&&` and `||`.
"""

from typing import TYPE_CHECKING

from dataflow_dsl.core import (
    BracketWord,
    ConstantWord,
    GrammarBuilder,
    GrammarNode,
    InputLabelWord,
    InputWord,
    LabelWord,
    ListWord,
    NegatableWord,
    ParenthesesWord,
)
from dataflow_dsl.core.words import GROUP_CLOSE, GROUP_OPEN

if TYPE_CHECKING:
    from dataflow_dsl.core import Grammar, Word
    from dataflow_dsl.registry import DslContext

FORWARD = 'forward'
SET = 'set'
UNSET = 'unset'
ASSIGN = 'assign'
IF = 'if'
FROM = 'from'

#: Keywords a behavior statement may start with.
STATEMENT_KEYWORDS = (FORWARD, ASSIGN, SET, UNSET)

#: Boolean constants of terms.
CONSTANTS = ('TRUE', 'FALSE')

#: Boolean connectors of terms.
CONNECTORS = ('&&', '||')


class BehaviorGrammarBuilder(GrammarBuilder):
    """Builds the behavior grammar from a context snapshot."""

    language = 'behavior'
    multiline = False

    def build(self, context: 'DslContext') -> 'Grammar':
        """Build the behavior grammar.

        Args:
            context: Label types and available inputs of the edited node.

        Returns:
            The checked grammar.

        Raises:
            GrammarBuildError: If the grammar is malformed on strict mode.
        """
        return self.make([
            self.build_set_statement(context, SET),
            self.build_set_statement(context, UNSET),
            self.build_forward_statement(context),
            self.build_assign_statement(context),
        ])

    def build_labels(self, context: 'DslContext') -> ListWord:
        """Word of a comma separated `Type.Value` list."""
        return ListWord(word=LabelWord(labels=context.labels))

    def build_inputs(self, context: 'DslContext') -> ListWord:
        """Word of a comma separated input list."""
        return ListWord(
            word=InputWord(inputs=context.inputs),
            unique=self.settings.hide_listed_inputs,
        )

    def build_set_statement(self, context: 'DslContext', keyword: str) -> GrammarNode:
        """Build `set`/`unset <labels>`."""
        return GrammarNode(ConstantWord(word=keyword), [
            GrammarNode(self.build_labels(context), can_be_final=True),
        ])

    def build_forward_statement(self, context: 'DslContext') -> GrammarNode:
        """Build `forward <inputs>`."""
        return GrammarNode(ConstantWord(word=FORWARD), [
            GrammarNode(self.build_inputs(context), can_be_final=True),
        ])

    def build_assign_statement(self, context: 'DslContext') -> GrammarNode:
        """Build `assign <labels> if <term> [from <inputs>]`."""
        from_node = GrammarNode(ConstantWord(word=FROM), [
            GrammarNode(self.build_inputs(context), can_be_final=True),
        ])
        if_node = GrammarNode(ConstantWord(word=IF), self.build_term(context, from_node))

        return GrammarNode(ConstantWord(word=ASSIGN), [
            GrammarNode(self.build_labels(context), [if_node]),
        ])

    def build_term(self, context: 'DslContext', next_node: GrammarNode) -> list[GrammarNode]:
        """Build the operands of a boolean term.

        Every operand may end the statement, continue with a connector
        leading back to the operands, or continue with `next_node`.
        Parentheses are glued to an operand or stand alone as `(`/`!(`
        and `)` tokens.

        Args:
            context: Label types and available inputs.
            next_node: Node following a complete term.

        Returns:
            The nodes a term starts with.
        """
        connectors = [
            GrammarNode(ConstantWord(word=connector))
            for connector in CONNECTORS
        ]

        words: list[Word] = [ConstantWord(word=constant) for constant in CONSTANTS]
        words.append(InputLabelWord(inputs=context.inputs, labels=context.labels))

        closing = GrammarNode(BracketWord(bracket=GROUP_CLOSE), can_be_final=True)
        closing.children = [*connectors, next_node, closing]

        operands = [
            GrammarNode(self.build_operand(word), closing.children, can_be_final=True)
            for word in words
        ]

        opening = GrammarNode(NegatableWord(word=BracketWord(bracket=GROUP_OPEN)))
        opening.children = [*operands, opening]

        for connector in connectors:
            connector.children = opening.children

        return opening.children

    @staticmethod
    def build_operand(word: 'Word') -> NegatableWord:
        """Allow negations and parentheses around a term operand."""
        return NegatableWord(word=ParenthesesWord(word=NegatableWord(word=word)))
