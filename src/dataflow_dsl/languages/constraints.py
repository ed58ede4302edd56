"""Grammar of the constraint selection language.

A constraint forbids flows between selected data and nodes:

    data <selector> [node <selector>] neverFlows [to] [node <selector>] [where <condition>]
    node <selector> [data <selector>] neverFlows [to] [node <selector>] [where <condition>]

Selectors are `type <name>`, `Type.Value` characteristics (optionally
negated, optionally as a comma separated list) and `named <name>`.
Conditions are `present <variable>` and `empty intersection(<a>,<b>)`.
"""

from typing import TYPE_CHECKING

from dataflow_dsl.core import (
    AnyWord,
    ConstantWord,
    GrammarBuilder,
    GrammarNode,
    IntersectionWord,
    LabelWord,
    ListWord,
    NegatableWord,
)

if TYPE_CHECKING:
    from dataflow_dsl.core import Grammar
    from dataflow_dsl.registry import LabelTypeRegistry

DATA = 'data'
NODE = 'node'
NEVER_FLOWS = 'neverFlows'
TO = 'to'
WHERE = 'where'


class ConstraintGrammarBuilder(GrammarBuilder):
    """Builds the constraint grammar from a label registry snapshot."""

    language = 'constraint'

    def build(self, labels: 'LabelTypeRegistry') -> 'Grammar':
        """Build the constraint grammar.

        Args:
            labels: Label types characteristics are resolved against.

        Returns:
            The checked grammar.

        Raises:
            GrammarBuildError: If the grammar is malformed on strict mode.
        """
        where = GrammarNode(ConstantWord(word=WHERE), self.build_conditions())

        destinations = self.build_selectors(labels)
        for selector in destinations:
            for leaf in selector.leaves():
                leaf.can_be_final = True
                leaf.children.append(where)

        node_destination = GrammarNode(ConstantWord(word=NODE), destinations)
        to = GrammarNode(ConstantWord(word=TO), [node_destination, *destinations])

        never_flows = GrammarNode(
            ConstantWord(word=NEVER_FLOWS),
            [node_destination, to, where],
            can_be_final=True,
        )

        data_source = GrammarNode(ConstantWord(word=DATA))
        node_source = GrammarNode(ConstantWord(word=NODE))

        node_source.children = self.build_selectors(labels)
        for selector in node_source.children:
            for leaf in selector.leaves():
                leaf.children.extend((data_source, never_flows))

        data_source.children = self.build_selectors(labels)
        for selector in data_source.children:
            for leaf in selector.leaves():
                leaf.children.extend((node_source, never_flows))

        return self.make([node_source, data_source])

    @staticmethod
    def build_selectors(labels: 'LabelTypeRegistry') -> list[GrammarNode]:
        """Build a fresh set of selector subtrees.

        Each call returns new nodes, so leaves can be extended with
        different continuations.
        """
        return [
            GrammarNode(ConstantWord(word='type'), [
                GrammarNode(NegatableWord(word=AnyWord())),
            ]),
            GrammarNode(NegatableWord(word=LabelWord(labels=labels))),
            GrammarNode(NegatableWord(word=ListWord(word=LabelWord(labels=labels)))),
            GrammarNode(ConstantWord(word='named'), [
                GrammarNode(AnyWord()),
            ]),
        ]

    @staticmethod
    def build_conditions() -> list[GrammarNode]:
        """Build the conditions following `where`."""
        return [
            GrammarNode(ConstantWord(word='present'), [
                GrammarNode(NegatableWord(word=AnyWord()), can_be_final=True),
            ]),
            GrammarNode(ConstantWord(word='empty'), [
                GrammarNode(IntersectionWord(), can_be_final=True),
            ]),
        ]
