"""Grammar engine for the dataflow diagram behavior and constraint DSLs.

The `dataflow_dsl` package implements a small composable grammar
representation reused by two surface languages: node behaviors
(`forward`, `set`, `unset`, `assign`) and flow constraints
(`data ... neverFlows ...`).

Key features:
- verification of DSL text with positional diagnostics;
- context-sensitive completion at an arbitrary cursor position;
- grammar-aware renaming that leaves the rest of the text byte-identical;
- a line-oriented validator of behaviors with exact error ranges;
- conformance specifications collected as pytest test items.

Grammars close over snapshots of the label type registry and of the
available inputs; they are rebuilt when those change.
"""

from dataflow_dsl.languages import BehaviorLanguage, ConstraintLanguage, Language, get_language
from dataflow_dsl.refactor import BehaviorRefactorer
from dataflow_dsl.registry import DslContext, LabelType, LabelTypeRegistry, LabelValue, load_context
from dataflow_dsl.results import Completion, CompletionKind, Diagnostic, ReplacementKind, Suggestion
from dataflow_dsl.validator import BehaviorValidator

__all__ = (
    'BehaviorLanguage',
    'BehaviorRefactorer',
    'BehaviorValidator',
    'Completion',
    'CompletionKind',
    'ConstraintLanguage',
    'Diagnostic',
    'DslContext',
    'LabelType',
    'LabelTypeRegistry',
    'LabelValue',
    'Language',
    'ReplacementKind',
    'Suggestion',
    'get_language',
    'load_context',
)
