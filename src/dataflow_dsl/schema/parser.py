"""Parser of conformance specification files.

A specification file is a YAML stream. The first document may be a
`spec: context` header with label types and available inputs; every
other document is a step.
"""

from typing import TYPE_CHECKING

from pydantic import TypeAdapter, ValidationError
from yaml import safe_load_all
from yaml.error import MarkedYAMLError

from dataflow_dsl.errors import DSLError, SpecError
from dataflow_dsl.languages import get_language
from dataflow_dsl.registry import DslContext
from dataflow_dsl.settings import EngineSettings, get_settings

from .headers import ContextSpec
from .steps import Step

if TYPE_CHECKING:
    from io import TextIOBase

    from dataflow_dsl.languages import Language

    from .steps import BaseStep

#: Fully unpacked specification file: context header and steps.
type Source = tuple[DslContext, tuple['BaseStep', ...]]

HEADER_MARKER = 'context'


class SpecParser:
    """Parses specification files and builds their languages."""

    def __init__(self, settings: EngineSettings | None = None) -> None:
        """Initialize a parser.

        Args:
            settings: Engine settings passed to the built languages.
        """
        self.settings = settings or get_settings()
        self.steps = TypeAdapter(Step)

    def parse(self, content: 'TextIOBase | str', *,
              filename: str | None = None) -> Source:
        """Parse a YAML stream into a context and steps.

        Args:
            content: YAML content as a string or file-like object.
            filename: Optional name of the source used in error messages.

        Returns:
            The context (empty without header) and the steps in order.

        Raises:
            SpecError: If YAML parsing fails, a document is not a valid
                header or step, or the header is not the first document.
        """
        try:
            documents = [
                document
                for document in safe_load_all(content)
                if document is not None
            ]

        except MarkedYAMLError as base:
            raise SpecError.from_yaml_error(base) from base

        context = DslContext()
        steps = []

        for position, document in enumerate(documents):
            if isinstance(document, dict) and document.get('spec') == HEADER_MARKER:
                if position > 0:
                    raise SpecError('Context header must be at first position')
                context = self.validate(ContextSpec, document, position, filename).to_context()
                continue

            steps.append(self.validate(self.steps, document, position, filename))

        return context, tuple(steps)

    @staticmethod
    def validate(model: 'type[ContextSpec] | TypeAdapter', document: object,
                 position: int, filename: str | None) -> 'ContextSpec | BaseStep':
        """Validate a single document.

        Raises:
            SpecError: If the document is invalid.
        """
        try:
            if isinstance(model, TypeAdapter):
                return model.validate_python(document)
            return model.model_validate(document)

        except ValidationError as base:
            raise SpecError.from_pydantic_error(
                base,
                data=document,
                filename=filename,
                step_num=position,
            ) from base

    def language(self, name: str, context: DslContext) -> 'Language':
        """Build the language a step runs against.

        Raises:
            DSLError: If the language cannot be built.
        """
        try:
            return get_language(name, context, settings=self.settings)

        except KeyError as base:
            raise DSLError(f'Unknown language {name!r}') from base
