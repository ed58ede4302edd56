"""JSON Schema of context and specification documents."""

from functools import cache
from json import dumps

from pydantic import TypeAdapter
from pydantic.json_schema import GenerateJsonSchema

from dataflow_dsl.registry import DslContext
from dataflow_dsl.schema import ContextSpec, Step


class SchemaGenerator(GenerateJsonSchema):
    """JSON Schema generator of dataflow-dsl documents."""

    @classmethod
    @cache
    def make_schema(cls, kind: str = 'context', indent: int | str | None = 4) -> str:
        """Generate a JSON Schema.

        Args:
            kind: `context` for context documents, `spec` for documents
                of specification files.
            indent: Indentation level used for JSON formatting.

        Returns:
            Serialized JSON Schema string.

        Raises:
            ValueError: If the kind is unknown.
        """
        if kind == 'context':
            schema = DslContext.model_json_schema(schema_generator=cls)
            title = 'dataflow-dsl context'
        elif kind == 'spec':
            schema = TypeAdapter(ContextSpec | Step).json_schema(schema_generator=cls)
            title = 'dataflow-dsl specification'
        else:
            raise ValueError(f'Unknown schema kind {kind!r}')

        return dumps(
            {
                **schema,
                'title': title,
                '$schema': cls.schema_dialect,
            },
            ensure_ascii=False,
            sort_keys=True,
            indent=indent,
        )
