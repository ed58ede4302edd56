"""Base Pydantic models for DSL elements.

This module defines the foundational model classes used by all engine
structures. It enforces immutability and strict schema validation so that
registry snapshots, grammar words and results are deterministic and safe
to share between grammar builders, evaluators and validators.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SchemaModel(BaseModel):
    """Base immutable model for all DSL elements.

    This class serves as the root for all Pydantic models representing
    registry snapshots, grammar words, completions and diagnostics.

    Design principles enforced by this model:
        - Immutability: elements cannot be modified after creation.
          A grammar closes over registry snapshots at build time, so the
          snapshots must not change behind its back.
        - Strict schema validation: unknown or extra fields are rejected
          to avoid silent errors caused by typos in context documents.

    All DSL models must inherit from this class.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        frozen=True,
        extra='forbid',
        populate_by_name=True,
    )


class DescribedMixin(SchemaModel):
    """Mixin providing element self-documentation.

    Extends the base schema model with optional metadata fields intended
    for documentation, reporting, and user interfaces.

    The fields defined in this model do not affect validation semantics
    and are used purely for descriptive purposes.
    """

    title: str | None = Field(
        default=None,
        title='Title',
        description='Short human-readable title of the DSL element.',
    )

    description: str | None = Field(
        default=None,
        title='Description',
        description=(
            'Detailed human-readable description of the DSL element.'
        ),
    )


class SettingsModel(BaseSettings):
    """Base immutable model for engine settings.

    This class serves as the root for all settings models responsible for
    resolving runtime configuration (for example, environment variables
    or local overrides).

    Design principles enforced by this model:
        - Immutability: resolved settings cannot be modified after creation.
        - Tolerant schema handling: unknown or extra fields are ignored.
          This allows the surrounding environment to contain unrelated
          variables without breaking configuration resolution.

    All engine settings models must inherit from this class.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        extra='ignore',
    )
