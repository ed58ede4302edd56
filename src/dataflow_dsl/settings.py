"""Engine configuration resolved from the environment."""

from functools import cache

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from dataflow_dsl.models import SettingsModel


class EngineSettings(SettingsModel):
    """Settings shared by grammar builders, evaluators and validators.

    Values are read from environment variables prefixed with
    `DATAFLOW_DSL_`, for example `DATAFLOW_DSL_STRICT=false`.
    """

    model_config = SettingsConfigDict(
        env_prefix='DATAFLOW_DSL_',
        frozen=True,
        extra='ignore',
    )

    strict: bool = Field(
        default=True,
        title='Strict grammar building',
        description=(
            'Raise an error when a grammar builder produces a node that can '
            'neither be continued nor end a statement. When disabled, '
            'the problem is emitted as a warning.'
        ),
    )

    comment_prefixes: tuple[str, ...] = Field(
        default=('#', '//'),
        title='Comment prefixes',
        description=(
            'Lines starting with one of these prefixes are comments and are '
            'ignored by evaluators and validators.'
        ),
    )

    hide_listed_inputs: bool = Field(
        default=True,
        title='Hide listed inputs',
        description=(
            'Do not suggest inputs that are already part of the comma '
            'separated list being completed.'
        ),
    )

    def is_comment(self, line: str) -> bool:
        """Check whether a line is a comment line.

        Args:
            line: Raw line of DSL text.

        Returns:
            True if the line starts with a comment prefix.
        """
        return line.startswith(self.comment_prefixes)


@cache
def get_settings() -> EngineSettings:
    """Return the settings resolved from the current environment."""
    return EngineSettings()
