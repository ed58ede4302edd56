"""Command-line utilities for dataflow-dsl texts.

The commands run the editor-facing operations on files, which is handy
for scripting renames and for checking behaviors in CI.
"""

from json import dumps
from pathlib import Path

from click import Choice, ClickException, argument, echo, group, option, secho
from click import Path as PathParam
from yaml import safe_load

from dataflow_dsl.errors import ContextError
from dataflow_dsl.jsonschema import SchemaGenerator
from dataflow_dsl.languages import LANGUAGES, Language, get_language
from dataflow_dsl.registry import DslContext, load_context
from dataflow_dsl.results import ReplacementKind

SCHEMAS_OPTION = 'yaml.schemas'

#: File name patterns of each document kind validated by its JSON Schema.
SCHEMA_GLOBS = {
    'spec': ('test_*.dsl.yaml', 'test_*.dsl.yml'),
    'context': ('*.dsl-context.yaml', '*.dsl-context.yml'),
}

InputFilepath = PathParam(
    exists=True,
    dir_okay=False,
    readable=True,
    path_type=Path,
)

OutputFilepath = PathParam(
    dir_okay=False,
    readable=True,
    writable=True,
    path_type=Path,
)

SchemaDirectory = PathParam(
    file_okay=False,
    writable=True,
    path_type=Path,
)

context_option = option(
    '-c', '--context', 'context_path',
    type=InputFilepath,
    default=None,
    help='YAML document with label types and available inputs.',
)

language_option = option(
    '-l', '--language',
    type=Choice(sorted(LANGUAGES)),
    default='behavior',
    show_default=True,
    help='Surface language of the file.',
)


def _load_language(name: str, context_path: Path | None) -> Language:
    """Build a language from an optional context file.

    Raises:
        ClickException: If the context document is invalid.
    """
    context = DslContext()
    if context_path:
        try:
            context = load_context(context_path.read_text(encoding='utf-8'), filename=str(context_path))
        except ContextError as error:
            raise ClickException(str(error)) from error

    return get_language(name, context)


@group(help='Command-line utilities for dataflow-dsl behaviors and constraints.')
def cli() -> None:
    """Root CLI group for dataflow-dsl tools."""
    return None


@cli.command(
    name='validate',
    help='Validate a file and print its diagnostics. Exits with 1 if any is found.',
)
@context_option
@language_option
@argument('source', type=InputFilepath)
def validate(source: Path, context_path: Path | None, language: str) -> None:
    """Print `file:line:column: message` for each diagnostic."""
    diagnostics = _load_language(language, context_path).validate(source.read_text(encoding='utf-8'))

    for diagnostic in diagnostics:
        secho(f'{source}:{diagnostic}', fg='red', err=True)

    if diagnostics:
        raise SystemExit(1)

    secho(f'{source}: ok', fg='green')


@cli.command(
    name='complete',
    help='Print the completion suggestions at a cursor offset as JSON.',
)
@context_option
@language_option
@option(
    '--cursor',
    type=int,
    default=None,
    help='0-based character offset of the cursor. Defaults to the end of the file.',
)
@argument('source', type=InputFilepath)
def complete(source: Path, context_path: Path | None, language: str,
             cursor: int | None) -> None:
    """Print suggestions with their replace ranges."""
    suggestions = _load_language(language, context_path).get_completion(
        source.read_text(encoding='utf-8'),
        cursor,
    )

    echo(dumps(
        [suggestion.model_dump(mode='json', by_alias=True) for suggestion in suggestions],
        ensure_ascii=False,
        indent=4,
    ))


@cli.command(
    name='rename',
    help='Rename a label pair or an input wherever the grammar references it.',
)
@context_option
@language_option
@option('--old', required=True, help='Identifier to replace, e.g. `Type.Value`.')
@option('--new', required=True, help='The new identifier.')
@option(
    '--kind',
    type=Choice([kind.value for kind in ReplacementKind]),
    default=None,
    help='Restrict the rename to labels or inputs.',
)
@option('-i', '--in-place', is_flag=True, default=False, help='Rewrite the file.')
@argument('source', type=InputFilepath)
def rename(source: Path, context_path: Path | None, language: str,
           old: str, new: str, kind: str | None, in_place: bool) -> None:  # noqa: FBT001
    """Print the renamed text or rewrite the file."""
    text = _load_language(language, context_path).replace_text(
        source.read_text(encoding='utf-8'),
        old,
        new,
        ReplacementKind(kind) if kind else None,
    )

    if in_place:
        source.write_text(text, encoding='utf-8')
    else:
        echo(text, nl=False)


@cli.command(
    name='schema',
    help='Print the JSON Schema of context or specification documents.',
)
@option(
    '-k', '--kind',
    type=Choice(['context', 'spec']),
    default='context',
    show_default=True,
)
def print_schema(kind: str) -> None:
    """Generate and print the JSON Schema."""
    echo(SchemaGenerator.make_schema(kind))


def _update_schemas(schemas: object,
                    registered: dict[str, tuple[str, ...]]) -> dict[str, str | list[str]]:
    """Register schema files for their globs in the VSCode YAML mapping.

    Globs claimed by a registered schema are removed from the other
    entries, so a file is never matched by an outdated schema path.

    Args:
        schemas: Existing `yaml.schemas` value of settings.json.
        registered: Globs of each generated schema path.

    Returns:
        Updated schema configuration.
    """
    if not isinstance(schemas, dict):
        schemas = {}

    claimed = {glob for globs in registered.values() for glob in globs}

    updated: dict[str, str | list[str]] = {}
    for path, globs in schemas.items():
        listed = [globs] if isinstance(globs, str) else list(globs)
        if kept := [glob for glob in listed if glob not in claimed]:
            updated[path] = globs if kept == listed else kept

    updated.update({path: list(globs) for path, globs in registered.items()})

    return updated


@cli.command(
    name='vscode-configure',
    help=(
        'Generate JSON Schema files of specification and context documents '
        'and register them in VSCode settings.json.'
    ),
)
@option(
    '-d', '--directory',
    type=SchemaDirectory,
    help='Output directory of the generated JSON Schema files.',
    default='.vscode',
)
@argument(
    'settings',
    type=OutputFilepath,
    default='.vscode/settings.json',
)
def configure_vscode(directory: Path, settings: Path) -> None:
    """Configure VSCode YAML validation of dataflow-dsl documents.

    Args:
        directory: Output directory of the schema files.
        settings: Path to VSCode settings file.
    """
    directory.mkdir(parents=True, exist_ok=True)

    registered = {}
    for kind, globs in SCHEMA_GLOBS.items():
        schema = directory / f'dataflow-dsl.{kind}.schema.json'
        schema.write_text(SchemaGenerator.make_schema(kind) + '\n', encoding='utf-8')
        registered[schema.as_posix()] = globs

    content = {}
    if settings.exists():
        content = safe_load(settings.read_text(encoding='utf-8')) or {}

    content[SCHEMAS_OPTION] = _update_schemas(content.get(SCHEMAS_OPTION), registered)

    settings.parent.mkdir(parents=True, exist_ok=True)
    settings.write_text(dumps(content, ensure_ascii=False, indent=4) + '\n', encoding='utf-8')


if __name__ == '__main__':
    cli()
