"""egg front-end CLI."""

from __future__ import annotations

from pathlib import Path

import click

from egg import __version__
from egg.analyzer import NameAnalyzer
from egg.ast_nodes import Program
from egg.config import EggConfig, find_config, load_config
from egg.errors import CompileError, Diagnostic, DiagnosticRenderer, Severity
from egg.lexer import Lexer
from egg.parser import Parser
from egg.project import scaffold


def _front_end(source: str, filename: str) -> tuple[Program | None, list[Diagnostic]]:
    """Lex, parse and name-analyze one file.

    Returns the analyzed program (None if lexing or parsing failed) and
    every diagnostic produced along the way, warnings included.
    """
    lexer = Lexer(source, filename)
    try:
        tokens = lexer.lex()
        program = Parser(tokens, filename).parse()
    except CompileError as e:
        warnings = [d for d in lexer.diagnostics if d not in e.diagnostics]
        return None, warnings + e.diagnostics

    analyzer = NameAnalyzer()
    analyzer.analyze(program)
    return program, lexer.diagnostics + analyzer.diagnostics


def _is_failure(diagnostics: list[Diagnostic], warnings_as_errors: bool) -> bool:
    if warnings_as_errors:
        return bool(diagnostics)
    return any(d.severity == Severity.ERROR for d in diagnostics)


def _check_files(egg_files: list[Path], config: EggConfig) -> bool:
    """Check every file and render its diagnostics. Returns True if OK."""
    renderer = DiagnosticRenderer(color=True)
    ok = True
    for egg_file in egg_files:
        source = egg_file.read_text()
        renderer.add_source(str(egg_file), source)
        _, diagnostics = _front_end(source, str(egg_file))
        for diag in diagnostics:
            click.echo(renderer.render(diag), err=True)
        if _is_failure(diagnostics, config.analysis.warnings_as_errors):
            ok = False
    return ok


def _config_near(path: Path) -> EggConfig:
    try:
        return load_config(find_config(path))
    except FileNotFoundError:
        return EggConfig()


@click.group()
@click.version_option(__version__, prog_name="egg")
def main() -> None:
    """Name analysis front end for the egg language."""


@main.command()
@click.argument("path", default=".", type=click.Path(exists=True))
def check(path: str) -> None:
    """Check a .egg file or an egg project for name errors."""
    target = Path(path)

    if target.is_file():
        ok = _check_files([target], _config_near(target))
        if ok:
            click.echo(f"checked {target} - no errors")
            return
        raise SystemExit(1)

    try:
        config_path = find_config(target)
    except FileNotFoundError:
        click.echo("error: no egg.toml found", err=True)
        raise SystemExit(1)

    config = load_config(config_path)
    click.echo(f"checking {config.package.name}...")
    project_dir = config_path.parent
    src_dir = project_dir / "src"
    if not src_dir.is_dir():
        src_dir = project_dir  # fallback to project root

    egg_files = sorted(src_dir.rglob("*.egg"))
    if not egg_files:
        click.echo("warning: no .egg files found", err=True)
        return

    if not _check_files(egg_files, config):
        raise SystemExit(1)
    click.echo(f"checked {config.package.name} - no errors")


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("-o", "--output", type=click.Path(dir_okay=False), default=None,
              help="Write to this file instead of stdout.")
@click.option("--annotate/--no-annotate", default=None,
              help="Show the resolved symbol after each name.")
@click.option("--color", is_flag=True, help="Syntax-highlight output on stdout.")
def unparse(file: str, output: str | None, annotate: bool | None, color: bool) -> None:
    """Analyze a .egg file and print it back with resolved names."""
    from egg.unparser import Unparser

    source_path = Path(file)
    config = _config_near(source_path)
    source = source_path.read_text()
    program, diagnostics = _front_end(source, str(source_path))

    if program is None or _is_failure(diagnostics, config.analysis.warnings_as_errors):
        renderer = DiagnosticRenderer(color=True)
        renderer.add_source(str(source_path), source)
        for diag in diagnostics:
            click.echo(renderer.render(diag), err=True)
        raise SystemExit(1)

    if annotate is None:
        annotate = config.unparse.annotate
    text = Unparser(annotate=annotate, indent=config.unparse.indent).unparse(program)

    if output is not None:
        Path(output).write_text(text)
        click.echo(f"wrote {output}")
        return

    if color:
        from egg.highlight import highlight_source

        text = highlight_source(text)
    click.echo(text, nl=False)


@main.command()
@click.argument("name")
def new(name: str) -> None:
    """Create a new egg project."""
    try:
        project_dir = scaffold(name)
        click.echo(f"created project '{name}' at {project_dir}")
    except FileExistsError as e:
        click.echo(f"error: {e}", err=True)
        raise SystemExit(1)


@main.command()
def lsp() -> None:
    """Start the egg language server."""
    from egg.lsp import main as lsp_main

    lsp_main()
