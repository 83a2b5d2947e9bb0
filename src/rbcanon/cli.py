from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, List, Optional

import typer

from rbcanon.config import CanonConfig, config_from_path
from rbcanon.engine import autocorrect, check_source
from rbcanon.exceptions import GrammarUnavailableError, ParseError
from rbcanon.ingest import FILE_EXTENSIONS, FILE_NAMES
from rbcanon.rules import Rule, build_rules

logger = logging.getLogger(__name__)

app = typer.Typer(add_completion=False)

EXIT_OK = 0
EXIT_OFFENSES = 1
EXIT_PARSE_ERRORS = 2


def _is_ruby_file(path: Path) -> bool:
    return path.suffix.lower() in FILE_EXTENSIONS or path.name in FILE_NAMES


def iter_ruby_paths(paths: List[Path]) -> Iterator[Path]:
    seen: set[Path] = set()
    for path in paths:
        if path.is_dir():
            candidates = sorted(
                candidate
                for candidate in path.rglob("*")
                if candidate.is_file()
                and _is_ruby_file(candidate)
                and not any(part.startswith(".") for part in candidate.relative_to(path).parts)
            )
        elif path.is_file():
            candidates = [path]
        else:
            raise typer.BadParameter(f"No such file or directory: {path}")
        for candidate in candidates:
            if candidate not in seen:
                seen.add(candidate)
                yield candidate


def _display(path: Path, root: Path) -> str:
    try:
        return str(path.resolve().relative_to(root.resolve()))
    except ValueError:
        return str(path)


def _check_file(path: Path, label: str, rules: List[Rule], fix: bool) -> int:
    text = path.read_text(encoding="utf-8")
    if not fix:
        diagnostics = check_source(text, rules, path=label, autocorrect=False)
        for diagnostic in diagnostics:
            typer.echo(diagnostic.render(label))
        return len(diagnostics)
    result = autocorrect(text, rules, path=label)
    for diagnostic in result.corrected:
        typer.echo(diagnostic.render(label, corrected=True))
    for diagnostic in result.remaining:
        typer.echo(diagnostic.render(label))
    if result.changed:
        path.write_text(result.source, encoding="utf-8")
    return len(result.remaining)


def _load(root: Path, config: Optional[Path]) -> CanonConfig:
    if config is not None and not config.is_file():
        raise typer.BadParameter(f"Config file not found: {config}")
    return config_from_path(root=root, config_path=config)


@app.command("check")
def check(
    paths: List[Path] = typer.Argument(None),
    root: Path = typer.Option(Path("."), "--root"),
    config: Optional[Path] = typer.Option(None, "--config"),
    fix: bool = typer.Option(False, "--fix/--no-fix"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Report (and with --fix, correct) ordering offenses in Ruby sources."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)
    rules = build_rules(_load(root, config))
    targets = list(iter_ruby_paths(paths or [root]))
    offenses = 0
    parse_errors = 0
    for path in targets:
        label = _display(path, root)
        try:
            offenses += _check_file(path, label, rules, fix)
        except ParseError as exc:
            parse_errors += 1
            logger.warning("skipping unparsable file %s", label)
            typer.echo(f"{label}: {exc}", err=True)
        except GrammarUnavailableError as exc:
            typer.echo(str(exc), err=True)
            raise typer.Exit(code=EXIT_PARSE_ERRORS) from exc
    typer.echo(f"{len(targets)} files inspected, {offenses} offenses remaining")
    if offenses:
        raise typer.Exit(code=EXIT_OFFENSES)
    if parse_errors:
        raise typer.Exit(code=EXIT_PARSE_ERRORS)


@app.command("rules")
def list_rules(
    root: Path = typer.Option(Path("."), "--root"),
    config: Optional[Path] = typer.Option(None, "--config"),
) -> None:
    """List enabled rules and their effective settings."""
    canon = _load(root, config)
    for rule in build_rules(canon):
        settings = rule.config
        details = []
        if settings.shorthands_first:
            details.append("ShorthandsFirst")
        if settings.methods:
            details.append("Methods=" + ",".join(sorted(settings.methods)))
        if settings.exclude_methods:
            details.append("ExcludeMethods=" + ",".join(sorted(settings.exclude_methods)))
        typer.echo(f"{rule.name} {' '.join(details)}".rstrip())


def main() -> None:
    app()


if __name__ == "__main__":
    main()
