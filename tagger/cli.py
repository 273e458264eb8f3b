"""CLI entry point for the metric tagger."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich import print as rprint
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from tagger.config import (
    CONFIG_FILENAME,
    DEFAULT_CONFIG_TEMPLATE,
    TaggerConfig,
    config_search_path,
    load_config,
)
from tagger.corpus import ancestor_keys, decode_corpus, encode_corpus, read_corpus_file
from tagger.errors import TaggerError
from tagger.logging_setup import setup_logging
from tagger.output import create_sink, decode_path
from tagger.rules import load_rules
from tagger.runner import corpus_reader, finish_batch, prepare_batch

app = typer.Typer(
    name="tagger",
    help="Tag Graphite metric paths by rules and propagate tags through the tree.",
)

config_app = typer.Typer(help="Manage tagger configuration.")
app.add_typer(config_app, name="config")

rules_app = typer.Typer(help="Inspect rule files.")
app.add_typer(rules_app, name="rules")

corpus_app = typer.Typer(help="Inspect and build corpus files.")
app.add_typer(corpus_app, name="corpus")

# Status output goes to stderr; stdout carries tagging results
err_console = Console(stderr=True)

# Global state
_config: TaggerConfig | None = None
_config_path: str | None = None


def _get_config() -> TaggerConfig:
    if _config is None:
        return load_config()
    return _config


def _fail(e: Exception, code: int = 1) -> typer.Exit:
    err_console.print(f"[red]Error:[/red] {escape(str(e))}", highlight=False, soft_wrap=True)
    return typer.Exit(code)


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to tagger.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config, _config_path
    try:
        _config = load_config(config)
        _config_path = config
    except ValueError as e:
        raise _fail(e, code=2) from e
    setup_logging(_config.log_level, _config.log_format)


@app.command()
def run(
    rules: Annotated[str | None, typer.Option("--rules", "-r", help="Rule file")] = None,
    corpus: Annotated[str | None, typer.Option("--corpus", help="Corpus dump (tree.bin)")] = None,
    clickhouse: Annotated[
        bool, typer.Option("--clickhouse", help="Fetch the corpus from ClickHouse")
    ] = False,
    fmt: Annotated[
        str | None, typer.Option("--format", "-f", help="Output format: text | jsonl")
    ] = None,
    output: Annotated[str | None, typer.Option("--output", "-o", help="Output file")] = None,
    workers: Annotated[
        int | None, typer.Option("--workers", "-w", min=1, help="Matching threads")
    ] = None,
) -> None:
    """Match rules against the corpus, propagate tags and print tagged metrics."""
    cfg = _get_config()
    updates: dict[str, object] = {}
    if rules is not None:
        updates["rules_file"] = rules
    cfg = cfg.model_copy(update=updates)
    if corpus is not None:
        cfg.corpus = cfg.corpus.model_copy(update={"source": "file", "path": corpus})
    if clickhouse:
        cfg.corpus = cfg.corpus.model_copy(update={"source": "clickhouse"})
    if fmt is not None:
        if fmt not in ("text", "jsonl"):
            raise _fail(ValueError(f"Unknown output format: {fmt}"), code=2)
        cfg.output = cfg.output.model_copy(update={"format": fmt})
    if output is not None:
        cfg.output = cfg.output.model_copy(update={"path": output})
    if workers is not None:
        cfg.matcher = cfg.matcher.model_copy(update={"workers": workers})

    try:
        read_corpus = corpus_reader(cfg)
    except ValueError as e:
        raise _fail(e, code=2) from e

    try:
        result = prepare_batch(cfg.rules_file, read_corpus, workers=cfg.matcher.workers)
    except TaggerError as e:
        raise _fail(e) from e

    if cfg.output.path:
        with open(cfg.output.path, "w", encoding="utf-8", errors="surrogateescape") as f:
            finish_batch(result, create_sink(cfg.output.format, f))
        err_console.print(
            f"[green]Wrote[/green] {result.emitted} tagged metrics to {cfg.output.path}"
        )
    else:
        finish_batch(result, create_sink(cfg.output.format))


@rules_app.command("check")
def rules_check(
    path: Annotated[str | None, typer.Argument(help="Rule file")] = None,
) -> None:
    """Load and compile a rule file, then list its rules."""
    rule_file = path or _get_config().rules_file
    try:
        ruleset = load_rules(rule_file)
    except TaggerError as e:
        raise _fail(e) from e

    table = Table(title=f"Rules ({len(ruleset)})")
    table.add_column("#", justify="right")
    table.add_column("Conditions", style="cyan")
    table.add_column("Tags", style="green")
    table.add_column("Indexed", justify="center")
    for rule in ruleset:
        conds = []
        for name in ("equal", "contains", "has_prefix", "has_suffix"):
            value = getattr(rule, name)
            if value is not None:
                conds.append(f"{name.replace('_', '-')}={decode_path(value)!r}")
        if rule.pattern is not None:
            conds.append(f"regexp={decode_path(rule.pattern.pattern)!r}")
        table.add_row(
            str(rule.index),
            " ".join(conds) or "(any)",
            ", ".join(rule.tags),
            "yes" if rule.indexed else "-",
        )
    rprint(table)
    rprint(f"[green]OK[/green] {len(ruleset.indexed)} indexed, {len(ruleset.unindexed)} full-scan")


@corpus_app.command("stats")
def corpus_stats(
    path: Annotated[str | None, typer.Argument(help="Corpus dump")] = None,
) -> None:
    """Decode a corpus dump and summarize it."""
    corpus_file = path or _get_config().corpus.path
    try:
        corpus = decode_corpus(read_corpus_file(corpus_file))
    except TaggerError as e:
        raise _fail(e) from e

    directories = sum(1 for m in corpus if m.is_directory)
    depth = max((sum(1 for _ in ancestor_keys(m.path)) + 1 for m in corpus), default=0)
    table = Table(title=corpus_file)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("entries", str(len(corpus)))
    table.add_row("directories", str(directories))
    table.add_row("leaves", str(len(corpus) - directories))
    table.add_row("max depth", str(depth))
    rprint(table)


@corpus_app.command("pack")
def corpus_pack(
    source: Annotated[Path, typer.Argument(help="Text file, one path per line")],
    dest: Annotated[Path, typer.Argument(help="Corpus dump to write")],
) -> None:
    """Encode a newline-separated path list as a corpus dump."""
    try:
        lines = source.read_bytes().splitlines()
    except OSError as e:
        raise _fail(e) from e
    paths = list(dict.fromkeys(line.strip() for line in lines if line.strip()))
    dest.write_bytes(encode_corpus(paths))
    rprint(f"[green]Packed[/green] {len(paths)} paths into {dest}")


@config_app.command("show")
def config_show() -> None:
    """Print the resolved configuration and the file it came from."""
    cfg = _get_config()
    found = next((p for p in config_search_path(_config_path) if p.is_file()), None)
    err_console.print(f"# source: {found if found else 'built-in defaults'}", highlight=False)
    rprint(Syntax(yaml.safe_dump(cfg.model_dump(mode="json"), sort_keys=False), "yaml"))


@config_app.command("init")
def config_init(
    force: Annotated[bool, typer.Option("--force", help="Overwrite an existing file")] = False,
) -> None:
    """Write a commented tagger.yaml into the current directory."""
    target = Path(CONFIG_FILENAME)
    if target.exists() and not force:
        raise _fail(FileExistsError(f"{target} already exists; use --force to overwrite"))
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")
