# policycheck/cli.py
from __future__ import annotations

import json
from typing import List

import typer

from policycheck.config import MAX_DEPTH, STRICT
from policycheck.log import err, info, warn
from policycheck.observability import setup_logging
from policycheck.policy.loader import load_policies
from policycheck.tree.anchor import classify
from policycheck.validate.errors import PolicyLoadError, ValidationError
from policycheck.validate.policy import validate_policy

setup_logging()

app = typer.Typer(help="Structural validation for admission policies")


# -----------------------
# Helpers
# -----------------------
def _format_error(e: ValidationError) -> str:
    where = f"[{e.rule}] " if e.rule is not None else ""
    path = f"{e.path}: " if e.path else ""
    return f"  - {where}{path}{e.message}"


# -----------------------
# Commands
# -----------------------
@app.command()
def validate(
    paths: List[str] = typer.Argument(..., help="Policy files or directories of *.yaml/*.yml"),
    strict: bool = typer.Option(STRICT, "--strict/--no-strict", help="Also check patches and generate sources"),
    max_depth: int = typer.Option(MAX_DEPTH, "--max-depth", help="Maximum pattern nesting depth"),
    as_json: bool = typer.Option(False, "--json", help="Print a JSON report instead of text"),
) -> None:
    """
    Load every policy under PATHS and check it is well-formed.
    Exits 1 if any policy fails to load or validate.
    """
    try:
        loaded = load_policies(paths)
    except (OSError, PolicyLoadError) as e:
        err(str(e))
        raise typer.Exit(code=1)

    if not loaded:
        warn(f"no policies found under {', '.join(paths)}")

    report = []
    failed = 0
    for source, policy in loaded:
        result = validate_policy(policy, strict=strict, max_depth=max_depth)
        if not result.ok:
            failed += 1
        report.append((source, policy, result))

    if as_json:
        typer.echo(json.dumps([
            {
                "source": source,
                "policy": policy.name,
                "ok": result.ok,
                "errors": [e.as_dict() for e in result.errors],
            }
            for source, policy, result in report
        ], indent=2))
    else:
        for source, policy, result in report:
            status = "ok" if result.ok else "INVALID"
            typer.echo(f"{source}: {policy.name or '(unnamed)'} {status}")
            for e in result.errors:
                typer.echo(_format_error(e))
        info(f"checked {len(report)} polic{'y' if len(report) == 1 else 'ies'}, {failed} invalid")

    if failed:
        raise typer.Exit(code=1)


@app.command()
def anchor(key: str) -> None:
    """
    Show how a pattern map key is classified.
    """
    kind, plain = classify(key)
    typer.echo(f"{kind.value} {plain}")


# -----------------------
# Entrypoint
# -----------------------
if __name__ == "__main__":
    app()
