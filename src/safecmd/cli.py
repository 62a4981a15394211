"""safe-command CLI.

Only `safe-command exec` should ever be allowed for AI agents. `approve`,
`init`, and bare `safe-command` are operator commands.
"""

from __future__ import annotations

from pathlib import Path

import typer

from safecmd import __version__
from safecmd.approval import ApprovalWorkflow, ConsoleConfirmation
from safecmd.errors import IntegrityReadError, SafeCommandError
from safecmd.executor import ExecError, render_argv, run_command
from safecmd.gate import Authorized, AuthorizationGate, Denied, DenyReason
from safecmd.integrity.checker import IntegrityChecker
from safecmd.integrity.types import TrustState
from safecmd.policy.loader import PolicyLoader
from safecmd.policy.templates import DEFAULT_TEMPLATE, init_policy, list_templates
from safecmd.policy.validate import has_errors, validate_policy
from safecmd.settings import load_settings
from safecmd.ui import configure_logging, console, err_console, short_hash

cli = typer.Typer(
    name="safe-command",
    help="safe-command - restrict the commands an AI agent may run to an approved allowlist",
    no_args_is_help=True,
)

# Everything after the command name belongs to the proxied command, even
# tokens that look like our own options.
PASSTHROUGH_CONTEXT = {
    "allow_interspersed_args": False,
    "ignore_unknown_options": True,
}


def _version_option_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


def _fail(message: str, code: int = 1) -> typer.Exit:
    typer.echo(f"Error: {message}", err=True)
    return typer.Exit(code)


def _split_command(parts: list[str] | None, usage: str) -> tuple[str, list[str]]:
    if not parts:
        typer.echo("Error: No command specified", err=True)
        typer.echo(f"\nUsage: {usage}", err=True)
        typer.echo("Example: safe-command exec -- kubectl get pods\n", err=True)
        raise typer.Exit(1)
    return parts[0], list(parts[1:])


def _suggestion_block(command: str, suggestions: tuple[str, ...]) -> list[str]:
    lines = ["  commands:", f"    {command}:", "      patterns:"]
    if not suggestions:
        lines.append('        - "pattern here"')
        return lines
    lines.append(f'        - "{suggestions[0]}"')
    if len(suggestions) > 1:
        lines.append("        # or use wildcards:")
        lines.extend(f'        - "{s}"' for s in suggestions[1:])
    return lines


def _report_denied(verdict: Denied) -> None:
    if verdict.reason is DenyReason.INTEGRITY_TAMPERED:
        typer.echo("❌ Configuration integrity check failed\n", err=True)
        for diagnostic in verdict.diagnostics:
            typer.echo(diagnostic, err=True)
            typer.echo("", err=True)
        typer.echo("🔒 Security Notice:", err=True)
        typer.echo("   Configuration files have been modified or are not approved.", err=True)
        typer.echo("   This prevents unauthorized command execution by AI agents or", err=True)
        typer.echo("   other automated tools.\n", err=True)
        typer.echo("   Run 'safe-command approve' to review and approve changes.\n", err=True)
        return

    if verdict.reason is DenyReason.NOT_CONFIGURED:
        typer.echo(f"Error: {verdict.message}", err=True)
        typer.echo("\nNo configuration found for this command in safe-command.yaml", err=True)
        typer.echo(f'\nTo allow "{verdict.command}" commands, add a configuration like:', err=True)
    else:
        typer.echo(f"Error: {verdict.message}", err=True)
        typer.echo("No matching pattern found in safe-command.yaml", err=True)
        typer.echo("\nTo allow this command, add a pattern like:", err=True)
    for line in _suggestion_block(verdict.command, verdict.suggestions):
        typer.echo(line, err=True)
    typer.echo("", err=True)


@cli.callback()
def _cli_callback(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show safe-command version and exit.",
        is_eager=True,
        callback=_version_option_callback,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log integrity and policy decisions to stderr.",
    ),
) -> None:
    """safe-command - restrict the commands an AI agent may run."""
    configure_logging(verbose)


@cli.command("init")
def init_cmd(
    force: bool = typer.Option(False, "--force", help="Overwrite existing configuration."),
    template: str = typer.Option(DEFAULT_TEMPLATE, "--template", "-t", help="Starter template to write."),
    list_only: bool = typer.Option(False, "--list-templates", help="List available templates and exit."),
) -> None:
    """Initialize the global configuration file."""
    if list_only:
        typer.echo("Available templates:")
        for item in list_templates():
            typer.echo(f"  {item.name:<15} {item.description}")
        return

    settings = load_settings()
    path = settings.global_policy_path
    try:
        overwritten = init_policy(path, template_name=template, force=force)
    except SafeCommandError as exc:
        raise _fail(str(exc)) from exc

    verb = "overwritten" if overwritten else "created"
    typer.echo(f"Configuration file {verb}: {path} (template: {template})")
    typer.echo("\nGlobal configuration has been initialized successfully!")
    typer.echo("Review it, then run 'safe-command approve' after any edit.")


@cli.command("approve")
def approve_cmd() -> None:
    """Review configuration changes and approve them interactively."""
    checker = IntegrityChecker(load_settings())
    workflow = ApprovalWorkflow(checker, ConsoleConfirmation(console), console)
    try:
        workflow.run()
    except SafeCommandError as exc:
        raise _fail(str(exc)) from exc


@cli.command("status")
def status_cmd() -> None:
    """Show integrity state of the configuration files without changing it."""
    checker = IntegrityChecker(load_settings())
    try:
        result = checker.verify()
        snapshot = checker.load_snapshot() or ()
    except IntegrityReadError as exc:
        raise _fail(str(exc)) from exc

    typer.echo(f"state={result.state.value}")
    for path in checker.discover_files():
        typer.echo(f"file={path}")
    for record in snapshot:
        typer.echo(f"tracked={record.path} hash={short_hash(record.hash)} approved={record.last_modified}")
    if result.state is TrustState.TAMPERED:
        for error in result.errors:
            err_console.print(error, markup=False, highlight=False)
        raise typer.Exit(1)


@cli.command("exec", context_settings=PASSTHROUGH_CONTEXT)
def exec_cmd(
    parts: list[str] | None = typer.Argument(None, metavar="[--] COMMAND [ARGS]..."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be executed without running it."),
) -> None:
    """Authorize COMMAND against the approved policy and run it."""
    command, args = _split_command(parts, "safe-command exec [--dry-run] -- <command> [args...]")

    gate = AuthorizationGate(load_settings())
    try:
        verdict = gate.authorize(command, args)
    except SafeCommandError as exc:
        raise _fail(str(exc)) from exc

    for notice in verdict.notices:
        typer.echo(f"ℹ️  {notice}")

    if isinstance(verdict, Denied):
        _report_denied(verdict)
        raise typer.Exit(1)

    argv = [command, *args]
    if dry_run:
        typer.echo(f"[dry-run] Would execute: {render_argv(argv)}")
        typer.echo(f'[dry-run] Matched pattern: "{verdict.matched_pattern}"')
        return

    try:
        result = run_command(command, args, cwd=Path.cwd())
    except ExecError as exc:
        raise _fail(str(exc), exc.returncode) from exc
    raise typer.Exit(result.returncode)


@cli.command("test", context_settings=PASSTHROUGH_CONTEXT)
def test_cmd(
    parts: list[str] | None = typer.Argument(None, metavar="[--] COMMAND [ARGS]..."),
) -> None:
    """Check whether COMMAND would be allowed, without running it."""
    command, args = _split_command(parts, "safe-command test -- <command> [args...]")

    gate = AuthorizationGate(load_settings())
    try:
        verdict = gate.evaluate(command, args)
    except SafeCommandError as exc:
        typer.echo("❌ Error testing command\n", err=True)
        raise _fail(str(exc)) from exc

    full_command = " ".join([command, verdict.target]).rstrip()
    if isinstance(verdict, Authorized):
        typer.echo(f"✅ ALLOWED: {full_command}")
        typer.echo(f'   Matched pattern: "{verdict.matched_pattern}"\n')
        return

    if verdict.reason is DenyReason.NOT_CONFIGURED:
        typer.echo(f'❌ DENIED: Command "{command}" is not configured\n')
        typer.echo(f'To allow "{command}" commands, add a configuration like:')
    else:
        typer.echo(f"❌ DENIED: {full_command}")
        typer.echo("   No matching pattern found\n")
        typer.echo(f"Available patterns for '{command}':")
        for pattern in verdict.patterns:
            typer.echo(f'  - "{pattern}"')
        typer.echo("\nTo allow this command, add a pattern like:")
    for line in _suggestion_block(command, verdict.suggestions):
        typer.echo(line)
    typer.echo("")
    raise typer.Exit(1)


@cli.command("validate")
def validate_cmd() -> None:
    """Lint the active configuration for risky or empty patterns."""
    try:
        policy = PolicyLoader(load_settings()).load()
    except SafeCommandError as exc:
        typer.echo("❌ Configuration validation FAILED\n", err=True)
        raise _fail(str(exc)) from exc

    issues = validate_policy(policy)
    errors = [i for i in issues if i.severity == "error"]
    warnings = [i for i in issues if i.severity == "warning"]
    infos = [i for i in issues if i.severity == "info"]

    if errors:
        typer.echo("❌ Configuration validation FAILED\n")
    elif warnings:
        typer.echo("⚠️  Configuration is valid with warnings\n")
    else:
        typer.echo("✅ Configuration is valid\n")

    for title, icon, group in (("Errors:", "❌", errors), ("Warnings:", "⚠️ ", warnings), ("Information:", "ℹ️ ", infos)):
        if not group:
            continue
        typer.echo(title)
        for issue in group:
            typer.echo(f"  {icon} {issue.message}")
        typer.echo("")

    typer.echo(f"Configuration file: {policy.source}")
    typer.echo("Configured commands:")
    for name, rule in policy.commands.items():
        typer.echo(f"  - {name} ({len(rule.patterns)} patterns)")

    if has_errors(issues):
        raise typer.Exit(1)


if __name__ == "__main__":
    cli()
