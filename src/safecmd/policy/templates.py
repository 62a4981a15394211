"""Starter policy templates and the `init` operation that writes them."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml  # type: ignore[import-untyped]

from safecmd.errors import InitError, TemplateError

DEFAULT_TEMPLATE = "default"


@dataclass(frozen=True)
class PolicyTemplate:
    """Named starter policy. ``disabled`` patterns are emitted as comments."""

    name: str
    title: str
    description: str
    commands: dict[str, list[str]]
    disabled: dict[str, list[str]] = field(default_factory=dict)


_AWS_READONLY = [
    "* list-*",
    "* get-*",
    "* describe-*",
    "s3 ls*",
    "sts get-caller-identity",
    "logs filter-*",
    "logs tail*",
]

TEMPLATES: dict[str, PolicyTemplate] = {
    t.name: t
    for t in (
        PolicyTemplate(
            name=DEFAULT_TEMPLATE,
            title="Default",
            description="AWS read-only operations with write operations left commented out",
            commands={"aws": _AWS_READONLY[:6]},
            disabled={
                "aws": [
                    "s3 cp*",
                    "s3 sync*",
                    "ec2 start-instances*",
                    "lambda invoke*",
                    "* delete-*",
                    "* terminate-*",
                ],
            },
        ),
        PolicyTemplate(
            name="aws-readonly",
            title="AWS Read-Only",
            description="AWS read-only operations (safest for AI agents)",
            commands={"aws": list(_AWS_READONLY)},
        ),
        PolicyTemplate(
            name="aws-dev",
            title="AWS Development",
            description="AWS development operations (includes some write operations)",
            commands={
                "aws": _AWS_READONLY
                + [
                    "s3 cp*",
                    "s3 sync*",
                    "s3 mb*",
                    "lambda invoke*",
                    "lambda update-function-code*",
                    "ecr get-login-password*",
                ],
            },
            disabled={"aws": ["* delete-*", "* terminate-*"]},
        ),
        PolicyTemplate(
            name="kubernetes",
            title="Kubernetes",
            description="Kubernetes operations (read-only focus)",
            commands={
                "kubectl": [
                    "get *",
                    "describe *",
                    "logs *",
                    "top *",
                    "explain *",
                    "config *",
                    "diff *",
                    "api-resources*",
                    "api-versions*",
                    "cluster-info*",
                    "version*",
                ],
            },
            disabled={"kubectl": ["apply *", "create *", "delete *", "scale *", "rollout *"]},
        ),
        PolicyTemplate(
            name="terraform",
            title="Terraform",
            description="Terraform operations (plan and inspection)",
            commands={
                "terraform": [
                    "version*",
                    "init*",
                    "validate*",
                    "fmt*",
                    "plan*",
                    "show*",
                    "output*",
                    "providers*",
                    "state list*",
                    "state show*",
                    "workspace list*",
                    "workspace show*",
                ],
            },
            disabled={"terraform": ["apply*", "destroy*", "import*", "taint*", "state rm*"]},
        ),
        PolicyTemplate(
            name="docker",
            title="Docker",
            description="Docker operations (inspection and management)",
            commands={
                "docker": [
                    "ps*",
                    "logs *",
                    "inspect *",
                    "stats*",
                    "top *",
                    "images*",
                    "history *",
                    "network ls*",
                    "network inspect *",
                    "volume ls*",
                    "volume inspect *",
                    "version*",
                    "info*",
                ],
            },
            disabled={"docker": ["run *", "rm *", "rmi *", "prune*"]},
        ),
        PolicyTemplate(
            name="multi-command",
            title="Multi-Command",
            description="Multiple tools (AWS, kubectl, terraform, docker, gh, gcloud, git)",
            commands={
                "aws": ["* list-*", "* get-*", "* describe-*", "s3 ls*", "sts get-caller-identity"],
                "kubectl": ["get *", "describe *", "logs *", "top *"],
                "terraform": ["plan*", "show*", "state list*", "output*", "validate*"],
                "docker": ["ps*", "images*", "logs *", "inspect *"],
                "gh": ["repo view*", "issue list*", "pr list*", "status*"],
                "gcloud": ["* list*", "* describe*", "config *", "auth list*"],
                "git": ["status*", "log*", "show*", "diff*", "branch*"],
            },
        ),
    )
}


def list_templates() -> list[PolicyTemplate]:
    return list(TEMPLATES.values())


def get_template(name: str) -> PolicyTemplate:
    """Return a template by name or raise TemplateError listing the options."""
    template = TEMPLATES.get(name)
    if template is None:
        available = ", ".join(TEMPLATES)
        raise TemplateError(f"Unknown template: {name}\nAvailable templates: {available}")
    return template


def render_template(template: PolicyTemplate) -> str:
    """Render a template as commented policy YAML."""
    header = [
        "# safe-command Configuration",
        f"# Template: {template.title}",
        "#",
        f"# {template.description}.",
        "# Commands not listed here are denied. Edits require `safe-command approve`.",
        "",
    ]
    body = yaml.safe_dump(
        {"commands": {name: {"patterns": list(patterns)} for name, patterns in template.commands.items()}},
        sort_keys=False,
        allow_unicode=True,
    )

    lines = header + [body.rstrip("\n")]
    if template.disabled:
        lines.extend(["", "# Potentially destructive patterns, disabled by default:"])
        for name, patterns in template.disabled.items():
            lines.append(f"# {name}:")
            lines.extend(f'#   - "{pattern}"' for pattern in patterns)
    lines.append("")
    return "\n".join(lines)


def init_policy(path: Path, *, template_name: str = DEFAULT_TEMPLATE, force: bool = False) -> bool:
    """Write a starter policy to ``path``.

    Returns True when an existing file was overwritten.
    """
    template = get_template(template_name)
    existed = path.exists()
    if existed and not force:
        raise InitError(
            f"Configuration file already exists: {path}\n"
            "Use --force to overwrite the existing configuration."
        )

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_template(template), encoding="utf-8")
    return existed
