# SPDX-License-Identifier: MIT
"""Pull request description for a package submission.

The description follows the checklist of the typst/packages pull request
template. Answers are collected through a :class:`DecisionProvider` and
rendered with ``{{variable}}`` substitution.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

from .decisions import DecisionProvider

# Pattern for matching template variables: {{variable_name}}
VARIABLE_PATTERN = re.compile(r"\{\{(\w+)\}\}")

PR_BODY_FILENAME = "tyler-pr-body.md"

PR_TEMPLATE = """\
<!--
Thanks for submitting a package! Please read and follow the submission guidelines
detailed in the repository's README and check the boxes below. Please name your
PR as `name:version` of the submitted package.
-->

I am submitting
- {{new_package}} a new package
- {{package_update}} an update for a package

Description: {{description}}

I have read and followed the submission guidelines and, in particular, I
{{guidelines}}
"""


@dataclass(frozen=True, slots=True)
class Guideline:
    key: str
    text: str
    template_only: bool = False


GUIDELINES: tuple[Guideline, ...] = (
    Guideline("name", "selected a name that isn't the most obvious or canonical name for what the package does"),
    Guideline("manifest", "added a `typst.toml` file with all required keys"),
    Guideline("readme", "added a `README.md` with documentation for my package"),
    Guideline("license", "have chosen a license and added a `LICENSE` file or linked one in my `README.md`"),
    Guideline("tested", "tested my package locally on my system and it worked"),
    Guideline("exclude", "`exclude`d PDFs or README images, if any, but not the LICENSE"),
    Guideline(
        "template_license",
        "ensured that my package is licensed such that users can use and distribute the contents "
        "of its template directory without restriction, after modifying them through normal use",
        template_only=True,
    ),
)


class TemplateError(Exception):
    """Raised when template processing fails."""

    pass


def substitute(template: str, variables: dict[str, str]) -> str:
    """Replace every ``{{name}}`` in ``template``.

    Raises:
        TemplateError: If a variable in the template is not defined
    """

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        if var_name not in variables:
            raise TemplateError(f"Undefined template variable: {var_name}")
        return variables[var_name]

    return VARIABLE_PATTERN.sub(replacer, template)


def checkbox(checked: bool) -> str:
    return "[x]" if checked else "[ ]"


def applicable_guidelines(is_template: bool) -> list[Guideline]:
    return [g for g in GUIDELINES if is_template or not g.template_only]


@dataclass
class PullRequestBody:
    """Answers that make up a submission description.

    Attributes:
        name: Package name
        version: Package version
        is_update: Whether the package is already on the index
        is_template: Whether the package ships a template
        description: Free-text description of the package or the change
        acknowledged: Guideline key to whether the author confirmed it
    """

    name: str
    version: str
    is_update: bool
    is_template: bool = False
    description: str = ""
    acknowledged: dict[str, bool] = field(default_factory=dict)

    @property
    def title(self) -> str:
        return f"{self.name}:{self.version}"

    def render(self) -> str:
        guidelines = "\n".join(
            f"- {checkbox(self.acknowledged.get(g.key, False))} {g.text}"
            for g in applicable_guidelines(self.is_template)
        )
        return substitute(
            PR_TEMPLATE,
            {
                "new_package": checkbox(not self.is_update),
                "package_update": checkbox(self.is_update),
                "description": self.description,
                "guidelines": guidelines,
            },
        )


def collect_pr_body(
    decisions: DecisionProvider,
    name: str,
    version: str,
    is_update: bool,
    is_template: bool = False,
) -> PullRequestBody:
    """Ask for the description and each guideline acknowledgement."""
    kind = "update" if is_update else "new package"
    description = decisions.ask_text(f"Describe this {kind} ({name}:{version})", default="")

    acknowledged = {
        g.key: decisions.ask_confirm(f"I have {g.text}", default=False)
        for g in applicable_guidelines(is_template)
    }
    return PullRequestBody(
        name=name,
        version=version,
        is_update=is_update,
        is_template=is_template,
        description=description.strip(),
        acknowledged=acknowledged,
    )


def write_pr_body(body: PullRequestBody, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(body.render(), encoding="utf-8")
    return path
