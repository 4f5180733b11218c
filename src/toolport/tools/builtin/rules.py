"""
Development rule lookup tools.

Rules are markdown files laid out as ``<rules_dir>/<category>/<name>.md``.
Each file contributes a title (first ``#`` heading), a short description
(first paragraph after the title) and tags (``**Tags:** a, b`` lines).
"""

import asyncio
import logging
import re
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field

from toolport.security.sandbox import PathGuard
from toolport.tools.base import Tool
from toolport.tools.errors import AccessDeniedError
from toolport.tools.models import StringParam, ToolParameter, ToolResult

logger = logging.getLogger(__name__)

DESCRIPTION_MAX_CHARS = 200

_TITLE_RE = re.compile(r"^#\s+(.+)$", re.MULTILINE)
_TAGS_RE = re.compile(r"\*\*Tags?:\*\*\s*(.+)", re.IGNORECASE)


class RuleMetadata(BaseModel):
    """Summary of one rule file."""

    id: str
    category: str
    title: str
    description: str = "No description"
    tags: list[str] = Field(default_factory=list)
    path: Path

    def matches(self, query: str) -> bool:
        needle = query.lower()
        return (
            needle in self.title.lower()
            or needle in self.description.lower()
            or needle in self.category.lower()
            or any(needle in tag.lower() for tag in self.tags)
        )


def parse_rule(content: str, category: str, path: Path) -> RuleMetadata:
    """Extract rule metadata from markdown content."""
    title_match = _TITLE_RE.search(content)
    title = title_match.group(1).strip() if title_match else path.stem

    description = "No description"
    if title_match:
        body = content[title_match.end() :]
        for paragraph in re.split(r"\n\s*\n", body):
            paragraph = paragraph.strip()
            if paragraph and not paragraph.startswith("#"):
                description = " ".join(paragraph.split())[:DESCRIPTION_MAX_CHARS]
                break

    tags: list[str] = []
    for match in _TAGS_RE.finditer(content):
        tags.extend(t.strip() for t in re.split(r"[,;]", match.group(1)) if t.strip())

    return RuleMetadata(
        id=f"{category}/{path.stem}",
        category=category,
        title=title,
        description=description,
        tags=tags,
        path=path,
    )


def scan_rules_directory(rules_dir: Path, guard: Optional[PathGuard] = None) -> list[RuleMetadata]:
    """
    Collect metadata for every rule under ``rules_dir``.

    A missing directory yields no rules. Files that resolve outside the
    guard's roots (through symlinks) are skipped.

    Args:
        rules_dir: Directory holding one subdirectory per category
        guard: Optional path guard applied to each rule file

    Returns:
        Rules sorted by category then name
    """
    rules: list[RuleMetadata] = []
    if not rules_dir.is_dir():
        logger.debug(f"Rules directory not found: {rules_dir}")
        return rules

    for category_dir in sorted(p for p in rules_dir.iterdir() if p.is_dir()):
        for rule_path in sorted(category_dir.glob("*.md")):
            if guard is not None and not guard.is_allowed(rule_path):
                logger.warning(f"Skipping rule outside allowed roots: {rule_path}")
                continue
            try:
                content = rule_path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Cannot read rule {rule_path}: {e}")
                continue
            rules.append(parse_rule(content, category_dir.name, rule_path))

    return rules


def _rules_dir_param() -> StringParam:
    return StringParam(
        name="rulesDir",
        description="Path to rules directory (defaults to the configured rules directory)",
        required=False,
    )


def _tags(rule: RuleMetadata) -> str:
    return ", ".join(rule.tags) or "None"


class _RulesTool(Tool):
    def __init__(self, guard: PathGuard, default_dir: str = "./rules"):
        """Initialize tool.

        Args:
            guard: Path containment applied to the rules directory
            default_dir: Directory used when the call gives none
        """
        self.guard = guard
        self.default_dir = default_dir

    async def _scan(self, rules_dir: Optional[str]) -> list[RuleMetadata]:
        """Scan the gated rules directory. Raises AccessDeniedError."""
        root = self.guard.check(rules_dir or self.default_dir)
        return await asyncio.to_thread(scan_rules_directory, root, self.guard)


class RulesListTool(_RulesTool):
    """List rules grouped by category."""

    @property
    def name(self) -> str:
        """Tool name."""
        return "rules_list"

    @property
    def description(self) -> str:
        """Tool description."""
        return "List all available development rules and conventions"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [
            StringParam(
                name="category",
                description="Filter by category (e.g., 'code-quality', 'git-workflow')",
                required=False,
            ),
            _rules_dir_param(),
        ]

    async def execute(self, **kwargs: Any) -> ToolResult:
        category: Optional[str] = kwargs.get("category")
        try:
            rules = await self._scan(kwargs.get("rulesDir"))
        except AccessDeniedError as e:
            return ToolResult.failure(str(e))

        if category:
            rules = [r for r in rules if r.category == category]
        if not rules:
            if category:
                return ToolResult.success(f"No rules found in category: {category}")
            return ToolResult.success("No rules found. Create rules in the rules directory.")

        by_category: dict[str, list[RuleMetadata]] = {}
        for rule in rules:
            by_category.setdefault(rule.category, []).append(rule)

        sections = []
        for cat, cat_rules in by_category.items():
            entries = "\n\n".join(
                f"  - **{r.title}** (`{r.id}`)\n    {r.description}\n    Tags: {_tags(r)}" for r in cat_rules
            )
            sections.append(f"## {cat}\n\n{entries}")

        return ToolResult.success(
            f"# Development Rules\n\nTotal: {len(rules)} rules\n\n" + "\n\n".join(sections)
        )


class RulesGetTool(_RulesTool):
    """Full text of one rule."""

    @property
    def name(self) -> str:
        """Tool name."""
        return "rules_get"

    @property
    def description(self) -> str:
        """Tool description."""
        return "Get the full content of a specific development rule"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [
            StringParam(
                name="ruleId",
                description="Rule ID in format 'category/name' (e.g., 'code-quality/clean-code')",
            ),
            _rules_dir_param(),
        ]

    async def execute(self, **kwargs: Any) -> ToolResult:
        rule_id: str = kwargs["ruleId"]
        try:
            rules = await self._scan(kwargs.get("rulesDir"))
        except AccessDeniedError as e:
            return ToolResult.failure(str(e))

        rule = next((r for r in rules if r.id == rule_id), None)
        if rule is None:
            return ToolResult.failure(f"Rule not found: {rule_id}")

        try:
            content = await asyncio.to_thread(rule.path.read_text, encoding="utf-8")
        except OSError as e:
            return ToolResult.failure(f"Failed to read rule: {e.strerror or e}")

        return ToolResult.success(
            f"# {rule.title}\n\nCategory: {rule.category}\nID: {rule.id}\n\n---\n\n{content}"
        )


class RulesSearchTool(_RulesTool):
    @property
    def name(self) -> str:
        """Tool name."""
        return "rules_search"

    @property
    def description(self) -> str:
        """Tool description."""
        return "Search for rules by keyword in title, description, or tags"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [StringParam(name="query", description="Search query"), _rules_dir_param()]

    async def execute(self, **kwargs: Any) -> ToolResult:
        query: str = kwargs["query"]
        try:
            rules = await self._scan(kwargs.get("rulesDir"))
        except AccessDeniedError as e:
            return ToolResult.failure(str(e))

        matches = [r for r in rules if r.matches(query)]
        if not matches:
            return ToolResult.success(f'No rules found matching: "{query}"')

        results = "\n\n".join(
            f"### {r.title} (`{r.id}`)\n"
            f"**Category:** {r.category}\n"
            f"**Description:** {r.description}\n"
            f"**Tags:** {_tags(r)}"
            for r in matches
        )
        return ToolResult.success(
            f'# Search Results: "{query}"\n\nFound {len(matches)} matching rules\n\n{results}'
        )


class RulesByCategoryTool(_RulesTool):
    @property
    def name(self) -> str:
        """Tool name."""
        return "rules_by_category"

    @property
    def description(self) -> str:
        """Tool description."""
        return "Get all rules in a specific category"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [
            StringParam(name="category", description="Category name (e.g., 'code-quality')"),
            _rules_dir_param(),
        ]

    async def execute(self, **kwargs: Any) -> ToolResult:
        category: str = kwargs["category"]
        try:
            rules = await self._scan(kwargs.get("rulesDir"))
        except AccessDeniedError as e:
            return ToolResult.failure(str(e))

        in_category = [r for r in rules if r.category == category]
        if not in_category:
            return ToolResult.success(f"No rules found in category: {category}")

        entries = "\n\n".join(
            f"## {r.title}\n**ID:** `{r.id}`\n{r.description}\n**Tags:** {_tags(r)}" for r in in_category
        )
        return ToolResult.success(f"# {category} Rules\n\nTotal: {len(in_category)}\n\n{entries}")


class RulesCategoriesTool(_RulesTool):
    @property
    def name(self) -> str:
        """Tool name."""
        return "rules_categories"

    @property
    def description(self) -> str:
        """Tool description."""
        return "List all available rule categories"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [_rules_dir_param()]

    async def execute(self, **kwargs: Any) -> ToolResult:
        try:
            rules = await self._scan(kwargs.get("rulesDir"))
        except AccessDeniedError as e:
            return ToolResult.failure(str(e))

        counts: dict[str, int] = {}
        for rule in rules:
            counts[rule.category] = counts.get(rule.category, 0) + 1

        lines = [f"- **{cat}**: {count} rules" for cat, count in sorted(counts.items())]
        return ToolResult.success(
            f"# Rule Categories\n\nTotal: {len(counts)} categories\n\n" + "\n".join(lines)
        )
