"""Tests for development rule lookup tools."""

from pathlib import Path

import pytest

from toolport.tools.builtin.rules import (
    RulesByCategoryTool,
    RulesCategoriesTool,
    RulesGetTool,
    RulesListTool,
    RulesSearchTool,
    parse_rule,
    scan_rules_directory,
)

CLEAN_CODE = """# Clean Code

Write small functions with clear names.
Avoid side effects.

**Tags:** readability, style

## Details

More text.
"""

COMMITS = """# Commit Messages

Use the imperative mood.

**Tag:** git; history
"""


@pytest.fixture
def rules_dir(workspace: Path) -> Path:
    root = workspace / "rules"
    (root / "code-quality").mkdir(parents=True)
    (root / "git-workflow").mkdir()
    (root / "code-quality" / "clean-code.md").write_text(CLEAN_CODE)
    (root / "code-quality" / "untitled.md").write_text("Just text, no heading.\n")
    (root / "git-workflow" / "commits.md").write_text(COMMITS)
    (root / "git-workflow" / "notes.txt").write_text("ignored")
    return root


class TestParsing:
    def test_parse_rule(self):
        rule = parse_rule(CLEAN_CODE, "code-quality", Path("rules/code-quality/clean-code.md"))

        assert rule.id == "code-quality/clean-code"
        assert rule.title == "Clean Code"
        assert rule.description == "Write small functions with clear names. Avoid side effects."
        assert rule.tags == ["readability", "style"]

    def test_parse_rule_without_heading(self):
        rule = parse_rule("plain", "misc", Path("misc/plain-rule.md"))
        assert rule.title == "plain-rule"
        assert rule.description == "No description"
        assert rule.tags == []

    def test_semicolon_tags(self):
        assert parse_rule(COMMITS, "git-workflow", Path("commits.md")).tags == ["git", "history"]

    def test_description_truncated(self):
        rule = parse_rule("# T\n\n" + "word " * 100, "c", Path("t.md"))
        assert len(rule.description) == 200

    def test_scan(self, rules_dir: Path, guard):
        rules = scan_rules_directory(rules_dir, guard)
        assert [r.id for r in rules] == [
            "code-quality/clean-code",
            "code-quality/untitled",
            "git-workflow/commits",
        ]

    def test_scan_missing_directory(self, temp_dir: Path):
        assert scan_rules_directory(temp_dir / "missing") == []

    def test_scan_skips_symlink_outside(self, rules_dir: Path, guard, temp_dir: Path):
        (temp_dir / "outside" / "leak.md").write_text("# Leak\n")
        (rules_dir / "code-quality" / "leak.md").symlink_to(temp_dir / "outside" / "leak.md")

        ids = [r.id for r in scan_rules_directory(rules_dir, guard)]
        assert "code-quality/leak" not in ids


class TestRulesTools:
    @pytest.mark.asyncio
    async def test_list(self, guard, rules_dir: Path):
        result = await RulesListTool(guard, str(rules_dir)).execute()

        assert result.text.startswith("# Development Rules\n\nTotal: 3 rules\n\n## code-quality")
        assert "  - **Clean Code** (`code-quality/clean-code`)" in result.text
        assert "Tags: readability, style" in result.text
        assert "## git-workflow" in result.text

    @pytest.mark.asyncio
    async def test_list_category(self, guard, rules_dir: Path):
        result = await RulesListTool(guard, str(rules_dir)).execute(category="git-workflow")
        assert "Total: 1 rules" in result.text

        result = await RulesListTool(guard, str(rules_dir)).execute(category="nope")
        assert result.text == "No rules found in category: nope"

    @pytest.mark.asyncio
    async def test_list_empty(self, guard, workspace: Path):
        result = await RulesListTool(guard, str(workspace / "missing")).execute()
        assert result.text == "No rules found. Create rules in the rules directory."

    @pytest.mark.asyncio
    async def test_get(self, guard, rules_dir: Path):
        result = await RulesGetTool(guard, str(rules_dir)).execute(ruleId="git-workflow/commits")
        assert result.text == (
            "# Commit Messages\n\nCategory: git-workflow\nID: git-workflow/commits\n\n---\n\n" + COMMITS
        )

    @pytest.mark.asyncio
    async def test_get_missing(self, guard, rules_dir: Path):
        result = await RulesGetTool(guard, str(rules_dir)).execute(ruleId="x/y")
        assert result.is_error is True
        assert result.text == "Error: Rule not found: x/y"

    @pytest.mark.asyncio
    async def test_search(self, guard, rules_dir: Path):
        result = await RulesSearchTool(guard, str(rules_dir)).execute(query="READABILITY")
        assert result.text.startswith('# Search Results: "READABILITY"\n\nFound 1 matching rules')
        assert "### Clean Code (`code-quality/clean-code`)" in result.text

        result = await RulesSearchTool(guard, str(rules_dir)).execute(query="zzz")
        assert result.text == 'No rules found matching: "zzz"'

    @pytest.mark.asyncio
    async def test_by_category(self, guard, rules_dir: Path):
        result = await RulesByCategoryTool(guard, str(rules_dir)).execute(category="code-quality")
        assert result.text.startswith("# code-quality Rules\n\nTotal: 2")
        assert "**ID:** `code-quality/untitled`" in result.text

    @pytest.mark.asyncio
    async def test_categories(self, guard, rules_dir: Path):
        result = await RulesCategoriesTool(guard, str(rules_dir)).execute()
        assert result.text == (
            "# Rule Categories\n\nTotal: 2 categories\n\n"
            "- **code-quality**: 2 rules\n"
            "- **git-workflow**: 1 rules"
        )

    @pytest.mark.asyncio
    async def test_rules_dir_outside_denied(self, guard, temp_dir: Path):
        result = await RulesCategoriesTool(guard).execute(rulesDir=str(temp_dir / "outside"))
        assert result.is_error is True
        assert "Access denied" in result.text

    @pytest.mark.asyncio
    async def test_configured_default_dir(self, dispatcher, rules_dir: Path):
        result = await dispatcher.invoke("rules_categories", {})
        assert "Total: 2 categories" in result.text
