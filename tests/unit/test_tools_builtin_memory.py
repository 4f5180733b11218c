"""Tests for the memory tools, invoked through the dispatcher."""

import pytest


@pytest.mark.asyncio
async def test_set_then_get(dispatcher):
    result = await dispatcher.invoke("memory_set", {"key": "project", "value": "toolport", "tags": ["work"]})
    assert result.text == "Stored value with key 'project' (tags: work)"

    result = await dispatcher.invoke("memory_get", {"key": "project"})
    lines = result.text.splitlines()
    assert lines[0] == "Key: project"
    assert lines[1] == "Value: toolport"
    assert lines[2] == "Tags: work"
    assert lines[3].startswith("Created: ")
    assert lines[4].startswith("Updated: ")


@pytest.mark.asyncio
async def test_set_accepts_json_encoded_tags(dispatcher, memory_store):
    await dispatcher.invoke("memory_set", {"key": "k", "value": "v", "tags": '["a", "b"]'})
    assert memory_store.get("k").tags == ["a", "b"]


@pytest.mark.asyncio
async def test_set_without_tags(dispatcher):
    result = await dispatcher.invoke("memory_set", {"key": "k", "value": "v"})
    assert result.text == "Stored value with key 'k'"


@pytest.mark.asyncio
async def test_get_missing_is_not_an_error(dispatcher):
    result = await dispatcher.invoke("memory_get", {"key": "nope"})
    assert result.is_error is False
    assert result.text == "No entry found for key 'nope'"


@pytest.mark.asyncio
async def test_delete(dispatcher, memory_store):
    memory_store.set("k", "v")
    assert (await dispatcher.invoke("memory_delete", {"key": "k"})).text == "Deleted entry with key 'k'"
    assert (await dispatcher.invoke("memory_delete", {"key": "k"})).text == "No entry found for key 'k'"


@pytest.mark.asyncio
async def test_list(dispatcher, memory_store):
    assert (await dispatcher.invoke("memory_list", {})).text == "Memory is empty"

    memory_store.set("a", "1", ["x"])
    memory_store.set("b", "2")

    result = await dispatcher.invoke("memory_list", {})
    assert result.text == "Memory entries (2):\n- a [x]\n- b"

    result = await dispatcher.invoke("memory_list", {"tag": "x"})
    assert result.text == "Memory entries (1):\n- a [x]"

    result = await dispatcher.invoke("memory_list", {"tag": "zzz"})
    assert result.text == "No entries found with tag 'zzz'"


@pytest.mark.asyncio
async def test_search(dispatcher, memory_store):
    memory_store.set("notes", "a" * 150, ["misc"])
    memory_store.set("other", "nothing")

    result = await dispatcher.invoke("memory_search", {"query": "NOTES"})
    assert result.text.startswith("Found 1 matches:\n\nKey: notes\nValue: " + "a" * 100 + "...")

    result = await dispatcher.invoke("memory_search", {"query": "missing"})
    assert result.text == "No entries found matching 'missing'"


@pytest.mark.asyncio
async def test_clear_requires_confirmation(dispatcher, memory_store):
    memory_store.set("a", "1")

    result = await dispatcher.invoke("memory_clear", {"confirmClear": False})
    assert result.text.startswith("Clear operation cancelled")
    assert len(memory_store) == 1

    result = await dispatcher.invoke("memory_clear", {"confirmClear": "true"})
    assert result.text == "Cleared 1 entries from memory"
    assert len(memory_store) == 0


@pytest.mark.asyncio
async def test_clear_missing_confirmation_is_invalid(dispatcher):
    result = await dispatcher.invoke("memory_clear", {})
    assert result.is_error is True
    assert "confirmClear" in result.text


@pytest.mark.asyncio
async def test_append(dispatcher, memory_store):
    memory_store.set("log", "one")

    result = await dispatcher.invoke("memory_append", {"key": "log", "value": "two"})
    assert result.text == "Appended content to key 'log'"
    assert memory_store.get("log").value == "one\ntwo"

    await dispatcher.invoke("memory_append", {"key": "log", "value": "three", "separator": ""})
    assert memory_store.get("log").value == "one\ntwothree"


@pytest.mark.asyncio
async def test_append_missing(dispatcher):
    result = await dispatcher.invoke("memory_append", {"key": "nope", "value": "x"})
    assert result.is_error is False
    assert "Use memory_set" in result.text


@pytest.mark.asyncio
async def test_stats(dispatcher, memory_store):
    memory_store.set("a", "123", ["x"])
    memory_store.set("b", "45", ["x", "y"])

    result = await dispatcher.invoke("memory_stats", {})
    assert result.text == (
        "Memory Statistics:\n"
        "- Total Entries: 2\n"
        "- Total Size: 5 characters\n"
        "- Unique Tags: 2\n"
        "- Tags: x, y"
    )
