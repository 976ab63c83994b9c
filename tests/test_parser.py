"""Tests for markdown command parsing."""

from __future__ import annotations

from pathlib import Path

import pytest

from mdx.errors import DuplicateCommandError, NoInfostringOrShebangError
from mdx.models import CodeBlock
from mdx.parser import (
    COMMAND_HEADING_TOKEN,
    CommandTable,
    MarkdownCommandParser,
    extract_command_and_deps,
)


@pytest.mark.parametrize(
    ("heading", "expected"),
    [
        ("[commandName](dep1 dep2 dep3)", ("commandName", ["dep1", "dep2", "dep3"])),
        (
            "# This is a heading [commandName](dep1 dep2 dep3) with some text",
            ("commandName", ["dep1", "dep2", "dep3"]),
        ),
        ("[commandName]()", ("commandName", [])),
        ("[commandName](dep1)", ("commandName", ["dep1"])),
        ("[commandName](   dep1   dep2   dep3   )", ("commandName", ["dep1", "dep2", "dep3"])),
        ("[commandName](dep1, dep2, dep3)", ("commandName", ["dep1,", "dep2,", "dep3"])),
        ("[  spaced  ](dep1)", ("spaced", ["dep1"])),
        ("[commandName]", None),
        ("NoCommand", None),
        ("[   ](dep1)", None),
    ],
)
def test_extract_command_and_deps(heading: str, expected: tuple[str, list[str]] | None) -> None:
    assert extract_command_and_deps(heading) == expected


def test_parse_one_command_with_dependencies() -> None:
    source = '# Echo [simple_echo](dep1 dep2)\n\n```sh\necho "{{.arg1}} {{.arg2}}"\n```\n'

    commands = MarkdownCommandParser().parse(source, "test1.md")

    assert list(commands) == ["simple_echo"]
    command = commands["simple_echo"]
    assert command.dependencies == ("dep1", "dep2")
    assert command.source_file == "test1.md"
    assert command.code_blocks == (
        CodeBlock(lang="sh", code='echo "{{.arg1}} {{.arg2}}"\n', has_shebang=False),
    )


def test_parse_collects_code_blocks_in_order_until_next_heading() -> None:
    source = "\n".join(
        (
            "# [first](dep1)",
            "",
            "```sh",
            "code1",
            "```",
            "",
            "Some prose between the blocks.",
            "",
            "```python",
            "#!/bin/venv/python",
            "code2",
            "```",
            "",
            "## Unrelated heading",
            "",
            "```sh",
            "not collected",
            "```",
            "",
            "# [second]()",
            "",
            "```sh",
            "code3",
            "```",
            "",
        )
    )

    commands = MarkdownCommandParser().parse(source, "two.md")

    assert [block.code for block in commands["first"].code_blocks] == [
        "code1\n",
        "#!/bin/venv/python\ncode2\n",
    ]
    assert [block.has_shebang for block in commands["first"].code_blocks] == [False, True]
    assert commands["second"].dependencies == ()
    assert [block.code for block in commands["second"].code_blocks] == ["code3\n"]


def test_parse_setext_heading_ends_association() -> None:
    source = "# [cmd]()\n\n```sh\nkept\n```\n\nOther\n-----\n\n```sh\ndropped\n```\n"

    commands = MarkdownCommandParser().parse(source, "setext.md")

    assert [block.code for block in commands["cmd"].code_blocks] == ["kept\n"]


def test_parse_ignores_headings_without_command_fragment() -> None:
    source = "# Just a title\n\n```sh\necho hi\n```\n"

    assert MarkdownCommandParser().parse(source, "plain.md") == {}


def test_command_heading_is_not_rendered_as_link() -> None:
    tokens = MarkdownCommandParser().tokens("## Build [build](clean)\n")

    assert [token.type for token in tokens] == [COMMAND_HEADING_TOKEN]
    assert tokens[0].meta == {"name": "build", "dependencies": ["clean"]}
    assert tokens[0].markup == "##"


def test_parse_shebang_without_infostring() -> None:
    source = "# [simple_echo]()\n\n```\n#!/my/python\nprint(blubb)\n```\n"

    commands = MarkdownCommandParser().parse(source, "test2.md")

    assert commands["simple_echo"].code_blocks == (
        CodeBlock(lang="", code="#!/my/python\nprint(blubb)\n", has_shebang=True),
    )


def test_parse_uses_first_word_of_infostring() -> None:
    source = "# [cmd]()\n\n```python title=setup\nprint(1)\n```\n"

    commands = MarkdownCommandParser().parse(source, "info.md")

    assert commands["cmd"].code_blocks[0].lang == "python"


def test_parse_rejects_block_without_infostring_or_shebang() -> None:
    source = "# [cmd]()\n\n```\necho hi\n```\n"

    with pytest.raises(NoInfostringOrShebangError) as exc_info:
        MarkdownCommandParser().parse(source, "bad.md")

    assert exc_info.value.command_name == "cmd"
    assert exc_info.value.source_file == "bad.md"


def test_parse_skips_empty_code_block_with_warning(caplog: pytest.LogCaptureFixture) -> None:
    source = "# [cmd]()\n\n```sh\n```\n\n```sh\necho hi\n```\n"

    with caplog.at_level("WARNING", logger="mdx"):
        commands = MarkdownCommandParser().parse(source, "empty.md")

    assert [block.code for block in commands["cmd"].code_blocks] == ["echo hi\n"]
    assert "empty_code_block" in caplog.text


def test_parse_keeps_whitespace_only_code_block(caplog: pytest.LogCaptureFixture) -> None:
    source = "# [cmd]()\n\n```sh\n   \n```\n"

    with caplog.at_level("WARNING", logger="mdx"):
        commands = MarkdownCommandParser().parse(source, "blank.md")

    assert commands["cmd"].code_blocks == (CodeBlock(lang="sh", code="   \n", has_shebang=False),)
    assert "empty_code_block" not in caplog.text


def test_parse_rejects_whitespace_only_block_without_infostring() -> None:
    source = "# [cmd]()\n\n```\n\n```\n"

    with pytest.raises(NoInfostringOrShebangError):
        MarkdownCommandParser().parse(source, "blank.md")


def test_parse_warns_when_shebang_and_infostring_are_both_present(
    caplog: pytest.LogCaptureFixture,
) -> None:
    source = "# [cmd]()\n\n```python\n#!/bin/sh\necho hi\n```\n"

    with caplog.at_level("WARNING", logger="mdx"):
        commands = MarkdownCommandParser().parse(source, "both.md")

    assert commands["cmd"].code_blocks[0].has_shebang is True
    assert "shebang_overrides_infostring" in caplog.text


def test_parse_keeps_command_without_code_blocks() -> None:
    source = "# [all](build test)\n\nRuns everything.\n"

    commands = MarkdownCommandParser().parse(source, "deps.md")

    assert commands["all"].dependencies == ("build", "test")
    assert commands["all"].code_blocks == ()


def test_parse_keeps_duplicate_dependencies() -> None:
    commands = MarkdownCommandParser().parse("# [cmd](a b a)\n", "dup-deps.md")

    assert commands["cmd"].dependencies == ("a", "b", "a")


def test_parse_ignores_fences_nested_in_lists() -> None:
    source = "# [cmd]()\n\n- item\n\n  ```sh\n  nested\n  ```\n\n```sh\ntop\n```\n"

    commands = MarkdownCommandParser().parse(source, "nested.md")

    assert [block.code for block in commands["cmd"].code_blocks] == ["top\n"]


def test_parse_rejects_duplicate_command_in_same_file() -> None:
    source = "# [cmd]()\n\n```sh\na\n```\n\n# [cmd]()\n\n```sh\nb\n```\n"

    with pytest.raises(DuplicateCommandError) as exc_info:
        MarkdownCommandParser().parse(source, "same.md")

    assert exc_info.value.first_defined_in == "same.md"


def test_command_table_loads_fixture_file(fixtures_dir: Path) -> None:
    table = CommandTable()
    loaded = table.load_file(fixtures_dir / "runbook.md")

    assert loaded == ["greet", "prepare"]
    assert table["greet"].dependencies == ("prepare",)
    assert [block.lang for block in table["prepare"].code_blocks] == ["sh", "python"]
    assert "never collected" not in "".join(
        block.code for command in table.values() for block in command.code_blocks
    )


def test_command_table_accumulates_across_files(fixtures_dir: Path) -> None:
    table = CommandTable()
    table.load_files([fixtures_dir / "runbook.md", fixtures_dir / "other.md"])

    assert sorted(table) == ["clean", "greet", "prepare"]
    assert table["clean"].source_file == str(fixtures_dir / "other.md")


def test_command_table_rejects_duplicate_across_files_without_partial_registration(
    write_markdown,
) -> None:
    first = write_markdown("# [x]()\n\n```sh\necho 1\n```\n", name="first.md")
    second = write_markdown(
        "# [y]()\n\n```sh\necho 2\n```\n\n# [x]()\n\n```sh\necho 3\n```\n",
        name="second.md",
    )
    table = CommandTable()

    with pytest.raises(DuplicateCommandError) as exc_info:
        table.load_files([first, second])

    assert exc_info.value.name == "x"
    assert exc_info.value.first_defined_in == str(first)
    assert list(table) == ["x"]


def test_command_table_stops_at_first_failing_file(write_markdown) -> None:
    bad = write_markdown("# [bad]()\n\n```\nno language\n```\n", name="a.md")
    good = write_markdown("# [good]()\n\n```sh\necho ok\n```\n", name="b.md")
    table = CommandTable()

    with pytest.raises(NoInfostringOrShebangError):
        table.load_files([bad, good])

    assert len(table) == 0
