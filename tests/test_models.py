"""Unit tests for the script data model (script_runner.models).

Tests cover:
- Phase values and descriptions
- ScriptCommand construction, aliases, immutability, command_line()
- normalize() for string and structured declarations
- display_script()
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from script_runner.models import Phase, ScriptCommand, display_script, normalize


# ---------------------------------------------------------------------------
# Phase
# ---------------------------------------------------------------------------


class TestPhase:
    @pytest.mark.unit
    def test_values(self):
        assert [p.value for p in Phase] == ["before-build", "after-emit", "on-exit"]

    @pytest.mark.unit
    def test_from_value(self):
        assert Phase("after-emit") is Phase.AFTER_EMIT

    @pytest.mark.unit
    def test_descriptions(self):
        assert Phase.BEFORE_BUILD.description == "pre-build scripts"
        assert Phase.AFTER_EMIT.description == "post-build scripts"
        assert Phase.ON_EXIT.description == "additional scripts before exit"

    @pytest.mark.unit
    def test_unknown_phase_rejected(self):
        with pytest.raises(ValueError):
            Phase("during-build")


# ---------------------------------------------------------------------------
# ScriptCommand
# ---------------------------------------------------------------------------


class TestScriptCommand:
    @pytest.mark.unit
    def test_default_args(self):
        script = ScriptCommand(command="make")
        assert script.args == ()

    @pytest.mark.unit
    def test_list_args_become_tuple(self):
        script = ScriptCommand(command="cp", args=["a", "b"])
        assert script.args == ("a", "b")

    @pytest.mark.unit
    def test_arguments_alias(self):
        script = ScriptCommand.model_validate({"command": "ls", "arguments": ["-la"]})
        assert script.args == ("-la",)

    @pytest.mark.unit
    def test_frozen(self):
        script = ScriptCommand(command="make")
        with pytest.raises(ValidationError):
            script.command = "rm"

    @pytest.mark.unit
    def test_command_required(self):
        with pytest.raises(ValidationError):
            ScriptCommand.model_validate({"args": ["x"]})

    @pytest.mark.unit
    def test_command_line_posix_quotes_whitespace(self):
        script = ScriptCommand(command="echo", args=["hello world", "x"])
        assert script.command_line(platform="linux") == "echo 'hello world' x"

    @pytest.mark.unit
    def test_command_line_windows_quotes_whitespace(self):
        script = ScriptCommand(command="echo", args=["hello world", "x"])
        assert script.command_line(platform="win32") == 'echo "hello world" x'

    @pytest.mark.unit
    def test_command_line_without_args(self):
        assert ScriptCommand(command="make").command_line(platform="linux") == "make"


# ---------------------------------------------------------------------------
# normalize
# ---------------------------------------------------------------------------


class TestNormalize:
    @pytest.mark.unit
    def test_first_token_is_command(self):
        script = normalize("webpack --mode production --watch")
        assert script.command == "webpack"
        assert script.args == ("--mode", "production", "--watch")

    @pytest.mark.unit
    def test_single_token(self):
        script = normalize("make")
        assert script.command == "make"
        assert script.args == ()

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "line",
        ["echo A", "node scripts/copy.js dist public", "rm -rf build/tmp"],
    )
    def test_matches_single_space_split(self, line: str):
        tokens = line.split(" ")
        script = normalize(line)
        assert script.command == tokens[0]
        assert list(script.args) == tokens[1:]

    @pytest.mark.unit
    def test_quotes_are_not_interpreted(self):
        script = normalize('echo "a b"')
        assert script.args == ('"a', 'b"')

    @pytest.mark.unit
    def test_double_space_yields_empty_argument(self):
        script = normalize("echo  A")
        assert script.args == ("", "A")

    @pytest.mark.unit
    def test_empty_string_yields_empty_command(self):
        script = normalize("")
        assert script.command == ""
        assert script.args == ()

    @pytest.mark.unit
    def test_structured_declaration_is_identity(self):
        declared = ScriptCommand(command="echo", args=["a b"])
        assert normalize(declared) is declared


# ---------------------------------------------------------------------------
# display_script
# ---------------------------------------------------------------------------


class TestDisplayScript:
    @pytest.mark.unit
    def test_string_returned_verbatim(self):
        assert display_script("echo  A") == "echo  A"

    @pytest.mark.unit
    def test_structured_rendered(self):
        text = display_script(ScriptCommand(command="echo", args=["A"]))
        assert text == "echo A"
