"""Tests for probe execution using fake backend executables."""

import json
import os
import sys
import textwrap
import time
from pathlib import Path

import pytest

from techpref.exceptions import ProbeError, ProbeFailedError, ProbeOutputError, ProbeTimeoutError
from techpref.models import RuleCheck
from techpref.probes import EslintBackend, OxlintBackend, ProbeRunner
from techpref.rules import ESLINT, OXLINT, eslint_check, oxlint_check

SEMI = eslint_check("semi", "always", {"semi": ["error", "always"]})
INDENT = oxlint_check(
    "indent", "tab", "@stylistic/indent", ["error", "tab"],
    plugins=[], js_plugins=["@stylistic/eslint-plugin"],
)
ARRAY = oxlint_check(
    "array-type", "array", "typescript/array-type",
    ["error", {"default": "array"}], plugins=["typescript"],
)


def fake_tool(tmp_path, body: str, name: str = "tool.py") -> list:
    """Write a Python script standing in for a linter; return its argv."""
    script = tmp_path / name
    script.write_text("import json, sys, time\nargs = sys.argv[1:]\n" + textwrap.dedent(body))
    return [sys.executable, str(script)]


def diagnostic(filename, line, column, message="Bad"):
    return {
        "message": message,
        "code": "x",
        "severity": "error",
        "filename": filename,
        "labels": [{"span": {"offset": 0, "length": 1, "line": line, "column": column}}],
    }


def process_running(pid: int) -> bool:
    """Whether ``pid`` is a live process; an unreaped zombie counts as dead."""
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        return True
    status = Path(f"/proc/{pid}/status")
    if not status.exists():
        return True
    return "zombie" not in status.read_text()


@pytest.fixture
def working_copy(tmp_path):
    path = tmp_path / "wc"
    path.mkdir()
    return path


def make_runner(tmp_path, oxlint=None, eslint=None, timeout=30, max_samples=10):
    backends = {}
    if oxlint is not None:
        backends[OXLINT] = OxlintBackend(oxlint)
    if eslint is not None:
        backends[ESLINT] = EslintBackend(eslint)
    return ProbeRunner(
        backends, node_tools_dir=tmp_path / "tools", timeout=timeout, max_samples=max_samples
    )


class TestOxlintProbe:
    def test_counts_and_sorts_violations(self, tmp_path, working_copy):
        output = {
            "diagnostics": [
                diagnostic("src/b.ts", 1, 1),
                diagnostic("src/a.ts", 9, 2),
                diagnostic("src/a.ts", 3, 7),
            ]
        }
        argv = fake_tool(tmp_path, f"print(json.dumps({output!r}))\nsys.exit(1)\n")
        result = make_runner(tmp_path, oxlint=argv).run(working_copy, ARRAY)

        assert result.count == 3
        assert [(s.file, s.line, s.column) for s in result.samples] == [
            ("src/a.ts", 3, 7),
            ("src/a.ts", 9, 2),
            ("src/b.ts", 1, 1),
        ]

    def test_no_violations(self, tmp_path, working_copy):
        argv = fake_tool(tmp_path, 'print(json.dumps({"diagnostics": []}))\n')
        result = make_runner(tmp_path, oxlint=argv).run(working_copy, ARRAY)
        assert result.count == 0
        assert result.samples == []

    def test_generated_config_and_arguments(self, tmp_path, working_copy):
        captured = tmp_path / "captured.json"
        argv = fake_tool(
            tmp_path,
            f"""
            config = json.load(open(args[args.index("-c") + 1]))
            json.dump({{"config": config, "args": args}}, open({str(captured)!r}, "w"))
            print(json.dumps({{"diagnostics": []}}))
            """,
        )
        make_runner(tmp_path, oxlint=argv).run(working_copy, INDENT)

        data = json.loads(captured.read_text())
        config = data["config"]
        assert set(config["categories"].values()) == {"off"}
        assert set(config["categories"]) == {
            "correctness", "suspicious", "pedantic", "perf", "style", "restriction", "nursery",
        }
        assert config["rules"] == {"@stylistic/indent": ["error", "tab"]}
        assert config["plugins"] == []
        assert config["jsPlugins"] == ["@stylistic/eslint-plugin"]

        args = data["args"]
        assert args[args.index("--format") + 1] == "json"
        assert args.count("--ignore-pattern") == 4
        assert "**/node_modules/**" in args
        assert args[-1] == "."

    def test_config_written_under_node_tools_dir(self, tmp_path, working_copy):
        captured = tmp_path / "config-path.txt"
        argv = fake_tool(
            tmp_path,
            f"""
            open({str(captured)!r}, "w").write(args[args.index("-c") + 1])
            print(json.dumps({{"diagnostics": []}}))
            """,
        )
        make_runner(tmp_path, oxlint=argv).run(working_copy, ARRAY)

        config_path = captured.read_text()
        assert config_path.startswith(str((tmp_path / "tools" / ".techpref-probes").resolve()))

    def test_plugins_omitted_when_not_given(self, tmp_path, working_copy):
        check = oxlint_check(
            "consistent-type-definitions", "type",
            "typescript/consistent-type-definitions", ["error", "type"],
        )
        backend = OxlintBackend(["oxlint"])
        config_path = backend.write_config(check, tmp_path)
        assert "plugins" not in json.loads(config_path.read_text())

    def test_absolute_paths_made_relative(self, tmp_path, working_copy):
        absolute = str(working_copy.resolve() / "src" / "x.ts")
        output = {"diagnostics": [diagnostic(absolute, 1, 1)]}
        argv = fake_tool(tmp_path, f"print(json.dumps({output!r}))\n")
        result = make_runner(tmp_path, oxlint=argv).run(working_copy, ARRAY)
        assert result.samples[0].file == "src/x.ts"

    def test_samples_are_distributed(self, tmp_path, working_copy):
        output = {"diagnostics": [diagnostic(f"f{i:02d}.ts", 1, 1) for i in range(25)]}
        argv = fake_tool(tmp_path, f"print(json.dumps({output!r}))\nsys.exit(1)\n")
        result = make_runner(tmp_path, oxlint=argv, max_samples=10).run(working_copy, ARRAY)

        assert result.count == 25
        assert len(result.samples) == 10
        assert result.samples[0].file == "f00.ts"
        assert result.samples[-1].file == "f24.ts"

    def test_temp_dir_removed(self, tmp_path, working_copy):
        argv = fake_tool(tmp_path, 'print(json.dumps({"diagnostics": []}))\n')
        make_runner(tmp_path, oxlint=argv).run(working_copy, ARRAY)
        assert list((tmp_path / "tools" / ".techpref-probes").iterdir()) == []


class TestEslintProbe:
    def test_counts_only_errors(self, tmp_path, working_copy):
        output = [
            {
                "filePath": str(working_copy.resolve() / "src" / "a.js"),
                "errorCount": 2,
                "messages": [
                    {"ruleId": "semi", "severity": 2, "line": 4, "column": 10, "message": "Missing semicolon."},
                    {"ruleId": "semi", "severity": 1, "line": 5, "column": 1, "message": "warn"},
                    {"ruleId": "semi", "severity": 2, "line": 1, "column": 3, "message": "Missing semicolon."},
                ],
            },
            {"filePath": str(working_copy.resolve() / "b.ts"), "errorCount": 0, "messages": []},
        ]
        argv = fake_tool(tmp_path, f"print(json.dumps({output!r}))\nsys.exit(1)\n")
        result = make_runner(tmp_path, eslint=argv).run(working_copy, SEMI)

        assert result.count == 2
        assert [(s.file, s.line) for s in result.samples] == [("src/a.js", 1), ("src/a.js", 4)]

    def test_parse_errors_not_counted(self, tmp_path, working_copy):
        output = [
            {
                "filePath": "broken.ts",
                "messages": [{"ruleId": None, "fatal": True, "severity": 2, "line": 1, "column": 1, "message": "Parsing error"}],
            }
        ]
        argv = fake_tool(tmp_path, f"print(json.dumps({output!r}))\nsys.exit(1)\n")
        result = make_runner(tmp_path, eslint=argv).run(working_copy, SEMI)
        assert result.count == 0

    def test_generated_flat_config(self, tmp_path):
        backend = EslintBackend(["eslint"])
        config_path = backend.write_config(SEMI, tmp_path)
        content = config_path.read_text()

        assert config_path.name == "eslint.config.mjs"
        assert 'const rules = {"semi": ["error", "always"]};' in content
        assert "noInlineConfig: true" in content
        assert "tseslint.parser" in content
        assert '"**/*.d.ts"' in content

    def test_command(self, tmp_path):
        argv = EslintBackend(["eslint"]).command(tmp_path / "eslint.config.mjs")
        assert argv[:3] == ["eslint", "-c", str(tmp_path / "eslint.config.mjs")]
        assert "--no-warn-ignored" in argv
        assert argv[-1] == "."


class TestProbeFailures:
    def test_unexpected_exit_status(self, tmp_path, working_copy):
        argv = fake_tool(tmp_path, 'sys.stderr.write("boom: config invalid\\n")\nsys.exit(2)\n')
        with pytest.raises(ProbeFailedError) as exc_info:
            make_runner(tmp_path, oxlint=argv).run(working_copy, ARRAY)
        assert exc_info.value.returncode == 2
        assert "boom" in exc_info.value.reason

    def test_empty_output(self, tmp_path, working_copy):
        argv = fake_tool(tmp_path, "sys.exit(0)\n")
        with pytest.raises(ProbeOutputError):
            make_runner(tmp_path, oxlint=argv).run(working_copy, ARRAY)

    def test_garbage_output(self, tmp_path, working_copy):
        argv = fake_tool(tmp_path, 'print("this is not json")\n')
        with pytest.raises(ProbeOutputError):
            make_runner(tmp_path, oxlint=argv).run(working_copy, ARRAY)

    def test_wrong_json_shape(self, tmp_path, working_copy):
        argv = fake_tool(tmp_path, 'print(json.dumps({"results": []}))\n')
        with pytest.raises(ProbeOutputError):
            make_runner(tmp_path, oxlint=argv).run(working_copy, ARRAY)

    def test_timeout(self, tmp_path, working_copy):
        argv = fake_tool(tmp_path, "time.sleep(30)\n")
        runner = make_runner(tmp_path, oxlint=argv, timeout=0.5)
        started = time.monotonic()
        with pytest.raises(ProbeTimeoutError):
            runner.run(working_copy, ARRAY)
        assert time.monotonic() - started < 20
        assert list((tmp_path / "tools" / ".techpref-probes").iterdir()) == []

    @pytest.mark.skipif(os.name == "nt", reason="process groups are POSIX only")
    def test_timeout_kills_spawned_processes(self, tmp_path, working_copy):
        pid_file = tmp_path / "child.pid"
        argv = fake_tool(
            tmp_path,
            f"""
            import subprocess
            child = subprocess.Popen([sys.executable, "-c", "import time; time.sleep(30)"])
            with open({str(pid_file)!r}, "w") as f:
                f.write(str(child.pid))
            time.sleep(30)
            """,
        )
        runner = make_runner(tmp_path, oxlint=argv, timeout=2)

        with pytest.raises(ProbeTimeoutError):
            runner.run(working_copy, ARRAY)

        child_pid = int(pid_file.read_text())
        deadline = time.monotonic() + 5
        while process_running(child_pid) and time.monotonic() < deadline:
            time.sleep(0.05)
        assert not process_running(child_pid)

    def test_unknown_backend(self, tmp_path, working_copy):
        check = RuleCheck("semi", "always", "tslint", {})
        with pytest.raises(ProbeError):
            make_runner(tmp_path).run(working_copy, check)

    def test_missing_executable(self, tmp_path, working_copy):
        runner = make_runner(tmp_path, oxlint=[str(tmp_path / "no-such-oxlint")])
        with pytest.raises(ProbeError):
            runner.run(working_copy, ARRAY)
