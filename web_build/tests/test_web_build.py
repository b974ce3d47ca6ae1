import io
import os
import sys
import tempfile
import textwrap
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

from core.command_runner import ChildFailure, CommandResult, CommandRunner, RecordingCommandRunner
from core.console import Console
from web_build import cli
from web_build.src.web import build_web_project, copy_assets, find_package_manager


def _quiet_console():
    return Console(level="none")


class FailingRunner(CommandRunner):
    def __init__(self, fail_on):
        self.fail_on = fail_on
        self.calls = []

    def run(self, command, **kwargs):
        self.calls.append(list(command))
        returncode = 1 if command[-1] == self.fail_on else 0
        result = CommandResult(command=command, returncode=returncode, stdout="", stderr="")
        if returncode:
            raise ChildFailure(result)
        return result


class TestBuild(unittest.TestCase):
    def test_runs_install_then_build_in_source_dir(self):
        with tempfile.TemporaryDirectory() as tmp:
            runner = RecordingCommandRunner()
            build_web_project(
                runner,
                Path(tmp),
                _quiet_console(),
                package_manager=sys.executable,
                build_command="build:prod",
            )
            self.assertEqual(
                [record.command[1:] for record in runner.commands],
                [["install"], ["build:prod"]],
            )
            self.assertTrue(all(record.cwd == tmp for record in runner.commands))
            self.assertTrue(all(record.stream for record in runner.commands))

    def test_missing_source_dir(self):
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(FileNotFoundError) as ctx:
                build_web_project(RecordingCommandRunner(), Path(tmp) / "web", _quiet_console())
            self.assertIn("Source directory does not exist", str(ctx.exception))

    def test_missing_package_manager(self):
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(FileNotFoundError) as ctx:
                find_package_manager("pnpm-does-not-exist-xyz", env={"PATH": tmp})
            self.assertIn("pnpm-does-not-exist-xyz not found in PATH", str(ctx.exception))

    def test_install_failure_stops_build(self):
        with tempfile.TemporaryDirectory() as tmp:
            runner = FailingRunner("install")
            with self.assertRaises(RuntimeError) as ctx:
                build_web_project(runner, Path(tmp), _quiet_console(), package_manager=sys.executable)
            self.assertIn("install failed", str(ctx.exception))
            self.assertEqual(len(runner.calls), 1)


class TestCopy(unittest.TestCase):
    def test_replaces_destination(self):
        with tempfile.TemporaryDirectory() as tmp:
            src = Path(tmp) / "web"
            (src / "dist" / "assets").mkdir(parents=True)
            (src / "dist" / "index.html").write_text("<html></html>", encoding="utf-8")
            (src / "dist" / "assets" / "app.js").write_text("console.log(1)", encoding="utf-8")
            dst = Path(tmp) / "flutter" / "assets" / "web"
            dst.mkdir(parents=True)
            (dst / "stale.js").write_text("old", encoding="utf-8")

            copied = copy_assets(src, dst, _quiet_console(), output_dir="dist")

            self.assertEqual(copied, 2)
            self.assertFalse((dst / "stale.js").exists())
            self.assertEqual((dst / "assets" / "app.js").read_text(encoding="utf-8"), "console.log(1)")

    def test_missing_build_output(self):
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(FileNotFoundError) as ctx:
                copy_assets(Path(tmp), Path(tmp) / "out", _quiet_console())
            self.assertIn("Build output not found", str(ctx.exception))


@unittest.skipUnless(os.name == "posix", "uses an executable script as package manager")
class TestCli(unittest.TestCase):
    def _fake_package_manager(self, directory: Path) -> Path:
        script = directory / "fakepm"
        script.write_text(
            textwrap.dedent(
                f"""\
                #!{sys.executable}
                import pathlib, sys
                out = pathlib.Path("build")
                out.mkdir(exist_ok=True)
                (out / (sys.argv[1] + ".txt")).write_text("ok")
                """
            ),
            encoding="utf-8",
        )
        script.chmod(0o755)
        return script

    def test_refresh_builds_and_copies(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            src = root / "web"
            src.mkdir()
            pm = self._fake_package_manager(root)
            dst = root / "assets" / "web"

            with redirect_stdout(io.StringIO()):
                ret = cli.main(["refresh", "--src", str(src), "--dst", str(dst), "-m", str(pm)])

            self.assertEqual(ret, 0)
            self.assertEqual(sorted(path.name for path in dst.iterdir()), ["build.txt", "install.txt"])

    def test_copy_without_output_exits_1(self):
        with tempfile.TemporaryDirectory() as tmp:
            err = io.StringIO()
            with redirect_stderr(err), redirect_stdout(io.StringIO()):
                ret = cli.main(["copy", "--src", tmp, "--dst", str(Path(tmp) / "out")])
            self.assertEqual(ret, 1)
            self.assertIn("Error: Build output not found", err.getvalue())


if __name__ == "__main__":
    unittest.main()
