from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from asksh.prompting.context import (
    MAX_FILE_LINES,
    EnvironmentContext,
    directory_listing,
    gather_context,
    read_file_excerpt,
    referenced_files,
    shell_history,
    shell_name,
)
from asksh.prompting.templates import build_explain_prompt, build_prompt, build_refine_prompt, clean_command


class CleanCommandTests(unittest.TestCase):
    def test_strips_fences_and_backticks(self) -> None:
        cases = {
            "ls -la": "ls -la",
            "  ls -la \n": "ls -la",
            "```bash\nfind . -name '*.py'\n```": "find . -name '*.py'",
            "```\ndu -sh *\n```": "du -sh *",
            "`git status`": "git status",
            "$ echo hi": "echo hi",
        }
        for raw, expected in cases.items():
            with self.subTest(raw=raw):
                self.assertEqual(clean_command(raw), expected)

    def test_inner_backticks_are_kept(self) -> None:
        self.assertEqual(clean_command("echo `date` done"), "echo `date` done")


class PromptTemplateTests(unittest.TestCase):
    def test_generate_prompt_embeds_context_and_instruction(self) -> None:
        context = EnvironmentContext(
            current_dir="/work",
            os_name="linux",
            shell="zsh",
            directory_listing=["src/", "README.md"],
            referenced_files={"README.md": "# hello"},
            shell_history=["git pull"],
        )

        prompt = build_prompt("list python files", context)

        self.assertIn("Current Directory: /work", prompt)
        self.assertIn("Shell: zsh", prompt)
        self.assertIn("  src/", prompt)
        self.assertIn("  1. git pull", prompt)
        self.assertIn("=== CONTENT OF 'README.md' ===\n# hello", prompt)
        self.assertTrue(prompt.rstrip().endswith("Instruction: list python files\n\nCommand:"))

    def test_listing_is_capped(self) -> None:
        context = EnvironmentContext("/w", "linux", "bash", directory_listing=[f"f{i}" for i in range(25)])

        text = context.format()

        self.assertIn("  f19", text)
        self.assertNotIn("  f20", text)
        self.assertIn("... and 5 more files", text)

    def test_refine_and_explain_prompts(self) -> None:
        refine = build_refine_prompt("ls", "include hidden files")
        explain = build_explain_prompt("tar -xzf a.tgz")

        self.assertIn("Current command: ls", refine)
        self.assertIn("User's refinement request: include hidden files", refine)
        self.assertIn("Command: tar -xzf a.tgz", explain)


class ContextTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp.name) / "project"
        self.home = Path(self.tmp.name) / "home"
        self.root.mkdir()
        self.home.mkdir()
        (self.root / "notes.txt").write_text("alpha\nbeta\n", encoding="utf-8")
        (self.root / "Makefile").write_text("all:\n\techo hi\n", encoding="utf-8")
        (self.root / "src").mkdir()
        (self.root / "src" / "app.py").write_text("print('x')\n", encoding="utf-8")
        (self.root / ".env").write_text("SECRET=1\n", encoding="utf-8")

    def tearDown(self) -> None:
        self.tmp.cleanup()

    def test_directory_listing_hides_dotfiles_and_marks_dirs(self) -> None:
        self.assertEqual(directory_listing(self.root), ["Makefile", "notes.txt", "src/"])

    def test_referenced_files_by_extension_path_and_name(self) -> None:
        listing = directory_listing(self.root)

        files = referenced_files("count lines in notes.txt, src/app.py and the Makefile", self.root, listing)

        self.assertEqual(list(files), ["notes.txt", "src/app.py", "Makefile"])
        self.assertEqual(files["notes.txt"], "alpha\nbeta")

    def test_referenced_files_stay_inside_root(self) -> None:
        (Path(self.tmp.name) / "outside.txt").write_text("nope", encoding="utf-8")

        files = referenced_files("cat ../outside.txt", self.root, directory_listing(self.root))

        self.assertEqual(files, {})

    def test_large_and_long_files(self) -> None:
        big = self.root / "big.log"
        big.write_text("x" * 9000, encoding="utf-8")
        long = self.root / "long.txt"
        long.write_text("".join(f"line {i}\n" for i in range(80)), encoding="utf-8")

        self.assertEqual(read_file_excerpt(big), "[File too large: 9000 bytes, contents omitted]")
        excerpt = read_file_excerpt(long).splitlines()
        self.assertEqual(len(excerpt), MAX_FILE_LINES + 1)
        self.assertEqual(excerpt[-1], f"... [truncated at {MAX_FILE_LINES} lines]")

    def test_zsh_history_is_parsed(self) -> None:
        lines = [": 1700000000:0;git status", ": 1700000001:0;x list files", ": 1700000002:0;make test"]
        (self.home / ".zsh_history").write_text("\n".join(lines) + "\n", encoding="utf-8")

        self.assertEqual(shell_history("zsh", self.home), ["git status", "make test"])

    def test_history_keeps_last_entries(self) -> None:
        commands = [f"echo {i}" for i in range(10)]
        (self.home / ".bash_history").write_text("\n".join(commands) + "\n", encoding="utf-8")

        self.assertEqual(shell_history("bash", self.home), commands[-5:])

    def test_long_history_keeps_last_entries_after_skipping_own_invocations(self) -> None:
        lines = [f"echo {i}" for i in range(5000)] + ["x list files", "x show disk usage"]
        (self.home / ".bash_history").write_text("\n".join(lines) + "\n", encoding="utf-8")

        self.assertEqual(shell_history("bash", self.home), [f"echo {i}" for i in range(4995, 5000)])
        self.assertEqual(shell_history("bash", self.home, limit=2), ["echo 4998", "echo 4999"])

    def test_fish_history_is_parsed(self) -> None:
        history = self.home / ".local" / "share" / "fish" / "fish_history"
        history.parent.mkdir(parents=True)
        history.write_text("- cmd: ls\n  when: 1\n- cmd: pwd\n  when: 2\n", encoding="utf-8")

        self.assertEqual(shell_history("fish", self.home), ["ls", "pwd"])

    def test_gather_context(self) -> None:
        context = gather_context(
            "show notes.txt",
            cwd=self.root,
            home=self.home,
            environ={"SHELL": "/usr/bin/fish"},
        )

        self.assertEqual(context.current_dir, str(self.root))
        self.assertEqual(context.shell, "fish")
        self.assertIn("notes.txt", context.referenced_files)
        self.assertEqual(context.shell_history, [])
        self.assertEqual(shell_name({}), "unknown")


if __name__ == "__main__":
    unittest.main()
