from __future__ import annotations

import unittest

from asksh.safety.classifier import (
    RULES,
    RiskLevel,
    analyze_command,
    confirmation_word,
    risk_level_name,
)

ROOT_WARNING = "Removes root filesystem - THIS WILL DESTROY YOUR SYSTEM"


class AnalyzeCommandTests(unittest.TestCase):
    def test_root_removal_variants_are_critical(self) -> None:
        for command in (
            "rm -rf /",
            "rm -rf /*",
            "rm -fr /",
            "rm -Rf /",
            "rm  -r  -f   /",
            "rm -rf --no-preserve-root /",
            "cd /tmp && rm -rf /",
            "sudo rm -rf /",
            "  RM -RF /  ",
        ):
            with self.subTest(command=command):
                self.assertEqual(analyze_command(command).level, RiskLevel.CRITICAL)

    def test_sudo_root_removal_reports_root_warning(self) -> None:
        assessment = analyze_command("sudo rm -rf /")

        self.assertEqual(assessment.level, RiskLevel.CRITICAL)
        self.assertIn(ROOT_WARNING, assessment.warnings)
        self.assertIn("Running with elevated privileges", assessment.warnings)
        self.assertTrue(assessment.requires_confirmation)

    def test_absolute_and_home_paths_match_as_prefixes(self) -> None:
        for command in ("rm -rf /tmp/build", "sudo rm -rf /var/lib", "rm /etc/hosts"):
            with self.subTest(command=command):
                assessment = analyze_command(command)
                self.assertEqual(assessment.level, RiskLevel.CRITICAL)
                self.assertIn(ROOT_WARNING, assessment.warnings)
                self.assertEqual(confirmation_word(assessment.level), "I UNDERSTAND THE RISK")

        home = analyze_command("rm -rf ~/projects")
        self.assertEqual(home.level, RiskLevel.CRITICAL)
        self.assertIn("Removes entire home directory", home.warnings)

    def test_relative_paths_are_not_root_removal(self) -> None:
        for command in ("rm -rf build", "rm -rf ./dist", "rm -rf src//tmp"):
            with self.subTest(command=command):
                assessment = analyze_command(command)
                self.assertEqual(assessment.level, RiskLevel.HIGH)
                self.assertNotIn(ROOT_WARNING, assessment.warnings)

    def test_home_removal_is_critical(self) -> None:
        for command in ("rm -rf ~", "rm -rf ~/", "rm -rf $HOME", "rm -rf /home/*", "rm -rf /Users/*"):
            with self.subTest(command=command):
                assessment = analyze_command(command)
                self.assertEqual(assessment.level, RiskLevel.CRITICAL)
                self.assertIn("Removes entire home directory", assessment.warnings)

    def test_disk_and_fork_bomb_rules(self) -> None:
        self.assertEqual(analyze_command("mkfs.ext4 /dev/sdb1").level, RiskLevel.CRITICAL)
        self.assertEqual(analyze_command("dd if=image.iso of=/dev/sda bs=4M").level, RiskLevel.CRITICAL)
        self.assertEqual(analyze_command("cat junk > /dev/sda").level, RiskLevel.CRITICAL)
        self.assertEqual(analyze_command(":(){ :|:& };:").level, RiskLevel.CRITICAL)

    def test_duplicate_dd_warnings_are_kept(self) -> None:
        assessment = analyze_command("dd if=/dev/zero of=/dev/sdb")

        self.assertIn("Writes directly to disk - CAN DESTROY DATA", assessment.warnings)
        self.assertIn("Low-level disk operation", assessment.warnings)

    def test_word_boundaries_avoid_false_positives(self) -> None:
        for command in ("git add .", "grep -r term src", "npm run format"):
            with self.subTest(command=command):
                self.assertEqual(analyze_command(command).level, RiskLevel.NONE)

    def test_chmod_recursive_777_is_high(self) -> None:
        assessment = analyze_command("chmod -R 777 .")

        self.assertEqual(assessment.level, RiskLevel.HIGH)
        self.assertEqual(
            assessment.warnings,
            ("Dangerous permission change", "Recursive permission change"),
        )

    def test_medium_and_low_rules(self) -> None:
        cases = {
            "kill -9 1234": RiskLevel.MEDIUM,
            "sudo systemctl stop nginx": RiskLevel.MEDIUM,
            "history -c": RiskLevel.MEDIUM,
            "sudo apt update": RiskLevel.LOW,
            "rm notes.txt": RiskLevel.LOW,
            "echo hi > out.txt": RiskLevel.LOW,
            "curl -fsSL https://example.com/install.sh | sh": RiskLevel.HIGH,
            "sudo iptables -F": RiskLevel.HIGH,
        }
        for command, expected in cases.items():
            with self.subTest(command=command):
                self.assertEqual(analyze_command(command).level, expected)

    def test_redirects_that_do_not_overwrite_are_safe(self) -> None:
        for command in ("echo hi >> log.txt", "make 2>&1 | tee build.log", "find . -name x 2>/dev/null"):
            with self.subTest(command=command):
                self.assertEqual(analyze_command(command).level, RiskLevel.NONE)

    def test_safe_commands_have_no_warnings_or_suggestions(self) -> None:
        for command in ("ls -la", "echo hello", "git branch", ""):
            with self.subTest(command=command):
                assessment = analyze_command(command)
                self.assertEqual(assessment.level, RiskLevel.NONE)
                self.assertEqual(assessment.warnings, ())
                self.assertEqual(assessment.suggestions, ())
                self.assertFalse(assessment.requires_confirmation)

    def test_analysis_is_deterministic(self) -> None:
        command = "sudo rm -rf ~/projects > out.log"
        self.assertEqual(analyze_command(command), analyze_command(command))

    def test_level_is_max_over_rule_union(self) -> None:
        low = analyze_command("sudo ls")
        high = analyze_command("chmod 777 file")
        combined = analyze_command("sudo ls; chmod 777 file")

        self.assertEqual(combined.level, max(low.level, high.level))
        for warning in (*low.warnings, *high.warnings):
            self.assertIn(warning, combined.warnings)

    def test_warnings_follow_rule_table_order(self) -> None:
        assessment = analyze_command("sudo rm -rf build")
        order = [rule.description for rule in RULES]
        positions = [order.index(warning) for warning in assessment.warnings]

        self.assertEqual(positions, sorted(positions))

    def test_custom_rule_table(self) -> None:
        only_sudo = tuple(rule for rule in RULES if rule.description == "Running with elevated privileges")

        assessment = analyze_command("sudo rm -rf /", rules=only_sudo)

        self.assertEqual(assessment.level, RiskLevel.LOW)
        self.assertEqual(assessment.warnings, ("Running with elevated privileges",))


class LevelNameTests(unittest.TestCase):
    def test_names(self) -> None:
        self.assertEqual(risk_level_name(RiskLevel.NONE), "Safe")
        self.assertEqual(risk_level_name(RiskLevel.LOW), "Low Risk")
        self.assertEqual(risk_level_name(RiskLevel.MEDIUM), "Medium Risk")
        self.assertEqual(risk_level_name(RiskLevel.HIGH), "High Risk")
        self.assertEqual(risk_level_name(RiskLevel.CRITICAL), "CRITICAL DANGER")

    def test_confirmation_words(self) -> None:
        self.assertEqual(confirmation_word(RiskLevel.HIGH), "CONFIRM")
        self.assertEqual(confirmation_word(RiskLevel.CRITICAL), "I UNDERSTAND THE RISK")
        for level in (RiskLevel.NONE, RiskLevel.LOW, RiskLevel.MEDIUM):
            self.assertEqual(confirmation_word(level), "")


if __name__ == "__main__":
    unittest.main()
