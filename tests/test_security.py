import logging

from codebundle.models import CollectedFile
from codebundle.security import (
    BUILTIN_PATTERNS,
    SecurityIssueSeverity,
    SensitiveDataScanner,
    SensitivePattern,
    redact,
)

GITHUB_TOKEN = "ghp_" + "a1B2" * 9


def make_file(path, content):
    return CollectedFile(path, path, content, len(content), len(content.split("\n")))


def test_redact():
    assert redact("  abcdefgh ") == "abcd****"
    assert redact("abc") == "***"


def test_detects_github_token():
    scanner = SensitiveDataScanner()

    [issue] = scanner.scan_content("settings.py", f"x = 1\nTOKEN = {GITHUB_TOKEN}")

    assert issue.severity is SecurityIssueSeverity.CRITICAL
    assert "GitHub Token" in issue.description
    assert issue.line == 2
    assert issue.code.startswith("TOKE")
    assert GITHUB_TOKEN not in issue.code


def test_unredacted_code():
    scanner = SensitiveDataScanner(redact_sensitive_data=False)
    [issue] = scanner.scan_content("settings.py", f"TOKEN = {GITHUB_TOKEN}")
    assert issue.code == f"TOKEN = {GITHUB_TOKEN}"


def test_env_files():
    scanner = SensitiveDataScanner()

    assert scanner.is_env_file(".env") is True
    assert scanner.is_env_file("app/.env.local") is True
    assert scanner.is_env_file("config/secrets.yml") is True
    assert scanner.is_env_file("src/env.py") is False


def test_scan_annotates_meta_without_touching_content():
    env = make_file(".env", "DEBUG=1")
    clean = make_file("main.py", "print('hello')")

    SensitiveDataScanner().scan([env, clean])

    [issue] = env.meta["security_issues"]
    assert issue.severity is SecurityIssueSeverity.MEDIUM
    assert issue.line is None
    assert env.content == "DEBUG=1"
    assert "security_issues" not in clean.meta


def test_report_counts():
    files = [
        make_file("settings.py", f"TOKEN = {GITHUB_TOKEN}"),
        make_file(".env", "DEBUG=1"),
        make_file("main.py", "print('hello')"),
    ]

    report = SensitiveDataScanner().generate_report(files)

    assert report.total_files == 3
    assert report.files_with_issues == 2
    assert report.issues_by_severity == {"critical": 1, "medium": 1}


def test_custom_patterns(caplog):
    custom = [
        SensitivePattern("Ticket", r"INTERNAL-\d+", SecurityIssueSeverity.LOW),
        SensitivePattern("Broken", "(", SecurityIssueSeverity.LOW),
    ]

    with caplog.at_level(logging.WARNING):
        scanner = SensitiveDataScanner(custom_patterns=custom)

    assert len(scanner.patterns) == len(BUILTIN_PATTERNS) + 1
    assert "Broken" in caplog.text
    [issue] = scanner.scan_content("notes.txt", "see INTERNAL-42")
    assert issue.severity is SecurityIssueSeverity.LOW
