"""Sensitive data scanning for collected files.

Issues are attached to ``file.meta["security_issues"]``; file contents are
never modified.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum

from codebundle.models import CollectedFile, PatternError
from codebundle.pattern_matching import find_all_matches, match_any_glob, try_compile_regex

logger = logging.getLogger(__name__)


class SecurityIssueSeverity(Enum):
    INFO = "info"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass(frozen=True)
class SensitivePattern:
    name: str
    pattern: str
    severity: SecurityIssueSeverity


@dataclass(frozen=True)
class SecurityIssue:
    description: str
    severity: SecurityIssueSeverity
    file_path: str
    line: int | None = None
    code: str | None = None
    recommendation: str | None = None
    scanner: str = "sensitive-data-scanner"


@dataclass
class SecurityReport:
    scanner_id: str
    issues: list[SecurityIssue] = field(default_factory=list)
    total_files: int = 0
    files_with_issues: int = 0

    @property
    def issues_by_severity(self) -> dict[str, int]:
        return dict(Counter(issue.severity.value for issue in self.issues))


BUILTIN_PATTERNS = [
    SensitivePattern("AWS Access Key", r"\b(?:AKIA|ASIA)[0-9A-Z]{16}\b", SecurityIssueSeverity.CRITICAL),
    SensitivePattern("Google API Key", r"AIza[0-9A-Za-z\-_]{35}", SecurityIssueSeverity.CRITICAL),
    SensitivePattern("GitHub Token", r"gh[pousr]_[A-Za-z0-9_]{36}", SecurityIssueSeverity.CRITICAL),
    SensitivePattern(
        "Private Key",
        r"-----BEGIN (?:RSA |DSA |EC |OPENSSH )?PRIVATE KEY-----",
        SecurityIssueSeverity.CRITICAL,
    ),
    SensitivePattern(
        "Generic API Key",
        r"(?i)(api_key|apikey|api token|access_token)(.{0,20})['\"][0-9a-zA-Z]{16,}['\"]",
        SecurityIssueSeverity.HIGH,
    ),
    SensitivePattern(
        "Generic Secret",
        r"(?i)(secret|password|credentials)(.{0,20})['\"][0-9a-zA-Z]{8,}['\"]",
        SecurityIssueSeverity.HIGH,
    ),
    SensitivePattern(
        "Connection String",
        r"(?i)(mongodb|postgresql|mysql|jdbc|redis)://[^\s]+",
        SecurityIssueSeverity.HIGH,
    ),
    SensitivePattern("IP Address", r"\b(?:\d{1,3}\.){3}\d{1,3}\b", SecurityIssueSeverity.INFO),
]

DEFAULT_ENV_FILE_PATTERNS = ["**/.env", "**/.env.*", "**/config/secrets.*", "**/credentials.*"]


def redact(text: str, keep: int = 4) -> str:
    """Mask all but the first few characters of a line."""
    stripped = text.strip()
    if len(stripped) <= keep:
        return "*" * len(stripped)
    return stripped[:keep] + "*" * (len(stripped) - keep)


class SensitiveDataScanner:
    """Flags lines that look like credentials, keys or connection strings."""

    id = "sensitive-data-scanner"

    def __init__(
        self,
        custom_patterns: list[SensitivePattern] | None = None,
        redact_sensitive_data: bool = True,
        env_file_patterns: list[str] | None = None,
    ):
        self.patterns = list(BUILTIN_PATTERNS)
        for custom in custom_patterns or []:
            result = try_compile_regex(custom.pattern)
            if isinstance(result, PatternError):
                logger.warning(f"Ignoring custom pattern {custom.name!r}: {result.message}")
                continue
            self.patterns.append(custom)
        self.redact_sensitive_data = redact_sensitive_data
        self.env_file_patterns = env_file_patterns or DEFAULT_ENV_FILE_PATTERNS

    def is_env_file(self, file_path: str) -> bool:
        """True if the path looks like an environment or secrets file."""
        # "**/" also matches zero directories, so a root-level .env is covered
        return match_any_glob(file_path.replace("\\", "/"), self.env_file_patterns)

    def scan_content(self, file_path: str, content: str) -> list[SecurityIssue]:
        """Scan content line by line for sensitive patterns.

        Args:
            file_path: Path recorded on each issue
            content: File body

        Returns:
            One issue per match, with 1-based line numbers
        """
        issues = []
        for line_number, line in enumerate(content.split("\n"), start=1):
            for sensitive in self.patterns:
                for _ in find_all_matches(line, sensitive.pattern):
                    issues.append(
                        SecurityIssue(
                            description=f"Found potential {sensitive.name}",
                            severity=sensitive.severity,
                            file_path=file_path,
                            line=line_number,
                            code=redact(line) if self.redact_sensitive_data else line,
                            recommendation="Move the value to a secret store or environment variable",
                            scanner=self.id,
                        )
                    )
        return issues

    def _file_issues(self, file: CollectedFile) -> list[SecurityIssue]:
        issues = self.scan_content(file.file_path, file.content)
        if self.is_env_file(file.file_path):
            issues.insert(
                0,
                SecurityIssue(
                    description="Environment file included in context",
                    severity=SecurityIssueSeverity.MEDIUM,
                    file_path=file.file_path,
                    recommendation="Exclude env files or list them without contents",
                    scanner=self.id,
                ),
            )
        return issues

    def scan(self, files: list[CollectedFile]) -> list[CollectedFile]:
        """Attach issues to each file's meta and return the same files."""
        for file in files:
            issues = self._file_issues(file)
            if issues:
                file.meta.setdefault("security_issues", []).extend(issues)
        return files

    def generate_report(self, files: list[CollectedFile]) -> SecurityReport:
        """Summarize issues across files without touching their meta."""
        report = SecurityReport(self.id, total_files=len(files))
        for file in files:
            issues = self._file_issues(file)
            if issues:
                report.files_with_issues += 1
                report.issues.extend(issues)
        return report
