"""Static tables used for language hints, categories and ignore rules."""

LANGUAGE_MAP: dict[str, str] = {
    # Python
    ".py": "python", ".pyi": "python", ".pyx": "python",
    ".ipynb": "json", "pyproject.toml": "toml", "setup.py": "python",
    "requirements.txt": "text", "setup.cfg": "ini", "tox.ini": "ini",

    # JavaScript/TypeScript/Node
    ".js": "javascript", ".mjs": "javascript", ".cjs": "javascript",
    ".jsx": "jsx", ".ts": "typescript", ".tsx": "tsx",
    "package.json": "json", "tsconfig.json": "json",

    # Web
    ".html": "html", ".htm": "html", ".css": "css",
    ".scss": "scss", ".sass": "sass", ".less": "less",
    ".vue": "vue", ".svelte": "svelte",

    # Java & JVM
    ".java": "java", ".kt": "kotlin", ".kts": "kotlin",
    ".groovy": "groovy", ".gradle": "groovy", ".scala": "scala",
    "pom.xml": "xml",

    # C-family
    ".c": "c", ".h": "c", ".cpp": "cpp", ".hpp": "cpp", ".cc": "cpp",
    ".cs": "csharp", "CMakeLists.txt": "cmake", ".cmake": "cmake",

    # Other Languages
    ".go": "go", "go.mod": "go", ".rs": "rust", "Cargo.toml": "toml",
    ".rb": "ruby", "Gemfile": "ruby", ".php": "php", ".swift": "swift",
    ".dart": "dart", ".lua": "lua", ".pl": "perl", ".r": "r",
    ".ex": "elixir", ".exs": "elixir", ".clj": "clojure",

    # Shell & Scripts
    ".sh": "bash", ".bash": "bash", ".zsh": "zsh", ".fish": "fish",
    ".ps1": "powershell", ".bat": "batch", ".cmd": "batch",

    # Config & Data
    ".json": "json", ".json5": "json", ".jsonc": "json",
    ".yaml": "yaml", ".yml": "yaml",
    ".xml": "xml", ".toml": "toml", ".ini": "ini",
    ".cfg": "ini", ".conf": "ini", ".properties": "properties",

    # Docker
    "dockerfile": "dockerfile", ".dockerfile": "dockerfile",
    "docker-compose.yml": "yaml", "docker-compose.yaml": "yaml",

    # Infrastructure as Code
    ".tf": "hcl", ".tfvars": "hcl", ".hcl": "hcl",

    # Database & API
    ".sql": "sql", ".prisma": "prisma",
    ".graphql": "graphql", ".gql": "graphql", ".proto": "protobuf",

    # Docs & Text
    ".md": "markdown", ".markdown": "markdown",
    ".txt": "text", ".rst": "rst", ".adoc": "asciidoc",

    # Build
    "makefile": "makefile", "Makefile": "makefile",

    # Environment & VCS
    ".env": "bash", ".gitignore": "text", ".editorconfig": "ini",
}

# Combined with .gitignore when respect_gitignore is enabled.
ALWAYS_IGNORE_PATTERNS: set[str] = {
    # Version Control
    ".git/", ".svn/", ".hg/",

    # Dependencies
    "node_modules/", "bower_components/",

    # Python
    "__pycache__/", "*.pyc", "*.pyo", ".venv/", "venv/",
    ".pytest_cache/", ".mypy_cache/", ".ruff_cache/", ".tox/", "*.egg-info/",

    # IDEs & OS
    ".idea/", ".vscode/", "*.swp", ".DS_Store", "Thumbs.db",
}

FILE_CATEGORIES = {
    "source": {".py", ".js", ".ts", ".java", ".go", ".rs", ".rb", ".php", ".cpp", ".c", ".cs"},
    "config": {".json", ".yaml", ".yml", ".toml", ".ini", ".env", ".config"},
    "docker": {"dockerfile", "docker-compose.yml", "docker-compose.yaml", ".dockerignore"},
    "iac": {".tf", ".tfvars", ".hcl"},
    "build": {"makefile", "cmakelists.txt", "build.gradle", "pom.xml"},
    "docs": {".md", ".rst", ".txt"},
}

# Placeholder kinds for files listed without their contents.
LIST_ONLY_FILE_TYPES = {
    "image": {".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp", ".svg"},
    "video": {".mp4", ".avi", ".mov", ".wmv", ".flv", ".mkv"},
    "audio": {".mp3", ".wav", ".ogg", ".flac", ".aac"},
    "document": {".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx"},
    "archive": {".zip", ".rar", ".tar", ".gz", ".7z"},
    "binary": {".exe", ".dll", ".so", ".dylib"},
}
