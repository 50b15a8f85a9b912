"""Language, category and placeholder-type detection utilities."""

import pathlib

from codebundle.constants import FILE_CATEGORIES, LANGUAGE_MAP, LIST_ONLY_FILE_TYPES


def get_language_from_path(file_path: str) -> str:
    """Determines the code fence language hint for a file path.

    Args:
        file_path: Path to the file

    Returns:
        Language name from LANGUAGE_MAP, or "text" if unknown

    Examples:
        >>> get_language_from_path("src/test.py")
        'python'
        >>> get_language_from_path("Dockerfile")
        'dockerfile'
    """
    path = pathlib.PurePosixPath(file_path)
    name_lower = path.name.lower()

    # Check exact name first (case-insensitive)
    if name_lower in LANGUAGE_MAP:
        return LANGUAGE_MAP[name_lower]

    # Check exact name (case-sensitive) for files like CMakeLists.txt
    if path.name in LANGUAGE_MAP:
        return LANGUAGE_MAP[path.name]

    return LANGUAGE_MAP.get(path.suffix.lower(), "text")


def get_file_category(file_path: str) -> str:
    """Categorize file by its purpose.

    Returns:
        Category name ('source', 'config', 'docker', 'iac', 'build', 'docs', or 'other')

    Examples:
        >>> get_file_category("main.py")
        'source'
        >>> get_file_category("config.json")
        'config'
    """
    path = pathlib.PurePosixPath(file_path)
    name_lower = path.name.lower()
    suffix_lower = path.suffix.lower()

    for category, extensions in FILE_CATEGORIES.items():
        if name_lower in extensions or suffix_lower in extensions:
            return category
    return "other"


def get_list_only_type(file_path: str) -> str:
    suffix_lower = pathlib.PurePosixPath(file_path).suffix.lower()
    for file_type, extensions in LIST_ONLY_FILE_TYPES.items():
        if suffix_lower in extensions:
            return file_type
    return "unknown"
