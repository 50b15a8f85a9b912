import pytest

from codebundle.file_operations import FileStat


@pytest.fixture
def make_tree(tmp_path, monkeypatch):
    """Write files under tmp_path and make it the working directory."""

    def _make(files: dict[str, str | bytes]):
        for rel_path, content in files.items():
            path = tmp_path / rel_path
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, str):
                content = content.encode("utf-8")
            path.write_bytes(content)
        monkeypatch.chdir(tmp_path)
        return tmp_path

    return _make


class FakeFileSystem:
    """In-memory FileSystem; paths in `unreadable` raise PermissionError on read."""

    def __init__(self, files: dict[str, str], unreadable: set[str] | None = None):
        self.files = files
        self.unreadable = unreadable or set()

    def list_directory(self, path, recursive, include_hidden=False):
        prefix = "" if path in (".", "") else path.rstrip("/") + "/"
        if prefix and not any(f.startswith(prefix) for f in self.files):
            raise FileNotFoundError(path)
        found = []
        for file_path in self.files:
            if not file_path.startswith(prefix):
                continue
            rest = file_path[len(prefix):]
            if not recursive and "/" in rest:
                continue
            found.append(file_path)
        return found

    def read_text(self, path):
        if path in self.unreadable:
            raise PermissionError(f"Permission denied: {path}")
        try:
            return self.files[path]
        except KeyError:
            raise FileNotFoundError(path) from None

    def stat(self, path):
        return FileStat(size=len(self.files[path].encode("utf-8")), mtime=0.0)


@pytest.fixture
def fake_fs():
    return FakeFileSystem
