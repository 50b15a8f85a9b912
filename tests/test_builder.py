import json

from codebundle.builder import FileContextBuilder
from codebundle.models import CollectorConfig, IncludeDirSpec
from codebundle.security import SensitiveDataScanner


def test_build_and_render_json(fake_fs):
    fs = fake_fs({"src/a.py": "print(1)", "src/.env": "DEBUG=1"})
    config = CollectorConfig(include_dirs=[IncludeDirSpec("src", ["*"])])

    context, output = FileContextBuilder(config, fs=fs).build_and_render("json")

    assert context.total_files == 2
    assert json.loads(output)["summary"]["statistics"]["totalFiles"] == 2


def test_scanner_annotates_built_files(fake_fs):
    fs = fake_fs({"src/.env": "DEBUG=1"})
    config = CollectorConfig(include_dirs=[IncludeDirSpec("src", ["*"])])

    context = FileContextBuilder(config, fs=fs, scanner=SensitiveDataScanner()).build()

    [file] = context.files
    assert file.meta["security_issues"][0].file_path == "src/.env"
