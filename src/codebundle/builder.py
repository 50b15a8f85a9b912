"""FileContextBuilder: collect, optionally scan, and render."""

from codebundle.file_operations import FileCollector, FileSystem
from codebundle.models import CollectorConfig, FileContext
from codebundle.output_generators import RendererRegistry, default_registry
from codebundle.security import SensitiveDataScanner


class FileContextBuilder:
    """Collects files for a configuration and renders them.

    Args:
        config: What to collect
        fs: File system to read from; the local disk by default
        registry: Renderers available to :meth:`build_and_render`
        scanner: Optional scanner that annotates files with security issues
    """

    def __init__(
        self,
        config: CollectorConfig,
        fs: FileSystem | None = None,
        registry: RendererRegistry | None = None,
        scanner: SensitiveDataScanner | None = None,
    ):
        self.config = config
        self.fs = fs
        self.registry = registry or default_registry()
        self.scanner = scanner

    def build(self) -> FileContext:
        """Collect files and run the scanner over them, if one is set.

        Returns:
            FileContext pairing the configuration with its collected files
        """
        files = FileCollector(self.config, self.fs).collect_files()
        if self.scanner is not None:
            self.scanner.scan(files)
        return FileContext(self.config, files)

    def build_and_render(self, renderer_id: str = "console") -> tuple[FileContext, str]:
        """Build the context and render it with a registered renderer.

        Raises:
            KeyError: If renderer_id is not registered
        """
        renderer = self.registry.get(renderer_id)
        context = self.build()
        return context, renderer.render(context)
