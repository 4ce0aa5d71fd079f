"""Filesystem Gateway - Infrastructure implementation of FileSystemProtocol."""

from pathlib import Path

from prosecheck.domain.protocols import FileSystemProtocol


class FileSystemGateway(FileSystemProtocol):
    """Infrastructure implementation of FileSystemProtocol using pathlib."""

    def discover_files(self, path: str, patterns: tuple[str, ...]) -> list[str]:
        """Files under path matching any pattern, sorted; a file path is returned as-is."""
        path_obj = Path(path)
        if not path_obj.is_dir():
            return [str(path_obj)]
        found: set[Path] = set()
        for pattern in patterns:
            found.update(p for p in path_obj.glob(pattern) if p.is_file())
        return [str(p) for p in sorted(found)]

    def get_suffix(self, path: str) -> str:
        return Path(path).suffix.lower()

    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        """Read text content from a file, keeping line endings as they are."""
        with open(path, encoding=encoding, newline="") as f:
            return f.read()

    def write_text(self, path: str, content: str, encoding: str = "utf-8") -> None:
        """Write text content to a file without translating line endings."""
        with open(path, "w", encoding=encoding, newline="") as f:
            f.write(content)
