"""
Content file persistence.

Files are the only store: each is read whole, edited in memory and written
back whole. A file is never overwritten if it changed on disk since it was
read, so edits made in an editor while a session runs are not lost.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from ..config import CurtizConfig, get_settings
from ..content.models import Content, SentenceBlock, blocks_of
from ..content.parser import BlockParser
from ..errors import WriteConflictError


@dataclass
class ContentFile:
    """One annotated Markdown file and its parsed content."""

    path: Path
    text: str
    mtime_ns: int  # modification time when read
    content: list[Content] = field(default_factory=list)

    @classmethod
    def load(cls, path: Path | str, config: CurtizConfig | None = None) -> "ContentFile":
        path = Path(path)
        parser = BlockParser(config or get_settings())
        mtime_ns = path.stat().st_mtime_ns
        text = path.read_text(encoding="utf-8")
        content = parser.parse(text)
        logger.debug(f"Loaded {path}: {len(blocks_of(content))} blocks")
        return cls(path=path, text=text, mtime_ns=mtime_ns, content=content)

    @property
    def blocks(self) -> list[SentenceBlock]:
        return blocks_of(self.content)

    def render(self, config: CurtizConfig | None = None) -> str:
        return BlockParser(config or get_settings()).serialize(self.content)

    def is_modified(self, config: CurtizConfig | None = None) -> bool:
        return self.render(config) != self.text

    def save(self, config: CurtizConfig | None = None) -> bool:
        """
        Write the content back; False if nothing changed.

        Raises:
            WriteConflictError: the file was modified after it was read.
        """
        current = self.path.stat().st_mtime_ns
        if current > self.mtime_ns:
            raise WriteConflictError(self.path, self.mtime_ns, current)

        text = self.render(config)
        if text == self.text:
            return False
        self.path.write_text(text, encoding="utf-8")
        self.text = text
        self.mtime_ns = self.path.stat().st_mtime_ns
        logger.info(f"Saved {self.path}")
        return True


def load_all(paths: list[Path | str], config: CurtizConfig | None = None) -> list[ContentFile]:
    return [ContentFile.load(p, config) for p in paths]
