"""File utility functions."""

import hashlib
import re
from pathlib import Path
from typing import List, Optional, Union


class FileHelper:
    """Helper class for file operations."""

    @staticmethod
    def content_hash(file_path: Union[str, Path]) -> Optional[str]:
        """MD5 of a text file's content, or None if it cannot be read.

        Args:
            file_path: Path to the file

        Returns:
            MD5 hash as hex string, None for missing or unreadable files
        """
        try:
            content = Path(file_path).read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError):
            return None
        return hashlib.md5(content.encode('utf-8')).hexdigest()

    @staticmethod
    def list_matching(dir_path: Union[str, Path], pattern: str) -> List[str]:
        """List regular files in a directory whose name matches ``pattern``.

        Args:
            dir_path: Directory to list
            pattern: Regular expression matched against the bare file name

        Returns:
            Sorted matching names; subdirectories are never included

        Raises:
            OSError: If the directory cannot be listed
        """
        regex = re.compile(pattern)
        return sorted(entry.name for entry in Path(dir_path).iterdir()
                      if regex.match(entry.name) and entry.is_file())

    @staticmethod
    def is_within(file_path: Union[str, Path], dir_path: Union[str, Path]) -> bool:
        """Check whether a path lies inside a directory."""
        try:
            Path(file_path).resolve().relative_to(Path(dir_path).resolve())
        except ValueError:
            return False
        return True
