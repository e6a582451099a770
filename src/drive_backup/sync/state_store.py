"""Persistent mapping of local files and named folders to Drive ids."""

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class SyncState:
    """Remote identities of everything uploaded so far."""
    files: Dict[str, str] = field(default_factory=dict)  # local path -> file id
    folders: Dict[str, str] = field(default_factory=dict)  # folder key -> folder id


class StateStore:
    """Load and save the sync state record.

    Only one process is expected to hold the store at a time.
    """

    def __init__(self, state_file: Path):
        """Initialize state store.

        Args:
            state_file: Path to the JSON state record
        """
        self.state_file = Path(state_file)
        self.state = SyncState()

    def load(self) -> SyncState:
        """Load state from disk.

        A missing or unreadable record yields an empty state.
        """
        if not self.state_file.exists():
            self.state = SyncState()
            return self.state

        try:
            with open(self.state_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
            self.state = SyncState(
                files=dict(data.get('files') or {}),
                folders=dict(data.get('folders') or {}),
            )
        except (OSError, ValueError, AttributeError, TypeError) as e:
            # If we can't load the state, start fresh
            logger.warning(f"⚠️ Could not read sync state {self.state_file}: {e}")
            self.state = SyncState()

        return self.state

    def save(self, state: Optional[SyncState] = None):
        """Overwrite the state record on disk."""
        if state is not None:
            self.state = state

        self.state_file.parent.mkdir(parents=True, exist_ok=True)
        tmp_file = self.state_file.with_name(self.state_file.name + '.tmp')
        with open(tmp_file, 'w', encoding='utf-8') as f:
            json.dump(asdict(self.state), f, indent=2, ensure_ascii=False)
        os.replace(tmp_file, self.state_file)

    def get_file_id(self, local_path: str) -> Optional[str]:
        return self.state.files.get(local_path)

    def record_file(self, local_path: str, file_id: str):
        """Remember the remote id created for a local file and persist it."""
        self.state.files[local_path] = file_id
        self.save()

    def get_folder(self, name: str) -> Optional[str]:
        return self.state.folders.get(name)

    def set_folder(self, name: str, folder_id: str):
        """Remember a folder id and persist it."""
        self.state.folders[name] = folder_id
        self.save()
