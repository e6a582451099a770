"""Configuration settings and models for the backup application."""

import re
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

import yaml
from pydantic import BaseModel, Field, validator

# Daily memory files are named YYYY-MM-DD.md
MEMORY_FILE_PATTERN = r"^\d{4}-\d{2}-\d{2}\.md$"

DEFAULT_SYNC_FILES = [
    "MEMORY.md",
    "SOUL.md",
    "USER.md",
    "IDENTITY.md",
    "HEARTBEAT.md",
    "tasks/pending.md",
]

DEFAULT_SCOPES = [
    "https://www.googleapis.com/auth/drive.file",
    "https://www.googleapis.com/auth/drive.metadata",
]


class PermissionRole(str, Enum):
    """Drive permission roles that can be granted on the backup folder."""
    READER = "reader"
    COMMENTER = "commenter"
    WRITER = "writer"


class PermissionType(str, Enum):
    """Drive permission grantee types."""
    ANYONE = "anyone"
    DOMAIN = "domain"
    USER = "user"


class ShareOptions(BaseModel):
    """Access granted on the root backup folder when it is created."""
    role: PermissionRole = PermissionRole.WRITER
    type: PermissionType = PermissionType.ANYONE

    def to_permission(self) -> dict:
        return {"role": self.role.value, "type": self.type.value}


class WatchOptions(BaseModel):
    """Timing for the change watcher."""
    debounce_delay: float = 2.0  # seconds after the last queued change
    settle_delay: float = 1.0  # seconds to wait after a directory event

    @validator('debounce_delay', 'settle_delay')
    def validate_delay(cls, v):
        if v < 0:
            raise ValueError('delays must not be negative')
        return v


class SyncConfig(BaseModel):
    """Main configuration class."""
    sync_files: List[str] = Field(default_factory=lambda: list(DEFAULT_SYNC_FILES))
    memory_dir: str = "memory"
    watch_dirs: List[str] = Field(default_factory=lambda: ["memory"])
    memory_file_pattern: str = MEMORY_FILE_PATTERN
    backup_folder_name: str = "sam-backup"
    memory_folder_name: str = "memory"
    state_path: Path = Path(".credentials/drive-sync-state.json")
    share: ShareOptions = Field(default_factory=ShareOptions)
    watch: WatchOptions = Field(default_factory=WatchOptions)

    @validator('memory_file_pattern')
    def validate_pattern(cls, v):
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f'invalid memory_file_pattern: {e}')
        return v

    def to_yaml(self, config_path: Union[str, Path],
                credentials: Optional["CredentialsConfig"] = None) -> None:
        """Save configuration to YAML file, optionally with a credentials section."""
        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = self.dict(exclude_none=True)
        data['state_path'] = str(self.state_path)
        data['share'] = self.share.to_permission()
        if credentials is not None:
            data['credentials'] = {
                'credentials_path': str(credentials.credentials_path),
                'token_path': str(credentials.token_path),
                'scopes': list(credentials.scopes),
            }

        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.dump(data, f, default_flow_style=False, indent=2)

    def is_memory_file(self, file_name: str) -> bool:
        """Check whether a bare file name is a dated memory file."""
        return re.match(self.memory_file_pattern, file_name) is not None


class CredentialsConfig(BaseModel):
    """Locations of the OAuth client secrets and the stored user token."""
    credentials_path: Path = Path(".credentials/google-drive-credentials.json")
    token_path: Path = Path(".credentials/google-drive-token.json")
    scopes: List[str] = Field(default_factory=lambda: list(DEFAULT_SCOPES))

    def missing_files(self) -> List[Path]:
        """Return credential files that are not present on disk."""
        return [p for p in (self.credentials_path, self.token_path) if not p.exists()]


def load_settings(config_path: Optional[Union[str, Path]] = None):
    """Load both configuration sections from a single YAML file.

    The file may contain a ``credentials`` mapping next to the sync settings.
    A missing file is not an error: the built-in defaults are used.

    Returns:
        Tuple of (SyncConfig, CredentialsConfig)
    """
    if config_path is None or not Path(config_path).exists():
        return SyncConfig(), CredentialsConfig()

    with open(config_path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}

    creds_data = data.pop('credentials', None) or {}
    return SyncConfig(**data), CredentialsConfig(**creds_data)
