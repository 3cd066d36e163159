import os
from dataclasses import dataclass
from pathlib import Path

from apns_push.domain.errors import KeySourceError
from apns_push.domain.ports import KeySource


@dataclass
class FileKeySource(KeySource):
    path: str

    def load(self) -> bytes:
        try:
            return Path(self.path).expanduser().read_bytes()
        except OSError as e:
            raise KeySourceError(f"Cannot read signing key from {self.path}: {e}") from e


@dataclass
class EnvKeySource(KeySource):
    variable: str

    def load(self) -> bytes:
        value = os.getenv(self.variable)
        if not value:
            raise KeySourceError(f"Environment variable {self.variable} is not set")
        # Single-line secrets usually carry escaped newlines.
        return value.replace("\\n", "\n").encode("utf-8")
