"""Persist the published prefixes for consumers outside the agent process."""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

import yaml

LOG = logging.getLogger(__name__)


@dataclass
class WriteResult:
    """Result of a prefix file write."""

    prefixes: List[str]
    output_path: Path


class PrefixFileWriter:
    """Write ``prefixes: [...]`` YAML documents, replacing the file atomically."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def write(self, prefixes: Sequence[str]) -> WriteResult:
        # Empty entries are subnets kubeadm did not record.
        kept = [p for p in prefixes if p]
        body = yaml.safe_dump({"prefixes": kept}, default_flow_style=False)

        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(
            dir=str(self._path.parent), prefix=".prefixes-", suffix=".yaml"
        )
        try:
            with os.fdopen(fd, "w") as handle:
                handle.write(body)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temp_path, self._path)
        except Exception:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise

        LOG.info("Wrote %d prefix(es) to %s", len(kept), self._path)
        return WriteResult(prefixes=kept, output_path=self._path)
