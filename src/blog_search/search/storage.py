"""Atomic persistence for search index artifacts."""

from __future__ import annotations

import logging
from pathlib import Path

import orjson

from blog_search.search.models import Artifact, parse_artifact


logger = logging.getLogger(__name__)


class ArtifactStore:
    """Read and write one artifact file.

    Writes go to a sibling ``.tmp`` file that is renamed over the target, so a
    reader (or a failed build) never sees a partially written index.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    @property
    def tmp_path(self) -> Path:
        return self.path.with_name(self.path.name + ".tmp")

    def exists(self) -> bool:
        return self.path.exists()

    def save(self, artifact: Artifact) -> Path:
        """Serialize ``artifact`` and atomically replace the stored file."""

        self.path.parent.mkdir(parents=True, exist_ok=True)
        serialized = orjson.dumps(artifact.to_dict())
        tmp_path = self.tmp_path
        try:
            tmp_path.write_bytes(serialized)
            tmp_path.replace(self.path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise
        logger.info("Wrote %s search index to %s (%d bytes)", artifact.kind, self.path, len(serialized))
        return self.path

    def load(self) -> Artifact:
        return parse_artifact(orjson.loads(self.path.read_bytes()))
