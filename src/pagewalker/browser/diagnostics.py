"""Best-effort screenshots for post-mortem inspection."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


def github_artifact_url() -> Optional[str]:
    """Link to the current GitHub Actions run, where snapshots get uploaded."""

    run_id = os.getenv("GITHUB_RUN_ID")
    server = os.getenv("GITHUB_SERVER_URL")
    repository = os.getenv("GITHUB_REPOSITORY")
    if not (run_id and server and repository):
        return None
    return f"{server}/{repository}/actions/runs/{run_id}"


@dataclass(slots=True)
class Snapshotter:
    session: Any
    output_dir: Path

    def capture(self, name: str) -> Optional[Path]:
        """Saves ``name`` into the output directory; never raises."""

        path = self.output_dir / name
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            self.session.screenshot(path)
        except Exception as exc:
            logger.warning("Snapshot %s failed: %s", name, exc)
            return None

        logger.info("Snapshot saved: %s", path)
        artifact_url = github_artifact_url()
        if artifact_url:
            logger.info("View snapshots at: %s", artifact_url)
        return path
