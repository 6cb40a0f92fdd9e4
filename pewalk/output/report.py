"""
PeWalk Report Generator
========================

Serialises a :class:`PEImage` to a JSON document.  Section names appear
twice per section: ``name`` holds the raw 8 bytes as hex and
``display_name`` holds the loss-tolerant text rendering.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pewalk import __version__
from pewalk.core.models import PEImage


class PeWalkReportGenerator:
    """Build and write JSON reports for walk results."""

    def build(self, image: PEImage) -> dict[str, Any]:
        """Return the report as a JSON-compatible dictionary."""
        return {
            "tool": "pewalk",
            "version": __version__,
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "image": image.model_dump(mode="json"),
        }

    def to_json(self, image: PEImage, indent: int = 2) -> str:
        return json.dumps(self.build(image), indent=indent, ensure_ascii=False)

    def generate_json(self, image: PEImage, output_path: str | Path) -> Path:
        """Write the JSON report to *output_path*, creating parent directories.

        Returns:
            The resolved path of the written file.
        """
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_json(image), encoding="utf-8")
        return path.resolve()
