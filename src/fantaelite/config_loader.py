"""Persist and load header synonym profiles."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List


@dataclass
class HeaderProfile:
    synonyms: Dict[str, List[str]]

    @classmethod
    def load(cls, path: Path) -> "HeaderProfile":
        data = json.loads(path.read_text(encoding="utf-8"))
        raw = data.get("synonyms", {})
        return cls(
            synonyms={
                field: [value] if isinstance(value, str) else list(value)
                for field, value in raw.items()
            },
        )

    def save(self, path: Path) -> None:
        payload = {"synonyms": self.synonyms}
        path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")

    def merged_with(self, base: Dict[str, List[str]]) -> Dict[str, List[str]]:
        """Return ``base`` with this profile's labels tried first for each field."""

        merged = {field: list(labels) for field, labels in base.items()}
        for field, labels in self.synonyms.items():
            existing = merged.get(field, [])
            merged[field] = list(labels) + [label for label in existing if label not in labels]
        return merged
