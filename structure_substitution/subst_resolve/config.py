"""
Resolution configuration.

Defaults cover every parameter a description may leave out. A JSON file
with any subset of the fields overrides them:

    {"default_connectivity": 8, "traversable": [0, 5], "tracker_path": "logs/unknown.jsonl"}
"""

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

from subst_core.grid import check_connectivity
from subst_recognize.dispatch import RecognitionDefaults


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class ResolutionConfig:
    """
    - default_connectivity: neighbor model when a description names none
    - default_column_count / default_row_count: run thresholds
    - min_block_height / min_block_width: smallest solid block
    - background: value written to cleared cells
    - traversable: values a landmark path may cross
    - tracker_path: JSONL file for unknown-structure events (None = log only)
    """
    default_connectivity: int = 4
    default_column_count: int = 3
    default_row_count: int = 3
    min_block_height: int = 2
    min_block_width: int = 2
    background: int = 0
    traversable: Tuple[int, ...] = (0,)
    tracker_path: Optional[str] = None

    def __post_init__(self):
        """
        Raises:
            ValueError: on a wrongly typed or out-of-range field
        """
        for name in ("default_connectivity", "default_column_count", "default_row_count",
                     "min_block_height", "min_block_width", "background"):
            if not _is_int(getattr(self, name)):
                raise ValueError(f"{name} must be an int, got {getattr(self, name)!r}")
        check_connectivity(self.default_connectivity)
        for name in ("default_column_count", "default_row_count", "min_block_height", "min_block_width"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be a positive int, got {getattr(self, name)}")
        if self.background < 0:
            raise ValueError(f"background must be non-negative, got {self.background}")

        if not isinstance(self.traversable, (list, tuple)) or not all(_is_int(v) for v in self.traversable):
            raise ValueError(f"traversable must be a list of ints, got {self.traversable!r}")
        object.__setattr__(self, "traversable", tuple(self.traversable))

        if self.tracker_path is not None and not isinstance(self.tracker_path, str):
            raise ValueError(f"tracker_path must be a string, got {self.tracker_path!r}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ResolutionConfig":
        """
        Raises:
            ValueError: on unknown keys or invalid values
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        return cls(**dict(data))

    def recognition_defaults(self) -> RecognitionDefaults:
        return RecognitionDefaults(
            connectivity=self.default_connectivity,
            column_count=self.default_column_count,
            row_count=self.default_row_count,
            min_block_height=self.min_block_height,
            min_block_width=self.min_block_width,
            traversable=self.traversable,
        )


def load_config(path) -> ResolutionConfig:
    """
    Load a ResolutionConfig from a JSON file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the content is not a JSON object or has bad fields
    """
    config_file = Path(path)
    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_file}")

    with open(config_file, "r") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Config file must hold a JSON object: {config_file}")

    return ResolutionConfig.from_dict(data)
