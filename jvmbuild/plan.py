"""Build plan types exchanged between detection and build."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .errors import FilesystemError, ResolutionError


@dataclass
class BuildPlan:
    """Names a detected build system provides and requires."""
    provides: List[str] = field(default_factory=list)
    requires: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'provides': [{'name': n} for n in self.provides],
            'requires': [{'name': n} for n in self.requires],
        }


@dataclass
class DetectResult:
    passed: bool = False
    plans: List[BuildPlan] = field(default_factory=list)


@dataclass
class BuildpackPlanEntry:
    name: str
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class BuildpackPlan:
    """The resolved plan handed to the build phase."""
    entries: List[BuildpackPlanEntry] = field(default_factory=list)

    @classmethod
    def load(cls, path: Path) -> "BuildpackPlan":
        try:
            with open(path, 'r', encoding='utf-8') as f:
                content = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise FilesystemError("unable to read buildpack plan", str(path), e) from e

        try:
            return cls(entries=[
                BuildpackPlanEntry(name=e['name'], metadata=e.get('metadata') or {})
                for e in content.get('entries', [])
            ])
        except (KeyError, TypeError, AttributeError) as e:
            raise FilesystemError("unable to parse buildpack plan", str(path), e) from e

    def dump(self, path: Path) -> None:
        content = {'entries': [{'name': e.name, 'metadata': e.metadata} for e in self.entries]}
        try:
            with open(path, 'w', encoding='utf-8') as f:
                yaml.safe_dump(content, f, sort_keys=False)
        except OSError as e:
            raise FilesystemError("unable to write buildpack plan", str(path), e) from e


class PlanEntryResolver:
    """Looks up named entries in a buildpack plan."""

    def __init__(self, plan: BuildpackPlan):
        self.plan = plan

    def resolve(self, name: str) -> Tuple[Optional[BuildpackPlanEntry], bool]:
        """Merge every entry called name.

        Returns:
            Tuple of (merged entry, found)

        Raises:
            ResolutionError: If two entries disagree on a metadata value
        """
        matches = [e for e in self.plan.entries if e.name == name]
        if not matches:
            return None, False

        metadata: Dict[str, Any] = {}
        for entry in matches:
            for key, value in entry.metadata.items():
                if key in metadata and metadata[key] != value:
                    raise ResolutionError(
                        "unable to merge plan entry",
                        name,
                        ValueError(f"conflicting values for {key}: {metadata[key]!r} != {value!r}")
                    )
                metadata[key] = value

        return BuildpackPlanEntry(name=name, metadata=metadata), True
