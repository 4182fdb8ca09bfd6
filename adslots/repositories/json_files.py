"""
JSON file repositories.

Each collection lives in its own file under a data directory, in the
camelCase record shapes the admin server has always written. A missing
file is an empty collection; anything unreadable raises RepositoryError.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, TypeVar

import structlog

from ..campaigns.models import Campaign
from ..errors import RepositoryError
from ..groups.census import Display
from ..groups.index import GroupNode
from ..scheduling.store import ScheduleStore

logger = structlog.get_logger()

T = TypeVar("T")

GROUPS_FILE = "groups.json"
DISPLAYS_FILE = "displays.json"
SCHEDULES_FILE = "schedules.json"
CAMPAIGNS_FILE = "campaigns.json"


class JsonFileCollection:
    """A JSON array stored in one file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def read(self) -> list[Any]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("json_repository.read_failed", path=str(self.path), error=str(e))
            raise RepositoryError(f"Error reading {self.path.name}: {e}") from e
        if not isinstance(data, list):
            raise RepositoryError(f"Error reading {self.path.name}: expected a JSON array")
        return data

    def write(self, records: list[Any]) -> None:
        """Write atomically: a temp file in the same directory, then rename."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(records, f, indent=2)
                os.replace(tmp, self.path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as e:
            logger.error("json_repository.write_failed", path=str(self.path), error=str(e))
            raise RepositoryError(f"Error writing {self.path.name}: {e}") from e

    def decode(self, parse: Callable[[list[Any]], T]) -> T:
        records = self.read()
        try:
            return parse(records)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise RepositoryError(f"Malformed record in {self.path.name}: {e}") from e


class JsonGroupRepository:
    def __init__(self, data_dir: Path):
        self.collection = JsonFileCollection(Path(data_dir) / GROUPS_FILE)

    def load(self) -> list[GroupNode]:
        return self.collection.decode(lambda rows: [GroupNode.from_dict(r) for r in rows])

    def save(self, groups: list[GroupNode]) -> None:
        self.collection.write([g.to_dict() for g in groups])


class JsonDisplayRepository:
    def __init__(self, data_dir: Path):
        self.collection = JsonFileCollection(Path(data_dir) / DISPLAYS_FILE)

    def load(self) -> list[Display]:
        return self.collection.decode(lambda rows: [Display.from_dict(r) for r in rows])

    def save(self, displays: list[Display]) -> None:
        self.collection.write([d.to_dict() for d in displays])


class JsonScheduleRepository:
    def __init__(self, data_dir: Path):
        self.collection = JsonFileCollection(Path(data_dir) / SCHEDULES_FILE)

    def load(self) -> ScheduleStore:
        return self.collection.decode(ScheduleStore.from_list)

    def save(self, store: ScheduleStore) -> None:
        self.collection.write(store.to_list())


class JsonCampaignRepository:
    def __init__(self, data_dir: Path):
        self.collection = JsonFileCollection(Path(data_dir) / CAMPAIGNS_FILE)

    def load(self) -> list[Campaign]:
        return self.collection.decode(lambda rows: [Campaign.from_record(r) for r in rows])

    def save(self, campaigns: list[Campaign]) -> None:
        self.collection.write([c.to_record() for c in campaigns])
