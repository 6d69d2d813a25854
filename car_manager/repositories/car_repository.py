"""
Car repository - persistence of the whole car collection.

The collection is stored as one JSON array in a single storage slot and is
always written as a full snapshot. There are no partial writes, no batching
and no schema version tag.
"""

import json
from typing import List, Literal, Sequence

from pydantic import TypeAdapter, ValidationError

from ..exceptions import StorageCorruptedException
from ..logging_config import get_logger
from ..models import CarRecord
from .storage import KeyValueStorage

logger = get_logger(__name__)

_CAR_LIST_ADAPTER = TypeAdapter(List[CarRecord])

DEFAULT_STORAGE_KEY = "carsList"


class CarRepository:
    """
    Loads and saves the car collection through a key-value storage slot.

    Absent data loads as an empty collection. Malformed data either loads as
    an empty collection (``corrupt_policy="reset"``) or raises
    :class:`StorageCorruptedException` (``corrupt_policy="fail"``).
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str = DEFAULT_STORAGE_KEY,
        corrupt_policy: Literal["reset", "fail"] = "reset",
    ):
        """
        Initialize car repository.

        Args:
            storage: Backend holding the storage slot
            key: Slot name for the serialized collection
            corrupt_policy: Handling of unparseable stored data
        """
        self.storage = storage
        self.key = key
        self.corrupt_policy = corrupt_policy

    def load(self) -> List[CarRecord]:
        """
        Read the stored collection.

        Returns:
            Stored cars in their saved order, or an empty list if nothing
            has been saved yet

        Raises:
            StorageCorruptedException: If the data is malformed and the
                policy is "fail"
        """
        try:
            return self._load()
        except StorageCorruptedException as e:
            if self.corrupt_policy == "fail":
                logger.error("Stored car collection is malformed", key=self.key, reason=e.reason)
                raise
            logger.error(
                "Stored car collection is malformed, starting with an empty collection",
                key=self.key,
                reason=e.reason,
            )
            return []

    def _load(self) -> List[CarRecord]:
        raw = self.storage.get_item(self.key)
        if raw is None:
            logger.info("No stored car collection found", key=self.key)
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageCorruptedException(self.key, f"invalid JSON: {e}") from e

        try:
            cars = _CAR_LIST_ADAPTER.validate_python(data)
        except ValidationError as e:
            raise StorageCorruptedException(
                self.key, f"invalid car records: {e.error_count()} error(s)"
            ) from e

        seen = set()
        for car in cars:
            if car.id in seen:
                raise StorageCorruptedException(self.key, f"duplicate car id {car.id}")
            seen.add(car.id)

        logger.info("Loaded car collection", key=self.key, count=len(cars))
        return cars

    def save(self, cars: Sequence[CarRecord]) -> None:
        """
        Write the full collection, overwriting any previous value.

        Args:
            cars: The complete collection in display order
        """
        payload = json.dumps([car.model_dump(mode="json") for car in cars])
        self.storage.set_item(self.key, payload)
        logger.debug("Saved car collection", key=self.key, count=len(cars))
