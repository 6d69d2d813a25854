"""
Car collection manager.

Owns the canonical in-memory list of cars. Every mutation validates its
input, persists the full collection through the repository and then
notifies subscribers. Views only ever read projections of the collection.
"""

from datetime import datetime
from typing import Callable, Iterable, List, Optional, Tuple

from ..events import CollectionChangeKind, CollectionChanged, CollectionListener
from ..exceptions import CarValidationException
from ..logging_config import get_logger
from ..models import CarFields, CarRecord
from ..repositories.car_repository import CarRepository
from ..validators import DELETE_CONFIRMATION_PROMPT, validate_car_fields

logger = get_logger(__name__)

ConfirmCallback = Callable[[str], bool]


class IdGenerator:
    """
    Monotonic identity counter.

    Seeded with the largest existing id so that identities keep increasing
    past anything already stored, including clock-derived ids.
    """

    def __init__(self, existing_ids: Iterable[int] = ()):
        self._last = max(existing_ids, default=0)

    def next_id(self) -> int:
        self._last += 1
        return self._last


class CarCollectionManager:
    """
    Owner of the car collection.

    Insertion order is preserved; updates replace a record in place and
    deletions remove it without reordering the rest.
    """

    def __init__(
        self,
        repository: CarRepository,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize the manager and load the stored collection.

        Args:
            repository: Persistence for the full collection
            clock: Source of the current date for the year rule

        Raises:
            StorageCorruptedException: If stored data is malformed and the
                repository is configured to fail
        """
        self.repository = repository
        self._clock = clock
        self._cars: List[CarRecord] = list(repository.load())
        self._ids = IdGenerator(car.id for car in self._cars)
        self._listeners: List[CollectionListener] = []

        logger.info("Car collection loaded", size=len(self._cars))

    @property
    def cars(self) -> Tuple[CarRecord, ...]:
        """Read-only snapshot of the collection in display order."""
        return tuple(self._cars)

    def __len__(self) -> int:
        return len(self._cars)

    def current_year(self) -> int:
        return self._clock().year

    def subscribe(self, listener: CollectionListener) -> Callable[[], None]:
        """
        Register a change listener.

        Args:
            listener: Called with a CollectionChanged after every mutation

        Returns:
            A callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(
        self, cars: List[CarRecord], kind: CollectionChangeKind, car_id: Optional[int]
    ) -> None:
        # Persist before swapping so a failed write leaves memory unchanged
        self.repository.save(cars)
        self._cars = cars

        event = CollectionChanged(kind=kind, car_id=car_id, size=len(self._cars))
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(
                    "Collection listener failed",
                    listener=getattr(listener, "__name__", repr(listener)),
                    kind=kind.value,
                )

    def _validate(self, fields: CarFields) -> None:
        try:
            validate_car_fields(fields, self.current_year())
        except CarValidationException as e:
            logger.info(
                "Car validation failed",
                field=e.field_name,
                value=e.value,
                reason=e.reason,
            )
            raise

    def _index_of(self, car_id: int) -> Optional[int]:
        for index, car in enumerate(self._cars):
            if car.id == car_id:
                return index
        return None

    def get(self, car_id: int) -> Optional[CarRecord]:
        """Look up a car by identity."""
        index = self._index_of(car_id)
        return self._cars[index] if index is not None else None

    def create(self, fields: CarFields) -> CarRecord:
        """
        Validate and append a new car.

        Args:
            fields: Brand, model, year and price of the new car

        Returns:
            The stored record with its new identity

        Raises:
            CarValidationException: If price or year is out of range; the
                collection is left unchanged
        """
        self._validate(fields)

        car = CarRecord.from_fields(self._ids.next_id(), fields)
        self._commit([*self._cars, car], CollectionChangeKind.CREATED, car.id)

        logger.info("Car created", car_id=car.id, brand=car.brand, size=len(self._cars))
        return car

    def update(self, car_id: int, fields: CarFields) -> Optional[CarRecord]:
        """
        Validate and replace an existing car, keeping its position.

        Args:
            car_id: Identity of the car to replace
            fields: New brand, model, year and price

        Returns:
            The updated record, or None if no car has this identity

        Raises:
            CarValidationException: If price or year is out of range
        """
        self._validate(fields)

        index = self._index_of(car_id)
        if index is None:
            logger.warning("Update ignored, car not found", car_id=car_id)
            return None

        car = CarRecord.from_fields(car_id, fields)
        cars = list(self._cars)
        cars[index] = car
        self._commit(cars, CollectionChangeKind.UPDATED, car_id)

        logger.info("Car updated", car_id=car_id, brand=car.brand)
        return car

    def delete(self, car_id: int, confirm: ConfirmCallback) -> bool:
        """
        Remove a car after the user confirms.

        Args:
            car_id: Identity of the car to remove
            confirm: Blocking yes/no prompt; receives the question text

        Returns:
            True if a car was removed, False on decline or unknown identity
        """
        if not confirm(DELETE_CONFIRMATION_PROMPT):
            logger.info("Car deletion declined", car_id=car_id)
            return False

        index = self._index_of(car_id)
        if index is None:
            logger.warning("Delete ignored, car not found", car_id=car_id)
            return False

        cars = list(self._cars)
        del cars[index]
        self._commit(cars, CollectionChangeKind.DELETED, car_id)

        logger.info("Car deleted", car_id=car_id, size=len(self._cars))
        return True

    def query(self, brand_substring: str = "") -> Tuple[CarRecord, ...]:
        """
        Filter cars by brand.

        Args:
            brand_substring: Case-insensitive substring of the brand; empty
                matches every car

        Returns:
            Matching cars in collection order
        """
        needle = brand_substring.lower()
        return tuple(car for car in self._cars if needle in car.brand.lower())
