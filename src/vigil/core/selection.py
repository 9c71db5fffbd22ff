"""Selection of records for batch acknowledgment."""

from dataclasses import dataclass, field


@dataclass
class Selection:
    """Selection mode state: whether it is active and which ids are picked."""

    active: bool = False
    ids: set[int] = field(default_factory=set)

    @property
    def count(self) -> int:
        return len(self.ids)

    def enter(self, initial_id: int | None = None) -> None:
        """Enter selection mode, optionally starting with one id selected."""
        self.active = True
        if initial_id is not None:
            self.ids = {initial_id}

    def exit(self) -> None:
        """Leave selection mode. Drops the current selection."""
        self.active = False
        self.ids = set()

    def toggle(self, record_id: int) -> None:
        if record_id in self.ids:
            self.ids.discard(record_id)
        else:
            self.ids.add(record_id)

    def select_all(self, record_ids: list[int]) -> None:
        self.ids.update(record_ids)

    def deselect_all(self, record_ids: list[int]) -> None:
        self.ids.difference_update(record_ids)

    def clear(self) -> None:
        self.ids = set()

    def ordered(self, record_ids: list[int]) -> list[int]:
        """Selected ids in the order they appear in `record_ids`."""
        return [i for i in record_ids if i in self.ids]
