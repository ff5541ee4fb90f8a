"""Optional local product catalog: display names for known product ids."""

from __future__ import annotations

from collections.abc import Mapping


class ProductCatalog:
    def __init__(self, names: Mapping[int, str]):
        self._names = dict(names)

    @classmethod
    def parse(cls, text: str) -> ProductCatalog | None:
        """
        Build a catalog from ``id=name`` pairs separated by commas.
        Empty text means no catalog is deployed.

        >>> ProductCatalog.parse("1=Super Laptop, 3=Desk Lamp").name_of(3)
        'Desk Lamp'
        >>> ProductCatalog.parse("") is None
        True
        """
        text = text.strip()
        if not text:
            return None
        names = {}
        for entry in text.split(","):
            key, sep, name = entry.partition("=")
            if not sep or not name.strip():
                raise ValueError(f"invalid catalog entry {entry!r}, expected id=name")
            names[int(key.strip())] = name.strip()
        return cls(names)

    def __contains__(self, product_id: int) -> bool:
        return product_id in self._names

    def __len__(self) -> int:
        return len(self._names)

    def name_of(self, product_id: int) -> str | None:
        return self._names.get(product_id)
