"""
InventoryPolicy -- tunables the services read at runtime.

Built from configuration by ``inventory_config.bridges.build_inventory_policy``.
The kernel never reads configuration files itself.
"""

from dataclasses import dataclass

from inventory_kernel.domain.dtos import PageRequest
from inventory_kernel.exceptions import InvalidPageRequestError

DEFAULT_STOCK_IN_NOTE = "Stock IN via Suppliers & Supplies"


@dataclass(frozen=True)
class InventoryPolicy:
    default_page_size: int = 20
    max_page_size: int = 100
    stock_in_default_note: str = DEFAULT_STOCK_IN_NOTE

    def __post_init__(self) -> None:
        if self.default_page_size <= 0 or self.max_page_size <= 0:
            raise ValueError("Page sizes must be positive")
        if self.default_page_size > self.max_page_size:
            raise ValueError("default_page_size cannot exceed max_page_size")

    def page_request(self, page: int = 0, size: int | None = None) -> PageRequest:
        """
        Validate a caller's paging arguments.

        Raises:
            InvalidPageRequestError: page < 0, size < 1, or size > max_page_size.
        """
        effective_size = self.default_page_size if size is None else size
        if page < 0 or effective_size < 1 or effective_size > self.max_page_size:
            raise InvalidPageRequestError(page, effective_size, self.max_page_size)
        return PageRequest(page=page, size=effective_size)
