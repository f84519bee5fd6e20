"""
Draft order store.

Holds the in-progress order (cart) of one browsing context as a mapping of
product_id -> DraftOrderItem inside a DraftCache slot. Every mutation writes
the whole serialized mapping back; there are no partial updates.

The store is an explicit object: build it for an owner, pass it to whatever
workflow needs the draft (archiving clears it on success).
"""

import json
from typing import Iterable, Optional
from uuid import uuid4

import structlog

from exceptions import DraftItemNotFoundError
from models.draft import (
    DraftOrderItem,
    OrderUnit,
    parse_unit,
    require_positive_quantity,
)
from services.draft_cache import DraftCache, get_draft_cache

logger = structlog.get_logger(__name__)

DEFAULT_OWNER = "default"


class OrderDraftStore:
    """
    Draft mapping for one owner.

    At most one line per product: upsert replaces an existing line
    (new id, new values), it never merges quantities.
    """

    def __init__(self, cache: DraftCache, owner_id: str = DEFAULT_OWNER):
        self.cache = cache
        self.owner_id = owner_id
        self.key = cache.slot_key(owner_id)

    # ===================
    # READ OPERATIONS
    # ===================

    def load(self) -> dict[str, DraftOrderItem]:
        """
        Current draft mapping.

        An unreadable slot is treated as an empty draft.
        """
        raw = self.cache.read(self.key)
        if not raw:
            return {}

        try:
            data = json.loads(raw)
            return {
                product_id: DraftOrderItem(**item)
                for product_id, item in data.items()
            }
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning("draft_slot_unreadable", owner_id=self.owner_id, error=str(e))
            return {}

    def get(self, product_id: str) -> Optional[DraftOrderItem]:
        return self.load().get(product_id)

    def __len__(self) -> int:
        return len(self.load())

    @property
    def is_empty(self) -> bool:
        return len(self) == 0

    # ===================
    # WRITE OPERATIONS
    # ===================

    def save(self, drafts: dict[str, DraftOrderItem]) -> None:
        """Replace the whole mapping."""
        payload = {
            product_id: item.model_dump(mode="json")
            for product_id, item in drafts.items()
        }
        self.cache.write(self.key, json.dumps(payload))

    def upsert(
        self,
        product_id: str,
        quantity,
        stock: Optional[str] = "",
        unit=OrderUnit.CASE,
    ) -> DraftOrderItem:
        """
        Create or overwrite the line for a product.

        Raises:
            InvalidQuantityError: If quantity is not > 0
            InvalidUnitError: If unit is not case/piece
        """
        qty = require_positive_quantity(quantity)
        order_unit = parse_unit(unit)

        item = DraftOrderItem(
            id=str(uuid4()),
            product_id=product_id,
            stock=stock or "",
            quantity=qty,
            unit=order_unit,
        )

        drafts = self.load()
        replaced = product_id in drafts
        drafts[product_id] = item
        self.save(drafts)

        logger.info(
            "draft_item_saved",
            owner_id=self.owner_id,
            product_id=product_id,
            quantity=qty,
            unit=order_unit.value,
            replaced=replaced,
        )
        return item

    def remove(self, product_id: str) -> None:
        """
        Delete the line for a product.

        Raises:
            DraftItemNotFoundError: If there is no line for it
        """
        drafts = self.load()
        if product_id not in drafts:
            raise DraftItemNotFoundError(product_id)

        del drafts[product_id]
        self.save(drafts)
        logger.info("draft_item_removed", owner_id=self.owner_id, product_id=product_id)

    def purge_products(self, product_ids: Iterable[str]) -> int:
        """Drop lines for deleted products. Returns lines removed."""
        drafts = self.load()
        removed = [pid for pid in product_ids if pid in drafts]
        if not removed:
            return 0

        for pid in removed:
            del drafts[pid]
        self.save(drafts)
        return len(removed)

    def clear(self) -> None:
        """Wipe the draft. Called after a successful archive."""
        self.cache.delete(self.key)
        logger.info("draft_cleared", owner_id=self.owner_id)


def purge_products_from_drafts(product_ids: Iterable[str], cache: Optional[DraftCache] = None) -> int:
    """
    Remove draft lines referencing deleted products from every owner's draft.

    Returns:
        Total lines removed
    """
    cache = cache or get_draft_cache()
    ids = list(product_ids)
    prefix = f"{cache.namespace}:"
    removed = 0

    for key in cache.keys():
        store = OrderDraftStore(cache, key[len(prefix):])
        removed += store.purge_products(ids)

    if removed:
        logger.info("draft_lines_purged", products=len(ids), removed=removed)
    return removed


def get_draft_store(owner_id: Optional[str] = None) -> OrderDraftStore:
    """OrderDraftStore for an owner on the process-wide cache."""
    return OrderDraftStore(get_draft_cache(), owner_id or DEFAULT_OWNER)
