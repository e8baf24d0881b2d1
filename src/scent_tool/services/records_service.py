"""
Records Service - CRUD for products, other items and orders.

Each collection is a JSON file holding a list of documents with the shop's
original field names (``_id``, ``createdAt``, ``buyingPrice`` ...).
Writes go through a temp file and ``os.replace`` so a crash never leaves
a half-written collection behind.
"""
import json
import logging
import os
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from ..config.settings import Settings
from ..engine.pricing_engine import coerce_price


logger = logging.getLogger(__name__)


class RecordValidationError(ValueError):
    """Raised when a payload fails validation; ``errors`` maps field → message."""

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(f"{k}: {v}" for k, v in self.errors.items()))


class RecordNotFoundError(LookupError):
    """Raised when no record has the requested id."""

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} '{record_id}' not found")


@dataclass
class ValidationResult:
    """Result of payload validation."""
    valid: bool = True
    errors: dict[str, str] = field(default_factory=dict)

    def add_error(self, name: str, message: str):
        self.errors[name] = message
        self.valid = False

    def raise_for_errors(self):
        if not self.valid:
            raise RecordValidationError(self.errors)


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds')


def new_record_id() -> str:
    return uuid.uuid4().hex


def _clean_str(value) -> Optional[str]:
    """Trim strings; empty means None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _require_amount(data: dict, key: str, result: ValidationResult) -> Optional[float]:
    if _clean_str(data.get(key)) is None:
        result.add_error(key, "This field is required")
        return None
    amount = coerce_price(data.get(key))
    if amount is None:
        result.add_error(key, "Must be a number")
    return amount


def _optional_amount(data: dict, key: str, result: ValidationResult) -> Optional[float]:
    if _clean_str(data.get(key)) is None:
        return None
    amount = coerce_price(data.get(key))
    if amount is None:
        result.add_error(key, "Must be a number")
    return amount


def _number(value):
    """Store whole amounts as ints so documents read like the shop enters them."""
    if value is None:
        return None
    return int(value) if float(value).is_integer() else value


# ============================================================================
# RECORD TYPES
# ============================================================================

@dataclass
class Product:
    """An attar product with its size variants ({size, price})."""
    name: str
    variants: list[dict] = field(default_factory=list)
    description: Optional[str] = None
    record_id: str = ""
    created_at: str = ""
    updated_at: str = ""

    KIND = "Product"
    SEARCH_FIELDS = ('name',)

    @classmethod
    def from_payload(cls, data: dict) -> 'Product':
        """Validate an API/form payload and build a Product."""
        result = ValidationResult()
        name = _clean_str(data.get('name'))
        if not name:
            result.add_error('name', "Product name is required")

        raw_variants = data.get('variants')
        variants = []
        if isinstance(raw_variants, list):
            for raw in raw_variants:
                if not isinstance(raw, dict):
                    continue
                size = _clean_str(raw.get('size', raw.get('label')))
                price = raw.get('price', raw.get('unit_price'))
                if size is None and _clean_str(price) is None:
                    # blank rows left over from the form
                    continue
                amount = coerce_price(price)
                variants.append({
                    'size': size or "",
                    'price': _number(amount) if amount is not None else price,
                })
        if not variants or not variants[0]['size'] or _clean_str(variants[0]['price']) is None:
            result.add_error('variants', "At least one valid variant is required")

        result.raise_for_errors()
        return cls(name=name, variants=variants, description=_clean_str(data.get('description')))

    def to_payload(self) -> dict:
        return {'name': self.name, 'description': self.description, 'variants': list(self.variants)}

    def to_record(self) -> dict:
        return {
            '_id': self.record_id,
            'name': self.name,
            'description': self.description,
            'variants': [dict(v) for v in self.variants],
            'createdAt': self.created_at,
            'updatedAt': self.updated_at,
        }

    @classmethod
    def from_record(cls, row: dict) -> 'Product':
        return cls(
            name=row.get('name', ''),
            variants=[dict(v) for v in row.get('variants') or []],
            description=row.get('description'),
            record_id=row.get('_id', ''),
            created_at=row.get('createdAt', ''),
            updated_at=row.get('updatedAt', ''),
        )


@dataclass
class OtherItem:
    """A non-attar item sold by the shop (bottles, boxes, incense ...)."""
    name: str
    buying_price: float
    selling_price: float
    profit: Optional[float] = None
    description: Optional[str] = None
    record_id: str = ""
    created_at: str = ""
    updated_at: str = ""

    KIND = "Item"
    SEARCH_FIELDS = ('name',)

    @classmethod
    def from_payload(cls, data: dict) -> 'OtherItem':
        """Validate a payload; profit defaults to selling minus buying price."""
        result = ValidationResult()
        name = _clean_str(data.get('name'))
        if not name:
            result.add_error('name', "This field is required")
        buying = _require_amount(data, 'buyingPrice', result)
        selling = _require_amount(data, 'sellingPrice', result)
        profit = _optional_amount(data, 'profit', result)
        result.raise_for_errors()

        if profit is None:
            profit = selling - buying
        return cls(
            name=name,
            buying_price=_number(buying),
            selling_price=_number(selling),
            profit=_number(profit),
            description=_clean_str(data.get('description')),
        )

    def to_payload(self) -> dict:
        return {
            'name': self.name,
            'buyingPrice': self.buying_price,
            'sellingPrice': self.selling_price,
            'profit': self.profit,
            'description': self.description,
        }

    def to_record(self) -> dict:
        return {'_id': self.record_id, **self.to_payload(),
                'createdAt': self.created_at, 'updatedAt': self.updated_at}

    @classmethod
    def from_record(cls, row: dict) -> 'OtherItem':
        return cls(
            name=row.get('name', ''),
            buying_price=row.get('buyingPrice'),
            selling_price=row.get('sellingPrice'),
            profit=row.get('profit'),
            description=row.get('description'),
            record_id=row.get('_id', ''),
            created_at=row.get('createdAt', ''),
            updated_at=row.get('updatedAt', ''),
        )


@dataclass
class Order:
    """A customer order with any outstanding balance."""
    product_name: str
    product_price: float
    remaining_payment: Optional[float] = None
    payment_method: Optional[str] = None
    description: Optional[str] = None
    record_id: str = ""
    created_at: str = ""
    updated_at: str = ""

    KIND = "Order"
    SEARCH_FIELDS = ('product_name', 'payment_method')

    @classmethod
    def from_payload(cls, data: dict) -> 'Order':
        result = ValidationResult()
        product_name = _clean_str(data.get('productName'))
        if not product_name:
            result.add_error('productName', "This field is required")
        price = _require_amount(data, 'productPrice', result)
        remaining = _optional_amount(data, 'remainingPayment', result)
        result.raise_for_errors()

        return cls(
            product_name=product_name,
            product_price=_number(price),
            remaining_payment=_number(remaining),
            payment_method=_clean_str(data.get('paymentMethod')),
            description=_clean_str(data.get('description')),
        )

    def to_payload(self) -> dict:
        return {
            'productName': self.product_name,
            'productPrice': self.product_price,
            'remainingPayment': self.remaining_payment,
            'paymentMethod': self.payment_method,
            'description': self.description,
        }

    def to_record(self) -> dict:
        return {'_id': self.record_id, **self.to_payload(),
                'createdAt': self.created_at, 'updatedAt': self.updated_at}

    @classmethod
    def from_record(cls, row: dict) -> 'Order':
        return cls(
            product_name=row.get('productName', ''),
            product_price=row.get('productPrice'),
            remaining_payment=row.get('remainingPayment'),
            payment_method=row.get('paymentMethod'),
            description=row.get('description'),
            record_id=row.get('_id', ''),
            created_at=row.get('createdAt', ''),
            updated_at=row.get('updatedAt', ''),
        )


# ============================================================================
# STORE
# ============================================================================

class RecordStore:
    """
    A JSON-file collection of one record type.

    Records are kept newest first; ``list_records`` sorts by ``createdAt``
    descending.
    """

    def __init__(self, path: Path, record_cls):
        self.path = Path(path)
        self.record_cls = record_cls
        self._lock = threading.RLock()

    @property
    def kind(self) -> str:
        return self.record_cls.KIND

    def _read(self) -> list[dict]:
        if not self.path.exists():
            return []
        with open(self.path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise ValueError(f"{self.path} does not hold a list of records")
        return data

    def _write(self, rows: list[dict]):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + '.tmp')
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(rows, f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, self.path)

    def list_records(self) -> list:
        """All records, newest first."""
        with self._lock:
            rows = self._read()
        rows = sorted(rows, key=lambda r: r.get('createdAt') or '', reverse=True)
        return [self.record_cls.from_record(r) for r in rows]

    def get_record(self, record_id: str):
        with self._lock:
            for row in self._read():
                if row.get('_id') == record_id:
                    return self.record_cls.from_record(row)
        raise RecordNotFoundError(self.kind, record_id)

    def create_record(self, data: dict):
        """Validate and insert a record; returns it with id and timestamps."""
        record = self.record_cls.from_payload(data)
        record.record_id = new_record_id()
        record.created_at = record.updated_at = now_iso()

        with self._lock:
            rows = self._read()
            rows.insert(0, record.to_record())
            self._write(rows)

        logger.info("Created %s %s", self.kind.lower(), record.record_id)
        return record

    def update_record(self, record_id: str, updates: dict):
        """Merge ``updates`` over the stored fields, re-validate and save."""
        with self._lock:
            rows = self._read()
            for i, row in enumerate(rows):
                if row.get('_id') == record_id:
                    break
            else:
                raise RecordNotFoundError(self.kind, record_id)

            current = self.record_cls.from_record(rows[i])
            merged = {**current.to_payload(), **updates}
            if isinstance(current, OtherItem) and 'profit' not in updates:
                # profit follows the new prices unless explicitly given
                merged.pop('profit', None)

            record = self.record_cls.from_payload(merged)
            record.record_id = record_id
            record.created_at = current.created_at
            record.updated_at = now_iso()
            rows[i] = record.to_record()
            self._write(rows)

        logger.info("Updated %s %s", self.kind.lower(), record_id)
        return record

    def delete_record(self, record_id: str):
        """Delete a record and return what was removed."""
        with self._lock:
            rows = self._read()
            remaining = [r for r in rows if r.get('_id') != record_id]
            if len(remaining) == len(rows):
                raise RecordNotFoundError(self.kind, record_id)
            removed = next(r for r in rows if r.get('_id') == record_id)
            self._write(remaining)

        logger.info("Deleted %s %s", self.kind.lower(), record_id)
        return self.record_cls.from_record(removed)

    def search(self, term: Optional[str] = None) -> list:
        """Case-insensitive substring search over the record's search fields."""
        records = self.list_records()
        needle = (term or '').strip().lower()
        if not needle:
            return records
        return [
            r for r in records
            if any(needle in str(getattr(r, f) or '').lower() for f in self.record_cls.SEARCH_FIELDS)
        ]

    def count(self) -> int:
        with self._lock:
            return len(self._read())


@dataclass
class ShopStores:
    """The three collections the shop keeps."""
    products: RecordStore
    others: RecordStore
    orders: RecordStore

    @classmethod
    def from_settings(cls, settings: Settings) -> 'ShopStores':
        return cls(
            products=RecordStore(settings.products_path, Product),
            others=RecordStore(settings.others_path, OtherItem),
            orders=RecordStore(settings.orders_path, Order),
        )

    def counts(self) -> dict[str, int]:
        return {
            'products': self.products.count(),
            'others': self.others.count(),
            'orders': self.orders.count(),
        }
