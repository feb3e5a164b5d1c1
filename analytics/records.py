"""
Engine input records.

The analytics functions never touch the database. They take plain, frozen
records built either from ORM rows (``from_model``) or from loosely typed
mappings such as OCR output or CSV rows (``from_mapping``).

Numeric fields are coerced on construction: anything missing or
non-numeric becomes ``Decimal(0)`` instead of raising.
"""

import logging
import math
import numbers
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

from db.models import InstrumentClass, TargetPeriod

logger = logging.getLogger(__name__)

ZERO = Decimal(0)


def to_decimal(value: Any) -> Decimal:
    """
    Coerce a value to Decimal, defaulting to zero.

    Accepts Decimal, int, float (numpy scalars included) and numeric
    strings (thousands separators and surrounding whitespace are ignored).
    None, booleans, NaN, infinities and unparseable strings give Decimal(0).
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    # Integral and Real also cover numpy scalars pulled out of DataFrames
    if isinstance(value, numbers.Integral):
        return Decimal(int(value))
    if isinstance(value, numbers.Real):
        value = float(value)
        if not math.isfinite(value):
            return ZERO
        # str() keeps the shortest repr, so 0.1 stays 0.1
        return Decimal(str(value))
    if isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text:
            return ZERO
        try:
            parsed = Decimal(text)
        except InvalidOperation:
            logger.debug("Coercing non-numeric value %r to 0", value)
            return ZERO
        return parsed if parsed.is_finite() else ZERO

    logger.debug("Coercing unsupported value %r to 0", value)
    return ZERO


def to_optional_decimal(value: Any) -> Decimal | None:
    """Like to_decimal, but blank values stay None."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return to_decimal(value)


def parse_date(value: Any) -> date | None:
    """Parse a date from date/datetime objects or YYYY-MM-DD strings."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip().replace("/", "-")
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


def parse_optional_date(value: Any) -> date | None:
    """
    Parse an optional filter bound: blank gives None, garbage raises.

    Raises:
        ValueError: If a non-blank value is not a valid date.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    parsed = parse_date(value)
    if parsed is None:
        raise ValueError(f"Invalid date: {value!r}")
    return parsed


def parse_instrument_class(value: Any) -> InstrumentClass:
    """Parse 'stock' / 'FUND' / InstrumentClass into InstrumentClass."""
    if isinstance(value, InstrumentClass):
        return value
    try:
        return InstrumentClass(str(value).strip().upper())
    except ValueError:
        raise ValueError(f"Unknown instrument class: {value!r}") from None


def _pick(data: Mapping[str, Any], *keys: str) -> Any:
    """Return the first present key's value (snake_case or camelCase)."""
    for key in keys:
        if key in data:
            return data[key]
    return None


def _require_date(value: Any) -> date:
    parsed = parse_date(value)
    if parsed is None:
        raise ValueError(f"Invalid date: {value!r}")
    return parsed


@dataclass(frozen=True)
class SnapshotRecord:
    """
    One dated observation of an account's total value.

    ``id`` is the store's opaque identity; it tells apart records that
    share a date when a series is filtered.
    """
    date: date
    instrument_class: InstrumentClass
    total_asset: Decimal = ZERO
    total_market_value: Decimal | None = None
    index_reference: Decimal | None = None
    notes: str = ""
    id: Any = None

    def __post_init__(self):
        object.__setattr__(self, "total_asset", to_decimal(self.total_asset))
        object.__setattr__(self, "total_market_value", to_optional_decimal(self.total_market_value))
        object.__setattr__(self, "index_reference", to_optional_decimal(self.index_reference))
        object.__setattr__(self, "notes", self.notes or "")

    @property
    def key(self) -> tuple[date, Any]:
        """Identity used to locate the record in its series."""
        return (self.date, self.id)

    @classmethod
    def from_model(cls, model) -> "SnapshotRecord":
        """Build from a db.models.Snapshot row."""
        return cls(
            date=_require_date(model.date),
            instrument_class=model.instrument_class,
            total_asset=model.total_asset,
            total_market_value=model.total_market_value,
            index_reference=model.index_reference,
            notes=model.notes or "",
            id=model.id,
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SnapshotRecord":
        """
        Build from a loosely typed mapping.

        Raises:
            ValueError: If the date or instrument class cannot be parsed.
        """
        return cls(
            date=_require_date(data.get("date")),
            instrument_class=parse_instrument_class(
                _pick(data, "instrument_class", "instrumentClass")
            ),
            total_asset=_pick(data, "total_asset", "totalAsset"),
            total_market_value=_pick(data, "total_market_value", "totalMarketValue"),
            index_reference=_pick(data, "index_reference", "indexReference"),
            notes=data.get("notes") or "",
            id=data.get("id"),
        )


@dataclass(frozen=True)
class AdjustmentRecord:
    """Signed capital flow: positive = added, negative = withdrawn."""
    date: date
    instrument_class: InstrumentClass
    amount: Decimal = ZERO
    notes: str = ""
    id: Any = None

    def __post_init__(self):
        object.__setattr__(self, "amount", to_decimal(self.amount))
        object.__setattr__(self, "notes", self.notes or "")

    @classmethod
    def from_model(cls, model) -> "AdjustmentRecord":
        """Build from a db.models.Adjustment row."""
        return cls(
            date=_require_date(model.date),
            instrument_class=model.instrument_class,
            amount=model.amount,
            notes=model.notes or "",
            id=model.id,
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AdjustmentRecord":
        return cls(
            date=_require_date(data.get("date")),
            instrument_class=parse_instrument_class(
                _pick(data, "instrument_class", "instrumentClass")
            ),
            amount=data.get("amount"),
            notes=data.get("notes") or "",
            id=data.get("id"),
        )


@dataclass(frozen=True)
class TargetSpec:
    """
    Profit goal for an instrument class and period.

    ``period_start_date`` is informational; progress always uses the
    current calendar period.
    """
    instrument_class: InstrumentClass
    period: TargetPeriod
    target_amount: Decimal = ZERO
    period_start_date: date | None = None
    id: Any = field(default=None, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "target_amount", to_decimal(self.target_amount))

    @classmethod
    def from_model(cls, model) -> "TargetSpec":
        """Build from a db.models.Target row."""
        return cls(
            instrument_class=model.instrument_class,
            period=model.period,
            target_amount=model.target_amount,
            period_start_date=parse_date(model.period_start_date),
            id=model.id,
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TargetSpec":
        period = _pick(data, "period")
        return cls(
            instrument_class=parse_instrument_class(
                _pick(data, "instrument_class", "instrumentClass")
            ),
            period=period if isinstance(period, TargetPeriod) else TargetPeriod(str(period).upper()),
            target_amount=_pick(data, "target_amount", "targetAmount"),
            period_start_date=parse_date(_pick(data, "period_start_date", "periodStartDate")),
            id=data.get("id"),
        )
