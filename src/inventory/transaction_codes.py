"""
Transaction Code Generator

Codes look like TXN-IN-20240115-001: movement kind, movement date and a
per-day sequence that continues from the highest code already stored.
"""

import logging
import time
from datetime import date

from ..database.models import Order, StockIn, StockOut

logger = logging.getLogger(__name__)

MOVEMENT_MODELS = {
    'IN': StockIn,
    'OUT': StockOut,
}


def _model_for(kind: str):
    try:
        return MOVEMENT_MODELS[kind]
    except KeyError:
        raise ValueError(f"Unknown transaction kind: {kind!r}") from None


def _epoch_millis() -> int:
    return int(time.time() * 1000)


def generate_transaction_code(session, kind: str, on_date: date) -> str:
    """
    Generate the next transaction code for a movement.

    Args:
        session: SQLAlchemy session
        kind: 'IN' or 'OUT'
        on_date: Date of the movement

    Returns:
        Code of the form TXN-{kind}-{YYYYMMDD}-{seq:03d}
    """
    model = _model_for(kind)
    prefix = f"TXN-{kind}-{on_date.strftime('%Y%m%d')}"

    codes = session.query(model.transaction_code)\
                   .filter(model.transaction_code.like(f"{prefix}-%"))\
                   .all()

    sequence = 1
    sequences = []
    for (code,) in codes:
        tail = code.rsplit('-', 1)[-1]
        if tail.isdigit():
            sequences.append(int(tail))
    if sequences:
        sequence = max(sequences) + 1

    code = f"{prefix}-{sequence:03d}"
    logger.debug(f"Generated transaction code {code}")
    return code


def generate_fallback_code(kind: str) -> str:
    """Timestamp-based code used when sequence generation fails"""
    return f"TXN-{kind}-{_epoch_millis()}"


def transaction_code_exists(session, code: str, kind: str) -> bool:
    model = _model_for(kind)
    return session.query(model.id).filter(model.transaction_code == code).first() is not None


def generate_order_code(session=None) -> str:
    """ORD-{epoch millis}, bumped past any code already taken"""
    stamp = _epoch_millis()
    if session is not None:
        while session.query(Order.id).filter(Order.order_code == f"ORD-{stamp}").first():
            stamp += 1
    return f"ORD-{stamp}"
