import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from tinigom.core.config import Settings
from tinigom.core.timeutils import utcnow
from tinigom.deps import get_gateway, get_settings
from tinigom.models.finance import Person, Transaction, TransactionType
from tinigom.schemas import TransactionCreate, TransactionOut
from tinigom.services.gateway import NotFoundError, PersistenceGateway, StorageUnavailableError
from tinigom.services.ledger import filter_transactions, paginate

logger = logging.getLogger(__name__)

router = APIRouter(tags=["transactions"])


@router.get("")
def list_transactions(
    type: Optional[TransactionType] = None,
    user: Optional[Person] = None,
    month: Optional[int] = Query(None, ge=1, le=12),
    page: Optional[int] = Query(None, ge=1),
    gateway: PersistenceGateway = Depends(get_gateway),
    app_settings: Settings = Depends(get_settings),
):
    """
    All transactions, newest first. Optional history filters; `page` switches
    to paged output with total_pages/total.
    """
    try:
        rows = gateway.transactions.list(order_by=[Transaction.created_at.desc(), Transaction.id.desc()])
    except StorageUnavailableError as e:
        raise HTTPException(status_code=500, detail=str(e))

    rows = filter_transactions(rows, type=type, month=month, user=user)
    if page is None:
        return {"transactions": [TransactionOut.model_validate(t) for t in rows]}

    result = paginate(rows, page, app_settings.TRANSACTIONS_PER_PAGE)
    result["transactions"] = [TransactionOut.model_validate(t) for t in result["transactions"]]
    return result


@router.post("")
def create_transaction(
    payload: TransactionCreate,
    gateway: PersistenceGateway = Depends(get_gateway),
):
    try:
        transaction = gateway.transactions.insert({
            "amount": payload.amount,
            "type": payload.type,
            "category": payload.category,
            "reason": payload.reason,
            "user": payload.user,
            "date": utcnow(),
        })
    except StorageUnavailableError as e:
        raise HTTPException(status_code=500, detail=str(e))

    logger.info(f"[TX] {payload.user.value} logged {payload.type.value} of {payload.amount:,.2f}")
    return {"transaction": TransactionOut.model_validate(transaction)}


@router.delete("")
def delete_transaction(
    id: Optional[int] = None,
    gateway: PersistenceGateway = Depends(get_gateway),
):
    # No ownership check: both people may delete any row
    if id is None:
        raise HTTPException(status_code=400, detail="Transaction ID required")
    try:
        gateway.transactions.delete(id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StorageUnavailableError as e:
        raise HTTPException(status_code=500, detail=str(e))

    logger.info(f"[TX] Deleted transaction {id}")
    return {"success": True}
