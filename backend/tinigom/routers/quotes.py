from fastapi import APIRouter, Depends

from tinigom.deps import get_quote_service
from tinigom.services.quote_service import QuoteService

router = APIRouter(tags=["quotes"])


@router.get("/motivational-quote")
def get_motivational_quote(service: QuoteService = Depends(get_quote_service)):
    """
    Current motivational quote(s). Always 200: generation problems come back
    as the fallback quote with `fallback: true`.
    """
    return service.get_quote()
