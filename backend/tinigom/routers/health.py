from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from tinigom.core.config import Settings
from tinigom.core.timeutils import utcnow
from tinigom.deps import get_gateway, get_settings
from tinigom.services.gateway import SETTINGS_ID, PersistenceGateway, StorageUnavailableError

router = APIRouter(tags=["health"])


@router.get("/test-connection")
def test_connection(
    gateway: PersistenceGateway = Depends(get_gateway),
    app_settings: Settings = Depends(get_settings),
):
    """
    Connection check for setup: can we read the tables, is the settings row
    there, is quote generation configured.
    """
    try:
        transaction_count = gateway.transactions.count()
        settings_row = gateway.settings.get(SETTINGS_ID)
    except StorageUnavailableError as e:
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "Database connection failed",
                "details": str(e),
            },
        )

    return {
        "success": True,
        "message": "Database connection successful!",
        "details": {
            "transactionCount": transaction_count,
            "settingsTableExists": settings_row is not None,
            "currentSavingsGoal": settings_row.savings_goal if settings_row else "Not set",
            "quoteStrategy": app_settings.QUOTE_STRATEGY,
            "generationConfigured": app_settings.has_generation_credential,
            "timestamp": utcnow().isoformat(),
        },
    }
