from fastapi import Depends
from sqlalchemy.orm import Session

from tinigom.core.config import Settings, settings
from tinigom.database import get_db
from tinigom.services.ai_service import QuoteGenerator
from tinigom.services.gateway import PersistenceGateway
from tinigom.services.quote_service import QuoteService


def get_settings() -> Settings:
    return settings


def get_gateway(db: Session = Depends(get_db)) -> PersistenceGateway:
    return PersistenceGateway(db)


def get_quote_generator(app_settings: Settings = Depends(get_settings)) -> QuoteGenerator:
    return QuoteGenerator(app_settings)


def get_quote_service(
    gateway: PersistenceGateway = Depends(get_gateway),
    generator: QuoteGenerator = Depends(get_quote_generator),
    app_settings: Settings = Depends(get_settings),
) -> QuoteService:
    return QuoteService(gateway, generator, app_settings)
