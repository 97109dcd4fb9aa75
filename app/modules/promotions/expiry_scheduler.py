import asyncio
import logging
from app.database.supabase_client import get_service_supabase
from app.modules.promotions.service import PromotionService

logger = logging.getLogger(__name__)


async def expire_finished_promotions() -> int:
    """Run one auto-expire pass; returns how many promotions were expired."""
    try:
        service = PromotionService(get_service_supabase())
        result = await asyncio.to_thread(service.auto_expire)
        if not result.expired_count:
            logger.debug("No promotions to expire")
        return result.expired_count
    except Exception as e:
        logger.error(f"Error expiring promotions: {str(e)}")
        return 0


async def promotion_expiry_loop(interval_seconds: int):
    """Background task that periodically expires finished promotions"""
    while True:
        await expire_finished_promotions()
        await asyncio.sleep(interval_seconds)
