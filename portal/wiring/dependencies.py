from functools import lru_cache
import logging

from portal.core.config import Settings, settings
from portal.application.ports.record_store import RecordStorePort
from portal.application.ports.scheduling import SchedulingRelayPort
from portal.application.use_cases.account import AccountUseCase
from portal.application.use_cases.booking import BookingService
from portal.application.use_cases.projects import ProjectsUseCase
from portal.infrastructure.acuity.acuity_client import AcuityRelay
from portal.infrastructure.acuity.mock_acuity import MockAcuityRelay
from portal.infrastructure.store.memory_store import DEMO_USER_ID, MemoryRecordStore
from portal.infrastructure.supabase.supabase_store import SupabaseRecordStore


logger = logging.getLogger(__name__)


def get_settings() -> Settings:
    return settings


@lru_cache
def get_booking_settings() -> Settings:
    if not settings.ACUITY_USE_MOCK:
        return settings
    # The mock provider accepts any ids, so fill the gaps instead of failing every call.
    return settings.model_copy(
        update={
            "ACUITY_APPOINTMENT_TYPE_ID": settings.ACUITY_APPOINTMENT_TYPE_ID or "1",
            "ACUITY_CALENDAR_ID": settings.ACUITY_CALENDAR_ID or "1",
            "ACUITY_TIMEZONE": settings.ACUITY_TIMEZONE or settings.BOOKING_TIMEZONE,
        }
    )


@lru_cache
def get_scheduling_relay() -> SchedulingRelayPort:
    if settings.ACUITY_USE_MOCK:
        logger.info("Using MockAcuityRelay (ACUITY_USE_MOCK=true)")
        config = get_booking_settings()
        type_id = config.ACUITY_APPOINTMENT_TYPE_ID or "1"
        calendar_id = config.ACUITY_CALENDAR_ID or "1"
        return MockAcuityRelay(
            appointment_type_id=int(type_id) if type_id.isdigit() else 1,
            calendar_id=int(calendar_id) if calendar_id.isdigit() else 1,
            timezone=config.ACUITY_TIMEZONE,
        )
    return AcuityRelay(settings)


@lru_cache
def get_record_store() -> RecordStorePort:
    if settings.SUPABASE_URL and settings.SUPABASE_SERVICE_KEY:
        logger.info("Using SupabaseRecordStore")
        return SupabaseRecordStore(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_KEY)
    logger.info("Using MemoryRecordStore (Supabase not configured)")
    return MemoryRecordStore()


def get_booking_service() -> BookingService:
    return BookingService(relay=get_scheduling_relay(), config=get_booking_settings())


def get_projects_use_case() -> ProjectsUseCase:
    return ProjectsUseCase(store=get_record_store())


def get_account_use_case() -> AccountUseCase:
    return AccountUseCase(store=get_record_store())


def get_current_user_id() -> str:
    # Session issuance lives outside this service; every request acts as the demo account.
    return DEMO_USER_ID
