from onboarding.repositories.base import BaseRepository
from onboarding.repositories.payment_repository import PaymentRepository
from onboarding.repositories.required_document_repository import RequiredDocumentRepository
from onboarding.repositories.room_inventory_repository import RoomInventoryRepository
from onboarding.repositories.student_profile_repository import StudentProfileRepository

__all__ = [
    "BaseRepository",
    "PaymentRepository",
    "RequiredDocumentRepository",
    "RoomInventoryRepository",
    "StudentProfileRepository",
]
