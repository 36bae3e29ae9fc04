from onboarding.services.common import errors
from onboarding.services.common.permissions import Principal
from onboarding.services.common.unit_of_work import TransactionError, UnitOfWork

__all__ = ["errors", "Principal", "TransactionError", "UnitOfWork"]
