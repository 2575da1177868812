"""DTO, entity and state mapping."""

from .category_lookup import find_by_category, require_by_category
from .client_application_mapper import (
    ClientApplicationMapper,
    to_category_code,
    to_type_of_application,
)
from .benefit_application_mapper import BenefitApplicationMapper
from .state_mapper import (
    apply_state_to_dto,
    dental_benefit_ids,
    protected_renew_state_to_dto,
    renew_state_to_dto,
)

__all__ = [
    'find_by_category',
    'require_by_category',
    'ClientApplicationMapper',
    'to_category_code',
    'to_type_of_application',
    'BenefitApplicationMapper',
    'apply_state_to_dto',
    'dental_benefit_ids',
    'protected_renew_state_to_dto',
    'renew_state_to_dto',
]
