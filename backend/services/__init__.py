"""Backend services."""

from services.extraction_input import build_schedule_input_from_extraction
from services.index_series import (
    DEFAULT_LEASE_INDEX_TYPE,
    build_index_inputs_for_lease,
    get_index_series,
    upsert_index_series,
)
from services.rent_calculation import (
    calculate_for_extraction,
    compute_rent_schedule_for_extraction,
    load_extraction,
    store_outcome,
)

__all__ = [
    "DEFAULT_LEASE_INDEX_TYPE",
    "build_index_inputs_for_lease",
    "build_schedule_input_from_extraction",
    "calculate_for_extraction",
    "compute_rent_schedule_for_extraction",
    "get_index_series",
    "load_extraction",
    "store_outcome",
    "upsert_index_series",
]
