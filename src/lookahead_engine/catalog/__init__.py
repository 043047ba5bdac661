"""Catalog module - Job codes and vendors referenced by look-ahead tasks."""

from lookahead_engine.catalog.job_codes import JobCode, JobCodeCategory
from lookahead_engine.catalog.vendors import Vendor, VendorServiceType

__all__ = [
    "JobCode",
    "JobCodeCategory",
    "Vendor",
    "VendorServiceType",
]
