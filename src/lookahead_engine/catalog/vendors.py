"""Service providers called out for well operations."""

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class VendorServiceType(str, Enum):
    """Kind of service a vendor provides."""

    CEMENTING = "Cementing"
    DIRECTIONAL_DRILLING = "Directional Drilling"
    CASING_CREWS = "Casing Crews"
    MUD_LOGGING = "Mud Logging"
    WIRELINE = "Wireline"
    COMPLETIONS = "Completions"
    RIG_SERVICES = "Rig Services"
    TESTING = "Testing"
    RENTALS = "Rentals"
    TRUCKING = "Trucking"
    OTHER = "Other"


class Vendor(BaseModel):
    """Vendor record.

    Vendors are shared between tasks, so a single instance may be referenced
    by many task assignments.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    company_name: str = Field("", description="Company name")
    service_type: VendorServiceType = VendorServiceType.OTHER
    contact_name: str = ""
    contact_title: str = ""
    phone: str = ""
    emergency_phone: str = ""
    email: str = ""
    address: str = ""
    notes: str = ""
    is_active: bool = True

    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @property
    def display_name(self) -> str:
        if not self.contact_name:
            return self.company_name
        return f"{self.company_name} - {self.contact_name}"
