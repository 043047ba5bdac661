"""Job codes for drilling operations.

A job code carries a default duration estimate and learns running averages
from completed tasks, either as a flat average or, for meterage-based work,
as minutes per metre drilled.
"""

import math
import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from lookahead_engine.catalog.vendors import Vendor


class JobCodeCategory(str, Enum):
    """Operational category of a job code."""

    DRILLING = "Drilling"
    CASING = "Casing"
    CEMENTING = "Cementing"
    TRIPPING = "Tripping"
    TESTING = "Testing"
    LOGGING = "Logging"
    COMPLETIONS = "Completions"
    RIG_MOVE = "Rig Move"
    MAINTENANCE = "Maintenance"
    OTHER = "Other"

    @property
    def default_color_hex(self) -> str:
        return _CATEGORY_COLORS[self]


_CATEGORY_COLORS = {
    JobCodeCategory.DRILLING: "#3B82F6",
    JobCodeCategory.CASING: "#8B5CF6",
    JobCodeCategory.CEMENTING: "#6B7280",
    JobCodeCategory.TRIPPING: "#F59E0B",
    JobCodeCategory.TESTING: "#10B981",
    JobCodeCategory.LOGGING: "#06B6D4",
    JobCodeCategory.COMPLETIONS: "#22C55E",
    JobCodeCategory.RIG_MOVE: "#EF4444",
    JobCodeCategory.MAINTENANCE: "#F97316",
    JobCodeCategory.OTHER: "#64748B",
}


class JobCode(BaseModel):
    """Job code with self-learning duration estimation.

    Attributes:
        code: Short operator code (e.g. "DRL-01")
        name: Descriptive name
        category: Operational category
        color_hex: Custom color, falls back to the category default
        default_estimate_min: Estimate used until the code has been performed
        is_meterage_based: Estimate from metres drilled rather than a flat average
        average_duration_min: Learned mean duration of completed tasks
        average_duration_per_meter_min: Learned minutes per metre
        times_performed: Number of recorded completions
    """

    model_config = ConfigDict(validate_assignment=True)

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    code: str = ""
    name: str = ""
    category: JobCodeCategory = JobCodeCategory.OTHER
    color_hex: str | None = None
    notes: str = ""

    # Learned from completed tasks
    average_duration_min: float = Field(60.0, ge=0, allow_inf_nan=False)
    average_duration_per_meter_min: float = Field(0.0, ge=0, allow_inf_nan=False)
    times_performed: int = Field(0, ge=0)
    total_duration_min: float = Field(0.0, ge=0, allow_inf_nan=False)
    total_meterage_m: float = Field(0.0, ge=0, allow_inf_nan=False)

    default_estimate_min: float = Field(60.0, ge=0, allow_inf_nan=False)
    is_meterage_based: bool = False
    default_vendor_required: bool = False
    default_vendor: Vendor | None = None

    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @property
    def color(self) -> str:
        """Display color (custom or category default)."""
        return self.color_hex or self.category.default_color_hex

    @property
    def display_name(self) -> str:
        if not self.code:
            return self.name
        return f"{self.code} - {self.name}"

    def estimate_duration(self, meters: float | None = None) -> float:
        """Estimate task duration in minutes.

        Meterage-based codes with a learned per-metre rate scale with the
        metres to drill. Otherwise the learned average is used once the code
        has been performed, else the default estimate.

        Args:
            meters: Planned meterage for the task, if known

        Returns:
            Estimated duration in minutes

        Example:
            >>> jc = JobCode(code="DRL", default_estimate_min=120)
            >>> jc.estimate_duration()
            120.0
        """
        if (
            self.is_meterage_based
            and meters is not None
            and meters > 0
            and self.average_duration_per_meter_min > 0
        ):
            return meters * self.average_duration_per_meter_min
        if self.times_performed > 0:
            return self.average_duration_min
        return self.default_estimate_min

    def record_completion(self, duration_min: float, meterage_m: float | None = None) -> None:
        """Update running averages from a completed task."""
        if not math.isfinite(duration_min) or duration_min < 0:
            raise ValueError(f"duration_min must be finite and non-negative, got {duration_min}")
        if meterage_m is not None and not math.isfinite(meterage_m):
            raise ValueError(f"meterage_m must be finite, got {meterage_m}")

        self.times_performed += 1
        self.total_duration_min += duration_min
        self.average_duration_min = self.total_duration_min / self.times_performed

        if meterage_m is not None and meterage_m > 0:
            self.total_meterage_m += meterage_m
            self.average_duration_per_meter_min = self.total_duration_min / self.total_meterage_m

        self.updated_at = datetime.now()

    @property
    def per_meter_rate_formatted(self) -> str | None:
        if not self.is_meterage_based or self.average_duration_per_meter_min <= 0:
            return None
        return f"{self.average_duration_per_meter_min:.2f} min/m"
