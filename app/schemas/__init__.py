# app/schemas/__init__.py
from .actor import Actor

from .availability import (
    WeeklyAvailabilityItem,
    WeeklyAvailabilityReplace,
    WeeklyAvailabilityUpdate,
    DateOverrideCreate,
    DayStatus,
)

from .appointment_type import (
    AppointmentTypeCreate,
    AppointmentTypeUpdate,
)

from .appointment import (
    AppointmentCreate,
    AppointmentStatusUpdate,
    ActorCapabilities,
)
