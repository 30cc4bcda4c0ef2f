"""Calendar schemas."""
import datetime

from pi_planning.schemas.planning import PlanningModel


class SprintWindow(PlanningModel):
    name: str
    start: datetime.date
    end: datetime.date


class DayInfo(PlanningModel):
    date: str
    weekday: str
    iso_week: int | None
    sprint: str
    is_weekend: bool
