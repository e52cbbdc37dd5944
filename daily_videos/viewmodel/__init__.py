"""Calendar view-model."""

from .calendar import CalendarViewModel, ViewPhase, ViewState

__all__ = ['CalendarViewModel', 'ViewPhase', 'ViewState']
