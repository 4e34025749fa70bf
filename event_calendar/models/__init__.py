from event_calendar.models.event import Event
from event_calendar.models.attendee import Attendee
from event_calendar.models.user import User
