from event_calendar.repositories.event_repository import EventRepository
from event_calendar.repositories.attendee_repository import AttendeeRepository
from event_calendar.repositories.user_repository import UserRepository
