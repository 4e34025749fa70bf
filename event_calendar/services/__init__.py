from event_calendar.services.registration_service import RegistrationService, RegistrationContext
from event_calendar.services.image_service import ImageService
from event_calendar.services.event_service import EventService
from event_calendar.services.user_service import UserService
