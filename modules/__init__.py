# Import all models to ensure they're registered with SQLAlchemy
from .users.models import Customer, Admin, UserRole
from .inventory.models import Hotel, Transport, Food
from .catalogs.models import Catalog, CatalogHotel, CatalogTransport, CatalogFood
from .bookings.models import Booking, BookingHotel, BookingTransport, BookingFood, BookingStatusHistory, BookingStatus
from .payments.models import Payment, PaymentMethod, PaymentStatus
