from estatehub.models.user import User, UserRole, LISTER_ROLES, saved_properties
from estatehub.models.property import Property, DealType, PropertyType, Furnishing, PropertyStatus
from estatehub.models.chat import Chat, ChatMessage, pair_key
