from .investor import Investor
from .farmer import Farmer, FarmerStatus
from .admin_user import AdminUser

__all__ = ["Investor", "Farmer", "FarmerStatus", "AdminUser"]
