from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"
    EMPLOYEE = "employee"
    LOCATION_PARTNER = "location_partner"
    REFERRAL_PARTNER = "referral_partner"
    CHANNEL_PARTNER = "channel_partner"
    RELATIONSHIP_PARTNER = "relationship_partner"
    CONTRACTOR = "contractor"
    CALCULATOR_USER = "calculator_user"
    CUSTOMER = "customer"

    @classmethod
    def parse(cls, value):
        """Map a stored or metadata role string onto the enumeration, None when unknown."""
        if value is None:
            return None
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower().replace(" ", "_").replace("-", "_")
        # Clerk signup metadata carries labels ("Location Partner") or short keys ("location")
        aliases = {
            "location": cls.LOCATION_PARTNER,
            "referral": cls.REFERRAL_PARTNER,
            "channel": cls.CHANNEL_PARTNER,
            "relationship": cls.RELATIONSHIP_PARTNER,
            "calculator": cls.CALCULATOR_USER,
            "calculator_access": cls.CALCULATOR_USER,
            "superadmin": cls.SUPER_ADMIN,
        }
        if normalized in aliases:
            return aliases[normalized]
        try:
            return cls(normalized)
        except ValueError:
            return None


# admin and staff roles bypass partner ownership scoping
PRIVILEGED_ROLES = frozenset({UserRole.ADMIN, UserRole.SUPER_ADMIN, UserRole.EMPLOYEE})
ADMIN_ROLES = frozenset({UserRole.ADMIN, UserRole.SUPER_ADMIN})

# roles that are usable right after signup, without admin review
SELF_SERVE_ROLES = frozenset({UserRole.CALCULATOR_USER, UserRole.CUSTOMER})


class UserStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class PortalStatus(str, Enum):
    pending_form = "pending_form"
    account_active = "account_active"
    deleted = "deleted"
