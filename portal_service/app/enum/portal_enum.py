from enum import Enum


class PurchaseRequestStatus(str, Enum):
    pending_approval = "pending_approval"
    auto_created = "auto_created"
    approved = "approved"
    ordered = "ordered"
    shipped = "shipped"
    received = "received"
    assigned = "assigned"
    cancelled = "cancelled"


class PurchaseRequestSource(str, Enum):
    loi_auto = "loi_auto"
    employee_request = "employee_request"
    admin = "admin"
    partner_request = "partner_request"


class PurchaseRequestAction(str, Enum):
    approve = "approve"
    cancel = "cancel"
    ordered = "ordered"
    shipped = "shipped"
    received = "received"
    assign = "assign"


class DeviceOwnership(str, Enum):
    skyyield_owned = "skyyield_owned"
    partner_owned = "partner_owned"


class Urgency(str, Enum):
    low = "low"
    normal = "normal"
    high = "high"
    urgent = "urgent"


class PipelineStage(str, Enum):
    application = "application"
    initial_review = "initial_review"
    discovery_scheduled = "discovery_scheduled"
    discovery_complete = "discovery_complete"
    venues_setup = "venues_setup"
    loi_sent = "loi_sent"
    loi_signed = "loi_signed"
    install_scheduled = "install_scheduled"
    trial_active = "trial_active"
    trial_ending = "trial_ending"
    contract_sent = "contract_sent"
    active = "active"
    inactive = "inactive"


class TipaltiStatus(str, Enum):
    not_invited = "not_invited"
    pending_onboarding = "pending_onboarding"
    active = "active"


class DeviceStatus(str, Enum):
    pending_install = "pending_install"
    active = "active"
    online = "online"
    offline = "offline"
    maintenance = "maintenance"
    retired = "retired"


class VenueStatus(str, Enum):
    pending = "pending"
    active = "active"
    inactive = "inactive"


class ProspectType(str, Enum):
    location_partner = "location_partner"
    referral_partner = "referral_partner"
    channel_partner = "channel_partner"
    relationship_partner = "relationship_partner"
    contractor = "contractor"


class ProspectStatus(str, Enum):
    new = "new"
    contacted = "contacted"
    qualified = "qualified"
    proposal = "proposal"
    negotiation = "negotiation"
    won = "won"
    lost = "lost"


class ProspectActivityType(str, Enum):
    note = "note"
    email = "email"
    call = "call"
    meeting = "meeting"
    status_change = "status_change"


# activity types that count as reaching out to the prospect
CONTACT_ACTIVITY_TYPES = {
    ProspectActivityType.email.value,
    ProspectActivityType.call.value,
    ProspectActivityType.meeting.value,
}
