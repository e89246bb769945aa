'''
Static enums mirroring the database ENUM types.
'''
import enum


# --- Base Enum Class ---
class ListableEnum(str, enum.Enum):
    """A custom Enum base class that can list all member values."""
    @classmethod
    def get_all_names(cls) -> list[str]:
        return [member.value for member in cls]


class Program(ListableEnum):
    MAHAD = 'MAHAD_PROGRAM'
    DUGSI = 'DUGSI_PROGRAM'
    YOUTH_EVENTS = 'YOUTH_EVENTS'
    GENERAL_DONATION = 'GENERAL_DONATION'


class Shift(ListableEnum):
    MORNING = 'MORNING'
    EVENING = 'EVENING'


class GuardianRole(ListableEnum):
    PARENT = 'PARENT'
    GUARDIAN = 'GUARDIAN'
    SPONSOR = 'SPONSOR'
    DONOR = 'DONOR'


class EnrollmentStatus(ListableEnum):
    REGISTERED = 'REGISTERED'
    ENROLLED = 'ENROLLED'
    ON_LEAVE = 'ON_LEAVE'
    WITHDRAWN = 'WITHDRAWN'
    COMPLETED = 'COMPLETED'
    SUSPENDED = 'SUSPENDED'


# Students on the flat roster share the enrollment lifecycle.
StudentStatus = EnrollmentStatus


class ContactType(ListableEnum):
    EMAIL = 'EMAIL'
    PHONE = 'PHONE'
    WHATSAPP = 'WHATSAPP'
    OTHER = 'OTHER'


class BillingType(ListableEnum):
    FULL_TIME = 'FULL_TIME'
    FULL_TIME_SCHOLARSHIP = 'FULL_TIME_SCHOLARSHIP'
    PART_TIME = 'PART_TIME'
    EXEMPT = 'EXEMPT'


class SubscriptionStatus(ListableEnum):
    INCOMPLETE = 'incomplete'
    INCOMPLETE_EXPIRED = 'incomplete_expired'
    TRIALING = 'trialing'
    ACTIVE = 'active'
    PAST_DUE = 'past_due'
    CANCELED = 'canceled'
    UNPAID = 'unpaid'
    PAUSED = 'paused'


class PaymentHealth(ListableEnum):
    NEEDS_ACTION = 'needs_action'
    AT_RISK = 'at_risk'
    HEALTHY = 'healthy'
    EXEMPT = 'exempt'
    PENDING = 'pending'
    INACTIVE = 'inactive'


class EducationLevel(ListableEnum):
    ELEMENTARY = 'ELEMENTARY'
    MIDDLE_SCHOOL = 'MIDDLE_SCHOOL'
    HIGH_SCHOOL = 'HIGH_SCHOOL'
    COLLEGE = 'COLLEGE'
    POST_GRAD = 'POST_GRAD'


class GradeLevel(ListableEnum):
    KINDERGARTEN = 'KINDERGARTEN'
    GRADE_1 = 'GRADE_1'
    GRADE_2 = 'GRADE_2'
    GRADE_3 = 'GRADE_3'
    GRADE_4 = 'GRADE_4'
    GRADE_5 = 'GRADE_5'
    GRADE_6 = 'GRADE_6'
    GRADE_7 = 'GRADE_7'
    GRADE_8 = 'GRADE_8'
    GRADE_9 = 'GRADE_9'
    GRADE_10 = 'GRADE_10'
    GRADE_11 = 'GRADE_11'
    GRADE_12 = 'GRADE_12'
    FRESHMAN = 'FRESHMAN'
    SOPHOMORE = 'SOPHOMORE'
    JUNIOR = 'JUNIOR'
    SENIOR = 'SENIOR'


class DetectionMethod(ListableEnum):
    MANUAL = 'MANUAL'
    GUARDIAN_MATCH = 'GUARDIAN_MATCH'
    NAME_MATCH = 'NAME_MATCH'
    CONTACT_MATCH = 'CONTACT_MATCH'
