from enum import Enum

class AdmissionStatus(str, Enum):
    Pending = "pending"
    UnderReview = "under_review"
    InterviewScheduled = "interview_scheduled"
    Approved = "approved"
    Rejected = "rejected"
    Waitlisted = "waitlisted"
    Enrolled = "enrolled"

# Values accepted by the process (decision) endpoint
PROCESSABLE_ADMISSION_STATUSES = {
    AdmissionStatus.Approved,
    AdmissionStatus.Rejected,
    AdmissionStatus.Pending,
    AdmissionStatus.InterviewScheduled,
}

class StudentStatus(str, Enum):
    Active = "active"
    Inactive = "inactive"
    Graduated = "graduated"
    Suspended = "suspended"
    Withdrawn = "withdrawn"

class Gender(str, Enum):
    Male = "Male"
    Female = "Female"
    Other = "Other"

class FeeType(str, Enum):
    Tuition = "tuition"
    Hostel = "hostel"
    Transport = "transport"
    Examination = "examination"
    Library = "library"
    Laboratory = "laboratory"
    Admission = "admission"
    Other = "other"

class FeeStatus(str, Enum):
    Pending = "pending"
    Partial = "partial"
    Paid = "paid"
    Overdue = "overdue"
    Waived = "waived"

class PaymentMethod(str, Enum):
    Cash = "cash"
    Cheque = "cheque"
    OnlineTransfer = "online_transfer"
    Card = "card"
    UPI = "upi"
    Other = "other"


def enum_values(enum_cls):
    """Persist enum values (not member names) in Enum columns."""
    return [member.value for member in enum_cls]
