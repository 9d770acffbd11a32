"""Validation limits, option sets and user-facing messages for waitlist sign-ups."""

from enum import Enum


class WaitlistCategory(str, Enum):
    EMPLOYER = "employer"
    CANDIDATE = "candidate"


DEBOUNCE_DELAY_SECONDS = 0.3
MAX_RETRY_ATTEMPTS = 3
RETRY_DELAY_BASE_SECONDS = 1.0

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
EMAIL_MAX_LENGTH = 254
HIRES_MAX_VALUE = 10000
FIELD_OF_STUDY_MIN_LENGTH = 2
FIELD_OF_STUDY_MAX_LENGTH = 100
FIELD_DESCRIPTION_MAX_LENGTH = 500

INDUSTRY_OPTIONS = (
    "Technology",
    "Healthcare",
    "Finance",
    "Education",
    "Manufacturing",
    "Retail",
    "Consulting",
    "Media",
    "Non-profit",
    "Government",
    "Other",
)

COMPANY_SIZE_OPTIONS = (
    "1-10",
    "11-50",
    "51-200",
    "201-500",
    "501-1000",
    "1000+",
)

CURRENT_STATE_OPTIONS = (
    "final_year",
    "fresh_graduate",
    "early_career",
    "student",
)

# Required fields per category, in form order
EMPLOYER_FIELDS = ("name", "email", "industry", "company_size", "early_career_hires_per_year")
CANDIDATE_FIELDS = ("name", "email", "current_state", "field_of_study", "field_description")

# Field validation errors
NAME_REQUIRED = "Name is required"
NAME_TOO_SHORT = f"Name must be at least {NAME_MIN_LENGTH} characters"
NAME_TOO_LONG = f"Name must be less than {NAME_MAX_LENGTH} characters"
NAME_INVALID_CHARS = "Name can only contain letters, spaces, hyphens, apostrophes, and periods"
EMAIL_REQUIRED = "Email is required"
EMAIL_INVALID = "Please enter a valid email address"
EMAIL_TOO_LONG = "Email address is too long"
INDUSTRY_REQUIRED = "Please select a valid industry"
COMPANY_SIZE_REQUIRED = "Please select a valid company size"
CURRENT_STATE_REQUIRED = "Please select your current stage"
FIELD_OF_STUDY_REQUIRED = "Field of study is required"
FIELD_OF_STUDY_TOO_SHORT = f"Field of study must be at least {FIELD_OF_STUDY_MIN_LENGTH} characters"
FIELD_OF_STUDY_TOO_LONG = f"Field of study must be less than {FIELD_OF_STUDY_MAX_LENGTH} characters"
FIELD_DESCRIPTION_TOO_LONG = f"Description must be less than {FIELD_DESCRIPTION_MAX_LENGTH} characters"
HIRES_INVALID_NUMBER = "Must be a valid number"
HIRES_NOT_WHOLE = "Must be a whole number"
HIRES_NEGATIVE = "Cannot be negative"
HIRES_TOO_LARGE = "Please enter a reasonable number"
UNKNOWN_FIELD = "Unknown field"

# Form-level errors
VALIDATION_ERROR = "Please fix the errors above and try again."

# Submission errors
EMAIL_EXISTS = "This email is already registered in our waitlist!"
PERMISSION_DENIED = "Permission denied. Please try again."
INVALID_DATA = "Invalid data provided. Please check your entries."
RATE_LIMITED = "Too many requests. Please try again later."
SUBMISSION_FAILED = "Failed to submit waitlist entry. Please try again."
UNEXPECTED_ERROR = "An unexpected error occurred. Please try again."

SUBMISSION_SUCCESS = "You've been added to our waitlist. We'll be in touch soon!"

# SQLSTATE codes reported by Postgres
UNIQUE_VIOLATION = "23505"
CHECK_VIOLATION = "23514"
INSUFFICIENT_PRIVILEGE = "42501"
