"""Pydantic schemas for waitlist API."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from src.shared.waitlist.validation import (
    validate_company_size,
    validate_current_state,
    validate_email,
    validate_field_description,
    validate_field_of_study,
    validate_hires_per_year,
    validate_industry,
    validate_name,
)


def _check(rule, value):
    """Run a field rule for its error only; normalization happens once, in the service."""
    _, error = rule(value)
    if error:
        raise ValueError(error)
    return value


class EmployerWaitlistRequest(BaseModel):
    """Schema for employer waitlist submissions."""
    name: str = Field(..., description="Contact name")
    email: str = Field(..., description="Work email address")
    industry: str = Field(..., description="One of the supported industries")
    company_size: str = Field(..., description="Company size bucket, e.g. 11-50")
    early_career_hires_per_year: Optional[int] = Field(None, description="Expected early-career hires per year")

    @field_validator('name')
    @classmethod
    def validate_name_field(cls, v):
        return _check(validate_name, v)

    @field_validator('email')
    @classmethod
    def validate_email_field(cls, v):
        return _check(validate_email, v)

    @field_validator('industry')
    @classmethod
    def validate_industry_field(cls, v):
        return _check(validate_industry, v)

    @field_validator('company_size')
    @classmethod
    def validate_company_size_field(cls, v):
        return _check(validate_company_size, v)

    @field_validator('early_career_hires_per_year', mode='before')
    @classmethod
    def validate_hires_field(cls, v):
        """Runs before int coercion so text like "abc" or "2.5" gets the form's message."""
        number, error = validate_hires_per_year(v)
        if error:
            raise ValueError(error)
        # Blank input means "not provided"
        return number


class CandidateWaitlistRequest(BaseModel):
    """Schema for candidate waitlist submissions."""
    name: str = Field(..., description="Full name")
    email: str = Field(..., description="Email address")
    current_state: str = Field(..., description="final_year, fresh_graduate, early_career or student")
    field_of_study: str = Field(..., description="Field of study")
    field_description: Optional[str] = Field(None, description="Optional details about the field")

    @field_validator('name')
    @classmethod
    def validate_name_field(cls, v):
        return _check(validate_name, v)

    @field_validator('email')
    @classmethod
    def validate_email_field(cls, v):
        return _check(validate_email, v)

    @field_validator('current_state')
    @classmethod
    def validate_current_state_field(cls, v):
        return _check(validate_current_state, v)

    @field_validator('field_of_study')
    @classmethod
    def validate_field_of_study_field(cls, v):
        return _check(validate_field_of_study, v)

    @field_validator('field_description')
    @classmethod
    def validate_field_description_field(cls, v):
        return _check(validate_field_description, v)


class WaitlistResponse(BaseModel):
    """Schema for a successful waitlist submission."""
    success: bool
    message: str
    data: Dict[str, Any]
