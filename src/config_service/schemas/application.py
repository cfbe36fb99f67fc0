from pydantic import BaseModel, ConfigDict


class CreateApplicationRequest(BaseModel):
    """
    POST body. Only the shape is checked here; the business rules live in
    validators.application_validators so all violations are reported together.
    """
    name: str | None = None
    description: str | None = None


class ApplicationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str | None = None


class ErrorResponse(BaseModel):
    message: str
    details: str | None = None


class HealthResponse(BaseModel):
    status: str
