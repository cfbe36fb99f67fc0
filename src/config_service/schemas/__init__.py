from .application import ApplicationResponse, CreateApplicationRequest, ErrorResponse, HealthResponse

__all__ = ["ApplicationResponse", "CreateApplicationRequest", "ErrorResponse", "HealthResponse"]
