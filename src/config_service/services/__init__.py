from .application_service import ApplicationService, normalize_description

__all__ = ["ApplicationService", "normalize_description"]
