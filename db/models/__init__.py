# Import all models here to ensure they're registered with Base
from db.models.requests import RequestModel, RequestStatus, RequestKind
