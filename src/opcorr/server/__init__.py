from .middleware import REQUEST_ID_HEADER, RequestTrackingMiddleware

__all__ = ["REQUEST_ID_HEADER", "RequestTrackingMiddleware"]
