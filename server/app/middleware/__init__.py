from server.app.middleware.body_limit import BodySizeLimitMiddleware
from server.app.middleware.cors import OriginPolicyMiddleware
from server.app.middleware.request_log import RequestLogMiddleware

__all__ = ["BodySizeLimitMiddleware", "OriginPolicyMiddleware", "RequestLogMiddleware"]
