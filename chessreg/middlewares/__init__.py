from chessreg.middlewares.db_middleware import DatabaseMiddleware
from chessreg.middlewares.auth_middleware import AdminMiddleware, IsAdmin
from chessreg.middlewares.rate_limit_middleware import RateLimitMiddleware

__all__ = ["DatabaseMiddleware", "AdminMiddleware", "IsAdmin", "RateLimitMiddleware"]
