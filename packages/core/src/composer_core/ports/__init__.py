from composer_core.ports.middleware import Middleware, MiddlewareFn, MiddlewareObj, NextFunction

__all__ = [
    "Middleware",
    "MiddlewareFn",
    "MiddlewareObj",
    "NextFunction",
]
