from .endpoints import client_ip, filter_ascii, router

__all__ = ["client_ip", "filter_ascii", "router"]
