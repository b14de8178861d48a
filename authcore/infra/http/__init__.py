from authcore.infra.http.cookie_transport import CookiePolicy, FlaskCookieTransport

__all__ = ["CookiePolicy", "FlaskCookieTransport"]
