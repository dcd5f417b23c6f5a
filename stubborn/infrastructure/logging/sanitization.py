"""
Redaction of credentials in request logs.

Request targets and descriptions routinely carry secrets: basic-auth URLs,
``?api_key=`` parameters, ``Authorization`` headers, bearer tokens echoed in
error messages. Everything logged by stubborn passes through here first.
"""

import re
from typing import Any, Mapping


class LogSanitizer:
    """Redacts credentials from URLs, request descriptions and free text."""

    REPLACEMENT_TEXT = "***REDACTED***"

    # Substrings marking a header, field or event key as secret
    SECRET_KEY_MARKERS = (
        "password", "passwd", "secret", "token", "api_key", "apikey",
        "authorization", "auth", "cookie", "session", "private_key",
        "x-api-key", "credential",
    )

    # Bearer/Basic credentials and JWTs embedded in text
    SECRET_TEXT = re.compile(
        r"\b(?:Bearer|Basic)\s+[A-Za-z0-9\-._~+/]+=*"
        r"|\beyJ[\w-]+\.[\w-]+\.[\w-]*",
        re.IGNORECASE,
    )

    URL_USERINFO = re.compile(r"://[^@/\s]+@")

    SECRET_QUERY = re.compile(
        r"([?&](?:access_token|api_key|apikey|token|key|secret|password|auth|signature)=)[^&#]*",
        re.IGNORECASE,
    )

    @classmethod
    def is_secret_key(cls, key: Any) -> bool:
        lowered = str(key).lower()
        return any(marker in lowered for marker in cls.SECRET_KEY_MARKERS)

    @classmethod
    def sanitize_string(cls, text: str) -> str:
        return cls.SECRET_TEXT.sub(cls.REPLACEMENT_TEXT, str(text))

    @classmethod
    def sanitize_url(cls, url: str) -> str:
        """
        Mask basic-auth userinfo and the values of secret query parameters.

        Parameter names are kept so the log still shows what was sent.
        """
        masked = cls.URL_USERINFO.sub("://***:***@", str(url))
        return cls.SECRET_QUERY.sub(rf"\g<1>{cls.REPLACEMENT_TEXT}", masked)

    @classmethod
    def sanitize_dict(cls, data: Mapping[str, Any], max_depth: int = 10) -> Any:
        """
        Redact secret keys and credential-looking strings in nested data.

        Args:
            data: Request description, headers or log event
            max_depth: Containers nested deeper than this are replaced by a marker

        Returns:
            A sanitized copy; ``data`` is left untouched
        """
        return cls._redact(data, max_depth)

    @classmethod
    def _redact(cls, value: Any, depth: int) -> Any:
        if isinstance(value, Mapping):
            if depth <= 0:
                return {"error": "max_depth_reached"}
            return {
                key: cls.REPLACEMENT_TEXT if cls.is_secret_key(key) else cls._redact(item, depth - 1)
                for key, item in value.items()
            }

        if isinstance(value, (list, tuple)):
            if depth <= 0:
                return ["max_depth_reached"]
            return [cls._redact(item, depth - 1) for item in value]

        if isinstance(value, str):
            return cls.sanitize_string(value)

        return value


class StructlogSanitizer:
    """structlog processor applying ``LogSanitizer`` to every event."""

    def __init__(self, sanitizer: type = LogSanitizer):
        self.sanitizer = sanitizer

    def __call__(self, logger, method_name, event_dict):
        sanitized = self.sanitizer.sanitize_dict(event_dict)

        url = sanitized.get("url")
        if isinstance(url, str):
            sanitized["url"] = self.sanitizer.sanitize_url(url)

        return sanitized
