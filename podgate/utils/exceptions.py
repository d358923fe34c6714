# Copyright 2025 podgate
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Custom exception classes for podgate.

Application errors derive from PodgateError so callers can handle them
without catching system exceptions like KeyboardInterrupt or SystemExit.

Example:
    try:
        config = load_config()
    except PodgateError as e:
        logger.error("startup_failed", error=e.message, **e.context)
"""


class PodgateError(Exception):
    """
    Base exception for all podgate application errors.

    Attributes:
        message: Human-readable error message
        context: Optional dict of additional error context (path, value, etc.)

    Example:
        raise PodgateError("Unknown audio source", audio_source="ftp")
    """

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context if context else {}

    def __str__(self):
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message

    def __repr__(self):
        if self.context:
            return f"{type(self).__name__}(message={self.message!r}, context={self.context!r})"
        return f"{type(self).__name__}(message={self.message!r})"


class ConfigurationError(PodgateError):
    """
    Raised when environment configuration cannot be turned into a Config.

    Example:
        raise ConfigurationError("PORT must be an integer", value="abc")
    """

    pass


class ManifestError(PodgateError):
    """Raised when a hosted asset manifest cannot be read at all."""

    pass


__all__ = ["PodgateError", "ConfigurationError", "ManifestError"]
