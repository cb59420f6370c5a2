"""Device position lookup with a fixed fallback coordinate."""
import enum
import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from shared.validation import ValidationError, validate_coordinates


class GeolocationErrorCode(str, enum.Enum):
    PERMISSION_DENIED = "PERMISSION_DENIED"
    POSITION_UNAVAILABLE = "POSITION_UNAVAILABLE"
    TIMEOUT = "TIMEOUT"


class GeolocationError(Exception):
    """Raised by a position provider that cannot give a position."""

    def __init__(self, code, message=""):
        super().__init__(message or code.value)
        self.code = GeolocationErrorCode(code)


@dataclass(frozen=True)
class GeolocationResult:
    lat: float
    lng: float
    error: Optional[GeolocationErrorCode] = None

    @property
    def is_fallback(self) -> bool:
        return self.error is not None


def configured_position_provider(config) -> Callable[[], Tuple[float, float]]:
    """Provider reporting the position fixed in the client settings."""
    def provider():
        if config.device_latitude is None or config.device_longitude is None:
            raise GeolocationError(GeolocationErrorCode.POSITION_UNAVAILABLE, "No device position configured")
        return config.device_latitude, config.device_longitude
    return provider


class GeolocationService:
    """Resolves the device position once per form mount.

    Any failure is logged with its error code and resolved to the fallback
    coordinate; resolve() never raises.
    """

    def __init__(self, config, provider: Optional[Callable[[], Tuple[float, float]]] = None):
        self.config = config
        self.provider = provider or configured_position_provider(config)
        self.logger = logging.getLogger(self.__class__.__name__)

    def _fallback(self, code: GeolocationErrorCode, detail) -> GeolocationResult:
        self.logger.warning(f"Geolocation failed ({code.value}): {detail}; using fallback coordinate")
        return GeolocationResult(self.config.fallback_latitude, self.config.fallback_longitude, code)

    def resolve(self) -> GeolocationResult:
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix='geolocation')
        try:
            future = executor.submit(self.provider)
            lat, lng = future.result(timeout=self.config.gps_timeout)
            lat, lng = validate_coordinates(lat, lng)
        except GeolocationError as e:
            return self._fallback(e.code, e)
        except PermissionError as e:
            return self._fallback(GeolocationErrorCode.PERMISSION_DENIED, e)
        except (FutureTimeoutError, TimeoutError) as e:
            return self._fallback(GeolocationErrorCode.TIMEOUT, str(e) or "no position within timeout")
        except (ValidationError, ValueError, TypeError, OSError) as e:
            return self._fallback(GeolocationErrorCode.POSITION_UNAVAILABLE, e)
        except Exception as e:
            self.logger.error(f"Position provider failed unexpectedly: {e}", exc_info=True)
            return self._fallback(GeolocationErrorCode.POSITION_UNAVAILABLE, e)
        finally:
            # A provider that timed out keeps running in the background
            executor.shutdown(wait=False)

        self.logger.info(f"Resolved device position {lat}, {lng}")
        return GeolocationResult(lat, lng)
