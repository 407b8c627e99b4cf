"""
Location acquisition with a persisted permission flag.

The permission flag lives in an injected store (`get()` / `set(value)`).
A cached denial short-circuits `acquire()` until `reset_permission()` is
called.
"""
from __future__ import annotations

import json
import logging
import os
import time
from typing import Optional

import httpx

from medfinder.models.schemas import Coordinate, PermissionState

logger = logging.getLogger(__name__)


HIGH_ACCURACY = True
TIMEOUT_S = 10.0
MAXIMUM_AGE_S = 300.0

DENIED_HINT = (
    "Location permission previously denied. "
    "Please enable location services in your settings and retry."
)


class LocationError(Exception):
    """Base class for location acquisition failures."""


class PermissionDenied(LocationError):
    pass


class LocationUnavailable(LocationError):
    def __init__(self, reason: Exception):
        super().__init__(str(reason) or reason.__class__.__name__)
        self.reason = reason

    @property
    def permission_denied(self) -> bool:
        return isinstance(self.reason, PositionError) and self.reason.code == PositionError.PERMISSION_DENIED


class PositionError(Exception):
    """Failure reported by a position source."""

    PERMISSION_DENIED = 1
    POSITION_UNAVAILABLE = 2
    TIMEOUT = 3

    def __init__(self, code: int, message: str):
        super().__init__(message)
        self.code = code


# ---------------------------------------------------
# PERMISSION STORES
# ---------------------------------------------------

class MemoryPermissionStore:
    def __init__(self, state: PermissionState = PermissionState.UNSET):
        self._state = state

    def get(self) -> PermissionState:
        return self._state

    def set(self, value: PermissionState) -> None:
        self._state = value


class FilePermissionStore:
    """Keeps the flag in a small JSON file so it survives restarts."""

    KEY = "locationPermission"

    def __init__(self, path: str):
        self.path = path

    def get(self) -> PermissionState:
        if not os.path.exists(self.path):
            return PermissionState.UNSET
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return PermissionState(json.load(f).get(self.KEY, PermissionState.UNSET.value))
        except (OSError, ValueError, AttributeError) as exc:
            logger.warning("Ignoring unreadable permission file %s: %s", self.path, exc)
            return PermissionState.UNSET

    def set(self, value: PermissionState) -> None:
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump({self.KEY: PermissionState(value).value}, f)
        except OSError as exc:
            logger.warning("Could not persist location permission to %s: %s", self.path, exc)


# ---------------------------------------------------
# POSITION SOURCES
# ---------------------------------------------------

class IpPositionSource:
    """Approximate position from an IP geolocation JSON endpoint."""

    def __init__(self, url: str, transport: Optional[httpx.AsyncBaseTransport] = None, clock=time.monotonic):
        self.url = url
        self._transport = transport
        self._clock = clock
        self._last_fix: Optional[Coordinate] = None
        self._last_fix_at = 0.0

    async def get_current_position(self, high_accuracy: bool, timeout: float, maximum_age: float) -> Coordinate:
        # IP lookups have a single accuracy level; high_accuracy is accepted for interface parity
        if self._last_fix is not None and self._clock() - self._last_fix_at <= maximum_age:
            return self._last_fix

        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                resp = await client.get(self.url)
        except httpx.TimeoutException as exc:
            raise PositionError(PositionError.TIMEOUT, "Timed out while locating") from exc
        except httpx.HTTPError as exc:
            raise PositionError(PositionError.POSITION_UNAVAILABLE, f"Position lookup failed: {exc}") from exc

        if resp.status_code in (401, 403):
            raise PositionError(PositionError.PERMISSION_DENIED, "User denied Geolocation")
        if resp.status_code != 200:
            raise PositionError(PositionError.POSITION_UNAVAILABLE, f"HTTP error from position service: {resp.status_code}")

        try:
            data = resp.json()
            fix = Coordinate(latitude=data["latitude"], longitude=data["longitude"])
        except (ValueError, KeyError, TypeError) as exc:
            raise PositionError(PositionError.POSITION_UNAVAILABLE, "Position service returned no coordinates") from exc

        self._last_fix = fix
        self._last_fix_at = self._clock()
        return fix


# ---------------------------------------------------
# PROVIDER
# ---------------------------------------------------

class LocationProvider:
    def __init__(self, source, store):
        self.source = source
        self.store = store

    async def acquire(self) -> Coordinate:
        if self.store.get() == PermissionState.DENIED:
            raise PermissionDenied(DENIED_HINT)

        try:
            fix = await self.source.get_current_position(
                high_accuracy=HIGH_ACCURACY,
                timeout=TIMEOUT_S,
                maximum_age=MAXIMUM_AGE_S,
            )
        except PositionError as exc:
            if exc.code == PositionError.PERMISSION_DENIED:
                self.store.set(PermissionState.DENIED)
            raise LocationUnavailable(exc) from exc
        except Exception as exc:
            raise LocationUnavailable(exc) from exc

        self.store.set(PermissionState.GRANTED)
        return Coordinate(latitude=fix.latitude, longitude=fix.longitude)

    def reset_permission(self) -> None:
        self.store.set(PermissionState.UNSET)
