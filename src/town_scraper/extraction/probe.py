# ABOUTME: Capability probe over unknown marker objects - has_field / read_field and nothing else
# ABOUTME: Every read is fault-isolated so one broken property never aborts a candidate

from collections.abc import Mapping
from typing import Any, Protocol

from town_scraper.utils.logging import get_logger

logger = get_logger(__name__)


class FieldProbe(Protocol):
    """The narrow view the object-graph source has of a candidate marker."""

    def has_field(self, name: str) -> bool: ...

    def read_field(self, name: str) -> Any | None: ...


class ObjectProbe:
    """FieldProbe over a mapping (page snapshots) or any attribute-bearing object.

    Reads that raise are logged and reported as absent.
    """

    def __init__(self, target: Any):
        self.target = target

    def has_field(self, name: str) -> bool:
        try:
            if isinstance(self.target, Mapping):
                return name in self.target
            return hasattr(self.target, name)
        except Exception as e:
            logger.debug("Field presence check failed", field=name, error=str(e))
            return False

    def read_field(self, name: str) -> Any | None:
        try:
            if isinstance(self.target, Mapping):
                return self.target.get(name)
            return getattr(self.target, name, None)
        except Exception as e:
            logger.debug("Field read failed", field=name, error=str(e))
            return None


def read_nested(probe: FieldProbe, name: str, child: str) -> Any | None:
    """Read ``name.child`` (e.g. ``_latlng.lat``) through probes at both levels."""
    parent = probe.read_field(name)
    if parent is None:
        return None
    return ObjectProbe(parent).read_field(child)


def invoke_field(probe: FieldProbe, name: str) -> Any | None:
    """Read a field and, if it is callable, call it without arguments."""
    value = probe.read_field(name)
    if not callable(value):
        return value
    try:
        return value()
    except Exception as e:
        logger.debug("Field accessor failed", field=name, error=str(e))
        return None
