"""
Operation Registry.

============================================================
PURPOSE
============================================================
Tagged dispatch table from (Resource, operation name) to an
OperationSpec. Each resource module registers its operations
with the `operation` decorator.

An operation's builder is a plain function that turns caller
parameters into an ApiCall (method, endpoint, query, body).
All normalisation and validation happens in the builder, before
any network call. The OperationSpec flags decide how the call is sent:

- retry:      request_with_retry instead of request
- paginated:  supports return_all through the paginator

============================================================
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..errors import ValidationError
from ..utils import format_symbol, to_timestamp


logger = logging.getLogger(__name__)


# ============================================================
# RESOURCES
# ============================================================

class Resource(Enum):
    """API resource groups."""

    SPOT_ACCOUNT = "spotAccount"
    SPOT_TRADING = "spotTrading"
    FUTURES_ACCOUNT = "futuresAccount"
    FUTURES_TRADING = "futuresTrading"
    COPY_TRADING = "copyTrading"
    MARKET_DATA = "marketData"
    EARN = "earn"

    @classmethod
    def parse(cls, value) -> "Resource":
        """Accept a Resource, its camelCase value or snake_case name."""
        if isinstance(value, cls):
            return value
        for member in cls:
            if value in (member.value, member.name.lower()):
                return member
        raise ValidationError(f"Unknown resource: {value}")


# ============================================================
# CALL DESCRIPTION
# ============================================================

@dataclass
class ApiCall:
    """One REST call produced by an operation builder."""

    method: str
    endpoint: str
    query: Dict[str, Any] = field(default_factory=dict)
    body: Dict[str, Any] = field(default_factory=dict)
    public: bool = False


# ============================================================
# PARAMETERS
# ============================================================

_CAMEL_BOUNDARY = re.compile(r"_([a-z0-9])")


def to_camel(name: str) -> str:
    """'product_type' -> 'productType'; camelCase passes through."""
    return _CAMEL_BOUNDARY.sub(lambda m: m.group(1).upper(), name)


def to_snake(name: str) -> str:
    """'getBalance' -> 'get_balance'; snake_case passes through."""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


class Params:
    """
    Caller parameters keyed by Bitget field names (camelCase).

    snake_case keys are accepted and converted. None and "" count
    as absent.
    """

    def __init__(self, values: Optional[Dict[str, Any]] = None):
        self._values = {to_camel(key): value for key, value in (values or {}).items()}

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None

    def get(self, name: str, default: Any = None) -> Any:
        value = self._values.get(name)
        if value is None or value == "":
            return default
        return value

    def require(self, name: str) -> Any:
        value = self.get(name)
        if value is None:
            raise ValidationError(f"Missing required parameter: {name}")
        return value

    def string(self, name: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
        """Numeric values are stringified."""
        value = self.require(name) if required else self.get(name, default)
        return str(value) if value is not None else None

    def symbol(self, name: str = "symbol", required: bool = True) -> Optional[str]:
        value = self.require(name) if required else self.get(name)
        return format_symbol(str(value)) if value is not None else None

    def coin(self, name: str = "coin", required: bool = False) -> Optional[str]:
        value = self.require(name) if required else self.get(name)
        return str(value).upper() if value is not None else None

    def timestamp(self, name: str) -> Optional[str]:
        return to_timestamp(self.get(name))

    def pick(self, *names: str) -> Dict[str, Any]:
        """Copy the given optional parameters through as strings."""
        return {name: self.string(name) for name in names if name in self}

    def require_order_reference(self) -> Dict[str, str]:
        """orderId and/or clientOid; at least one is required."""
        reference = self.pick("orderId", "clientOid")
        if not reference:
            raise ValidationError("Either Order ID or Client Order ID is required")
        return reference

    def time_range(self) -> Dict[str, Optional[str]]:
        return {
            "startTime": self.timestamp("startTime"),
            "endTime": self.timestamp("endTime"),
        }

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._values)


# ============================================================
# REGISTRY
# ============================================================

Builder = Callable[[Params], ApiCall]


@dataclass(frozen=True)
class OperationSpec:
    """How one (resource, operation) pair is built and sent."""

    resource: Resource
    name: str
    build: Builder
    retry: bool = False
    paginated: bool = False
    items_key: str = "data"
    id_key: str = "orderId"

    @property
    def key(self) -> str:
        return f"{self.resource.value}.{self.name}"


REGISTRY: Dict[Tuple[Resource, str], OperationSpec] = {}


def operation(
    resource: Resource,
    name: str,
    retry: bool = False,
    paginated: bool = False,
    items_key: str = "data",
    id_key: str = "orderId",
) -> Callable[[Builder], Builder]:
    """Register a builder for (resource, name)."""

    def decorator(build: Builder) -> Builder:
        key = (resource, name)
        if key in REGISTRY:
            raise ValueError(f"Operation already registered: {resource.value}.{name}")
        REGISTRY[key] = OperationSpec(
            resource=resource,
            name=name,
            build=build,
            retry=retry,
            paginated=paginated,
            items_key=items_key,
            id_key=id_key,
        )
        return build

    return decorator


def resolve(resource, operation_name: str) -> OperationSpec:
    """
    Look up an operation.

    Raises:
        ValidationError: unknown resource or operation
    """
    resource = Resource.parse(resource)
    spec = REGISTRY.get((resource, to_snake(operation_name)))
    if spec is None:
        raise ValidationError(f"Unknown operation: {resource.value}.{operation_name}")
    return spec


def list_operations(resource=None) -> List[OperationSpec]:
    """Registered operations, optionally for one resource."""
    if resource is not None:
        resource = Resource.parse(resource)
    return [
        spec for (res, _), spec in sorted(REGISTRY.items(), key=lambda item: (item[0][0].value, item[0][1]))
        if resource is None or res is resource
    ]
