"""
Typed view of a contract ABI.

Each ABI entry becomes one of a fixed set of frozen dataclasses keyed by
its ``type`` field. Entries without a ``type`` are functions, and entries
without ``stateMutability`` derive it from the legacy ``constant`` and
``payable`` flags.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Optional, Sequence, Union

from ..errors import InvalidJsonError
from ..utils import INVALID_JSON, validate_json
from .schemas import ABI_SCHEMA, SchemaRegistry, SchemaValidationError


class StateMutability(str, Enum):
    PURE = "pure"
    VIEW = "view"
    NONPAYABLE = "nonpayable"
    PAYABLE = "payable"

    @property
    def is_read_only(self) -> bool:
        return self in (StateMutability.PURE, StateMutability.VIEW)


@dataclass(frozen=True)
class AbiParameter:
    name: str
    type: str
    components: tuple["AbiParameter", ...] = ()
    indexed: bool = False
    internal_type: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "AbiParameter":
        return cls(
            name=payload.get("name", ""),
            type=payload["type"],
            components=tuple(cls.from_dict(c) for c in payload.get("components", [])),
            indexed=bool(payload.get("indexed", False)),
            internal_type=payload.get("internalType"),
        )

    @property
    def canonical_type(self) -> str:
        """Type string as used in signatures, with tuples expanded."""
        if not self.type.startswith("tuple"):
            return self.type
        suffix = self.type[len("tuple"):]
        inner = ",".join(c.canonical_type for c in self.components)
        return f"({inner}){suffix}"


@dataclass(frozen=True)
class FunctionEntry:
    name: str
    inputs: tuple[AbiParameter, ...]
    outputs: tuple[AbiParameter, ...]
    state_mutability: StateMutability

    kind = "function"

    @property
    def input_types(self) -> list[str]:
        return [p.canonical_type for p in self.inputs]

    @property
    def output_types(self) -> list[str]:
        return [p.canonical_type for p in self.outputs]

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.input_types)})"


@dataclass(frozen=True)
class EventEntry:
    name: str
    inputs: tuple[AbiParameter, ...]
    anonymous: bool = False

    kind = "event"


@dataclass(frozen=True)
class ErrorEntry:
    name: str
    inputs: tuple[AbiParameter, ...]

    kind = "error"


@dataclass(frozen=True)
class ConstructorEntry:
    inputs: tuple[AbiParameter, ...]
    state_mutability: StateMutability

    kind = "constructor"


@dataclass(frozen=True)
class FallbackEntry:
    state_mutability: StateMutability

    kind = "fallback"


@dataclass(frozen=True)
class ReceiveEntry:
    state_mutability: StateMutability = StateMutability.PAYABLE

    kind = "receive"


AbiEntry = Union[FunctionEntry, EventEntry, ErrorEntry, ConstructorEntry, FallbackEntry, ReceiveEntry]


def _mutability(payload: dict[str, Any]) -> StateMutability:
    if "stateMutability" in payload:
        return StateMutability(payload["stateMutability"])
    if payload.get("payable"):
        return StateMutability.PAYABLE
    if payload.get("constant"):
        return StateMutability.VIEW
    return StateMutability.NONPAYABLE


def _params(payload: dict[str, Any], key: str) -> tuple[AbiParameter, ...]:
    return tuple(AbiParameter.from_dict(p) for p in payload.get(key, []))


def parse_entry(payload: dict[str, Any]) -> AbiEntry:
    kind = payload.get("type", "function")
    if kind == "function":
        return FunctionEntry(
            name=payload["name"],
            inputs=_params(payload, "inputs"),
            outputs=_params(payload, "outputs"),
            state_mutability=_mutability(payload),
        )
    if kind == "event":
        return EventEntry(
            name=payload["name"],
            inputs=_params(payload, "inputs"),
            anonymous=bool(payload.get("anonymous", False)),
        )
    if kind == "error":
        return ErrorEntry(name=payload["name"], inputs=_params(payload, "inputs"))
    if kind == "constructor":
        return ConstructorEntry(inputs=_params(payload, "inputs"), state_mutability=_mutability(payload))
    if kind == "fallback":
        return FallbackEntry(state_mutability=_mutability(payload))
    if kind == "receive":
        return ReceiveEntry()
    raise ValueError(f"Unknown ABI entry type: {kind}")


@dataclass(frozen=True)
class ContractAbi:
    entries: tuple[AbiEntry, ...]

    def __iter__(self) -> Iterator[AbiEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def functions(self) -> list[FunctionEntry]:
        return [e for e in self.entries if isinstance(e, FunctionEntry)]

    def find_function(self, name: str) -> Optional[FunctionEntry]:
        """First function declared under ``name``, or None."""
        for entry in self.functions:
            if entry.name == name:
                return entry
        return None

    @classmethod
    def from_list(cls, payload: Sequence[dict[str, Any]], registry: SchemaRegistry | None = None) -> "ContractAbi":
        registry = registry or SchemaRegistry.default()
        try:
            registry.validate(payload, ABI_SCHEMA)
        except SchemaValidationError as exc:
            raise InvalidJsonError("Invalid JSON", errors=exc.errors) from exc
        return cls(tuple(parse_entry(item) for item in payload))


def parse_abi(text: str | None, registry: SchemaRegistry | None = None) -> ContractAbi:
    """
    Parse contract ABI text.

    Raises:
        InvalidJsonError: If the text is not JSON or not a valid ABI
    """
    payload = validate_json(text)
    if payload is INVALID_JSON:
        raise InvalidJsonError()
    return ContractAbi.from_list(payload, registry=registry)
