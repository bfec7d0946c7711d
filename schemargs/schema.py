r"""
Schemargs schema compiler.

Overview
- FlagType: the three storage kinds a flag can have, keyed by their type marker.
  • BOOLEAN  ""   (bare identifier, e.g. "l")      default False
  • INTEGER  "#"  (e.g. "p#")                      default 0
  • STRING   "*"  (e.g. "d*")                      default ""
- Slot: one declared flag; a tagged variant holding the identifier, its FlagType
  and the current value.
- compile(schema): turn a schema string such as "l,p#,d*" into an ordered
  mapping of identifier -> Slot.

Schema grammar
- descriptors are separated by ','; nothing is stripped.
- a descriptor is one identifier character, optionally followed by a type marker.
- the empty schema declares no flags.

Validation
- empty descriptors (",,", leading or trailing ',') are rejected.
- descriptors longer than two characters are rejected.
- identifiers must be printable and not whitespace.
- unknown type markers are rejected ("invalid flag type").
- an identifier can be declared only once, whatever its type.

Every violation is surfaced as a SchemaError through the given trigger; when the
trigger returns (deferred reporting), the descriptor is skipped.

Quick example:
    >>> flags = compile("l,p#,d*")
    >>> [(slot.flag, slot.type.name, slot.value) for slot in flags.values()]
    [('l', 'BOOLEAN', False), ('p', 'INTEGER', 0), ('d', 'STRING', '')]
"""
import functools
import operator
import re
from enum import StrEnum

from .faults import *
from .faults import trigger as _trigger
from .utils import *


class FlagType(StrEnum):
    """
    storage kind of a declared flag, valued by its schema type marker.
    """
    BOOLEAN = ""
    INTEGER = "#"
    STRING = "*"

    @property
    def default(self):
        """
        the implicit zero value of a flag of this type.
        """
        match self:
            case FlagType.BOOLEAN:
                return False
            case FlagType.INTEGER:
                return 0
            case FlagType.STRING:
                return ""


class SchemaType(type):
    """
    Metaclass that turns schema-bound classes into introspectable types.

    Responsibilities
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics and pretty printing.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens).
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
            )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - slot(flag='p', type=<FlagType.INTEGER: '#'>, value=80)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (name, object) pairs for pretty printers.
            """
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


class Slot(metaclass=SchemaType):
    """
    A declared flag and its current value.

    The value starts at the type default and is only written by the parser
    while it applies tokens; from the outside, every field is read-only.
    """
    __introspectable__ = (
        "flag",
        "type",
        "value",
    )
    __slots__ = ("_flag", "_type", "_value")

    def __init__(self, flag, type, /):
        if not isinstance(flag, str) or len(flag) != 1:
            raise TypeError("slot flag must be a single character string")
        if not isinstance(type, FlagType):
            raise TypeError("slot type must be a FlagType")
        self._flag = flag
        self._type = type
        self._value = type.default

    def __eq__(self, other):
        if not isinstance(other, Slot):
            return NotImplemented
        return (self._flag, self._type, self._value) == (other._flag, other._type, other._value)

    __hash__ = None


def compile(schema, /, trigger=Unset):
    """
    compile a schema string into an ordered mapping of identifier -> Slot.

    parameters
    - schema: str
      comma-separated descriptors (see module docstring).
    - trigger: callable (positional-or-keyword, default: faults.trigger)
      receives every SchemaError; the default raises it.

    returns
    - dict[str, Slot] in declaration order.
    """
    if not isinstance(schema, str):
        raise TypeError("compile() argument must be a string")
    trigger = coalesce(trigger, _trigger)

    flags = {}
    if not schema:
        return flags

    for index, descriptor in enumerate(schema.split(","), 1):
        if not descriptor:
            trigger(SchemaError(
                "empty flag descriptor at %s position of schema %r" % (ordinal(index), schema),
                title="empty descriptor",
                code=FaultCode.EMPTY_DESCRIPTOR,
                hint="remove the extra ',' (descriptors look like 'l', 'p#' or 'd*')",
                schema=schema,
                index=index,
                docs=getdoc(FaultCode.EMPTY_DESCRIPTOR)
            ))
            continue

        if len(descriptor) > 2:
            trigger(SchemaError(
                "flag descriptor %r at %s position is too long" % (descriptor, ordinal(index)),
                title="overlong descriptor",
                code=FaultCode.OVERLONG_DESCRIPTOR,
                hint="use one identifier character and an optional '#' or '*' type marker",
                schema=schema,
                descriptor=descriptor,
                index=index,
                docs=getdoc(FaultCode.OVERLONG_DESCRIPTOR)
            ))
            continue

        flag, marker = descriptor[0], descriptor[1:]

        if flag.isspace() or not flag.isprintable():
            trigger(SchemaError(
                "invalid flag identifier %r at %s position" % (flag, ordinal(index)),
                title="invalid flag name",
                code=FaultCode.INVALID_FLAG_NAME,
                hint="flag identifiers must be visible characters (no spaces between descriptors)",
                schema=schema,
                descriptor=descriptor,
                index=index,
                docs=getdoc(FaultCode.INVALID_FLAG_NAME)
            ))
            continue

        try:
            type = FlagType(marker)
        except ValueError:
            trigger(SchemaError(
                "invalid flag type %r for flag %r at %s position" % (marker, flag, ordinal(index)),
                title="invalid flag type",
                code=FaultCode.INVALID_FLAG_TYPE,
                hint="use '#' for integers, '*' for strings, or no marker for booleans",
                schema=schema,
                descriptor=descriptor,
                index=index,
                flag=flag,
                docs=getdoc(FaultCode.INVALID_FLAG_TYPE)
            ))
            continue

        if flag in flags:
            trigger(SchemaError(
                "flag %r at %s position is already declared as %s" % (flag, ordinal(index), flags[flag].type.name.lower()),
                title="duplicated flag",
                code=FaultCode.DUPLICATED_FLAG,
                hint="declare each flag identifier only once",
                schema=schema,
                descriptor=descriptor,
                index=index,
                flag=flag,
                docs=getdoc(FaultCode.DUPLICATED_FLAG)
            ))
            continue

        flags[flag] = Slot(flag, type)

    return flags


__all__ = (
    "FlagType",
    "Slot",
    "compile",
)
