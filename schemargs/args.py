"""
Schemargs parser: apply argument tokens to a compiled schema and read them back.

Usage
    from schemargs import Args

    args = Args("l,p#,d*", ["-l", "-p80", "-d/home/logs"])
    args.get_boolean("l")   # True
    args.get_integer("p")   # 80
    args.get_string("d")    # "/home/logs"

Tokens
- shape: <marker><flag><value>, e.g. "-p80". the marker (conventionally '-') is
  skipped, not validated; the flag is one character; the value is the rest.
- boolean flags become True (a trailing value is ignored with a warning).
- integer flags take a base-10 value ("[+-]?[0-9]+"); strings are stored verbatim.
- tokens apply in order; a repeated flag keeps the last value (with a warning).

Faults
- construction: SchemaError, MalformedTokenError, UnknownFlagError, FormatError.
  all of them abort construction (or, when deferred, are collected and raised
  together as an ArgsExit once every token has been seen).
- queries: OutOfRangeError when a getter does not match the declared type; it is
  always raised and does not affect the parser.

Runtime options (keyword-only)
- shell: print faults on stderr and exit instead of raising.
- fancy: render faults inside panels.
- colorful: style fault output.
- deferred: collect construction faults and report them together.
"""
import copy
import os.path
import re
import sys
from collections.abc import Iterable

from .faults import *
from .faults import trigger as _trigger
from .schema import FlagType, SchemaType, compile
from .utils import *


class Args(metaclass=SchemaType):
    """
    Schema-driven argument parser.

    Lifecycle
    - the schema is compiled into an ordered mapping of identifier -> Slot.
    - every token is applied eagerly, in order.
    - afterwards the object is read-only: has() and the typed getters.
    """

    __introspectable__ = (
        "name",
        "schema",
        "flags",
        "shell",
        "fancy",
        "colorful",
        "deferred",
    )

    __displayable__ = (
        "name",
        "flags",
    )

    def __init__(
            self,
            schema,
            args=Unset,
            /,
            *,
            prog=Unset,
            shell=False,
            fancy=False,
            colorful=True,
            deferred=False,
    ):
        if not isinstance(schema, str):
            raise TypeError("Args() schema must be a string")
        args = coalesce(args, sys.argv[1:])
        if isinstance(args, str) or not isinstance(args, Iterable):
            raise TypeError("Args() args must be an iterable of strings")
        args = list(args)
        if not all(isinstance(token, str) for token in args):
            raise TypeError("Args() args must be an iterable of strings")
        if not isinstance(prog, str | Unset):
            raise TypeError("Args() 'prog' must be a string")

        self._name = coalesce(prog, os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "args")
        self._schema = schema
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)
        self._deferred = bool(deferred)
        self._faults = []

        self._flags = compile(schema, self.trigger)
        self._parseargs(args)
        self._finalize()

    def __contains__(self, flag):
        return self.has(flag)

    def trigger(self, fault, /, **options):
        """
        surface a construction fault with this parser's runtime options.

        in deferred mode the fault is stored for _finalize(); otherwise it is
        fired right away (raised, or printed in shell mode).
        """
        if (
                not hasattr(fault, "__trigger__") or
                not callable(fault.__trigger__) or
                not hasattr(fault, "__replace__") or
                not callable(fault.__replace__)
        ):
            raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
        fault = copy.replace(fault, **options, tool=self, shell=self._shell, fancy=self._fancy, colorful=self._colorful, deferred=self._deferred)
        if self._deferred:
            return self._faults.append(fault)
        _trigger(fault)

    def _parseargs(self, tokens):
        """
        apply every token, in order, to the compiled flags.
        """
        seen = set()

        for index, token in enumerate(tokens, 1):
            if len(token) < 2:
                self.trigger(MalformedTokenError(
                    "bad form of flag %r at %s position" % (token, ordinal(index)),
                    title="malformed flag",
                    code=FaultCode.MALFORMED_TOKEN,
                    hint="flags look like '-x' followed by an optional value (e.g., -p80)",
                    token=token,
                    index=index,
                    docs=getdoc(FaultCode.MALFORMED_TOKEN)
                ))
                continue

            flag, value = token[1], token[2:]

            try:
                slot = self._flags[flag]
            except KeyError:
                self.trigger(UnknownFlagError(
                    "unknown flag %r at %s position" % (flag, ordinal(index)),
                    title="unknown flag",
                    code=FaultCode.UNKNOWN_FLAG,
                    hint=self._suggest(flag),
                    token=token,
                    index=index,
                    flag=flag,
                    docs=getdoc(FaultCode.UNKNOWN_FLAG)
                ))
                continue

            if flag in seen:
                self.trigger(OverriddenFlagWarning(
                    "flag %r at %s position overrides an earlier value" % (flag, ordinal(index)),
                    title="overridden flag",
                    code=FaultCode.OVERRIDDEN_FLAG,
                    hint="only the last occurrence of a flag is kept",
                    token=token,
                    index=index,
                    flag=flag,
                    docs=getdoc(FaultCode.OVERRIDDEN_FLAG)
                ))

            match slot.type:
                case FlagType.BOOLEAN:
                    if value:
                        self.trigger(IgnoredValueWarning(
                            "value %r of boolean flag %r at %s position is ignored" % (value, flag, ordinal(index)),
                            title="ignored value",
                            code=FaultCode.IGNORED_VALUE,
                            hint="boolean flags take no value; pass %r alone" % token[:2],
                            token=token,
                            index=index,
                            flag=flag,
                            docs=getdoc(FaultCode.IGNORED_VALUE)
                        ))
                    slot._value = True
                case FlagType.INTEGER:
                    if not re.fullmatch(r"[+-]?[0-9]+", value):
                        self.trigger(FormatError(
                            "invalid integer %r for flag %r at %s position" % (value, flag, ordinal(index)),
                            title="invalid integer",
                            code=FaultCode.INVALID_INTEGER,
                            hint="pass a base-10 number right after the flag (e.g., %s80)" % token[:2],
                            token=token,
                            index=index,
                            flag=flag,
                            docs=getdoc(FaultCode.INVALID_INTEGER)
                        ))
                        continue
                    slot._value = int(value, 10)
                case FlagType.STRING:
                    slot._value = value

            seen.add(flag)

    def _suggest(self, flag):
        if (swapped := flag.swapcase()) != flag and swapped in self._flags:
            return "did you mean %r? flags are case-sensitive" % ("-" + swapped)
        if not self._flags:
            return "the schema %r declares no flags" % self._schema
        return "declared flags are %s" % ", ".join("-" + name for name in self._flags)

    def _finalize(self):
        """
        report the faults collected in deferred mode.

        warnings are emitted first; if any exception remains, they are raised
        together as an ArgsExit (or printed, then exit, in shell mode).
        """
        exceptions = []
        warnings = []

        for fault in self._faults:
            if isinstance(fault, ArgsException):
                exceptions.append(fault)
            elif isinstance(fault, ArgsWarning):
                warnings.append(fault)
            else:
                raise RuntimeError("unexpected fault")

        for warning in warnings:
            _trigger(warning)

        if not exceptions:
            return

        _trigger(
            ArgsExit(exceptions),
            tool=self,
            shell=self._shell,
            fancy=self._fancy,
            colorful=self._colorful,
            deferred=self._deferred
        )

    def _lookup(self, flag, type, getter):
        try:
            slot = self._flags[flag]
        except (KeyError, TypeError):
            slot = None

        if slot is not None and slot.type is type:
            return slot.value

        if slot is None:
            message = "flag %r is not declared in schema %r" % (flag, self._schema)
            hint = "use has() to check whether a flag is declared"
        else:
            message = "flag %r is declared as %s, not %s" % (flag, slot.type.name.lower(), type.name.lower())
            hint = "use get_%s() for this flag" % slot.type.name.lower()

        # query faults never exit nor defer, whatever the runtime options
        _trigger(
            OutOfRangeError(
                message,
                title="out of range",
                code=FaultCode.OUT_OF_RANGE,
                hint=hint,
                flag=flag,
                getter=getter,
                docs=getdoc(FaultCode.OUT_OF_RANGE)
            ),
            tool=self,
            shell=False,
            fancy=self._fancy,
            colorful=self._colorful,
            deferred=False
        )

    def has(self, flag, /):
        """
        True iff the flag is declared in the schema, whether supplied or not.
        """
        try:
            return flag in self._flags
        except TypeError:
            return False

    def get_boolean(self, flag, /):
        return self._lookup(flag, FlagType.BOOLEAN, "get_boolean")

    def get_integer(self, flag, /):
        return self._lookup(flag, FlagType.INTEGER, "get_integer")

    def get_string(self, flag, /):
        return self._lookup(flag, FlagType.STRING, "get_string")


__all__ = (
    "Args",
)
