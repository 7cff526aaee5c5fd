"""Write-once docstring attachment for functions, descriptors and classes.

Each kind of target keeps its docstring in a different place: a bound
method delegates to its function, ``staticmethod``/``classmethod`` wrap a
function and mirror its ``__doc__``, classes and properties own the attribute
directly, and C-level functions and descriptors keep a ``char *`` in their
method or getset definition struct. A :class:`DocSlot` subclass per kind
hides those differences behind ``has_documentation()`` /
``set_documentation()``.

A slot that already holds a non-empty docstring is never overwritten.
"""

from __future__ import annotations

import ctypes
import enum
import logging
import sys
import types
from collections.abc import Callable
from typing import Any

from pyjsonbridge._errors import (
    ERR_MSG_INVALID_TEXT,
    ERR_MSG_NOT_SETTABLE,
    AlreadyDocumentedError,
    AttributeNotSettableError,
    InvalidTextError,
)

logger = logging.getLogger(__name__)


class TargetKind(enum.StrEnum):
    FUNCTION = "function"
    BUILTIN_FUNCTION = "builtin_function"
    METHOD = "method"
    METHOD_DESCRIPTOR = "method_descriptor"
    NATIVE_METHOD_DESCRIPTOR = "native_method_descriptor"
    PROPERTY = "property"
    GETSET_DESCRIPTOR = "getset_descriptor"
    TYPE = "type"
    BUILTIN = "builtin"
    OBJECT = "object"


# C-level callables whose docstring slot lives in a struct we do not lay out.
_READONLY_BUILTIN_TYPES = (
    types.WrapperDescriptorType,
    types.MethodWrapperType,
    types.MemberDescriptorType,
)

# Checked in order, first match wins; anything else is OBJECT.
_KIND_CHECKS: tuple[tuple[TargetKind, Callable[[object], bool]], ...] = (
    (TargetKind.FUNCTION, lambda obj: isinstance(obj, types.FunctionType)),
    (
        TargetKind.BUILTIN_FUNCTION,
        lambda obj: isinstance(obj, types.BuiltinFunctionType),
    ),
    (TargetKind.METHOD, lambda obj: isinstance(obj, types.MethodType)),
    (
        TargetKind.METHOD_DESCRIPTOR,
        lambda obj: isinstance(obj, (staticmethod, classmethod)),
    ),
    (
        TargetKind.NATIVE_METHOD_DESCRIPTOR,
        lambda obj: isinstance(
            obj, (types.MethodDescriptorType, types.ClassMethodDescriptorType)
        ),
    ),
    (TargetKind.PROPERTY, lambda obj: isinstance(obj, property)),
    (
        TargetKind.GETSET_DESCRIPTOR,
        lambda obj: isinstance(obj, types.GetSetDescriptorType),
    ),
    (TargetKind.TYPE, lambda obj: isinstance(obj, type)),
    (TargetKind.BUILTIN, lambda obj: isinstance(obj, _READONLY_BUILTIN_TYPES)),
)


def classify_target(obj: object) -> TargetKind:
    """Return the documentable kind of *obj*."""
    for kind, check in _KIND_CHECKS:
        if check(obj):
            return kind
    return TargetKind.OBJECT


def normalize_doc_text(text: object) -> str:
    """Return *text* as a fresh ``str``.

    Byte buffers are copied before decoding so a mutable caller buffer is
    never retained.
    """
    if isinstance(text, str):
        try:
            text.encode("utf-8")
        except UnicodeEncodeError as e:
            raise InvalidTextError(
                ERR_MSG_INVALID_TEXT,
                f"error unpacking string as utf-8: {e}",
                wrapped=e,
            ) from e
        return text
    if isinstance(text, (bytes, bytearray, memoryview)):
        try:
            return bytes(text).decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidTextError(
                ERR_MSG_INVALID_TEXT,
                f"error decoding bytes as utf-8: {e}",
                wrapped=e,
            ) from e
    raise InvalidTextError(
        ERR_MSG_INVALID_TEXT,
        f"docstring must be str or bytes, got {type(text).__name__}",
    )


def is_documented(doc: object) -> bool:
    """Return True when *doc* is present and not empty."""
    if doc is None:
        return False
    if isinstance(doc, (str, bytes)):
        return len(doc) > 0
    return True


def _name_of(obj: object) -> str:
    for attr in ("__qualname__", "__name__"):
        name = getattr(obj, attr, None)
        if isinstance(name, str) and name:
            return name
    return type(obj).__name__


class DocSlot:
    """The single docstring slot of one target."""

    label = "object"

    def __init__(self, target: Any) -> None:
        self.target = target

    @property
    def name(self) -> str:
        return _name_of(self.target)

    def current(self) -> object:
        return getattr(self.target, "__doc__", None)

    def has_documentation(self) -> bool:
        return is_documented(self.current())

    def set_documentation(self, text: str) -> None:
        self.target.__doc__ = text


class FunctionDocSlot(DocSlot):
    label = "function"


class MethodDocSlot(DocSlot):
    """Bound methods forward ``__doc__`` to the function they wrap."""

    label = "function"

    @property
    def name(self) -> str:
        return _name_of(self.target.__func__)

    def current(self) -> object:
        return self.target.__func__.__doc__

    def set_documentation(self, text: str) -> None:
        self.target.__func__.__doc__ = text


class DescriptorDocSlot(DocSlot):
    label = "method"

    @property
    def name(self) -> str:
        return _name_of(self.target.__func__)

    def current(self) -> object:
        return self.target.__func__.__doc__

    def set_documentation(self, text: str) -> None:
        self.target.__func__.__doc__ = text
        # The descriptor keeps its own copy taken at construction.
        self.target.__doc__ = text


class PropertyDocSlot(DocSlot):
    label = "attribute"

    @property
    def name(self) -> str:
        if self.target.fget is not None:
            return _name_of(self.target.fget)
        return "property"


class TypeDocSlot(DocSlot):
    label = "type"


class BuiltinDocSlot(DocSlot):
    """Wrapper, member and method-wrapper objects have read-only docstrings."""

    label = "builtin"

    def set_documentation(self, text: str) -> None:
        raise AttributeError(f"docstring of builtin {self.name!r} is read-only")


class _MethodDef(ctypes.Structure):
    _fields_ = [
        ("ml_name", ctypes.c_char_p),
        ("ml_meth", ctypes.c_void_p),
        ("ml_flags", ctypes.c_int),
        ("ml_doc", ctypes.c_void_p),
    ]


class _GetSetDef(ctypes.Structure):
    _fields_ = [
        ("name", ctypes.c_char_p),
        ("get", ctypes.c_void_p),
        ("set", ctypes.c_void_p),
        ("doc", ctypes.c_void_p),
        ("closure", ctypes.c_void_p),
    ]


_POINTER_SIZE = ctypes.sizeof(ctypes.c_void_p)
# PyObject_HEAD; the descriptor objects add d_type, d_name and d_qualname.
_OBJECT_HEADER = object.__basicsize__
_DESCR_HEADER = _OBJECT_HEADER + 3 * _POINTER_SIZE
_SIGNATURE_END = b")\n--\n\n"

# Docstring buffers written into C definitions, keyed by definition address.
# Definitions are static for the life of the interpreter, so entries are
# never released.
_owned_docs: dict[int, ctypes.Array[ctypes.c_char]] = {}


class NativeDocSlot(DocSlot):
    """Docstring held as a ``char *`` in a C definition struct.

    The struct is reached through a pointer stored at ``definition_offset``
    inside the target object. The new text is copied into a buffer owned by
    this module, since the previous storage may be released by whoever
    allocated it.
    """

    definition_offset = _OBJECT_HEADER
    definition_struct: type[ctypes.Structure] = _MethodDef
    doc_field = "ml_doc"
    keeps_signature = True

    def _definition(self) -> ctypes.Structure:
        if sys.implementation.name != "cpython":
            raise AttributeError(
                f"native docstrings are not writable on {sys.implementation.name}"
            )
        address = ctypes.c_void_p.from_address(
            id(self.target) + self.definition_offset
        ).value
        if not address:
            raise AttributeError(f"{self.label} '{self.name}' has no definition")
        return self.definition_struct.from_address(address)

    def raw_doc(self) -> bytes | None:
        address = getattr(self._definition(), self.doc_field)
        if not address:
            return None
        return ctypes.string_at(address)

    def _signature_prefix(self) -> bytes:
        # Keep an embedded "name(...)\n--\n\n" text signature in front.
        raw = self.raw_doc()
        short_name = getattr(self.target, "__name__", "").encode("utf-8")
        if not raw or not short_name or not raw.startswith(short_name + b"("):
            return b""
        end = raw.find(_SIGNATURE_END)
        if end < 0:
            return b""
        return raw[: end + len(_SIGNATURE_END)]

    def set_documentation(self, text: str) -> None:
        data = text.encode("utf-8")
        if b"\x00" in data:
            raise InvalidTextError(
                ERR_MSG_INVALID_TEXT,
                f"native docstring for '{self.name}' cannot contain NUL bytes",
            )
        definition = self._definition()
        if self.keeps_signature:
            data = self._signature_prefix() + data
        buffer = ctypes.create_string_buffer(data)
        _owned_docs[ctypes.addressof(definition)] = buffer
        setattr(definition, self.doc_field, ctypes.addressof(buffer))


class BuiltinFunctionDocSlot(NativeDocSlot):
    label = "function"


class NativeMethodDocSlot(NativeDocSlot):
    label = "method"
    definition_offset = _DESCR_HEADER


class GetSetDocSlot(NativeDocSlot):
    label = "attribute"
    definition_offset = _DESCR_HEADER
    definition_struct = _GetSetDef
    doc_field = "doc"
    keeps_signature = False


DEFAULT_SLOTS: dict[TargetKind, type[DocSlot]] = {
    TargetKind.FUNCTION: FunctionDocSlot,
    TargetKind.BUILTIN_FUNCTION: BuiltinFunctionDocSlot,
    TargetKind.METHOD: MethodDocSlot,
    TargetKind.METHOD_DESCRIPTOR: DescriptorDocSlot,
    TargetKind.NATIVE_METHOD_DESCRIPTOR: NativeMethodDocSlot,
    TargetKind.PROPERTY: PropertyDocSlot,
    TargetKind.GETSET_DESCRIPTOR: GetSetDocSlot,
    TargetKind.TYPE: TypeDocSlot,
    TargetKind.BUILTIN: BuiltinDocSlot,
    TargetKind.OBJECT: DocSlot,
}


class DocPatcher:
    """Attaches docstrings, dispatching on the target's kind.

    Args:
        classify: Maps a target to its :class:`TargetKind`. Defaults to
            :func:`classify_target`.
        slots: Overrides for the slot class used per kind.
    """

    def __init__(
        self,
        classify: Callable[[object], TargetKind] = classify_target,
        slots: dict[TargetKind, type[DocSlot]] | None = None,
    ) -> None:
        self._classify = classify
        self._slots = dict(DEFAULT_SLOTS)
        if slots:
            self._slots.update(slots)

    def slot_for(self, target: object) -> DocSlot:
        kind = self._classify(target)
        return self._slots.get(kind, DocSlot)(target)

    def attach_doc(self, target: object, text: str | bytes) -> None:
        doc = normalize_doc_text(text)
        slot = self.slot_for(target)
        if slot.has_documentation():
            name = slot.name
            raise AlreadyDocumentedError(
                f"{slot.label} '{name}' already has a docstring",
                f"{slot.label} '{name}' already has a docstring: {slot.current()!r}",
                target_name=name,
            )
        try:
            slot.set_documentation(doc)
        except (AttributeError, TypeError) as e:
            raise AttributeNotSettableError(
                ERR_MSG_NOT_SETTABLE,
                f"cannot set docstring on {slot.label} '{slot.name}': {e}",
                wrapped=e,
            ) from e
        logger.debug("attached docstring to %s %r", slot.label, slot.name)


_default_patcher = DocPatcher()


def attach_doc(target: object, text: str | bytes) -> None:
    """Attach *text* as the docstring of *target*, once.

    Raises:
        InvalidTextError: If *text* is not str/bytes or not valid UTF-8.
        AlreadyDocumentedError: If *target* already has a non-empty docstring.
        AttributeNotSettableError: If the docstring cannot be written.
    """
    _default_patcher.attach_doc(target, text)
