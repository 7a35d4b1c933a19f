#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Keyword registry.

Built once at startup from the supplied libraries and read-only afterwards.
A library is any of:

- a mapping ``name -> callable``
- a mapping ``name -> (callable, doc)``
- an object or module; its public callables become keywords (for a module,
  the functions it defines itself, or the names in its ``__all__``)

Parameter names come from ``@keyword(args=[...])`` metadata when present and
from ``inspect.signature`` otherwise.
"""

import inspect
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from ..keywords import get_keyword_metadata
from .utils.exceptions import KeywordNotFoundError, KeywordRegistrationError
from .utils.logger import ModernLogger

STOP_REMOTE_SERVER_KEYWORD = "stopRemoteServer"


@dataclass(frozen=True)
class Keyword:
    """
    Keyword descriptor.

    ``args`` is informational only and is never checked against the number of
    arguments a caller passes.
    """

    name: str
    body: Callable[..., Any] = field(repr=False, compare=False)
    args: Tuple[str, ...] = ()
    doc: str = ""


def describe_parameters(func: Callable[..., Any]) -> List[str]:
    """
    Parameter names of a callable in declaration order, without types.

    Variadic parameters keep their ``*`` / ``**`` prefix.
    """
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return []

    names: List[str] = []
    for parameter in signature.parameters.values():
        if parameter.kind is inspect.Parameter.VAR_POSITIONAL:
            names.append("*" + parameter.name)
        elif parameter.kind is inspect.Parameter.VAR_KEYWORD:
            names.append("**" + parameter.name)
        else:
            names.append(parameter.name)
    return names


def build_keyword(
    name: str,
    body: Callable[..., Any],
    doc: Optional[str] = None,
    args: Optional[Sequence[str]] = None,
) -> Keyword:
    """
    Create a descriptor, resolving name, args and doc from explicit values,
    then ``@keyword`` metadata, then introspection.
    """
    if not callable(body):
        raise KeywordRegistrationError(
            "Keyword '{0}' is not callable".format(name), keyword_name=name
        )

    metadata = get_keyword_metadata(body)
    if args is None and metadata is not None:
        args = metadata.args
    if doc is None and metadata is not None:
        doc = metadata.doc
    if args is None:
        args = describe_parameters(body)
    if doc is None:
        doc = inspect.getdoc(body) or ""

    keyword_name = str(name).strip()
    if not keyword_name:
        raise KeywordRegistrationError("Keyword name cannot be empty")

    return Keyword(name=keyword_name, body=body, args=tuple(args), doc=doc)


def _iter_mapping(library: Mapping[str, Any]) -> Iterator[Keyword]:
    for entry_name, entry in library.items():
        doc: Optional[str] = None
        body = entry
        if isinstance(entry, tuple):
            if not 1 <= len(entry) <= 2:
                raise KeywordRegistrationError(
                    "Library entry '{0}' must be (callable, doc)".format(entry_name),
                    keyword_name=entry_name,
                )
            body = entry[0]
            doc = entry[1] if len(entry) == 2 else None
        yield build_keyword(entry_name, body, doc=doc)


def _is_module_member(module: Any, attr_name: str, member: Any) -> bool:
    """
    Names listed in ``__all__``, or else functions defined in the module itself.
    """
    exported = getattr(module, "__all__", None)
    if exported is not None:
        return attr_name in exported
    return getattr(member, "__module__", None) == module.__name__


def _iter_object(library: Any) -> Iterator[Keyword]:
    is_module = inspect.ismodule(library)
    for attr_name, member in inspect.getmembers(library, predicate=callable):
        if attr_name.startswith("_") or inspect.isclass(member):
            continue
        if is_module and not _is_module_member(library, attr_name, member):
            continue
        metadata = get_keyword_metadata(member)
        keyword_name = (metadata.name if metadata and metadata.name else attr_name)
        yield build_keyword(keyword_name, member)


def iter_library_keywords(library: Any) -> Iterator[Keyword]:
    if isinstance(library, Mapping):
        return _iter_mapping(library)
    return _iter_object(library)


class KeywordRegistry(ModernLogger):
    """
    Holds keyword descriptors keyed by name.

    Registering a name twice keeps the later registration.
    """

    def __init__(self, log_level: str = "info") -> None:
        super().__init__(name="KeywordRegistry", level=log_level)
        self._keywords: Dict[str, Keyword] = {}

    def add(self, keyword: Keyword) -> Keyword:
        if keyword.name in self._keywords:
            self.warning("Keyword '%s' registered twice; keeping the later one", keyword.name)
        self._keywords[keyword.name] = keyword
        return keyword

    def register_keyword(
        self,
        name: str,
        body: Callable[..., Any],
        doc: Optional[str] = None,
        args: Optional[Sequence[str]] = None,
    ) -> Keyword:
        return self.add(build_keyword(name, body, doc=doc, args=args))

    def register(self, library: Any) -> List[str]:
        """
        Merge every keyword of ``library``; returns the names it contributed.
        """
        names: List[str] = []
        for descriptor in iter_library_keywords(library):
            self.add(descriptor)
            names.append(descriptor.name)
        self.debug("Registered %d keyword(s) from %s", len(names), type(library).__name__)
        return names

    def names(self) -> List[str]:
        return list(self._keywords.keys())

    def get(self, name: str) -> Keyword:
        try:
            return self._keywords[name]
        except KeyError:
            raise KeywordNotFoundError(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._keywords

    def __len__(self) -> int:
        return len(self._keywords)
