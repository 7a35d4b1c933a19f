#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Runtime contract behind the protocol dispatcher.

The dispatcher stays protocol-focused (method names, parameter shapes, fault
mapping) while keyword lookup, execution and shutdown are delegated to a
runtime implementation.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Mapping, Optional, Sequence

from .models import KeywordResult


class KeywordRuntime(ABC):
    """
    Operations the dispatcher binds protocol methods to.

    Lookups of unknown keyword names raise ``KeywordNotFoundError``.
    """

    @abstractmethod
    def keyword_names(self) -> List[str]:
        """
        Names of all registered keywords.
        """

    @abstractmethod
    def keyword_arguments(self, name: str) -> List[str]:
        """
        Declared parameter names of a keyword, in declaration order.
        """

    @abstractmethod
    def keyword_documentation(self, name: str) -> str:
        """
        Documentation string of a keyword.
        """

    @abstractmethod
    async def run_keyword(
        self,
        name: str,
        args: Sequence[Any],
        kwargs: Optional[Mapping[str, Any]] = None,
    ) -> KeywordResult:
        """
        Run one keyword and return its result envelope.
        """

    @abstractmethod
    def stop_remote_server(self) -> bool:
        """
        Request server shutdown; False when stopping is not allowed.
        """
