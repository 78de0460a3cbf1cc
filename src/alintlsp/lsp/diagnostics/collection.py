"""Ordered diagnostic container with attach-to-tail semantics."""

from __future__ import annotations

from collections.abc import Iterator

from lsprotocol import types

from alintlsp.errors import OrphanedRelatedInformationError


class DiagnosticList:
    """Diagnostics in the order their output lines were read.

    Related information can only be attached to the most recent diagnostic;
    attaching to an empty list raises instead of being dropped.
    """

    def __init__(self) -> None:
        self._items: list[types.Diagnostic] = []

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[types.Diagnostic]:
        return iter(self._items)

    def append(self, diagnostic: types.Diagnostic) -> None:
        self._items.append(diagnostic)

    def attach_to_last(self, information: types.DiagnosticRelatedInformation) -> None:
        """
        Append related information to the most recent diagnostic.

        Raises:
            OrphanedRelatedInformationError: No diagnostic has been appended yet.
        """
        if not self._items:
            raise OrphanedRelatedInformationError()
        last = self._items[-1]
        if last.related_information is None:
            last.related_information = []
        last.related_information.append(information)

    def to_list(self) -> list[types.Diagnostic]:
        return list(self._items)
