"""Document modifier chain.

Modifiers transform each document before it is inserted. They run strictly
in registration order and may be plain functions or coroutines:

    loader = connect("myapp_test")

    @loader.add_modifier
    def add_timestamps(collection, document):
        document["createdAt"] = datetime.now(timezone.utc)
        return document
"""

import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from mongo_fixtures.exceptions import ModifierError

logger = logging.getLogger(__name__)

Document = dict[str, Any]
Modifier = Callable[[str, Document], Document | Awaitable[Document]]


def _modifier_name(modifier: Modifier) -> str:
    return getattr(modifier, "__qualname__", None) or repr(modifier)


class ModifierChain:
    """Ordered list of modifiers applied to every document.

    Register modifiers before loading; changing the chain while a load is
    in flight is not supported.
    """

    def __init__(self, modifiers: list[Modifier] | None = None):
        self._modifiers: list[Modifier] = []
        for modifier in modifiers or []:
            self.add(modifier)

    def __len__(self) -> int:
        return len(self._modifiers)

    def add(self, modifier: Modifier) -> Modifier:
        """
        Append a modifier to the chain.

        Returns the modifier unchanged so this can be used as a decorator.

        Raises:
            TypeError: If `modifier` is not callable.
        """
        if not callable(modifier):
            raise TypeError(f"Modifier must be callable, not {type(modifier).__name__}")
        self._modifiers.append(modifier)
        return modifier

    def clear(self) -> None:
        """Remove all registered modifiers."""
        self._modifiers.clear()

    async def apply(self, collection: str, document: Document) -> Document:
        """
        Run `document` through every modifier in order.

        Each modifier receives the previous modifier's output.

        Raises:
            ModifierError: If a modifier raises or returns a non-mapping.
        """
        for modifier in self._modifiers:
            name = _modifier_name(modifier)
            try:
                result = modifier(collection, document)
                if inspect.isawaitable(result):
                    result = await result
            except Exception as e:
                raise ModifierError(collection, f"modifier {name} failed: {e}") from e

            if not isinstance(result, Mapping):
                raise ModifierError(
                    collection,
                    f"modifier {name} must return the document, got {type(result).__name__}",
                )
            document = result if isinstance(result, dict) else dict(result)

        return document
