"""Streaming SVG validator.

`Validator` owns the policy (whitelists and validator registries) and is
safe to share between threads. Each call to `Validator.validate` runs a
`ValidationPass`, which holds the traversal state for exactly one
document and is dropped when the call returns or raises.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Mapping
from typing import IO, Any, Union

from .constants import (
    DEFAULT_MAX_REFERENCES,
    ID_ATTRIBUTES,
    NAMESPACE_PREFIXES,
    REFERENCE_ATTRIBUTES,
    SVG_ATTRIBUTES,
    SVG_ELEMENTS,
)
from .errors import (
    InvalidAttribute,
    InvalidElement,
    ParseError,
    SVGValidationError,
    UnallowedEntityAttribute,
)
from .href import AttributeValueValidator, HrefValidator
from .references import ReferenceGraph
from .registry import ValidatorRegistry, ValueValidator
from .style import StyleAttributeValidator, StyleSheetValidator
from .tokenizer import Tokenizer, TokenizerOpts
from .tokens import CharacterTokens, CommentToken, Directive, EOFToken, ProcessingInstruction, Tag
from .whitelist import Whitelist

logger = logging.getLogger(__name__)

_ENTITY_DECLARATION = re.compile(r"<!ENTITY\b", re.IGNORECASE)
_DEFAULT_VALUE_VALIDATOR = AttributeValueValidator()

AnyValidator = Union[ValueValidator, Callable[[str], Any]]


def default_content_validators() -> dict[str, ValueValidator]:
    return {"style": StyleSheetValidator()}


def default_attribute_validators() -> dict[str, ValueValidator]:
    return {"href": HrefValidator(), "style": StyleAttributeValidator()}


def attribute_key(space: str, local: str) -> str:
    """Whitelist key for an attribute: ``local`` or ``prefix:local``, lower-cased."""
    local = local.lower()
    if not space:
        return local
    prefix = NAMESPACE_PREFIXES.get(space, space)
    return f"{prefix.lower()}:{local}"


class ValidationPass:
    """Token sink holding the per-document state of one validation call."""

    __slots__ = (
        "attribute_validators",
        "attributes",
        "content_validators",
        "elements",
        "open_elements",
        "references",
        "scope_depths",
        "texts",
    )

    def __init__(
        self,
        elements: frozenset[str],
        attributes: frozenset[str],
        content_validators: Mapping[str, ValueValidator],
        attribute_validators: Mapping[str, ValueValidator],
        max_references: int,
    ) -> None:
        self.elements = elements
        self.attributes = attributes
        self.content_validators = content_validators
        self.attribute_validators = attribute_validators
        self.references = ReferenceGraph(max_references)
        self.open_elements: list[str] = []
        # Text of each open element that has a content validator, None otherwise.
        self.texts: list[list[str] | None] = []
        # depth of the element that opened each reference scope
        self.scope_depths: list[int] = []

    @property
    def current_element(self) -> str | None:
        return self.open_elements[-1] if self.open_elements else None

    @property
    def current_scope(self) -> int:
        return self.references.current_scope

    def process_token(self, token: object) -> None:
        if isinstance(token, Tag):
            if token.kind == Tag.START:
                self._start_tag(token)
            else:
                self._end_tag(token)
        elif isinstance(token, CharacterTokens):
            self._character_data(token.data)
        elif isinstance(token, CommentToken):
            return
        elif isinstance(token, ProcessingInstruction):
            if token.target.lower() != "xml":
                raise InvalidElement(token.target, detail="processing instruction")
        elif isinstance(token, Directive):
            self._directive(token.data)
        elif isinstance(token, EOFToken):
            self.references.finish()

    def _start_tag(self, tag: Tag) -> None:
        name = tag.name.lower()
        if name not in self.elements:
            raise InvalidElement(tag.name)
        self.open_elements.append(name)
        self.texts.append([] if name in self.content_validators else None)
        depth = len(self.open_elements)
        idents = []
        targets = []
        for attr in tag.attrs:
            key = self._check_attribute(attr.space, attr.local, attr.value)
            if key in ID_ATTRIBUTES:
                ident = attr.value.strip()
                if ident:
                    idents.append(ident)
            elif key in REFERENCE_ATTRIBUTES:
                value = attr.value.strip()
                if len(value) > 1 and value[0] == "#":
                    targets.append(value[1:])
        # An element's own references belong to its id scope, whatever the attribute order.
        for ident in idents:
            self.references.declare(ident)
            self.scope_depths.append(depth)
        for ident in targets:
            self.references.reference(ident)

    def _check_attribute(self, space: str, local: str, value: str) -> str:
        if space:
            # Namespaced attributes also answer to the validator of their
            # bare local name, e.g. "href" for "xlink:href".
            validator = self.attribute_validators.get(local.lower())
            if validator is not None:
                validator.validate(value)
        key = attribute_key(space, local)
        if key not in self.attributes:
            raise InvalidAttribute(key)
        validator = self.attribute_validators.get(key, _DEFAULT_VALUE_VALIDATOR)
        validator.validate(value)
        return key

    def _end_tag(self, tag: Tag) -> None:
        name = tag.name.lower()
        if name not in self.elements:
            raise InvalidElement(tag.name)
        depth = len(self.open_elements)
        while self.scope_depths and self.scope_depths[-1] == depth:
            self.scope_depths.pop()
            self.references.close()
        if not self.open_elements:
            return
        element = self.open_elements.pop()
        text = self.texts.pop()
        if text:
            # Text split by comments or child elements is checked as one string.
            self.content_validators[element].validate("".join(text))

    def _character_data(self, data: str) -> None:
        if self.texts:
            text = self.texts[-1]
            if text is not None:
                text.append(data)

    def _directive(self, data: str) -> None:
        declaration = data.strip()
        if declaration[:7].upper() != "DOCTYPE":
            return
        if _ENTITY_DECLARATION.search(declaration, 7):
            raise UnallowedEntityAttribute(declaration)


class Validator:
    """Whitelist-driven SVG validator.

    A fresh instance accepts the vocabulary in `safesvg.constants`. The
    mutators return the validator itself so calls can be chained::

        v = Validator().add_elements("style").remove_attributes("class")
        v.validate(data)

    `validate` returns None for an acceptable document and raises the
    first rejection otherwise: an `SVGValidationError` subclass for policy
    violations, `ParseError` for malformed markup, or whatever a custom
    validator raised.
    """

    __slots__ = (
        "_attribute_validators",
        "_attributes",
        "_content_validators",
        "_elements",
        "max_references",
        "tokenizer_opts",
    )

    def __init__(
        self,
        *,
        max_references: int = DEFAULT_MAX_REFERENCES,
        elements: Iterable[str] | None = None,
        attributes: Iterable[str] | None = None,
        tokenizer_opts: TokenizerOpts | None = None,
    ) -> None:
        if isinstance(max_references, bool) or not isinstance(max_references, int) or max_references <= 0:
            raise ValueError(f"max_references must be a positive integer, got {max_references!r}")
        self.max_references = max_references
        self.tokenizer_opts = tokenizer_opts or TokenizerOpts()
        self._elements = Whitelist(SVG_ELEMENTS if elements is None else elements)
        self._attributes = Whitelist(SVG_ATTRIBUTES if attributes is None else attributes)
        self._content_validators = ValidatorRegistry(default_content_validators())
        self._attribute_validators = ValidatorRegistry(default_attribute_validators())

    # Validation --------------------------------------------------------

    def validate(self, data: bytes | str) -> None:
        """Validate a complete document held in memory."""
        self._run(data)

    def validate_reader(self, reader: IO[bytes] | IO[str]) -> None:
        """Validate a document read incrementally from a file object."""
        self._run(reader)

    def is_valid(self, data: bytes | str | IO[bytes] | IO[str]) -> bool:
        try:
            self._run(data)
        except (SVGValidationError, ParseError):
            return False
        return True

    def _run(self, source: Any) -> None:
        validation = ValidationPass(
            self._elements.snapshot(),
            self._attributes.snapshot(),
            self._content_validators.snapshot(),
            self._attribute_validators.snapshot(),
            self.max_references,
        )
        tokenizer = Tokenizer(validation, self.tokenizer_opts)
        try:
            tokenizer.run(source)
        except SVGValidationError as exc:
            if exc.line is None:
                exc.line = tokenizer.line
                exc.column = tokenizer.column
            logger.debug("rejected svg: %s at %s:%s: %r", exc.code, exc.line, exc.column, exc.value)
            raise

    # Whitelists --------------------------------------------------------

    @property
    def elements(self) -> frozenset[str]:
        return self._elements.snapshot()

    @property
    def attributes(self) -> frozenset[str]:
        return self._attributes.snapshot()

    def add_elements(self, *names: str) -> Validator:
        self._elements.add(*names)
        return self

    def remove_elements(self, *names: str) -> Validator:
        self._elements.remove(*names)
        return self

    def add_attributes(self, *names: str) -> Validator:
        self._attributes.add(*names)
        return self

    def remove_attributes(self, *names: str) -> Validator:
        self._attributes.remove(*names)
        return self

    # Registries --------------------------------------------------------

    def set_content_validator(self, element: str, validator: AnyValidator) -> Validator:
        self._content_validators.set(element, validator)
        return self

    def remove_content_validator(self, element: str) -> Validator:
        self._content_validators.remove(element)
        return self

    def set_attribute_validator(self, attribute: str, validator: AnyValidator) -> Validator:
        self._attribute_validators.set(attribute, validator)
        return self

    def remove_attribute_validator(self, attribute: str) -> Validator:
        self._attribute_validators.remove(attribute)
        return self

    def content_validator(self, element: str) -> ValueValidator | None:
        return self._content_validators.get(element)

    def attribute_validator(self, attribute: str) -> ValueValidator | None:
        return self._attribute_validators.get(attribute)

    def __repr__(self) -> str:
        return (
            f"Validator(elements={len(self._elements)}, attributes={len(self._attributes)}, "
            f"max_references={self.max_references})"
        )
