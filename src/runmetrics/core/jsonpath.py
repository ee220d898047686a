"""Template path expressions evaluated against arbitrary records.

Implements the subset of Kubernetes JSONPath templates used by monitor
configuration. A template mixes literal text with ``{...}`` actions; each
action is a chain of steps evaluated against the input:

    {.status.startTime}
    {.metadata.labels['app.kubernetes.io/name']}
    {.status.conditions[?(@.type == "Succeeded")].reason}
    {.status.taskRuns[*].status.podName}

Records may be mappings, sequences, dataclasses or plain objects. Field
steps try mapping keys first, then attributes (JSON alias declared in
dataclass field metadata, exact name, camelCase converted to snake_case).
Every matched value is returned as a Slot that also carries the declared
type of the attribute it came from, when one is known.
"""

import dataclasses
import functools
import inspect
import re
import types
import typing
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from runmetrics.core.errors import PathError, PathNotFoundError, PathSyntaxError


@dataclass(frozen=True)
class Slot:
    """A matched value and the type it was declared with.

    Attributes:
        value: The matched value (may be None for a null field).
        declared: Type hint of the attribute holding the value, or None
            when the value came from an untyped container.
    """

    value: Any
    declared: Any = None


# === Syntax tree ===


@dataclass(frozen=True)
class TextNode:
    text: str


@dataclass(frozen=True)
class FieldStep:
    name: str


@dataclass(frozen=True)
class RecursiveStep:
    name: str


@dataclass(frozen=True)
class WildcardStep:
    pass


@dataclass(frozen=True)
class IndexStep:
    index: int


@dataclass(frozen=True)
class SliceStep:
    start: int | None
    end: int | None
    step: int | None


@dataclass(frozen=True)
class UnionStep:
    items: tuple["Step", ...]


@dataclass(frozen=True)
class FilterStep:
    path: tuple["Step", ...]
    op: str | None
    literal: Any = None


Step = (
    FieldStep
    | RecursiveStep
    | WildcardStep
    | IndexStep
    | SliceStep
    | UnionStep
    | FilterStep
)


@dataclass(frozen=True)
class ActionNode:
    steps: tuple[Step, ...]


Node = TextNode | ActionNode


# === Parser ===

_IDENT = re.compile(r"[A-Za-z0-9_\-]+")
_NUMBER = re.compile(r"-?\d+(\.\d+)?([eE][+-]?\d+)?")
_INT = re.compile(r"-?\d+")
_OPERATORS = ("==", "!=", "<=", ">=", "<", ">")
_KEYWORDS = {"true": True, "false": False, "null": None}


def _find_close(template: str, start: int) -> int:
    """Return the index of the brace closing the action opened at start."""
    quote: str | None = None
    i = start + 1
    while i < len(template):
        c = template[i]
        if quote:
            if c == "\\":
                i += 1
            elif c == quote:
                quote = None
        elif c in "'\"":
            quote = c
        elif c == "{":
            raise PathSyntaxError(template, i, "nested action")
        elif c == "}":
            return i
        i += 1
    raise PathSyntaxError(template, start, "unclosed action")


class _ExpressionParser:
    """Recursive-descent parser for the inside of one ``{...}`` action."""

    def __init__(self, template: str, start: int, end: int) -> None:
        self.template = template
        self.pos = start
        self.end = end

    def error(self, reason: str) -> PathSyntaxError:
        return PathSyntaxError(self.template, self.pos, reason)

    def peek(self, n: int = 1) -> str:
        return self.template[self.pos : min(self.pos + n, self.end)]

    def at_end(self) -> bool:
        return self.pos >= self.end

    def skip_ws(self) -> None:
        while not self.at_end() and self.template[self.pos].isspace():
            self.pos += 1

    def expect(self, token: str) -> None:
        self.skip_ws()
        if self.peek(len(token)) != token:
            raise self.error(f"expected {token!r}")
        self.pos += len(token)

    def parse(self) -> ActionNode:
        self.skip_ws()
        if self.at_end():
            raise self.error("empty expression")
        if self.peek() == "$":
            self.pos += 1
        elif self.peek() not in (".", "["):
            # A bare leading identifier reads as a field of the root.
            steps = [FieldStep(self.identifier())]
            steps.extend(self.steps(stop=""))
            return self.finish(steps)
        if self.peek() == "." and self.pos + 1 == self.end:
            self.pos += 1
            return ActionNode(())
        return self.finish(self.steps(stop=""))

    def finish(self, steps: list[Step]) -> ActionNode:
        self.skip_ws()
        if not self.at_end():
            raise self.error(f"unexpected {self.peek()!r}")
        return ActionNode(tuple(steps))

    def identifier(self) -> str:
        match = _IDENT.match(self.template, self.pos, self.end)
        if match is None:
            raise self.error("expected field name")
        self.pos = match.end()
        return match.group()

    def steps(self, stop: str) -> list[Step]:
        steps: list[Step] = []
        while not self.at_end():
            c = self.peek()
            if c in stop or c.isspace():
                break
            if self.peek(2) == "..":
                self.pos += 2
                if self.peek() == "*":
                    self.pos += 1
                    steps.append(RecursiveStep("*"))
                else:
                    steps.append(RecursiveStep(self.identifier()))
            elif c == ".":
                self.pos += 1
                if self.peek() == "*":
                    self.pos += 1
                    steps.append(WildcardStep())
                else:
                    steps.append(FieldStep(self.identifier()))
            elif c == "[":
                self.pos += 1
                steps.append(self.bracket())
            else:
                raise self.error(f"unexpected {c!r}")
        return steps

    def bracket(self) -> Step:
        self.skip_ws()
        if self.peek() == "?":
            self.pos += 1
            step: Step = self.filter()
        elif self.peek() == "*":
            self.pos += 1
            step = WildcardStep()
        else:
            items = [self.bracket_item()]
            self.skip_ws()
            while self.peek() == ",":
                self.pos += 1
                items.append(self.bracket_item())
                self.skip_ws()
            if len(items) == 1:
                step = items[0]
            elif any(isinstance(item, SliceStep) for item in items):
                raise self.error("slice not allowed in union")
            else:
                step = UnionStep(tuple(items))
        self.expect("]")
        return step

    def bracket_item(self) -> Step:
        self.skip_ws()
        if self.peek() in ("'", '"'):
            return FieldStep(self.quoted())
        parts: list[int | None] = [self.optional_int()]
        self.skip_ws()
        while self.peek() == ":" and len(parts) < 3:
            self.pos += 1
            parts.append(self.optional_int())
            self.skip_ws()
        if len(parts) == 1:
            if parts[0] is None:
                raise self.error("expected index")
            return IndexStep(parts[0])
        parts.extend([None] * (3 - len(parts)))
        if parts[2] == 0:
            raise self.error("slice step cannot be zero")
        return SliceStep(parts[0], parts[1], parts[2])

    def optional_int(self) -> int | None:
        self.skip_ws()
        match = _INT.match(self.template, self.pos, self.end)
        if match is None:
            return None
        self.pos = match.end()
        return int(match.group())

    def quoted(self) -> str:
        quote = self.peek()
        self.pos += 1
        chars: list[str] = []
        while not self.at_end():
            c = self.template[self.pos]
            if c == "\\" and self.pos + 1 < self.end:
                chars.append(self.template[self.pos + 1])
                self.pos += 2
                continue
            self.pos += 1
            if c == quote:
                return "".join(chars)
            chars.append(c)
        raise self.error("unterminated string")

    def filter(self) -> FilterStep:
        self.expect("(")
        self.expect("@")
        path = tuple(self.steps(stop=")=!<>"))
        self.skip_ws()
        op = next((o for o in _OPERATORS if self.peek(len(o)) == o), None)
        literal: Any = None
        if op is not None:
            self.pos += len(op)
            literal = self.literal()
        self.expect(")")
        return FilterStep(path, op, literal)

    def literal(self) -> Any:
        self.skip_ws()
        if self.peek() in ("'", '"'):
            return self.quoted()
        match = _NUMBER.match(self.template, self.pos, self.end)
        if match is not None:
            self.pos = match.end()
            text = match.group()
            return float(text) if match.group(1) or match.group(2) else int(text)
        word = _IDENT.match(self.template, self.pos, self.end)
        if word is not None and word.group() in _KEYWORDS:
            self.pos = word.end()
            return _KEYWORDS[word.group()]
        raise self.error("expected literal")


def parse(template: str) -> tuple[Node, ...]:
    """Parse a template into text and action nodes.

    Raises:
        PathSyntaxError: If the template is malformed.
    """
    nodes: list[Node] = []
    text: list[str] = []
    i = 0
    while i < len(template):
        c = template[i]
        if c == "{":
            if text:
                nodes.append(TextNode("".join(text)))
                text = []
            end = _find_close(template, i)
            nodes.append(_ExpressionParser(template, i + 1, end).parse())
            i = end + 1
            continue
        if c == "}":
            raise PathSyntaxError(template, i, "unmatched '}'")
        text.append(c)
        i += 1
    if text:
        nodes.append(TextNode("".join(text)))
    return tuple(nodes)


# === Introspection ===

_MISSING = object()
_CAMEL = re.compile(r"(?<=[a-z0-9])([A-Z])")


def _snake_case(name: str) -> str:
    return _CAMEL.sub(r"_\1", name).lower()


@functools.lru_cache(maxsize=None)
def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError):
        return {}


@functools.lru_cache(maxsize=None)
def _json_aliases(cls: type) -> dict[str, str]:
    if not dataclasses.is_dataclass(cls):
        return {}
    return {
        f.metadata["json"]: f.name for f in dataclasses.fields(cls) if "json" in f.metadata
    }


def _unwrap_optional(hint: Any) -> Any:
    if typing.get_origin(hint) in (typing.Union, types.UnionType):
        args = [a for a in typing.get_args(hint) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return hint


def _element_type(hint: Any) -> Any:
    """Return the declared item type of a container hint, if any."""
    hint = _unwrap_optional(hint)
    origin = typing.get_origin(hint)
    args = typing.get_args(hint)
    if origin is None or not args:
        return None
    if isinstance(origin, type) and issubclass(origin, Mapping):
        return args[-1]
    if isinstance(origin, type) and issubclass(origin, Sequence):
        return args[0]
    return None


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def _attribute(obj: Any, name: str) -> Slot | object:
    cls = type(obj)
    candidates = [_json_aliases(cls).get(name), name, _snake_case(name)]
    for attr in candidates:
        if attr is None or attr.startswith("_"):
            continue
        value = getattr(obj, attr, _MISSING)
        if value is _MISSING or inspect.isroutine(value):
            continue
        return Slot(value, _type_hints(cls).get(attr))
    return _MISSING


def _field(slot: Slot, name: str) -> Slot | object:
    value = slot.value
    if isinstance(value, Mapping):
        if name in value:
            return Slot(value[name], _element_type(slot.declared))
        return _MISSING
    if _is_sequence(value) or isinstance(value, (str, bytes, int, float, bool)):
        return _MISSING
    return _attribute(value, name)


def _children(slot: Slot) -> Iterator[Slot]:
    value = slot.value
    if isinstance(value, Mapping):
        item_type = _element_type(slot.declared)
        for key in sorted(value, key=str):
            yield Slot(value[key], item_type)
    elif _is_sequence(value):
        item_type = _element_type(slot.declared)
        for item in value:
            yield Slot(item, item_type)
    elif dataclasses.is_dataclass(value) and not isinstance(value, type):
        hints = _type_hints(type(value))
        for f in dataclasses.fields(value):
            yield Slot(getattr(value, f.name), hints.get(f.name))


def _descendants(slot: Slot, seen: set[int]) -> Iterator[Slot]:
    container = isinstance(slot.value, Mapping) or _is_sequence(slot.value)
    container = container or dataclasses.is_dataclass(slot.value)
    if container:
        if id(slot.value) in seen:
            return
        seen.add(id(slot.value))
    yield slot
    for child in _children(slot):
        yield from _descendants(child, seen)


# === Evaluation ===


def _eval_field(slots: list[Slot], name: str) -> list[Slot]:
    if not slots:
        return []
    results = []
    for slot in slots:
        if slot.value is None:
            continue
        found = _field(slot, name)
        if isinstance(found, Slot):
            results.append(found)
    if not results:
        raise PathNotFoundError(name)
    return results


def _eval_recursive(slots: list[Slot], name: str) -> list[Slot]:
    results: list[Slot] = []
    for slot in slots:
        for node in _descendants(slot, set()):
            if name == "*":
                if node is not slot:
                    results.append(node)
                continue
            if node.value is None:
                continue
            found = _field(node, name)
            if isinstance(found, Slot):
                results.append(found)
    if slots and not results:
        raise PathNotFoundError(f"..{name}")
    return results


def _eval_index(slots: list[Slot], step: IndexStep) -> list[Slot]:
    results = []
    for slot in slots:
        if slot.value is None:
            continue
        if not _is_sequence(slot.value):
            raise PathError(f"{type(slot.value).__name__} is not a list")
        length = len(slot.value)
        if not -length <= step.index < length:
            raise PathError(
                f"array index out of bounds: index {step.index}, length {length}"
            )
        results.append(Slot(slot.value[step.index], _element_type(slot.declared)))
    return results


def _eval_slice(slots: list[Slot], step: SliceStep) -> list[Slot]:
    results = []
    for slot in slots:
        if slot.value is None:
            continue
        if not _is_sequence(slot.value):
            raise PathError(f"{type(slot.value).__name__} is not a list")
        item_type = _element_type(slot.declared)
        for item in slot.value[step.start : step.end : step.step]:
            results.append(Slot(item, item_type))
    return results


def _compare(left: Any, op: str, right: Any) -> bool:
    if isinstance(left, bool) or isinstance(right, bool) or left is None or right is None:
        if op == "==":
            return bool(left == right)
        if op == "!=":
            return bool(left != right)
        return False
    if isinstance(left, (int, float)) and isinstance(right, (int, float)):
        pass
    elif isinstance(right, str):
        left = left if isinstance(left, str) else str(left)
    else:
        return op == "!="
    try:
        if op == "==":
            return bool(left == right)
        if op == "!=":
            return bool(left != right)
        if op == "<":
            return bool(left < right)
        if op == "<=":
            return bool(left <= right)
        if op == ">":
            return bool(left > right)
        return bool(left >= right)
    except TypeError:
        return False


def _matches(item: Slot, step: FilterStep) -> bool:
    try:
        found = _walk([item], step.path)
    except PathError:
        return False
    if step.op is None:
        return any(slot.value is not None for slot in found)
    if not found:
        return False
    return _compare(found[0].value, step.op, step.literal)


def _eval_filter(slots: list[Slot], step: FilterStep) -> list[Slot]:
    results = []
    for slot in slots:
        if slot.value is None:
            continue
        candidates = list(_children(slot)) if _is_sequence(slot.value) else [slot]
        results.extend(item for item in candidates if _matches(item, step))
    return results


def _eval_step(slots: list[Slot], step: Step) -> list[Slot]:
    if isinstance(step, FieldStep):
        return _eval_field(slots, step.name)
    if isinstance(step, RecursiveStep):
        return _eval_recursive(slots, step.name)
    if isinstance(step, WildcardStep):
        return [child for slot in slots for child in _children(slot)]
    if isinstance(step, IndexStep):
        return _eval_index(slots, step)
    if isinstance(step, SliceStep):
        return _eval_slice(slots, step)
    if isinstance(step, UnionStep):
        return [found for item in step.items for found in _eval_step(slots, item)]
    return _eval_filter(slots, step)


def _walk(slots: list[Slot], steps: tuple[Step, ...]) -> list[Slot]:
    for step in steps:
        slots = _eval_step(slots, step)
    return slots


class JSONPath:
    """A compiled template path expression.

    Example:
        ```python
        path = JSONPath("{.status.startTime}{.status.completionTime}")
        start, end = path.find_results(task_run)
        ```
    """

    def __init__(self, template: str) -> None:
        """Compile a template.

        Raises:
            PathSyntaxError: If the template is malformed.
        """
        self.template = template
        self.nodes = parse(template)

    def find_results(self, data: Any) -> list[list[Slot]]:
        """Evaluate every node of the template against data.

        Returns:
            One list of matched slots per template node, in template order.
            Literal text nodes yield a single slot holding the text.

        Raises:
            PathError: If a step matches nothing addressable.
        """
        results: list[list[Slot]] = []
        root = [Slot(data)]
        for node in self.nodes:
            if isinstance(node, TextNode):
                results.append([Slot(node.text, str)])
            else:
                results.append(_walk(root, node.steps))
        return results

    def __repr__(self) -> str:
        return f"JSONPath({self.template!r})"


@functools.lru_cache(maxsize=1024)
def compile_path(template: str) -> JSONPath:
    """Return a cached compiled JSONPath for a template."""
    return JSONPath(template)
