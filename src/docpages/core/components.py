"""Custom block components allowed in content.

MDX content may use a fixed set of block-level components written as JSX
tags on their own lines:

    <Tabs>
    <Tab heading="HCL">

    ```hcl
    ...
    ```

    </Tab>
    </Tabs>

    <EnterpriseAlert />

Each kind renders to an HTML container whose inner content is parsed as
Markdown. Components are looked up by tag name in a table; any other
capitalized tag is an error.
"""

import html
import re
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from docpages.core.errors import ParseError

Attributes = dict[str, str | bool]

ATTRIBUTE_RE = re.compile(
    r"""([A-Za-z_][\w:.-]*)(?:\s*=\s*(?:"([^"]*)"|'([^']*)'|\{([^}]*)\}))?"""
)

# Opening, closing or self-closing component tag alone on a line
TAG_LINE_RE = re.compile(
    r"^\s*<(?P<closing>/)?(?P<name>[A-Z][A-Za-z0-9]*)(?P<attrs>(?:\s+[^<>]*?)?)\s*(?P<self_closing>/)?>\s*$"
)

# Component with inline content on a single line: <Name attr="x">text</Name>
INLINE_TAG_RE = re.compile(
    r"^\s*<(?P<name>[A-Z][A-Za-z0-9]*)(?P<attrs>(?:\s+[^<>]*?)?)\s*>(?P<content>.*)</(?P=name)>\s*$"
)


class ComponentKind(Enum):
    """Block component kinds available to content."""

    TABS = "Tabs"
    TAB = "Tab"
    ENTERPRISE_ALERT = "EnterpriseAlert"


class BlockComponent(Protocol):
    """Render capability shared by every component kind."""

    kind: ComponentKind

    def open(self, attrs: Attributes) -> str: ...

    def close(self) -> str: ...

    def render_empty(self, attrs: Attributes) -> str: ...


@dataclass(frozen=True)
class Tabs:
    """Container grouping Tab blocks."""

    kind: ComponentKind = ComponentKind.TABS

    def open(self, attrs: Attributes) -> str:
        return '<div class="g-tabs" markdown="1">'

    def close(self) -> str:
        return "</div>"

    def render_empty(self, attrs: Attributes) -> str:
        return '<div class="g-tabs"></div>'


@dataclass(frozen=True)
class Tab:
    """A single tab, labeled by its heading attribute."""

    kind: ComponentKind = ComponentKind.TAB

    def open(self, attrs: Attributes) -> str:
        return f'<div class="g-tab" data-heading="{_heading(attrs)}" markdown="1">'

    def close(self) -> str:
        return "</div>"

    def render_empty(self, attrs: Attributes) -> str:
        return f'<div class="g-tab" data-heading="{_heading(attrs)}"></div>'


@dataclass(frozen=True)
class EnterpriseAlert:
    """Callout marking a feature as available in the enterprise edition."""

    product: str = "Consul"
    kind: ComponentKind = ComponentKind.ENTERPRISE_ALERT

    def open(self, attrs: Attributes) -> str:
        return '<div class="enterprise-alert g-type-body-small" role="alert" markdown="1">'

    def close(self) -> str:
        return "</div>"

    def render_empty(self, attrs: Attributes) -> str:
        product = attrs.get("product")
        name = product.title() if isinstance(product, str) and product else self.product
        return (
            '<div class="enterprise-alert g-type-body-small" role="alert">'
            "<p><strong>Enterprise</strong> This feature requires "
            f'<a href="https://www.hashicorp.com/products/{html.escape(name.lower())}/">'
            f"{html.escape(name)} Enterprise</a>.</p></div>"
        )


def _heading(attrs: Attributes) -> str:
    heading = attrs.get("heading")
    if not isinstance(heading, str) or not heading:
        raise ParseError('<Tab> requires a heading attribute (e.g., heading="HCL")')
    return html.escape(heading)


def default_components(product: str = "Consul") -> dict[str, BlockComponent]:
    """Build the component lookup table.

    Args:
        product: Product name used by EnterpriseAlert's default text

    Returns:
        Mapping of tag name to component
    """
    components: list[BlockComponent] = [Tabs(), Tab(), EnterpriseAlert(product=product)]
    return {component.kind.value: component for component in components}


def parse_attributes(raw: str) -> Attributes:
    """Parse JSX-style attributes.

    Supports name="value", name='value', name={expression} and bare
    boolean names. Expressions are kept as text with surrounding quotes
    removed.
    """
    attrs: Attributes = {}
    for match in ATTRIBUTE_RE.finditer(raw):
        name, double, single, expression = match.groups()
        if double is not None:
            attrs[name] = double
        elif single is not None:
            attrs[name] = single
        elif expression is not None:
            attrs[name] = _expression_value(expression.strip())
        else:
            attrs[name] = True
    return attrs


def _expression_value(expression: str) -> str | bool:
    if expression == "true":
        return True
    if expression == "false":
        return False
    if len(expression) >= 2 and expression[0] == expression[-1] and expression[0] in "\"'`":
        return expression[1:-1]
    return expression


def expand_components(lines: list[str], components: dict[str, BlockComponent]) -> list[str]:
    """Replace component tags with their HTML containers.

    Container markup is surrounded by blank lines so Markdown treats it as
    a raw HTML block and parses the content between open and close.

    Args:
        lines: Markdown lines (code blocks already stashed)
        components: Component lookup table

    Returns:
        Lines with component tags expanded

    Raises:
        ParseError: For unknown components or unbalanced tags
    """
    result: list[str] = []
    stack: list[str] = []

    for number, line in enumerate(lines, start=1):
        inline = INLINE_TAG_RE.match(line)
        if inline is not None:
            component = _lookup(inline.group("name"), components, number)
            attrs = parse_attributes(inline.group("attrs"))
            result.extend(
                ["", component.open(attrs), "", inline.group("content").strip(), "", component.close(), ""]
            )
            continue

        match = TAG_LINE_RE.match(line)
        if match is None:
            result.append(line)
            continue

        name = match.group("name")
        component = _lookup(name, components, number)

        if match.group("closing"):
            if not stack or stack[-1] != name:
                expected = f"</{stack[-1]}>" if stack else "no closing tag"
                raise ParseError(f"Line {number}: unexpected </{name}>, expected {expected}")
            stack.pop()
            result.extend(["", component.close(), ""])
        elif match.group("self_closing"):
            result.extend(["", component.render_empty(parse_attributes(match.group("attrs"))), ""])
        else:
            stack.append(name)
            result.extend(["", component.open(parse_attributes(match.group("attrs"))), ""])

    if stack:
        raise ParseError(f"Unclosed component tag <{stack[-1]}>")

    return result


def _lookup(name: str, components: dict[str, BlockComponent], line: int) -> BlockComponent:
    component = components.get(name)
    if component is None:
        allowed = ", ".join(sorted(components))
        raise ParseError(f"Line {line}: unknown component <{name}> (allowed: {allowed})")
    return component
