# UI Duplicates - Find near-duplicate components, hooks and functions
# Copyright (C) 2025  Jonathan Louis
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
TypeScript/TSX structural parser using tree-sitter.

Finds function declarations, arrow and function expressions bound to a
name, and default-exported anonymous functions, at any depth.
"""

from typing import Any, Iterator, List, Optional
import re

from .base import MarkupRoot, ParsedFile, ParsedUnit, Span, StructuralParser
from ..models import is_hook_name


FUNCTION_EXPRESSIONS = {
    "arrow_function",
    "function_expression",
    "function",
    "generator_function",
}

FUNCTION_DECLARATIONS = {
    "function_declaration",
    "generator_function_declaration",
}

MARKUP_NODES = {"jsx_element", "jsx_self_closing_element", "jsx_fragment"}

LOOP_STATEMENTS = {
    "for_statement",
    "for_in_statement",
    "while_statement",
    "do_statement",
}

# Tailwind-style utility classes say nothing about what a section is
UTILITY_CLASS = re.compile(
    r"^(?:[a-z0-9-]+:)*-?(?:"
    r"bg|text|font|leading|tracking|p[xytrbl]?|m[xytrbl]?|w|h|min-w|min-h|max-w|max-h|"
    r"gap|space-[xy]|border|rounded|shadow|ring|flex|grid|items|justify|self|"
    r"place|col|row|inset|top|left|right|bottom|z|opacity|overflow|transition|"
    r"duration|ease|cursor|sr|block|inline|hidden|absolute|relative|fixed|"
    r"sticky|container|truncate|underline|uppercase|lowercase|capitalize|"
    r"whitespace|break|object|aspect|divide|animate|transform|scale|rotate|"
    r"translate|outline|fill|stroke"
    r")(?:-|$)"
)

LABEL_LENGTH = 30


def _text(node) -> str:
    return node.text.decode("utf-8", errors="replace")


def _walk(node) -> Iterator[Any]:
    """Pre-order traversal without recursion."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def _unwrap_parens(node):
    while node is not None and node.type == "parenthesized_expression":
        inner = [c for c in node.named_children if c.type != "comment"]
        node = inner[0] if inner else None
    return node


def _slug(value: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")[:LABEL_LENGTH]


class TypeScriptParser(StructuralParser):
    """AST-aware TypeScript/TSX parser."""

    def __init__(self, tsx: bool = True):
        self.tsx = tsx
        self._parser = None
        self._language = None

    def _ensure_parser(self):
        """Lazy-load tree-sitter parser."""
        if self._parser is not None:
            return

        try:
            import tree_sitter_typescript as tstypescript
            from tree_sitter import Language, Parser
        except ImportError as e:
            raise ImportError(
                "tree-sitter-typescript not installed. "
                "Install with: pip install tree-sitter-typescript"
            ) from e

        if self.tsx:
            self._language = Language(tstypescript.language_tsx())
        else:
            self._language = Language(tstypescript.language_typescript())
        self._parser = Parser(self._language)

    def parse(self, content: str) -> Optional[ParsedFile]:
        self._ensure_parser()

        tree = self._parser.parse(content.encode("utf-8"))
        root = tree.root_node
        if root.has_error:
            return None

        parsed = ParsedFile()
        self._collect_units(root, parsed.units)
        self._collect_exports(root, parsed)
        return parsed

    def _collect_units(self, root, units: List[ParsedUnit]):
        for node in _walk(root):
            if node.type in FUNCTION_DECLARATIONS:
                name_node = node.child_by_field_name("name")
                if name_node is not None:
                    units.append(self._unit(_text(name_node), node, node))

            elif node.type in ("lexical_declaration", "variable_declaration"):
                for declarator in node.named_children:
                    if declarator.type != "variable_declarator":
                        continue
                    name_node = declarator.child_by_field_name("name")
                    value = declarator.child_by_field_name("value")
                    if (
                        name_node is not None
                        and name_node.type == "identifier"
                        and value is not None
                        and value.type in FUNCTION_EXPRESSIONS
                    ):
                        units.append(self._unit(_text(name_node), value, node))

            elif node.type == "export_statement":
                value = node.child_by_field_name("value")
                if value is not None and value.type in FUNCTION_EXPRESSIONS:
                    name_node = value.child_by_field_name("name")
                    name = _text(name_node) if name_node is not None else "default"
                    units.append(self._unit(name, value, node))

    def _unit(self, name: str, func_node, location_node) -> ParsedUnit:
        return ParsedUnit(
            name=name,
            node=func_node,
            span=self.span(location_node),
            parser=self,
        )

    def _collect_exports(self, root, parsed: ParsedFile):
        """Top-level export statements only."""
        for stmt in root.named_children:
            if stmt.type != "export_statement":
                continue

            is_default = any(c.type == "default" for c in stmt.children)
            declaration = stmt.child_by_field_name("declaration")
            value = stmt.child_by_field_name("value")

            if declaration is not None:
                names = self._declared_names(declaration)
                parsed.exported_names.update(names)
                if is_default and names:
                    parsed.default_export_name = names[0]

            elif is_default and value is not None:
                if value.type == "identifier":
                    parsed.default_export_name = _text(value)
                elif value.type in FUNCTION_EXPRESSIONS:
                    name_node = value.child_by_field_name("name")
                    parsed.default_export_name = (
                        _text(name_node) if name_node is not None else "default"
                    )

            # export { A, B as C }  /  export { A as default }
            for clause in stmt.named_children:
                if clause.type != "export_clause":
                    continue
                for spec in clause.named_children:
                    if spec.type != "export_specifier":
                        continue
                    name_node = spec.child_by_field_name("name")
                    alias_node = spec.child_by_field_name("alias")
                    if name_node is None:
                        continue
                    local = _text(name_node)
                    parsed.exported_names.add(local)
                    if alias_node is not None and _text(alias_node) == "default":
                        parsed.default_export_name = local

    def _declared_names(self, declaration) -> List[str]:
        if declaration.type in ("lexical_declaration", "variable_declaration"):
            names = []
            for declarator in declaration.named_children:
                if declarator.type != "variable_declarator":
                    continue
                name_node = declarator.child_by_field_name("name")
                if name_node is not None and name_node.type == "identifier":
                    names.append(_text(name_node))
            return names

        name_node = declaration.child_by_field_name("name")
        if name_node is not None:
            return [_text(name_node)]
        return []

    def span(self, node) -> Span:
        # tree-sitter end columns are exclusive and 0-based, i.e. 1-based inclusive
        return Span(
            start_line=node.start_point[0] + 1,
            end_line=node.end_point[0] + 1,
            start_column=node.start_point[1] + 1,
            end_column=node.end_point[1],
        )

    def contains_markup(self, node) -> bool:
        return any(n.type in MARKUP_NODES for n in _walk(node))

    def markup_tags(self, node) -> List[str]:
        tags = {}
        for n in _walk(node):
            if n.type not in ("jsx_opening_element", "jsx_self_closing_element"):
                continue
            name_node = n.child_by_field_name("name")
            if name_node is None:
                continue  # <> fragment
            tags.setdefault("".join(_text(name_node).split()), None)
        return list(tags)

    def hook_calls(self, node) -> List[str]:
        hooks = {}
        for n in _walk(node):
            if n.type != "call_expression":
                continue
            callee = n.child_by_field_name("function")
            if callee is not None and callee.type == "identifier":
                name = _text(callee)
                if is_hook_name(name):
                    hooks.setdefault(name, None)
        return list(hooks)

    def param_names(self, func_node) -> List[str]:
        single = func_node.child_by_field_name("parameter")
        if single is not None:
            return [_text(single)]

        params = func_node.child_by_field_name("parameters")
        if params is None:
            return []

        patterns = []
        for param in params.named_children:
            if param.type in ("required_parameter", "optional_parameter"):
                param = param.child_by_field_name("pattern")
            if param is not None and param.type == "assignment_pattern":
                param = param.child_by_field_name("left")
            if param is not None and param.type != "comment":
                patterns.append(param)

        # ({ user, stats }: Props) -> the destructured members
        if len(patterns) == 1 and patterns[0].type == "object_pattern":
            return self._object_pattern_names(patterns[0])

        names = []
        for pattern in patterns:
            if pattern.type == "identifier":
                names.append(_text(pattern))
            elif pattern.type == "rest_pattern":
                names.append(self._rest_name(pattern))
            elif pattern.type == "object_pattern":
                names.extend(self._object_pattern_names(pattern))
        return names

    def _object_pattern_names(self, pattern) -> List[str]:
        names = []
        for member in pattern.named_children:
            if member.type == "shorthand_property_identifier_pattern":
                names.append(_text(member))
            elif member.type == "pair_pattern":
                key = member.child_by_field_name("key")
                if key is not None:
                    names.append(_text(key))
            elif member.type == "object_assignment_pattern":
                left = member.child_by_field_name("left")
                if left is not None:
                    names.append(_text(left))
            elif member.type == "rest_pattern":
                names.append(self._rest_name(member))
        return names

    def _rest_name(self, pattern) -> str:
        inner = [c for c in pattern.named_children if c.type == "identifier"]
        return "..." + (_text(inner[0]) if inner else "rest")

    def markup_root(self, func_node) -> Optional[MarkupRoot]:
        body = func_node.child_by_field_name("body")
        if body is None:
            return None

        if body.type != "statement_block":
            # const Card = () => ( <div>...</div> )
            expr = _unwrap_parens(body)
            if expr is not None and expr.type in MARKUP_NODES:
                return MarkupRoot(return_line=body.start_point[0] + 1, node=expr)
            return None

        for stmt in body.named_children:
            if stmt.type != "return_statement":
                continue
            values = [c for c in stmt.named_children if c.type != "comment"]
            expr = _unwrap_parens(values[0]) if values else None
            if expr is not None and expr.type in MARKUP_NODES:
                return MarkupRoot(return_line=stmt.start_point[0] + 1, node=expr)
        return None

    def markup_children(self, node) -> List[Any]:
        children = []
        for child in node.named_children:
            if child.type in MARKUP_NODES:
                children.append(child)
            elif child.type == "jsx_expression":
                # {/* Header */} carries no code
                if any(c.type != "comment" for c in child.named_children):
                    children.append(child)
        return children

    def markup_label(self, node, index: int) -> str:
        if node.type == "jsx_expression":
            return f"expression-{index}"

        if node.type == "jsx_self_closing_element":
            opening = node
        else:
            openings = [c for c in node.children if c.type == "jsx_opening_element"]
            opening = openings[0] if openings else None
        if opening is None:
            return f"section-{index}"

        attributes = {}
        for attr in opening.named_children:
            if attr.type != "jsx_attribute":
                continue
            parts = attr.named_children
            if len(parts) < 2:
                continue
            value = self._attribute_string(parts[-1])
            if value is not None:
                attributes[_text(parts[0])] = value

        aria = attributes.get("aria-label")
        if aria and _slug(aria):
            return _slug(aria)

        class_name = attributes.get("className") or attributes.get("class")
        if class_name:
            for token in class_name.split():
                if not UTILITY_CLASS.match(token):
                    return token[:LABEL_LENGTH]

        name_node = opening.child_by_field_name("name")
        tag = _text(name_node) if name_node is not None else "fragment"
        return f"{tag}-{index}"

    def _attribute_string(self, node) -> Optional[str]:
        if node.type == "jsx_expression":
            inner = [c for c in node.named_children if c.type != "comment"]
            if len(inner) != 1:
                return None
            node = inner[0]
        if node.type in ("string", "template_string"):
            return _text(node)[1:-1]
        return None

    def body_open_line(self, func_node) -> Optional[int]:
        body = func_node.child_by_field_name("body")
        if body is None or body.type != "statement_block":
            return None
        return body.start_point[0] + 1

    def body_statements(self, func_node) -> List[Any]:
        body = func_node.child_by_field_name("body")
        if body is None or body.type != "statement_block":
            return []
        return [c for c in body.named_children if c.type != "comment"]

    def statement_shape(self, node) -> str:
        t = node.type
        if t in ("lexical_declaration", "variable_declaration"):
            return "declarations"
        if t == "if_statement":
            return "conditional"
        if t in LOOP_STATEMENTS:
            return "loop"
        if t == "try_statement":
            return "try-block"
        if t == "switch_statement":
            return "switch"
        if t == "return_statement":
            return "return"
        if t in FUNCTION_DECLARATIONS:
            return "helper-function"
        if t == "expression_statement":
            exprs = node.named_children
            if exprs and exprs[0].type == "call_expression":
                callee = exprs[0].child_by_field_name("function")
                if callee is not None and is_hook_name(_text(callee)):
                    return "hook-calls"
        return "statements"
