"""C# backend: syntax tree -> C# code."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from ..context import RenderContext
from ..otree import OTree
from ..renderer import Renderer
from ..syntax import (
    ArrayLiteralExpression,
    AsExpression,
    Block,
    CallExpression,
    ClassDeclaration,
    ConstructorDeclaration,
    ExpressionStatement,
    ForOfStatement,
    FunctionDeclaration,
    Identifier,
    IfStatement,
    InterfaceDeclaration,
    MethodDeclaration,
    MethodSignature,
    NoSubstitutionTemplateLiteral,
    Node,
    ObjectLiteralExpression,
    Parameter,
    PropertyAccessExpression,
    PropertyAssignment,
    PropertyDeclaration,
    PropertySignature,
    ShorthandPropertyAssignment,
    StringLiteral,
    TemplateExpression,
    ThisKeyword,
    TypeNode,
    VariableDeclaration,
    VariableDeclarationList,
)
from ..types import (
    ArrayType,
    NamedType,
    PrimitiveType,
    TypeRef,
    describe,
    map_element_type,
    non_absent_type,
    parameter_accepts_undefined,
    type_contains_undefined,
)
from ..visitor import DefaultVisitor
from .util import escape_string, quote_string, upper_first

# C# reserved words that need escaping with @
_CSHARP_RESERVED = frozenset(
    {
        "abstract",
        "as",
        "base",
        "bool",
        "break",
        "byte",
        "case",
        "catch",
        "char",
        "checked",
        "class",
        "const",
        "continue",
        "decimal",
        "default",
        "delegate",
        "do",
        "double",
        "else",
        "enum",
        "event",
        "explicit",
        "extern",
        "false",
        "finally",
        "fixed",
        "float",
        "for",
        "foreach",
        "goto",
        "if",
        "implicit",
        "in",
        "int",
        "interface",
        "internal",
        "is",
        "lock",
        "long",
        "namespace",
        "new",
        "null",
        "object",
        "operator",
        "out",
        "override",
        "params",
        "private",
        "protected",
        "public",
        "readonly",
        "ref",
        "return",
        "sbyte",
        "sealed",
        "short",
        "sizeof",
        "stackalloc",
        "static",
        "string",
        "struct",
        "switch",
        "this",
        "throw",
        "true",
        "try",
        "typeof",
        "uint",
        "ulong",
        "unchecked",
        "unsafe",
        "ushort",
        "using",
        "virtual",
        "void",
        "volatile",
        "while",
    }
)

# Source builtin type name -> C# type name
_BUILTIN_TYPES: dict[str, str] = {
    "number": "int",
    "string": "string",
    "boolean": "bool",
    "void": "void",
    "any": "object",
    "object": "object",
    "undefined": "object",
    "null": "object",
}

UNKNOWN_TYPE = "???"
UNSUPPORTED_TYPE = "..."
UNKNOWN_LOOP_VARIABLE = "???"
PLACEHOLDER_STRUCT = "Struct"
PLACEHOLDER_CLASS = "MyClass"


@dataclass(frozen=True)
class CSharpContext(RenderContext):
    """Flags the C# rules pass down to their subtrees."""

    # Name the constructor is rendered with
    current_class_name: str | None = None
    # Member position: identifiers render PascalCase
    property_or_method: bool = False
    # Members of a data-only interface rendered as a class
    in_struct_interface: bool = False
    # Property assignments render as { "key", value } pairs
    in_key_value_list: bool = False
    # A string literal sits where an identifier is required (object literal key)
    string_as_identifier: bool = False
    # An identifier sits where a string is required (dictionary key)
    identifier_as_string: bool = False
    # Object literal of unknown type: struct initializer rather than dictionary
    prefer_object_literal_as_struct: bool = True


CSharpRenderer = Renderer[CSharpContext]


# ============================================================
# TYPE MAPPING
# ============================================================


def csharp_type_name(builtin_name: str | None) -> str:
    """C# spelling of a source builtin; unknown builtins become a placeholder."""
    if builtin_name is None:
        return UNKNOWN_TYPE
    return _BUILTIN_TYPES.get(builtin_name, UNKNOWN_TYPE)


def type_name_from_type(typ: TypeRef) -> str:
    match typ:
        case NamedType(name=name, alias=alias):
            return alias if alias else name
        case PrimitiveType(name=name):
            return csharp_type_name(name)
        case _:
            return UNKNOWN_TYPE


def with_optional_marker(name: str) -> str:
    """Append the nullable marker unless it is already there."""
    if name.endswith("?"):
        return name
    return name + "?"


def render_type(node: Node, typ: TypeRef, question_mark: bool, renderer: CSharpRenderer) -> str:
    """C# spelling of a source type at a use site.

    question_mark forces the nullable marker (a `name?:` declaration). A union
    that does not reduce to one concrete member is reported on node and
    rendered as a placeholder.
    """
    concrete = non_absent_type(typ)
    if concrete is None:
        renderer.report(node, "Type unions in examples are not supported: " + describe(typ))
        return UNSUPPORTED_TYPE
    element = map_element_type(concrete)
    if element is not None:
        name = "IDictionary<string, " + render_type(node, element, False, renderer) + ">"
    elif isinstance(concrete, ArrayType):
        name = render_type(node, concrete.element, False, renderer) + "[]"
    else:
        name = type_name_from_type(concrete)
    if type_contains_undefined(typ) or question_mark:
        name = with_optional_marker(name)
    return name


def render_type_node(
    type_node: TypeNode | None, question_mark: bool, renderer: CSharpRenderer, missing: str = "void"
) -> str:
    """C# spelling of a type annotation; missing is used when there is none."""
    if type_node is None:
        return missing
    typ = renderer.type_of_type(type_node)
    if typ is None:
        return report_unresolved(type_node, renderer)
    return render_type(type_node, typ, question_mark, renderer)


def report_unresolved(type_node: TypeNode, renderer: CSharpRenderer) -> str:
    """Report an annotation the checker could not resolve; returns the placeholder."""
    written = renderer.text_of(type_node) or "<unknown>"
    renderer.report(type_node, "Unable to resolve type annotation: " + written)
    return UNKNOWN_TYPE


# ============================================================
# VISITOR
# ============================================================


def _safe_name(name: str) -> str:
    """Escape C# reserved words with @ prefix."""
    if name in _CSHARP_RESERVED:
        return "@" + name
    return name


def _escape_interpolated(text: str) -> str:
    """Escape literal text for an interpolated string."""
    return escape_string(text).replace("{", "{{").replace("}", "}}")


def _body_indent(statement: Node | None, indent: int) -> int:
    """Braces carry their own layout; a bare statement body is indented."""
    if statement is None or isinstance(statement, Block):
        return 0
    return indent


FunctionLike = Union[FunctionDeclaration, MethodDeclaration, ConstructorDeclaration]


class CSharpVisitor(DefaultVisitor[CSharpContext]):
    """Render rules for C#."""

    name = "csharp"

    def __init__(self, prefer_object_literal_as_struct: bool = True, indent: int = 4) -> None:
        self.indent: int = indent
        self.default_context: CSharpContext = CSharpContext(
            prefer_object_literal_as_struct=prefer_object_literal_as_struct
        )

    # --- Names and literals ---

    def identifier(self, node: Identifier | StringLiteral, renderer: CSharpRenderer) -> OTree:
        text = node.text
        ctx = renderer.current_context
        if ctx.identifier_as_string:
            return OTree([quote_string(text)])
        # Uppercase methods and properties, leave the rest as-is
        if ctx.property_or_method:
            return OTree([_safe_name(upper_first(text))])
        if isinstance(node, Identifier) and text == "undefined":
            return OTree(["null"])
        return OTree([_safe_name(text)])

    def string_literal(self, node: StringLiteral, renderer: CSharpRenderer) -> OTree:
        if renderer.current_context.string_as_identifier:
            return self.identifier(node, renderer)
        return OTree([quote_string(node.text)])

    def no_substitution_template_literal(self, node: NoSubstitutionTemplateLiteral, renderer: CSharpRenderer) -> OTree:
        return OTree([quote_string(node.text)])

    def template_expression(self, node: TemplateExpression, renderer: CSharpRenderer) -> OTree:
        parts = ['$"']
        if node.head:
            parts.append(_escape_interpolated(node.head))
        for span in node.spans:
            parts.append("{" + renderer.text_of(span.expression) + "}")
            if span.literal:
                parts.append(_escape_interpolated(span.literal))
        parts.append('"')
        return OTree(["".join(parts)])

    # --- Functions ---

    def function_declaration(self, node: FunctionDeclaration, renderer: CSharpRenderer) -> OTree:
        return self.function_like(node, renderer)

    def method_declaration(self, node: MethodDeclaration, renderer: CSharpRenderer) -> OTree:
        return self.function_like(node, renderer)

    def constructor_declaration(self, node: ConstructorDeclaration, renderer: CSharpRenderer) -> OTree:
        return self.function_like(node, renderer, is_constructor=True)

    def function_like(self, node: FunctionLike, renderer: CSharpRenderer, is_constructor: bool = False) -> OTree:
        if is_constructor:
            head = ["public ", renderer.current_context.current_class_name or PLACEHOLDER_CLASS]
        else:
            method_name = renderer.update_context(property_or_method=True).convert(node.name)
            return_type = render_type_node(node.type, False, renderer)
            head = ["public ", return_type, " ", method_name]
        params = OTree([], renderer.convert_all(node.parameters), separator=", ")
        if node.body is None:
            return OTree([*head, "(", params, ");"], can_break_line=True)
        return OTree([*head, "(", params, ") "], [renderer.convert(node.body)], can_break_line=True)

    def parameter_declaration(self, node: Parameter, renderer: CSharpRenderer) -> OTree:
        typ = renderer.type_of_type(node.type) if node.type is not None else None
        init_type = renderer.type_of_expression(node.initializer) if node.initializer is not None else None
        if node.type is not None:
            rendered_type = render_type_node(node.type, node.question_token, renderer)
        elif init_type is not None:
            rendered_type = render_type(node, init_type, node.question_token, renderer)
        else:
            rendered_type = "object"
        default = []
        if parameter_accepts_undefined(node, typ):
            default = [" = ", renderer.convert(node.initializer) if node.initializer is not None else "null"]
        return OTree([rendered_type, " ", renderer.convert(node.name), *default])

    def print_statement(self, node: CallExpression, renderer: CSharpRenderer) -> OTree:
        args = node.arguments
        if len(args) <= 1:
            rendered = renderer.convert_all(args)
        else:
            slots = [OTree(["{", renderer.convert(a), "}"]) for a in args]
            rendered = ['$"', OTree([], slots, separator=" "), '"']
        return OTree(["Console.WriteLine(", *rendered, ")"])

    def regular_call_expression(self, node: CallExpression, renderer: CSharpRenderer) -> OTree:
        return OTree(
            [
                renderer.update_context(property_or_method=True).convert(node.expression),
                "(",
                OTree([], renderer.convert_all(node.arguments), separator=", "),
                ")",
            ]
        )

    # --- Expressions ---

    def property_access_expression(self, node: PropertyAccessExpression, renderer: CSharpRenderer) -> OTree:
        if isinstance(node.expression, ThisKeyword) or renderer.text_of(node.expression) == "this":
            receiver = []
        else:
            receiver = [renderer.update_context(property_or_method=False).convert(node.expression), "."]
        return OTree([*receiver, renderer.update_context(property_or_method=True).convert(node.name)])

    def as_expression(self, node: AsExpression, renderer: CSharpRenderer) -> OTree:
        return OTree(["(", render_type_node(node.type, False, renderer), ")", renderer.convert(node.expression)])

    def array_literal_expression(self, node: ArrayLiteralExpression, renderer: CSharpRenderer) -> OTree:
        return self._initializer("new []", renderer.convert_all(node.elements))

    def unknown_type_object_literal_expression(self, node: ObjectLiteralExpression, renderer: CSharpRenderer) -> OTree:
        if renderer.current_context.prefer_object_literal_as_struct:
            # Type information missing and from context we prefer a struct
            return self._initializer("new " + PLACEHOLDER_STRUCT, renderer.convert_all(node.properties))
        # Type information missing and from context we prefer a map
        return self.key_value_object_literal_expression(node, None, renderer)

    def known_struct_object_literal_expression(
        self, node: ObjectLiteralExpression, struct_type: TypeRef, renderer: CSharpRenderer
    ) -> OTree:
        return self._initializer("new " + type_name_from_type(struct_type), renderer.convert_all(node.properties))

    def key_value_object_literal_expression(
        self, node: ObjectLiteralExpression, value_type: TypeRef | None, renderer: CSharpRenderer
    ) -> OTree:
        value_name = render_type(node, value_type, False, renderer) if value_type is not None else "object"
        entries = renderer.update_context(in_key_value_list=True).convert_all(node.properties)
        return self._initializer("new Dictionary<string, " + value_name + ">", entries)

    def property_assignment(self, node: PropertyAssignment, renderer: CSharpRenderer) -> OTree:
        return self.render_property_assignment(node.name, node.initializer, renderer)

    def shorthand_property_assignment(self, node: ShorthandPropertyAssignment, renderer: CSharpRenderer) -> OTree:
        return self.render_property_assignment(node.name, node.name, renderer)

    def render_property_assignment(self, key: Node, value: Node, renderer: CSharpRenderer) -> OTree:
        if renderer.current_context.in_key_value_list:
            return OTree(
                [
                    "{ ",
                    renderer.update_context(property_or_method=False, identifier_as_string=True).convert(key),
                    ", ",
                    renderer.update_context(in_key_value_list=False).convert(value),
                    " }",
                ],
                can_break_line=True,
            )
        return OTree(
            [
                renderer.update_context(property_or_method=True, string_as_identifier=True).convert(key),
                " = ",
                renderer.convert(value),
            ],
            can_break_line=True,
        )

    def _initializer(self, head: str, children: list[OTree]) -> OTree:
        """`head { a, b }` collection/object initializer."""
        if all(c.is_empty() for c in children):
            return OTree([head, " { }"])
        return OTree([head, " { "], children, separator=", ", suffix=" }", indent=self.indent)

    # --- Statements ---

    def block(self, node: Block, renderer: CSharpRenderer) -> OTree:
        return OTree(["\n{"], renderer.convert_all(node.statements), indent=self.indent, suffix="\n}")

    def expression_statement(self, node: ExpressionStatement, renderer: CSharpRenderer) -> OTree:
        return OTree([renderer.convert(node.expression), ";"], can_break_line=True)

    def if_statement(self, node: IfStatement, renderer: CSharpRenderer) -> OTree:
        if_stmt = OTree(
            ["if (", renderer.convert(node.expression), ") "],
            [renderer.convert(node.then_statement)],
            indent=_body_indent(node.then_statement, self.indent),
            can_break_line=True,
        )
        if node.else_statement is None:
            return if_stmt
        if isinstance(node.else_statement, IfStatement):
            else_stmt = OTree(["else ", renderer.convert(node.else_statement)], can_break_line=True)
        else:
            else_stmt = OTree(
                ["else "],
                [renderer.convert(node.else_statement)],
                indent=_body_indent(node.else_statement, self.indent),
                can_break_line=True,
            )
        return OTree([], [if_stmt, else_stmt], separator="\n", can_break_line=True)

    def for_of_statement(self, node: ForOfStatement, renderer: CSharpRenderer) -> OTree:
        # "for (const x of xs)" is the only shape with a direct foreach equivalent
        variable_name = UNKNOWN_LOOP_VARIABLE
        initializer = node.initializer
        if isinstance(initializer, VariableDeclarationList) and len(initializer.declarations) == 1:
            variable_name = renderer.text_of(initializer.declarations[0].name)
        else:
            renderer.report(initializer, "Unrecognized for-of loop shape, expected a single declared variable")
        return OTree(
            ["foreach (var ", variable_name, " in ", renderer.convert(node.expression), ") "],
            [renderer.convert(node.statement)],
            indent=_body_indent(node.statement, self.indent),
            can_break_line=True,
        )

    def variable_declaration(self, node: VariableDeclaration, renderer: CSharpRenderer) -> OTree:
        typ = None
        if node.type is not None:
            typ = renderer.type_of_type(node.type)
            if typ is None:
                report_unresolved(node.type, renderer)
        if typ is None and node.initializer is not None:
            typ = renderer.type_of_expression(node.initializer)
        rendered_type = render_type(node, typ, False, renderer) if typ is not None else "var"
        if rendered_type.rstrip("?") == "object":
            rendered_type = "var"
        if node.initializer is None:
            # No initializer to infer from
            if rendered_type == "var":
                rendered_type = "object"
            return OTree([rendered_type, " ", renderer.convert(node.name), ";"], can_break_line=True)
        return OTree(
            [
                rendered_type,
                " ",
                renderer.convert(node.name),
                " = ",
                renderer.update_context(prefer_object_literal_as_struct=False).convert(node.initializer),
                ";",
            ],
            can_break_line=True,
        )

    # --- Types and members ---

    def class_declaration(self, node: ClassDeclaration, renderer: CSharpRenderer) -> OTree:
        members = renderer.update_context(current_class_name=renderer.text_of(node.name))
        return OTree(
            ["class ", renderer.convert(node.name), *self.class_heritage(node, renderer), "\n{"],
            members.convert_all(node.members),
            indent=self.indent,
            can_break_line=True,
            suffix="\n}",
        )

    def struct_interface_declaration(self, node: InterfaceDeclaration, renderer: CSharpRenderer) -> OTree:
        return OTree(
            ["class ", renderer.convert(node.name), *self.class_heritage(node, renderer), "\n{"],
            renderer.update_context(in_struct_interface=True).convert_all(node.members),
            indent=self.indent,
            can_break_line=True,
            suffix="\n}",
        )

    def regular_interface_declaration(self, node: InterfaceDeclaration, renderer: CSharpRenderer) -> OTree:
        return OTree(
            ["interface ", renderer.convert(node.name), *self.class_heritage(node, renderer), "\n{"],
            renderer.update_context(in_struct_interface=False).convert_all(node.members),
            indent=self.indent,
            can_break_line=True,
            suffix="\n}",
        )

    def property_signature(self, node: PropertySignature, renderer: CSharpRenderer) -> OTree:
        rendered_type = render_type_node(node.type, node.question_token, renderer, missing="object")
        name = renderer.update_context(property_or_method=True).convert(node.name)
        if renderer.current_context.in_struct_interface:
            return OTree(["public ", rendered_type, " ", name, " { get; set; }"], can_break_line=True)
        return OTree([rendered_type, " ", name, " { get; }"], can_break_line=True)

    def method_signature(self, node: MethodSignature, renderer: CSharpRenderer) -> OTree:
        return OTree(
            [
                render_type_node(node.type, False, renderer),
                " ",
                renderer.update_context(property_or_method=True).convert(node.name),
                "(",
                OTree([], renderer.convert_all(node.parameters), separator=", "),
                ");",
            ],
            can_break_line=True,
        )

    def property_declaration(self, node: PropertyDeclaration, renderer: CSharpRenderer) -> OTree:
        typ = renderer.type_of_type(node.type) if node.type is not None else None
        if node.type is not None and typ is None:
            report_unresolved(node.type, renderer)
        if typ is None and node.initializer is not None:
            typ = renderer.type_of_expression(node.initializer)
        rendered_type = render_type(node, typ, node.question_token, renderer) if typ is not None else "object"
        name = renderer.update_context(property_or_method=True).convert(node.name)
        initializer = []
        if node.initializer is not None:
            initializer = [" = ", renderer.convert(node.initializer), ";"]
        return OTree(["public ", rendered_type, " ", name, " { get; set; }", *initializer], can_break_line=True)

    def class_heritage(self, node: ClassDeclaration | InterfaceDeclaration, renderer: CSharpRenderer) -> list:
        heritage = [renderer.convert(t.expression) for clause in node.heritage_clauses for t in clause.types]
        if not heritage:
            return []
        return [" : ", OTree([], heritage, separator=", ")]
