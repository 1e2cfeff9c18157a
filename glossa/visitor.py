"""Default visitor - the rule table every backend starts from.

RULES maps each syntax kind to the name of the method that renders it. A
backend subclasses DefaultVisitor, supplies a default context, and overrides
the rules whose output differs in its language. Rules a backend leaves alone
either render in the C-family syntax most targets share or, for constructs
with no neutral form, report a diagnostic and echo the source text.

A node whose kind has no entry at all is a defect in the table and raises
UnsupportedNodeError.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, Mapping, TypeVar

from .context import RenderContext, merge
from .diagnostics import UnsupportedNodeError
from .otree import OTree
from .syntax import (
    BinaryExpression,
    CallExpression,
    ConditionalExpression,
    ElementAccessExpression,
    ExpressionWithTypeArguments,
    InterfaceDeclaration,
    NewExpression,
    Node,
    ObjectLiteralExpression,
    ParenthesizedExpression,
    PrefixUnaryExpression,
    PropertyAccessExpression,
    PropertySignature,
    ReturnStatement,
    SourceFile,
    SyntaxKind,
    VariableDeclarationList,
    VariableStatement,
)
from .types import PrimitiveType, TypeRef, is_struct_type, map_element_type, non_absent_type

if TYPE_CHECKING:
    from .renderer import Renderer

C = TypeVar("C", bound=RenderContext)

# Source operators whose spelling differs in most C-family targets
_BINARY_OPERATORS: dict[str, str] = {
    "===": "==",
    "!==": "!=",
}


class DefaultVisitor(Generic[C]):
    """Language-neutral rendering rules."""

    name: str = "default"
    default_context: C

    RULES: dict[SyntaxKind, str] = {
        SyntaxKind.SOURCE_FILE: "source_file",
        SyntaxKind.BLOCK: "block",
        SyntaxKind.EXPRESSION_STATEMENT: "expression_statement",
        SyntaxKind.VARIABLE_STATEMENT: "variable_statement",
        SyntaxKind.VARIABLE_DECLARATION_LIST: "variable_declaration_list",
        SyntaxKind.VARIABLE_DECLARATION: "variable_declaration",
        SyntaxKind.IF_STATEMENT: "if_statement",
        SyntaxKind.FOR_OF_STATEMENT: "for_of_statement",
        SyntaxKind.RETURN_STATEMENT: "return_statement",
        SyntaxKind.FUNCTION_DECLARATION: "function_declaration",
        SyntaxKind.METHOD_DECLARATION: "method_declaration",
        SyntaxKind.CONSTRUCTOR: "constructor_declaration",
        SyntaxKind.PARAMETER: "parameter_declaration",
        SyntaxKind.CLASS_DECLARATION: "class_declaration",
        SyntaxKind.INTERFACE_DECLARATION: "interface_declaration",
        SyntaxKind.PROPERTY_SIGNATURE: "property_signature",
        SyntaxKind.METHOD_SIGNATURE: "method_signature",
        SyntaxKind.PROPERTY_DECLARATION: "property_declaration",
        SyntaxKind.EXPRESSION_WITH_TYPE_ARGUMENTS: "expression_with_type_arguments",
        SyntaxKind.IDENTIFIER: "identifier",
        SyntaxKind.STRING_LITERAL: "string_literal",
        SyntaxKind.NO_SUBSTITUTION_TEMPLATE_LITERAL: "no_substitution_template_literal",
        SyntaxKind.NUMERIC_LITERAL: "numeric_literal",
        SyntaxKind.TRUE_KEYWORD: "true_keyword",
        SyntaxKind.FALSE_KEYWORD: "false_keyword",
        SyntaxKind.NULL_KEYWORD: "null_keyword",
        SyntaxKind.THIS_KEYWORD: "this_keyword",
        SyntaxKind.TEMPLATE_EXPRESSION: "template_expression",
        SyntaxKind.PROPERTY_ACCESS_EXPRESSION: "property_access_expression",
        SyntaxKind.ELEMENT_ACCESS_EXPRESSION: "element_access_expression",
        SyntaxKind.CALL_EXPRESSION: "call_expression",
        SyntaxKind.NEW_EXPRESSION: "new_expression",
        SyntaxKind.OBJECT_LITERAL_EXPRESSION: "object_literal_expression",
        SyntaxKind.PROPERTY_ASSIGNMENT: "property_assignment",
        SyntaxKind.SHORTHAND_PROPERTY_ASSIGNMENT: "shorthand_property_assignment",
        SyntaxKind.ARRAY_LITERAL_EXPRESSION: "array_literal_expression",
        SyntaxKind.AS_EXPRESSION: "as_expression",
        SyntaxKind.PARENTHESIZED_EXPRESSION: "parenthesized_expression",
        SyntaxKind.BINARY_EXPRESSION: "binary_expression",
        SyntaxKind.PREFIX_UNARY_EXPRESSION: "prefix_unary_expression",
        SyntaxKind.CONDITIONAL_EXPRESSION: "conditional_expression",
    }

    def merge_context(self, old: C, update: Mapping[str, Any]) -> C:
        return merge(old, update)

    def visit(self, node: Node, renderer: Renderer[C]) -> OTree:
        rule = self.RULES.get(node.kind)
        if rule is None:
            raise UnsupportedNodeError(
                node, f"{self.name} visitor has no rule for {node.kind.value}"
            )
        return getattr(self, rule)(node, renderer)

    def not_implemented(self, node: Node, renderer: Renderer[C]) -> OTree:
        """Placeholder for constructs this backend cannot express."""
        renderer.report(node, f"This construct is not supported by the {self.name} backend: {node.kind.value}")
        return OTree([renderer.text_of(node)])

    # --- Structure ---

    def source_file(self, node: SourceFile, renderer: Renderer[C]) -> OTree:
        return OTree([], renderer.convert_all(node.statements))

    def variable_statement(self, node: VariableStatement, renderer: Renderer[C]) -> OTree:
        return renderer.convert(node.declaration_list)

    def variable_declaration_list(self, node: VariableDeclarationList, renderer: Renderer[C]) -> OTree:
        return OTree([], renderer.convert_all(node.declarations))

    def return_statement(self, node: ReturnStatement, renderer: Renderer[C]) -> OTree:
        if node.expression is None:
            return OTree(["return;"], can_break_line=True)
        return OTree(["return ", renderer.convert(node.expression), ";"], can_break_line=True)

    def expression_with_type_arguments(self, node: ExpressionWithTypeArguments, renderer: Renderer[C]) -> OTree:
        return renderer.convert(node.expression)

    # --- Simple expressions ---

    def numeric_literal(self, node: Node, renderer: Renderer[C]) -> OTree:
        return OTree([renderer.text_of(node)])

    def true_keyword(self, node: Node, renderer: Renderer[C]) -> OTree:
        return OTree(["true"])

    def false_keyword(self, node: Node, renderer: Renderer[C]) -> OTree:
        return OTree(["false"])

    def null_keyword(self, node: Node, renderer: Renderer[C]) -> OTree:
        return OTree(["null"])

    def this_keyword(self, node: Node, renderer: Renderer[C]) -> OTree:
        return OTree(["this"])

    def parenthesized_expression(self, node: ParenthesizedExpression, renderer: Renderer[C]) -> OTree:
        return OTree(["(", renderer.convert(node.expression), ")"])

    def binary_expression(self, node: BinaryExpression, renderer: Renderer[C]) -> OTree:
        operator = _BINARY_OPERATORS.get(node.operator, node.operator)
        return OTree([renderer.convert(node.left), " ", operator, " ", renderer.convert(node.right)])

    def prefix_unary_expression(self, node: PrefixUnaryExpression, renderer: Renderer[C]) -> OTree:
        return OTree([node.operator, renderer.convert(node.operand)])

    def conditional_expression(self, node: ConditionalExpression, renderer: Renderer[C]) -> OTree:
        return OTree(
            [
                renderer.convert(node.condition),
                " ? ",
                renderer.convert(node.when_true),
                " : ",
                renderer.convert(node.when_false),
            ]
        )

    def element_access_expression(self, node: ElementAccessExpression, renderer: Renderer[C]) -> OTree:
        return OTree([renderer.convert(node.expression), "[", renderer.convert(node.argument), "]"])

    def new_expression(self, node: NewExpression, renderer: Renderer[C]) -> OTree:
        return OTree(
            [
                "new ",
                renderer.convert(node.expression),
                "(",
                OTree([], renderer.convert_all(node.arguments), separator=", "),
                ")",
            ]
        )

    # --- Dispatching rules ---

    def call_expression(self, node: CallExpression, renderer: Renderer[C]) -> OTree:
        if is_print_call(node, renderer):
            return self.print_statement(node, renderer)
        return self.regular_call_expression(node, renderer)

    def object_literal_expression(self, node: ObjectLiteralExpression, renderer: Renderer[C]) -> OTree:
        typ = renderer.type_of_expression(node)
        if typ is not None:
            typ = non_absent_type(typ)
        if is_struct_type(typ):
            return self.known_struct_object_literal_expression(node, typ, renderer)
        if typ is None or isinstance(typ, PrimitiveType):
            return self.unknown_type_object_literal_expression(node, renderer)
        return self.key_value_object_literal_expression(node, map_element_type(typ), renderer)

    def interface_declaration(self, node: InterfaceDeclaration, renderer: Renderer[C]) -> OTree:
        if is_struct_interface(node):
            return self.struct_interface_declaration(node, renderer)
        return self.regular_interface_declaration(node, renderer)

    # --- Backend hooks ---

    def print_statement(self, node: CallExpression, renderer: Renderer[C]) -> OTree:
        return self.regular_call_expression(node, renderer)

    def regular_call_expression(self, node: CallExpression, renderer: Renderer[C]) -> OTree:
        return self.not_implemented(node, renderer)

    def known_struct_object_literal_expression(
        self, node: ObjectLiteralExpression, struct_type: TypeRef, renderer: Renderer[C]
    ) -> OTree:
        return self.not_implemented(node, renderer)

    def key_value_object_literal_expression(
        self, node: ObjectLiteralExpression, value_type: TypeRef | None, renderer: Renderer[C]
    ) -> OTree:
        return self.not_implemented(node, renderer)

    def unknown_type_object_literal_expression(self, node: ObjectLiteralExpression, renderer: Renderer[C]) -> OTree:
        return self.not_implemented(node, renderer)

    def struct_interface_declaration(self, node: InterfaceDeclaration, renderer: Renderer[C]) -> OTree:
        return self.not_implemented(node, renderer)

    def regular_interface_declaration(self, node: InterfaceDeclaration, renderer: Renderer[C]) -> OTree:
        return self.not_implemented(node, renderer)

    def block(self, node: Node, renderer: Renderer[C]) -> OTree:
        return self.not_implemented(node, renderer)

    def expression_statement(self, node: Node, renderer: Renderer[C]) -> OTree:
        return self.not_implemented(node, renderer)

    def variable_declaration(self, node: Node, renderer: Renderer[C]) -> OTree:
        return self.not_implemented(node, renderer)

    def if_statement(self, node: Node, renderer: Renderer[C]) -> OTree:
        return self.not_implemented(node, renderer)

    def for_of_statement(self, node: Node, renderer: Renderer[C]) -> OTree:
        return self.not_implemented(node, renderer)

    def function_declaration(self, node: Node, renderer: Renderer[C]) -> OTree:
        return self.not_implemented(node, renderer)

    def method_declaration(self, node: Node, renderer: Renderer[C]) -> OTree:
        return self.not_implemented(node, renderer)

    def constructor_declaration(self, node: Node, renderer: Renderer[C]) -> OTree:
        return self.not_implemented(node, renderer)

    def parameter_declaration(self, node: Node, renderer: Renderer[C]) -> OTree:
        return self.not_implemented(node, renderer)

    def class_declaration(self, node: Node, renderer: Renderer[C]) -> OTree:
        return self.not_implemented(node, renderer)

    def property_signature(self, node: Node, renderer: Renderer[C]) -> OTree:
        return self.not_implemented(node, renderer)

    def method_signature(self, node: Node, renderer: Renderer[C]) -> OTree:
        return self.not_implemented(node, renderer)

    def property_declaration(self, node: Node, renderer: Renderer[C]) -> OTree:
        return self.not_implemented(node, renderer)

    def identifier(self, node: Node, renderer: Renderer[C]) -> OTree:
        return self.not_implemented(node, renderer)

    def string_literal(self, node: Node, renderer: Renderer[C]) -> OTree:
        return self.not_implemented(node, renderer)

    def no_substitution_template_literal(self, node: Node, renderer: Renderer[C]) -> OTree:
        return self.not_implemented(node, renderer)

    def template_expression(self, node: Node, renderer: Renderer[C]) -> OTree:
        return self.not_implemented(node, renderer)

    def property_access_expression(self, node: Node, renderer: Renderer[C]) -> OTree:
        return self.not_implemented(node, renderer)

    def property_assignment(self, node: Node, renderer: Renderer[C]) -> OTree:
        return self.not_implemented(node, renderer)

    def shorthand_property_assignment(self, node: Node, renderer: Renderer[C]) -> OTree:
        return self.not_implemented(node, renderer)

    def array_literal_expression(self, node: Node, renderer: Renderer[C]) -> OTree:
        return self.not_implemented(node, renderer)

    def as_expression(self, node: Node, renderer: Renderer[C]) -> OTree:
        return self.not_implemented(node, renderer)


def is_print_call(node: CallExpression, renderer: Renderer[Any]) -> bool:
    """`console.log(...)`."""
    callee = node.expression
    return isinstance(callee, PropertyAccessExpression) and renderer.text_of(callee) == "console.log"


def is_struct_interface(node: InterfaceDeclaration) -> bool:
    """An interface that only carries data (every member is a property)."""
    return all(isinstance(m, PropertySignature) for m in node.members)
