"""Source syntax tree - the node shapes an external parser hands to the engine.

Nodes are owned by the frontend that built them; the engine only reads them.
Expression and type-annotation nodes carry the checker's resolved type in
`typ` (None when the checker had nothing to say).
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import ClassVar, Iterator

from .types import TypeRef, describe


# ============================================================
# POSITION
# ============================================================


@dataclass(unsafe_hash=True)
class Pos:
    """Source position. line is 1-indexed (0 = unknown), col is 0-indexed."""

    line: int
    col: int


def pos_unknown() -> Pos:
    """Factory for unknown source position."""
    return Pos(0, 0)


# ============================================================
# KINDS
# ============================================================


class SyntaxKind(Enum):
    SOURCE_FILE = "SourceFile"
    BLOCK = "Block"
    EXPRESSION_STATEMENT = "ExpressionStatement"
    VARIABLE_STATEMENT = "VariableStatement"
    VARIABLE_DECLARATION_LIST = "VariableDeclarationList"
    VARIABLE_DECLARATION = "VariableDeclaration"
    IF_STATEMENT = "IfStatement"
    FOR_OF_STATEMENT = "ForOfStatement"
    RETURN_STATEMENT = "ReturnStatement"
    FUNCTION_DECLARATION = "FunctionDeclaration"
    METHOD_DECLARATION = "MethodDeclaration"
    CONSTRUCTOR = "Constructor"
    PARAMETER = "Parameter"
    CLASS_DECLARATION = "ClassDeclaration"
    INTERFACE_DECLARATION = "InterfaceDeclaration"
    PROPERTY_SIGNATURE = "PropertySignature"
    METHOD_SIGNATURE = "MethodSignature"
    PROPERTY_DECLARATION = "PropertyDeclaration"
    HERITAGE_CLAUSE = "HeritageClause"
    EXPRESSION_WITH_TYPE_ARGUMENTS = "ExpressionWithTypeArguments"
    TYPE_NODE = "TypeNode"
    IDENTIFIER = "Identifier"
    STRING_LITERAL = "StringLiteral"
    NUMERIC_LITERAL = "NumericLiteral"
    TRUE_KEYWORD = "TrueKeyword"
    FALSE_KEYWORD = "FalseKeyword"
    NULL_KEYWORD = "NullKeyword"
    THIS_KEYWORD = "ThisKeyword"
    TEMPLATE_EXPRESSION = "TemplateExpression"
    TEMPLATE_SPAN = "TemplateSpan"
    NO_SUBSTITUTION_TEMPLATE_LITERAL = "NoSubstitutionTemplateLiteral"
    PROPERTY_ACCESS_EXPRESSION = "PropertyAccessExpression"
    ELEMENT_ACCESS_EXPRESSION = "ElementAccessExpression"
    CALL_EXPRESSION = "CallExpression"
    NEW_EXPRESSION = "NewExpression"
    OBJECT_LITERAL_EXPRESSION = "ObjectLiteralExpression"
    PROPERTY_ASSIGNMENT = "PropertyAssignment"
    SHORTHAND_PROPERTY_ASSIGNMENT = "ShorthandPropertyAssignment"
    ARRAY_LITERAL_EXPRESSION = "ArrayLiteralExpression"
    AS_EXPRESSION = "AsExpression"
    PARENTHESIZED_EXPRESSION = "ParenthesizedExpression"
    BINARY_EXPRESSION = "BinaryExpression"
    PREFIX_UNARY_EXPRESSION = "PrefixUnaryExpression"
    CONDITIONAL_EXPRESSION = "ConditionalExpression"


# ============================================================
# BASE NODES
# ============================================================


@dataclass(eq=False, kw_only=True)
class Node:
    """Base for all syntax nodes. Abstract.

    Nodes compare and hash by identity: two structurally equal subtrees at
    different source positions are different nodes.
    """

    kind: ClassVar[SyntaxKind]

    pos: Pos = field(default_factory=pos_unknown)
    source: str = ""  # Source text span, "" if the frontend did not record one

    def children(self) -> Iterator[Node]:
        """Yield child nodes in field order."""
        for f in fields(self):
            if f.name in ("pos", "source", "typ"):
                continue
            value = getattr(self, f.name)
            if isinstance(value, Node):
                yield value
            elif isinstance(value, list):
                for item in value:
                    if isinstance(item, Node):
                        yield item

    def declared_name(self) -> str | None:
        """Name introduced by a declaration node, or None."""
        name = getattr(self, "name", None)
        if isinstance(name, Identifier):
            return name.text
        if isinstance(name, StringLiteral):
            return name.text
        return None


@dataclass(eq=False, kw_only=True)
class Expression(Node):
    """Base for all expressions. typ is the checker-resolved type, if any."""

    typ: TypeRef | None = None


@dataclass(eq=False, kw_only=True)
class Statement(Node):
    """Base for all statements."""


@dataclass(eq=False)
class TypeNode(Node):
    """A type annotation as written (`string`, `Foo | undefined`, ...)."""

    kind = SyntaxKind.TYPE_NODE

    typ: TypeRef | None = None

    def __post_init__(self) -> None:
        if not self.source and self.typ is not None:
            self.source = describe(self.typ)


# ============================================================
# EXPRESSIONS
# ============================================================


@dataclass(eq=False)
class Identifier(Expression):
    kind = SyntaxKind.IDENTIFIER

    text: str

    def __post_init__(self) -> None:
        if not self.source:
            self.source = self.text


@dataclass(eq=False)
class StringLiteral(Expression):
    """String literal; text is the cooked (unescaped) value."""

    kind = SyntaxKind.STRING_LITERAL

    text: str

    def __post_init__(self) -> None:
        if not self.source:
            self.source = '"' + self.text.replace("\\", "\\\\").replace('"', '\\"') + '"'


@dataclass(eq=False)
class NumericLiteral(Expression):
    kind = SyntaxKind.NUMERIC_LITERAL

    text: str

    def __post_init__(self) -> None:
        if not self.source:
            self.source = self.text


@dataclass(eq=False)
class TrueKeyword(Expression):
    kind = SyntaxKind.TRUE_KEYWORD


@dataclass(eq=False)
class FalseKeyword(Expression):
    kind = SyntaxKind.FALSE_KEYWORD


@dataclass(eq=False)
class NullKeyword(Expression):
    kind = SyntaxKind.NULL_KEYWORD


@dataclass(eq=False)
class ThisKeyword(Expression):
    kind = SyntaxKind.THIS_KEYWORD


@dataclass(eq=False)
class TemplateSpan(Node):
    """One `${expression}literal` piece of a template string."""

    kind = SyntaxKind.TEMPLATE_SPAN

    expression: Expression
    literal: str


@dataclass(eq=False)
class TemplateExpression(Expression):
    """`head${a}mid${b}tail` - head is the literal text before the first span."""

    kind = SyntaxKind.TEMPLATE_EXPRESSION

    head: str
    spans: list[TemplateSpan]


@dataclass(eq=False)
class NoSubstitutionTemplateLiteral(Expression):
    kind = SyntaxKind.NO_SUBSTITUTION_TEMPLATE_LITERAL

    text: str


@dataclass(eq=False)
class PropertyAccessExpression(Expression):
    kind = SyntaxKind.PROPERTY_ACCESS_EXPRESSION

    expression: Expression
    name: Identifier


@dataclass(eq=False)
class ElementAccessExpression(Expression):
    kind = SyntaxKind.ELEMENT_ACCESS_EXPRESSION

    expression: Expression
    argument: Expression


@dataclass(eq=False)
class CallExpression(Expression):
    kind = SyntaxKind.CALL_EXPRESSION

    expression: Expression
    arguments: list[Expression] = field(default_factory=list)


@dataclass(eq=False)
class NewExpression(Expression):
    kind = SyntaxKind.NEW_EXPRESSION

    expression: Expression
    arguments: list[Expression] = field(default_factory=list)


@dataclass(eq=False)
class PropertyAssignment(Node):
    """`name: initializer` inside an object literal."""

    kind = SyntaxKind.PROPERTY_ASSIGNMENT

    name: Identifier | StringLiteral
    initializer: Expression


@dataclass(eq=False)
class ShorthandPropertyAssignment(Node):
    """`{ name }`, equivalent to `{ name: name }`."""

    kind = SyntaxKind.SHORTHAND_PROPERTY_ASSIGNMENT

    name: Identifier


@dataclass(eq=False)
class ObjectLiteralExpression(Expression):
    kind = SyntaxKind.OBJECT_LITERAL_EXPRESSION

    properties: list[PropertyAssignment | ShorthandPropertyAssignment] = field(
        default_factory=list
    )


@dataclass(eq=False)
class ArrayLiteralExpression(Expression):
    kind = SyntaxKind.ARRAY_LITERAL_EXPRESSION

    elements: list[Expression] = field(default_factory=list)


@dataclass(eq=False)
class AsExpression(Expression):
    """`expression as T`."""

    kind = SyntaxKind.AS_EXPRESSION

    expression: Expression
    type: TypeNode


@dataclass(eq=False)
class ParenthesizedExpression(Expression):
    kind = SyntaxKind.PARENTHESIZED_EXPRESSION

    expression: Expression


@dataclass(eq=False)
class BinaryExpression(Expression):
    kind = SyntaxKind.BINARY_EXPRESSION

    left: Expression
    operator: str
    right: Expression


@dataclass(eq=False)
class PrefixUnaryExpression(Expression):
    kind = SyntaxKind.PREFIX_UNARY_EXPRESSION

    operator: str
    operand: Expression


@dataclass(eq=False)
class ConditionalExpression(Expression):
    kind = SyntaxKind.CONDITIONAL_EXPRESSION

    condition: Expression
    when_true: Expression
    when_false: Expression


# ============================================================
# STATEMENTS
# ============================================================


@dataclass(eq=False)
class Block(Statement):
    kind = SyntaxKind.BLOCK

    statements: list[Node] = field(default_factory=list)


@dataclass(eq=False)
class ExpressionStatement(Statement):
    kind = SyntaxKind.EXPRESSION_STATEMENT

    expression: Expression


@dataclass(eq=False)
class VariableDeclaration(Node):
    kind = SyntaxKind.VARIABLE_DECLARATION

    name: Identifier
    type: TypeNode | None = None
    initializer: Expression | None = None


@dataclass(eq=False)
class VariableDeclarationList(Node):
    """`const a = 1, b = 2` - flags is "const", "let" or "var"."""

    kind = SyntaxKind.VARIABLE_DECLARATION_LIST

    declarations: list[VariableDeclaration]
    flags: str = "const"


@dataclass(eq=False)
class VariableStatement(Statement):
    kind = SyntaxKind.VARIABLE_STATEMENT

    declaration_list: VariableDeclarationList


@dataclass(eq=False)
class IfStatement(Statement):
    kind = SyntaxKind.IF_STATEMENT

    expression: Expression
    then_statement: Statement
    else_statement: Statement | None = None


@dataclass(eq=False)
class ForOfStatement(Statement):
    """`for (initializer of expression) statement`.

    initializer is normally a VariableDeclarationList; a bare expression
    (`for (x of xs)`) is also legal source.
    """

    kind = SyntaxKind.FOR_OF_STATEMENT

    initializer: Node
    expression: Expression
    statement: Statement


@dataclass(eq=False)
class ReturnStatement(Statement):
    kind = SyntaxKind.RETURN_STATEMENT

    expression: Expression | None = None


@dataclass(eq=False)
class SourceFile(Node):
    kind = SyntaxKind.SOURCE_FILE

    statements: list[Node] = field(default_factory=list)
    file_name: str = ""


# ============================================================
# DECLARATIONS
# ============================================================


@dataclass(eq=False)
class Parameter(Node):
    """Function parameter. question_token marks `name?: T`."""

    kind = SyntaxKind.PARAMETER

    name: Identifier
    type: TypeNode | None = None
    initializer: Expression | None = None
    question_token: bool = False


@dataclass(eq=False)
class FunctionDeclaration(Statement):
    kind = SyntaxKind.FUNCTION_DECLARATION

    name: Identifier
    parameters: list[Parameter] = field(default_factory=list)
    type: TypeNode | None = None
    body: Block | None = None


@dataclass(eq=False)
class MethodDeclaration(Node):
    kind = SyntaxKind.METHOD_DECLARATION

    name: Identifier
    parameters: list[Parameter] = field(default_factory=list)
    type: TypeNode | None = None
    body: Block | None = None


@dataclass(eq=False)
class ConstructorDeclaration(Node):
    kind = SyntaxKind.CONSTRUCTOR

    parameters: list[Parameter] = field(default_factory=list)
    body: Block | None = None


@dataclass(eq=False)
class PropertySignature(Node):
    """Interface data member: `name?: T`."""

    kind = SyntaxKind.PROPERTY_SIGNATURE

    name: Identifier
    type: TypeNode | None = None
    question_token: bool = False


@dataclass(eq=False)
class MethodSignature(Node):
    """Interface behavior member: `name(params): T`."""

    kind = SyntaxKind.METHOD_SIGNATURE

    name: Identifier
    parameters: list[Parameter] = field(default_factory=list)
    type: TypeNode | None = None


@dataclass(eq=False)
class PropertyDeclaration(Node):
    """Class data member: `name?: T = initializer`."""

    kind = SyntaxKind.PROPERTY_DECLARATION

    name: Identifier
    type: TypeNode | None = None
    initializer: Expression | None = None
    question_token: bool = False


@dataclass(eq=False)
class ExpressionWithTypeArguments(Node):
    kind = SyntaxKind.EXPRESSION_WITH_TYPE_ARGUMENTS

    expression: Expression


@dataclass(eq=False)
class HeritageClause(Node):
    """`extends A, B` or `implements C` - token is "extends" or "implements"."""

    kind = SyntaxKind.HERITAGE_CLAUSE

    token: str
    types: list[ExpressionWithTypeArguments] = field(default_factory=list)


@dataclass(eq=False)
class ClassDeclaration(Statement):
    kind = SyntaxKind.CLASS_DECLARATION

    name: Identifier
    heritage_clauses: list[HeritageClause] = field(default_factory=list)
    members: list[Node] = field(default_factory=list)


@dataclass(eq=False)
class InterfaceDeclaration(Statement):
    kind = SyntaxKind.INTERFACE_DECLARATION

    name: Identifier
    heritage_clauses: list[HeritageClause] = field(default_factory=list)
    members: list[Node] = field(default_factory=list)


NODE_CLASSES: dict[SyntaxKind, type[Node]] = {
    cls.kind: cls
    for cls in (
        SourceFile,
        Block,
        ExpressionStatement,
        VariableStatement,
        VariableDeclarationList,
        VariableDeclaration,
        IfStatement,
        ForOfStatement,
        ReturnStatement,
        FunctionDeclaration,
        MethodDeclaration,
        ConstructorDeclaration,
        Parameter,
        ClassDeclaration,
        InterfaceDeclaration,
        PropertySignature,
        MethodSignature,
        PropertyDeclaration,
        HeritageClause,
        ExpressionWithTypeArguments,
        TypeNode,
        Identifier,
        StringLiteral,
        NumericLiteral,
        TrueKeyword,
        FalseKeyword,
        NullKeyword,
        ThisKeyword,
        TemplateExpression,
        TemplateSpan,
        NoSubstitutionTemplateLiteral,
        PropertyAccessExpression,
        ElementAccessExpression,
        CallExpression,
        NewExpression,
        ObjectLiteralExpression,
        PropertyAssignment,
        ShorthandPropertyAssignment,
        ArrayLiteralExpression,
        AsExpression,
        ParenthesizedExpression,
        BinaryExpression,
        PrefixUnaryExpression,
        ConditionalExpression,
    )
}


def source_text(node: Node) -> str:
    """Source text of a node, reconstructing simple expressions without a span."""
    if node.source:
        return node.source
    match node:
        case ThisKeyword():
            return "this"
        case TrueKeyword():
            return "true"
        case FalseKeyword():
            return "false"
        case NullKeyword():
            return "null"
        case PropertyAccessExpression(expression=expression, name=name):
            return source_text(expression) + "." + name.text
        case ElementAccessExpression(expression=expression, argument=argument):
            return source_text(expression) + "[" + source_text(argument) + "]"
        case CallExpression(expression=expression, arguments=arguments):
            args = ", ".join(source_text(a) for a in arguments)
            return source_text(expression) + "(" + args + ")"
        case ParenthesizedExpression(expression=expression):
            return "(" + source_text(expression) + ")"
        case BinaryExpression(left=left, operator=operator, right=right):
            return source_text(left) + " " + operator + " " + source_text(right)
        case PrefixUnaryExpression(operator=operator, operand=operand):
            return operator + source_text(operand)
        case _:
            return ""
