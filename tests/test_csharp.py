"""Tests for the C# backend."""

import pytest

from glossa.backend.csharp import (
    CSharpVisitor,
    csharp_type_name,
    render_type,
    with_optional_marker,
)
from glossa.renderer import Renderer
from glossa.syntax import (
    ArrayLiteralExpression,
    AsExpression,
    Block,
    CallExpression,
    ClassDeclaration,
    ConstructorDeclaration,
    ExpressionStatement,
    ExpressionWithTypeArguments,
    ForOfStatement,
    FunctionDeclaration,
    HeritageClause,
    Identifier,
    IfStatement,
    InterfaceDeclaration,
    MethodDeclaration,
    MethodSignature,
    NoSubstitutionTemplateLiteral,
    NullKeyword,
    NumericLiteral,
    ObjectLiteralExpression,
    Parameter,
    PropertyAccessExpression,
    PropertyAssignment,
    PropertyDeclaration,
    PropertySignature,
    ReturnStatement,
    ShorthandPropertyAssignment,
    SourceFile,
    StringLiteral,
    TemplateExpression,
    TemplateSpan,
    ThisKeyword,
    TypeNode,
    VariableDeclaration,
    VariableDeclarationList,
    VariableStatement,
)
from glossa.types import (
    ANY,
    BOOLEAN,
    NULL,
    NUMBER,
    STRING,
    UNDEFINED,
    VOID,
    ArrayType,
    MapType,
    NamedType,
    PrimitiveType,
    UnionType,
    optional,
)


def ident(name: str) -> Identifier:
    return Identifier(name)


def call(callee, *args) -> CallExpression:
    if isinstance(callee, str):
        callee = ident(callee)
    return CallExpression(callee, list(args))


def stmt(expression) -> ExpressionStatement:
    return ExpressionStatement(expression)


def console_log(*args) -> CallExpression:
    return call(PropertyAccessExpression(ident("console"), ident("log")), *args)


def const(name: str, initializer=None, typ=None) -> VariableStatement:
    type_node = TypeNode(typ) if typ is not None else None
    decl = VariableDeclaration(ident(name), type_node, initializer)
    return VariableStatement(VariableDeclarationList([decl]))


def num(text: str) -> NumericLiteral:
    return NumericLiteral(text)


# ============================================================
# SCENARIOS
# ============================================================


def test_greet_function(render_csharp):
    node = FunctionDeclaration(
        ident("greet"),
        [
            Parameter(ident("name"), TypeNode(STRING)),
            Parameter(ident("title"), TypeNode(STRING), question_token=True),
        ],
        body=Block(),
    )
    text, diagnostics = render_csharp(node)
    assert text == "public void Greet(string name, string? title = null)\n{\n}"
    assert diagnostics == []


def test_untyped_object_literal_is_struct(render_csharp):
    node = ObjectLiteralExpression(
        [PropertyAssignment(ident("a"), num("1")), PropertyAssignment(ident("b"), num("2"))]
    )
    assert render_csharp(node) == ("new Struct { A = 1, B = 2 }", [])


def test_for_of_keeps_loop_variable(render_csharp):
    node = ForOfStatement(
        VariableDeclarationList([VariableDeclaration(ident("x"))]),
        ident("items"),
        Block([stmt(console_log(ident("x")))]),
    )
    text, diagnostics = render_csharp(node)
    assert text == "foreach (var x in items)\n{\n    Console.WriteLine(x);\n}"
    assert diagnostics == []


def test_template_string(render_csharp):
    node = TemplateExpression("Hello ", [TemplateSpan(ident("name"), "!")])
    assert render_csharp(node) == ('$"Hello {name}!"', [])


# ============================================================
# TYPE MAPPING
# ============================================================


@pytest.mark.parametrize(
    "typ,question_mark,expected",
    [
        pytest.param(NUMBER, False, "int", id="number"),
        pytest.param(STRING, False, "string", id="string"),
        pytest.param(BOOLEAN, False, "bool", id="boolean"),
        pytest.param(VOID, False, "void", id="void"),
        pytest.param(ANY, False, "object", id="any"),
        pytest.param(PrimitiveType("symbol"), False, "???", id="unknown_builtin"),
        pytest.param(optional(optional(STRING)), False, "string?", id="optional_of_optional"),
        pytest.param(optional(optional(STRING)), True, "string?", id="nested_optional_with_marker"),
        pytest.param(NamedType("Props"), False, "Props", id="named"),
        pytest.param(NamedType("Props", alias="Options"), False, "Options", id="alias"),
        pytest.param(optional(STRING), False, "string?", id="optional"),
        pytest.param(UnionType((NUMBER, NULL)), False, "int?", id="nullable"),
        pytest.param(optional(STRING), True, "string?", id="marker_applied_once"),
        pytest.param(STRING, True, "string?", id="question_mark"),
        pytest.param(MapType(NUMBER), False, "IDictionary<string, int>", id="map"),
        pytest.param(
            optional(MapType(STRING)), False, "IDictionary<string, string>?", id="optional_map"
        ),
        pytest.param(
            MapType(MapType(BOOLEAN)),
            False,
            "IDictionary<string, IDictionary<string, bool>>",
            id="nested_map",
        ),
        pytest.param(ArrayType(STRING), False, "string[]", id="array"),
    ],
)
def test_render_type(csharp, typ, question_mark, expected):
    node = TypeNode(typ)
    assert render_type(node, typ, question_mark, csharp) == expected
    assert csharp.diagnostics == []


def test_union_reports_once_and_uses_placeholder(csharp):
    typ = UnionType((STRING, NUMBER, UNDEFINED))
    node = TypeNode(typ)
    assert render_type(node, typ, False, csharp) == "..."
    [diagnostic] = csharp.diagnostics
    assert diagnostic.node is node
    assert "string | number | undefined" in diagnostic.message


def test_with_optional_marker_is_idempotent():
    assert with_optional_marker("int") == "int?"
    assert with_optional_marker(with_optional_marker("int")) == "int?"


def test_csharp_type_name():
    assert csharp_type_name("number") == "int"
    assert csharp_type_name(None) == "???"


# ============================================================
# NAMES AND LITERALS
# ============================================================


@pytest.mark.parametrize(
    "node,expected",
    [
        pytest.param(ident("count"), "count", id="identifier"),
        pytest.param(ident("string"), "@string", id="keyword_escaped"),
        pytest.param(ident("undefined"), "null", id="undefined"),
        pytest.param(StringLiteral('say "hi"\n'), '"say \\"hi\\"\\n"', id="string_escaped"),
        pytest.param(NoSubstitutionTemplateLiteral("plain"), '"plain"', id="plain_template"),
        pytest.param(
            TemplateExpression("{", [TemplateSpan(ident("a"), " and "), TemplateSpan(ident("b"), "}")]),
            '$"{{{a} and {b}}}"',
            id="template_braces_escaped",
        ),
        pytest.param(
            TemplateExpression("", [TemplateSpan(call(PropertyAccessExpression(ident("user"), ident("getName"))), "")]),
            '$"{user.getName()}"',
            id="template_keeps_source_text",
        ),
    ],
)
def test_literals(render_csharp, node, expected):
    assert render_csharp(node) == (expected, [])


def test_property_or_method_capitalizes(csharp):
    scoped = csharp.update_context(property_or_method=True)
    assert scoped.convert(ident("value")).render() == "Value"
    assert csharp.convert(ident("value")).render() == "value"


def test_identifier_as_string(csharp):
    scoped = csharp.update_context(identifier_as_string=True)
    assert scoped.convert(ident("key")).render() == '"key"'


def test_string_as_identifier(csharp):
    scoped = csharp.update_context(string_as_identifier=True, property_or_method=True)
    assert scoped.convert(StringLiteral("name")).render() == "Name"


# ============================================================
# EXPRESSIONS
# ============================================================


@pytest.mark.parametrize(
    "node,expected",
    [
        pytest.param(console_log(StringLiteral("hi")), 'Console.WriteLine("hi")', id="print_one"),
        pytest.param(
            console_log(ident("a"), ident("b")), 'Console.WriteLine($"{a} {b}")', id="print_many"
        ),
        pytest.param(console_log(), "Console.WriteLine()", id="print_none"),
        pytest.param(call("doThing", ident("x"), num("1")), "DoThing(x, 1)", id="call"),
        pytest.param(
            call(PropertyAccessExpression(ident("obj"), ident("doIt"))), "obj.DoIt()", id="method_call"
        ),
        pytest.param(
            PropertyAccessExpression(ident("obj"), ident("field")), "obj.Field", id="property_access"
        ),
        pytest.param(
            PropertyAccessExpression(ThisKeyword(), ident("name")), "Name", id="this_dropped"
        ),
        pytest.param(
            AsExpression(ident("x"), TypeNode(NamedType("Foo"))), "(Foo)x", id="cast"
        ),
        pytest.param(
            ArrayLiteralExpression([num("1"), num("2")]), "new [] { 1, 2 }", id="array"
        ),
        pytest.param(ArrayLiteralExpression(), "new [] { }", id="empty_array"),
    ],
)
def test_expressions(render_csharp, node, expected):
    assert render_csharp(node) == (expected, [])


def test_known_struct_literal(render_csharp):
    node = ObjectLiteralExpression(
        [PropertyAssignment(ident("name"), StringLiteral("x")), ShorthandPropertyAssignment(ident("size"))],
        typ=NamedType("Props", struct=True),
    )
    assert render_csharp(node) == ('new Props { Name = "x", Size = size }', [])


def test_optional_struct_literal(render_csharp):
    node = ObjectLiteralExpression(
        [PropertyAssignment(ident("a"), num("1"))],
        typ=optional(NamedType("Props", struct=True)),
    )
    assert render_csharp(node) == ("new Props { A = 1 }", [])


def test_map_literal(render_csharp):
    node = ObjectLiteralExpression(
        [PropertyAssignment(ident("a"), num("1")), PropertyAssignment(StringLiteral("b-c"), num("2"))],
        typ=MapType(NUMBER),
    )
    assert render_csharp(node) == ('new Dictionary<string, int> { { "a", 1 }, { "b-c", 2 } }', [])


def test_map_literal_nested_value_is_not_key_value(render_csharp):
    inner = ObjectLiteralExpression([PropertyAssignment(ident("x"), num("1"))])
    node = ObjectLiteralExpression([PropertyAssignment(ident("a"), inner)], typ=MapType(ANY))
    text, _ = render_csharp(node)
    assert text == 'new Dictionary<string, object> { { "a", new Struct { X = 1 } } }'


def test_unknown_literal_prefers_map_when_configured(render_csharp):
    node = ObjectLiteralExpression([PropertyAssignment(ident("a"), num("1"))])
    text, _ = render_csharp(node, prefer_object_literal_as_struct=False)
    assert text == 'new Dictionary<string, object> { { "a", 1 } }'


def test_empty_object_literal(render_csharp):
    assert render_csharp(ObjectLiteralExpression()) == ("new Struct { }", [])


# ============================================================
# STATEMENTS
# ============================================================


@pytest.mark.parametrize(
    "node,expected",
    [
        pytest.param(const("n", num("3"), NUMBER), "int n = 3;", id="annotated"),
        pytest.param(const("s", StringLiteral("a")), 'var s = "a";', id="untyped"),
        pytest.param(
            const("s", StringLiteral("a", typ=STRING)), 'string s = "a";', id="inferred"
        ),
        pytest.param(const("o", ident("thing"), ANY), "var o = thing;", id="object_becomes_var"),
        pytest.param(const("e", NullKeyword(typ=NULL)), "var e = null;", id="null_becomes_var"),
        pytest.param(const("y", typ=STRING), "string y;", id="no_initializer"),
        pytest.param(const("z"), "object z;", id="nothing_to_infer"),
        pytest.param(
            const("m", ObjectLiteralExpression([PropertyAssignment(ident("k"), num("1"))])),
            'var m = new Dictionary<string, object> { { "k", 1 } };',
            id="initializer_prefers_map",
        ),
    ],
)
def test_variable_declarations(render_csharp, node, expected):
    assert render_csharp(node) == (expected, [])


def test_statements_on_separate_lines(render_csharp):
    node = SourceFile([stmt(call("f")), const("x", num("1"), NUMBER), stmt(call("g"))])
    assert render_csharp(node) == ("F();\nint x = 1;\nG();", [])


def test_if_else(render_csharp):
    node = IfStatement(ident("a"), Block([stmt(call("f"))]), Block([stmt(call("g"))]))
    text, _ = render_csharp(node)
    assert text == "if (a)\n{\n    F();\n}\nelse\n{\n    G();\n}"


def test_else_if_stays_inline(render_csharp):
    node = IfStatement(
        ident("a"),
        Block([stmt(call("f"))]),
        IfStatement(ident("b"), Block([stmt(call("g"))])),
    )
    text, _ = render_csharp(node)
    assert text == "if (a)\n{\n    F();\n}\nelse if (b)\n{\n    G();\n}"


def test_if_without_braces_indents_body(render_csharp):
    node = IfStatement(ident("a"), stmt(call("f")))
    assert render_csharp(node) == ("if (a)\n    F();", [])


def test_for_of_unrecognized_initializer(render_csharp):
    node = ForOfStatement(ident("x"), ident("xs"), Block())
    text, diagnostics = render_csharp(node)
    assert text == "foreach (var ??? in xs)\n{\n}"
    assert len(diagnostics) == 1


def test_nested_blocks_indent(render_csharp):
    inner = ForOfStatement(
        VariableDeclarationList([VariableDeclaration(ident("y"))]),
        ident("ys"),
        Block([ReturnStatement(ident("y"))]),
    )
    node = Block([inner])
    text, _ = render_csharp(node)
    assert text == "\n{\n    foreach (var y in ys)\n    {\n        return y;\n    }\n}"


def test_indent_is_configurable(render_csharp):
    node = Block([stmt(call("f"))])
    text, _ = render_csharp(node, indent=2)
    assert text == "\n{\n  F();\n}"


# ============================================================
# DECLARATIONS
# ============================================================


def test_parameters():
    renderer = Renderer(CSharpVisitor())
    with_default = Parameter(ident("n"), TypeNode(NUMBER), num("5"))
    nullable = Parameter(ident("t"), TypeNode(optional(STRING)))
    untyped = Parameter(ident("v"))
    assert renderer.convert(with_default).render() == "int n = 5"
    assert renderer.convert(nullable).render() == "string? t = null"
    assert renderer.convert(untyped).render() == "object v"


def test_class_with_members(render_csharp):
    node = ClassDeclaration(
        ident("Counter"),
        [HeritageClause("extends", [ExpressionWithTypeArguments(ident("Base"))])],
        [
            PropertyDeclaration(ident("count"), TypeNode(NUMBER), num("0")),
            ConstructorDeclaration([Parameter(ident("start"), TypeNode(NUMBER))], Block()),
            MethodDeclaration(ident("reset"), [], TypeNode(VOID), Block([ReturnStatement()])),
        ],
    )
    text, diagnostics = render_csharp(node)
    assert text == (
        "class Counter : Base\n"
        "{\n"
        "    public int Count { get; set; } = 0;\n"
        "    public Counter(int start)\n"
        "    {\n"
        "    }\n"
        "    public void Reset()\n"
        "    {\n"
        "        return;\n"
        "    }\n"
        "}"
    )
    assert diagnostics == []


def test_class_heritage_lists_every_type(render_csharp):
    node = ClassDeclaration(
        ident("Impl"),
        [
            HeritageClause("extends", [ExpressionWithTypeArguments(ident("Base"))]),
            HeritageClause("implements", [ExpressionWithTypeArguments(ident("IFoo"))]),
        ],
    )
    assert render_csharp(node) == ("class Impl : Base, IFoo\n{\n}", [])


def test_constructor_outside_class(render_csharp):
    node = ConstructorDeclaration([], Block())
    assert render_csharp(node) == ("public MyClass()\n{\n}", [])


def test_function_without_body(render_csharp):
    node = FunctionDeclaration(ident("run"), [], TypeNode(VOID))
    assert render_csharp(node) == ("public void Run();", [])


def test_struct_interface(render_csharp):
    node = InterfaceDeclaration(
        ident("Props"),
        members=[
            PropertySignature(ident("name"), TypeNode(STRING)),
            PropertySignature(ident("age"), TypeNode(optional(NUMBER)), question_token=True),
        ],
    )
    text, _ = render_csharp(node)
    assert text == (
        "class Props\n"
        "{\n"
        "    public string Name { get; set; }\n"
        "    public int? Age { get; set; }\n"
        "}"
    )


def test_regular_interface(render_csharp):
    node = InterfaceDeclaration(
        ident("Greeter"),
        members=[
            PropertySignature(ident("name"), TypeNode(STRING)),
            MethodSignature(ident("greet"), [Parameter(ident("who"), TypeNode(STRING))], TypeNode(VOID)),
        ],
    )
    text, _ = render_csharp(node)
    assert text == (
        "interface Greeter\n"
        "{\n"
        "    string Name { get; }\n"
        "    void Greet(string who);\n"
        "}"
    )


def test_union_in_declaration_reports(render_csharp):
    node = Parameter(ident("v"), TypeNode(UnionType((STRING, NUMBER))))
    text, diagnostics = render_csharp(node)
    assert text == "... v"
    assert len(diagnostics) == 1


def test_nested_union_reports_once(csharp):
    typ = UnionType((UnionType((STRING, NUMBER)), UNDEFINED))
    node = TypeNode(typ)
    assert render_type(node, typ, False, csharp) == "..."
    assert len(csharp.diagnostics) == 1


def test_nested_optional_struct_literal(render_csharp):
    node = ObjectLiteralExpression(
        [PropertyAssignment(ident("a"), num("1"))],
        typ=optional(optional(NamedType("Props", struct=True))),
    )
    assert render_csharp(node) == ("new Props { A = 1 }", [])


def test_unresolved_annotation_reports(render_csharp):
    node = Parameter(ident("v"), TypeNode(source="string | number"))
    text, diagnostics = render_csharp(node)
    assert text == "??? v"
    assert diagnostics == ["Unable to resolve type annotation: string | number"]


def test_unresolved_variable_annotation_falls_back_to_initializer(render_csharp):
    node = const("n", num("1"))
    node.declaration_list.declarations[0].type = TypeNode(source="Mystery")
    text, diagnostics = render_csharp(node)
    assert text == "var n = 1;"
    assert diagnostics == ["Unable to resolve type annotation: Mystery"]
