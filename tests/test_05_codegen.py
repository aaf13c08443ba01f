"""Pytest-based codegen tests for the C backend."""

from pathlib import Path

import pytest

from numc import compile_to_c
from numc.ast import (
    Add,
    Call,
    Declaration,
    Div,
    ExprStmt,
    ForStmt,
    FunctionDef,
    Ident,
    Number,
    Pos,
)
from numc.backend import (
    CBackend,
    CodegenError,
    FunctionNames,
    RedefinitionError,
    UndefinedFunctionError,
    emit_c,
)
from numc.backend.c import PREAMBLE, _number_literal, _safe_name

CODEGEN_DIR = Path(__file__).parent / "05_codegen"

P = Pos(1, 1)


def parse_test_file(path: Path) -> list[tuple[str, str, str]]:
    """Parse .tests file into (name, input, expected) tuples.

    Expected is either a snippet of generated C or 'error: <message>'.
    """
    lines = path.read_text().split("\n")
    result: list[tuple[str, str, str]] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        if line.startswith("=== "):
            test_name = line[4:].strip()
            i += 1
            input_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                input_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            expected_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                expected_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            result.append((test_name, "\n".join(input_lines), "\n".join(expected_lines).strip()))
        else:
            i += 1
    return result


def pytest_generate_tests(metafunc):
    """Parametrize tests over codegen test files."""
    if "codegen_input" in metafunc.fixturenames:
        params = []
        for test_file in sorted(CODEGEN_DIR.glob("*.tests")):
            for name, input_code, expected in parse_test_file(test_file):
                params.append(
                    pytest.param(input_code, expected, id=f"{test_file.stem}/{name}")
                )
        metafunc.parametrize("codegen_input,codegen_expected", params)


def contains_normalized(haystack: str, needle: str) -> bool:
    """Check if needle appears in haystack, normalizing line-by-line whitespace."""
    needle_lines = [line.strip() for line in needle.strip().split("\n") if line.strip()]
    haystack_lines = [line.strip() for line in haystack.split("\n") if line.strip()]
    if not needle_lines:
        return True
    for i in range(len(haystack_lines)):
        if haystack_lines[i] == needle_lines[0]:
            match = True
            for j in range(1, len(needle_lines)):
                if (
                    i + j >= len(haystack_lines)
                    or haystack_lines[i + j] != needle_lines[j]
                ):
                    match = False
                    break
            if match:
                return True
    return False


def test_codegen(codegen_input: str, codegen_expected: str):
    """Verify generated C contains the expected code."""
    if codegen_expected.startswith("error:"):
        expected_msg = codegen_expected[6:].strip()
        with pytest.raises(CodegenError) as exc:
            compile_to_c(codegen_input)
        assert expected_msg in str(exc.value)
        return
    output = compile_to_c(codegen_input)
    if not contains_normalized(output, codegen_expected):
        pytest.fail(
            f"Expected not found in output:\n--- expected ---\n{codegen_expected}\n--- got ---\n{output}"
        )


# --- File layout ---


def test_layout_preamble_functions_then_main():
    output = compile_to_c("function f() 1 end  f()")
    assert output.startswith(PREAMBLE)
    proto = output.index("double f1_f(void);")
    definition = output.index("double f1_f(void) {")
    entry = output.index("int main(void) {")
    assert proto < definition < entry


def test_empty_program():
    output = emit_c([])
    assert contains_normalized(output, "int main(void) {\nreturn 0;\n}")


# --- Hoisting ---


def _count_definitions(output: str) -> int:
    return sum(
        1 for line in output.split("\n") if line.startswith("double ") and line.endswith("{")
    )


def test_nested_definition_yields_two_top_level_units():
    program = [
        FunctionDef(
            P,
            "outer",
            ["x"],
            [
                FunctionDef(Pos(2, 1), "inner", ["y"], [ExprStmt(Pos(2, 5), Ident("y"))]),
                ExprStmt(Pos(3, 1), Call("inner", [Ident("x")])),
            ],
        )
    ]
    output = emit_c(program)
    assert _count_definitions(output) == 2
    # Every definition starts at column 0; nothing is emitted inline.
    for line in output.split("\n"):
        if "double f2_inner(double y) {" in line:
            assert line == "double f2_inner(double y) {"
    outer_start = output.index("double f1_outer(double x) {")
    outer_body = output[outer_start : output.index("}", outer_start)]
    assert "f2_inner(double" not in outer_body
    assert "return f2_inner(x);" in outer_body


def test_structurally_identical_units_get_distinct_names():
    backend = CBackend()
    first = backend.compile_unit([ExprStmt(P, Number(1.0))], "a", [], pos=P)
    second = backend.compile_unit([ExprStmt(P, Number(1.0))], "b", [], pos=P)
    assert first.split("\n")[0] == "double f1_a(void) {"
    assert second.split("\n")[0] == "double f2_b(void) {"


def test_names_can_be_injected():
    suffixes = iter(["x7", "y9"])
    names = FunctionNames(lambda: next(suffixes))
    output = emit_c(
        [FunctionDef(P, "f", [], [ExprStmt(P, Number(1.0))]), ExprStmt(P, Call("f", []))],
        names,
    )
    assert "print_number(fx7_f());" in output


# --- Redefinition ---


def test_redefinition_fails_before_output():
    backend = CBackend()
    program = [
        FunctionDef(Pos(1, 1), "f", [], [ExprStmt(P, Number(1.0))]),
        FunctionDef(Pos(2, 1), "f", [], [ExprStmt(P, Number(2.0))]),
    ]
    with pytest.raises(RedefinitionError) as exc:
        backend.emit(program)
    assert exc.value.line == 2
    assert len(backend.functions) == 1
    assert len(backend.prototypes) == 1


def test_undefined_call_position():
    program = [
        Declaration(Pos(1, 1), "x", Number(1.0)),
        ExprStmt(Pos(2, 3), Add(Ident("x"), Call("g", []))),
    ]
    with pytest.raises(UndefinedFunctionError) as exc:
        emit_c(program)
    assert (exc.value.line, exc.value.col) == (2, 3)


# --- Return vs print ---


def test_function_body_returns_last_expression():
    body = [Declaration(P, "x", Number(1.0)), ExprStmt(P, Ident("x"))]
    unit = CBackend().compile_unit(body, "f", [], pos=P)
    lines = [line.strip() for line in unit.split("\n")]
    assert lines[-2] == "return x;"
    assert "print_number(x);" not in lines


def test_top_level_prints_last_expression():
    body = [Declaration(P, "x", Number(1.0)), ExprStmt(P, Ident("x"))]
    unit = CBackend().compile_unit(body, "main", [], entry=True)
    lines = [line.strip() for line in unit.split("\n")]
    assert lines[-3] == "print_number(x);"
    assert lines[-2] == "return 0;"
    assert "return x;" not in lines


# --- For-loop direction ---


def test_for_counts_down_when_start_exceeds_stop():
    program = [ForStmt(P, "i", [Number(5.0), Number(0.0)], [ExprStmt(P, Ident("i"))])]
    output = emit_c(program)
    assert "int i = (int)5.0;" in output
    assert "5.0 > 0.0 ? i > (int)0.0 : i < (int)0.0;" in output
    assert "5.0 > 0.0 ? i-- : i++" in output


def test_for_counts_up_from_zero_with_one_bound():
    program = [ForStmt(P, "i", [Number(5.0)], [])]
    assert "for (int i = 0; i < 5.0; i++) {" in emit_c(program)


def test_for_rejects_bad_bound_count():
    program = [ForStmt(P, "i", [], [])]
    with pytest.raises(TypeError):
        emit_c(program)


# --- Identifiers ---


def test_renaming_is_one_to_one():
    names = ["x", "int", "v_int", "v_v_int", "f1_a", "v_f1_a", "main", "v_main", "int_"]
    renamed = [_safe_name(n) for n in names]
    assert len(set(renamed)) == len(names)
    assert _safe_name("x") == "x"
    assert _safe_name("int_") == "int_"


def test_infinite_literal_uses_huge_val():
    assert _number_literal(float("inf")) == "HUGE_VAL"
    assert _number_literal(float("-inf")) == "(-HUGE_VAL)"
    assert _number_literal(0.5) == "0.5"


def test_division_casts_left_operand():
    program = [ForStmt(P, "i", [Number(4.0)], [ExprStmt(P, Div(Ident("i"), Number(8.0)))])]
    assert "print_number(((double)i / 8.0));" in emit_c(program)
