"""Run every program in programs/*.tests and compare its output."""


def test_program(program, lox):
    source, expected_out, expected_err = program
    lox.run(source)
    assert lox.stdout_lines == expected_out
    assert lox.stderr_lines == expected_err
