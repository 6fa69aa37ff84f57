import pytest

from balerkit.calculator import Calculator, format_number


def test_operator_clears_entry_and_stores_operand():
    calc = Calculator()
    assert calc.press_operator("+", "12.5") == ""
    assert calc.num1 == 12.5
    assert calc.operation == "+"


def test_adding_zero_returns_first_operand():
    calc = Calculator()
    calc.press_operator("+", "12.5")
    assert calc.equals("0") == "12.5"


def test_division():
    calc = Calculator()
    calc.press_operator("/", "10")
    assert calc.equals("4") == "2.5"
    assert calc.result == 2.5


def test_subtract_self_is_zero():
    calc = Calculator()
    calc.press_operator("-", "7.25")
    calc.equals("7.25")
    assert calc.result == 0.0


def test_multiply_by_one_is_identity():
    calc = Calculator()
    calc.press_operator("*", "3.5")
    assert calc.equals("1") == "3.5"


def test_division_by_zero_gives_infinity():
    calc = Calculator()
    calc.press_operator("/", "1")
    assert calc.equals("0") == "inf"


def test_zero_over_zero_is_nan():
    calc = Calculator()
    calc.press_operator("/", "0")
    assert calc.equals("0") == "nan"


def test_invalid_text_counts_as_zero():
    calc = Calculator()
    calc.press_operator("+", "abc")
    assert calc.num1 == 0.0
    assert calc.equals("4") == "4"


def test_without_operator_result_is_unchanged():
    calc = Calculator()
    assert calc.equals("9") == "0"


def test_clear_resets_operands_but_keeps_operator():
    calc = Calculator()
    calc.press_operator("*", "6")
    calc.equals("2")
    assert calc.clear() == ""
    assert (calc.num1, calc.num2) == (0.0, 0.0)
    assert calc.operation == "*"


def test_unknown_operator_rejected():
    with pytest.raises(ValueError):
        Calculator().press_operator("%", "1")


def test_format_large_number_uses_exponent():
    assert format_number(1e6) == "1e+06"