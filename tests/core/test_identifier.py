import pytest
from granacred.core.identifier import (
    format_identifier,
    normalize,
    only_digits,
    show_invalid_hint,
    validate,
)

VALID_CPF = "52998224725"


def test_known_valid_cpf():
    assert validate(VALID_CPF) is True


@pytest.mark.parametrize("raw", ["529.982.247-25", " 529 982 247 25 ", "529-982-247/25"])
def test_separators_are_ignored(raw):
    assert validate(raw) is True
    assert normalize(raw) == VALID_CPF


@pytest.mark.parametrize("digit", list("0123456789"))
def test_repeated_digit_cpf_rejected(digit):
    assert validate(digit * 11) is False


@pytest.mark.parametrize("raw", ["", None, "5299822472", "529982247250", "abc"])
def test_wrong_length_rejected(raw):
    assert validate(raw) is False


@pytest.mark.parametrize("position", [9, 10])
def test_any_edit_to_check_digits_fails(position):
    for replacement in "0123456789":
        if replacement == VALID_CPF[position]:
            continue
        edited = VALID_CPF[:position] + replacement + VALID_CPF[position + 1:]
        assert validate(edited) is False


def test_single_digit_edits_in_body_mostly_fail():
    accepted = 0
    total = 0
    for position in range(9):
        for replacement in "0123456789":
            if replacement == VALID_CPF[position]:
                continue
            edited = VALID_CPF[:position] + replacement + VALID_CPF[position + 1:]
            total += 1
            accepted += validate(edited)
    # The first check digit alone catches every single-digit substitution
    assert accepted == 0
    assert total == 81


def test_check_digit_remainder_ten_maps_to_zero():
    # 100000001: weighted sum 10 + 2 = 12 -> (120 % 11) = 10 -> first check digit 0
    assert validate("10000000108") is True
    assert validate("10000000118") is False


def test_leading_zero_cpf():
    assert validate("000.000.001-91") is True


def test_only_digits():
    assert only_digits("a1b2-3") == "123"
    assert only_digits(None) == ""


def test_invalid_hint_only_after_typing():
    assert show_invalid_hint("") is False
    assert show_invalid_hint("5") is True
    assert show_invalid_hint("529.982.247-25") is False


def test_format_identifier():
    assert format_identifier(VALID_CPF) == "529.982.247-25"
    assert format_identifier("123") == "123"
