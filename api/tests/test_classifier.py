from taruf.services.classifier import classify


def _row(selector, selected, selected_its=None, first_choice=None):
    return {
        "taruf_id": 1,
        "selector_registration_id": selector,
        "selected_registration_id": selected,
        "selected_its": selected_its,
        "first_choice": first_choice,
    }


def test_reciprocal_rows_are_both_perfect_matches():
    out = classify([_row("a", "b"), _row("b", "a"), _row("a", "c")])
    assert [c.is_perfect_match for c in out] == [True, True, False]


def test_one_directional_row_is_not_perfect():
    out = classify([_row("a", "b")])
    assert out[0].is_perfect_match is False
    assert out[0].qualifies is False


def test_perfect_match_uses_normalized_ids():
    out = classify([_row("101", 202), _row(" 202 ", "101.0")])
    assert all(c.is_perfect_match for c in out)


def test_first_choice_matches_own_selected_its_only():
    rows = [
        _row("a", "b", selected_its="200", first_choice="200"),
        _row("a", "c", selected_its="300", first_choice="200"),
    ]
    out = classify(rows)
    assert out[0].is_first_choice_match is True
    assert out[1].is_first_choice_match is False


def test_first_choice_numeric_string_equality():
    out = classify([_row("a", "b", selected_its=123, first_choice="123")])
    assert out[0].is_first_choice_match is True
    assert out[0].is_perfect_match is False
    assert out[0].qualifies is True


def test_missing_first_choice_never_matches():
    out = classify([_row("a", "b", selected_its=None, first_choice=None)])
    assert out[0].is_first_choice_match is False


def test_classify_preserves_input_order_and_rows():
    rows = [_row("x", "y"), _row("y", "x"), _row("p", "q")]
    out = classify(rows)
    assert [c.row for c in out] == rows
    assert out[2].selector_id == "p"
    assert out[2].selected_id == "q"
