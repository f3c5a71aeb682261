from concierge_ai.llm.output import lower_keys, parse_json_object, split_variants, strip_code_fences


def test_strip_code_fences():
    assert strip_code_fences("```json\n{\"a\": 1}\n```") == '{"a": 1}'
    assert strip_code_fences(None) == ""


def test_split_variants_without_delimiter_is_single_variant():
    assert split_variants("Just one description.") == ["Just one description."]


def test_split_variants_drops_empty_parts():
    assert split_variants("Cozy loft ||| Sunny studio |||") == ["Cozy loft", "Sunny studio"]
    assert split_variants("   ") == []


def test_lower_keys_is_recursive():
    assert lower_keys({"Trip": {"Title": "x"}, "Items": [{"Day": 1}]}) == {
        "trip": {"title": "x"},
        "items": [{"day": 1}]
    }


def test_parse_json_object_tolerates_prose():
    text = 'Here is your plan:\n```json\n{"Subject": "Hi", "Body": "<p>x</p>"}\n```\nEnjoy!'
    assert parse_json_object(text) == {"subject": "Hi", "body": "<p>x</p>"}


def test_parse_json_object_rejects_garbage_and_arrays():
    assert parse_json_object("not json at all") is None
    assert parse_json_object("[1, 2, 3]") is None
