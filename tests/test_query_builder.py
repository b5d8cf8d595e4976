from xliffgate.query_builder import build_translate_query_string


def test_empty_query():
    assert build_translate_query_string() == ""
    assert build_translate_query_string(set(), "") == ""


def test_untranslated_only():
    assert build_translate_query_string({"new", "initial"}) == "?untranslated=initial,new"


def test_new_state_only():
    assert build_translate_query_string(new_state="translated") == "?newState=translated"


def test_both_parameters():
    query = build_translate_query_string(["no-state_empty-target", "new"], "translated")
    assert query == "?untranslated=new,no-state_empty-target&newState=translated"
