from spyglass_pyside.utils.fuzzy import fuzzy_filter, fuzzy_score


def test_substring_scores_full_marks():
    assert fuzzy_score("read", "README.md") == 100


def test_empty_inputs_score_zero():
    assert fuzzy_score("", "README.md") == 0
    assert fuzzy_score("read", "") == 0


def test_filter_drops_weak_matches_and_keeps_ties_in_order():
    names = ["src", "README.md", "docs", "reader.py"]
    assert fuzzy_filter("read", names, key=str) == ["README.md", "reader.py"]


def test_filter_orders_best_first():
    names = ["rader.txt", "reader.txt"]
    assert fuzzy_filter("reader", names, key=str)[0] == "reader.txt"


def test_empty_query_keeps_everything():
    names = ["b", "a"]
    assert fuzzy_filter("", names, key=str) == ["b", "a"]
