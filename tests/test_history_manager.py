import re

from history_manager import HistoryManager


def test_newest_first_and_limit():
    history = HistoryManager()
    history.add_calculation("1 + 1", "2")
    history.add_calculation("2 × 3", "6")
    history.add_calculation("9 / 3", "3")

    entries = history.get_calculation_history()
    assert [e[0] for e in entries] == ["9 / 3", "2 × 3", "1 + 1"]
    assert len(history.get_calculation_history(limit=2)) == 2


def test_capped_at_max_items():
    history = HistoryManager(max_items=3)
    for i in range(5):
        history.add_calculation(f"{i} + 0", str(i))
    assert len(history) == 3
    assert history.get_calculation_history()[-1][0] == "2 + 0"


def test_clear_and_format():
    history = HistoryManager()
    history.add_calculation("7 - 2", "5")
    [line] = history.format_calculation_history()
    assert re.fullmatch(r"\d{4}-\d\d-\d\d \d\d:\d\d:\d\d: 7 - 2 = 5", line)

    history.clear_calculation_history()
    assert history.get_calculation_history() == []


def test_negative_limit_returns_nothing():
    history = HistoryManager()
    history.add_calculation("1 + 1", "2")
    history.add_calculation("2 + 2", "4")
    assert history.get_calculation_history(limit=-1) == []
    assert history.get_calculation_history(limit=0) == []
