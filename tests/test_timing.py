import pytest

from solo_subtitles.errors import ValidationError
from solo_subtitles.models import SubtitleEntry
from solo_subtitles.timing import (
    entry_overlaps,
    extract_text_by_timing,
    normalize_time,
    select_entries,
    time_to_seconds,
)


def _entry(start, end, text):
    return SubtitleEntry(start_time=start, end_time=end, text=text)


ENTRIES = [
    _entry("00:04:50.000", "00:04:55.000", "Too early"),
    _entry("00:04:58.000", "00:05:02.000", "Crosses start"),
    _entry("00:05:03.000", "00:05:06.000", "Inside"),
    _entry("00:05:08.000", "00:05:12.500", "Crosses end"),
    _entry("00:05:20.000", "00:05:25.000", "Too late"),
]


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("5:00", "00:5:00.000"),
        ("05:10", "00:05:10.000"),
        ("00:05:10", "00:05:10.000"),
        ("00:05:10.250", "00:05:10.250"),
        ("00:05:10,250", "00:05:10,250"),
        ("  01:02:03 ", "01:02:03.000"),
        ("5:00.5", "00:5:00.5"),
        ("00:05:10.", "00:05:10."),
        ("5:10,", "00:5:10,"),
    ],
)
def test_normalize_time(raw, expected):
    assert normalize_time(raw) == expected


@pytest.mark.parametrize("raw", ["", "abc", "5", "1:2:3:4", "aa:bb", None])
def test_normalize_time_rejects_garbage(raw):
    with pytest.raises(ValidationError):
        normalize_time(raw)


def test_time_to_seconds():
    assert time_to_seconds("01:02:03.500") == pytest.approx(3723.5)
    assert time_to_seconds("00:00:01,250") == pytest.approx(1.25)


def test_extract_returns_only_overlapping_entries():
    text = extract_text_by_timing(ENTRIES, "00:05:00", "00:05:10")
    assert text == "Crosses start Inside Crosses end"


def test_extract_short_and_long_time_forms_match():
    assert extract_text_by_timing(ENTRIES, "5:00", "5:10") == extract_text_by_timing(ENTRIES, "00:05:00", "00:05:10")


def test_extract_no_overlap_returns_empty_string():
    assert extract_text_by_timing(ENTRIES, "01:00:00", "01:00:10") == ""
    assert extract_text_by_timing([], "00:00:00", "00:00:10") == ""


def test_extract_strips_html_tags():
    entries = [_entry("00:00:01.000", "00:00:02.000", "<i>Hello</i> world")]
    assert extract_text_by_timing(entries, "00:00:00", "00:00:03") == "Hello world"


def test_extract_collapses_whitespace_across_entries():
    entries = [
        _entry("00:00:01.000", "00:00:02.000", "  spaced   out\nline  "),
        _entry("00:00:02.000", "00:00:03.000", "\n\tnext  one "),
    ]
    assert extract_text_by_timing(entries, "00:00:00", "00:00:05") == "spaced out line next one"


def test_extract_concrete_scenario():
    entries = [
        _entry("00:00:01.000", "00:00:03.000", "Hi"),
        _entry("00:00:05.000", "00:00:07.000", "there"),
    ]
    assert extract_text_by_timing(entries, "00:00:02", "00:00:06") == "Hi there"


def test_extract_keeps_original_list_order():
    entries = [
        _entry("00:00:05.000", "00:00:06.000", "second"),
        _entry("00:00:01.000", "00:00:02.000", "first"),
    ]
    assert extract_text_by_timing(entries, "00:00:00", "00:00:10") == "second first"


def test_entry_spanning_whole_window_is_selected():
    entries = [_entry("00:00:00.000", "00:01:00.000", "long line")]
    assert extract_text_by_timing(entries, "00:00:10", "00:00:20") == "long line"


def test_overlap_is_inclusive_at_boundaries():
    assert entry_overlaps(10.0, 12.0, 12.0, 15.0)
    assert entry_overlaps(15.0, 18.0, 12.0, 15.0)
    assert not entry_overlaps(10.0, 11.999, 12.0, 15.0)
    assert not entry_overlaps(15.001, 18.0, 12.0, 15.0)


def test_select_entries_returns_entry_objects():
    selected = select_entries(ENTRIES, "00:05:03", "00:05:04")
    assert selected == [ENTRIES[2]]


def test_extract_rejects_invalid_range_format():
    with pytest.raises(ValidationError):
        extract_text_by_timing(ENTRIES, "later", "00:05:10")


def test_trailing_separator_is_tolerated():
    assert time_to_seconds(normalize_time("00:05:10.")) == pytest.approx(310.0)
    assert extract_text_by_timing(ENTRIES, "00:05:03.", "00:05:04,") == "Inside"
