"""
Tests for page offset calculation and page rendering
"""
import pytest

from flowchat.domain.errors import PaginationConfigError
from flowchat.domain.models.conversation import PaginationState, ResponseKind
from flowchat.domain.pagination.paginator import Paginator

WORDS = [f"word{index}" for index in range(1, 60)]


def _walk(paginator, state):
    """Collect the body of every page from the current one to the last"""
    bodies = []
    while True:
        offset = state.current_offset()
        bodies.append(state.full_text[offset.start:offset.finish])
        if state.is_final_page():
            return bodies
        state = paginator.next(state)


def test_long_text_first_page_has_more_option():
    """Test the first page of an oversized message"""
    paginator = Paginator(100)
    state = paginator.start("A" * 150, ResponseKind.PROMPT)

    kind, text = paginator.render(state)

    assert state.page == 1
    assert kind == ResponseKind.PROMPT
    assert len(text) <= 100
    assert text.endswith("\n\n# More")


def test_long_text_last_page_drops_more_option():
    """Test the remaining text is served on the next page"""
    paginator = Paginator(100)
    state = paginator.next(paginator.start("A" * 150, ResponseKind.PROMPT))

    kind, text = paginator.render(state)

    assert state.page == 2
    assert kind == ResponseKind.PROMPT
    assert "# More" not in text
    assert text == "A" * 58 + "\n\n0 Back"


def test_terminal_last_page_has_no_footer():
    """Test the final page of a terminal message keeps the terminal kind"""
    paginator = Paginator(100)
    state = paginator.start("A" * 150, ResponseKind.TERMINAL)

    first_kind, _ = paginator.render(state)
    last_kind, last_text = paginator.render(paginator.next(state))

    assert first_kind == ResponseKind.PROMPT
    assert last_kind == ResponseKind.TERMINAL
    assert last_text == "A" * 58


def test_middle_page_shows_both_options():
    paginator = Paginator(40)
    state = paginator.next(paginator.start(" ".join(WORDS), ResponseKind.PROMPT))

    _, text = paginator.render(state)

    assert text.endswith("\n\n# More\n0 Back")
    assert len(text) <= 40


def test_page_one_is_deterministic():
    paginator = Paginator(40)
    text = " ".join(WORDS)

    first = paginator.start(text, ResponseKind.PROMPT)
    second = paginator.start(text, ResponseKind.PROMPT)

    assert first.offsets == second.offsets


@pytest.mark.parametrize("page_size", [30, 41, 57, 100])
def test_pages_break_between_words(page_size):
    """Test no page ends in the middle of a word"""
    paginator = Paginator(page_size)
    text = " ".join(WORDS)
    state = paginator.start(text, ResponseKind.PROMPT)

    bodies = _walk(paginator, state)

    assert len(bodies) > 1
    for body in bodies:
        assert body == body.strip()
        assert all(word in WORDS for word in body.split())
    assert " ".join(bodies).split() == WORDS


@pytest.mark.parametrize("page_size", [30, 41, 57, 100])
def test_every_page_fits_page_size(page_size):
    paginator = Paginator(page_size)
    state = paginator.start(" ".join(WORDS), ResponseKind.PROMPT)

    while True:
        _, text = paginator.render(state)
        assert len(text) <= page_size
        if state.is_final_page():
            break
        state = paginator.next(state)


def test_next_then_back_returns_first_page():
    paginator = Paginator(40)
    state = paginator.start(" ".join(WORDS), ResponseKind.PROMPT)
    _, first_text = paginator.render(state)

    state = paginator.back(paginator.next(state))
    _, text = paginator.render(state)

    assert state.page == 1
    assert text == first_text


def test_navigation_does_not_mutate_input_state():
    paginator = Paginator(40)
    state = paginator.start(" ".join(WORDS), ResponseKind.PROMPT)

    paginator.next(state)

    assert state.page == 1
    assert list(state.offsets) == [1]


def test_back_on_first_page_stays():
    paginator = Paginator(40)
    state = paginator.start(" ".join(WORDS), ResponseKind.PROMPT)

    assert paginator.back(state).page == 1


def test_next_on_last_page_stays():
    paginator = Paginator(100)
    state = paginator.next(paginator.start("A" * 150, ResponseKind.PROMPT))

    assert paginator.next(state).page == 2


def test_visited_offsets_are_reused():
    """Test revisiting a page uses its recorded offsets"""
    paginator = Paginator(40)
    state = paginator.next(paginator.start(" ".join(WORDS), ResponseKind.PROMPT))
    recorded = state.offsets[2]

    state = paginator.next(paginator.back(state))

    assert state.offsets[2] == recorded


def test_trailing_whitespace_is_trimmed():
    paginator = Paginator(20)
    state = paginator.start("Hello world   \n\n", ResponseKind.PROMPT)

    assert state.full_text == "Hello world"
    assert paginator.render(state) == (ResponseKind.PROMPT, "Hello world")


def test_hard_cut_keeps_grapheme_clusters():
    """Test a cut without whitespace never splits a combining sequence"""
    paginator = Paginator(51)
    text = "e\u0301" * 60

    state = paginator.start(text, ResponseKind.PROMPT)

    # 43 characters fit before the footer; the last whole cluster ends at 42
    assert state.offsets[1].finish == 42


def test_hard_cut_inside_oversized_cluster():
    """Test a single cluster longer than the page is cut on a code point"""
    paginator = Paginator(20)
    text = "e" + "\u0301" * 100

    state = paginator.start(text, ResponseKind.PROMPT)

    assert state.offsets[1].finish == 12


def test_newlines_are_break_points():
    paginator = Paginator(25)
    text = "Apples\nBananas\nCherries\nDates"

    state = paginator.start(text, ResponseKind.PROMPT)
    offset = state.current_offset()

    assert text[offset.finish] == "\n"
    assert text[offset.start:offset.finish] == "Apples\nBananas"

    state = paginator.next(state)
    _, page_two = paginator.render(state)
    assert page_two == "Cherries\nDates\n\n0 Back"


@pytest.mark.parametrize("page_size", [0, -5, "100", 2.5, True])
def test_invalid_page_size(page_size):
    with pytest.raises(PaginationConfigError):
        Paginator(page_size)


def test_page_size_must_leave_room_for_navigation():
    # "\n\n# More\n0 Back" is 15 characters
    with pytest.raises(PaginationConfigError):
        Paginator(15)
    assert Paginator(16).page_size == 16


def test_custom_navigation_options():
    paginator = Paginator(60, next_option="99", next_text="Next", back_option="98", back_text="Prev")
    state = paginator.start("word " * 30, ResponseKind.PROMPT)

    _, text = paginator.render(state)

    assert text.endswith("\n\n99 Next")
    assert paginator.is_navigation("99")
    assert paginator.is_navigation("98")
    assert not paginator.is_navigation("#")
    assert not paginator.is_navigation(None)


def test_state_survives_serialization():
    paginator = Paginator(40)
    state = paginator.next(paginator.start(" ".join(WORDS), ResponseKind.TERMINAL))

    restored = PaginationState.deserialize(state.serialize())

    assert restored == state
    assert paginator.render(restored) == paginator.render(state)
