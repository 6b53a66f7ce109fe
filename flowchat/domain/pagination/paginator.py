"""
Splits oversized text into pages that fit a hard size budget.

Pages are character ranges [start, finish) over the full text. A page ends
right before a whitespace character whenever one exists within the budget;
otherwise it is cut at the last grapheme cluster boundary that fits, and only
when a single cluster is larger than the whole budget is it cut on a code
point. Offsets of visited pages are stored in ``PaginationState`` and never
recomputed, so going back always shows exactly the same page.
"""
from typing import Optional, Tuple
import regex
import structlog

from flowchat.domain.errors import PaginationConfigError
from flowchat.domain.models.conversation import PageOffset, PaginationState, ResponseKind

logger = structlog.get_logger(__name__)

GRAPHEME = regex.compile(r"\X")
FOOTER_SEPARATOR = "\n\n"


class Paginator:
    """Page offset calculation and page rendering"""

    def __init__(
        self,
        page_size: int,
        next_option: str = "#",
        next_text: str = "More",
        back_option: str = "0",
        back_text: str = "Back"
    ):
        if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size <= 0:
            raise PaginationConfigError(f"page size must be a positive integer, got {page_size!r}")

        self.page_size = page_size
        self.next_option = next_option
        self.next_text = next_text
        self.back_option = back_option
        self.back_text = back_text

        if self.page_size - len(self.footer(page=2, has_more=True, kind=ResponseKind.PROMPT)) < 1:
            raise PaginationConfigError(
                f"page size {page_size} leaves no room for content next to the navigation options"
            )

    @classmethod
    def from_settings(cls, settings) -> "Paginator":
        return cls(
            page_size=settings.page_size,
            next_option=settings.next_option,
            next_text=settings.next_text,
            back_option=settings.back_option,
            back_text=settings.back_text
        )

    @property
    def next_control(self) -> str:
        return f"{self.next_option} {self.next_text}"

    @property
    def back_control(self) -> str:
        return f"{self.back_option} {self.back_text}"

    def is_navigation(self, user_input: Optional[str]) -> bool:
        return user_input is not None and user_input in (self.next_option, self.back_option)

    def fits(self, text: str) -> bool:
        return len(text) <= self.page_size

    def footer(self, page: int, has_more: bool, kind: ResponseKind) -> str:
        """Navigation options shown under a page"""

        # A terminal page closes the session, there is nothing to navigate to
        if kind == ResponseKind.TERMINAL:
            return ""

        controls = []
        if has_more:
            controls.append(self.next_control)
        if page > 1:
            controls.append(self.back_control)

        if not controls:
            return ""
        return FOOTER_SEPARATOR + "\n".join(controls)

    def start(self, full_text: str, kind: ResponseKind) -> PaginationState:
        """Pagination state positioned on page 1"""

        full_text = full_text.rstrip()
        offset = self._compute_offset(full_text, 0, 1, kind)

        logger.debug("Paginating content", length=len(full_text), page_size=self.page_size, finish=offset.finish)
        return PaginationState(page=1, offsets={1: offset}, full_text=full_text, kind=kind)

    def next(self, state: PaginationState) -> PaginationState:
        """Move one page forward, computing the page on first visit"""

        state = state.model_copy(deep=True)
        current = state.current_offset()

        if current.finish >= len(state.full_text):
            logger.warning("Already on the last page", page=state.page)
            return state

        target = state.page + 1
        if target not in state.offsets:
            state.offsets[target] = self._compute_offset(state.full_text, current.finish, target, state.kind)

        state.page = target
        return state

    def back(self, state: PaginationState) -> PaginationState:
        """Move one page back, never before page 1"""

        state = state.model_copy(deep=True)
        state.page = max(state.page - 1, 1)
        return state

    def render(self, state: PaginationState) -> Tuple[ResponseKind, str]:
        """Effective response kind and page text with its footer"""

        offset = state.current_offset()
        has_more = offset.finish < len(state.full_text)

        # Pending pages keep the session open whatever kind the flow returned
        kind = ResponseKind.PROMPT if has_more else state.kind

        body = state.full_text[offset.start:offset.finish]
        return kind, body + self.footer(state.page, has_more, kind)

    def _compute_offset(self, text: str, previous_finish: int, page: int, kind: ResponseKind) -> PageOffset:
        start = previous_finish
        if page > 1:
            # Pages never open with the whitespace the previous page broke on
            while start < len(text) and text[start].isspace():
                start += 1

        last_page_budget = self.page_size - len(self.footer(page, has_more=False, kind=kind))
        if len(text) - start <= last_page_budget:
            return PageOffset(start=start, finish=len(text))

        budget = self.page_size - len(self.footer(page, has_more=True, kind=ResponseKind.PROMPT))
        if budget < 1:
            raise PaginationConfigError(f"page size {self.page_size} is too small to paginate")

        return PageOffset(start=start, finish=self._find_break(text, start, start + budget))

    @staticmethod
    def _find_break(text: str, start: int, limit: int) -> int:
        """Greatest finish in (start, limit] to end a page at.

        ``limit`` is always inside ``text`` here since the remainder did not
        fit on a last page.
        """
        for finish in range(limit, start, -1):
            if text[finish].isspace():
                return finish

        # No whitespace in range: cut at the last grapheme cluster that fits
        cut = start
        for match in GRAPHEME.finditer(text, start):
            if match.end() > limit:
                break
            cut = match.end()

        # A single cluster wider than the page gets cut on a code point
        if cut == start:
            cut = limit

        logger.debug("Hard page break", start=start, finish=cut)
        return cut
