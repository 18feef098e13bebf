from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Protocol, Sequence, Union

from contracts.draws import AttemptSummary
from contracts.tokens import Cell
from games.registry import GameSpec

from .assemble import PageAssembly, assemble_page
from .config import ExtractionConfig, SearchConfig, ToleranceParams

log = logging.getLogger(__name__)


class AttemptResult(Protocol):
    rows: Sequence[Any]
    skips: Sequence[Any]


@dataclass(frozen=True, slots=True)
class Scored:
    index: int
    params: ToleranceParams
    result: Any
    summary: AttemptSummary


@dataclass(frozen=True, slots=True)
class Attempting:
    index: int
    params: ToleranceParams
    best: Scored | None = None
    history: tuple[AttemptSummary, ...] = ()


@dataclass(frozen=True, slots=True)
class Continue:
    next: Attempting


@dataclass(frozen=True, slots=True)
class Done:
    best: Scored
    history: tuple[AttemptSummary, ...]


Transition = Union[Continue, Done]


def score_attempt(built: int, skipped: int) -> tuple[float, float]:
    """Return (skip_rate, score). An attempt that saw no anchors at all counts as fully skipped."""
    total = built + skipped
    skip_rate = skipped / total if total else 1.0
    return skip_rate, built - skip_rate


class ToleranceSearch:
    """
    Bounded retry over the tolerance ladder:

        Attempting(params) -> Scored(result) -> Continue(next params) | Done(best)

    The best attempt is the one with the strictly highest score (earlier wins ties). The
    search stops as soon as an attempt's skip rate is at or below `stop_skip_rate`, or when
    the ladder is exhausted.
    """

    def __init__(self, config: SearchConfig | None = None) -> None:
        self.config = config or SearchConfig()
        self.config.validate()

    def start(self) -> Attempting:
        return Attempting(index=0, params=self.config.ladder[0])

    def score(self, state: Attempting, result: AttemptResult) -> Scored:
        built, skipped = len(result.rows), len(result.skips)
        skip_rate, score = score_attempt(built, skipped)
        summary = AttemptSummary(
            attempt=state.index,
            params=state.params.to_dict(),
            built=built,
            skipped=skipped,
            skip_rate=skip_rate,
            score=score,
        )
        return Scored(index=state.index, params=state.params, result=result, summary=summary)

    def step(self, state: Attempting, scored: Scored) -> Transition:
        best = state.best
        if best is None or scored.summary.score > best.summary.score:
            best = scored
        history = state.history + (scored.summary,)

        if scored.summary.skip_rate <= self.config.stop_skip_rate:
            return Done(best=best, history=history)
        nxt = state.index + 1
        if nxt >= len(self.config.ladder):
            return Done(best=best, history=history)
        return Continue(next=Attempting(index=nxt, params=self.config.ladder[nxt], best=best, history=history))

    def run(self, attempt: Callable[[ToleranceParams], AttemptResult]) -> Done:
        state = self.start()
        while True:
            scored = self.score(state, attempt(state.params))
            s = scored.summary
            log.debug(
                "attempt %d params=%s built=%d skipped=%d skip_rate=%.3f score=%.3f",
                s.attempt,
                s.params,
                s.built,
                s.skipped,
                s.skip_rate,
                s.score,
            )
            transition = self.step(state, scored)
            if isinstance(transition, Done):
                return transition
            state = transition.next


@dataclass(frozen=True, slots=True)
class PageBuild:
    page: int
    assembly: PageAssembly
    chosen_attempt: int
    attempts: tuple[AttemptSummary, ...]


def build_page(
    cells: list[Cell],
    page: int,
    game: GameSpec,
    config: ExtractionConfig | None = None,
) -> PageBuild:
    """Run the tolerance search for one page and keep the best-scoring assembly."""
    cfg = config or ExtractionConfig()
    done = ToleranceSearch(cfg.search).run(lambda params: assemble_page(cells, page, game, params, cfg))
    log.debug("page %d chose attempt %d of %d", page, done.best.index, len(done.history))
    return PageBuild(page=page, assembly=done.best.result, chosen_attempt=done.best.index, attempts=done.history)
