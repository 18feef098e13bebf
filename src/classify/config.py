from __future__ import annotations

import re
from dataclasses import dataclass

# Header/footer text of the published draw-history documents.
DEFAULT_BOILERPLATE: tuple[str, ...] = (
    r"^FLORIDA\s+LOTTERY\b",
    r"^Winning\s+Numbers?\s+History$",
    r"^Page\s+\d+\s+of\s+\d+$",
    r"^Please\s+note\s+every\s+effort",
    r"^PICK\s*\d+$",
    r"^[A-Z]:\s*(Morning|Midday|Day|Evening|Night)\b",
    r"^-+$",
)


@dataclass(frozen=True, slots=True)
class ClassifyConfig:
    """
    Token classification parameters.

    `fused_value_offset` is the X offset given to the value split out of a fused
    tag run such as "FB 8"; the decoder reports one position for the whole run.
    """

    boilerplate: tuple[str, ...] = DEFAULT_BOILERPLATE
    fused_value_offset: float = 6.0

    def validate(self) -> None:
        if self.fused_value_offset <= 0:
            raise ValueError("fused_value_offset must be > 0")
        for p in self.boilerplate:
            try:
                re.compile(p)
            except re.error as e:
                raise ValueError(f"invalid boilerplate pattern {p!r}: {e}") from e

    def compiled_boilerplate(self) -> tuple[re.Pattern[str], ...]:
        return tuple(re.compile(p, re.IGNORECASE) for p in self.boilerplate)
