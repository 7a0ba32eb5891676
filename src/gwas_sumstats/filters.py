"""Query filter model for association and listing endpoints."""

from dataclasses import dataclass

PARAM_KEYS = (
    "p_lower",
    "p_upper",
    "bp_lower",
    "bp_upper",
    "study_accession",
    "trait",
    "reveal",
    "start",
    "size",
)


@dataclass(frozen=True)
class GwasFilter:
    """Optional constraints on an API query.

    P-value bounds are kept as strings so values such as ``1e-300`` reach
    the API exactly as written. Nothing here is validated; the remote
    service decides what is acceptable.
    """

    p_value_range: tuple[str, str] | None = None
    bp_location_range: tuple[int, int] | None = None
    study: str | None = None
    trait_id: str | None = None
    reveal: str | None = None
    start: int | None = None
    size: int | None = None

    def to_params(self) -> dict[str, str]:
        """Render populated fields as URL query parameters."""
        params: dict[str, str] = {}

        if self.p_value_range is not None:
            lower, upper = self.p_value_range
            params["p_lower"] = str(lower)
            params["p_upper"] = str(upper)

        if self.bp_location_range is not None:
            lower, upper = self.bp_location_range
            params["bp_lower"] = str(lower)
            params["bp_upper"] = str(upper)

        if self.study is not None:
            params["study_accession"] = self.study
        if self.trait_id is not None:
            params["trait"] = self.trait_id
        if self.reveal is not None:
            params["reveal"] = self.reveal
        if self.start is not None:
            params["start"] = str(self.start)
        if self.size is not None:
            params["size"] = str(self.size)

        return params

    @property
    def is_empty(self) -> bool:
        return not self.to_params()


def params_for(filter: GwasFilter | None) -> dict[str, str]:
    """Parameters for an optional filter; no filter means no parameters."""
    return filter.to_params() if filter is not None else {}
