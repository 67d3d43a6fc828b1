"""
Bridge configuration and the structured payloads sent back to Sabaki.

Both are pydantic models: the configuration is validated once at startup,
and the payloads serialize to the compact JSON that follows "#sabaki" in a
response.
"""

from argparse import Namespace

from pydantic import BaseModel, ConfigDict, field_validator

from analysis.constants import FULL_DEPTH_LIMIT, SABAKI_SENTINEL, SHORT_DEPTH_LIMIT


class BridgeConfig(BaseModel):
    """
    Feature switches resolved from the command line.

    Fields:
        flat:            Render each variation as a single setup node.
        heatmap:         Attach the policy heatmap to sabaki-genmovelog.
        black:           Include variations after black moves.
        white:           Include variations after white moves.
        limit_depth:     Truncate variations to SHORT_DEPTH_LIMIT moves.
        labels:          Attach A/B/C labels for the candidate moves.
        heatmap_timeout: Seconds to wait for the heatmap grid, or None to
                         wait as long as the engine takes.
    """

    model_config = ConfigDict(frozen=True)

    flat: bool = False
    heatmap: bool = False
    black: bool = False
    white: bool = False
    limit_depth: bool = False
    labels: bool = False
    heatmap_timeout: float | None = None

    @field_validator("heatmap_timeout")
    @classmethod
    def positive_timeout(cls, v: float | None) -> float | None:
        """Reject zero or negative timeouts."""
        if v is not None and v <= 0:
            raise ValueError("heatmap_timeout must be positive")
        return v

    @property
    def depth_limit(self) -> int:
        return SHORT_DEPTH_LIMIT if self.limit_depth else FULL_DEPTH_LIMIT

    @classmethod
    def from_args(cls, args: Namespace) -> "BridgeConfig":
        return cls(
            flat=args.flat,
            heatmap=args.heatmap,
            black=args.black,
            white=args.white,
            limit_depth=args.limitdepth,
            labels=args.labels,
            heatmap_timeout=args.heatmap_timeout,
        )


class HeatmapPayload(BaseModel):
    """Payload of the "heatmap" command: rows of intensities in [0, 9]."""

    heatmap: list[list[int]]


class GenmoveLogPayload(BaseModel):
    """
    Payload of "sabaki-genmovelog".

    Fields:
        variations: Concatenated SGF trees, "" when none.
        labels:     "point:letter" pairs joined with ";", "" when none.
        heatmap:    Heatmap rows, omitted unless the heatmap switch is on.
    """

    variations: str = ""
    labels: str = ""
    heatmap: list[list[int]] | None = None


def embed_payload(payload: BaseModel) -> str:
    """Render a payload as the "#sabaki{...}" response body."""
    return SABAKI_SENTINEL + payload.model_dump_json(exclude_none=True)
