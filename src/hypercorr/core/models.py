"""
Typed records shared across the correlation service.

Field names keep the upstream / wire spelling (``openInterest``,
``markPx``, ``lowData``) so payloads round-trip through JSON unchanged.
Every record crossing the Hyperliquid boundary is validated here: numeric
strings stay strings, missing numbers default to ``"0"``, and anything that
cannot be coerced raises ``pydantic.ValidationError`` before it reaches the
analysis code.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _numeric_str(value: Any) -> str:
    """Coerce a JSON number / numeric string / null into a decimal string."""
    if value is None or value == "":
        return "0"
    if isinstance(value, bool):
        raise ValueError("boolean is not a numeric value")
    if isinstance(value, (int, float)):
        return repr(value) if isinstance(value, float) else str(value)
    if isinstance(value, str):
        return value.strip()
    raise ValueError(f"expected a numeric string, got {type(value).__name__}")


def parse_decimal(value: str | float | None) -> float:
    """Parse a decimal string, treating malformed / non-finite input as 0."""
    try:
        result = float(value) if value is not None else 0.0
    except (TypeError, ValueError):
        return 0.0
    if result != result or result in (float("inf"), float("-inf")):
        return 0.0
    return result


# ---------------------------------------------------------------------------
# Core domain records
# ---------------------------------------------------------------------------


class Asset(BaseModel):
    """A tradable perp, frozen for the duration of one computation cycle."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Coin name, e.g. 'BTC'")
    openInterest: str = Field("0", description="Open interest as a decimal string")
    currentPrice: float = Field(0.0, description="Mark price in USD")
    assetIndex: int = Field(..., ge=0, description="Position in the upstream universe")

    @field_validator("openInterest", mode="before")
    @classmethod
    def coerce_open_interest(cls, value: Any) -> str:
        return _numeric_str(value)


class CorrelationCell(BaseModel):
    """One matrix cell: correlation in percent, or a low-data marker."""

    model_config = ConfigDict(frozen=True)

    corr: float = Field(0.0, ge=-100.0, le=100.0)
    lowData: bool = False


CorrelationMatrix = dict[str, dict[str, CorrelationCell]]

LOW_DATA_CELL = CorrelationCell(corr=0.0, lowData=True)


class CacheEntry(BaseModel):
    """Last successful (matrix, ranking) pair with its epoch-ms timestamp."""

    model_config = ConfigDict(frozen=True)

    timestamp: int
    matrix: CorrelationMatrix
    rankedAssets: list[Asset]

    def to_payload(self) -> dict[str, Any]:
        """Serialise to the persisted ``{timestamp, data: {...}}`` layout."""
        return {
            "timestamp": self.timestamp,
            "data": {
                "matrix": {
                    a: {b: cell.model_dump() for b, cell in row.items()}
                    for a, row in self.matrix.items()
                },
                "sortedAssets": [asset.model_dump() for asset in self.rankedAssets],
            },
        }

    @classmethod
    def from_payload(cls, payload: Any) -> "CacheEntry":
        """Parse the persisted layout; raises ``ValidationError`` if malformed."""
        stored = _StoredCache.model_validate(payload)
        return cls(
            timestamp=stored.timestamp,
            matrix=stored.data.matrix,
            rankedAssets=stored.data.sortedAssets,
        )


class _StoredResult(BaseModel):
    matrix: CorrelationMatrix
    sortedAssets: list[Asset]


class _StoredCache(BaseModel):
    timestamp: int
    data: _StoredResult


class PipelineOutcome(str, Enum):
    COMPUTED = "computed"
    CACHED = "cached"
    NO_SURVIVORS = "no_survivors"
    FAILED = "failed"


class PipelineResult(BaseModel):
    """Tagged pipeline output.

    ``matrix`` / ``sortedAssets`` are empty for both ``NO_SURVIVORS`` and
    ``FAILED``; ``outcome`` tells them apart.
    """

    outcome: PipelineOutcome
    matrix: CorrelationMatrix = Field(default_factory=dict)
    sortedAssets: list[Asset] = Field(default_factory=list)
    computedAt: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome is not PipelineOutcome.FAILED


# ---------------------------------------------------------------------------
# Hyperliquid /info payloads
# ---------------------------------------------------------------------------


class UniverseAsset(BaseModel):
    """Entry of ``meta.universe``."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1)
    szDecimals: int = 0
    maxLeverage: int = 0
    onlyIsolated: Optional[bool] = None


class AssetContext(BaseModel):
    """Per-asset market context, index-aligned with the universe."""

    model_config = ConfigDict(extra="ignore")

    funding: str = "0"
    markPx: str = "0"
    openInterest: str = "0"

    @field_validator("funding", "markPx", "openInterest", mode="before")
    @classmethod
    def coerce_numbers(cls, value: Any) -> str:
        return _numeric_str(value)


class MetaAndAssetCtxs(BaseModel):
    universe: list[UniverseAsset]
    assetCtxs: list[AssetContext]

    @classmethod
    def from_payload(cls, payload: Any) -> "MetaAndAssetCtxs":
        """Parse the raw ``[{"universe": [...]}, [ctx, ...]]`` response."""
        if not isinstance(payload, list) or len(payload) < 2:
            raise ValueError("metaAndAssetCtxs response must be a two-element list")
        meta, ctxs = payload[0], payload[1]
        if not isinstance(meta, dict):
            raise ValueError("metaAndAssetCtxs meta block must be an object")
        return cls.model_validate(
            {"universe": meta.get("universe", []), "assetCtxs": ctxs}
        )


class Candle(BaseModel):
    """Daily candle; only open-time and close are used."""

    model_config = ConfigDict(extra="ignore")

    t: int = 0
    c: float = 0.0


class YieldRow(BaseModel):
    """Funding-yield row for an active perp."""

    name: str
    funding: str
    annualizedYield: float
    openInterest: str
    currentPrice: float
    maxLeverage: int
    tradeUrl: str
