from .reserve_ratio import ReserveRatioRule
from .proof_freshness import ProofFreshnessRule
from .asset_quality import AssetQualityRule
from .asset_concentration import ConcentrationRule

__all__ = [
    "ReserveRatioRule",
    "ProofFreshnessRule",
    "AssetQualityRule",
    "ConcentrationRule",
]
