"""
Fairness parity metrics (fairparity)

Per-group confusion-matrix metrics for binary classifiers, expressed
relative to a base group (base = 1.0).

Naming convention follows the metric:
- acc_parity, dem_parity, prop_parity, equal_odds, pred_rate_parity,
  fnr_parity, fpr_parity, npv_parity, spec_parity, mcc_parity, roc_parity
- parity(...) selects the metric by name (see PARITY_METRICS)

Plots are returned as descriptors; render them with
    from fairparity.plots import render_plots
"""

from .containers import (
    BarChart,
    ConfusionCounts,
    DensityChart,
    ParityResults,
    RocChart,
)
from .errors import (
    FairParityError,
    DimensionMismatchError,
    MissingArgumentError,
    InvalidBaseGroupError,
)
from .metrics import PARITY_METRICS, ParityMetric, get_metric
from .parity_metrics import (
    parity,
    acc_parity,
    dem_parity,
    prop_parity,
    equal_odds,
    pred_rate_parity,
    fnr_parity,
    fpr_parity,
    npv_parity,
    spec_parity,
    mcc_parity,
    roc_parity,
    parity_report,
    confusion_by_group,
)

__version__ = "0.1.0"

__all__ = [
    #----Results & descriptors----
    "BarChart",
    "ConfusionCounts",
    "DensityChart",
    "ParityResults",
    "RocChart",

    #----Errors----
    "FairParityError",
    "DimensionMismatchError",
    "MissingArgumentError",
    "InvalidBaseGroupError",

    #----Metrics----
    "PARITY_METRICS",
    "ParityMetric",
    "get_metric",
    "parity",
    "acc_parity",
    "dem_parity",
    "prop_parity",
    "equal_odds",
    "pred_rate_parity",
    "fnr_parity",
    "fpr_parity",
    "npv_parity",
    "spec_parity",
    "mcc_parity",
    "roc_parity",
    "parity_report",
    "confusion_by_group",
]
