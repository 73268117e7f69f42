import logging
from typing import Any, Dict, List, Optional, Sequence
import pandas as pd
from .containers import BarChart, ParityResults
from .errors import MissingArgumentError
from .metrics import PARITY_METRICS, get_metric, roc_auc
from .utilities import (
    DEFAULT_CUTOFF,
    DEFAULT_PREDS_LEVELS,
    build_density_chart,
    build_roc_chart,
    confusion_counts,
    confusion_frame,
    normalize_inputs,
    normalize_to_base,
    resolve_base_group,
)


logger = logging.getLogger(__name__)


def parity(
    data: Optional[pd.DataFrame],
    outcome: Any,
    group: Any,
    metric: str = "accuracy",
    probs: Any = None,
    preds: Any = None,
    preds_levels: Sequence[str] = DEFAULT_PREDS_LEVELS,
    cutoff: float = DEFAULT_CUTOFF,
    base: Any = None,
) -> ParityResults:
    """
    Compute one parity metric per group, relative to a base group.

    `outcome`, `group`, `probs` and `preds` are column names in `data` or
    array-likes of equal length. Supply either `preds` (predicted labels)
    or `probs` (predicted probabilities, binarized with `>= cutoff`).
    The base group defaults to the first group level and always maps to
    1.0 unless its own metric is zero or undefined, in which case every
    group maps to nan.

    Returns a ParityResults holding normalized and raw per-group values,
    per-group confusion counts and chart descriptors (bar chart, plus a
    score density chart or, for ROC AUC, per-group ROC curves).
    """
    pm = get_metric(metric)
    if pm.needs_scores and probs is None:
        raise MissingArgumentError(f"{pm.label} needs predicted probabilities (probs); predicted labels cannot be ranked.")

    inputs = normalize_inputs(
        data, outcome, group, probs=probs, preds=preds, preds_levels=preds_levels, cutoff=cutoff,
    )
    base, levels = resolve_base_group(inputs.levels, base)

    #Raw metric per group
    raw: Dict[str, float] = {}
    for g in levels:
        mask = inputs.groups == g
        if pm.needs_scores:
            raw[g] = roc_auc(inputs.y_true[mask], inputs.scores[mask])
        else:
            raw[g] = pm.func(confusion_counts(inputs.y_true[mask], inputs.y_pred[mask]))
    raw_s = pd.Series(raw, dtype=float, name=pm.name)
    raw_s.index.name = "group"

    undefined = raw_s.index[raw_s.isna()].tolist()
    if undefined:
        logger.debug("%s undefined (zero denominator) for group(s): %s", pm.label, undefined)

    values = normalize_to_base(raw_s, base, pm.label)
    logger.debug("%s relative to '%s': %s", pm.label, base, values.round(4).to_dict())

    metric_plot = BarChart(labels=list(values.index), values=[float(v) for v in values], value_label=pm.label)
    probability_plot = None
    roc_plot = None
    if inputs.scores is not None:
        if pm.needs_scores:
            roc_plot = build_roc_chart(inputs, levels, raw)
        else:
            probability_plot = build_density_chart(inputs, levels)

    return ParityResults(
        metric=pm.name,
        label=pm.label,
        base=base,
        cutoff=None if (pm.needs_scores or probs is None) else float(cutoff),
        values=values,
        raw=raw_s,
        confusion=confusion_frame(inputs, levels, with_counts=not pm.needs_scores),
        metric_plot=metric_plot,
        probability_plot=probability_plot,
        roc_plot=roc_plot,
    )


#---- One function per parity variant ----

def acc_parity(data, outcome, group, probs=None, preds=None, preds_levels=DEFAULT_PREDS_LEVELS,
               cutoff=DEFAULT_CUTOFF, base=None) -> ParityResults:
    """
    Accuracy parity: (TP + TN) / n per group, relative to the base group.

    Values below 1 mean the group's predictions are less accurate than the
    base group's.
    """
    return parity(data, outcome, group, "accuracy", probs=probs, preds=preds,
                  preds_levels=preds_levels, cutoff=cutoff, base=base)


def dem_parity(data, outcome, group, probs=None, preds=None, preds_levels=DEFAULT_PREDS_LEVELS,
               cutoff=DEFAULT_CUTOFF, base=None) -> ParityResults:
    """
    Demographic parity: number of predicted positives (TP + FP) per group.

    This is an absolute count, so group sizes matter; see prop_parity for
    the size-adjusted rate.
    """
    return parity(data, outcome, group, "demographic", probs=probs, preds=preds,
                  preds_levels=preds_levels, cutoff=cutoff, base=base)


def prop_parity(data, outcome, group, probs=None, preds=None, preds_levels=DEFAULT_PREDS_LEVELS,
                cutoff=DEFAULT_CUTOFF, base=None) -> ParityResults:
    """Proportional parity: share of predicted positives, (TP + FP) / n."""
    return parity(data, outcome, group, "proportional", probs=probs, preds=preds,
                  preds_levels=preds_levels, cutoff=cutoff, base=base)


def equal_odds(data, outcome, group, probs=None, preds=None, preds_levels=DEFAULT_PREDS_LEVELS,
               cutoff=DEFAULT_CUTOFF, base=None) -> ParityResults:
    """Equalized odds: sensitivity, TP / (TP + FN)."""
    return parity(data, outcome, group, "equalized_odds", probs=probs, preds=preds,
                  preds_levels=preds_levels, cutoff=cutoff, base=base)


def pred_rate_parity(data, outcome, group, probs=None, preds=None, preds_levels=DEFAULT_PREDS_LEVELS,
                     cutoff=DEFAULT_CUTOFF, base=None) -> ParityResults:
    """
    Predictive rate parity: precision, TP / (TP + FP).

    A group without any predicted positives has undefined precision and
    maps to nan.
    """
    return parity(data, outcome, group, "predictive_rate", probs=probs, preds=preds,
                  preds_levels=preds_levels, cutoff=cutoff, base=base)


def fnr_parity(data, outcome, group, probs=None, preds=None, preds_levels=DEFAULT_PREDS_LEVELS,
               cutoff=DEFAULT_CUTOFF, base=None) -> ParityResults:
    """
    False negative rate parity: FN / (TP + FN).

    Unlike the other ratios, values above 1 mean the group fares worse than
    the base group.
    """
    return parity(data, outcome, group, "fnr", probs=probs, preds=preds,
                  preds_levels=preds_levels, cutoff=cutoff, base=base)


def fpr_parity(data, outcome, group, probs=None, preds=None, preds_levels=DEFAULT_PREDS_LEVELS,
               cutoff=DEFAULT_CUTOFF, base=None) -> ParityResults:
    """False positive rate parity: FP / (TN + FP). Higher is worse."""
    return parity(data, outcome, group, "fpr", probs=probs, preds=preds,
                  preds_levels=preds_levels, cutoff=cutoff, base=base)


def npv_parity(data, outcome, group, probs=None, preds=None, preds_levels=DEFAULT_PREDS_LEVELS,
               cutoff=DEFAULT_CUTOFF, base=None) -> ParityResults:
    """Negative predictive value parity: TN / (TN + FN)."""
    return parity(data, outcome, group, "npv", probs=probs, preds=preds,
                  preds_levels=preds_levels, cutoff=cutoff, base=base)


def spec_parity(data, outcome, group, probs=None, preds=None, preds_levels=DEFAULT_PREDS_LEVELS,
                cutoff=DEFAULT_CUTOFF, base=None) -> ParityResults:
    return parity(data, outcome, group, "specificity", probs=probs, preds=preds,
                  preds_levels=preds_levels, cutoff=cutoff, base=base)


def mcc_parity(data, outcome, group, probs=None, preds=None, preds_levels=DEFAULT_PREDS_LEVELS,
               cutoff=DEFAULT_CUTOFF, base=None) -> ParityResults:
    """
    Matthews correlation coefficient parity.

    MCC lies in [-1, 1], so a negative base value flips the sign of every
    ratio; read the raw values alongside.
    """
    return parity(data, outcome, group, "mcc", probs=probs, preds=preds,
                  preds_levels=preds_levels, cutoff=cutoff, base=base)


def roc_parity(data, outcome, group, probs, preds_levels=DEFAULT_PREDS_LEVELS, base=None) -> ParityResults:
    """
    ROC AUC parity over all thresholds of the predicted probabilities.

    No cutoff applies. The result carries per-group ROC curves in
    `roc_plot` instead of a density chart.
    """
    return parity(data, outcome, group, "roc_auc", probs=probs,
                  preds_levels=preds_levels, base=base)


#---- Tables ----

def parity_report(
    data: Optional[pd.DataFrame],
    outcome: Any,
    group: Any,
    probs: Any = None,
    preds: Any = None,
    preds_levels: Sequence[str] = DEFAULT_PREDS_LEVELS,
    cutoff: float = DEFAULT_CUTOFF,
    base: Any = None,
    metrics: Optional[List[str]] = None,
) -> pd.DataFrame:
    """
    Normalized parity values for several metrics at once.

    Rows are groups (base group first), columns are metric names. Defaults
    to the whole catalog, leaving out ROC AUC when only labels are given.
    """
    if metrics is None:
        metrics = [name for name, pm in PARITY_METRICS.items() if probs is not None or not pm.needs_scores]

    columns = {}
    for name in metrics:
        res = parity(data, outcome, group, name, probs=probs, preds=preds,
                     preds_levels=preds_levels, cutoff=cutoff, base=base)
        columns[name] = res.values
    report = pd.DataFrame(columns)
    report.index.name = "group"
    return report


def confusion_by_group(data, outcome, group, probs=None, preds=None, preds_levels=DEFAULT_PREDS_LEVELS,
                       cutoff=DEFAULT_CUTOFF, base=None) -> pd.DataFrame:
    inputs = normalize_inputs(data, outcome, group, probs=probs, preds=preds,
                              preds_levels=preds_levels, cutoff=cutoff)
    _, levels = resolve_base_group(inputs.levels, base)
    return confusion_frame(inputs, levels)
